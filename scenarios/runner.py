"""Scenario sweep runner + auto plot + validation report."""

from __future__ import annotations

from importlib import import_module
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from analysis.consistency import SweepConfig, save_stats_json, summarize_sweep, sweep_plan
from plots import overlay
from ricochet_core.engine import PlanEvaluation
from ricochet_core.surfaces import surfaces_by_id
from ricochet_io.hdf5_io import CaseData, record_outputs, replay_fixture, save_fixture
from scenarios.common import SCREEN, as_point

logger = logging.getLogger(__name__)

SCENARIO_MODULES = {
    "S1": "scenarios.S1_open_field",
    "S2": "scenarios.S2_single_mirror",
    "S3": "scenarios.S3_blocked_mirror",
    "S4": "scenarios.S4_off_segment",
    "S5": "scenarios.S5_chain_break",
    "S6": "scenarios.S6_wall_with_gap",
    "S7": "scenarios.S7_parallel_mirrors",
}


def check_expectations(sid: str, params: Mapping[str, Any], ev: PlanEvaluation) -> List[str]:
    """Compare a case against the ``expect_*`` keys of its sweep params."""

    case_id = params["case_id"]
    failures: List[str] = []
    if "expect_aligned" in params and ev.is_fully_aligned != params["expect_aligned"]:
        failures.append(f"{sid}:{case_id} aligned expected {params['expect_aligned']}, got {ev.is_fully_aligned}")
    if "expect_segment" in params and ev.divergence.segment_index != params["expect_segment"]:
        failures.append(f"{sid}:{case_id} divergence segment expected {params['expect_segment']}, got {ev.divergence.segment_index}")
    if "expect_status" in params and ev.actual_path.status.value != params["expect_status"]:
        failures.append(f"{sid}:{case_id} status expected {params['expect_status']}, got {ev.actual_path.status.value}")
    if "expect_lit" in params and ev.is_cursor_lit != params["expect_lit"]:
        failures.append(f"{sid}:{case_id} lit expected {params['expect_lit']}, got {ev.is_cursor_lit}")
    if "expect_bypassed" in params:
        got = {b.surface.surface_id: b.reason.value for b in ev.bypass.bypassed}
        if got != dict(params["expect_bypassed"]):
            failures.append(f"{sid}:{case_id} bypass expected {params['expect_bypassed']}, got {got}")
    if "expect_active" in params:
        got_active = [s.surface_id for s in ev.bypass.active]
        if got_active != list(params["expect_active"]):
            failures.append(f"{sid}:{case_id} active expected {params['expect_active']}, got {got_active}")
    if "expect_bypass_at_surface" in params and ev.visibility.bypass_at_surface != params["expect_bypass_at_surface"]:
        failures.append(
            f"{sid}:{case_id} light bypass expected at {params['expect_bypass_at_surface']}, got {ev.visibility.bypass_at_surface}"
        )
    if "expect_waypoints" in params:
        want = [as_point(p) for p in params["expect_waypoints"]]
        if ev.planned_path.waypoints != want:
            failures.append(f"{sid}:{case_id} planned waypoints expected {want}, got {ev.planned_path.waypoints}")
    if not ev.lit_matches_validity:
        failures.append(f"{sid}:{case_id} lit={ev.is_cursor_lit} but plan valid={ev.is_plan_valid}")
    return failures


def run_all(
    out_h5: str = "artifacts/ricochet_fixtures.h5",
    out_plot_dir: str = "artifacts/plots",
    sweep: SweepConfig | None = None,
    scenario_ids: Sequence[str] | None = None,
) -> str:
    selected = list(scenario_ids) if scenario_ids else list(SCENARIO_MODULES)
    unknown = [sid for sid in selected if sid not in SCENARIO_MODULES]
    if unknown:
        raise ValueError(f"unknown scenario ids: {unknown}")
    payload: Dict[str, Dict[str, CaseData]] = {}
    report_lines: List[str] = [
        "# Validation Report",
        "",
        "- lit: cursor inside the final visibility polygon",
        "- plan valid: no bypassed surface and planned/actual waypoints identical",
        "",
    ]
    failures: List[str] = []
    sweep_cfg = sweep or SweepConfig(nx=16, ny=9)

    for sid in selected:
        mod_name = SCENARIO_MODULES[sid]
        mod = import_module(mod_name)
        payload[sid] = {}
        report_lines.append(f"## {sid}")
        for p in mod.build_sweep_params():
            inputs, ev = mod.run_case(p)
            case_id = p["case_id"]
            payload[sid][case_id] = CaseData(params=dict(p), inputs=inputs, outputs=record_outputs(ev))

            case_dir = str(Path(out_plot_dir) / sid / case_id)
            png = overlay.plot_evaluation(ev, inputs.surfaces, inputs.bounds, case_dir, name="overlay")
            div = ev.divergence
            report_lines.append(f"- case `{case_id}`: planned={[s.surface_id for s in ev.planned]}, active={[s.surface_id for s in ev.bypass.active]}")
            report_lines.append(f"  - bypassed: {[(b.surface.surface_id, b.reason.value) for b in ev.bypass.bypassed]}")
            report_lines.append(
                f"  - actual status={ev.actual_path.status.value}, reflections={list(ev.actual_path.reflection_ids())}, "
                f"length={ev.actual_path.length():.3f}, aligned={div.is_aligned}, divergence segment={div.segment_index}"
            )
            report_lines.append(f"  - lit={ev.is_cursor_lit}, region polygons={len(ev.visibility.final_region.polygons)}, vertices={ev.visibility.final_region.vertex_count}")
            report_lines.append(f"  - plot: [overlay]({png})")
            failures.extend(check_expectations(sid, p, ev))

        scene = mod.build_scene()
        player, planned_ids = mod.build_sweep_plan()
        by_id = surfaces_by_id(scene)
        result = sweep_plan(as_point(player), [by_id[i] for i in planned_ids], scene, SCREEN, sweep=sweep_cfg)
        stats = summarize_sweep(result)
        save_stats_json(str(Path(out_plot_dir) / sid / "agreement_stats.json"), stats)
        grid_png = overlay.plot_agreement_grid(result, scene, SCREEN, str(Path(out_plot_dir) / sid), planned_ids=planned_ids)
        report_lines.append(
            f"- agreement grid: cursors={stats['cursors']}, lit={stats['lit']}, valid={stats['plan_valid']}, "
            f"boundary={stats['near_boundary']}, on earlier leg={stats['on_earlier_leg']}, mismatches={stats['mismatches']} ([grid]({grid_png}))"
        )
        if stats["mismatches"]:
            failures.append(f"{sid} agreement grid has {stats['mismatches']} lit/valid mismatches")
        report_lines.append("")

    Path(out_h5).parent.mkdir(parents=True, exist_ok=True)
    save_fixture(out_h5, payload)
    for key, problems in replay_fixture(out_h5).items():
        for msg in problems:
            failures.append(f"replay {key}: {msg}")

    report_lines.append("## Failure Checks")
    if failures:
        for msg in failures:
            report_lines.append(f"- FAIL: {msg}")
    else:
        report_lines.append("- PASS: No automatic failure checks triggered.")

    report_path = Path(out_plot_dir).parent / "report.md"
    report_path.write_text("\n".join(report_lines), encoding="utf-8")
    logger.debug("report written to %s (%d failures)", report_path, len(failures))
    return str(report_path)


if __name__ == "__main__":
    print(run_all())
