import json
from pathlib import Path

import pytest

from analysis.consistency import SweepConfig
from scenarios.runner import run_all


def test_run_all_writes_passing_report(tmp_path: Path):
    report = run_all(str(tmp_path / "fixtures.h5"), str(tmp_path / "plots"), sweep=SweepConfig(nx=4, ny=3))
    text = Path(report).read_text(encoding="utf-8")
    assert Path(report) == tmp_path / "report.md"
    assert "## Failure Checks" in text
    assert "- PASS:" in text
    assert "- FAIL:" not in text
    assert (tmp_path / "fixtures.h5").exists()
    assert (tmp_path / "plots" / "S2" / "s2_bounce" / "overlay.png").exists()
    assert (tmp_path / "plots" / "S2" / "agreement_grid.png").exists()
    stats = json.loads((tmp_path / "plots" / "S2" / "agreement_stats.json").read_text(encoding="utf-8"))
    assert stats["cursors"] == 12
    assert stats["mismatches"] == 0


def test_run_all_rejects_unknown_scenarios(tmp_path: Path):
    with pytest.raises(ValueError):
        run_all(str(tmp_path / "f.h5"), str(tmp_path / "plots"), scenario_ids=["S9"])


def test_run_all_subset_only_reports_selected(tmp_path: Path):
    report = run_all(str(tmp_path / "f.h5"), str(tmp_path / "plots"), sweep=SweepConfig(nx=3, ny=2), scenario_ids=["S1"])
    text = Path(report).read_text(encoding="utf-8")
    assert "## S1" in text
    assert "## S2" not in text
