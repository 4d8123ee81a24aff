import importlib.util
import sys
from pathlib import Path

import numpy as np

from cdomproc.core.table import RawTable

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "run_examples.py"


def load_script():
    spec = importlib.util.spec_from_file_location("run_examples", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def make_table():
    """Two stations; the second has no readings between 270 and 300 nm."""
    wl = np.arange(800.0, 199.0, -1.0)
    good = 0.3 * np.exp(-(wl - 300.0) * 0.018)
    gap = good.copy()
    gap[(wl >= 270) & (wl <= 300)] = np.nan

    scans = [
        ("DI_1", np.zeros(wl.size)),
        ("S1_ag_R1", good),
        ("S1_ag_R2", good),
        ("DI_2", np.zeros(wl.size)),
        ("S2_ag_R1", gap),
        ("S2_ag_R2", gap),
        ("DI_3", np.zeros(wl.size)),
    ]
    headers, columns = [], []
    for header, absorbance in scans:
        headers += [header, ""]
        columns += [wl, absorbance]
    return RawTable.from_columns(headers, columns)


def test_report_continues_past_unfittable_station(monkeypatch, capsys):
    script = load_script()
    monkeypatch.setattr(script, "load_absorbance_table", lambda path: make_table())
    monkeypatch.setattr(sys, "argv", ["run_examples.py", "scans.csv", "--pathlength", "1"])

    script.main()

    out = capsys.readouterr().out
    assert "S275-295=0.01800" in out
    assert "S2" in out and "slope fit failed" in out
    assert "missing values" in out
