from __future__ import annotations

"""
Tests for the optional Excel workbook export.
"""

from typing import Any

import pytest
from openpyxl import load_workbook

from inactive_checker.cache import Classification
from inactive_checker.coordinator import Finding, RunReport
from inactive_checker.errors import ReportError
from inactive_checker.report import summarize, write_workbook

from conftest import DAY, T0


def _report() -> RunReport:
    return RunReport(findings=[
        Finding("r1", "ge-0/0/0 interface", Classification.STALE, T0, 40 * DAY),
        Finding("r1", "system services telnet", Classification.NEW, T0, 0),
        Finding("r2", "protocols bgp", Classification.FRESH, T0, 3 * DAY),
        Finding("r9", "snmp", Classification.REMOVED, T0),
    ])


def test_summary_counts_per_host() -> None:
    df = summarize(_report().findings, ["r1", "r2", "r3"])
    rows = {row["Host"]: row for row in df.to_dict("records")}
    assert list(rows) == ["r1", "r2", "r3", "r9", "TOTAL"]
    assert rows["r1"]["stale"] == 1 and rows["r1"]["new"] == 1
    assert rows["r3"]["fresh"] == 0
    assert rows["TOTAL"]["removed"] == 1
    assert "observed" not in df.columns


def test_workbook_sheets(tmp_path: Any) -> None:
    out = tmp_path / "inactive.xlsx"
    write_workbook(_report(), ["r1", "r2"], str(out))

    wb = load_workbook(str(out))
    assert wb.sheetnames == ["SUMMARY", "FINDINGS"]

    ws = wb["FINDINGS"]
    header = [c.value for c in ws[1]]
    assert header == ["Host", "Path", "Identifier", "Status", "First Seen (UTC)", "Age (days)"]
    values = [[c.value for c in row] for row in ws.iter_rows(min_row=2)]
    assert len(values) == 4
    first = values[0]
    assert first[:4] == ["r1", "ge-0/0/0 interface", "r1:ge-0/0/0 interface", "stale"]
    assert first[5] == 40.0
    assert ws.freeze_panes == "A2"


def test_workbook_without_findings(tmp_path: Any) -> None:
    out = tmp_path / "empty.xlsx"
    write_workbook(RunReport(), ["r1"], str(out))
    wb = load_workbook(str(out))
    assert wb["FINDINGS"].max_row == 1


def test_unwritable_output_is_report_error(tmp_path: Any) -> None:
    out = tmp_path / "missing-dir" / "inactive.xlsx"
    with pytest.raises(ReportError):
        write_workbook(_report(), ["r1"], str(out))
