from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence

import pandas as pd
from openpyxl.formatting.rule import CellIsRule
from openpyxl.styles import PatternFill
from openpyxl.utils import get_column_letter

from .cache import Classification
from .config import MAX_EXCEL_COLUMN_WIDTH, MIN_EXCEL_COLUMN_WIDTH
from .coordinator import Finding, RunReport
from .errors import ReportError

log = logging.getLogger(__name__)

FINDING_COLUMNS = ["Host", "Path", "Identifier", "Status", "First Seen (UTC)", "Age (days)"]


def _format_worksheet(ws) -> None:
    """
    Apply formatting to an Excel worksheet.

    - Freezes header row
    - Adds auto-filter across all columns
    - Auto-sizes column widths based on content
    - Colors the Status column (stale red, new green, removed grey)
    """
    max_row = ws.max_row
    max_col = ws.max_column
    if max_row < 1 or max_col < 1:
        return
    ws.freeze_panes = "A2"
    ws.auto_filter.ref = f"A1:{get_column_letter(max_col)}{max_row}"

    for col_idx in range(1, max_col + 1):
        col_letter = get_column_letter(col_idx)
        max_len = max(
            (len(str(ws.cell(row=row, column=col_idx).value or "")) for row in range(1, max_row + 1)),
            default=0,
        )
        ws.column_dimensions[col_letter].width = max(MIN_EXCEL_COLUMN_WIDTH, min(MAX_EXCEL_COLUMN_WIDTH, max_len + 2))

    green_fill = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
    red_fill   = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
    grey_fill  = PatternFill(start_color="D9D9D9", end_color="D9D9D9", fill_type="solid")

    for col_idx in range(1, max_col + 1):
        header = str(ws.cell(row=1, column=col_idx).value or "").lower()
        if header != "status" or max_row < 2:
            continue
        col_letter = get_column_letter(col_idx)
        rng = f"{col_letter}2:{col_letter}{max_row}"
        ws.conditional_formatting.add(rng,
            CellIsRule(operator="equal", formula=['"stale"'], fill=red_fill))
        ws.conditional_formatting.add(rng,
            CellIsRule(operator="equal", formula=['"new"'], fill=green_fill))
        ws.conditional_formatting.add(rng,
            CellIsRule(operator="equal", formula=['"removed"'], fill=grey_fill))


def _finding_row(f: Finding) -> Dict[str, Any]:
    first_seen = ""
    if f.first_seen is not None:
        first_seen = datetime.fromtimestamp(f.first_seen, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
    return {
        "Host": f.host,
        "Path": f.path,
        "Identifier": f.identifier,
        "Status": f.status.value,
        "First Seen (UTC)": first_seen,
        "Age (days)": round(f.age / 86400, 1) if f.age is not None else None,
    }


def summarize(findings: Sequence[Finding], hosts: Sequence[str]) -> pd.DataFrame:
    """One row per configured host with a count per classification, plus a TOTAL row."""
    statuses = [c.value for c in Classification]
    rows: List[Dict[str, Any]] = []
    for host in hosts:
        row: Dict[str, Any] = {"Host": host}
        row.update({s: 0 for s in statuses})
        rows.append(row)
    index = {row["Host"]: row for row in rows}
    for f in findings:
        row = index.get(f.host)
        if row is None:
            # removed entries may belong to hosts no longer configured
            row = {"Host": f.host, **{s: 0 for s in statuses}}
            index[f.host] = row
            rows.append(row)
        row[f.status.value] += 1

    df = pd.DataFrame(rows, columns=["Host"] + statuses)
    df = df.loc[:, ["Host"] + [s for s in statuses if df[s].sum() > 0]]
    if not df.empty:
        totals = {col: df[col].sum() for col in df.columns if col != "Host"}
        totals["Host"] = "TOTAL"
        df = pd.concat([df, pd.DataFrame([totals])], ignore_index=True)
    return df


def write_workbook(report: RunReport, hosts: Sequence[str], output: str) -> None:
    """Write SUMMARY and FINDINGS sheets for a completed run."""
    findings = sorted(report.findings, key=lambda f: (f.host, f.path))
    df_findings = pd.DataFrame([_finding_row(f) for f in findings], columns=FINDING_COLUMNS)
    df_sum = summarize(findings, hosts)

    try:
        with pd.ExcelWriter(output, engine="openpyxl") as xw:
            df_sum.to_excel(xw, index=False, sheet_name="SUMMARY")
            _format_worksheet(xw.sheets["SUMMARY"])
            df_findings.to_excel(xw, index=False, sheet_name="FINDINGS")
            _format_worksheet(xw.sheets["FINDINGS"])
    except OSError as e:
        raise ReportError(f"Cannot write Excel {output}: {e}") from e

    log.info("Wrote Excel: %s (%d finding(s))", output, len(findings))
