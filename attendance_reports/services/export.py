"""Report file naming and the openpyxl workbook sink."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from attendance_reports.services.sheet_layout import SheetLayout, StyleTag

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

REPORT_LABELS: dict[str, str] = {
    "state": "State",
    "region": "Region",
    "old_group": "Old Group",
    "group": "Group",
    "district": "District",
}

SUBTOTAL_FILL = "FFFF99"
WEEK_LABEL_FILL = "DDEBF7"


@dataclass(slots=True)
class ExportFilePayload:
    media_type: str
    filename: str
    content: bytes


def get_report_file_name(report_kind: str, *, now: datetime | None = None) -> str:
    """``"{Label} Report Sheet File_{yyyy}_{MM}_{dd}__{HH}_{mm}_{ss}.xlsx"``; youth uses its own prefix."""

    stamp = (now or datetime.now()).strftime("%Y_%m_%d__%H_%M_%S")
    kind = report_kind.strip().lower().replace("-", "_")
    if kind == "youth":
        return f"Youth Monthly Report_{stamp}.xlsx"
    label = REPORT_LABELS.get(kind)
    if label is None:
        raise ValueError(f"Unknown report kind: {report_kind!r}.")
    return f"{label} Report Sheet File_{stamp}.xlsx"


def _cell_style(tag: StyleTag) -> tuple[Font, Alignment, PatternFill | None]:
    if tag is StyleTag.TITLE:
        return Font(bold=True, size=28), Alignment(horizontal="center", vertical="center"), None
    if tag is StyleTag.HEADER:
        return Font(bold=True), Alignment(horizontal="center", vertical="center"), None
    if tag is StyleTag.WEEK_LABEL:
        return (
            Font(bold=True),
            Alignment(horizontal="center", vertical="center"),
            PatternFill("solid", fgColor=WEEK_LABEL_FILL),
        )

    fill = PatternFill("solid", fgColor=SUBTOTAL_FILL)
    if tag is StyleTag.SUBTOTAL_LABEL:
        return Font(bold=True, size=12), Alignment(horizontal="left"), fill
    if tag is StyleTag.SUBTOTAL:
        return Font(bold=True), Alignment(horizontal="center"), fill
    return Font(bold=True, size=12), Alignment(horizontal="right"), fill


def render_workbook(layout: SheetLayout) -> bytes:
    """Serialize a layout to xlsx bytes; single-cell merge ranges are skipped."""

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = layout.sheet_name[:31]

    for row in layout.rows:
        sheet.append(list(row))

    for (row_index, col_index), tag in layout.styles.items():
        font, alignment, fill = _cell_style(tag)
        cell = sheet.cell(row=row_index + 1, column=col_index + 1)
        cell.font = font
        cell.alignment = alignment
        if fill is not None:
            cell.fill = fill

    for col_index, width in enumerate(layout.column_widths, start=1):
        sheet.column_dimensions[get_column_letter(col_index)].width = width

    for merge in layout.merges:
        if merge.is_single_cell:
            continue
        sheet.merge_cells(
            start_row=merge.start_row + 1,
            start_column=merge.start_col + 1,
            end_row=merge.end_row + 1,
            end_column=merge.end_col + 1,
        )

    output = BytesIO()
    workbook.save(output)
    return output.getvalue()


def export_layout(layout: SheetLayout, report_kind: str, *, now: datetime | None = None) -> ExportFilePayload:
    return ExportFilePayload(
        media_type=XLSX_MEDIA_TYPE,
        filename=get_report_file_name(report_kind, now=now),
        content=render_workbook(layout),
    )
