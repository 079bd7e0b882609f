"""Excel (.xlsx) workbooks for bulk import and export.

The first worksheet is read; the header must match the import template
and rows whose cells are all empty are skipped.  Errors name the sheet
row, counting the header as row 1.
"""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import BinaryIO, Iterable, Union

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException

from colibri.application.dto import EXPORT_HEADERS, ExportRow, ImportRow
from colibri.domain.exceptions import ValidationError
from colibri.infrastructure.spreadsheet.template import (
    EMPTY_FILE_MESSAGE,
    REQUIRED_COLUMNS,
    TEMPLATE_COLUMNS,
    TEMPLATE_SAMPLES,
    check_header,
    export_values,
    parse_row,
)

logger = logging.getLogger(__name__)

Source = Union[Path, BinaryIO]

TEMPLATE_SHEET = "órdenes"
EXPORT_SHEET = "Órdenes"

_EXPORT_WIDTHS = (15, 30, 30, 10, 15, 15, 15, 20)
_REQUIRED_FILL = PatternFill(start_color="EDE7F6", end_color="EDE7F6", fill_type="solid")


def read_import_rows(source: Source) -> list[ImportRow]:
    """Parse the first worksheet; raise ValidationError naming the bad row."""
    try:
        workbook = load_workbook(source, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError) as exc:
        logger.warning("Could not open workbook: %s", exc)
        raise ValidationError("The file is not a valid Excel workbook")

    try:
        if not workbook.worksheets:
            raise ValidationError("The workbook has no sheets")
        sheet = workbook.worksheets[0]
        lines = sheet.iter_rows(values_only=True)
        header = _trim_trailing([_text(value) for value in next(lines, ())])
        if not header:
            raise ValidationError(EMPTY_FILE_MESSAGE)
        check_header(header)

        rows: list[ImportRow] = []
        for row_no, values in enumerate(lines, start=2):
            cells = [_text(value) for value in values]
            if not any(cells):
                continue
            rows.append(parse_row(cells, f"Row {row_no}"))
        return rows
    finally:
        workbook.close()


def write_template(target: Source) -> None:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = TEMPLATE_SHEET
    sheet.append(list(TEMPLATE_COLUMNS))
    for sample in TEMPLATE_SAMPLES:
        sheet.append([_sample_value(column, value) for column, value in zip(TEMPLATE_COLUMNS, sample)])

    for col, column in enumerate(TEMPLATE_COLUMNS, start=1):
        cell = sheet.cell(row=1, column=col)
        cell.font = Font(bold=True, size=11)
        cell.alignment = Alignment(horizontal="center", vertical="center")
        if column in REQUIRED_COLUMNS:
            cell.fill = _REQUIRED_FILL
        sheet.column_dimensions[get_column_letter(col)].width = max(12, len(column) + 2)
    workbook.save(target)


def write_export(rows: Iterable[ExportRow], target: Source) -> int:
    """Write export rows under a bold header; return the number of data rows."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = EXPORT_SHEET
    sheet.append(list(EXPORT_HEADERS))
    for col, width in enumerate(_EXPORT_WIDTHS, start=1):
        sheet.cell(row=1, column=col).font = Font(bold=True)
        sheet.column_dimensions[get_column_letter(col)].width = width

    count = 0
    for row in rows:
        sheet.append(export_values(row))
        count += 1
    workbook.save(target)
    return count


def _text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _trim_trailing(cells: list[str]) -> list[str]:
    while cells and not cells[-1]:
        cells.pop()
    return cells


def _sample_value(column: str, value: str) -> object:
    if column in ("cantidad", "precio", "flete") and value:
        return int(value)
    return value or None
