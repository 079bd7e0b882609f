"""Semicolon-separated spreadsheet files for bulk import and export."""

from __future__ import annotations

import csv
from typing import Iterable, TextIO

from colibri.application.dto import EXPORT_HEADERS, ExportRow, ImportRow
from colibri.domain.exceptions import ValidationError
from colibri.infrastructure.spreadsheet.template import (
    EMPTY_FILE_MESSAGE,
    TEMPLATE_COLUMNS,
    TEMPLATE_SAMPLES,
    check_header,
    export_values,
    parse_row,
)

DELIMITER = ";"


def read_import_rows(text: str) -> list[ImportRow]:
    """Parse an import file; raise ValidationError naming the bad line."""
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        raise ValidationError(EMPTY_FILE_MESSAGE)

    reader = csv.reader(lines, delimiter=DELIMITER)
    check_header([cell.strip() for cell in next(reader)])
    return [
        parse_row([c.strip() for c in cells], f"Line {line_no}")
        for line_no, cells in enumerate(reader, start=2)
    ]


def write_template(out: TextIO) -> None:
    writer = csv.writer(out, delimiter=DELIMITER, lineterminator="\n")
    writer.writerow(TEMPLATE_COLUMNS)
    writer.writerows(TEMPLATE_SAMPLES)


def write_export(rows: Iterable[ExportRow], out: TextIO) -> int:
    """Write export rows with a header; return the number of data rows."""
    writer = csv.writer(out, delimiter=DELIMITER, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    count = 0
    for row in rows:
        writer.writerow(["" if value is None else value for value in export_values(row)])
        count += 1
    return count
