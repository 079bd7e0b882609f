"""Unit tests for the semicolon-separated import/export files."""

import io
from decimal import Decimal

import pytest

from colibri.application.dto import ExportRow
from colibri.domain.exceptions import ValidationError
from colibri.infrastructure.spreadsheet.csv_orders import (
    TEMPLATE_COLUMNS,
    read_import_rows,
    write_export,
    write_template,
)

HEADER = ";".join(TEMPLATE_COLUMNS)


class TestReadImportRows:

    def test_parses_rows(self):
        text = "\n".join([
            HEADER,
            "ORD-1;S1;Café;2;15000;5000;Ana;123;3001234567;Antioquia;ana@example.com;Calle 1",
            "ORD-1;S2;;1;;;;;;;;",
        ])
        first, second = read_import_rows(text)
        assert first.order_code == "ORD-1"
        assert first.quantity == 2
        assert first.unit_price == Decimal("15000")
        assert first.shipping == Decimal("5000")
        assert first.client_name == "Ana"
        assert first.client_address == "Calle 1"
        assert second.product_name == "S2"
        assert second.unit_price is None

    def test_short_rows_are_padded(self):
        [parsed] = read_import_rows(HEADER + "\nORD-1;S1;P;1")
        assert parsed.client_name == ""

    def test_blank_lines_ignored(self):
        assert len(read_import_rows(HEADER + "\n\nORD-1;S1;P;1\n   \n")) == 1

    def test_template_is_importable(self):
        out = io.StringIO()
        write_template(out)
        rows = read_import_rows(out.getvalue())
        assert [r.sku for r in rows] == ["SKU-A1", "SKU-B1"]

    @pytest.mark.parametrize("text, message", [
        ("", "The file is empty"),
        ("codigo;sku\nA;B", "Invalid headers"),
        (HEADER + "\n;S1;P;1", "Line 2: codigo_orden is empty"),
        (HEADER + "\nORD-1;;P;1", "Line 2: sku is empty"),
        (HEADER + "\nORD-1;S1;P;0", "Line 2: invalid cantidad"),
        (HEADER + "\nORD-1;S1;P;dos", "Line 2: invalid cantidad"),
        (HEADER + "\nORD-1;S1;P;1;-5", "Line 2: invalid precio"),
        (HEADER + "\nORD-1;S1;P;1;0;NaN", "Line 2: invalid flete"),
        (HEADER + "\nORD-1;S1;P;1\nORD-1;S2;P;1;x", "Line 3: invalid precio"),
    ])
    def test_rejections(self, text, message):
        with pytest.raises(ValidationError, match=message):
            read_import_rows(text)


class TestWriteExport:

    def test_header_and_rows(self):
        out = io.StringIO()
        count = write_export([
            ExportRow("A-1", "Ana", "Café", 2, Decimal("100"), Decimal("0"), "nueva orden", "2024-05-01"),
            ExportRow("B-1", "", "", None, None, None, "cancelada", "2024-05-02"),
        ], out)
        assert count == 2
        assert out.getvalue().splitlines() == [
            "Código;Cliente;Producto;Cantidad;Precio;Flete;Estado;Fecha",
            "A-1;Ana;Café;2;100;0;nueva orden;2024-05-01",
            "B-1;;;;;;cancelada;2024-05-02",
        ]
