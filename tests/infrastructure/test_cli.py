"""End-to-end tests for the command line, against a temporary store."""

import json

import pytest
from click.testing import CliRunner
from openpyxl import load_workbook

from colibri.infrastructure.cli.main import cli


@pytest.fixture
def invoke(tmp_path):
    runner = CliRunner()
    env = {"COLIBRI_DATA_DIR": str(tmp_path), "COLIBRI_TIMEZONE": "UTC", "COLIBRI_USER": "ops"}

    def _invoke(*args: str):
        return runner.invoke(cli, list(args), env=env, catch_exceptions=False)

    _invoke("channel", "add", "--name", "Tienda")
    return _invoke


def _create(invoke, code="A-1", *extra: str):
    return invoke(
        "order", "create", "--channel", "Tienda", "--code", code, "--client", "Ana",
        "--item", "S1:Café:2:100:10", "--item", "S2:Té:1:50", "--yes", *extra,
    )


def _store(tmp_path) -> dict:
    return json.loads((tmp_path / "colibri.json").read_text(encoding="utf-8"))


class TestOrderCommands:

    def test_create_and_show(self, invoke):
        result = _create(invoke)
        assert result.exit_code == 0, result.output
        assert "Order created" in result.output

        shown = invoke("order", "show", "--code", "A-1")
        assert shown.exit_code == 0
        assert "Order A-1  (state=nueva orden)" in shown.output
        assert "Café" in shown.output
        assert "$260.00" in shown.output

    def test_duplicate_code_fails(self, invoke):
        _create(invoke)
        result = _create(invoke)
        assert result.exit_code != 0
        assert "already exists in this channel" in result.output

    def test_invalid_fields_listed(self, invoke):
        result = invoke(
            "order", "create", "--channel", "Tienda", "--code", "A-1", "--client", "Ana",
            "--email", "bad", "--item", "S1:Café:0", "--yes",
        )
        assert result.exit_code != 0
        assert "The client email must be valid" in result.output
        assert "Item 1: quantity must be greater than 0" in result.output

    def test_unknown_channel(self, invoke):
        result = invoke(
            "order", "create", "--channel", "Nope", "--code", "A-1", "--client", "Ana",
            "--item", "S1:Café:1", "--yes",
        )
        assert result.exit_code != 0
        assert "Unknown channel 'Nope'" in result.output

    def test_list_hides_deleted_until_asked(self, invoke):
        _create(invoke, "A-1")
        _create(invoke, "B-1")
        assert invoke("order", "delete", "--code", "B-1", "--yes").exit_code == 0

        listed = invoke("order", "list")
        assert "A-1" in listed.output
        assert "B-1" not in listed.output
        assert "nueva orden: 1" in listed.output

        listed = invoke("order", "list", "--include-deleted", "--state", "eliminada")
        assert "B-1" in listed.output
        assert "A-1" not in listed.output

    def test_set_state_and_restore(self, invoke, tmp_path):
        _create(invoke)
        assert invoke("order", "set-state", "--code", "A-1", "--state", "por alistar", "--yes").exit_code == 0
        assert _store(tmp_path)["orders"][0]["estado"] == "por alistar"

        invoke("order", "delete", "--code", "A-1", "--yes")
        restored = invoke("order", "restore", "--code", "A-1")
        assert restored.exit_code == 0
        assert _store(tmp_path)["orders"][0]["estado"] == "restaurada"

    def test_restore_of_live_order_fails(self, invoke):
        _create(invoke)
        result = invoke("order", "restore", "--code", "A-1")
        assert result.exit_code != 0
        assert "is not deleted" in result.output

    def test_purge(self, invoke, tmp_path):
        _create(invoke)
        assert invoke("order", "purge", "--code", "A-1", "--yes").exit_code == 0
        assert _store(tmp_path)["orders"] == []

    def test_delete_declined_at_prompt(self, invoke, tmp_path):
        _create(invoke)
        runner = CliRunner()
        env = {"COLIBRI_DATA_DIR": str(tmp_path), "COLIBRI_TIMEZONE": "UTC"}
        result = runner.invoke(cli, ["order", "delete", "--code", "A-1"], input="n\n", env=env)
        assert result.exit_code != 0
        assert "Delete cancelled" in result.output
        assert _store(tmp_path)["orders"][0]["estado"] == "nueva orden"

    def test_import_then_export(self, invoke, tmp_path):
        template = tmp_path / "template.csv"
        assert invoke("order", "template", str(template)).exit_code == 0

        imported = invoke("order", "import", str(template), "--channel", "Tienda", "--yes")
        assert imported.exit_code == 0, imported.output
        assert "1 created" in imported.output

        again = invoke("order", "import", str(template), "--channel", "Tienda", "--yes")
        assert again.exit_code != 0
        assert "already imported" in again.output
        assert (tmp_path / "last_import.sha256").exists()

        partial = tmp_path / "partial.csv"
        partial.write_text("\n".join(template.read_text(encoding="utf-8").splitlines()[:2]), encoding="utf-8")
        existing = invoke("order", "import", str(partial), "--channel", "Tienda", "--yes")
        assert existing.exit_code != 0
        assert "Nothing to import" in existing.output

        exported = tmp_path / "out.csv"
        assert invoke("order", "export", str(exported)).exit_code == 0
        lines = exported.read_text(encoding="utf-8").splitlines()
        assert lines[0].startswith("Código;Cliente")
        assert len(lines) == 3

    def test_excel_import_then_export(self, invoke, tmp_path):
        template = tmp_path / "template.xlsx"
        assert invoke("order", "template", str(template)).exit_code == 0

        imported = invoke("order", "import", str(template), "--channel", "Tienda", "--yes")
        assert imported.exit_code == 0, imported.output
        assert "1 created" in imported.output

        again = invoke("order", "import", str(template), "--channel", "Tienda", "--yes")
        assert again.exit_code != 0
        assert "already imported" in again.output

        exported = tmp_path / "out.xlsx"
        result = invoke("order", "export", str(exported))
        assert result.exit_code == 0
        assert "2 rows written" in result.output
        sheet = load_workbook(exported).active
        assert sheet.title == "Órdenes"
        assert sheet["A1"].value == "Código"
        assert [sheet.cell(row=r, column=3).value for r in (2, 3)] == ["Producto A", "Producto B"]

    def test_import_with_bad_headers(self, invoke, tmp_path):
        bad = tmp_path / "bad.csv"
        bad.write_text("a;b\n1;2\n", encoding="utf-8")
        result = invoke("order", "import", str(bad), "--channel", "Tienda", "--yes")
        assert result.exit_code != 0
        assert "Invalid headers" in result.output


class TestCatalogCommands:

    def test_channel_list(self, invoke):
        result = invoke("channel", "list")
        assert "Tienda" in result.output

    def test_carrier_add_and_list(self, invoke):
        assert invoke("carrier", "add", "--name", "Servientrega").exit_code == 0
        result = invoke("carrier", "list")
        assert "Servientrega" in result.output

    def test_create_with_carrier(self, invoke):
        invoke("carrier", "add", "--name", "Servientrega")
        result = _create(invoke, "A-1", "--carrier", "Servientrega", "--tracking", "G-1")
        assert result.exit_code == 0
        shown = invoke("order", "show", "--code", "A-1")
        assert "Shipment: Servientrega G-1" in shown.output
