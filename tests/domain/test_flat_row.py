"""Unit tests for parsing backend view records into FlatRows."""

from datetime import datetime, timedelta, timezone

import pytest

from colibri.domain.exceptions import ValidationError
from colibri.domain.model.flat_row import FlatRow, parse_timestamp
from colibri.domain.model.order_state import OrderState
from tests.fakes import row


class TestFromRecord:

    def test_header_fields(self):
        r = FlatRow.from_record(row(
            "7", code="A-7", state="por empacar",
            cliente_nombre="Ana", cliente_celular=3001234567,
            guia_numero="G-1", transportadora="Servientrega",
        ))
        assert r.order_id == "7"
        assert r.order_code == "A-7"
        assert r.channel_id == "ch-1"
        assert r.state is OrderState.POR_EMPACAR
        assert r.client.name == "Ana"
        assert r.client.phone == "3001234567"
        assert r.tracking_number == "G-1"
        assert r.carrier == "Servientrega"

    def test_item_fields(self):
        r = FlatRow.from_record(row("1", sku="S1", product="P1", quantity="3", price=100, shipping=5))
        assert r.has_item
        assert r.sku == "S1"
        assert r.product_name == "P1"
        assert r.quantity == 3
        assert r.unit_price == 100
        assert r.shipping == 5

    def test_null_item_fields(self):
        r = FlatRow.from_record(row("1"))
        assert not r.has_item
        assert r.item_id is None

    def test_product_without_sku_is_an_item(self):
        assert FlatRow.from_record(row("1", product="Loose product")).has_item

    def test_missing_state_defaults_to_new(self):
        r = FlatRow.from_record(row("1", state=None))
        assert r.state is OrderState.NUEVA_ORDEN

    def test_unknown_state_rejected(self):
        with pytest.raises(ValidationError, match="Unknown order state"):
            FlatRow.from_record(row("1", state="perdida"))

    def test_missing_id_rejected(self):
        with pytest.raises(ValidationError, match="missing its id"):
            FlatRow.from_record(row(None))  # type: ignore[arg-type]

    def test_missing_created_at_rejected(self):
        with pytest.raises(ValidationError, match="missing created_at"):
            FlatRow.from_record(row("1", created_at=""))

    def test_non_mapping_rejected(self):
        with pytest.raises(ValidationError, match="must be a mapping"):
            FlatRow.from_record(["1", "A"])  # type: ignore[arg-type]

    def test_bad_quantity_rejected(self):
        with pytest.raises(ValidationError, match="Invalid quantity"):
            FlatRow.from_record(row("1", sku="S1", quantity="two"))


class TestParseTimestamp:

    def test_zulu_suffix(self):
        assert parse_timestamp("2024-05-01T10:00:00Z") == datetime(2024, 5, 1, 10, tzinfo=timezone.utc)

    def test_offset_kept(self):
        parsed = parse_timestamp("2024-05-01T10:00:00-05:00")
        assert parsed.utcoffset() == timedelta(hours=-5)

    def test_naive_takes_default_zone(self):
        bogota = timezone(timedelta(hours=-5))
        parsed = parse_timestamp("2024-05-01T10:00:00", bogota)
        assert parsed == datetime(2024, 5, 1, 15, tzinfo=timezone.utc)

    def test_empty_is_none(self):
        assert parse_timestamp(None) is None
        assert parse_timestamp("") is None

    def test_garbage_rejected(self):
        with pytest.raises(ValidationError, match="Invalid timestamp"):
            parse_timestamp("yesterday")
