"""Integration tests for channel and carrier use cases."""

import asyncio

from colibri.application.catalogs import (
    CreateCarrierHandler,
    ListCarriersHandler,
    ListChannelsHandler,
)
from tests.fakes import FakeOrderGateway, offline


class TestListChannels:

    def test_lists(self):
        result = asyncio.run(ListChannelsHandler(FakeOrderGateway()).handle())
        assert result.ok
        assert [c.name for c in result.data] == ["Tienda", "Marketplace"]

    def test_failure(self):
        gateway = FakeOrderGateway()
        gateway.fetch_error = offline()
        result = asyncio.run(ListChannelsHandler(gateway).handle())
        assert not result.ok
        assert result.data == []
        assert "Backend unreachable" in result.message


class TestListCarriers:

    def test_active_only_by_default(self):
        result = asyncio.run(ListCarriersHandler(FakeOrderGateway()).handle())
        assert [c.name for c in result.data] == ["Servientrega"]

    def test_include_inactive(self):
        result = asyncio.run(ListCarriersHandler(FakeOrderGateway()).handle(include_inactive=True))
        assert len(result.data) == 2


class TestCreateCarrier:

    def test_creates_trimmed(self):
        gateway = FakeOrderGateway()
        result = asyncio.run(CreateCarrierHandler(gateway).handle("  Coordinadora "))
        assert result.ok
        assert result.data.name == "Coordinadora"
        assert gateway.calls == [("create_carrier", {"name": "Coordinadora"})]

    def test_blank_name_rejected(self):
        gateway = FakeOrderGateway()
        result = asyncio.run(CreateCarrierHandler(gateway).handle("   "))
        assert not result.ok
        assert result.message == "Carrier name is required"
        assert gateway.calls == []

    def test_backend_failure(self):
        gateway = FakeOrderGateway()
        gateway.write_error = offline()
        result = asyncio.run(CreateCarrierHandler(gateway).handle("Envía"))
        assert not result.ok
