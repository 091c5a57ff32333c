"""
Tests for pickup_services.wiring.bootstrap -- config -> ReceptionDesk.
"""

import pytest

import pickup_services.wiring as wiring
from pickup_config.loader import parse_config
from pickup_kernel.exceptions import InvalidPaginationError
from pickup_services import ReceptionDesk, bootstrap


@pytest.fixture
def engine_calls(monkeypatch, db_engine, db_tables):
    """Keep the suite's engine; record what bootstrap would have connected to."""
    calls = []

    def fake_init(config):
        calls.append(config)
        return db_engine

    monkeypatch.setattr(wiring, "init_engine_from_config", fake_init)
    monkeypatch.setattr(wiring, "create_tables", lambda: calls.append("create_tables"))
    return calls


class TestBootstrap:

    def test_wires_desk_from_config(self, engine_calls):
        config = parse_config(
            {
                "database": {"url": "sqlite:///elsewhere.db", "pool_size": 3},
                "pagination": {"strict": True, "default_limit": 7},
            }
        )

        desk = bootstrap(config)

        assert isinstance(desk, ReceptionDesk)
        assert engine_calls[0].url == "sqlite:///elsewhere.db"
        assert engine_calls[0].pool_size == 3
        assert desk.pagination.strict is True
        assert desk.build_query().limit == 7

    def test_strict_policy_applied(self, engine_calls):
        desk = bootstrap(parse_config({"pagination": {"strict": True}}))

        with pytest.raises(InvalidPaginationError):
            desk.list_sites("employee", page=0)

    def test_create_schema_flag(self, engine_calls):
        bootstrap(parse_config({}), create_schema=True)

        assert "create_tables" in engine_calls

    def test_schema_untouched_by_default(self, engine_calls):
        bootstrap(parse_config({}))

        assert "create_tables" not in engine_calls

    def test_inconsistent_pagination_fails_fast(self, engine_calls):
        with pytest.raises(ValueError):
            bootstrap(parse_config({"pagination": {"default_limit": 50, "max_limit": 30}}))

        assert engine_calls == []
