"""
Tests for the process-wide engine registry in pickup_kernel.db.engine.

session_scope commits for real, so every row written here is removed again
before the test ends.
"""

import sqlite3
from datetime import datetime, timezone
from uuid import uuid4

import pytest
from sqlalchemy import delete, select

from pickup_kernel.db import get_engine, get_session, session_scope
from pickup_kernel.db.engine import is_postgres
from pickup_kernel.domain.values import City
from pickup_kernel.models.site import Site


@pytest.fixture
def committed_site_ids(db_tables):
    ids = []
    yield ids
    if ids:
        with session_scope() as session:
            session.execute(delete(Site).where(Site.id.in_(ids)))


def _site(site_id):
    return Site(
        id=site_id,
        city=City.MOSCOW,
        registered_at=datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc),
    )


class TestSessionScope:

    def test_commits_on_normal_exit(self, committed_site_ids):
        site_id = uuid4()
        committed_site_ids.append(site_id)

        with session_scope() as session:
            session.add(_site(site_id))

        with session_scope() as session:
            stored = session.scalars(select(Site).where(Site.id == site_id)).one()
            assert stored.city is City.MOSCOW

    def test_rolls_back_and_reraises(self, committed_site_ids):
        site_id = uuid4()
        committed_site_ids.append(site_id)

        with pytest.raises(RuntimeError, match="boom"):
            with session_scope() as session:
                session.add(_site(site_id))
                session.flush()
                raise RuntimeError("boom")

        with session_scope() as session:
            assert session.get(Site, site_id) is None


class TestRegistry:

    def test_sessions_bound_to_registered_engine(self, db_engine):
        session = get_session()
        try:
            assert session.get_bind() is db_engine
        finally:
            session.close()

        assert get_engine() is db_engine

    def test_is_postgres_follows_dialect(self, db_engine):
        assert is_postgres() == (db_engine.dialect.name == "postgresql")


class TestSQLiteTransactions:

    def test_transaction_takes_write_lock_at_begin(self, db_engine, db_tables):
        if db_engine.dialect.name != "sqlite":
            pytest.skip("SQLite transaction mode")

        with db_engine.connect() as holder:
            holder.begin()
            other = sqlite3.connect(db_engine.url.database, timeout=0)
            try:
                with pytest.raises(sqlite3.OperationalError, match="locked"):
                    other.execute("BEGIN IMMEDIATE")
            finally:
                other.close()

    def test_write_lock_released_on_rollback(self, db_engine, db_tables):
        if db_engine.dialect.name != "sqlite":
            pytest.skip("SQLite transaction mode")

        with db_engine.connect() as holder:
            holder.begin().rollback()
            other = sqlite3.connect(db_engine.url.database, timeout=0)
            try:
                other.execute("BEGIN IMMEDIATE")
                other.execute("ROLLBACK")
            finally:
                other.close()
