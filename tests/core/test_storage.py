# tests/core/test_storage.py
"""Tests for the SQLAlchemy Core repository."""

from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy import Column, Integer, MetaData, String, Table, select
from sqlalchemy.exc import NoSuchTableError

from formflow.contracts.protocols import Repository
from formflow.core.storage import SqlRepository

CREATED = datetime(2024, 3, 15, 14, 30, tzinfo=UTC)


def entry_fields(**overrides: Any) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "form_id": 1,
        "ip": "203.0.113.9",
        "form_url": "https://example.com/contact",
        "referring_url": "https://example.com/",
        "post_id": 42,
        "created_by": None,
        "created_at": CREATED,
        "updated_at": CREATED,
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def repository() -> Iterator[SqlRepository]:
    repo = SqlRepository.in_memory()
    yield repo
    repo.close()


class TestEntries:
    def test_implements_protocol(self, repository: SqlRepository) -> None:
        assert isinstance(repository, Repository)

    def test_create_entry_assigns_ids(self, repository: SqlRepository) -> None:
        first = repository.create_entry(entry_fields())
        second = repository.create_entry(entry_fields())
        assert first.id > 0
        assert second.id == first.id + 1
        assert first.post_id == 42
        assert first.created_at == CREATED

    def test_count_is_per_form(self, repository: SqlRepository) -> None:
        repository.create_entry(entry_fields())
        repository.create_entry(entry_fields())
        repository.create_entry(entry_fields(form_id=2))
        assert repository.count_entries(1) == 2
        assert repository.count_entries(2) == 1
        assert repository.count_entries(3) == 0

    def test_entry_exists_by_user_or_ip(self, repository: SqlRepository) -> None:
        repository.create_entry(entry_fields(created_by=5))
        assert repository.entry_exists(1, created_by=5)
        assert not repository.entry_exists(1, created_by=6)
        assert repository.entry_exists(1, ip="203.0.113.9")
        assert not repository.entry_exists(2, ip="203.0.113.9")

    def test_entry_exists_needs_a_criterion(self, repository: SqlRepository) -> None:
        with pytest.raises(ValueError):
            repository.entry_exists(1)

    def test_field_values_round_trip(self, repository: SqlRepository) -> None:
        entry = repository.create_entry(entry_fields())
        repository.save_entry_field_values(entry.id, {2: "Ada", 3: '["a", "b"]'})
        assert repository.get_entry_field_values(entry.id) == {2: "Ada", 3: '["a", "b"]'}

    def test_get_entry(self, repository: SqlRepository) -> None:
        entry = repository.create_entry(entry_fields(created_by=5))
        assert repository.get_entry(entry.id) == entry
        assert repository.get_entry(999) is None


class TestCustomRows:
    @pytest.fixture
    def leads(self, repository: SqlRepository) -> Table:
        table = Table(
            "leads",
            MetaData(),
            Column("id", Integer, primary_key=True),
            Column("name", String(100)),
            Column("email", String(100)),
        )
        table.create(repository.engine)
        return table

    def test_insert_into_reflected_table(self, repository: SqlRepository, leads: Table) -> None:
        repository.insert_custom_row("leads", {"name": "Ada", "email": "ada@example.com"})
        with repository.engine.connect() as conn:
            rows = conn.execute(select(leads.c.name, leads.c.email)).all()
        assert [tuple(row) for row in rows] == [("Ada", "ada@example.com")]

    def test_unknown_columns_are_dropped(self, repository: SqlRepository, leads: Table) -> None:
        repository.insert_custom_row("leads", {"name": "Ada", "shoe_size": "7"})
        with repository.engine.connect() as conn:
            assert conn.execute(select(leads.c.name)).scalar_one() == "Ada"

    def test_missing_table_raises(self, repository: SqlRepository) -> None:
        with pytest.raises(NoSuchTableError):
            repository.insert_custom_row("nowhere", {"a": "b"})


class TestFileDatabase:
    def test_entries_survive_reopen(self, tmp_path: Path) -> None:
        url = f"sqlite:///{tmp_path / 'entries.db'}"
        first = SqlRepository.from_url(url)
        first.create_entry(entry_fields())
        first.close()

        second = SqlRepository.from_url(url)
        assert second.count_entries(1) == 1
        second.close()
