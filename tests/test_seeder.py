"""Tests for the startup seeder."""

from __future__ import annotations

import logging
from typing import Iterator, Type

import pytest

from customer_api.database import InsertFailure, RecordStore, StorageUnavailable, StoreError, open_storage
from customer_api.models import Customer
from customer_api.seeder import SEED_NAMES, Seeder


@pytest.fixture
def store() -> Iterator[RecordStore]:
    record_store = RecordStore(open_storage("sqlite://"))
    record_store.create_schema()
    yield record_store
    record_store.close()


class RejectingStore(RecordStore):
    """Store that refuses to insert one particular name."""

    def __init__(self, inner: RecordStore, rejected: str, error: Type[StoreError] = InsertFailure) -> None:
        super().__init__(inner.engine)
        self.rejected = rejected
        self.error = error

    def insert(self, name: str) -> Customer:
        if name == self.rejected:
            raise self.error(f"Cannot insert {name!r}: rejected")
        return super().insert(name)


def test_seed_names_are_the_ten_scientists() -> None:
    assert len(SEED_NAMES) == 10
    assert SEED_NAMES[0] == "Marie Curie"
    assert SEED_NAMES[-1] == "Tu Youyou"


def test_run_inserts_every_name_in_order(store: RecordStore) -> None:
    seeded = Seeder(store).run()
    assert [c.name for c in seeded] == list(SEED_NAMES)
    assert store.list_all() == seeded


def test_run_logs_each_record(store: RecordStore, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="customer_api.seeder"):
        Seeder(store, names=["Marie Curie"]).run()
    assert "Seeded Customer(id=1, name=Marie Curie)" in caplog.text


def test_failed_insert_is_logged_and_skipped(store: RecordStore, caplog: pytest.LogCaptureFixture) -> None:
    seeder = Seeder(RejectingStore(store, "Carl Sagan"))
    with caplog.at_level(logging.INFO, logger="customer_api.seeder"):
        seeded = seeder.run()

    assert len(seeded) == 9
    names = [c.name for c in store.list_all()]
    assert "Carl Sagan" not in names
    assert names[-1] == "Tu Youyou"
    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "Carl Sagan" in errors[0].getMessage()


def test_running_twice_duplicates_rows(store: RecordStore) -> None:
    Seeder(store).run()
    Seeder(store).run()
    rows = store.list_all()
    assert len(rows) == 20
    assert len({c.id for c in rows}) == 20


def test_unavailable_storage_aborts_the_run(store: RecordStore) -> None:
    seeder = Seeder(RejectingStore(store, "Rosalind Franklin", error=StorageUnavailable))
    with pytest.raises(StorageUnavailable):
        seeder.run()
    assert [c.name for c in store.list_all()] == ["Marie Curie", "Albert Einstein"]
