"""One-shot population of the customer table at startup."""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from .database import InsertFailure, RecordStore
from .models import Customer

logger = logging.getLogger(__name__)

SEED_NAMES: Tuple[str, ...] = (
    "Marie Curie",
    "Albert Einstein",
    "Rosalind Franklin",
    "Neil deGrasse Tyson",
    "Jane Goodall",
    "Stephen Hawking",
    "Katherine Johnson",
    "Chien-Shiung Wu",
    "Carl Sagan",
    "Tu Youyou",
)


class Seeder:
    """Insert a fixed list of names into a :class:`RecordStore`.

    Each name is inserted in its own transaction. A rejected insert is logged
    and skipped; names already stored stay stored. ``StorageUnavailable``
    propagates and aborts the run. Running the seeder twice
    stores every name twice.
    """

    def __init__(self, store: RecordStore, names: Sequence[str] = SEED_NAMES) -> None:
        self.store = store
        self.names = tuple(names)

    def run(self) -> List[Customer]:
        """Insert every name and return the customers that were stored."""

        seeded: List[Customer] = []
        for name in self.names:
            try:
                customer = self.store.insert(name)
            except InsertFailure as exc:
                logger.error("Failed to seed customer %r: %s", name, exc)
                continue
            logger.info("Seeded %s", customer)
            seeded.append(customer)
        logger.info("Seeded %d of %d customers", len(seeded), len(self.names))
        return seeded
