"""The cookbook itself: entries kept sorted by name and mirrored to a store.

Every mutation ends with exactly one write to the store. ``add`` appends the
new record; ``update`` and ``delete`` rewrite the whole file in list order.
"""

import bisect
import logging
from typing import Iterable, Iterator, TypeAlias

from domain.models import Entry, truncate
from domain.repository import Record, RecordStore


logger = logging.getLogger(__name__)


DEFAULT_NAME_MAX_LENGTH = 29
DEFAULT_BODY_MAX_LENGTH = 999


Summary: TypeAlias = tuple[int, str]


class EntryNotFound(KeyError):
    pass


class AllocationFailure(Exception):
    pass


def sort_key(name: str) -> bytes:
    """Fold ASCII letters to lowercase and compare as raw bytes.

    Non-ASCII characters are left alone so the order never depends on the
    locale. Undecodable input bytes, carried as lone surrogates, sort by
    their original byte value.
    """
    return name.encode("utf-8", "surrogateescape").lower()


class IdGenerator:
    """Hands out ids that only ever increase for the life of the process.

    The counter starts uninitialized. On the first allocation it jumps past
    the highest id it has been shown, either through ``observe`` or the live
    ids passed to ``allocate``. That scan happens once.
    """

    def __init__(self) -> None:
        self.high_water: int | None = None
        self._next: int | None = None

    def observe(self, id: int) -> None:
        if self.high_water is None or id > self.high_water:
            self.high_water = id

    def allocate(self, live_ids: Iterable[int]) -> int:
        if self._next is None:
            highest = max(live_ids, default=-1)
            if self.high_water is not None:
                highest = max(highest, self.high_water)
            self._next = highest + 1
        id = self._next
        self._next += 1
        self.observe(id)
        return id


class SummaryView:
    """Live ``(id, name)`` pairs in sort order. Iterate as often as needed."""

    def __init__(self, entries: list[Entry]) -> None:
        self._entries = entries

    def __iter__(self) -> Iterator[Summary]:
        return ((entry.id, entry.name) for entry in self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class Catalog:
    def __init__(
        self,
        store: RecordStore,
        *,
        name_max_length: int = DEFAULT_NAME_MAX_LENGTH,
        body_max_length: int = DEFAULT_BODY_MAX_LENGTH,
        ids: IdGenerator | None = None,
    ) -> None:
        self.store = store
        self.name_max_length = name_max_length
        self.body_max_length = body_max_length
        self.ids = IdGenerator() if ids is None else ids
        self._entries: list[Entry] = []

    @classmethod
    def load(
        cls,
        store: RecordStore,
        *,
        name_max_length: int = DEFAULT_NAME_MAX_LENGTH,
        body_max_length: int = DEFAULT_BODY_MAX_LENGTH,
    ) -> "Catalog":
        """Build a catalog from the store, numbering records in file order."""
        catalog = cls(
            store,
            name_max_length=name_max_length,
            body_max_length=body_max_length,
        )
        for id, (name, body) in enumerate(store.load_all()):
            catalog._insert(catalog._bounded(id, name, body))
            catalog.ids.observe(id)

        logger.info("%d recipe(s) loaded successfully!", len(catalog))
        return catalog

    def __len__(self) -> int:
        return len(self._entries)

    def _bounded(self, id: int, name: str, body: str) -> Entry:
        return Entry.bounded(
            id=id,
            name=name,
            body=body,
            name_max_length=self.name_max_length,
            body_max_length=self.body_max_length,
        )

    def _insert(self, entry: Entry) -> None:
        # After every entry that compares equal, so ties keep insertion order.
        index = bisect.bisect_right(
            self._entries,
            sort_key(entry.name),
            key=lambda e: sort_key(e.name),
        )
        self._entries.insert(index, entry)

    def _detach(self, entry: Entry) -> None:
        for index, current in enumerate(self._entries):
            if current is entry:
                del self._entries[index]
                return

    def _find(self, id: int) -> Entry | None:
        for entry in self._entries:
            if entry.id == id:
                return entry
        return None

    def _records(self) -> list[Record]:
        return [(entry.name, entry.body) for entry in self._entries]

    def add(self, name: str, body: str) -> Entry | None:
        """Insert a new entry and append it to the store.

        Returns ``None`` without touching anything when the name is empty.
        """
        name = name.strip("\r\n")
        body = body.strip("\r\n")
        if not name:
            logger.debug("Empty name, nothing added.")
            return None

        try:
            entry = self._bounded(
                self.ids.allocate(e.id for e in self._entries), name, body
            )
        except MemoryError as e:
            logger.error("Failed to create new recipe %s.", name)
            raise AllocationFailure(name) from e

        self._insert(entry)
        self.store.append_one(entry.name, entry.body)
        logger.debug("Recipe %d appended.", entry.id)
        return entry

    def view(self, id: int) -> Entry:
        if not self._entries:
            logger.warning("Recipe list is empty, nothing to view.")
            raise EntryNotFound(id)

        entry = self._find(id)
        if entry is None:
            logger.warning("Recipe ID %d not found.", id)
            raise EntryNotFound(id)
        return entry

    def update(
        self,
        id: int,
        name: str | None = None,
        body: str | None = None,
    ) -> Entry | None:
        """Change the name and/or body of an entry, then rewrite the store.

        ``None`` means the field was not given at all, an empty string means
        keep the current value. With neither field given this is a no-op and
        returns ``None``.
        """
        if name is None and body is None:
            logger.info("No changes were made.")
            return None

        logger.debug("Searching for ID: %d...", id)
        entry = self._find(id)
        if entry is None:
            logger.warning("Recipe ID %d not found.", id)
            raise EntryNotFound(id)

        renamed = False
        if name:
            name = truncate(name, self.name_max_length)
            if name != entry.name:
                entry.name = name
                renamed = True

        if body:
            entry.body = truncate(body, self.body_max_length)

        if renamed:
            self._detach(entry)
            self._insert(entry)
            logger.info("Recipe updated and re-sorted.")
        else:
            logger.info("Recipe updated (order unchanged).")

        self.store.rewrite_all(self._records())
        return entry

    def delete(self, id: int) -> Entry:
        if not self._entries:
            logger.warning("List is empty, nothing to delete.")
            raise EntryNotFound(id)

        entry = self._find(id)
        if entry is None:
            logger.warning("Recipe ID %d not found.", id)
            raise EntryNotFound(id)

        self._detach(entry)
        self.store.rewrite_all(self._records())
        return entry

    def list_summaries(self) -> SummaryView:
        return SummaryView(self._entries)
