"""
Client-side cache of the synced collections.

The cache is an immutable snapshot stamped with a generation number.
Every change (a full replace or a local create/update/delete) builds a new
snapshot and swaps it in, so readers never see a half-applied sync.
"""

import enum
from dataclasses import dataclass, field, replace as dataclass_replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Set, Tuple

Records = Tuple[dict, ...]


def collection_key(collection) -> str:
    """Cache key of a collection: the enum value, or the name as given."""
    if isinstance(collection, enum.Enum):
        return collection.value
    return str(collection)


def _freeze(collections: Mapping[str, Iterable[dict]]) -> Mapping[str, Records]:
    return MappingProxyType({collection_key(name): tuple(rows) for name, rows in collections.items()})


@dataclass(frozen=True)
class CacheSnapshot:
    generation: int = 0
    collections: Mapping[str, Records] = field(default_factory=lambda: MappingProxyType({}))
    synced_at: Optional[datetime] = None

    def get(self, collection: str) -> Records:
        return self.collections.get(collection_key(collection), ())

    def find(self, collection: str, record_id) -> Optional[dict]:
        for record in self.get(collection):
            if record.get("id") == record_id:
                return record
        return None


class DataStore:
    """Holder of the current CacheSnapshot plus the set of collections known to be stale."""

    def __init__(self):
        self._snapshot = CacheSnapshot()
        self._stale: Set[str] = set()

    @property
    def snapshot(self) -> CacheSnapshot:
        return self._snapshot

    @property
    def generation(self) -> int:
        return self._snapshot.generation

    @property
    def stale(self) -> Set[str]:
        return set(self._stale)

    def mark_stale(self, collection: str) -> None:
        self._stale.add(collection_key(collection))

    def replace(self, collections: Mapping[str, Iterable[dict]]) -> CacheSnapshot:
        """Swap in a complete set of freshly fetched collections."""
        self._snapshot = CacheSnapshot(
            generation=self._snapshot.generation + 1,
            collections=_freeze(collections),
            synced_at=datetime.now(timezone.utc),
        )
        self._stale.clear()
        return self._snapshot

    def _with_collection(self, collection: str, rows: Iterable[dict]) -> CacheSnapshot:
        collections: Dict[str, Records] = dict(self._snapshot.collections)
        collections[collection_key(collection)] = tuple(rows)
        self._snapshot = dataclass_replace(
            self._snapshot,
            generation=self._snapshot.generation + 1,
            collections=MappingProxyType(collections),
        )
        return self._snapshot

    def apply_created(self, collection: str, record: dict) -> CacheSnapshot:
        rows = [row for row in self._snapshot.get(collection) if row.get("id") != record.get("id")]
        rows.append(record)
        return self._with_collection(collection, rows)

    def apply_updated(self, collection: str, record: dict) -> CacheSnapshot:
        rows = list(self._snapshot.get(collection))
        for index, row in enumerate(rows):
            if row.get("id") == record.get("id"):
                rows[index] = record
                break
        else:
            rows.append(record)
        return self._with_collection(collection, rows)

    def apply_deleted(self, collection: str, record_id) -> CacheSnapshot:
        rows = [row for row in self._snapshot.get(collection) if row.get("id") != record_id]
        return self._with_collection(collection, rows)
