from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Iterator, Optional, Tuple


@dataclass
class EntityBag:
    """Flat accumulator of normalized entities: entity key -> id -> record.

    A bag belongs to exactly one normalize() call. It performs no locking;
    concurrent normalizations must each use their own bag.

    Invariants
    - At most one record exists per (entity key, id).
    - Records are created empty on first sight and filled by the merge policy.
    """

    entities: Dict[str, Dict[Hashable, Dict[str, Any]]] = field(default_factory=dict)

    def slot(self, entity_key: str, entity_id: Hashable) -> Dict[str, Any]:
        """Return the stored record for (entity_key, entity_id), creating it if absent."""
        by_id = self.entities.setdefault(entity_key, {})
        return by_id.setdefault(entity_id, {})

    def get(self, entity_key: str, entity_id: Hashable) -> Optional[Dict[str, Any]]:
        return self.entities.get(entity_key, {}).get(entity_id)

    def __contains__(self, item: Tuple[str, Hashable]) -> bool:
        entity_key, entity_id = item
        return entity_id in self.entities.get(entity_key, {})

    def __iter__(self) -> Iterator[Tuple[str, Hashable, Dict[str, Any]]]:
        for entity_key, by_id in self.entities.items():
            for entity_id, record in by_id.items():
                yield entity_key, entity_id, record

    def count(self, entity_key: Optional[str] = None) -> int:
        """Number of stored records, overall or for one entity key."""
        if entity_key is not None:
            return len(self.entities.get(entity_key, {}))
        return sum(len(by_id) for by_id in self.entities.values())
