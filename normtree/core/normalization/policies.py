from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, MutableMapping

log = logging.getLogger("normtree.normalize")

#: (container, field name, visited value) -> None
AssignEntity = Callable[[MutableMapping[str, Any], Any, Any], None]

#: (stored record, incoming record, entity key) -> None
MergeIntoEntity = Callable[[MutableMapping[str, Any], Dict[str, Any], str], None]


@dataclass(frozen=True)
class MergeConflict:
    """Two visits of the same entity disagreed on a field; the earlier value was kept."""

    entity_key: str
    field: str
    existing: Any
    incoming: Any

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entity_key": self.entity_key,
            "field": self.field,
            "existing": self.existing,
            "incoming": self.incoming,
        }


def assign_entity(container: MutableMapping[str, Any], key: Any, value: Any) -> None:
    """Default assignment policy: plain item assignment."""
    container[key] = value


def values_equal(a: Any, b: Any) -> bool:
    """Deep equality in JSON terms: booleans never equal numbers, containers compare element-wise."""

    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        return a.keys() == b.keys() and all(values_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(values_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, (Mapping, list, tuple)) or isinstance(b, (Mapping, list, tuple)):
        return False
    if isinstance(a, float) and isinstance(b, float) and a != a and b != b:
        # NaN
        return True
    return a == b


def _merge_first_wins(
    existing: MutableMapping[str, Any],
    incoming: Dict[str, Any],
    entity_key: str,
    on_conflict: Callable[[MergeConflict], None],
) -> None:
    for key, value in incoming.items():
        if key not in existing or values_equal(existing[key], value):
            existing[key] = value
            continue
        on_conflict(MergeConflict(entity_key=entity_key, field=key, existing=existing[key], incoming=value))


def _log_conflict(conflict: MergeConflict) -> None:
    log.warning(
        "merge_conflict: two %s disagree on %r; keeping the earlier value %r over %r",
        conflict.entity_key,
        conflict.field,
        conflict.existing,
        conflict.incoming,
        extra={
            "entity_key": conflict.entity_key,
            "field": conflict.field,
            "existing": conflict.existing,
            "incoming": conflict.incoming,
        },
    )


def merge_into_entity(existing: MutableMapping[str, Any], incoming: Dict[str, Any], entity_key: str) -> None:
    """Default merge policy.

    For each incoming field: adopt it when the stored record lacks the field
    or holds an equal value (see values_equal). Otherwise keep the stored value and log a
    merge_conflict warning on the "normtree.normalize" logger.
    """

    _merge_first_wins(existing, incoming, entity_key, _log_conflict)


@dataclass
class ConflictRecorder:
    """Merge policy with the default first-value-wins rule that also collects conflicts.

    Usage:
        recorder = ConflictRecorder()
        normalize(data, schema, NormalizeOptions(merge_into_entity=recorder))
        recorder.conflicts  # -> [MergeConflict, ...]
    """

    conflicts: List[MergeConflict] = field(default_factory=list)
    log_conflicts: bool = True

    def __call__(self, existing: MutableMapping[str, Any], incoming: Dict[str, Any], entity_key: str) -> None:
        _merge_first_wins(existing, incoming, entity_key, self._record)

    def _record(self, conflict: MergeConflict) -> None:
        self.conflicts.append(conflict)
        if self.log_conflicts:
            _log_conflict(conflict)
