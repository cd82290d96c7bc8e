from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Mapping, Optional, Union

from normtree.core.exceptions import SchemaDefinitionError

#: A discriminator or id rule: a field name or a function of the record.
FieldRule = Union[str, Callable[[Any], Any]]


class SchemaKind(str, Enum):
    """
    Variant tag carried by every schema descriptor.

    Plain field mappings have no descriptor object; they are classified as
    OBJECT by schema_kind().
    """

    ENTITY = "entity"
    ITERABLE = "iterable"
    UNION = "union"
    OBJECT = "object"


def schema_kind(schema: Any) -> Optional[SchemaKind]:
    """Classify a schema value, or return None if it cannot guide traversal."""

    kind = getattr(schema, "kind", None)
    if isinstance(kind, SchemaKind) and kind is not SchemaKind.OBJECT:
        return kind
    if isinstance(schema, Mapping):
        return SchemaKind.OBJECT
    return None


def check_rule(rule: Any, *, name: str) -> FieldRule:
    """Accept a field name or a callable; anything else is a configuration error."""

    if isinstance(rule, str) and rule:
        return rule
    if callable(rule):
        return rule
    raise SchemaDefinitionError(f"{name} must be a field name or a callable, got {type(rule).__name__}")


def apply_rule(rule: FieldRule, record: Any) -> Any:
    """Evaluate a field rule against a record.

    A field name on a record without that field (or on a non-mapping) yields None.
    """

    if callable(rule):
        return rule(record)
    if isinstance(record, Mapping):
        return record.get(rule)
    return None
