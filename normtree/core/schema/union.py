from __future__ import annotations

from typing import Any, Mapping

from normtree.core.exceptions import SchemaDefinitionError

from .iterable import _check_schema_map
from .kinds import FieldRule, SchemaKind, apply_rule, check_rule


class UnionSchema:
    """Schema for a single value that may be one of several entity types.

    Normalizes to ``{"id": ..., "schema": <discriminator value>}``.
    """

    kind = SchemaKind.UNION

    __slots__ = ("_item_schema", "_schema_attribute")

    def __init__(self, schema_map: Mapping[Any, Any], *, schema_attribute: FieldRule) -> None:
        if schema_attribute is None:
            raise SchemaDefinitionError("union_of requires schema_attribute")
        self._schema_attribute = check_rule(schema_attribute, name="schema_attribute")
        self._item_schema = _check_schema_map(schema_map, owner="union_of")

    @property
    def item_schema(self) -> Mapping[Any, Any]:
        return self._item_schema

    @property
    def is_polymorphic(self) -> bool:
        return True

    def get_schema_key(self, item: Any) -> Any:
        return apply_rule(self._schema_attribute, item)

    def __repr__(self) -> str:
        return f"union_of({self._item_schema!r})"


def union_of(schema_map: Mapping[Any, Any], *, schema_attribute: FieldRule) -> UnionSchema:
    """Build a UnionSchema."""

    return UnionSchema(schema_map, schema_attribute=schema_attribute)
