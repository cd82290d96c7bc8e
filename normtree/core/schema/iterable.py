from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from normtree.core.exceptions import SchemaDefinitionError

from .kinds import FieldRule, SchemaKind, apply_rule, check_rule, schema_kind

ARRAY = "array"
VALUES = "values"


def _check_schema_map(schema_map: Any, *, owner: str) -> Dict[Any, Any]:
    if not isinstance(schema_map, Mapping) or schema_kind(schema_map) is not SchemaKind.OBJECT:
        raise SchemaDefinitionError(f"{owner} needs a mapping of discriminator value to schema")
    return dict(schema_map)


class IterableSchema:
    """Schema for a collection whose items share one schema, or pick one by discriminator.

    Ordered sequences normalize to lists and keyed collections to dicts with
    the same keys, whichever of array_of/values_of built the schema.
    ``container`` only records which one it was.

    When ``schema_attribute`` is given, ``item_schema`` is a mapping of
    discriminator value to schema and each item normalizes to
    ``{"id": ..., "schema": <discriminator value>}``.
    """

    kind = SchemaKind.ITERABLE

    __slots__ = ("_item_schema", "_schema_attribute", "_container")

    def __init__(
        self,
        item_schema: Any,
        *,
        schema_attribute: Optional[FieldRule] = None,
        container: str = ARRAY,
    ) -> None:
        if container not in (ARRAY, VALUES):
            raise SchemaDefinitionError(f"unknown container: {container!r}")
        self._container = container
        if schema_attribute is None:
            self._schema_attribute = None
            self._item_schema = item_schema
        else:
            self._schema_attribute = check_rule(schema_attribute, name="schema_attribute")
            self._item_schema = _check_schema_map(item_schema, owner="polymorphic iterable")

    @property
    def item_schema(self) -> Any:
        return self._item_schema

    @property
    def container(self) -> str:
        return self._container

    @property
    def is_polymorphic(self) -> bool:
        return self._schema_attribute is not None

    def get_schema_key(self, item: Any) -> Any:
        return apply_rule(self._schema_attribute, item)

    def __repr__(self) -> str:
        fn = "array_of" if self._container == ARRAY else "values_of"
        return f"{fn}({self._item_schema!r})"


def array_of(item_schema: Any, *, schema_attribute: Optional[FieldRule] = None) -> IterableSchema:
    """Schema for an ordered sequence of items."""

    return IterableSchema(item_schema, schema_attribute=schema_attribute, container=ARRAY)


def values_of(item_schema: Any, *, schema_attribute: Optional[FieldRule] = None) -> IterableSchema:
    """Schema for a keyed collection of items (dict values)."""

    return IterableSchema(item_schema, schema_attribute=schema_attribute, container=VALUES)
