from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from normtree.core.exceptions import SchemaDefinitionError

from .kinds import FieldRule, SchemaKind, apply_rule, check_rule


def _check_fields(fields: Any) -> Dict[str, Any]:
    if fields is None:
        return {}
    if not isinstance(fields, Mapping):
        raise SchemaDefinitionError(
            f"entity fields must be a mapping of field name to schema, got {type(fields).__name__}"
        )
    return dict(fields)


class EntitySchema:
    """Schema for a keyed, deduplicated record.

    Records matched by an EntitySchema are hoisted into the entity bag under
    ``key`` and replaced in the result by their id. Records whose id rule
    yields None are embedded in place instead.

    Invariants
    - ``key`` and the id rule are fixed at construction.
    - ``define`` may extend the field map, which is how self-referencing
      and mutually recursive entity graphs are declared.
    """

    kind = SchemaKind.ENTITY

    __slots__ = ("_key", "_id_attribute", "_fields")

    def __init__(
        self,
        key: str,
        fields: Optional[Mapping[str, Any]] = None,
        *,
        id_attribute: FieldRule = "id",
    ) -> None:
        if not isinstance(key, str) or not key:
            raise SchemaDefinitionError("entity key must be a non-empty string")
        self._key = key
        self._id_attribute = check_rule(id_attribute, name="id_attribute")
        self._fields = _check_fields(fields)

    @property
    def key(self) -> str:
        return self._key

    @property
    def id_attribute(self) -> FieldRule:
        return self._id_attribute

    @property
    def fields(self) -> Mapping[str, Any]:
        return self._fields

    def get_id(self, record: Any) -> Any:
        """Return the record's identifier, or None if it has no identity."""
        return apply_rule(self._id_attribute, record)

    def define(self, fields: Mapping[str, Any]) -> "EntitySchema":
        """Add or replace nested field schemas."""
        self._fields.update(_check_fields(fields))
        return self

    def __repr__(self) -> str:
        return f"EntitySchema({self._key!r}, fields={sorted(self._fields)!r})"


def entity(
    key: str,
    fields: Optional[Mapping[str, Any]] = None,
    *,
    id_attribute: FieldRule = "id",
) -> EntitySchema:
    """Build an EntitySchema."""

    return EntitySchema(key, fields, id_attribute=id_attribute)
