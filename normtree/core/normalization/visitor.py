from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from normtree.core.exceptions import InvalidInputError
from normtree.core.schema import EntitySchema, IterableSchema, SchemaKind, UnionSchema, schema_kind

from .bag import EntityBag
from .options import NormalizeOptions


def is_composite(value: Any) -> bool:
    """Mappings and list/tuple sequences are traversed; everything else passes through."""
    return isinstance(value, (Mapping, list, tuple))


def _own_fields(value: Any) -> Iterable[Tuple[Any, Any]]:
    if isinstance(value, Mapping):
        return value.items()
    return enumerate(value)


def _lookup(schema_map: Any, key: Any) -> Any:
    if not isinstance(schema_map, Mapping):
        return None
    try:
        return schema_map.get(key)
    except TypeError:
        # unhashable discriminator / field key
        return None


@dataclass
class Visitor:
    """Depth-first walk of a data tree guided by a parallel schema tree.

    Entities found on the way are merged into ``bag``; the return value of
    visit() is the normalized skeleton of the visited value.

    Recursion depth equals the nesting depth of the data. There is no cycle
    guard: a self-referencing schema applied to self-referencing data will
    exhaust the stack.
    """

    bag: EntityBag
    options: NormalizeOptions

    def visit(self, value: Any, schema: Any) -> Any:
        kind = schema_kind(schema)
        if kind is None or not is_composite(value):
            return value
        if kind is SchemaKind.ENTITY:
            return self.visit_entity(value, schema)
        if kind is SchemaKind.ITERABLE:
            return self.visit_iterable(value, schema)
        if kind is SchemaKind.UNION:
            return self.visit_union(value, schema)
        if kind is SchemaKind.OBJECT:
            return self.visit_object(value, schema)
        raise AssertionError(f"unhandled schema kind: {kind}")

    def visit_object(self, value: Any, schema_map: Mapping[Any, Any]) -> Dict[Any, Any]:
        """Build a fresh container with every field visited against schema_map[field].

        Sub-fields of the reserved embedded field are visited the same way
        and folded into the same container.
        """

        assign = self.options.assign_entity
        embedded_key = self.options.embedded_key
        normalized: Dict[Any, Any] = {}

        for key, child in _own_fields(value):
            if key == embedded_key and isinstance(value, Mapping):
                continue
            assign(normalized, key, self.visit(child, _lookup(schema_map, key)))

        if isinstance(value, Mapping) and embedded_key in value:
            embedded = value[embedded_key]
            if isinstance(embedded, Mapping):
                for key, child in embedded.items():
                    assign(normalized, key, self.visit(child, _lookup(schema_map, key)))
            else:
                assign(normalized, embedded_key, embedded)

        return normalized

    def visit_entity(self, value: Any, entity_schema: EntitySchema) -> Any:
        entity_id = entity_schema.get_id(value)
        if entity_id is None:
            # identity-less record: embed in place
            return self.visit_object(value, entity_schema.fields)

        try:
            hash(entity_id)
        except TypeError:
            raise InvalidInputError(
                f"entity id for {entity_schema.key!r} must be a string or number, got {type(entity_id).__name__}"
            ) from None
        stored = self.bag.slot(entity_schema.key, entity_id)
        normalized = self.visit_object(value, entity_schema.fields)
        self.options.merge_into_entity(stored, normalized, entity_schema.key)
        return entity_id

    def visit_iterable(self, value: Any, iterable_schema: IterableSchema) -> Any:
        mapper = self._item_mapper(iterable_schema)
        if isinstance(value, Mapping):
            return {key: mapper(item) for key, item in value.items()}
        return [mapper(item) for item in value]

    def visit_union(self, value: Any, union_schema: UnionSchema) -> Dict[str, Any]:
        return self._polymorphic_mapper(union_schema)(value)

    def _item_mapper(self, iterable_schema: IterableSchema) -> Callable[[Any], Any]:
        if iterable_schema.is_polymorphic:
            return self._polymorphic_mapper(iterable_schema)
        item_schema = iterable_schema.item_schema
        return lambda item: self.visit(item, item_schema)

    def _polymorphic_mapper(self, schema: Any) -> Callable[[Any], Dict[str, Any]]:
        schema_map: Optional[Mapping[Any, Any]] = schema.item_schema

        def mapper(item: Any) -> Dict[str, Any]:
            schema_key = schema.get_schema_key(item)
            return {"id": self.visit(item, _lookup(schema_map, schema_key)), "schema": schema_key}

        return mapper
