from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Hashable, Mapping, Optional

from normtree.core.exceptions import InvalidInputError, InvalidSchemaError
from normtree.core.schema import EntitySchema, SchemaKind, schema_kind

from .bag import EntityBag
from .options import NormalizeOptions
from .visitor import Visitor

log = logging.getLogger("normtree.normalize")


@dataclass(frozen=True)
class NormalizeResult:
    """Output of normalize(): the entity bag and the id-referencing result skeleton."""

    entities: Dict[str, Dict[Hashable, Dict[str, Any]]]
    result: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"entities": self.entities, "result": self.result}


def _traversal_root(data: Any, schema: Any, options: NormalizeOptions) -> Any:
    """Unwrap a top-level envelope: {embedded: {<item key>: [...]}} under an iterable schema."""

    if schema_kind(schema) is not SchemaKind.ITERABLE:
        return data
    if not isinstance(data, Mapping) or options.embedded_key not in data:
        return data

    item_schema = schema.item_schema
    if not isinstance(item_schema, EntitySchema):
        raise InvalidSchemaError(
            f"an {options.embedded_key!r} envelope at the top level needs an iterable of a single entity schema"
        )
    envelope = data[options.embedded_key]
    if not isinstance(envelope, Mapping):
        return None
    return envelope.get(item_schema.key)


def normalize(data: Any, schema: Any, options: Optional[NormalizeOptions] = None) -> NormalizeResult:
    """Normalize a nested tree into a flat entity bag plus a result skeleton.

    Args:
      data: parsed, in-memory tree (a mapping or a list/tuple).
      schema: an entity / iterable / union descriptor, or a plain mapping of
        field name to schema.
      options: traversal context; defaults to NormalizeOptions().

    Raises:
      InvalidInputError: data is neither a mapping nor a sequence (checked
        before traversal), or an entity id turns out to be unhashable, such
        as a list or dict (raised during traversal; the partial bag is discarded).
      InvalidSchemaError: schema is absent, a sequence, or not a schema.
    """

    if not isinstance(data, (Mapping, list, tuple)):
        raise InvalidInputError("normalize accepts a mapping or a sequence as its input")
    if schema_kind(schema) is None:
        raise InvalidSchemaError("normalize accepts a schema descriptor or a mapping for schema")

    options = options or NormalizeOptions()
    root = _traversal_root(data, schema, options)

    bag = EntityBag()
    result = Visitor(bag=bag, options=options).visit(root, schema)

    log.debug(
        "normalized",
        extra={"entity_types": len(bag.entities), "entity_count": bag.count()},
    )
    return NormalizeResult(entities=bag.entities, result=result)
