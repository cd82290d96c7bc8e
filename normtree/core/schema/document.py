from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from normtree.core.exceptions import SchemaDefinitionError

from .entity import EntitySchema
from .iterable import array_of, values_of
from .union import union_of

_ARRAY_OF = "array_of"
_VALUES_OF = "values_of"
_UNION_OF = "union_of"
_OBJECT = "object"
_KEYWORDS = frozenset({_ARRAY_OF, _VALUES_OF, _UNION_OF, _OBJECT})


class EntityDefinition(BaseModel):
    """One entity type in a schema document."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    id_attribute: str = Field(default="id", min_length=1)
    fields_: Dict[str, Any] = Field(default_factory=dict, alias="fields")


class SchemaDocument(BaseModel):
    """Declarative, JSON-friendly description of a schema graph.

    Schema expressions
    - "users"                                   entity reference
    - {"array_of": expr}                        ordered collection
    - {"values_of": expr}                       keyed collection
    - {"array_of": {k: expr, ...}, "schema_attribute": "type"}
                                                polymorphic collection
    - {"union_of": {k: expr, ...}, "schema_attribute": "type"}
    - {"object": {field: expr, ...}}            plain nested object

    Entity references are resolved after every entity is declared, so
    entities may refer to themselves or to each other.
    """

    model_config = ConfigDict(extra="forbid")

    entities: Dict[str, EntityDefinition] = Field(default_factory=dict)
    root: Any = None


@dataclass(frozen=True)
class CompiledSchema:
    """Descriptors built from a SchemaDocument."""

    root: Any
    entities: Mapping[str, EntitySchema]


def load_schema_document(raw: Union[Mapping[str, Any], str, bytes]) -> SchemaDocument:
    """Validate a schema document given as a mapping or JSON text."""

    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise SchemaDefinitionError(f"schema document is not valid JSON: {e}") from e
    if not isinstance(raw, Mapping):
        raise SchemaDefinitionError("schema document must be a JSON object")
    try:
        return SchemaDocument.model_validate(dict(raw))
    except ValidationError as e:
        raise SchemaDefinitionError(f"invalid schema document: {e}") from e


def read_schema_file(path: Union[str, Path]) -> CompiledSchema:
    """Load and compile a schema document from a JSON file."""

    text = Path(path).read_text(encoding="utf-8")
    return build_schema(load_schema_document(text))


def build_schema(doc: SchemaDocument) -> CompiledSchema:
    """Compile a SchemaDocument into schema descriptors.

    Raises SchemaDefinitionError on unknown entity references, malformed
    expressions, or a missing root.
    """

    registry: Dict[str, EntitySchema] = {
        key: EntitySchema(key, id_attribute=definition.id_attribute)
        for key, definition in doc.entities.items()
    }
    for key, definition in doc.entities.items():
        fields = {
            name: _compile(expr, registry, path=f"entities.{key}.fields.{name}")
            for name, expr in definition.fields_.items()
        }
        registry[key].define(fields)

    if doc.root is None:
        raise SchemaDefinitionError("schema document has no root")
    root = _compile(doc.root, registry, path="root")
    return CompiledSchema(root=root, entities=dict(registry))


def _compile(expr: Any, registry: Mapping[str, EntitySchema], *, path: str) -> Any:
    if isinstance(expr, str):
        try:
            return registry[expr]
        except KeyError:
            raise SchemaDefinitionError(f"{path}: unknown entity {expr!r}") from None

    if not isinstance(expr, Mapping):
        raise SchemaDefinitionError(f"{path}: expected an entity name or an expression object")

    found = [k for k in expr if k in _KEYWORDS]
    if len(found) != 1:
        raise SchemaDefinitionError(
            f"{path}: expression needs exactly one of {sorted(_KEYWORDS)}, got {sorted(expr)}"
        )
    keyword = found[0]
    extra = set(expr) - {keyword, "schema_attribute"}
    if extra:
        raise SchemaDefinitionError(f"{path}: unexpected keys {sorted(extra)}")

    body = expr[keyword]
    schema_attribute: Optional[str] = expr.get("schema_attribute")
    sub = f"{path}.{keyword}"

    if keyword == _OBJECT:
        if schema_attribute is not None:
            raise SchemaDefinitionError(f"{path}: schema_attribute is not valid on object")
        return _compile_map(body, registry, path=sub)

    if keyword == _UNION_OF:
        if schema_attribute is None:
            raise SchemaDefinitionError(f"{path}: union_of requires schema_attribute")
        return union_of(_compile_map(body, registry, path=sub), schema_attribute=schema_attribute)

    factory = array_of if keyword == _ARRAY_OF else values_of
    if schema_attribute is None:
        return factory(_compile(body, registry, path=sub))
    return factory(_compile_map(body, registry, path=sub), schema_attribute=schema_attribute)


def _compile_map(body: Any, registry: Mapping[str, EntitySchema], *, path: str) -> Dict[str, Any]:
    if not isinstance(body, Mapping):
        raise SchemaDefinitionError(f"{path}: expected a mapping")
    return {k: _compile(v, registry, path=f"{path}.{k}") for k, v in body.items()}
