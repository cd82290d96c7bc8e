"""Schema descriptors.

A schema tree runs parallel to the data tree and says how each sub-tree is
read: as a keyed entity, a collection, a polymorphic union, or (for plain
mappings of field name to schema) an ordinary nested object.
"""

from .document import CompiledSchema, EntityDefinition, SchemaDocument, build_schema, load_schema_document, read_schema_file
from .entity import EntitySchema, entity
from .iterable import IterableSchema, array_of, values_of
from .kinds import SchemaKind, schema_kind
from .union import UnionSchema, union_of

__all__ = [
    "SchemaKind",
    "schema_kind",
    "EntitySchema",
    "entity",
    "IterableSchema",
    "array_of",
    "values_of",
    "UnionSchema",
    "union_of",
    "SchemaDocument",
    "EntityDefinition",
    "CompiledSchema",
    "load_schema_document",
    "build_schema",
    "read_schema_file",
]
