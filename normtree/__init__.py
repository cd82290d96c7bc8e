"""normtree: flatten nested, denormalized trees into an entity bag plus id references.

    >>> user = entity("users")
    >>> user.define({"friend": user})
    EntitySchema('users', fields=['friend'])
    >>> normalize({"id": 1, "friend": {"id": 2}}, user).to_dict()
    {'entities': {'users': {1: {'id': 1, 'friend': 2}, 2: {'id': 2}}}, 'result': 1}
"""

from normtree.core.normalization import (
    ConflictRecorder,
    EntityBag,
    InvalidInputError,
    InvalidSchemaError,
    MergeConflict,
    NormalizeError,
    NormalizeOptions,
    NormalizeResult,
    SchemaDefinitionError,
    normalize,
)
from normtree.core.schema import (
    EntitySchema,
    IterableSchema,
    SchemaKind,
    UnionSchema,
    array_of,
    entity,
    union_of,
    values_of,
)

__version__ = "0.1.0"

__all__ = [
    "normalize",
    "NormalizeResult",
    "NormalizeOptions",
    "EntityBag",
    "ConflictRecorder",
    "MergeConflict",
    "EntitySchema",
    "IterableSchema",
    "UnionSchema",
    "SchemaKind",
    "entity",
    "array_of",
    "values_of",
    "union_of",
    "NormalizeError",
    "InvalidInputError",
    "InvalidSchemaError",
    "SchemaDefinitionError",
]
