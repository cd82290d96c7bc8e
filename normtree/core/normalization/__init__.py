"""Normalization engine.

normalize() walks a nested tree alongside a schema tree and returns a flat
bag of entities (entity key -> id -> record) plus a result skeleton that
refers to those entities by id.

Notes:
- Purely synchronous and in-memory; no I/O.
- Each call owns a fresh EntityBag.
"""

from normtree.core.exceptions import InvalidInputError, InvalidSchemaError, NormalizeError, SchemaDefinitionError

from .bag import EntityBag
from .normalizer import NormalizeResult, normalize
from .options import DEFAULT_EMBEDDED_KEY, NormalizeOptions
from .policies import ConflictRecorder, MergeConflict, assign_entity, merge_into_entity
from .visitor import Visitor

__all__ = [
    "normalize",
    "NormalizeResult",
    "NormalizeOptions",
    "DEFAULT_EMBEDDED_KEY",
    "EntityBag",
    "Visitor",
    "assign_entity",
    "merge_into_entity",
    "ConflictRecorder",
    "MergeConflict",
    "NormalizeError",
    "InvalidInputError",
    "InvalidSchemaError",
    "SchemaDefinitionError",
]
