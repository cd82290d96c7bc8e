from __future__ import annotations

from dataclasses import dataclass

from .policies import AssignEntity, MergeIntoEntity, assign_entity, merge_into_entity

DEFAULT_EMBEDDED_KEY = "embedded"


@dataclass(frozen=True)
class NormalizeOptions:
    """Read-only traversal context shared by every step of one normalization.

    - assign_entity: attaches each visited field to the container being built.
    - merge_into_entity: reconciles a revisited entity with its stored record.
    - embedded_key: reserved field carrying related entities next to an
      object's own fields, and wrapping the primary collection of a top-level
      payload.
    """

    assign_entity: AssignEntity = assign_entity
    merge_into_entity: MergeIntoEntity = merge_into_entity
    embedded_key: str = DEFAULT_EMBEDDED_KEY
