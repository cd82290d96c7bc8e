from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional


class ApiError(BaseModel):
    """Standard API error payload."""

    error: str
    detail: Optional[str] = None


class NormalizeIn(BaseModel):
    """Normalization request: a parsed payload and a schema document."""

    model_config = ConfigDict(populate_by_name=True)

    data: Any
    schema_: Dict[str, Any] = Field(alias="schema")
    embedded_key: Optional[str] = Field(default=None, min_length=1)


class ConflictOut(BaseModel):
    """A field on which two copies of the same entity disagreed (earlier value kept)."""

    entity_key: str
    field: str
    existing: Any = None
    incoming: Any = None


class NormalizeOut(BaseModel):
    """Normalization result."""

    entities: Dict[str, Dict[Any, Any]] = Field(default_factory=dict)
    result: Any = None
    conflicts: List[ConflictOut] = Field(default_factory=list)
