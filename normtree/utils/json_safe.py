from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping

_JSON_KEY_TYPES = (str, int, float, bool)


def to_jsonable(obj: Any) -> Any:
    """
    Convert normalization output to JSON-serializable values.

    - Objects with a to_dict() (NormalizeResult, MergeConflict) use it.
    - Entity ids that JSON cannot use as object keys (tuples, None, ...) are
      stringified; str/int/float/bool keys are left for json to encode.
    - Tuples and sets become lists.
    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj

    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_jsonable(to_dict())

    if isinstance(obj, (datetime, date)):
        return obj.isoformat()

    if isinstance(obj, Decimal):
        return str(obj)

    if is_dataclass(obj) and not isinstance(obj, type):
        return to_jsonable(asdict(obj))

    if isinstance(obj, Mapping):
        return {(k if isinstance(k, _JSON_KEY_TYPES) else str(k)): to_jsonable(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple)):
        return [to_jsonable(x) for x in obj]

    if isinstance(obj, (set, frozenset)):
        return sorted((to_jsonable(x) for x in obj), key=repr)

    return str(obj)


def dumps_json(obj: Any, *, indent: int | None = 2) -> str:
    """Serialize normalization output as JSON text."""

    return json.dumps(to_jsonable(obj), indent=indent, ensure_ascii=False)
