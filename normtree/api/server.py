from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from starlette.requests import Request

from normtree import __version__
from normtree.api.middleware import AccessLogMiddleware, BodySizeLimitMiddleware, RequestIdMiddleware
from normtree.api.models import ConflictOut, NormalizeIn, NormalizeOut
from normtree.core.exceptions import NormalizeError
from normtree.core.normalization import ConflictRecorder, NormalizeOptions, normalize
from normtree.core.normalization.options import DEFAULT_EMBEDDED_KEY
from normtree.core.schema import build_schema, load_schema_document
from normtree.utils.json_safe import to_jsonable

log = logging.getLogger("normtree.api")

DEFAULT_MAX_BODY_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True, slots=True)
class ServiceConfig:
    """Configuration for the API service."""

    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    embedded_key: str = DEFAULT_EMBEDDED_KEY
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        """Read NORMTREE_MAX_BODY_BYTES, NORMTREE_EMBEDDED_KEY and NORMTREE_LOG_LEVEL."""

        return cls(
            max_body_bytes=_env_int("NORMTREE_MAX_BODY_BYTES", DEFAULT_MAX_BODY_BYTES),
            embedded_key=os.environ.get("NORMTREE_EMBEDDED_KEY", "").strip() or DEFAULT_EMBEDDED_KEY,
            log_level=(os.environ.get("NORMTREE_LOG_LEVEL", "").strip() or "INFO").upper(),
        )


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, falling back to default when unset or malformed."""

    raw = os.environ.get(name, "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except ValueError:
        log.warning("ignoring non-integer %s=%r", name, raw)
        return int(default)


def create_app(cfg: Optional[ServiceConfig] = None) -> FastAPI:
    """Create the FastAPI app."""

    cfg = cfg or ServiceConfig.from_env()
    log.setLevel(cfg.log_level)

    app = FastAPI(title="normtree API", version=__version__)
    app.state.cfg = cfg

    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=cfg.max_body_bytes)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(AccessLogMiddleware)

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"ok": True, "version": __version__, "embedded_key": cfg.embedded_key}

    @app.post("/normalize", response_model=NormalizeOut)
    def normalize_endpoint(body: NormalizeIn, request: Request) -> NormalizeOut:
        """Normalize body.data against the schema document in body.schema.

        Errors
        - 400: payload is not an object/array, an entity id is not a string or number,
          or the schema document is invalid.
        - 413: body larger than max_body_bytes.
        """

        recorder = ConflictRecorder()
        options = NormalizeOptions(
            merge_into_entity=recorder,
            embedded_key=body.embedded_key or cfg.embedded_key,
        )
        try:
            compiled = build_schema(load_schema_document(body.schema_))
            res = normalize(body.data, compiled.root, options)
        except NormalizeError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        request.state.entity_count = sum(len(by_id) for by_id in res.entities.values())
        request.state.conflict_count = len(recorder.conflicts)

        out = to_jsonable(res)
        return NormalizeOut(
            entities=out["entities"],
            result=out["result"],
            conflicts=[ConflictOut(**to_jsonable(c)) for c in recorder.conflicts],
        )

    return app


def app_from_env() -> FastAPI:
    """Factory used by Uvicorn entrypoints (``uvicorn --factory normtree.api.server:app_from_env``)."""

    return create_app(ServiceConfig.from_env())
