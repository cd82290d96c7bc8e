from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any, List

from normtree.core.exceptions import NormalizeError
from normtree.core.normalization import ConflictRecorder, NormalizeOptions, normalize
from normtree.core.normalization.options import DEFAULT_EMBEDDED_KEY
from normtree.core.schema import read_schema_file
from normtree.utils.json_safe import dumps_json


def _read_json(path: str) -> Any:
    """Read a JSON file."""

    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _emit(text: str, out: str | None) -> None:
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text + "\n")
    else:
        print(text)


def cmd_normalize(args: argparse.Namespace) -> int:
    """Normalize a JSON payload against a schema document and print {entities, result}."""

    for path in (args.path, args.schema):
        if not os.path.isfile(path):
            print(f"error: file not found: {path}", file=sys.stderr)
            return 2

    try:
        data = _read_json(args.path)
    except ValueError as e:
        print(f"error: payload is not valid JSON: {e}", file=sys.stderr)
        return 2

    recorder = ConflictRecorder()
    options = NormalizeOptions(merge_into_entity=recorder, embedded_key=args.embedded_key)
    try:
        compiled = read_schema_file(args.schema)
        res = normalize(data, compiled.root, options)
    except NormalizeError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    output = res.to_dict()
    if args.conflicts:
        output["conflicts"] = [c.to_dict() for c in recorder.conflicts]
    _emit(dumps_json(output, indent=None if args.compact else 2), args.out)
    return 0


def cmd_check_schema(args: argparse.Namespace) -> int:
    """Validate a schema document and list the entity types it declares."""

    if not os.path.isfile(args.schema):
        print(f"error: file not found: {args.schema}", file=sys.stderr)
        return 2
    try:
        compiled = read_schema_file(args.schema)
    except NormalizeError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    summary = {
        "ok": True,
        "root": repr(compiled.root),
        "entities": {
            key: {"id_attribute": schema.id_attribute, "fields": sorted(schema.fields)}
            for key, schema in compiled.entities.items()
        },
    }
    print(dumps_json(summary))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the normtree API server."""

    try:
        import uvicorn
    except ImportError as e:
        print(f"error: uvicorn is required to serve the API: {e}", file=sys.stderr)
        return 2

    from normtree.api.server import create_app

    app = create_app()
    uvicorn.run(app, host=args.host, port=int(args.port), log_level=args.log_level.lower())
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    p = argparse.ArgumentParser(prog="normtree", description="Flatten nested JSON into entities + result")
    p.add_argument("--verbosity", default="warning", help="CLI logging level (default: warning)")
    sub = p.add_subparsers(dest="cmd", required=True)

    np = sub.add_parser("normalize", help="Normalize a JSON payload")
    np.add_argument("path", help="Path to JSON payload")
    np.add_argument("--schema", required=True, help="Path to JSON schema document")
    np.add_argument(
        "--embedded-key",
        default=DEFAULT_EMBEDDED_KEY,
        help=f"Reserved field for embedded related entities (default: {DEFAULT_EMBEDDED_KEY})",
    )
    np.add_argument("--conflicts", action="store_true", help="Include merge conflicts in the output")
    np.add_argument("--compact", action="store_true", help="Single-line JSON output")
    np.add_argument("--out", default=None, help="Write output to a file instead of stdout")
    np.set_defaults(func=cmd_normalize)

    cp = sub.add_parser("check-schema", help="Validate a schema document")
    cp.add_argument("schema", help="Path to JSON schema document")
    cp.set_defaults(func=cmd_check_schema)

    sv = sub.add_parser("serve", help="Run the normtree FastAPI server")
    sv.add_argument("--host", default="127.0.0.1", help="Bind host (default: 127.0.0.1)")
    sv.add_argument("--port", type=int, default=8080, help="Bind port (default: 8080)")
    sv.add_argument("--log-level", default="info", help="Uvicorn log level (default: info)")
    sv.set_defaults(func=cmd_serve)

    return p


def main(argv: List[str] | None = None) -> int:
    """CLI entry."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.verbosity.upper(), format="%(levelname)s %(name)s: %(message)s")
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
