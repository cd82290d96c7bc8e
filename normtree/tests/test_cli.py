import json

from normtree.cli.main import build_parser, cmd_serve, main

SCHEMA = {
    "entities": {"users": {}, "posts": {"fields": {"author": "users"}}},
    "root": {"array_of": "posts"},
}


def _write(tmp_path, name, obj):
    p = tmp_path / name
    p.write_text(json.dumps(obj), encoding="utf-8")
    return str(p)


def test_cli_normalize_prints_entities_and_result(tmp_path, capsys):
    schema = _write(tmp_path, "schema.json", SCHEMA)
    data = _write(
        tmp_path,
        "data.json",
        [{"id": 1, "author": {"id": 7, "name": "A"}}, {"id": 2, "author": {"id": 7, "name": "B"}}],
    )

    rc = main(["normalize", data, "--schema", schema, "--conflicts"])

    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out["result"] == [1, 2]
    assert out["entities"]["users"] == {"7": {"id": 7, "name": "A"}}
    assert out["entities"]["posts"]["2"] == {"id": 2, "author": 7}
    assert out["conflicts"] == [{"entity_key": "users", "field": "name", "existing": "A", "incoming": "B"}]


def test_cli_normalize_writes_out_file_and_unwraps_envelope(tmp_path):
    schema = _write(tmp_path, "schema.json", SCHEMA)
    data = _write(tmp_path, "data.json", {"_embedded": {"posts": [{"id": 1}]}})
    out_path = tmp_path / "out.json"

    rc = main(["normalize", data, "--schema", schema, "--embedded-key", "_embedded", "--out", str(out_path)])

    assert rc == 0
    out = json.loads(out_path.read_text(encoding="utf-8"))
    assert out == {"entities": {"posts": {"1": {"id": 1}}}, "result": [1]}


def test_cli_normalize_rejects_scalar_payload(tmp_path, capsys):
    schema = _write(tmp_path, "schema.json", SCHEMA)
    data = _write(tmp_path, "data.json", 42)

    rc = main(["normalize", data, "--schema", schema])

    assert rc == 2
    assert "error:" in capsys.readouterr().err


def test_cli_normalize_missing_file(tmp_path, capsys):
    schema = _write(tmp_path, "schema.json", SCHEMA)

    rc = main(["normalize", str(tmp_path / "nope.json"), "--schema", schema])

    assert rc == 2
    assert "file not found" in capsys.readouterr().err


def test_cli_check_schema(tmp_path, capsys):
    schema = _write(tmp_path, "schema.json", SCHEMA)

    rc = main(["check-schema", schema])

    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out["ok"] is True
    assert out["entities"]["posts"] == {"id_attribute": "id", "fields": ["author"]}


def test_cli_check_schema_reports_bad_reference(tmp_path, capsys):
    bad = _write(tmp_path, "schema.json", {"entities": {}, "root": "ghosts"})

    rc = main(["check-schema", bad])

    assert rc == 2
    assert "ghosts" in capsys.readouterr().err


def test_serve_accepts_log_level():
    args = build_parser().parse_args(["serve", "--port", "9000", "--log-level", "debug"])

    assert args.func is cmd_serve
    assert (args.port, args.log_level) == (9000, "debug")
    assert args.verbosity == "warning"


def test_cli_verbosity_is_a_top_level_option():
    args = build_parser().parse_args(["--verbosity", "info", "check-schema", "schema.json"])

    assert args.verbosity == "info"
    assert args.schema == "schema.json"
