import logging

from normtree.core.normalization import ConflictRecorder, MergeConflict, merge_into_entity
from normtree.core.normalization.policies import values_equal


def test_absent_fields_are_adopted():
    stored = {"id": 1}
    merge_into_entity(stored, {"id": 1, "name": "Alice"}, "users")

    assert stored == {"id": 1, "name": "Alice"}


def test_equal_values_merge_silently(caplog):
    stored = {"id": 1, "tags": ["a", "b"], "profile": {"age": 3}}
    with caplog.at_level(logging.WARNING, logger="normtree.normalize"):
        merge_into_entity(stored, {"id": 1, "tags": ["a", "b"], "profile": {"age": 3}}, "users")

    assert stored == {"id": 1, "tags": ["a", "b"], "profile": {"age": 3}}
    assert caplog.records == []


def test_conflict_keeps_existing_and_warns(caplog):
    stored = {"id": 1, "name": "A"}
    with caplog.at_level(logging.WARNING, logger="normtree.normalize"):
        merge_into_entity(stored, {"id": 1, "name": "B"}, "users")

    assert stored["name"] == "A"
    assert len(caplog.records) == 1
    rec = caplog.records[0]
    assert rec.levelno == logging.WARNING
    assert rec.entity_key == "users"
    assert rec.field == "name"
    assert rec.existing == "A"
    assert rec.incoming == "B"
    assert "'A'" in rec.getMessage() and "'B'" in rec.getMessage()


def test_conflict_recorder_collects_conflicts(caplog):
    recorder = ConflictRecorder(log_conflicts=False)
    stored = {"id": 1, "name": "A", "age": 30}
    with caplog.at_level(logging.WARNING, logger="normtree.normalize"):
        recorder(stored, {"id": 1, "name": "B", "age": 30, "city": "Oslo"}, "users")

    assert stored == {"id": 1, "name": "A", "age": 30, "city": "Oslo"}
    assert recorder.conflicts == [MergeConflict(entity_key="users", field="name", existing="A", incoming="B")]
    assert recorder.conflicts[0].to_dict() == {
        "entity_key": "users",
        "field": "name",
        "existing": "A",
        "incoming": "B",
    }
    assert caplog.records == []


def test_boolean_never_equals_number(caplog):
    stored = {"id": 1, "active": 1}
    with caplog.at_level(logging.WARNING, logger="normtree.normalize"):
        merge_into_entity(stored, {"id": 1, "active": True}, "users")

    assert stored["active"] == 1 and type(stored["active"]) is int
    assert len(caplog.records) == 1
    assert (caplog.records[0].existing, caplog.records[0].incoming) == (1, True)


def test_values_equal_follows_json_semantics():
    assert values_equal({"a": [1, 2.0]}, {"a": (1, 2)})
    assert values_equal(float("nan"), float("nan"))
    assert not values_equal(0, False)
    assert not values_equal([1, True], [1, 1])
    assert not values_equal({"a": 1}, {"a": 1, "b": None})
    assert not values_equal([1], {"0": 1})
    assert not values_equal("1", 1)
