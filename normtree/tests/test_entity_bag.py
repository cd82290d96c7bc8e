from normtree.core.normalization import EntityBag


def test_slot_is_created_once_per_key_and_id():
    bag = EntityBag()

    first = bag.slot("users", 1)
    first["name"] = "Alice"
    again = bag.slot("users", 1)

    assert again is first
    assert bag.entities == {"users": {1: {"name": "Alice"}}}
    assert ("users", 1) in bag
    assert ("users", 2) not in bag
    assert ("groups", 1) not in bag


def test_ids_are_not_coerced():
    bag = EntityBag()
    bag.slot("users", 1)
    bag.slot("users", "1")

    assert bag.count("users") == 2


def test_count_and_iteration():
    bag = EntityBag()
    bag.slot("users", 1)
    bag.slot("users", 2)
    bag.slot("posts", "p1")

    assert bag.count() == 3
    assert bag.count("posts") == 1
    assert bag.count("missing") == 0
    assert bag.get("posts", "p1") == {}
    assert bag.get("posts", "nope") is None
    assert [(k, i) for k, i, _ in bag] == [("users", 1), ("users", 2), ("posts", "p1")]
