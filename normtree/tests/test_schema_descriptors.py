import pytest

from normtree.core.exceptions import SchemaDefinitionError
from normtree.core.schema import (
    EntitySchema,
    SchemaKind,
    array_of,
    entity,
    schema_kind,
    union_of,
    values_of,
)


def test_entity_defaults_to_id_field():
    user = entity("users")

    assert user.key == "users"
    assert user.id_attribute == "id"
    assert user.get_id({"id": 7, "name": "x"}) == 7
    assert user.get_id({"name": "x"}) is None
    assert user.get_id(["not", "a", "mapping"]) is None


def test_entity_accepts_callable_id_attribute():
    article = entity("articles", id_attribute=lambda rec: f"{rec['slug']}-{rec['rev']}")

    assert article.get_id({"slug": "hello", "rev": 2}) == "hello-2"


def test_entity_rejects_bad_configuration():
    with pytest.raises(SchemaDefinitionError):
        entity("users", id_attribute=42)

    with pytest.raises(SchemaDefinitionError):
        entity("users", ["friend"])

    with pytest.raises(SchemaDefinitionError):
        EntitySchema("")


def test_define_allows_self_reference():
    user = entity("users")
    assert user.define({"friend": user}) is user
    assert user.fields["friend"] is user

    with pytest.raises(SchemaDefinitionError):
        user.define("friend")


def test_iterables_record_container_and_polymorphism():
    user = entity("users")

    arr = array_of(user)
    vals = values_of(user)
    assert arr.container == "array"
    assert vals.container == "values"
    assert not arr.is_polymorphic
    assert arr.item_schema is user

    poly = array_of({"user": user, "group": entity("groups")}, schema_attribute="type")
    assert poly.is_polymorphic
    assert poly.get_schema_key({"type": "group"}) == "group"


def test_polymorphic_iterable_requires_schema_map():
    with pytest.raises(SchemaDefinitionError):
        array_of(entity("users"), schema_attribute="type")


def test_union_requires_discriminator():
    post = entity("posts")

    with pytest.raises(SchemaDefinitionError):
        union_of({"post": post}, schema_attribute=None)

    with pytest.raises(SchemaDefinitionError):
        union_of({"post": post}, schema_attribute=3.5)

    u = union_of({"post": post}, schema_attribute=lambda item: item["kind"])
    assert u.get_schema_key({"kind": "post"}) == "post"


def test_schema_kind_classifies_every_variant():
    user = entity("users")

    assert schema_kind(user) is SchemaKind.ENTITY
    assert schema_kind(array_of(user)) is SchemaKind.ITERABLE
    assert schema_kind(union_of({"u": user}, schema_attribute="t")) is SchemaKind.UNION
    assert schema_kind({"author": user}) is SchemaKind.OBJECT
    assert schema_kind([user]) is None
    assert schema_kind(None) is None
    assert schema_kind("users") is None
