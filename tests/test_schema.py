"""
Schema resolution (schema.py)

Tests JSON schemas for builtin types, containers, enums, dataclasses and
annotated classes, plus query parameter sets.
"""

import datetime
import enum
import uuid
from dataclasses import dataclass, field
from typing import Annotated, Any, Dict, List, Literal, Optional, Sequence, Tuple

import pytest

from sigapi.schema import ParameterSetResolver, SchemaResolver, is_object_type, object_fields


@dataclass
class Todo:
    id: int
    title: str
    completed: bool = False


@dataclass
class Node:
    """Tree node."""
    name: str
    children: List["Node"] = field(default_factory=list)


@dataclass
class Board:
    owner: Todo
    todos: List[Todo]


class Color(enum.Enum):
    RED = "red"
    GREEN = "green"


class Pagination:
    page: int = 1
    size: int = 20
    cursor: Optional[str]


class Money:
    @classmethod
    def __openapi_schema__(cls):
        return {"type": "string", "pattern": r"^\d+\.\d{2}$"}


class SortParams:
    @classmethod
    def __openapi_params__(cls):
        return [{"name": "sort", "in": "query", "required": False, "schema": {"type": "string"}}]


class Empty:
    pass


@dataclass
class Comment:
    body: str
    note: Optional[str] = None
    reply_to: Optional[Todo] = None


def make_local_todo():
    @dataclass
    class Todo:
        note: str

    return Todo


@pytest.fixture
def resolver():
    return SchemaResolver()


# ============================================================================
# Builtins
# ============================================================================

class TestPrimitives:

    @pytest.mark.parametrize("tp,expected", [
        (str, {"type": "string"}),
        (int, {"type": "integer"}),
        (float, {"type": "number", "format": "double"}),
        (bool, {"type": "boolean"}),
        (bytes, {"type": "string", "format": "binary"}),
        (datetime.datetime, {"type": "string", "format": "date-time"}),
        (uuid.UUID, {"type": "string", "format": "uuid"}),
    ])
    def test_mapping(self, resolver, tp, expected):
        assert resolver.schema(tp) == expected

    def test_any_is_unconstrained(self, resolver):
        assert resolver.schema(Any) == {}

    def test_mapping_not_shared(self, resolver):
        resolver.schema(int)["type"] = "changed"
        assert resolver.schema(int) == {"type": "integer"}


class TestContainers:

    def test_list(self, resolver):
        assert resolver.schema(list[str]) == {"type": "array", "items": {"type": "string"}}

    def test_typing_list_and_sequence(self, resolver):
        assert resolver.schema(List[int]) == {"type": "array", "items": {"type": "integer"}}
        assert resolver.schema(Sequence[int]) == {"type": "array", "items": {"type": "integer"}}

    def test_set(self, resolver):
        assert resolver.schema(set[int]) == {
            "type": "array", "items": {"type": "integer"}, "uniqueItems": True,
        }

    def test_fixed_tuple(self, resolver):
        schema = resolver.schema(Tuple[int, str])
        assert schema["prefixItems"] == [{"type": "integer"}, {"type": "string"}]
        assert schema["minItems"] == schema["maxItems"] == 2

    def test_variadic_tuple(self, resolver):
        assert resolver.schema(tuple[int, ...]) == {"type": "array", "items": {"type": "integer"}}

    def test_dict(self, resolver):
        assert resolver.schema(Dict[str, int]) == {
            "type": "object", "additionalProperties": {"type": "integer"},
        }

    def test_bare_containers(self, resolver):
        assert resolver.schema(list) == {"type": "array"}
        assert resolver.schema(dict) == {"type": "object"}


class TestSpecialForms:

    def test_optional_allows_null(self, resolver):
        assert resolver.schema(Optional[int]) == {"type": ["integer", "null"]}

    def test_union(self, resolver):
        assert resolver.schema(int | str) == {"anyOf": [{"type": "integer"}, {"type": "string"}]}

    def test_optional_object_is_any_of_null(self, resolver):
        assert resolver.schema(Optional[Todo]) == {
            "anyOf": [{"$ref": "#/components/schemas/Todo"}, {"type": "null"}],
        }

    def test_optional_enum_is_any_of_null(self, resolver):
        assert resolver.schema(Optional[Color]) == {
            "anyOf": [{"enum": ["red", "green"], "type": "string"}, {"type": "null"}],
        }

    def test_union_with_none(self, resolver):
        assert resolver.schema(int | str | None) == {
            "anyOf": [{"type": "integer"}, {"type": "string"}, {"type": "null"}],
        }

    def test_literal(self, resolver):
        assert resolver.schema(Literal["a", "b"]) == {"enum": ["a", "b"], "type": "string"}

    def test_mixed_literal_has_no_type(self, resolver):
        assert resolver.schema(Literal["a", 1]) == {"enum": ["a", 1]}

    def test_annotated_unwrapped(self, resolver):
        assert resolver.schema(Annotated[int, "id"]) == {"type": "integer"}

    def test_enum(self, resolver):
        assert resolver.schema(Color) == {"enum": ["red", "green"], "type": "string"}

    def test_class_without_fields(self, resolver):
        assert resolver.schema(Empty) == {"type": "object"}


# ============================================================================
# Objects
# ============================================================================

class TestObjects:

    def test_dataclass_ref(self, resolver):
        components = {}
        assert resolver.schema(Todo, "Todo", components) == {"$ref": "#/components/schemas/Todo"}
        assert components["Todo"] == {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "title": {"type": "string"},
                "completed": {"type": "boolean", "default": False},
            },
            "required": ["id", "title"],
        }

    def test_list_of_objects(self, resolver):
        components = {}
        schema = resolver.schema(list[Todo], "list[Todo]", components)
        assert schema == {"type": "array", "items": {"$ref": "#/components/schemas/Todo"}}
        assert "Todo" in components

    def test_nested_objects_registered(self, resolver):
        components = {}
        resolver.schema(Board, "Board", components)
        assert set(components) == {"Board", "Todo"}
        assert components["Board"]["properties"]["todos"] == {
            "type": "array", "items": {"$ref": "#/components/schemas/Todo"},
        }

    def test_self_reference_terminates(self, resolver):
        components = {}
        resolver.schema(Node, "Node", components)
        node = components["Node"]
        assert node["properties"]["children"]["items"] == {"$ref": "#/components/schemas/Node"}
        assert node["required"] == ["name"]
        assert node["description"] == "Tree node."

    def test_generated_dataclass_doc_skipped(self, resolver):
        components = {}
        resolver.schema(Todo, components=components)
        assert "description" not in components["Todo"]

    def test_annotated_class(self, resolver):
        components = {}
        resolver.schema(Pagination, components=components)
        schema = components["Pagination"]
        assert schema["properties"]["page"] == {"type": "integer", "default": 1}
        assert schema["properties"]["cursor"] == {"type": ["string", "null"]}
        assert schema["required"] == ["cursor"]

    def test_optional_fields_with_none_default(self, resolver):
        components = {}
        resolver.schema(Comment, components=components)
        properties = components["Comment"]["properties"]
        assert properties["note"] == {"type": ["string", "null"], "default": None}
        assert properties["reply_to"] == {
            "anyOf": [{"$ref": "#/components/schemas/Todo"}, {"type": "null"}],
            "default": None,
        }
        assert components["Comment"]["required"] == ["body"]
        assert "nullable" not in str(components)

    def test_inline_objects(self):
        resolver = SchemaResolver(inline_objects=True)
        components = {}
        schema = resolver.schema(Todo, components=components)
        assert schema["type"] == "object"
        assert components == {}

    def test_schema_hook(self, resolver):
        assert resolver.schema(Money)["pattern"] == r"^\d+\.\d{2}$"

    def test_override_by_expression(self):
        resolver = SchemaResolver({"list[Todo]": {"type": "array", "maxItems": 10}})
        assert resolver.schema(list[Todo], "list[Todo]") == {"type": "array", "maxItems": 10}
        assert resolver.schema(list[Todo], "list[Node]")["items"] == {"$ref": "#/components/schemas/Todo"}

    def test_is_object_type(self):
        assert is_object_type(Todo)
        assert is_object_type(Pagination)
        assert not is_object_type(Empty)
        assert not is_object_type(int)

    def test_object_fields_default_factory(self):
        fields = {name: default for name, _, default in object_fields(Node)}
        assert "children" in fields


class TestComponentNames:

    def test_first_class_keeps_bare_name(self, resolver):
        assert resolver.component_name(Todo) == "Todo"
        assert resolver.component_name(Todo) == "Todo"

    def test_same_name_different_class_is_qualified(self, resolver):
        local_todo = make_local_todo()
        components = {}

        assert resolver.schema(Todo, components=components) == {"$ref": "#/components/schemas/Todo"}
        other = resolver.schema(local_todo, components=components)

        name = resolver.component_name(local_todo)
        assert name != "Todo"
        assert name.endswith("make_local_todo_locals_Todo")
        assert other == {"$ref": f"#/components/schemas/{name}"}
        assert set(components["Todo"]["properties"]) == {"id", "title", "completed"}
        assert set(components[name]["properties"]) == {"note"}

    def test_repeated_qualified_name_gets_suffix(self, resolver):
        first, second = make_local_todo(), make_local_todo()
        resolver.component_name(Todo)
        names = {resolver.component_name(first), resolver.component_name(second)}
        assert len(names) == 2
        assert "Todo" not in names

    def test_names_are_per_resolver(self):
        local_todo = make_local_todo()
        assert SchemaResolver().component_name(local_todo) == "Todo"


# ============================================================================
# Parameter sets
# ============================================================================

class TestParameterSetResolver:

    def test_dataclass_fields(self):
        params = ParameterSetResolver().parameters(Todo)
        assert params == [
            {"name": "id", "in": "query", "required": True, "schema": {"type": "integer"}},
            {"name": "title", "in": "query", "required": True, "schema": {"type": "string"}},
            {"name": "completed", "in": "query", "required": False,
             "schema": {"type": "boolean", "default": False}},
        ]

    def test_default_factory_not_required(self):
        params = {p["name"]: p for p in ParameterSetResolver().parameters(Node)}
        assert params["children"]["required"] is False
        assert "default" not in params["children"]["schema"]

    def test_location(self):
        params = ParameterSetResolver().parameters(Pagination, "header")
        assert {p["in"] for p in params} == {"header"}

    def test_hook(self):
        params = ParameterSetResolver().parameters(SortParams)
        assert [p["name"] for p in params] == ["sort"]

    def test_annotated_unwrapped(self):
        params = ParameterSetResolver().parameters(Annotated[Todo, "filters"])
        assert len(params) == 3

    def test_no_fields(self):
        assert ParameterSetResolver().parameters(Empty) == []
        assert ParameterSetResolver().parameters(int) == []
