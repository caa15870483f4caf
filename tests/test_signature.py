"""
Handler signature analysis (signature.py)

Tests type chains, classification by wrapper name, and parameter/return
parsing of handlers.
"""

from dataclasses import dataclass
from typing import Annotated, Any, Generic, Literal, Optional, TypeVar

import pytest

from sigapi.extractors import Extractor, Json, Path, Query, Role, State, build_role_table
from sigapi.faults import (
    MissingReturnTypeFault,
    UnsupportedParameterTypeFault,
    UnsupportedTypeArgumentFault,
)
from sigapi.signature import (
    TypeChain,
    classify,
    join_expression,
    parse_handler_arguments,
    parse_handler_return,
    type_chain,
    type_name,
)

T = TypeVar("T")


@dataclass
class Todo:
    id: int
    title: str


class Page(Generic[T]):
    items: list


class Body(Extractor[T]):
    """Custom body marker registered through the role table."""


# ============================================================================
# Type chains
# ============================================================================

class TestTypeChain:

    def test_plain_type(self):
        chain = type_chain(int)
        assert chain.names == ("int",)
        assert chain.outer == "int"
        assert chain.expression() == ""

    def test_nested_generic(self):
        chain = type_chain(Json[list[Todo]])
        assert chain.names == ("Json", "list", "Todo")
        assert chain.tail == ("list", "Todo")
        assert chain.expression() == "list[Todo]"

    def test_chain_never_empty(self):
        chain = type_chain(Json)
        assert len(chain) == 1
        assert list(chain) == ["Json"]

    def test_user_generic(self):
        assert type_chain(Json[Page[Todo]]).names == ("Json", "Page", "Todo")

    def test_annotated_argument_is_followed(self):
        chain = type_chain(Json[Annotated[Todo, "doc"]])
        assert chain.names == ("Json", "Todo")

    def test_non_named_argument_dropped(self):
        chain = type_chain(Json[list[Literal["a", "b"]]])
        assert chain.names == ("Json", "list")

    def test_union_argument_dropped(self):
        chain = type_chain(Json[Optional[int]])
        assert chain.names == ("Json",)

    def test_strict_raises_on_non_named_argument(self):
        with pytest.raises(UnsupportedTypeArgumentFault) as exc_info:
            type_chain(Json[list[Literal["a"]]], strict=True)
        assert exc_info.value.code == "UNSUPPORTED_TYPE_ARGUMENT"

    def test_multi_argument_generic_is_flattened(self):
        chain = type_chain(Json[dict[str, int]])
        assert chain.names == ("Json", "dict", "str", "int")

    def test_root_must_be_named(self):
        with pytest.raises(TypeError):
            type_chain(Optional[int])

    def test_any_is_named(self):
        assert type_name(Any) == "Any"
        assert type_chain(Json[Any]).names == ("Json", "Any")


class TestJoinExpression:

    def test_empty(self):
        assert join_expression(()) == ""

    def test_single(self):
        assert join_expression(["Todo"]) == "Todo"

    def test_nesting(self):
        assert join_expression(["list", "set", "Todo"]) == "list[set[Todo]]"

    @pytest.mark.parametrize("annotation,expected", [
        (Json[int], "int"),
        (Json[list[int]], "list[int]"),
        (Json[list[set[Todo]]], "list[set[Todo]]"),
        (Query[Page[list[Todo]]], "Page[list[Todo]]"),
        (Path[frozenset[tuple[str]]], "frozenset[tuple[str]]"),
    ])
    def test_expression_round_trips_inner_nesting(self, annotation, expected):
        assert TypeChain(type_chain(annotation).names).expression() == expected


# ============================================================================
# Classification
# ============================================================================

class TestClassify:

    @pytest.mark.parametrize("annotation,role", [
        (Json[Todo], Role.BODY),
        (Query[Todo], Role.QUERY),
        (State[Todo], Role.STATE),
        (Path[int], Role.PATH),
    ])
    def test_roles(self, annotation, role):
        assert classify(annotation).role is role

    def test_carries_inner_annotation(self):
        argument = classify(Json[list[Todo]], name="todos")
        assert argument.expression == "list[Todo]"
        assert argument.annotation == list[Todo]
        assert argument.name == "todos"

    def test_unknown_wrapper_is_ignored(self):
        assert classify(int) is None
        assert classify(list[Todo]) is None

    def test_bare_marker(self):
        argument = classify(Json)
        assert argument.role is Role.BODY
        assert argument.expression == ""
        assert argument.annotation is Any

    def test_annotated_root(self):
        argument = classify(Annotated[Json[Todo], "metadata"])
        assert argument.role is Role.BODY
        assert argument.expression == "Todo"

    def test_custom_role_table(self):
        roles = build_role_table({"Body": "body"})
        argument = classify(Body[Todo], roles=roles)
        assert argument.role is Role.BODY
        assert classify(Body[Todo]) is None

    def test_matching_is_by_name(self):
        class Json(Extractor[T]):
            pass

        assert classify(Json[int]).role is Role.BODY


# ============================================================================
# Handler parsing
# ============================================================================

class TestParseHandlerArguments:

    def test_declaration_order(self):
        async def handler(id: Path[int], todo: Json[Todo], q: Query[Todo]) -> Json[Todo]:
            ...

        arguments = parse_handler_arguments(handler)
        assert [a.role for a in arguments] == [Role.PATH, Role.BODY, Role.QUERY]
        assert [a.name for a in arguments] == ["id", "todo", "q"]

    def test_unrecognised_wrapper_omitted(self):
        async def handler(request: dict, id: Path[int]) -> Json[Todo]:
            ...

        arguments = parse_handler_arguments(handler)
        assert len(arguments) == 1
        assert arguments[0].name == "id"

    def test_no_parameters(self):
        async def handler() -> Json[str]:
            ...

        assert parse_handler_arguments(handler) == []

    def test_missing_annotation_fails(self):
        async def handler(id) -> Json[str]:
            ...

        with pytest.raises(UnsupportedParameterTypeFault) as exc_info:
            parse_handler_arguments(handler)
        assert exc_info.value.metadata["parameter"] == "id"
        assert exc_info.value.metadata["handler"] == "handler"

    def test_union_annotation_fails(self):
        async def handler(id: int | None) -> Json[str]:
            ...

        with pytest.raises(UnsupportedParameterTypeFault):
            parse_handler_arguments(handler)

    def test_unresolvable_forward_reference_fails(self):
        async def handler(todo: "NoSuchType") -> Json[str]:  # noqa: F821
            ...

        with pytest.raises(UnsupportedParameterTypeFault):
            parse_handler_arguments(handler)

    def test_unresolvable_reference_names_its_parameter(self):
        async def handler(id: "Path[int]", todo: "NoSuchType") -> "Json[str]":  # noqa: F821
            ...

        with pytest.raises(UnsupportedParameterTypeFault) as exc_info:
            parse_handler_arguments(handler)

        metadata = exc_info.value.metadata
        assert metadata["parameter"] == "todo"
        assert "NoSuchType" in metadata["error"]

    def test_resolvable_references_survive_a_bad_one(self):
        async def handler(id: "Path[int]", other: "NoSuchType") -> "Json[Todo]":  # noqa: F821
            ...

        returns = parse_handler_return(handler)
        assert returns.role is Role.BODY
        assert returns.annotation is Todo

    def test_strict_type_arguments(self):
        async def handler(kind: Query[list[Literal["a"]]]) -> Json[str]:
            ...

        assert parse_handler_arguments(handler)[0].expression == "list"
        with pytest.raises(UnsupportedTypeArgumentFault):
            parse_handler_arguments(handler, strict=True)


class TestParseHandlerReturn:

    def test_json_response(self):
        async def handler() -> Json[list[Todo]]:
            ...

        returned = parse_handler_return(handler)
        assert returned.role is Role.BODY
        assert returned.expression == "list[Todo]"
        assert returned.name is None

    def test_missing_return_type(self):
        async def handler():
            ...

        with pytest.raises(MissingReturnTypeFault) as exc_info:
            parse_handler_return(handler)
        assert exc_info.value.code == "MISSING_RETURN_TYPE"

    def test_opaque_class(self):
        async def handler() -> dict:
            ...

        assert parse_handler_return(handler) is None

    def test_opaque_union(self):
        async def handler() -> Json[Todo] | None:
            ...

        assert parse_handler_return(handler) is None

    def test_none_return(self):
        async def handler() -> None:
            ...

        assert parse_handler_return(handler) is None
