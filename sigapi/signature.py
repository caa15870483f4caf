"""
Handler Signature Analysis

Decomposes the annotations of a route handler into type chains and
classifies each parameter (and the return type) into a semantic role.

    async def get_todo(id: Path[int]) -> Json[Todo]: ...

    parse_handler_arguments(get_todo)
    # [HandlerArgument(role=Role.PATH, expression='int', ...)]
    parse_handler_return(get_todo)
    # HandlerArgument(role=Role.BODY, expression='Todo', ...)
"""

from __future__ import annotations

import inspect
import logging
import types
from dataclasses import dataclass
from typing import (
    Annotated,
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from .extractors import ROLE_TABLE, Role
from .faults import (
    MissingReturnTypeFault,
    UnsupportedParameterTypeFault,
    UnsupportedTypeArgumentFault,
)

logger = logging.getLogger("sigapi.signature")

_UNION_ORIGINS = {Union, types.UnionType}


# ─── Type Chains ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TypeChain:
    """
    Type names peeled outer-to-inner from a (possibly nested) generic.

    ``Json[list[Todo]]`` -> ``("Json", "list", "Todo")``. Never empty.
    """
    names: Tuple[str, ...]

    @property
    def outer(self) -> str:
        return self.names[0]

    @property
    def tail(self) -> Tuple[str, ...]:
        return self.names[1:]

    def expression(self) -> str:
        """Rejoin the tail with bracket nesting: ``("list", "Todo")`` -> ``list[Todo]``."""
        return join_expression(self.tail)

    def __len__(self) -> int:
        return len(self.names)

    def __iter__(self):
        return iter(self.names)


def join_expression(names: Tuple[str, ...] | List[str]) -> str:
    """Join type names as nested brackets."""
    if not names:
        return ""
    return "[".join(names) + "]" * (len(names) - 1)


def unwrap_annotated(annotation: Any) -> Any:
    """Strip one level of ``Annotated[X, ...]``."""
    if get_origin(annotation) is Annotated:
        return get_args(annotation)[0]
    return annotation


def type_name(annotation: Any) -> Optional[str]:
    """
    Name of a name-based annotation, or None.

    Classes and parametrised generics are named (``list[int]`` -> ``list``).
    Unions, literals, type variables and unresolved forward references are not.
    """
    if annotation is Any:
        return "Any"

    origin = get_origin(annotation)
    if origin in _UNION_ORIGINS:
        return None

    target = origin if origin is not None else annotation
    if isinstance(target, type):
        return target.__name__
    return None


def is_named(annotation: Any) -> bool:
    return type_name(annotation) is not None


def type_chain(annotation: Any, *, strict: bool = False) -> TypeChain:
    """
    Build the type chain of a name-based annotation.

    Generic arguments are followed when they are named directly or through
    one ``Annotated`` level. Other arguments stop that branch; with
    ``strict=True`` they raise ``UnsupportedTypeArgumentFault`` instead.

    Raises:
        TypeError: if ``annotation`` itself is not name-based
    """
    if not is_named(annotation):
        raise TypeError(f"{annotation!r} is not a named type")

    names: List[str] = []
    _collect(annotation, names, strict=strict, root=annotation)
    return TypeChain(tuple(names))


def _collect(annotation: Any, names: List[str], *, strict: bool, root: Any) -> None:
    names.append(type_name(annotation))

    if get_origin(annotation) is None:
        return

    for argument in get_args(annotation):
        candidate = unwrap_annotated(argument)
        if is_named(candidate):
            _collect(candidate, names, strict=strict, root=root)
        elif strict:
            raise UnsupportedTypeArgumentFault(root, argument)
        else:
            logger.debug("Dropping type argument %r of %r from type chain", argument, root)


# ─── Classification ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class HandlerArgument:
    """
    A classified handler parameter (or return type).

    Attributes:
        role: Semantic role from the wrapper name
        expression: Inner type expression rebuilt from the type chain
        annotation: Inner annotation object, used for schema resolution
        name: Parameter name (None for return types)
    """
    role: Role
    expression: str
    annotation: Any = Any
    name: Optional[str] = None


def classify(
    annotation: Any,
    *,
    roles: Optional[Mapping[str, Role]] = None,
    strict: bool = False,
    name: Optional[str] = None,
) -> Optional[HandlerArgument]:
    """
    Classify a name-based annotation by its outer wrapper.

    Returns None when the wrapper is not in the role table.
    """
    annotation = unwrap_annotated(annotation)
    chain = type_chain(annotation, strict=strict)

    role = (roles if roles is not None else ROLE_TABLE).get(chain.outer)
    if role is None:
        logger.debug("Ignoring %s: wrapper %r has no role", name or "return type", chain.outer)
        return None

    args = get_args(annotation) if get_origin(annotation) is not None else ()
    inner = args[0] if args else Any

    return HandlerArgument(
        role=role,
        expression=chain.expression(),
        annotation=inner,
        name=name,
    )


def handler_name(handler: Callable[..., Any]) -> str:
    return getattr(handler, "__name__", type(handler).__name__)


def _annotation_holder(key: str, raw: Any) -> Callable[[], None]:
    def holder():
        pass
    holder.__annotations__ = {key: raw}
    return holder


def _resolve_hints(handler: Callable[..., Any]) -> Tuple[Dict[str, Any], Dict[str, str]]:
    """
    Resolved annotations of ``handler``, plus the resolution error of every
    annotation that could not be evaluated.

    Unresolvable forward references stay as raw strings and are rejected
    as non-named annotations by the callers. The other annotations are
    still resolved.
    """
    target = inspect.unwrap(handler)
    try:
        return get_type_hints(target, include_extras=True), {}
    except (NameError, TypeError) as exc:
        logger.debug("Resolving annotations of %s one by one: %s", handler_name(handler), exc)

    globalns = getattr(target, "__globals__", None)
    hints: Dict[str, Any] = {}
    errors: Dict[str, str] = {}
    for key, raw in (getattr(target, "__annotations__", None) or {}).items():
        try:
            hints[key] = get_type_hints(
                _annotation_holder(key, raw), globalns=globalns, include_extras=True,
            )[key]
        except (NameError, TypeError) as exc:
            hints[key] = raw
            errors[key] = str(exc)
    return hints, errors


def parse_handler_arguments(
    handler: Callable[..., Any],
    *,
    roles: Optional[Mapping[str, Role]] = None,
    strict: bool = False,
) -> List[HandlerArgument]:
    """
    Classify every declared parameter of ``handler`` in declaration order.

    Parameters with an unrecognised wrapper are omitted.

    Raises:
        UnsupportedParameterTypeFault: a parameter has no annotation, or an
            annotation that is not a named type
        UnsupportedTypeArgumentFault: ``strict`` and a generic argument is
            not a named type
    """
    hints, errors = _resolve_hints(handler)
    name = handler_name(handler)
    arguments: List[HandlerArgument] = []

    for param in inspect.signature(handler).parameters.values():
        annotation = hints.get(param.name, param.annotation)
        if annotation is inspect.Parameter.empty:
            raise UnsupportedParameterTypeFault(name, param.name)

        if not is_named(unwrap_annotated(annotation)):
            metadata = {"error": errors[param.name]} if param.name in errors else {}
            raise UnsupportedParameterTypeFault(name, param.name, annotation, metadata=metadata)

        argument = classify(annotation, roles=roles, strict=strict, name=param.name)
        if argument is not None:
            arguments.append(argument)

    return arguments


def parse_handler_return(
    handler: Callable[..., Any],
    *,
    roles: Optional[Mapping[str, Role]] = None,
    strict: bool = False,
) -> Optional[HandlerArgument]:
    """
    Classify the declared return type of ``handler``.

    Returns None for an opaque response (unrecognised wrapper or a type
    that is not name-based).

    Raises:
        MissingReturnTypeFault: no return annotation at all
    """
    hints, _ = _resolve_hints(handler)
    annotation = hints.get("return", inspect.signature(handler).return_annotation)

    if annotation is inspect.Signature.empty:
        raise MissingReturnTypeFault(handler_name(handler))

    if not is_named(unwrap_annotated(annotation)):
        logger.debug("Return type %r of %s is opaque", annotation, handler_name(handler))
        return None

    return classify(annotation, roles=roles, strict=strict)
