"""
Extractor markers for handler parameters.

Handlers declare the role of each parameter through the wrapper they are
annotated with::

    async def update_todo(id: Path[int], body: Json[Todo]) -> Json[Todo]:
        ...

Roles are looked up by wrapper *name* through ``ROLE_TABLE``, so wrappers
defined elsewhere under the same names classify the same way.
"""

from enum import Enum
from typing import Any, Dict, Generic, Mapping, TypeVar

T = TypeVar("T")


class Role(str, Enum):
    """Semantic role of a handler parameter."""
    BODY = "body"
    QUERY = "query"
    STATE = "state"
    PATH = "path"


class Extractor(Generic[T]):
    """
    Base wrapper carrying an extracted value.

    A dispatch layer builds these around the values it extracts from a
    request; documentation only looks at the annotation.
    """

    __slots__ = ("value",)

    def __init__(self, value: T):
        self.value = value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"

    def __eq__(self, other: Any) -> bool:
        if type(other) is type(self):
            return self.value == other.value
        return NotImplemented

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.value))


class Json(Extractor[T]):
    """JSON request body, or JSON response body when used as return type."""


class Query(Extractor[T]):
    """Query-string parameter set."""


class Path(Extractor[T]):
    """Path placeholder value."""


class State(Extractor[T]):
    """Shared application state."""


ROLE_TABLE: Dict[str, Role] = {
    "Json": Role.BODY,
    "Query": Role.QUERY,
    "State": Role.STATE,
    "Path": Role.PATH,
}


def build_role_table(extra: Mapping[str, Any] | None = None) -> Dict[str, Role]:
    """
    Merge extra ``name -> role`` entries over the default table.

    Role values may be given as ``Role`` members or their string values.
    """
    table = dict(ROLE_TABLE)
    for name, role in (extra or {}).items():
        table[name] = Role(role)
    return table
