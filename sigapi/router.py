"""
Router - collects documented handlers for a dispatch layer.

Adding a handler registers its operation and keeps the resulting binding.
Request matching is left to whatever server the bindings are handed to.

    router = (
        Router()
        .add(list_todos)
        .add(get_todo)
    )
    for binding in router:
        app.add_route(binding.path, binding.handler, methods=[binding.method])
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, List, Optional

from .context import DocContext, RouteBinding, default_context


class Router:
    """
    Ordered collection of route bindings.

    Args:
        context: Documentation context receiving registrations; the default
            context when omitted.
    """

    def __init__(self, context: Optional[DocContext] = None):
        self.context = context or default_context()
        self._routes: List[RouteBinding] = []

    def add(self, handler: Callable[..., Any], **kwargs) -> "Router":
        """
        Register ``handler`` and keep its binding.

        Keyword arguments override ``@endpoint`` metadata (``method``,
        ``path``, ``description``...). Faults propagate and leave the router
        unchanged.
        """
        self._routes.append(self.context.register(handler, **kwargs))
        return self

    @property
    def routes(self) -> List[RouteBinding]:
        return list(self._routes)

    def methods_for(self, path: str) -> List[str]:
        """Methods bound on a canonical path, in registration order."""
        methods: List[str] = []
        for binding in self._routes:
            if binding.path == path and binding.method not in methods:
                methods.append(binding.method)
        return methods

    def by_path(self) -> Dict[str, List[RouteBinding]]:
        grouped: Dict[str, List[RouteBinding]] = {}
        for binding in self._routes:
            grouped.setdefault(binding.path, []).append(binding)
        return grouped

    def __iter__(self) -> Iterator[RouteBinding]:
        return iter(list(self._routes))

    def __len__(self) -> int:
        return len(self._routes)

    def __repr__(self) -> str:
        return f"Router(routes={len(self._routes)})"
