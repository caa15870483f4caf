"""
Operation registry and document cache.

The registry is an append-only list of operation fragments. The cache
drains it once per epoch and folds the fragments into one document:

- fragments sharing a canonical path merge their method slots
- a later fragment for the same (path, method) replaces the earlier one
- registrations made after the build stay invisible until ``reset()``

Both structures carry their own lock. Whenever both are needed the cache
lock is taken first.
"""

from __future__ import annotations

import copy
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from .config import OpenAPIConfig
from .document import OpenAPIDocument
from .operation import OperationDescriptor

logger = logging.getLogger("sigapi.registry")

Initializer = Callable[[], Union[OpenAPIConfig, Mapping[str, Any]]]


@dataclass(frozen=True)
class RegistryEntry:
    """One canonical path carrying exactly one method -> operation mapping."""
    path: str
    method: str
    operation: OperationDescriptor


class OperationRegistry:
    """Lock-guarded, ordered, append-only store of registry entries."""

    def __init__(self):
        self._entries: List[RegistryEntry] = []
        self._lock = threading.Lock()

    def register(self, entry: RegistryEntry) -> None:
        """Append an entry. Duplicate (path, method) pairs are kept."""
        with self._lock:
            self._entries.append(entry)
        logger.debug("Registered %s %s (%s)", entry.method, entry.path, entry.operation.operation_id)

    def drain(self) -> List[RegistryEntry]:
        """Remove and return every entry, in insertion order."""
        with self._lock:
            entries, self._entries = self._entries, []
        return entries

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()

    def entries(self) -> List[RegistryEntry]:
        """Snapshot of pending entries."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def fold_entries(
    entries: List[RegistryEntry],
) -> Tuple[Dict[str, Dict[str, Any]], Dict[str, Any]]:
    """
    Merge entries into an ordered ``path -> {method: operation}`` map.

    Returns:
        (paths, component schemas)
    """
    paths: Dict[str, Dict[str, Any]] = {}
    components: Dict[str, Any] = {}

    for entry in entries:
        paths.setdefault(entry.path, {})[entry.method.lower()] = entry.operation.to_openapi()
        components.update(entry.operation.components)

    return paths, components


def _document_base(initializer: Initializer) -> Dict[str, Any]:
    base = initializer()
    if isinstance(base, OpenAPIConfig):
        return base.build_document()
    if isinstance(base, Mapping):
        spec = copy.deepcopy(dict(base))
        spec.setdefault("openapi", "3.1.0")
        spec.setdefault("info", {"title": "", "version": ""})
        return spec
    raise TypeError(
        f"Document initializer must return OpenAPIConfig or a mapping, got {type(base).__name__}"
    )


class DocumentCache:
    """Holds at most one built document."""

    def __init__(self):
        self._document: Optional[OpenAPIDocument] = None
        self._lock = threading.Lock()

    @property
    def is_built(self) -> bool:
        with self._lock:
            return self._document is not None

    def build_or_get(self, initializer: Initializer, registry: OperationRegistry) -> OpenAPIDocument:
        """
        Return the cached document, building it from ``registry`` if empty.

        ``initializer`` is only called when a build happens.
        """
        with self._lock:
            if self._document is not None:
                return self._document

            entries = registry.drain()
            paths, components = fold_entries(entries)

            spec = _document_base(initializer)
            spec["paths"] = paths
            if components:
                schemas = spec.setdefault("components", {}).setdefault("schemas", {})
                schemas.update(components)

            self._document = OpenAPIDocument(spec)
            logger.info(
                "Built OpenAPI document: %d path(s) from %d registration(s)",
                len(paths), len(entries),
            )
            return self._document

    def reset(self, registry: OperationRegistry) -> None:
        """Clear ``registry`` and drop the cached document."""
        with self._lock:
            registry.reset()
            self._document = None
