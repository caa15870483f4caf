"""
Read-only view over a built OpenAPI document.
"""

from __future__ import annotations

import copy
import json
from typing import Any, Dict, Iterator, Mapping

import yaml


class OpenAPIDocument(Mapping[str, Any]):
    """
    Built OpenAPI document.

    Shared read-only once cached: lookups return the stored values, so
    callers wanting to modify the document should work on ``to_dict()``.

    Usage::

        document = build_openapi()
        document["paths"]["/todos"]["get"]["operationId"]
        document.to_json(indent=2)
    """

    __slots__ = ("_spec",)

    def __init__(self, spec: Dict[str, Any]):
        self._spec = spec

    # ── Mapping protocol ──────────────────────────────────────────────────

    def __getitem__(self, key: str) -> Any:
        return self._spec[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._spec)

    def __len__(self) -> int:
        return len(self._spec)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, OpenAPIDocument):
            return self._spec == other._spec
        if isinstance(other, Mapping):
            return self._spec == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"OpenAPIDocument(title={self.info.get('title')!r}, paths={len(self.paths)})"

    # ── Sections ──────────────────────────────────────────────────────────

    @property
    def openapi(self) -> str:
        return self._spec.get("openapi", "")

    @property
    def info(self) -> Dict[str, Any]:
        return self._spec.get("info", {})

    @property
    def paths(self) -> Dict[str, Dict[str, Any]]:
        return self._spec.get("paths", {})

    @property
    def components(self) -> Dict[str, Any]:
        return self._spec.get("components", {})

    def operation(self, path: str, method: str) -> Dict[str, Any]:
        """Operation object for ``method`` on ``path`` (KeyError if absent)."""
        return self.paths[path][method.lower()]

    # ── Export ────────────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        """Deep copy of the document."""
        return copy.deepcopy(self._spec)

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self._spec, indent=indent, default=str)

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, allow_unicode=True)
