"""
Schema resolution for documented types.

Two collaborators are provided:

- ``SchemaResolver`` turns an annotation into a JSON Schema fragment.
  Dataclasses and annotated classes become ``$ref`` entries whose object
  schema is written into a ``components`` mapping.
- ``ParameterSetResolver`` turns an annotated class into a list of OpenAPI
  parameter objects (one per field), used for query strings.

Types can describe themselves through classmethods::

    class Money:
        @classmethod
        def __openapi_schema__(cls):
            return {"type": "string", "pattern": r"^\\d+\\.\\d{2}$"}

``None`` members of a union are documented the OpenAPI 3.1 way, as a
``"null"`` type rather than ``nullable``.

Component names are the class name. A second, different class with the
same name is filed under its module-qualified name (``app_models_Todo``).
The resolver remembers those names under a lock, so it can be shared
between threads and across operations of one document. ``reset_names``
forgets them.
"""

from __future__ import annotations

import copy
import dataclasses
import datetime
import decimal
import enum
import inspect
import logging
import re
import threading
import types
import uuid
from collections.abc import Mapping as AbcMapping, Sequence as AbcSequence
from typing import (
    Annotated,
    Any,
    Dict,
    List,
    Literal,
    Mapping,
    Optional,
    Tuple,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

logger = logging.getLogger("sigapi.schema")

REF_PREFIX = "#/components/schemas/"

_empty = inspect.Parameter.empty


# ─── Type → JSON Schema mapping ──────────────────────────────────────────────

_PYTHON_TYPE_MAP: Dict[type, Dict[str, str]] = {
    str: {"type": "string"},
    int: {"type": "integer"},
    float: {"type": "number", "format": "double"},
    bool: {"type": "boolean"},
    bytes: {"type": "string", "format": "binary"},
    type(None): {"type": "null"},
    decimal.Decimal: {"type": "number"},
    datetime.datetime: {"type": "string", "format": "date-time"},
    datetime.date: {"type": "string", "format": "date"},
    datetime.time: {"type": "string", "format": "time"},
    uuid.UUID: {"type": "string", "format": "uuid"},
}

_LIST_ORIGINS = (list, AbcSequence)
_SET_ORIGINS = (set, frozenset)
_DICT_ORIGINS = (dict, AbcMapping)
_UNION_ORIGINS = {Union, types.UnionType}


def _literal_type(values: Tuple[Any, ...]) -> Optional[str]:
    kinds = {type(v) for v in values}
    if len(kinds) != 1:
        return None
    return _PYTHON_TYPE_MAP.get(kinds.pop(), {}).get("type")


def _nullable(schema: Dict[str, Any]) -> Dict[str, Any]:
    """Allow ``null`` in addition to ``schema``."""
    kind = schema.get("type")
    if isinstance(kind, str) and "$ref" not in schema and "enum" not in schema:
        schema["type"] = [kind, "null"]
        return schema
    return {"anyOf": [schema, {"type": "null"}]}


def _qualified_component_name(cls: type) -> str:
    return re.sub(r"[^A-Za-z0-9_]+", "_", f"{cls.__module__}.{cls.__qualname__}")


def _json_default(value: Any) -> Any:
    """Default value as JSON, or _empty when it has no JSON form."""
    if isinstance(value, enum.Enum):
        value = value.value
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return _empty


def object_fields(cls: Any) -> List[Tuple[str, Any, Any]]:
    """
    ``(name, annotation, default)`` for each public field of a class.

    Dataclass fields use their declared defaults; other annotated classes
    use class attributes. Missing defaults are ``inspect.Parameter.empty``.
    """
    if not isinstance(cls, type):
        return []

    try:
        hints = get_type_hints(cls, include_extras=True)
    except (NameError, TypeError):
        hints = dict(getattr(cls, "__annotations__", {}) or {})

    if dataclasses.is_dataclass(cls):
        result = []
        for f in dataclasses.fields(cls):
            if f.name.startswith("_"):
                continue
            if f.default is not dataclasses.MISSING:
                default = f.default
            elif f.default_factory is not dataclasses.MISSING:
                default = dataclasses.MISSING
            else:
                default = _empty
            result.append((f.name, hints.get(f.name, f.type), default))
        return result

    return [
        (name, tp, getattr(cls, name, _empty))
        for name, tp in hints.items()
        if not name.startswith("_")
    ]


def is_object_type(tp: Any) -> bool:
    """Whether ``tp`` documents as an object with properties."""
    if not isinstance(tp, type) or tp in _PYTHON_TYPE_MAP:
        return False
    if dataclasses.is_dataclass(tp):
        return True
    return bool(object_fields(tp))


class SchemaResolver:
    """
    Resolve annotations to JSON Schema fragments.

    Args:
        overrides: Schemas keyed by type expression (``"list[Todo]"``),
            consulted before introspection.
        inline_objects: Inline object schemas instead of ``$ref``.
    """

    def __init__(
        self,
        overrides: Optional[Mapping[str, Dict[str, Any]]] = None,
        *,
        inline_objects: bool = False,
    ):
        self.overrides: Dict[str, Dict[str, Any]] = dict(overrides or {})
        self.inline_objects = inline_objects
        self._component_names: Dict[type, str] = {}
        self._component_classes: Dict[str, type] = {}
        self._names_lock = threading.Lock()

    def component_name(self, cls: type) -> str:
        """
        Name under which ``cls`` is filed in ``components/schemas``.

        The first class seen with a given ``__name__`` keeps the bare name;
        later, different classes sharing it get a module-qualified name.
        """
        with self._names_lock:
            name = self._component_names.get(cls)
            if name is not None:
                return name

            name = cls.__name__
            if name in self._component_classes:
                base = _qualified_component_name(cls)
                name, n = base, 2
                while name in self._component_classes:
                    name, n = f"{base}_{n}", n + 1
                logger.debug(
                    "Component name %r already taken; documenting %s.%s as %r",
                    cls.__name__, cls.__module__, cls.__qualname__, name,
                )

            self._component_names[cls] = name
            self._component_classes[name] = cls
            return name

    def reset_names(self) -> None:
        """Forget every component name handed out so far."""
        with self._names_lock:
            self._component_names.clear()
            self._component_classes.clear()

    def schema(
        self,
        annotation: Any,
        expression: Optional[str] = None,
        components: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Schema for ``annotation``.

        Object schemas referenced by ``$ref`` are added to ``components``.
        """
        if expression and expression in self.overrides:
            return copy.deepcopy(self.overrides[expression])
        if components is None:
            components = {}
        return self._schema(annotation, components)

    def _schema(self, tp: Any, components: Dict[str, Any]) -> Dict[str, Any]:
        if tp is _empty or tp is Any:
            return {}

        hook = getattr(tp, "__openapi_schema__", None)
        if isinstance(tp, type) and callable(hook):
            return dict(hook())

        if tp in _PYTHON_TYPE_MAP:
            return dict(_PYTHON_TYPE_MAP[tp])

        origin = get_origin(tp)
        args = get_args(tp)

        # Annotated[X, ...] → unwrap
        if origin is Annotated:
            return self._schema(args[0], components)

        # Optional[X] → X or null
        if origin in _UNION_ORIGINS:
            non_none = [a for a in args if a is not type(None)]
            if len(non_none) == 1:
                return _nullable(self._schema(non_none[0], components))
            any_of = [self._schema(a, components) for a in non_none]
            if len(non_none) < len(args):
                any_of.append({"type": "null"})
            return {"anyOf": any_of}

        if origin is Literal:
            schema: Dict[str, Any] = {"enum": list(args)}
            literal_type = _literal_type(args)
            if literal_type:
                schema["type"] = literal_type
            return schema

        if isinstance(origin, type):
            if issubclass(origin, tuple):
                if args and not (len(args) == 2 and args[1] is Ellipsis):
                    return {
                        "type": "array",
                        "prefixItems": [self._schema(a, components) for a in args],
                        "minItems": len(args),
                        "maxItems": len(args),
                    }
                item = self._schema(args[0], components) if args else {}
                return {"type": "array", "items": item}

            if issubclass(origin, _SET_ORIGINS):
                item = self._schema(args[0], components) if args else {}
                return {"type": "array", "items": item, "uniqueItems": True}

            if issubclass(origin, _DICT_ORIGINS):
                value = self._schema(args[1], components) if len(args) > 1 else {}
                return {"type": "object", "additionalProperties": value}

            if issubclass(origin, _LIST_ORIGINS) and not issubclass(origin, (str, bytes)):
                item = self._schema(args[0], components) if args else {}
                return {"type": "array", "items": item}

            # Parametrised user generic: document the origin class
            return self._schema(origin, components)

        if isinstance(tp, type):
            if issubclass(tp, enum.Enum):
                values = [member.value for member in tp]
                schema = {"enum": values}
                enum_type = _literal_type(tuple(values))
                if enum_type:
                    schema["type"] = enum_type
                return schema

            if tp in (list, tuple, set, frozenset):
                return {"type": "array"}
            if tp is dict:
                return {"type": "object"}

            if is_object_type(tp):
                return self._object_ref(tp, components)

        return {"type": "object"}

    def _object_ref(self, cls: type, components: Dict[str, Any]) -> Dict[str, Any]:
        if self.inline_objects:
            return self.object_schema(cls, components)

        name = self.component_name(cls)
        if name not in components:
            # Placeholder first so self-referencing classes terminate
            components[name] = {}
            components[name] = self.object_schema(cls, components)
        return {"$ref": f"{REF_PREFIX}{name}"}

    def object_schema(self, cls: type, components: Dict[str, Any]) -> Dict[str, Any]:
        """Convert a dataclass or annotated class to a JSON Schema object."""
        properties: Dict[str, Any] = {}
        required: List[str] = []

        for field_name, field_type, default in object_fields(cls):
            prop = self._schema(field_type, components)
            json_default = _json_default(default)
            if default is not _empty and default is not dataclasses.MISSING \
                    and json_default is not _empty and "$ref" not in prop:
                prop["default"] = json_default
            properties[field_name] = prop
            if default is _empty:
                required.append(field_name)

        schema: Dict[str, Any] = {
            "type": "object",
            "properties": properties,
        }
        if required:
            schema["required"] = required

        doc = inspect.getdoc(cls)
        if doc and not (dataclasses.is_dataclass(cls) and doc.startswith(f"{cls.__name__}(")):
            schema["description"] = doc

        return schema


class ParameterSetResolver:
    """
    Resolve an annotated class into named, typed parameter objects.

    Args:
        schemas: Resolver used for each field's schema
    """

    def __init__(self, schemas: Optional[SchemaResolver] = None):
        self.schemas = schemas or SchemaResolver()

    def parameters(
        self,
        annotation: Any,
        location: str = "query",
        components: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        if components is None:
            components = {}

        if get_origin(annotation) is Annotated:
            annotation = get_args(annotation)[0]

        hook = getattr(annotation, "__openapi_params__", None)
        if isinstance(annotation, type) and callable(hook):
            return [dict(p) for p in hook()]

        fields = object_fields(annotation)
        if not fields:
            logger.debug("No parameter fields found on %r", annotation)
            return []

        params: List[Dict[str, Any]] = []
        for field_name, field_type, default in fields:
            schema = self.schemas.schema(field_type, components=components)
            json_default = _json_default(default)
            if default is not _empty and default is not dataclasses.MISSING \
                    and json_default is not _empty and "$ref" not in schema:
                schema["default"] = json_default
            params.append({
                "name": field_name,
                "in": location,
                "required": default is _empty,
                "schema": schema,
            })
        return params
