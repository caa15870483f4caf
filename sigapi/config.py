"""
Config system - typed configuration for document generation.

Layered loading with merge precedence (later overrides earlier):
    config file (YAML / JSON) < .env file < environment variables < overrides

Environment variables use the ``SIGAPI_`` prefix and a double underscore
for nesting::

    SIGAPI_OPENAPI__TITLE="Todo API"
    SIGAPI_SIGNATURE__STRICT_PATH_PARAMETERS=true
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .extractors import Role, build_role_table
from .faults import ConfigInvalidFault


@dataclass
class OpenAPIConfig:
    """
    Top-level document metadata and docs endpoints.

    An ``OpenAPIConfig`` (or a zero-argument callable returning one) is the
    initializer passed to ``build_openapi``.
    """
    # Info
    title: str = "sigapi"
    version: str = "0.1.0"
    description: str = ""
    terms_of_service: str = ""
    contact_name: str = ""
    contact_email: str = ""
    contact_url: str = ""
    license_name: str = ""
    license_url: str = ""

    # Servers
    servers: List[Dict[str, str]] = field(default_factory=list)

    # Paths
    docs_path: str = "/docs"
    openapi_json_path: str = "/openapi.json"
    redoc_path: str = "/redoc"

    # External docs
    external_docs_url: str = ""
    external_docs_description: str = ""

    # Swagger UI
    swagger_ui_theme: str = ""  # "dark"
    swagger_ui_config: Dict[str, Any] = field(default_factory=dict)

    openapi_version: str = "3.1.0"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OpenAPIConfig":
        """Create config from dict, ignoring unknown and private keys."""
        config = cls()
        for key, value in data.items():
            if key.startswith("_"):
                continue
            if hasattr(config, key):
                setattr(config, key, value)
        return config

    def build_info(self) -> Dict[str, Any]:
        """Build the info object."""
        info: Dict[str, Any] = {
            "title": self.title,
            "version": self.version,
        }
        if self.description:
            info["description"] = self.description
        if self.terms_of_service:
            info["termsOfService"] = self.terms_of_service

        contact: Dict[str, str] = {}
        if self.contact_name:
            contact["name"] = self.contact_name
        if self.contact_email:
            contact["email"] = self.contact_email
        if self.contact_url:
            contact["url"] = self.contact_url
        if contact:
            info["contact"] = contact

        license_info: Dict[str, str] = {}
        if self.license_name:
            license_info["name"] = self.license_name
        if self.license_url:
            license_info["url"] = self.license_url
        if license_info:
            info["license"] = license_info

        return info

    def build_document(self) -> Dict[str, Any]:
        """Top-level document fields, without paths."""
        spec: Dict[str, Any] = {
            "openapi": self.openapi_version,
            "info": self.build_info(),
        }
        if self.servers:
            spec["servers"] = [dict(s) for s in self.servers]
        if self.external_docs_url:
            spec["externalDocs"] = {"url": self.external_docs_url}
            if self.external_docs_description:
                spec["externalDocs"]["description"] = self.external_docs_description
        return spec


@dataclass
class SignatureConfig:
    """
    Signature analysis policy.

    Attributes:
        strict_type_arguments: Fail on generic arguments that are not named
            types instead of dropping them from the type chain
        strict_path_parameters: Fail when path arguments and placeholders
            differ in count instead of truncating
        roles: Extra ``wrapper name -> role`` entries
        success_status: Status code documenting the response body
        media_type: Media type of request and response bodies
    """
    strict_type_arguments: bool = False
    strict_path_parameters: bool = False
    roles: Dict[str, str] = field(default_factory=dict)
    success_status: str = "200"
    media_type: str = "application/json"

    def __post_init__(self):
        for name, role in self.roles.items():
            try:
                Role(role)
            except ValueError:
                raise ConfigInvalidFault(
                    f"signature.roles.{name}",
                    f"unknown role {role!r} (expected one of {[r.value for r in Role]})",
                ) from None
        self.success_status = str(self.success_status)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SignatureConfig":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def role_table(self) -> Dict[str, Role]:
        return build_role_table(self.roles)


@dataclass
class Settings:
    """Complete sigapi configuration."""
    openapi: OpenAPIConfig = field(default_factory=OpenAPIConfig)
    signature: SignatureConfig = field(default_factory=SignatureConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        openapi = data.get("openapi", {}) or {}
        signature = data.get("signature", {}) or {}
        if not isinstance(openapi, dict):
            raise ConfigInvalidFault("openapi", "expected a mapping")
        if not isinstance(signature, dict):
            raise ConfigInvalidFault("signature", "expected a mapping")
        return cls(
            openapi=OpenAPIConfig.from_dict(openapi),
            signature=SignatureConfig.from_dict(signature),
        )

    @classmethod
    def load(
        cls,
        path: Optional[str | Path] = None,
        env_prefix: str = "SIGAPI_",
        env_file: Optional[str | Path] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "Settings":
        """
        Load configuration from multiple sources.

        Args:
            path: YAML or JSON config file
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)
        """
        loader = ConfigLoader(env_prefix=env_prefix)
        if path:
            loader.load_file(Path(path))
        if env_file:
            loader.load_env_file(Path(env_file))
        loader.load_env()
        if overrides:
            loader.merge(overrides)
        return cls.from_dict(loader.config_data)


class ConfigLoader:
    """Merges configuration dictionaries from files and the environment."""

    def __init__(self, env_prefix: str = "SIGAPI_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    def load_file(self, path: Path):
        """Load config from a JSON or YAML file."""
        if not path.exists():
            raise ConfigInvalidFault(str(path), "config file does not exist")

        with open(path) as f:
            if path.suffix == ".json":
                data = json.load(f)
            elif path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                raise ConfigInvalidFault(str(path), f"unsupported config format '{path.suffix}'")

        if data is None:
            return
        if not isinstance(data, dict):
            raise ConfigInvalidFault(str(path), "top level must be a mapping")
        self.merge(data)

    def load_env_file(self, path: Path):
        """Load prefixed keys from a .env file."""
        if not path.exists():
            return

        with open(path) as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue

                if "=" in line:
                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip().strip('"').strip("'")

                    if key.startswith(self.env_prefix):
                        self._set_nested(key, value)

    def load_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def merge(self, source: Dict[str, Any]):
        self._merge_dict(self.config_data, source)

    def _set_nested(self, key: str, value: str):
        """Convert SIGAPI_OPENAPI__TITLE to {"openapi": {"title": ...}}."""
        parts = key[len(self.env_prefix):].lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value
