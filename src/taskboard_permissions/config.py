"""Permissions configuration loader with Pydantic v2 validation.

Loads a ``permissions.yaml`` file into a typed :class:`PermissionsConfig`.
Every field is optional; the defaults match the built-in cache constants.

Example YAML
------------
::

    project_cache:
      ttl_seconds: 300
      max_size: 1000
    team_cache:
      ttl_seconds: 120
      max_size: 500
      eviction_fraction: 0.5
"""
from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from taskboard_permissions.cache.store import CACHE_TTL, EVICTION_FRACTION, MAX_CACHE_SIZE
from taskboard_permissions.errors import ConfigError


class CacheConfig(BaseModel):
    """Sizing and expiry for one permission cache."""

    model_config = {"extra": "forbid"}

    ttl_seconds: float = Field(default=CACHE_TTL.total_seconds(), gt=0)
    max_size: int = Field(default=MAX_CACHE_SIZE, ge=1)
    eviction_fraction: float = Field(default=EVICTION_FRACTION, gt=0, le=1)

    @property
    def ttl(self) -> timedelta:
        return timedelta(seconds=self.ttl_seconds)


class PermissionsConfig(BaseModel):
    """Top-level configuration schema."""

    model_config = {"extra": "allow"}

    version: str = Field(default="1")
    project_cache: CacheConfig = Field(default_factory=CacheConfig)
    team_cache: CacheConfig = Field(default_factory=CacheConfig)


class ConfigLoader:
    """Loads and validates permissions YAML configuration."""

    def load(self, config_path: Path) -> PermissionsConfig:
        """Load and validate a YAML file.

        Raises
        ------
        ConfigError
            When the file is missing, is not valid YAML, or fails validation.
        """
        if not config_path.exists():
            raise ConfigError(f"Permissions config not found: {config_path}")

        with config_path.open("r", encoding="utf-8") as fh:
            return self.load_string(fh.read())

    def load_string(self, yaml_content: str) -> PermissionsConfig:
        """Load and validate a YAML string directly."""
        try:
            raw = yaml.safe_load(yaml_content) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in permissions config: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError(
                f"Permissions config must be a mapping; got {type(raw).__name__}."
            )
        try:
            return PermissionsConfig.model_validate(raw)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc

    def defaults(self) -> PermissionsConfig:
        return PermissionsConfig()
