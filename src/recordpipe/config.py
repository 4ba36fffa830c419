"""
Configuration management.

All configuration keys are defined here; no other module should invent
config keys.

Key invariants:
- Store and pipe names are unique within their section
- Pipes without their own base_url use remote.base_url
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .registry import DataManager, Pipeline


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    pass


@dataclass
class RemoteConfig:
    """Remote server settings shared by all pipes."""

    base_url: str = ""
    token: str | None = None
    # Request timeout (seconds)
    timeout_seconds: int = 30
    # Max retries per request
    max_retries: int = 3
    backoff_factor: float = 0.5


@dataclass
class StoreConfig:
    """A named in-memory store."""

    name: str
    record_id: str = "id"
    # Track NEW/MODIFIED/REMOVED instead of dropping removed records
    data_sync: bool = False
    type: str = "Memory"

    def to_registry_entry(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "record_id": self.record_id,
            "settings": {"data_sync": self.data_sync},
        }


@dataclass
class PipeConfig:
    """A named pipe to a remote collection."""

    name: str
    record_id: str = "id"
    # Endpoint path relative to base_url (defaults to the pipe name)
    endpoint: str | None = None
    # Overrides remote.base_url for this pipe only
    base_url: str | None = None
    type: str = "Rest"

    def to_registry_entry(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        if self.endpoint:
            settings["endpoint"] = self.endpoint
        if self.base_url:
            settings["base_url"] = self.base_url
        return {
            "name": self.name,
            "type": self.type,
            "record_id": self.record_id,
            "settings": settings,
        }


@dataclass
class Config:
    """Application configuration."""

    remote: RemoteConfig = field(default_factory=RemoteConfig)
    stores: list[StoreConfig] = field(default_factory=list)
    pipes: list[PipeConfig] = field(default_factory=list)

    def get_store(self, name: str) -> StoreConfig | None:
        return next((s for s in self.stores if s.name == name), None)

    def get_pipe(self, name: str) -> PipeConfig | None:
        return next((p for p in self.pipes if p.name == name), None)

    def validate(self) -> list[str]:
        """Validate configuration completeness and consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors: list[str] = []

        if self.pipes and not self.remote.base_url:
            missing = [p.name for p in self.pipes if not p.base_url]
            if missing:
                errors.append(f"remote.base_url is required for pipes: {', '.join(missing)}")

        if self.remote.timeout_seconds <= 0:
            errors.append("remote.timeout_seconds must be positive")
        if self.remote.max_retries < 0:
            errors.append("remote.max_retries must be >= 0")

        for section, entries in (("stores", self.stores), ("pipes", self.pipes)):
            seen: set[str] = set()
            for entry in entries:
                if not entry.name:
                    errors.append(f"{section}: entry without name")
                elif entry.name in seen:
                    errors.append(f"{section}: duplicate name '{entry.name}'")
                seen.add(entry.name)
                if not entry.record_id:
                    errors.append(f"{section}.{entry.name}: record_id must not be empty")

        return errors


def _int_env(name: str, default: int) -> int:
    value = os.environ.get(name, "")
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default  # Keep file value


def _entries(data: dict, key: str) -> list[dict]:
    """Section entries; a bare string is shorthand for {name: ...}."""
    raw = data.get(key) or []
    if not isinstance(raw, list):
        raise ConfigValidationError(f"'{key}' must be a list")
    entries = []
    for item in raw:
        if isinstance(item, str):
            entries.append({"name": item})
        elif isinstance(item, dict):
            entries.append(item)
        else:
            raise ConfigValidationError(f"Invalid entry in '{key}': {item!r}")
    return entries


def load_config(config_path: Path) -> Config:
    """
    Load configuration from YAML file.

    Missing files yield the defaults. Environment variables can override
    config values:
    - RECORDPIPE_BASE_URL
    - RECORDPIPE_TOKEN
    - RECORDPIPE_TIMEOUT (request timeout in seconds)
    """
    config_path = Path(config_path)
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    else:
        data = {}

    if not isinstance(data, dict):
        raise ConfigValidationError(f"{config_path}: top level must be a mapping")

    remote_data = data.get("remote") or {}
    remote = RemoteConfig(
        base_url=os.environ.get("RECORDPIPE_BASE_URL", remote_data.get("base_url", "")),
        token=os.environ.get("RECORDPIPE_TOKEN", remote_data.get("token")),
        timeout_seconds=_int_env("RECORDPIPE_TIMEOUT", remote_data.get("timeout_seconds", 30)),
        max_retries=remote_data.get("max_retries", 3),
        backoff_factor=remote_data.get("backoff_factor", 0.5),
    )

    stores = [
        StoreConfig(
            name=entry.get("name", ""),
            record_id=entry.get("record_id", "id"),
            data_sync=bool(entry.get("data_sync", False)),
            type=entry.get("type", "Memory"),
        )
        for entry in _entries(data, "stores")
    ]

    pipes = [
        PipeConfig(
            name=entry.get("name", ""),
            record_id=entry.get("record_id", "id"),
            endpoint=entry.get("endpoint"),
            base_url=entry.get("base_url"),
            type=entry.get("type", "Rest"),
        )
        for entry in _entries(data, "pipes")
    ]

    return Config(remote=remote, stores=stores, pipes=pipes)


def build_data_manager(config: Config) -> DataManager:
    """Create the configured stores."""
    return DataManager([s.to_registry_entry() for s in config.stores])


def build_pipeline(config: Config) -> Pipeline:
    """Create the configured pipes, sharing the remote settings."""
    return Pipeline(
        [p.to_registry_entry() for p in config.pipes],
        base_url=config.remote.base_url or None,
        token=config.remote.token,
        timeout=config.remote.timeout_seconds,
        max_retries=config.remote.max_retries,
        backoff_factor=config.remote.backoff_factor,
    )


def create_default_config(config_path: Path) -> None:
    """Create a default configuration file."""
    default_config = """# recordpipe configuration
#
# Environment overrides:
# - RECORDPIPE_BASE_URL
# - RECORDPIPE_TOKEN
# - RECORDPIPE_TIMEOUT

remote:
  base_url: "http://localhost:8080/api"   # Pipes use <base_url>/<endpoint>
  token: null                             # Bearer token, if the server needs one
  timeout_seconds: 30
  max_retries: 3
  backoff_factor: 0.5

# In-memory stores. data_sync keeps removed records (marked REMOVED)
# until a reconciliation pass purges them.
stores:
  - name: tasks
    record_id: id
    data_sync: true

# Remote collections. endpoint defaults to the pipe name.
pipes:
  - name: tasks
    record_id: id
    endpoint: tasks
"""
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(default_config)
