"""
Configuration Loader (``purchasing_config.loader``).

Responsibility
--------------
Loads a YAML settings document and parses it into the frozen
``purchasing_config.schema`` dataclasses.  Runtime callers use
``purchasing_config.get_active_config()``, never this module directly.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing ``database.url``  -> ``KeyError``.
* Unknown keys or wrongly typed values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from purchasing_config.schema import (
    DatabaseSettings,
    InventorySettings,
    LoggingSettings,
    NotificationSettings,
    PurchasingSettings,
    WorkflowSettings,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dict (empty if blank)."""
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top-level YAML value must be a mapping")
    return data


def _build(cls, section: str, data: dict[str, Any] | None, defaults: Any = None):
    """Instantiate ``cls`` from a mapping, checking keys and value types.

    Each value must have the type of the field's default.
    """
    data = data or {}
    if not isinstance(data, dict):
        raise ValueError(f"Section '{section}' must be a mapping")
    defaults = defaults if defaults is not None else cls()
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown key(s) in '{section}': {', '.join(unknown)}")
    for key, value in data.items():
        expected = type(getattr(defaults, key))
        if expected is int and isinstance(value, bool):
            raise ValueError(f"'{section}.{key}' must be an integer")
        if not isinstance(value, expected):
            raise ValueError(f"'{section}.{key}' must be of type {expected.__name__}")
    return cls(**data)


def parse_settings(data: dict[str, Any]) -> PurchasingSettings:
    """Parse a raw settings dict into ``PurchasingSettings``."""
    database = data["database"]
    if "url" not in database:
        raise KeyError("database.url")
    if not database["url"]:
        raise ValueError("database.url must not be empty")

    settings = PurchasingSettings(
        database=_build(
            DatabaseSettings, "database", database, defaults=DatabaseSettings(url=""),
        ),
        workflow=_build(WorkflowSettings, "workflow", data.get("workflow")),
        notifications=_build(NotificationSettings, "notifications", data.get("notifications")),
        inventory=_build(InventorySettings, "inventory", data.get("inventory")),
        logging=_build(LoggingSettings, "logging", data.get("logging")),
        checksum=compute_checksum(data),
    )
    if settings.inventory.restore_capacity_ceiling <= 0:
        raise ValueError("inventory.restore_capacity_ceiling must be positive")
    return settings


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON form; identical data, identical checksum."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
