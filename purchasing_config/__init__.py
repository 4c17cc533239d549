"""
purchasing_config -- single public entrypoint for runtime settings.

Responsibility:
    ``get_active_config()`` is the ONLY way to obtain settings at runtime.
    No other component reads configuration files or environment
    variables.  Returns a frozen ``PurchasingSettings``.

Architecture position:
    Configuration -- sits above ``purchasing_kernel`` and below
    ``purchasing_services``.  The kernel and the engines MUST NEVER import
    from ``purchasing_config``; services receive settings by injection.

Failure modes:
    - ``FileNotFoundError`` -- the requested settings file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``KeyError`` / ``ValueError`` -- missing or malformed settings.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``PURCHASING_CONFIG_TRACE`` log entry with the source path and the
    checksum of the raw document, tying each action to the exact settings
    that governed it.
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path

from purchasing_config.loader import load_yaml_file, parse_settings
from purchasing_config.schema import PurchasingSettings

_logger = logging.getLogger("purchasing_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

DATABASE_URL_ENV = "PURCHASING_DATABASE_URL"


def get_active_config(config_path: Path | str | None = None) -> PurchasingSettings:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: YAML settings file.  Defaults to the packaged
            ``defaults.yaml``.

    Returns:
        PurchasingSettings with ``database.url`` replaced by
        ``$PURCHASING_DATABASE_URL`` when that variable is set.
    """
    path = Path(config_path) if config_path is not None else _DEFAULT_CONFIG_PATH
    settings = parse_settings(load_yaml_file(path))

    env_url = os.environ.get(DATABASE_URL_ENV)
    if env_url:
        settings = replace(settings, database=replace(settings.database, url=env_url))

    _logger.info(
        "PURCHASING_CONFIG_TRACE",
        extra={
            "trace_type": "PURCHASING_CONFIG_TRACE",
            "config_path": str(path),
            "checksum": settings.checksum,
            "process_name": settings.workflow.process_name,
            "database_url_from_env": bool(env_url),
        },
    )
    return settings


__all__ = ["PurchasingSettings", "get_active_config"]
