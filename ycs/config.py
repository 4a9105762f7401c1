"""
YAML configuration loader.

Reads config.yaml and produces typed ClientSettings / CLISettings objects.
Falls back to defaults if the config file is missing.

Example:

    client:
      app: status-bot
      version: 1.2.0
      rate_limit: 2
      timeout: 10
      lang: en
    settings:
      log_level: INFO
      max_comments: 3
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple

import yaml

from ycs.models import ClientSettings, CLISettings

logger = logging.getLogger(__name__)

# Default path: config.yaml next to the project root
_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


def load_config(
    path: str | Path | None = None,
) -> Tuple[ClientSettings, CLISettings]:
    """
    Load and parse the YAML configuration file.

    Returns:
        A tuple of (ClientSettings, CLISettings).
    """
    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    if not config_path.exists():
        logger.warning("Config file not found at %s, using defaults", config_path)
        return ClientSettings(), CLISettings()

    with open(config_path, "r") as fh:
        raw = yaml.safe_load(fh) or {}

    defaults = ClientSettings()
    raw_client = raw.get("client") or {}
    client = ClientSettings(
        api_url=raw_client.get("api_url", defaults.api_url),
        app=str(raw_client.get("app", defaults.app)),
        version=str(raw_client.get("version", defaults.version)),
        rate_limit=float(raw_client.get("rate_limit", defaults.rate_limit)),
        timeout=float(raw_client.get("timeout", defaults.timeout)),
        lang=raw_client.get("lang", defaults.lang),
    )

    raw_settings = raw.get("settings") or {}
    settings = CLISettings(
        log_level=str(raw_settings.get("log_level", "WARNING")).upper(),
        max_comments=int(raw_settings.get("max_comments", 5)),
    )

    return client, settings
