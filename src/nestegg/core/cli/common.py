"""Shared setup logic for CLI commands."""

from __future__ import annotations

import os
from pathlib import Path

NESTEGG_DIR = Path.home() / ".nestegg"
CONFIG_PATH = NESTEGG_DIR / "config.yaml"
LOG_FILE_NAME = "nestegg.log"


def load_config(config_file: str | None = None):
    """Load config from ``config_file`` or ~/.nestegg/config.yaml."""
    from nestegg.core.config import Config

    return Config(config_file=config_file or str(CONFIG_PATH), data_dir=str(NESTEGG_DIR))


def resolve_log_file(config) -> str | None:
    """Explicit ``logging.file``, else ``paths.log_dir``/nestegg.log when ``logging.to_file`` is on."""
    log_file = config.get("logging.file")
    if log_file:
        return os.path.expanduser(str(log_file))
    if not config.get_bool("logging.to_file"):
        return None
    config.ensure_directories()
    return os.path.join(os.path.expanduser(config.get("paths.log_dir")), LOG_FILE_NAME)


def configure_logging(config, verbose: bool = False) -> None:
    """Apply the configured log level (DEBUG when verbose) and file sink."""
    from nestegg.core.utils.logging import setup_logging

    if verbose:
        config.set("logging.level", "DEBUG")
    setup_logging(level=str(config.get("logging.level", "WARNING")), log_file=resolve_log_file(config))
