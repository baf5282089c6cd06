"""
File I/O utilities: safe writes and structured (YAML/JSON) document loading.

All functions operate on explicit paths, with no implicit directory lookups.
"""

from __future__ import annotations

import json
import os
from typing import Any

import yaml
from loguru import logger

from nestegg.core.exceptions import DataProcessingError
from nestegg.core.types import PathLike


def safe_write(filepath: PathLike, content: str, mode: str = "w", encoding: str = "utf-8") -> None:
    """Write content to a file, creating parent directories as needed."""
    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    with open(filepath, mode, encoding=encoding) as f:
        f.write(content)


def load_structured(filepath: PathLike) -> dict[str, Any]:
    """
    Load a YAML or JSON document into a dict.

    The format is chosen by extension; anything that is not ``.json`` is
    parsed as YAML (a superset of JSON).

    Raises:
        FileNotFoundError: If the file does not exist.
        DataProcessingError: If the document cannot be parsed or is not a mapping.
    """
    ext = os.path.splitext(filepath)[1].lower()
    with open(filepath, encoding="utf-8") as f:
        try:
            data = json.load(f) if ext == ".json" else yaml.safe_load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise DataProcessingError(f"Could not parse {filepath}: {e}") from e

    if data is None:
        logger.warning(f"{filepath} is empty")
        return {}
    if not isinstance(data, dict):
        raise DataProcessingError(f"{filepath} must contain a mapping at the top level")
    return data
