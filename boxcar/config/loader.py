"""Configuration loading utilities."""

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from boxcar.config.schema import BoxcarConfig

# values under these keys are user-chosen names, not schema fields
_VERBATIM_KEYS = {"handlers"}


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".boxcar" / "config.json"


def load_config(config_path: Path | None = None) -> BoxcarConfig:
    """
    Load configuration from file, falling back to defaults.

    ``BOXCAR_*`` environment variables fill anything the file leaves out.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Raises:
        ValueError: The file exists but is not valid JSON or fails validation.
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            return BoxcarConfig(**convert_keys(data))
        except (json.JSONDecodeError, ValidationError, TypeError) as e:
            raise ValueError(f"Failed to load config from {path}: {e}") from e

    return BoxcarConfig()


def convert_keys(data: Any) -> Any:
    """Convert camelCase keys to snake_case for Pydantic.
    Keys under ``handlers`` are preserved (they are handler names)."""
    if isinstance(data, dict):
        result: dict[str, Any] = {}
        for k, v in data.items():
            new_k = camel_to_snake(k)
            if new_k in _VERBATIM_KEYS and isinstance(v, dict):
                result[new_k] = dict(v)
            else:
                result[new_k] = convert_keys(v)
        return result
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def camel_to_snake(name: str) -> str:
    """Convert camelCase to snake_case."""
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            result.append("_")
        result.append(char.lower())
    return "".join(result)
