"""Value parsing and handler loading helpers for CLI commands."""

from __future__ import annotations

import importlib
import inspect
import json
from typing import Any


def parse_value(raw: str) -> Any:
    """Parse CLI input value as JSON if possible; fallback to string."""
    text = raw.strip()
    if text == "":
        return ""
    try:
        return json.loads(text)
    except ValueError:
        lowered = text.lower()
        if lowered in {"true", "false"}:
            return lowered == "true"
        return text


def parse_handler_spec(raw: str) -> tuple[str, str]:
    """Split ``name=module:attr`` into (name, "module:attr")."""
    name, sep, target = raw.partition("=")
    name, target = name.strip(), target.strip()
    if not sep or not name or ":" not in target:
        raise ValueError(f"expected name=module:attr, got {raw!r}")
    return name, target


def load_handler(target: str) -> Any:
    """Import ``module:attr``; classes are instantiated with no arguments."""
    module_name, _, attr = target.partition(":")
    module = importlib.import_module(module_name)
    obj: Any = module
    for part in attr.split("."):
        obj = getattr(obj, part)
    if inspect.isclass(obj):
        return obj()
    return obj
