"""Persisted chunker settings in ``~/.tsgraph/config.toml``.

Only the ``[chunker]`` section is owned here; other sections in the file
are preserved on save.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

import toml

from . import config
from .config import ChunkerSettings

logger = logging.getLogger(__name__)

CONFIG_FILE = config.BASE_DIR / "config.toml"
SECTION = "chunker"


def load_full_config() -> Dict[str, Any]:
    """Load the entire TOML config (all sections)."""
    if not CONFIG_FILE.exists():
        return {}
    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", CONFIG_FILE, exc)
        return {}


def load_config() -> ChunkerSettings:
    """Load chunker settings, falling back to defaults key by key."""
    section = load_full_config().get(SECTION, {})
    settings = ChunkerSettings()

    size = section.get("max_context_size")
    if size is not None:
        if isinstance(size, int) and not isinstance(size, bool) and size > 0:
            settings.max_context_size = size
        else:
            logger.warning("Invalid max_context_size %r in %s; using %d",
                           size, CONFIG_FILE, settings.max_context_size)

    if isinstance(section.get("output_file"), str) and section["output_file"]:
        settings.output_file = section["output_file"]
    for key in ("ignore_paths", "graph_only_dirs"):
        value = section.get(key)
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            setattr(settings, key, list(value))
    return settings


def save_config(settings: ChunkerSettings) -> bool:
    """Write *settings* to the ``[chunker]`` section.

    Returns:
        True if saved successfully, False otherwise.
    """
    full = load_full_config()
    full[SECTION] = settings.to_dict()
    try:
        CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
        with open(CONFIG_FILE, "w", encoding="utf-8") as f:
            toml.dump(full, f)
    except OSError as exc:
        logger.warning("Could not write config %s: %s", CONFIG_FILE, exc)
        return False
    return True


def reset_config() -> bool:
    """Drop the ``[chunker]`` section. Returns True if something was removed."""
    full = load_full_config()
    if SECTION not in full:
        return False
    del full[SECTION]
    with open(CONFIG_FILE, "w", encoding="utf-8") as f:
        toml.dump(full, f)
    return True
