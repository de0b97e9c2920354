"""
Configuration loading for solswap_bot.

Values are read from the environment first (``.env`` is loaded by ``main.py``
through python-dotenv). Anything missing there falls back to an optional
``config.yaml`` at the project root, using the lower-case variable name as key.
If the file is missing, only environment variables and defaults apply.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Callable, Dict

import yaml  # type: ignore


@lru_cache(maxsize=1)
def load_config() -> Dict[str, Any]:
    """Load application configuration from ``config.yaml``.

    :returns: A dictionary representing the configuration. Missing files
        quietly yield an empty dictionary.
    """
    config_path = os.getenv("CONFIG_PATH") or os.path.join(
        os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir)), "config.yaml"
    )
    if os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    return {}


def get_setting(name: str, default: Any = None, cast: Callable[[Any], Any] = str) -> Any:
    """Return ``name`` from the environment, then ``config.yaml``, then ``default``.

    ``cast`` is applied to values coming from env/yaml, never to ``default``.
    Booleans accept ``true/1/yes/on``.
    """
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        raw = load_config().get(name.lower())
    if raw is None:
        return default
    if cast is bool:
        return str(raw).strip().lower() in ("true", "1", "yes", "on")
    return cast(raw)


def get_list(name: str, default: str = "") -> list[str]:
    """Comma separated setting → list of non-empty, stripped items."""
    raw = get_setting(name, default)
    if isinstance(raw, (list, tuple)):
        return [str(x).strip() for x in raw if str(x).strip()]
    return [p.strip() for p in str(raw).split(",") if p.strip()]
