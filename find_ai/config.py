from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Dict

import yaml

from .errors import ConfigurationError

DEFAULT_CONFIG: Dict[str, Any] = {
    "app": {
        "settings_path": "~/.find-ai/settings.json",
        "log_dir": "logs",
    },
    "search": {
        "debounce_ms": 150,
        "overlay_id": "find-ai-overlay",
    },
    "chat": {
        "backend": "openrouter",
        "endpoint": None,
        "max_tokens": 800,
        "history_limit": 10,
        "page_token_cap": 500,
        "app_title": "FindAI",
    },
    "models": {
        "cache_hours": 24,
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = deepcopy(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def load_config(path: str | Path | None = None) -> dict:
    """YAML config merged over DEFAULT_CONFIG; a missing file means defaults."""
    if path is None:
        return deepcopy(DEFAULT_CONFIG)
    p = Path(path)
    if not p.exists():
        return deepcopy(DEFAULT_CONFIG)
    with open(p, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {p}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config root must be a mapping: {p}")
    return _deep_merge(DEFAULT_CONFIG, data)
