from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CREDENTIAL = "credential"
SELECTED_MODEL = "selectedModel"
MODEL_LIST_CACHE = "modelListCache"
MODEL_LIST_CACHE_TIMESTAMP = "modelListCacheTimestamp"

DEFAULT_MODEL = "openai/gpt-4o-mini"

DEFAULTS: Dict[str, Any] = {
    CREDENTIAL: "",
    SELECTED_MODEL: DEFAULT_MODEL,
    MODEL_LIST_CACHE: None,
    MODEL_LIST_CACHE_TIMESTAMP: None,
}


class SettingsStore:
    """
    Small JSON-file key/value store for the credential, selected model and
    cached model list.

    Storage failures are logged and swallowed: a broken settings file must
    never take the find bar down with it.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()
        self._data: Dict[str, Any] = dict(DEFAULTS)

    def load(self) -> "SettingsStore":
        try:
            if self.path.exists():
                raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
                if isinstance(raw, dict):
                    self._data.update({k: v for k, v in raw.items() if k in DEFAULTS})
        except (OSError, ValueError) as e:
            logger.error("Error loading settings from %s: %s", self.path, e)
        return self

    def save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._data, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error("Error saving settings to %s: %s", self.path, e)

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        value = self._data.get(key)
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        if key not in DEFAULTS:
            raise KeyError(f"Unknown settings key: {key}")
        self._data[key] = value

    def update(self, **values: Any) -> None:
        for k, v in values.items():
            self.set(k, v)
        self.save()

    @property
    def credential(self) -> str:
        """Stored key, falling back to OPENROUTER_API_KEY."""
        stored = (self.get(CREDENTIAL) or "").strip()
        return stored or os.getenv("OPENROUTER_API_KEY", "").strip()

    @property
    def model(self) -> str:
        return (self.get(SELECTED_MODEL) or "").strip()

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._data)
