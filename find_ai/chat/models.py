from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Tuple

from ..errors import TransportError
from ..settings import MODEL_LIST_CACHE, MODEL_LIST_CACHE_TIMESTAMP, SettingsStore

logger = logging.getLogger(__name__)

CACHE_DURATION_MS = 24 * 60 * 60 * 1000

FALLBACK_MODELS: List[Dict[str, str]] = [
    {"id": "openai/gpt-4o-mini", "name": "GPT-4o Mini"},
    {"id": "openai/gpt-4o", "name": "GPT-4o"},
    {"id": "anthropic/claude-3.5-sonnet", "name": "Claude 3.5 Sonnet"},
    {"id": "anthropic/claude-3-haiku", "name": "Claude 3 Haiku"},
    {"id": "google/gemini-pro-1.5", "name": "Gemini Pro 1.5"},
    {"id": "meta-llama/llama-3.1-70b-instruct", "name": "Llama 3.1 70B"},
    {"id": "deepseek/deepseek-chat", "name": "DeepSeek Chat"},
]


def _now_ms() -> int:
    return int(time.time() * 1000)


def _fresh_cache(store: SettingsStore, now: int, cache_ms: int) -> Optional[List[Dict[str, Any]]]:
    cached = store.get(MODEL_LIST_CACHE)
    cached_at = store.get(MODEL_LIST_CACHE_TIMESTAMP)
    if not cached and not cached_at:
        return None
    if (
        not isinstance(cached, list)
        or not all(isinstance(m, dict) for m in cached)
        or isinstance(cached_at, bool)
        or not isinstance(cached_at, (int, float))
    ):
        logger.warning("Ignoring corrupt model list cache (timestamp=%r)", cached_at)
        return None
    if not cached or now - cached_at >= cache_ms:
        return None
    return list(cached)


def fetch_models(
    store: SettingsStore,
    client: Any,
    force_refresh: bool = False,
    now_ms: Optional[int] = None,
    cache_ms: int = CACHE_DURATION_MS,
) -> List[Dict[str, Any]]:
    """
    Model descriptors, served from the settings cache while it is younger
    than ``cache_ms``. Never raises: any failure yields FALLBACK_MODELS.
    """
    now = _now_ms() if now_ms is None else now_ms
    cached = None if force_refresh else _fresh_cache(store, now, cache_ms)
    if cached is not None:
        logger.debug("Model list served from cache (%d entries)", len(cached))
        return cached

    try:
        models = client.list_models()
    except TransportError as e:
        logger.error("Error fetching models: %s", e)
        return [dict(m) for m in FALLBACK_MODELS]

    store.set(MODEL_LIST_CACHE, models)
    store.set(MODEL_LIST_CACHE_TIMESTAMP, now)
    store.save()
    return models


def model_choices(models: List[Dict[str, Any]]) -> List[Tuple[str, str]]:
    """(id, display name) pairs using id/name/model fallbacks; blank ids dropped."""
    out: List[Tuple[str, str]] = []
    for m in models:
        model_id = m.get("id") or m.get("name") or m.get("model") or ""
        if not model_id:
            continue
        display = m.get("name") or m.get("id") or m.get("model") or model_id
        out.append((str(model_id), str(display)))
    return out
