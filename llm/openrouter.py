# llm/openrouter.py
from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Dict, Iterator, List, Optional, Tuple

import requests

from find_ai.errors import AuthError, NotFoundError, RateLimitError, TransportError

from .base import LLM

logger = logging.getLogger(__name__)

DEFAULT_OPENROUTER = "https://openrouter.ai/api/v1"
DEFAULT_TITLE = "FindAI"


def _timeouts() -> tuple[float, float]:
    """Return (connect_timeout, read_timeout) in seconds; env-overridable."""
    # Defaults: 10s connect, 120s read between streamed chunks
    ct = float(os.getenv("OPENROUTER_CONNECT_TIMEOUT", "10"))
    rt = float(os.getenv("OPENROUTER_READ_TIMEOUT", "120"))
    return (ct, rt)


def _normalize_endpoint(ep: Optional[str]) -> str:
    """--endpoint > OPENROUTER_BASE_URL > default; ensure scheme; strip trailing slash."""
    cand = (ep or os.getenv("OPENROUTER_BASE_URL") or DEFAULT_OPENROUTER).strip()
    if not re.match(r"^https?://", cand):
        cand = "https://" + cand
    return cand.rstrip("/")


def _error_detail(r: requests.Response) -> str:
    """error.message from a JSON body, else the raw body, else the status line."""
    fallback = f"HTTP error! status: {r.status_code}"
    body = r.text or ""
    try:
        data = json.loads(body)
    except ValueError:
        return body.strip() or fallback
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str) and err:
            return err
    return fallback


def raise_for_chat_status(r: requests.Response, model: str) -> None:
    if r.ok:
        return
    if r.status_code == 401:
        raise AuthError("Invalid API key. Please check your OpenRouter API key in settings.", status=401)
    if r.status_code == 429:
        raise RateLimitError("Rate limit exceeded. Please try again later.", status=429)
    if r.status_code == 404:
        raise NotFoundError(
            f'Model "{model}" not found. Please select a different model in settings.', status=404
        )
    raise TransportError(_error_detail(r), status=r.status_code)


class OpenRouterLLM(LLM):
    """
    Streaming chat-completion client for an OpenRouter-compatible endpoint.

    Typical construction:
        llm = OpenRouterLLM(model="openai/gpt-4o-mini", api_key="sk-or-...")

    The streaming coordinator calls:
        for chunk in llm.stream_chat(messages, max_tokens=800, cancel=token): ...
    """

    def __init__(
        self,
        model: str,
        api_key: str,
        endpoint: Optional[str] = None,
        referer: str = "",
        title: str = "",
        session: Optional[requests.Session] = None,
        **_: Any,
    ) -> None:
        self.model = model
        self.api_key = api_key
        self.base = _normalize_endpoint(endpoint)
        self.referer = referer
        self.title = title or DEFAULT_TITLE
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "X-Title": self.title,
        }
        if self.referer:
            headers["HTTP-Referer"] = self.referer
        return headers

    def stream_chat(
        self,
        messages: List[Dict[str, str]],
        max_tokens: int = 800,
        cancel: Optional[Any] = None,
    ) -> Iterator[bytes]:
        """
        POST /chat/completions with stream=true and yield body chunks as they
        arrive. Stops quietly once ``cancel.cancelled`` is set.
        """
        url = f"{self.base}/chat/completions"
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": int(max_tokens),
            "stream": True,
        }
        try:
            r = self.session.post(
                url, json=payload, headers=self._headers(), stream=True, timeout=_timeouts()
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Cannot reach {url} ({e.__class__.__name__})") from e

        try:
            raise_for_chat_status(r, self.model)
            for chunk in r.iter_content(chunk_size=None):
                if cancel is not None and cancel.cancelled:
                    logger.info("Stream read stopped: request cancelled")
                    return
                if chunk:
                    yield chunk
        except requests.exceptions.RequestException as e:
            if cancel is not None and cancel.cancelled:
                return
            raise TransportError(f"Connection lost while streaming ({e.__class__.__name__})") from e
        finally:
            r.close()

    def list_models(self) -> List[Dict[str, Any]]:
        url = f"{self.base}/models"
        try:
            r = self.session.get(url, headers={"Content-Type": "application/json"}, timeout=_timeouts())
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Cannot reach {url} ({e.__class__.__name__})") from e
        if not r.ok:
            raise TransportError(f"Failed to fetch models: {r.status_code}", status=r.status_code)
        try:
            data = r.json()
        except ValueError as e:
            raise TransportError("Model list is not valid JSON") from e
        models = data.get("data") if isinstance(data, dict) else data
        return [m for m in (models or []) if isinstance(m, dict)]

    def test_credential(self) -> Tuple[bool, str]:
        url = f"{self.base}/chat/completions"
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": "test"}],
            "max_tokens": 5,
        }
        try:
            r = self.session.post(url, json=payload, headers=self._headers(), timeout=_timeouts())
        except requests.exceptions.RequestException as e:
            return False, f"Error testing API key: {e}"
        if r.ok:
            return True, "API key is valid!"
        detail = _error_detail(r)
        if detail.startswith("HTTP error!"):
            detail = r.reason or detail
        return False, f"API key test failed: {detail}"
