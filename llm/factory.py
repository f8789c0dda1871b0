from typing import Optional

from .base import LLM
from .openrouter import OpenRouterLLM


def make_llm(
    backend: str = "openrouter",
    model: str = "openai/gpt-4o-mini",
    api_key: str = "",
    endpoint: Optional[str] = None,
    referer: str = "",
    title: str = "",
) -> LLM:
    backend = (backend or "openrouter").lower()

    if backend == "openrouter":
        return OpenRouterLLM(model=model, api_key=api_key, endpoint=endpoint, referer=referer, title=title)

    raise RuntimeError(f"Unsupported backend: {backend}")
