from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Tuple


class LLM(ABC):
    @abstractmethod
    def stream_chat(
        self, messages: List[Dict[str, str]], max_tokens: int = 800, cancel: Optional[Any] = None
    ) -> Iterator[bytes]:
        """Yield raw response body chunks of a streaming chat completion."""
        ...

    @abstractmethod
    def list_models(self) -> List[Dict[str, Any]]:
        """Return model descriptors ({id, name, ...}); raise TransportError on failure."""
        ...

    @abstractmethod
    def test_credential(self) -> Tuple[bool, str]:
        """Minimal one-token request; (ok, user-facing message)."""
        ...
