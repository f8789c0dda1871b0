"""
One request/response cycle against the streaming chat endpoint.

Flow: config check -> history trim + user turn -> messages -> stream ->
re-render the whole buffer on every delta -> assistant turn.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from ..document.model import Document
from ..document.visibility import VisibilityPredicate, computed_visible
from ..errors import CancellationNotice, ConfigurationError, TransportError
from ..render.markdown import render
from ..settings import SettingsStore
from ..utils.log import EventLog
from .cancel import CancelToken
from .context import PAGE_TOKEN_CAP, PageContext, capture_page_context, truncation_notice
from .display import BufferDisplay, Display
from .history import HISTORY_LIMIT, ConversationHistory
from .prompts import MISSING_KEY_MESSAGE, MISSING_MODEL_MESSAGE, build_messages, error_message
from .sse import iter_deltas

logger = logging.getLogger(__name__)


class ChatSession:
    """
    Chat state for one activation of the panel: created on first use,
    ``reset`` on a switch back to find mode, ``close``d with the panel.
    """

    def __init__(
        self,
        document: Optional[Document] = None,
        *,
        history_limit: int = HISTORY_LIMIT,
        page_token_cap: int = PAGE_TOKEN_CAP,
        is_visible: VisibilityPredicate = computed_visible,
    ) -> None:
        self.document = document
        self.history = ConversationHistory(limit=history_limit)
        self.page_token_cap = page_token_cap
        self.is_visible = is_visible
        self.page_context: Optional[PageContext] = None
        self.in_flight = False
        self.cancel_token: Optional[CancelToken] = None

    def activate(self) -> None:
        """Capture the page context once per session."""
        if self.page_context is None and self.document is not None:
            self.page_context = capture_page_context(
                self.document, token_cap=self.page_token_cap, is_visible=self.is_visible
            )

    @property
    def page_text(self) -> str:
        return self.page_context.page_text if self.page_context is not None else ""

    def cancel(self) -> None:
        if self.cancel_token is not None:
            self.cancel_token.cancel()

    def reset(self) -> None:
        self.cancel()
        self.history.clear()
        self.page_context = None

    def close(self) -> None:
        self.reset()
        self.document = None


class StreamingCoordinator:
    def __init__(
        self,
        settings: SettingsStore,
        client_factory: Optional[Callable[..., Any]] = None,
        *,
        backend: str = "openrouter",
        endpoint: Optional[str] = None,
        max_tokens: int = 800,
        app_title: str = "FindAI",
        event_log: Optional[EventLog] = None,
    ) -> None:
        if client_factory is None:
            from llm.factory import make_llm

            client_factory = make_llm
        self.settings = settings
        self.client_factory = client_factory
        self.backend = backend
        self.endpoint = endpoint
        self.max_tokens = max_tokens
        self.app_title = app_title
        self.event_log = event_log or EventLog(None)

    def _require_config(self) -> tuple[str, str]:
        credential = self.settings.credential
        if not credential:
            raise ConfigurationError(MISSING_KEY_MESSAGE)
        model = self.settings.model
        if not model:
            raise ConfigurationError(MISSING_MODEL_MESSAGE)
        return credential, model

    def make_client(self, session: ChatSession) -> Any:
        credential, model = self._require_config()
        doc = session.document
        return self.client_factory(
            backend=self.backend,
            model=model,
            api_key=credential,
            endpoint=self.endpoint,
            referer=doc.url if doc is not None else "",
            title=(doc.title if doc is not None and doc.title else self.app_title),
        )

    def ask(self, session: ChatSession, query: str, display: Optional[Display] = None) -> Optional[str]:
        """
        Run one streamed turn. Returns the assistant text, or None when the
        request was rejected, misconfigured, failed, or cancelled.
        """
        display = display or BufferDisplay()
        if session.in_flight:
            logger.info("Request already in progress; ignoring new query")
            return None

        self.settings.load()
        try:
            client = self.make_client(session)
        except ConfigurationError as e:
            logger.warning("Chat not configured: %s", str(e).splitlines()[0])
            display.message(render(str(e)))
            return None

        token = CancelToken()
        session.in_flight = True
        session.cancel_token = token
        session.activate()
        display.start()
        buffer = ""
        try:
            session.history.add_user(query)
            messages = build_messages(session.history, session.page_text)
            notice = truncation_notice(session.page_context)
            if notice:
                display.notice(notice)

            chunks = client.stream_chat(messages, max_tokens=self.max_tokens, cancel=token)
            for delta in iter_deltas(chunks):
                token.raise_if_cancelled()
                buffer += delta
                display.update(render(buffer))
            token.raise_if_cancelled()

            session.history.add_assistant(buffer)
            self.event_log.write(
                "chat",
                model=getattr(client, "model", ""),
                query=query,
                response_chars=len(buffer),
                turns=len(session.history),
            )
            return buffer
        except CancellationNotice:
            logger.info("Request canceled by user")
            return None
        except TransportError as e:
            logger.error("Chat request failed: %s", e)
            display.message(render(error_message(str(e))))
            return None
        finally:
            session.in_flight = False
            session.cancel_token = None
            display.finish()
