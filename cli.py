#!/usr/bin/env python3
import argparse
import contextlib
import logging
import signal
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich.text import Text

from find_ai.chat.coordinator import ChatSession, StreamingCoordinator
from find_ai.chat.display import LiveDisplay
from find_ai.chat.models import fetch_models, model_choices
from find_ai.config import load_config
from find_ai.document.parser import parse_html
from find_ai.errors import FindAIError
from find_ai.logging_utils import setup_logging
from find_ai.render.console import to_rich
from find_ai.render.html import to_html, to_plain_text
from find_ai.render.markdown import render
from find_ai.search.session import FindSession
from find_ai.settings import CREDENTIAL, MODEL_LIST_CACHE, SELECTED_MODEL, SettingsStore
from find_ai.utils.log import EventLog
from find_ai.utils.output import html_page, write_output
from llm.factory import make_llm

logger = logging.getLogger(__name__)

console = Console()

CONTEXT_CHARS = 40


def _load_document(path: str):
    p = Path(path)
    markup = p.read_text(encoding="utf-8", errors="replace")
    return parse_html(markup, url=p.resolve().as_uri())


def _event_log(cfg: dict, name: str) -> EventLog:
    log_dir = cfg["app"].get("log_dir")
    return EventLog(Path(log_dir) / name if log_dir else None)


def _settings(cfg: dict) -> SettingsStore:
    return SettingsStore(cfg["app"]["settings_path"]).load()


def _coordinator(cfg: dict, settings: SettingsStore) -> StreamingCoordinator:
    chat = cfg["chat"]
    return StreamingCoordinator(
        settings,
        backend=chat["backend"],
        endpoint=chat.get("endpoint"),
        max_tokens=int(chat["max_tokens"]),
        app_title=chat.get("app_title") or "FindAI",
        event_log=_event_log(cfg, "chat.log.jsonl"),
    )


def _chat_session(cfg: dict, page: str | None) -> ChatSession:
    chat = cfg["chat"]
    return ChatSession(
        _load_document(page) if page else None,
        history_limit=int(chat["history_limit"]),
        page_token_cap=int(chat["page_token_cap"]),
    )


@contextlib.contextmanager
def _cancel_on_sigint(session: ChatSession):
    """First Ctrl+C cancels the request in flight; a second one interrupts."""

    def handler(signum, frame):
        token = session.cancel_token
        if token is not None and not token.cancelled:
            token.cancel("interrupted")
            return
        raise KeyboardInterrupt

    previous = signal.signal(signal.SIGINT, handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _ask_once(coordinator: StreamingCoordinator, session: ChatSession, query: str):
    display = LiveDisplay(console)
    with _cancel_on_sigint(session):
        try:
            return coordinator.ask(session, query, display)
        except KeyboardInterrupt:
            logger.info("Request interrupted")
            return None


# ---------------------------
# find
# ---------------------------


def _match_line(session: FindSession, i: int) -> Text:
    m = session.matches[i]
    text = m.segment.text
    lo = max(0, m.start - CONTEXT_CHARS)
    hi = min(len(text), m.end + CONTEXT_CHARS)
    current = session.cursor.index == i
    line = Text(f"{'>' if current else ' '} {i + 1:>3}  ", style="bold" if current else "dim")
    line.append(("..." if lo > 0 else "") + text[lo : m.start].replace("\n", " "))
    line.append(text[m.start : m.end], style="black on dark_orange" if current else "black on yellow")
    line.append(text[m.end : hi].replace("\n", " ") + ("..." if hi < len(text) else ""))
    return line


def cmd_find(args, cfg) -> int:
    doc = _load_document(args.file)
    session = FindSession(
        doc,
        debounce_ms=int(cfg["search"]["debounce_ms"]),
        overlay_id=cfg["search"]["overlay_id"],
        event_log=_event_log(cfg, "search.log.jsonl"),
    )
    session.type(args.query)
    session.flush()
    for _ in range(args.next):
        session.next()
    for _ in range(args.prev):
        session.prev()

    status = session.status
    console.print(Text(status.text or "(empty query)", style="bold"))
    for i in range(len(session.matches)):
        console.print(_match_line(session, i))

    if args.html:
        out = Path(args.html)
        out.parent.mkdir(parents=True, exist_ok=True)
        body = session.overlay.project_html()
        out.write_text(html_page(doc.title or args.file, body), encoding="utf-8")
        console.print(f"[saved] {out}", markup=False)

    if session.wants_chat():
        console.print(
            Text(f'No matches. Ask AI instead: find-ai ask "{args.query}" --page {args.file}', style="cyan")
        )
    session.close()
    return 0


# ---------------------------
# render
# ---------------------------


def cmd_render(args, cfg) -> int:
    source = Path(args.file).read_text(encoding="utf-8") if args.file else sys.stdin.read()
    blocks = render(source)
    if args.format == "terminal":
        if args.out:
            logger.warning("--out is ignored for terminal output")
        console.print(to_rich(blocks))
        return 0
    rendered = to_html(blocks) if args.format == "html" else to_plain_text(blocks)
    if args.out:
        Path(args.out).write_text(rendered + "\n", encoding="utf-8")
        console.print(f"[saved] {args.out}", markup=False)
    else:
        sys.stdout.write(rendered + "\n")
    return 0


# ---------------------------
# ask / chat
# ---------------------------


def cmd_ask(args, cfg) -> int:
    settings = _settings(cfg)
    coordinator = _coordinator(cfg, settings)
    session = _chat_session(cfg, args.page)
    answer = _ask_once(coordinator, session, args.query)
    session.close()
    if answer is None:
        return 1
    if args.out:
        target = write_output(args.query, answer, out_path=args.out, model=settings.model)
        console.print(f"[saved] {target}", markup=False)
    return 0


def cmd_chat(args, cfg) -> int:
    settings = _settings(cfg)
    coordinator = _coordinator(cfg, settings)
    session = _chat_session(cfg, args.page)
    console.print(Text("Type a question. /reset clears the conversation, /exit quits.", style="dim"))
    try:
        while True:
            try:
                query = console.input("[bold cyan]you>[/] ").strip()
            except EOFError:
                break
            if not query:
                continue
            if query in ("/exit", "/quit"):
                break
            if query == "/reset":
                session.reset()
                console.print(Text("Conversation cleared.", style="dim"))
                continue
            _ask_once(coordinator, session, query)
    except KeyboardInterrupt:
        console.print()
    finally:
        session.close()
    return 0


# ---------------------------
# settings / models
# ---------------------------


def _mask(key: str) -> str:
    if not key:
        return "(not set)"
    return key[:6] + "..." + key[-4:] if len(key) > 12 else "****"


def cmd_settings(args, cfg) -> int:
    settings = _settings(cfg)
    if args.action == "show":
        table = Table(show_header=False)
        table.add_row("settings file", str(settings.path))
        table.add_row("api key", _mask(settings.credential))
        table.add_row("model", settings.model or "(not set)")
        cache = settings.get(MODEL_LIST_CACHE) or []
        table.add_row("cached models", str(len(cache)) if isinstance(cache, list) else "(corrupt)")
        console.print(table)
        return 0
    if args.action == "set-key":
        if not args.value:
            logger.error("set-key requires a value")
            return 2
        settings.update(**{CREDENTIAL: args.value.strip()})
        console.print("API key saved.")
        return 0
    if args.action == "set-model":
        if not args.value:
            logger.error("set-model requires a value")
            return 2
        settings.update(**{SELECTED_MODEL: args.value.strip()})
        console.print(f"Model set to {args.value.strip()}")
        return 0
    if args.action == "test":
        if not settings.credential:
            console.print("Please enter an API key first")
            return 1
        client = make_llm(
            backend=cfg["chat"]["backend"],
            model=settings.model,
            api_key=settings.credential,
            endpoint=cfg["chat"].get("endpoint"),
            title=cfg["chat"].get("app_title") or "",
        )
        ok, msg = client.test_credential()
        console.print(Text(msg, style="green" if ok else "red"))
        return 0 if ok else 1
    return 2


def cmd_models(args, cfg) -> int:
    settings = _settings(cfg)
    client = make_llm(
        backend=cfg["chat"]["backend"],
        model=settings.model,
        api_key=settings.credential,
        endpoint=cfg["chat"].get("endpoint"),
    )
    cache_ms = int(float(cfg["models"]["cache_hours"]) * 60 * 60 * 1000)
    models = fetch_models(settings, client, force_refresh=args.refresh, cache_ms=cache_ms)
    table = Table("", "id", "name")
    for model_id, name in model_choices(models):
        table.add_row("*" if model_id == settings.model else "", model_id, name)
    console.print(table)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="find-ai",
        description="Find-in-page with highlighted navigation, plus streaming AI answers about the page.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logs (to stderr).")
    parser.add_argument("--quiet", "-q", action="store_true", help="Reduce logs to WARN and above.")
    parser.add_argument("--log-json", action="store_true", help="Emit logs as JSON lines (stderr).")
    parser.add_argument("--config", type=str, default="config.yaml")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_find = sub.add_parser("find", help="Search the visible text of an HTML page")
    p_find.add_argument("file", type=str, help="HTML file")
    p_find.add_argument("query", type=str, help="Text to find (case-insensitive)")
    p_find.add_argument("--next", type=int, default=0, help="Advance N matches")
    p_find.add_argument("--prev", type=int, default=0, help="Go back N matches")
    p_find.add_argument("--html", type=str, default=None, help="Write the highlighted page here")

    p_render = sub.add_parser("render", help="Render Markdown (file or stdin)")
    p_render.add_argument("file", type=str, nargs="?", default=None)
    p_render.add_argument("--format", choices=["terminal", "html", "txt"], default="terminal")
    p_render.add_argument("--out", type=str, default=None)

    p_ask = sub.add_parser("ask", help="Ask one question with a streamed answer")
    p_ask.add_argument("query", type=str)
    p_ask.add_argument("--page", type=str, default=None, help="HTML file used as page context")
    p_ask.add_argument("--out", type=str, default=None, help="Save the answer (json/md/txt/html)")

    p_chat = sub.add_parser("chat", help="Interactive multi-turn chat")
    p_chat.add_argument("--page", type=str, default=None, help="HTML file used as page context")

    p_set = sub.add_parser("settings", help="Show or change stored settings")
    p_set.add_argument("action", choices=["show", "set-key", "set-model", "test"])
    p_set.add_argument("value", nargs="?", default=None)

    p_models = sub.add_parser("models", help="List available models")
    p_models.add_argument("--refresh", action="store_true", help="Ignore the cached list")

    args = parser.parse_args(argv)

    if args.verbose and args.quiet:
        print("Cannot use --verbose and --quiet together.", file=sys.stderr)
        sys.exit(2)
    if args.verbose:
        setup_logging(level="DEBUG", json_logs=args.log_json)
    elif args.quiet:
        setup_logging(level="WARNING", json_logs=args.log_json)
    else:
        setup_logging(level=None, json_logs=args.log_json)

    logger.debug("CLI args parsed: %s", vars(args))

    try:
        cfg = load_config(args.config)
    except (OSError, FindAIError) as e:
        logger.error("Cannot load config %s: %s", args.config, e)
        sys.exit(2)

    handlers = {
        "find": cmd_find,
        "render": cmd_render,
        "ask": cmd_ask,
        "chat": cmd_chat,
        "settings": cmd_settings,
        "models": cmd_models,
    }
    try:
        code = handlers[args.cmd](args, cfg)
    except FindAIError as e:
        logger.error("%s", e)
        code = 1
    except OSError as e:
        logger.error("I/O error: %s", e)
        code = 2
    sys.exit(code)


if __name__ == "__main__":
    main()
