from __future__ import annotations

import re
import time
from pathlib import Path
from typing import Callable, Dict, Optional

from pydantic import BaseModel

from ..render.html import esc, to_html, to_plain_text
from ..render.markdown import render

PAGE_STYLE = (
    "<style>body{font-family:system-ui,Segoe UI,Arial,sans-serif;max-width:900px;margin:40px auto;padding:0 16px}"
    " h1{font-size:1.6rem} code,pre{background:#f6f8fa;padding:2px 4px;border-radius:4px}"
    " blockquote{border-left:3px solid #ccc;margin-left:0;padding-left:12px;color:#555}"
    " .highlight{background:#ffeb3b} .highlight.current{background:#ff9800}</style>"
)

# Extensions that map onto an export format other than themselves.
EXTENSION_ALIASES = {"htm": "html", "markdown": "md", "text": "txt"}
DEFAULT_FORMAT = "md"


class SavedAnswer(BaseModel):
    question: str
    answer: str
    model: str = ""


def html_page(title: str, body: str) -> str:
    head = f"<!doctype html><html><head><meta charset='utf-8'>\n<title>{esc(title)}</title>\n{PAGE_STYLE}"
    return f"{head}\n</head><body>\n{body}\n</body></html>"


def _markdown(saved: SavedAnswer) -> str:
    out = f"# {saved.question}\n\n{saved.answer.strip()}"
    if saved.model:
        out += f"\n\n_Model: {saved.model}_"
    return out.strip() + "\n"


def _plain(saved: SavedAnswer) -> str:
    out = f"QUESTION: {saved.question}\n\n{to_plain_text(render(saved.answer))}"
    if saved.model:
        out += f"\n\nMODEL: {saved.model}"
    return out.strip() + "\n"


def _html(saved: SavedAnswer) -> str:
    parts = [f"<h1>{esc(saved.question)}</h1>", f"<div class='answer'>{to_html(render(saved.answer))}</div>"]
    if saved.model:
        parts.append(f"<p><small>Model: {esc(saved.model)}</small></p>")
    return html_page(saved.question, "\n".join(parts))


def _json(saved: SavedAnswer) -> str:
    return saved.model_dump_json(indent=2)


WRITERS: Dict[str, Callable[[SavedAnswer], str]] = {
    "md": _markdown,
    "txt": _plain,
    "html": _html,
    "json": _json,
}


def infer_format(out_path: Optional[str], fmt: Optional[str] = None) -> str:
    """An explicit ``fmt`` wins; otherwise the extension decides, falling back to Markdown."""
    if fmt:
        return fmt.lower()
    suffix = Path(out_path).suffix.lower().lstrip(".") if out_path else ""
    suffix = EXTENSION_ALIASES.get(suffix, suffix)
    return suffix if suffix in WRITERS else DEFAULT_FORMAT


def _filename_for(question: str, fmt: str, limit: int = 60) -> str:
    words = re.findall(r"[a-z0-9]+", question.lower())
    slug = "-".join(words)[:limit].rstrip("-") or "query"
    return f"{time.strftime('%Y%m%d_%H%M%S')}_{slug}.{fmt}"


def write_output(
    question: str,
    answer: str,
    out_path: Optional[str] = None,
    fmt: Optional[str] = None,
    save_dir: Optional[str] = None,
    model: str = "",
) -> Path:
    """Save one chat answer; without ``out_path`` a timestamped file goes to ``save_dir``."""
    fmt = infer_format(out_path, fmt)
    writer = WRITERS.get(fmt)
    if writer is None:
        raise ValueError(f"Unsupported format: {fmt}")

    if out_path:
        target = Path(out_path)
    else:
        target = Path(save_dir or "outputs") / _filename_for(question, fmt)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(writer(SavedAnswer(question=question, answer=answer, model=model)), encoding="utf-8")
    return target
