import sys
from pathlib import Path

import pytest

# Repo root = one level above tests/
REPO_ROOT = Path(__file__).resolve().parents[1]

# Ensure repo root is on sys.path so `import cli` and the namespace
# packages (find_ai, llm) resolve without an install.
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from find_ai.document.parser import parse_html  # noqa: E402


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def page():
    return parse_html(
        "<html><head><title>Cats</title><style>.cat{}</style></head><body>"
        "<p>The cat sat on the cat mat</p>"
        "<div style='display:none'>hidden cat</div>"
        "<script>var cat = 1;</script>"
        "<p>Another <b>Cat</b> here</p>"
        "</body></html>",
        url="https://example.com/cats",
    )
