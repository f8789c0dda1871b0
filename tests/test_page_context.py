from find_ai.chat.context import capture_page_context, metadata_header, truncation_notice
from find_ai.document.parser import parse_html


def test_metadata_header_format():
    assert metadata_header("T", "https://x", "12.50") == (
        "Page Title: T\nURL: https://x\nPercentage of content sent: 12.50%\n\n"
    )


def test_short_page_sent_whole(page):
    ctx = capture_page_context(page)
    assert ctx.percentage_sent == "100.00"
    assert not ctx.truncated
    assert ctx.page_text.startswith("Page Title: Cats\nURL: https://example.com/cats\n")
    assert ctx.page_text.endswith("The cat sat on the cat mat Another Cat here")
    assert "hidden" not in ctx.page_text
    assert truncation_notice(ctx) == ""


def test_long_page_capped_and_noticed():
    doc = parse_html("<p>" + " ".join(f"w{i}," for i in range(800)) + "</p>")
    ctx = capture_page_context(doc, token_cap=500)
    assert ctx.total_tokens == 800
    assert ctx.percentage_sent == "62.50"
    assert ctx.truncated
    body = ctx.page_text.split("\n\n", 1)[1]
    assert body.split() == [f"w{i}" for i in range(500)]
    assert truncation_notice(ctx) == "Page too long: Only 62.50% analyzed (500 of 800 tokens)"


def test_empty_page_defaults():
    ctx = capture_page_context(parse_html(""))
    assert ctx.percentage_sent == "0.00"
    assert ctx.page_text.startswith("Page Title: Untitled Page\n")
