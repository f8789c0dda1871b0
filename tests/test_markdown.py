from find_ai.render.markdown import parse_inline, render
from find_ai.render.nodes import BlockNode, bold, code_span, italic, line_break, link, strike, text


def test_inline_example_paragraph():
    blocks = render("**bold** and *em* and ~~gone~~")
    assert blocks == [
        BlockNode(
            kind="paragraph",
            inlines=[bold(text("bold")), text(" and "), italic(text("em")), text(" and "), strike(text("gone"))],
        )
    ]


def test_code_fence_example_is_not_reprocessed():
    blocks = render("```js\nconsole.log(1)\n```")
    assert blocks == [BlockNode(kind="code", language="js", text="console.log(1)")]

    blocks = render("```\n**not bold** *x*\n```")
    assert blocks[0].kind == "code"
    assert blocks[0].text == "**not bold** *x*"


def test_unterminated_fence_stays_text_until_closed():
    partial = render("```py\nx = 1")
    assert all(b.kind != "code" for b in partial)
    done = render("```py\nx = 1\n```")
    assert done == [BlockNode(kind="code", language="py", text="x = 1")]


def test_render_is_deterministic():
    src = "# T\n\n- a\n- **b**\n\n> q\n\n1. one\n2. two\n\n---\n\nsee https://example.com."
    assert render(src) == render(src)


def test_headings_levels():
    blocks = render("# One\n### Three\n###### Six\n#nospace")
    assert [(b.kind, b.level) for b in blocks] == [
        ("heading", 1),
        ("heading", 3),
        ("heading", 6),
        ("paragraph", 0),
    ]
    assert blocks[0].inlines == [text("One")]


def test_lists_and_rule():
    blocks = render("- a\n* b\n+ c\n---\n1. x\n2. *y*")
    assert blocks[0] == BlockNode(kind="unordered_list", items=[[text("a")], [text("b")], [text("c")]])
    assert blocks[1].kind == "rule"
    assert blocks[2] == BlockNode(kind="ordered_list", items=[[text("x")], [italic(text("y"))]])


def test_blockquote_lines_joined():
    blocks = render("> first\n> second")
    assert blocks == [BlockNode(kind="blockquote", inlines=[text("first"), line_break(), text("second")])]


def test_each_line_is_its_own_paragraph():
    blocks = render("one\ntwo\n\nthree")
    assert [b.plain() for b in blocks] == ["one", "two", "three"]
    assert all(b.kind == "paragraph" for b in blocks)


def test_metadata_block_only_at_start():
    src = "Page Title: T\nURL: https://x\nPercentage of content sent: 50.00%\n\nBody"
    blocks = render(src)
    assert blocks[0].kind == "metadata"
    assert blocks[0].text.startswith("Page Title: T")
    assert blocks[1] == BlockNode(kind="paragraph", inlines=[text("Body")])


def test_bare_url_excludes_trailing_punctuation():
    assert parse_inline("see https://example.com/a.") == [
        text("see "),
        link("https://example.com/a"),
        text("."),
    ]


def test_markdown_link():
    assert parse_inline("[docs](https://d.io/x) now") == [link("https://d.io/x", text("docs")), text(" now")]


def test_code_span_wins_over_emphasis():
    assert parse_inline("`**x**` and **y**") == [code_span("**x**"), text(" and "), bold(text("y"))]


def test_unmatched_delimiters_stay_text():
    assert parse_inline("2 * 3 and **open") == [text("2 * 3 and **open")]


def test_underscore_forms():
    assert parse_inline("__b__ _i_") == [bold(text("b")), text(" "), italic(text("i"))]


def test_nested_emphasis_inside_bold():
    assert parse_inline("**a *b* c**") == [bold(text("a "), italic(text("b")), text(" c"))]


def test_triple_star_is_bold_italic():
    assert parse_inline("***x***") == [bold(italic(text("x")))]


def test_empty_input():
    assert render("") == []
    assert render("\n\n  \n") == []


def test_italic_closer_inside_code_span_is_skipped():
    assert parse_inline("*a `*` b*") == [italic(text("a "), code_span("*"), text(" b"))]


def test_italic_closer_inside_bare_url_is_skipped():
    assert parse_inline("_see https://x.com/a_b_") == [text("_see "), link("https://x.com/a_b_")]


def test_italic_around_markdown_link():
    assert parse_inline("_read [a_b](https://d.io/x_y) first_") == [
        italic(text("read "), link("https://d.io/x_y", text("a_b")), text(" first"))
    ]


def test_bold_ending_in_bare_url():
    assert parse_inline("**see https://x.com/a**") == [bold(text("see "), link("https://x.com/a"))]
