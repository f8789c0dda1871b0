import pytest

from find_ai.document.model import TextNode
from find_ai.document.parser import parse_html
from find_ai.document.walker import TextSegment, walk_text
from find_ai.search.cursor import NO_MATCHES, NavigationCursor
from find_ai.search.index import build_match_list
from find_ai.search.overlay import HighlightOverlay


def _cursor(markup="<p>The cat sat on the cat mat</p>", query="cat"):
    doc = parse_html(markup)
    overlay = HighlightOverlay(doc.body)
    scrolled = []
    cursor = NavigationCursor(overlay, scroll_to=scrolled.append)
    matches = build_match_list(query, walk_text(doc.body))
    cursor.reset(matches, overlay.apply(matches))
    return cursor, overlay, scrolled


def test_cat_example_navigation_wraps():
    cursor, overlay, _ = _cursor()
    assert cursor.index == 0
    assert cursor.next() == 1
    assert cursor.next() == 0


def test_prev_wraps_to_last():
    cursor, _, _ = _cursor()
    assert cursor.prev() == 1
    assert cursor.prev() == 0


def test_single_match_stays_put():
    cursor, _, _ = _cursor("<p>one cat</p>")
    assert cursor.next() == 0
    assert cursor.prev() == 0


def test_empty_cursor_navigation_is_noop():
    cursor, overlay, scrolled = _cursor(query="zebra")
    assert cursor.is_empty
    assert cursor.next() is None
    assert cursor.prev() is None
    assert scrolled == []
    assert overlay.current is None


def test_positioning_marks_current_and_scrolls():
    cursor, overlay, scrolled = _cursor()
    cursor.next()
    assert overlay.current is cursor.handles[1]
    assert [h.start for h in scrolled] == [4, 19]


def test_status_texts():
    cursor, _, _ = _cursor()
    st = cursor.status("cat")
    assert st.text == "1/2" and st.show_navigation and not st.show_ask
    cursor.next()
    assert cursor.status("cat").text == "2/2"

    empty, _, _ = _cursor(query="zebra")
    st = empty.status("zebra")
    assert st.text == NO_MATCHES and st.show_ask and not st.show_navigation

    blank = empty.status("   ")
    assert blank.text == "" and not blank.show_ask and not blank.show_navigation


def test_match_without_handle_is_still_navigable():
    cursor, overlay, scrolled = _cursor("<p>aaa</p>", "aa")
    assert cursor.handles[0] is None
    assert cursor.index == 0
    assert scrolled == []
    assert cursor.next() == 1
    assert overlay.current is cursor.handles[1]


def test_reset_rejects_misaligned_handles():
    cursor, _, _ = _cursor()
    seg = TextSegment(node=TextNode("cat"), text="cat")
    matches = build_match_list("cat", [seg])
    with pytest.raises(ValueError):
        cursor.reset(matches, [])


def test_full_cycle_returns_to_start():
    cursor, _, _ = _cursor("<p>" + "cat " * 7 + "</p>")
    n = len(cursor)
    for _ in range(n):
        cursor.next()
    assert cursor.index == 0
    for _ in range(n):
        cursor.prev()
    assert cursor.index == 0
