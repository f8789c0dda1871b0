import pytest
from pydantic import ValidationError

from find_ai.document.model import TextNode
from find_ai.document.parser import parse_html
from find_ai.document.walker import TextSegment, walk_text
from find_ai.search.index import MatchRecord, build_match_list, find_occurrences


def _segment(text):
    return TextSegment(node=TextNode(text), text=text)


def test_find_occurrences_reports_overlaps():
    assert find_occurrences("aaa", "aa") == [0, 1]
    assert find_occurrences("abc", "") == []
    assert find_occurrences("abc", "z") == []


def test_cat_example_offsets():
    seg = _segment("The cat sat on the cat mat")
    matches = build_match_list("cat", [seg])
    assert [(m.start, m.end) for m in matches] == [(4, 7), (19, 22)]
    assert all(m.text == "cat" for m in matches)


def test_case_insensitive_keeps_original_text():
    matches = build_match_list("CAT", [_segment("Cat and cAt")])
    assert [m.text for m in matches] == ["Cat", "cAt"]


def test_matches_in_document_order_across_segments(page):
    matches = build_match_list("cat", walk_text(page.body))
    assert [m.segment.text for m in matches] == [
        "The cat sat on the cat mat",
        "The cat sat on the cat mat",
        "Cat",
    ]


def test_match_never_spans_segments():
    doc = parse_html("<p>ca<b>t</b></p>")
    assert build_match_list("cat", walk_text(doc.body)) == []


def test_blank_query_yields_nothing():
    assert build_match_list("", [_segment("abc")]) == []


def test_match_record_rejects_bad_offsets():
    seg = _segment("abc")
    with pytest.raises(ValidationError):
        MatchRecord(segment=seg, start=2, end=5, text="c")
    with pytest.raises(ValidationError):
        MatchRecord(segment=seg, start=1, end=1, text="")
