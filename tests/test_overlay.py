from find_ai.document.model import serialize
from find_ai.document.parser import parse_html
from find_ai.document.walker import walk_text
from find_ai.search.index import MatchRecord, build_match_list
from find_ai.search.overlay import HighlightOverlay


def _setup(markup, query):
    doc = parse_html(markup)
    overlay = HighlightOverlay(doc.body)
    matches = build_match_list(query, walk_text(doc.body))
    return doc, overlay, matches


def test_apply_returns_aligned_handles():
    doc, overlay, matches = _setup("<p>The cat sat on the cat mat</p>", "cat")
    handles = overlay.apply(matches)
    assert len(handles) == 2
    assert [(h.start, h.end) for h in handles] == [(4, 7), (19, 22)]
    assert overlay.is_highlighted


def test_projection_wraps_each_match():
    doc, overlay, matches = _setup("<p>The cat sat on the cat mat</p>", "cat")
    handles = overlay.apply(matches)
    overlay.set_current(handles[1])
    html = overlay.project_html()
    assert html == (
        '<body><p>The <span class="highlight">cat</span> sat on the '
        '<span class="highlight current">cat</span> mat</p></body>'
    )


def test_projected_text_equals_canonical_text():
    doc, overlay, matches = _setup("<p>x <i>cat</i> catcat</p>", "cat")
    before = doc.body.text_content
    overlay.apply(matches)
    assert overlay.projected_text() == before


def test_restore_round_trip_and_idempotent():
    doc, overlay, matches = _setup("<div><p>cat &amp; dog</p><p>Cat</p></div>", "cat")
    before = serialize(doc.body)
    overlay.apply(matches)
    overlay.restore()
    overlay.restore()
    assert not overlay.is_highlighted
    assert overlay.current is None
    assert serialize(doc.body) == before
    assert overlay.project_html() == before


def test_overlapping_matches_are_skipped_not_fatal():
    doc, overlay, matches = _setup("<p>aaa</p>", "aa")
    assert len(matches) == 2
    handles = overlay.apply(matches)
    # applied in descending order: the later match wins the overlap
    assert handles[0] is None
    assert (handles[1].start, handles[1].end) == (1, 3)
    assert len(overlay.handles) == 1


def test_detached_segment_is_skipped():
    doc, overlay, matches = _setup("<p>cat</p><p>cat</p>", "cat")
    first_p = doc.body.children[0]
    doc.body.remove(first_p)
    handles = overlay.apply(matches)
    assert handles[0] is None
    assert handles[1] is not None


def test_changed_text_is_skipped():
    doc, overlay, matches = _setup("<p>cat</p>", "cat")
    matches[0].node.text = "dog"
    assert overlay.apply(matches) == [None]


def test_apply_restores_previous_overlay():
    doc, overlay, matches = _setup("<p>cat dog</p>", "cat")
    overlay.apply(matches)
    dog = build_match_list("dog", walk_text(doc.body))
    overlay.apply(dog)
    assert [h.text for h in overlay.handles] == ["dog"]


def test_set_current_moves_marker():
    doc, overlay, matches = _setup("<p>cat cat</p>", "cat")
    a, b = overlay.apply(matches)
    overlay.set_current(a)
    overlay.set_current(b)
    assert not a.current
    assert b.current
    assert overlay.current is b
    overlay.set_current(None)
    assert overlay.current is None and not b.current


def test_fragments_split_node():
    doc, overlay, matches = _setup("<p>a cat b</p>", "cat")
    overlay.apply(matches)
    node = matches[0].node
    frags = overlay.fragments(node)
    assert [(f.text, f.highlight) for f in frags] == [("a ", False), ("cat", True), (" b", False)]


def test_match_record_from_other_tree_is_skipped():
    doc, overlay, _ = _setup("<p>cat</p>", "cat")
    other = parse_html("<p>cat</p>")
    seg = next(walk_text(other.body))
    stray = MatchRecord(segment=seg, start=0, end=3, text="cat")
    assert overlay.apply([stray]) == [None]
