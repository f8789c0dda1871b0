import json

from find_ai.search.debounce import Debouncer
from find_ai.search.session import FindSession
from find_ai.utils.log import EventLog


def test_debouncer_fires_latest_value_once(clock):
    d = Debouncer(0.15, clock=clock)
    d.schedule("c")
    clock.advance(0.1)
    d.schedule("ca")
    clock.advance(0.1)
    assert d.poll() is None
    clock.advance(0.1)
    assert d.poll() == "ca"
    assert d.poll() is None
    assert not d.pending


def test_debouncer_cancel_and_remaining(clock):
    d = Debouncer(0.2, clock=clock)
    assert d.remaining() == 0.0
    d.schedule("x")
    clock.advance(0.05)
    assert abs(d.remaining() - 0.15) < 1e-9
    d.cancel()
    clock.advance(1)
    assert d.poll() is None


def test_typing_debounces_search(page, clock):
    s = FindSession(page, clock=clock)
    s.type("c")
    s.type("ca")
    s.type("cat")
    assert not s.tick()
    assert s.matches == []
    clock.advance(0.15)
    assert s.tick()
    assert len(s.matches) == 3
    assert s.status.text == "1/3"


def test_typing_clears_highlights_immediately(page, clock):
    s = FindSession(page, clock=clock)
    s.search("cat")
    assert s.overlay.is_highlighted
    s.type("cats")
    assert not s.overlay.is_highlighted


def test_typing_drops_stale_matches_until_search_runs(page, clock):
    s = FindSession(page, clock=clock)
    s.search("cat")
    s.next()
    assert s.status.text == "2/3"
    s.type("mat")
    assert s.matches == []
    assert s.next() is None
    assert s.status.text == ""
    assert not s.status.show_navigation
    assert not s.wants_chat()
    clock.advance(0.15)
    assert s.tick()
    assert s.status.text == "1/1"


def test_flush_runs_pending_search(page, clock):
    s = FindSession(page, clock=clock)
    s.type("mat")
    s.flush()
    assert [m.text for m in s.matches] == ["mat"]
    assert not s.debouncer.pending


def test_navigation_through_session(page, clock):
    s = FindSession(page, clock=clock)
    s.search("cat")
    assert s.next() == 1
    assert s.next() == 2
    assert s.next() == 0
    assert s.prev() == 2


def test_hidden_text_is_not_found(page, clock):
    s = FindSession(page, clock=clock)
    assert s.search("hidden") == []
    assert s.status.text == "No matches"
    assert s.wants_chat()


def test_blank_query_clears_state(page, clock):
    s = FindSession(page, clock=clock)
    s.search("cat")
    s.search("   ")
    assert s.matches == []
    assert s.status.text == ""
    assert not s.wants_chat()


def test_close_restores_everything(page, clock):
    s = FindSession(page, clock=clock)
    s.search("cat")
    s.type("ca")
    s.close()
    assert not s.overlay.is_highlighted
    assert not s.debouncer.pending
    assert s.cursor.is_empty


def test_search_event_is_logged(page, clock, tmp_path):
    log_path = tmp_path / "logs" / "search.log.jsonl"
    s = FindSession(page, clock=clock, event_log=EventLog(log_path))
    s.search("cat")
    rows = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
    assert rows[0]["event"] == "search"
    assert rows[0]["query"] == "cat"
    assert rows[0]["matches"] == 3
