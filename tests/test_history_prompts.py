import pytest

from find_ai.chat.cancel import CancelToken
from find_ai.chat.history import ConversationHistory
from find_ai.chat.prompts import FORMAT_REMINDER, SYSTEM_PROMPT, build_messages, error_message
from find_ai.errors import CancellationNotice


def _filled(n):
    h = ConversationHistory()
    for i in range(n):
        if i % 2 == 0:
            h.add_user(f"u{i}")
        else:
            h.add_assistant(f"a{i}")
    return h


def test_twelve_turns_trimmed_to_ten_then_append():
    h = _filled(11)
    h.add_assistant("a11")
    assert len(h) == 12
    h.add_user("new")
    assert len(h) == 11
    assert h.turns[0].content == "u2"
    assert h.turns[-1].content == "new"


def test_short_history_not_trimmed():
    h = _filled(3)
    h.add_user("x")
    assert len(h) == 4


def test_as_messages_shape():
    h = ConversationHistory()
    h.add_user("hi")
    h.add_assistant("hello")
    assert h.as_messages() == [
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
    ]


def test_first_turn_carries_page_context():
    h = ConversationHistory()
    h.add_user("q")
    msgs = build_messages(h, "PAGE")
    assert msgs[0] == {"role": "system", "content": SYSTEM_PROMPT + "PAGE"}
    assert msgs[1:] == [{"role": "user", "content": "q"}]


def test_later_turns_use_reminder():
    h = ConversationHistory()
    h.add_user("q")
    h.add_assistant("a")
    h.add_user("q2")
    msgs = build_messages(h, "PAGE")
    assert msgs[0] == {"role": "system", "content": FORMAT_REMINDER}
    assert len(msgs) == 4


def test_error_message_mentions_settings():
    msg = error_message("Rate limit exceeded. Please try again later.")
    assert msg.startswith("**Error:** Rate limit exceeded.")
    assert "settings" in msg


def test_cancel_token():
    token = CancelToken()
    token.raise_if_cancelled()
    token.cancel("stop")
    assert token.cancelled
    with pytest.raises(CancellationNotice, match="stop"):
        token.raise_if_cancelled()
