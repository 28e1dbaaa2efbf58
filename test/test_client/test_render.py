# test/test_client/test_render.py
from medmentor.client.render import (
    PENDING_INDICATOR,
    confidence_badge,
    render_message,
    render_transcript,
)
from medmentor.client.__main__ import _print_latest
from medmentor.client.session import ChatSession, Message


def test_user_message_is_plain_bubble():
    assert render_message(Message(role="user", content="hi")) == "You: hi"


def test_assistant_without_metadata_has_no_panel():
    out = render_message(Message(role="assistant", content="hello"))
    assert out == "MedMentor: hello"


def test_assistant_with_confidence_and_evidence():
    msg = Message(
        role="assistant",
        content="Generally safe.",
        confidence_level="high",
        evidence_sources=(
            {"source": "FDA label", "snippet": "no interaction"},
            {"source": "Reference DB"},
        ),
    )
    out = render_message(msg)

    assert "[High Confidence]" in out
    assert "Evidence References:" in out
    assert "  * FDA label" in out
    assert '    "no interaction"' in out
    assert "  * Reference DB" in out
    assert out.count("  * ") == 2


def test_empty_evidence_with_confidence_shows_badge_only():
    out = render_message(Message(role="assistant", content="x", confidence_level="low", evidence_sources=()))
    assert "[Low Confidence]" in out
    assert "Evidence References:" not in out


def test_unknown_confidence_has_no_badge():
    assert confidence_badge("certain") is None
    assert confidence_badge(None) is None
    assert confidence_badge("medium") == "Medium Confidence"


def test_transcript_shows_pending_indicator_while_loading():
    session = ChatSession(advisor=None, store=None)
    session.messages.append(Message(role="user", content="q"))
    session.is_loading = True
    assert render_transcript(session).endswith(PENDING_INDICATOR)

    session.is_loading = False
    assert PENDING_INDICATOR not in render_transcript(session)


def test_terminal_loop_prints_pending_indicator_while_loading(capsys):
    session = ChatSession(advisor=None, store=None)
    session.is_loading = True

    _print_latest(session)

    assert capsys.readouterr().out == PENDING_INDICATOR + "\n"
