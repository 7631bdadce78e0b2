"""Tests for the multi-line scanning state machines."""

from __future__ import annotations

from omen.scanning import ParenBalancer, TripleQuoteTracker, capture_balanced, split_top_level


def test_tracker_completes_single_line_string() -> None:
    tracker = TripleQuoteTracker()

    assert tracker.feed('    """Return the user."""') is True
    assert tracker.is_open is False
    assert tracker.take_completed() == "Return the user."
    assert tracker.take_completed() is None


def test_tracker_accumulates_multi_line_string() -> None:
    tracker = TripleQuoteTracker()
    lines = [
        "    '''Load settings",
        "",
        "    from the environment.",
        "    '''",
    ]

    consumed = [tracker.feed(line) for line in lines]

    assert consumed == [True, True, True, True]
    assert tracker.take_completed() == "Load settings from the environment."


def test_tracker_captures_text_before_closing_delimiter() -> None:
    tracker = TripleQuoteTracker()
    tracker.feed('"""First line')

    assert tracker.is_open
    tracker.feed('second line"""')

    assert tracker.take_completed() == "First line second line"


def test_tracker_ignores_ordinary_lines() -> None:
    tracker = TripleQuoteTracker()

    assert tracker.feed("x = 'not a docstring'") is False
    assert tracker.take_completed() is None


def test_paren_balancer_spans_lines() -> None:
    balancer = ParenBalancer()

    assert balancer.feed("(Integer,") is False
    assert balancer.feed("    ForeignKey('users.id'),") is False
    assert balancer.feed("    nullable=False)") is True
    assert balancer.text == "(Integer, ForeignKey('users.id'), nullable=False)"


def test_paren_balancer_is_not_done_before_first_paren() -> None:
    balancer = ParenBalancer()

    assert balancer.feed("no parens here") is False
    assert balancer.done is False


def test_capture_balanced_handles_nesting_and_unterminated_text() -> None:
    text = "Column(String(50), default=func())  # trailing"

    assert capture_balanced(text, 6) == "(String(50), default=func())"
    assert capture_balanced("f(a, (b", 1) == "(a, (b"


def test_split_top_level_respects_brackets_and_quotes() -> None:
    parts = split_top_level("a, b: Dict[str, int] = {}, c='x,y', *args")

    assert parts == ["a", "b: Dict[str, int] = {}", "c='x,y'", "*args"]
    assert split_top_level("  ") == []
