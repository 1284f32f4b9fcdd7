"""
Event Bus - Pattern Matching Tests
====================================
Covers:
- Exact string patterns
- Regex patterns use search (substring), not anchored match
- Enum members as event names and patterns
- Textual form of event names
"""

import re
from enum import Enum

from eventbus.patterns import (
    MATCH_ALL,
    event_text,
    is_event_name,
    is_pattern,
    matches,
)


class OrderEvent(str, Enum):
    PLACED = "order.placed"
    SHIPPED = "order.shipped"


class Signal(Enum):
    RELOAD = 1
    shutdown = "shutdown"


# ══════════════════════════════════════════════════════════════
# EXACT PATTERNS
# ══════════════════════════════════════════════════════════════

class TestExactPatterns:
    def test_identical_string_matches(self):
        assert matches("aa123bb", "aa123bb")

    def test_different_string_does_not_match(self):
        assert not matches("aa123bb", "aa123b")

    def test_exact_string_is_not_substring(self):
        assert not matches("123", "aa123bb")

    def test_enum_pattern_matches_same_member(self):
        assert matches(Signal.RELOAD, Signal.RELOAD)
        assert not matches(Signal.RELOAD, Signal.shutdown)

    def test_str_enum_equals_its_value(self):
        assert matches("order.placed", OrderEvent.PLACED)
        assert matches(OrderEvent.PLACED, "order.placed")

    def test_plain_enum_never_equals_string(self):
        assert not matches("shutdown", Signal.shutdown)
        assert not matches(Signal.shutdown, "shutdown")


# ══════════════════════════════════════════════════════════════
# REGEX PATTERNS
# ══════════════════════════════════════════════════════════════

class TestRegexPatterns:
    def test_substring_search(self):
        assert matches(re.compile("123b"), "aa123bb")

    def test_no_match(self):
        assert not matches(re.compile("123a"), "aa123bb")

    def test_anchors_are_respected(self):
        assert matches(re.compile(r"^order\."), "order.placed")
        assert not matches(re.compile(r"^order\."), "reorder.placed")

    def test_regex_sees_textual_form_of_enum(self):
        assert matches(re.compile("placed$"), OrderEvent.PLACED)
        assert matches(re.compile("^RELOAD$"), Signal.RELOAD)
        assert matches(re.compile("^shutdown$"), Signal.shutdown)

    def test_match_all(self):
        assert matches(MATCH_ALL, "anything")
        assert matches(MATCH_ALL, "")
        assert matches(MATCH_ALL, Signal.RELOAD)


# ══════════════════════════════════════════════════════════════
# EVENT NAMES
# ══════════════════════════════════════════════════════════════

class TestEventNames:
    def test_event_text(self):
        assert event_text("a.b") == "a.b"
        assert event_text(OrderEvent.SHIPPED) == "order.shipped"
        assert event_text(Signal.RELOAD) == "RELOAD"
        assert event_text(Signal.shutdown) == "shutdown"

    def test_valid_event_names(self):
        assert is_event_name("x")
        assert is_event_name("")
        assert is_event_name(OrderEvent.PLACED)
        assert is_event_name(Signal.RELOAD)

    def test_invalid_event_names(self):
        for value in (123, 1.5, None, True, b"bytes", ["x"], object()):
            assert not is_event_name(value)

    def test_patterns(self):
        assert is_pattern("x")
        assert is_pattern(Signal.RELOAD)
        assert is_pattern(re.compile("x"))
        assert not is_pattern(object())
        assert not is_pattern(None)
