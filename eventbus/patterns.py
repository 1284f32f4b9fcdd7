"""
Event Bus - Pattern Matching
==============================
Decides whether an event name is selected by a subscription pattern.

Event names:
- str
- Enum member (the bus's "atom" form)

Patterns:
- str / Enum member  -> exact match by equality
- compiled regex     -> substring search over the textual form

A str-valued Enum member compares equal to its string value, so it
matches an exact string pattern. A plain Enum member never equals a
string, so identical spelling in a different representation does not
match an exact pattern. Regex patterns always see the textual form.

Pure functions only. Called once per listener per publish.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Union

EventName = Union[str, Enum]
Pattern = Union[str, Enum, re.Pattern]

# Empty expression: search() succeeds on any string.
MATCH_ALL = re.compile("")


def is_event_name(value: Any) -> bool:
    """True for str and Enum members. Everything else is rejected."""
    return isinstance(value, (str, Enum))


def is_pattern(value: Any) -> bool:
    return is_event_name(value) or isinstance(value, re.Pattern)


def event_text(event_name: EventName) -> str:
    """
    Textual form of an event name.

    Enum members render as their value when it is a string,
    otherwise as their member name.
    """
    if isinstance(event_name, Enum):
        value = event_name.value
        return value if isinstance(value, str) else event_name.name
    return str(event_name)


def matches(pattern: Pattern, event_name: EventName) -> bool:
    """Return True if `pattern` selects `event_name`."""
    if isinstance(pattern, re.Pattern):
        return pattern.search(event_text(event_name)) is not None
    return pattern == event_name
