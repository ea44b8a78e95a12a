"""
A small iCalendar (RFC5545) parser.

The parser is deliberately shallow: it takes care of line folding,
content line tokenizing and component nesting, and leaves property
values as raw text.  The decoders in :mod:`minicaldav.ical.values`
turn the few values we need into Python objects.
"""

from .lines import unfold_lines
from .parser import parse_content_line, parse_ical
from .types import Component, ComponentKind, Property
from .values import (
    TimezoneResolver,
    ZoneInfoResolver,
    decode_date_or_datetime,
    decode_duration,
    split_param_values,
    split_text_list,
    unescape_text,
)

__all__ = [
    "unfold_lines",
    "parse_ical",
    "parse_content_line",
    "Component",
    "ComponentKind",
    "Property",
    "TimezoneResolver",
    "ZoneInfoResolver",
    "decode_date_or_datetime",
    "decode_duration",
    "split_param_values",
    "split_text_list",
    "unescape_text",
]
