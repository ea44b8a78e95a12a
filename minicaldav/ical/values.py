"""
Decoders for iCalendar property and parameter values (RFC5545
section 3.3).  Only the value types needed to build an event view are
covered; everything else stays raw text on the property.
"""

import logging
import re
from datetime import date
from datetime import datetime
from datetime import timedelta
from datetime import timezone
from datetime import tzinfo
from typing import Any
from typing import List
from typing import Optional
from typing import Protocol
from typing import Tuple
from typing import Union
from zoneinfo import ZoneInfo
from zoneinfo import ZoneInfoNotFoundError

from minicaldav.lib import error

log = logging.getLogger(__name__)

_date_re = re.compile(r"^(\d{4})(\d{2})(\d{2})$")
_datetime_re = re.compile(r"^(\d{4})(\d{2})(\d{2})T(\d{2})(\d{2})(\d{2})(Z?)$")
_duration_re = re.compile(
    r"^([+-])?P(?:(\d+)W)?(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?)?$"
)
_escape_re = re.compile(r"\\(.)", re.DOTALL)


class TimezoneResolver(Protocol):
    """
    Turns a TZID label into a tzinfo.  Returns None for labels it does
    not know, the value is then left naive.
    """

    def resolve(self, tzid: str) -> Optional[tzinfo]:
        ...


class ZoneInfoResolver:
    """
    Resolves TZIDs that are IANA zone names, like ``Europe/Oslo``,
    through the system timezone database.
    """

    def resolve(self, tzid: str) -> Optional[tzinfo]:
        try:
            return ZoneInfo(tzid)
        except (ZoneInfoNotFoundError, ValueError):
            log.debug("Could not resolve timezone %s", tzid)
            return None


def decode_date_or_datetime(
    prop: Any, resolver: Optional[TimezoneResolver] = None
) -> Tuple[Union[date, datetime], Optional[str]]:
    """
    Decodes a DATE or DATE-TIME property like DTSTART.

    Returns a tuple (value, tzid).  UTC values (trailing ``Z``) come
    back timezone-aware.  A value with a TZID parameter comes back
    aware if the resolver knows the zone, otherwise naive; in both
    cases the TZID label is returned.  The TZID of a DATE value is
    returned but has no effect.

    Raises FormatError for malformed values and for a UTC value that
    also carries a TZID.
    """
    text = prop.value.strip()
    tzid = prop.param("TZID")
    value_type = (prop.param("VALUE") or "").upper()

    match = _date_re.match(text)
    if match:
        return (_build(date, match.groups(), text), tzid)
    if value_type == "DATE":
        raise error.FormatError(reason="%s: malformed date %r" % (prop.name, text))

    match = _datetime_re.match(text)
    if not match:
        raise error.FormatError(
            reason="%s: malformed date-time %r" % (prop.name, text)
        )
    value = _build(datetime, match.groups()[:6], text)
    if match.group(7):
        if tzid is not None:
            raise error.FormatError(
                reason="%s: UTC time %r can't have TZID %s" % (prop.name, text, tzid)
            )
        return (value.replace(tzinfo=timezone.utc), None)
    if tzid is not None and resolver is not None:
        tz = resolver.resolve(tzid)
        if tz is not None:
            value = value.replace(tzinfo=tz)
    return (value, tzid)


def _build(cls, groups, text):
    try:
        return cls(*[int(x) for x in groups])
    except ValueError as e:
        raise error.FormatError(reason="invalid date %r: %s" % (text, e)) from e


def decode_duration(text: str) -> timedelta:
    """
    Decodes a duration like ``PT1H30M``, ``P2W`` or ``-P1D``.
    """
    text = text.strip()
    match = _duration_re.match(text)
    if not match or text.endswith(("P", "T")):
        raise error.FormatError(reason="malformed duration %r" % text)
    sign, weeks, days, hours, minutes, seconds = match.groups()
    try:
        ret = timedelta(
            weeks=int(weeks or 0),
            days=int(days or 0),
            hours=int(hours or 0),
            minutes=int(minutes or 0),
            seconds=int(seconds or 0),
        )
    except OverflowError as e:
        raise error.FormatError(reason="duration %r out of range" % text) from e
    if sign == "-":
        ret = -ret
    return ret


def _unescape_char(match):
    char = match.group(1)
    if char in "nN":
        return "\n"
    return char


def unescape_text(text: str) -> str:
    """
    Reverses the TEXT escaping of RFC5545 section 3.3.11:
    ``\\,`` ``\\;`` ``\\\\`` and ``\\n`` (or ``\\N``).
    """
    return _escape_re.sub(_unescape_char, text)


def split_text_list(text: str) -> List[str]:
    """
    Splits a multi-valued TEXT property (like CATEGORIES) on the
    commas that are not escaped, and unescapes each value.
    """
    values = []
    current = ""
    escaped = False
    for char in text:
        if escaped:
            current += "\\" + char
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == ",":
            values.append(current)
            current = ""
        else:
            current += char
    if escaped:
        current += "\\"
    values.append(current)
    return [unescape_text(x) for x in values]


def split_param_values(raw: str) -> List[str]:
    """
    Splits a raw parameter value on the commas outside of double
    quotes and strips the quotes, i.e. ``"a,b",c`` gives
    ``["a,b", "c"]``.
    """
    values = []
    current = ""
    quoted = False
    for char in raw:
        if char == '"':
            quoted = not quoted
        elif char == "," and not quoted:
            values.append(current)
            current = ""
        else:
            current += char
    values.append(current)
    return values
