"""
Line unfolding for the iCalendar wire format.

RFC5545 section 3.1: long content lines are split ("folded") by
inserting a CRLF followed by a single space or tab.  Unfolding removes
the line break and that one whitespace character.
"""

import re
from typing import Iterator
from typing import Union

from minicaldav.lib import error

## Servers are sloppy with line endings, so CRLF, bare LF and bare CR
## are all accepted as terminators.
_line_break = re.compile(r"\r\n|\n|\r")


def unfold_lines(text: Union[str, bytes]) -> Iterator[str]:
    """
    Yields the logical content lines of an iCalendar document.

    Blank lines are skipped.  A physical line without any colon that
    follows a content line is taken as a continuation where the
    server forgot the leading whitespace; this is logged as a
    deviation rather than failing the whole document.

    Raises FormatError if the first content line has no colon, or if a
    continuation line appears before any content line.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as e:
            raise error.FormatError(reason="calendar data is not UTF-8: %s" % e) from e

    current = None
    for lineno, line in enumerate(_line_break.split(text), start=1):
        if line[:1] in (" ", "\t"):
            if current is None:
                raise error.FormatError(
                    reason="continuation line %i with nothing to continue" % lineno
                )
            current += line[1:]
            continue
        if not line.strip():
            continue
        if ":" not in line:
            if current is None:
                raise error.FormatError(
                    reason="line %i is not a content line: %r" % (lineno, line)
                )
            error.weirdness("unfolded continuation on line %i" % lineno, line)
            current += line
            continue
        if current is not None:
            yield current
        current = line
    if current is not None:
        yield current
