"""
Parses unfolded iCalendar content lines into a forest of components.
"""

from typing import List
from typing import Union

from requests.structures import CaseInsensitiveDict

from .lines import unfold_lines
from .types import CALENDAR_CHILDREN
from .types import Component
from .types import ComponentKind
from .types import Property
from minicaldav.lib import error


def _split_unquoted(text: str, sep: str, maxsplit: int = -1) -> List[str]:
    """
    Splits text on sep, ignoring occurrences inside double-quoted
    parameter values.
    """
    parts = []
    current = ""
    quoted = False
    for char in text:
        if char == '"':
            quoted = not quoted
        if char == sep and not quoted and maxsplit != 0:
            parts.append(current)
            current = ""
            maxsplit -= 1
            continue
        current += char
    parts.append(current)
    return parts


def parse_content_line(line: str) -> Property:
    """
    Splits ``NAME;PARAM=a,"b;c":value`` into a Property.  The value
    starts after the first colon that is not inside a quoted parameter
    value, so both parameters and the value may contain colons.
    """
    parts = _split_unquoted(line, ":", maxsplit=1)
    if len(parts) < 2:
        raise error.FormatError(reason="no value separator in %r" % line)
    head, value = parts
    tokens = _split_unquoted(head, ";")
    name = tokens[0].strip()
    if not name:
        raise error.FormatError(reason="empty property name in %r" % line)
    params = CaseInsensitiveDict()
    for token in tokens[1:]:
        if "=" not in token:
            raise error.FormatError(
                reason="parameter %r without value in %r" % (token, line)
            )
        key, raw = token.split("=", 1)
        if not key.strip():
            raise error.FormatError(reason="empty parameter name in %r" % line)
        params[key.strip()] = raw
    return Property(name=name, value=value, params=params)


def _attach(stack: List[Component], roots: List[Component], comp: Component) -> None:
    if stack:
        parent = stack[-1]
        if comp.kind == ComponentKind.VCALENDAR:
            raise error.FormatError(
                reason="VCALENDAR nested inside %s" % parent.name
            )
        if comp.kind in CALENDAR_CHILDREN and parent.kind != ComponentKind.VCALENDAR:
            raise error.FormatError(
                reason="%s nested inside %s" % (comp.name, parent.name)
            )
        parent.children.append(comp)
    else:
        if comp.kind in CALENDAR_CHILDREN:
            raise error.FormatError(
                reason="%s outside of any VCALENDAR" % comp.name
            )
        roots.append(comp)


def parse_ical(text: Union[str, bytes]) -> List[Component]:
    """
    Parses an iCalendar document.

    Returns the top level components, normally a single VCALENDAR.
    Raises FormatError on structural problems: unbalanced or
    mismatched BEGIN/END, properties outside of any component, and
    VEVENT/VTODO/VJOURNAL/VFREEBUSY/VTIMEZONE components not placed
    directly inside a VCALENDAR.
    """
    roots: List[Component] = []
    ## components that are opened but not yet closed, innermost last
    stack: List[Component] = []

    for line in unfold_lines(text):
        prop = parse_content_line(line)
        if prop.name == "BEGIN":
            if not prop.value.strip():
                raise error.FormatError(reason="BEGIN without component name")
            comp = Component.named(prop.value.strip())
            _attach(stack, roots, comp)
            stack.append(comp)
        elif prop.name == "END":
            name = prop.value.strip().upper()
            if not stack:
                raise error.FormatError(reason="END:%s without BEGIN" % name)
            if stack[-1].name != name:
                raise error.FormatError(
                    reason="END:%s does not match BEGIN:%s" % (name, stack[-1].name)
                )
            stack.pop()
        elif stack:
            stack[-1].properties.append(prop)
        else:
            raise error.FormatError(
                reason="property %s outside of any component" % prop.name
            )

    if stack:
        raise error.FormatError(
            reason="Missing END for %s" % ", ".join(c.name for c in stack)
        )
    return roots
