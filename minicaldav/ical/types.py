"""
Data types for parsed iCalendar data.

A parsed document is a forest of :class:`Component` objects.  Property
values and parameter values are kept as raw text exactly as found on
the wire (after unfolding); decoding into Python types is done on
request by the functions in :mod:`minicaldav.ical.values`.
"""

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from typing import Iterator
from typing import List
from typing import Optional
from typing import Union

from requests.structures import CaseInsensitiveDict

from .values import split_param_values

## RFC5545 section 3.1
MAX_LINE_OCTETS = 75


class ComponentKind(Enum):
    """The component kinds we know about.  Anything else is UNKNOWN."""

    VCALENDAR = "VCALENDAR"
    VEVENT = "VEVENT"
    VTODO = "VTODO"
    VJOURNAL = "VJOURNAL"
    VFREEBUSY = "VFREEBUSY"
    VTIMEZONE = "VTIMEZONE"
    STANDARD = "STANDARD"
    DAYLIGHT = "DAYLIGHT"
    VALARM = "VALARM"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_name(cls, name: str) -> "ComponentKind":
        try:
            return cls(name.upper())
        except ValueError:
            return cls.UNKNOWN


## Those must live directly inside a VCALENDAR
CALENDAR_CHILDREN = frozenset(
    {
        ComponentKind.VEVENT,
        ComponentKind.VTODO,
        ComponentKind.VJOURNAL,
        ComponentKind.VFREEBUSY,
        ComponentKind.VTIMEZONE,
    }
)


def fold_line(line: str) -> str:
    """
    Folds a content line into physical lines of at most 75 octets,
    each terminated by CRLF.  Multi-byte UTF-8 sequences are never
    split.
    """
    chunks = []
    current = ""
    size = 0
    limit = MAX_LINE_OCTETS
    for char in line:
        width = len(char.encode("utf-8"))
        if size + width > limit:
            chunks.append(current)
            ## the leading space of a continuation line counts too
            current = " "
            size = 1
        current += char
        size += width
    chunks.append(current)
    return "\r\n".join(chunks) + "\r\n"


@dataclass
class Property:
    """
    One content line: ``NAME;PARAM=value:value``.

    ``name`` is normalized to upper case.  ``params`` maps parameter
    names (case-insensitively) to the raw parameter text, quotes
    included.
    """

    name: str
    value: str = ""
    params: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)

    def __post_init__(self) -> None:
        self.name = self.name.upper()
        if not isinstance(self.params, CaseInsensitiveDict):
            self.params = CaseInsensitiveDict(self.params)

    def param(self, name: str) -> Optional[str]:
        """The first value of the parameter, unquoted, or None"""
        values = self.param_values(name)
        return values[0] if values else None

    def param_values(self, name: str) -> List[str]:
        raw = self.params.get(name)
        if raw is None:
            return []
        return split_param_values(raw)

    def to_ical(self) -> str:
        """The unfolded content line, without line terminator"""
        head = self.name
        for key, raw in self.params.items():
            head += ";%s=%s" % (key, raw)
        return "%s:%s" % (head, self.value)


@dataclass
class Component:
    """
    A ``BEGIN:<name>`` ... ``END:<name>`` block.  Properties and child
    components keep the order they had in the source.
    """

    kind: ComponentKind
    name: str
    properties: List[Property] = field(default_factory=list)
    children: List["Component"] = field(default_factory=list)

    @classmethod
    def named(cls, name: str) -> "Component":
        name = name.upper()
        return cls(kind=ComponentKind.from_name(name), name=name)

    def get(self, name: str) -> Optional[Property]:
        """The first property with the given name, or None"""
        name = name.upper()
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def get_all(self, name: str) -> List[Property]:
        name = name.upper()
        return [prop for prop in self.properties if prop.name == name]

    def walk(
        self, kind: Union[ComponentKind, str, None] = None
    ) -> Iterator["Component"]:
        """
        Yields this component and all descendants, depth first.  If
        kind is given, only components of that kind are yielded.
        """
        if isinstance(kind, str):
            kind = ComponentKind.from_name(kind)
        if kind is None or self.kind == kind:
            yield self
        for child in self.children:
            yield from child.walk(kind)

    def to_ical(self) -> str:
        """Serializes the component, folded and CRLF terminated"""
        lines = [fold_line("BEGIN:%s" % self.name)]
        for prop in self.properties:
            lines.append(fold_line(prop.to_ical()))
        for child in self.children:
            lines.append(child.to_ical())
        lines.append(fold_line("END:%s" % self.name))
        return "".join(lines)

    def __str__(self) -> str:
        return self.to_ical()
