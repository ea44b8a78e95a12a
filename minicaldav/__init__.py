#!/usr/bin/env python
import logging

__version__ = "0.1.0"

## Silence notification of no default logging handler
log = logging.getLogger("minicaldav")


class NullHandler(logging.Handler):
    def emit(self, record) -> None:
        pass


log.addHandler(NullHandler())

from .api import (  # noqa: E402
    check_connection,
    discover_calendars,
    fetch_events,
    fetch_todos,
    parse_ical,
)
from .calendarobjectresource import Event, Todo  # noqa: E402
from .collection import Calendar  # noqa: E402
from .davclient import DAVClient, get_davclient  # noqa: E402
from .ical.types import Component, ComponentKind, Property  # noqa: E402
from .lib.auth import Credentials  # noqa: E402
from .lib.error import (  # noqa: E402
    AuthError,
    AuthorizationError,
    DAVError,
    FormatError,
    PartialResourceError,
    PropfindError,
    ReportError,
    TransportError,
)

__all__ = [
    "__version__",
    "check_connection",
    "discover_calendars",
    "fetch_events",
    "fetch_todos",
    "parse_ical",
    "DAVClient",
    "get_davclient",
    "Calendar",
    "Event",
    "Todo",
    "Component",
    "ComponentKind",
    "Property",
    "Credentials",
    "DAVError",
    "TransportError",
    "PropfindError",
    "ReportError",
    "AuthorizationError",
    "AuthError",
    "FormatError",
    "PartialResourceError",
]
