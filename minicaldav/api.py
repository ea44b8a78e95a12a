#!/usr/bin/env python
"""
The public functions of the library.

All network access goes through the transport passed in, an object
with an ``execute(DAVRequest) -> DAVResponse`` method like
:class:`minicaldav.io.SyncIO`.  Nothing is cached between calls.

Example:
    from minicaldav import Credentials, discover_calendars, fetch_events
    from minicaldav.io import SyncIO

    creds = Credentials("user", "pass")
    with SyncIO() as io:
        for calendar in discover_calendars(io, "https://caldav.example.com/", creds):
            events, errors = fetch_events(io, calendar, creds)
"""
from datetime import datetime
from typing import Iterable
from typing import List
from typing import Optional
from typing import Tuple
from typing import Union

from minicaldav import discovery
from minicaldav import search
from minicaldav.calendarobjectresource import Event
from minicaldav.calendarobjectresource import Todo
from minicaldav.collection import Calendar
from minicaldav.ical.parser import parse_ical
from minicaldav.ical.values import TimezoneResolver
from minicaldav.io.base import SyncIOProtocol
from minicaldav.lib import error
from minicaldav.lib.auth import Credentials
from minicaldav.lib.url import URL

CredentialsLike = Union[Credentials, Tuple[str, str], None]


def _credentials(credentials: CredentialsLike) -> Optional[Credentials]:
    if credentials is None or isinstance(credentials, Credentials):
        return credentials
    username, password = credentials
    return Credentials(username=username, password=password)


def check_connection(
    transport: SyncIOProtocol,
    base_url: Union[str, URL],
    credentials: CredentialsLike = None,
    huge_tree: bool = False,
) -> str:
    """
    Checks that the server answers and accepts the credentials.
    Returns the url of the user principal (or base_url, if the server
    does not know about principals there).
    """
    return discovery.check_connection(
        transport, base_url, _credentials(credentials), huge_tree=huge_tree
    )


def discover_calendars(
    transport: SyncIOProtocol,
    base_url: Union[str, URL],
    credentials: CredentialsLike = None,
    huge_tree: bool = False,
) -> List[Calendar]:
    """
    Finds the calendars of the user.  Credentials may be given as a
    Credentials object or a (username, password) tuple.

    If the server does not support principal discovery at base_url,
    base_url itself is returned as the only calendar.
    """
    return discovery.discover_calendars(
        transport, base_url, _credentials(credentials), huge_tree=huge_tree
    )


def fetch_events(
    transport: SyncIOProtocol,
    calendar: Union[Calendar, str, URL],
    credentials: CredentialsLike = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    hrefs: Optional[Iterable[str]] = None,
    resolver: Optional[TimezoneResolver] = None,
    huge_tree: bool = False,
    comp: str = "VEVENT",
) -> Tuple[List[Event], List[error.PartialResourceError]]:
    """
    Fetches the events of a calendar, returning (events, errors).
    Resources that could not be fetched or decoded end up in errors,
    the rest of the calendar is returned anyway.  With comp="VTODO"
    tasks are fetched instead.
    """
    return search.fetch_events(
        transport,
        calendar,
        _credentials(credentials),
        start=start,
        end=end,
        hrefs=hrefs,
        resolver=resolver,
        huge_tree=huge_tree,
        comp=comp,
    )


def fetch_todos(
    transport: SyncIOProtocol,
    calendar: Union[Calendar, str, URL],
    credentials: CredentialsLike = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    hrefs: Optional[Iterable[str]] = None,
    resolver: Optional[TimezoneResolver] = None,
    huge_tree: bool = False,
) -> Tuple[List[Todo], List[error.PartialResourceError]]:
    """
    Fetches the tasks of a calendar, returning (todos, errors)
    """
    return search.fetch_todos(
        transport,
        calendar,
        _credentials(credentials),
        start=start,
        end=end,
        hrefs=hrefs,
        resolver=resolver,
        huge_tree=huge_tree,
    )


__all__ = [
    "check_connection",
    "discover_calendars",
    "fetch_events",
    "fetch_todos",
    "parse_ical",
]
