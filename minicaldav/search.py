#!/usr/bin/env python
"""
Fetching events and tasks from a calendar collection through a
calendar-query (or, when the hrefs are known, a calendar-multiget)
REPORT.

One broken resource should not make the whole calendar unreadable,
so problems with single resources are returned as errors next to the
decoded objects, while problems with the request as a whole are
raised.
"""
import logging
from datetime import datetime
from typing import Iterable
from typing import List
from typing import Optional
from typing import Tuple
from typing import Union

from minicaldav.calendarobjectresource import CalendarObject
from minicaldav.calendarobjectresource import objects_from_components
from minicaldav.calendarobjectresource import SUPPORTED_KINDS
from minicaldav.calendarobjectresource import Todo
from minicaldav.collection import Calendar
from minicaldav.ical.parser import parse_ical
from minicaldav.ical.types import ComponentKind
from minicaldav.ical.values import TimezoneResolver
from minicaldav.io.base import SyncIOProtocol
from minicaldav.lib import error
from minicaldav.lib.auth import Credentials
from minicaldav.lib.url import make_absolute
from minicaldav.lib.url import URL
from minicaldav.protocol.operations import CalDAVProtocol
from minicaldav.protocol.types import Resource

log = logging.getLogger(__name__)


def _is_collection(calendar_url: str, href: str) -> bool:
    ## Some servers include the collection itself in a depth 1 report
    resource_url = make_absolute(calendar_url, href).canonical().strip_trailing_slash()
    return resource_url == URL.objectify(calendar_url).canonical().strip_trailing_slash()


def _component_kind(comp: Union[ComponentKind, str]) -> ComponentKind:
    kind = comp if isinstance(comp, ComponentKind) else ComponentKind.from_name(comp)
    if kind not in SUPPORTED_KINDS:
        raise ValueError(
            "comp must be one of %s, not %s"
            % (", ".join(k.value for k in SUPPORTED_KINDS), comp)
        )
    return kind


def decode_resource(
    resource: Resource,
    resolver: Optional[TimezoneResolver] = None,
    comp: Union[ComponentKind, str] = ComponentKind.VEVENT,
) -> Tuple[List[CalendarObject], List[error.PartialResourceError]]:
    """
    Decodes the calendar data of a single resource into events (or
    tasks, with comp="VTODO").  All problems are returned as
    PartialResourceError, never raised.
    """
    if not resource.ok:
        log.info("%s: server says %i", resource.href, resource.status)
        return (
            [],
            [
                error.PartialResourceError(
                    resource.href,
                    reason="status %i" % resource.status,
                    status=resource.status,
                )
            ],
        )
    if not resource.calendar_data:
        log.info("%s: no calendar data", resource.href)
        return (
            [],
            [
                error.PartialResourceError(
                    resource.href,
                    reason="no calendar-data in response",
                    status=resource.status,
                )
            ],
        )
    try:
        roots = parse_ical(resource.calendar_data)
    except error.FormatError as e:
        log.info("%s: could not parse calendar data: %s", resource.href, e.reason)
        return (
            [],
            [
                error.PartialResourceError(
                    resource.href, reason=e.reason, status=resource.status, cause=e
                )
            ],
        )
    return objects_from_components(
        roots, comp, href=resource.href, etag=resource.etag, resolver=resolver
    )


def fetch_events(
    transport: SyncIOProtocol,
    calendar: Union[Calendar, str, URL],
    credentials: Optional[Credentials] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    hrefs: Optional[Iterable[str]] = None,
    resolver: Optional[TimezoneResolver] = None,
    huge_tree: bool = False,
    comp: Union[ComponentKind, str] = ComponentKind.VEVENT,
) -> Tuple[List[CalendarObject], List[error.PartialResourceError]]:
    """
    Fetches the events of a calendar.

    Args:
        transport: the transport to send the request through
        calendar: a Calendar or the url of a calendar collection
        credentials: Credentials for the Authorization header
        start, end: only fetch items overlapping this time range
        hrefs: fetch exactly those resources (calendar-multiget)
        resolver: to make TZID datetimes timezone aware
        comp: "VEVENT" for Event objects, "VTODO" for Todo objects

    Returns:
        (events, errors), where errors holds one PartialResourceError
        per resource (or broken component) that could not be decoded.

    Raises AuthorizationError on 401/403, ReportError on other errors
    from the server, TransportError on network trouble and FormatError
    if the multistatus XML is malformed.  ValueError if comp is
    neither VEVENT nor VTODO.
    """
    kind = _component_kind(comp)
    url = calendar.url if isinstance(calendar, Calendar) else str(calendar)
    protocol = CalDAVProtocol(url, credentials, huge_tree=huge_tree)

    if hrefs is not None:
        hrefs = list(hrefs)
        if not hrefs:
            return ([], [])
        request = protocol.calendar_multiget_request(url, hrefs)
    else:
        request = protocol.calendar_query_request(
            url, start=start, end=end, comp=kind.value
        )

    response = transport.execute(request)
    protocol.check_response(request, response, error.ReportError)

    objects: List[CalendarObject] = []
    errors: List[error.PartialResourceError] = []
    for resource in protocol.parse_calendar_query(response):
        try:
            if _is_collection(url, resource.href):
                continue
        except error.FormatError as e:
            log.info("%s: %s", resource.href, e.reason)
            errors.append(
                error.PartialResourceError(
                    resource.href, reason=e.reason, status=resource.status, cause=e
                )
            )
            continue
        found, failed = decode_resource(resource, resolver, kind)
        objects.extend(found)
        errors.extend(failed)

    log.debug(
        "fetched %i %s components from %s, %i resources failed",
        len(objects),
        kind.value,
        url,
        len(errors),
    )
    return (objects, errors)


def fetch_todos(
    transport: SyncIOProtocol,
    calendar: Union[Calendar, str, URL],
    credentials: Optional[Credentials] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    hrefs: Optional[Iterable[str]] = None,
    resolver: Optional[TimezoneResolver] = None,
    huge_tree: bool = False,
) -> Tuple[List[Todo], List[error.PartialResourceError]]:
    """
    Fetches the tasks (VTODO) of a calendar, see fetch_events
    """
    return fetch_events(
        transport,
        calendar,
        credentials,
        start=start,
        end=end,
        hrefs=hrefs,
        resolver=resolver,
        huge_tree=huge_tree,
        comp=ComponentKind.VTODO,
    )
