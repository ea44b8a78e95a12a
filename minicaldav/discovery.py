#!/usr/bin/env python
"""
Finding the calendars of a user, RFC4791 section 6.2.1 and RFC5397:

1. ask the given url for the current-user-principal
2. ask the principal for its calendar-home-set
3. list the calendar collections in the calendar home set

Many setups hand out the url of a calendar directly.  If the server
can't answer steps 1 or 2 (404, 405 or 501), or answers without the
property asked for, the given url is taken to be the only calendar.
"""
import logging
from typing import List
from typing import Optional
from typing import Union

from minicaldav.collection import Calendar
from minicaldav.elements import cdav
from minicaldav.elements import cs
from minicaldav.elements import dav
from minicaldav.elements import ical
from minicaldav.io.base import SyncIOProtocol
from minicaldav.lib import error
from minicaldav.lib.auth import Credentials
from minicaldav.lib.url import make_absolute
from minicaldav.lib.url import URL
from minicaldav.protocol.operations import CalDAVProtocol

log = logging.getLogger(__name__)

## statuses meaning "this server does not do discovery here"
FALLBACK_STATUSES = (404, 405, 501)

## calendars holding neither of those are of no use to us
READABLE_COMPONENTS = frozenset({"VEVENT", "VTODO"})


class _NoDiscovery(Exception):
    pass


def _find_href(
    protocol: CalDAVProtocol,
    transport: SyncIOProtocol,
    url: str,
    prop_name: str,
    tag: str,
) -> str:
    """
    PROPFIND depth 0 on url for a property holding an href, returns
    the href resolved against url.  Raises _NoDiscovery if the server
    does not support the request or the property is missing.
    """
    request = protocol.propfind_request(url, [prop_name], depth=0)
    response = transport.execute(request)
    if response.status in FALLBACK_STATUSES:
        log.info("%s: %s not supported (%i)", url, prop_name, response.status)
        raise _NoDiscovery()
    protocol.check_response(request, response, error.PropfindError)

    for result in protocol.parse_propfind(response):
        href = result.properties.get(tag)
        if href:
            return str(make_absolute(url, href))
    log.info("%s: no %s in response", url, prop_name)
    raise _NoDiscovery()


def find_principal(
    transport: SyncIOProtocol,
    base_url: Union[str, URL],
    credentials: Optional[Credentials] = None,
    protocol: Optional[CalDAVProtocol] = None,
) -> Optional[str]:
    """
    Returns the url of the current user principal, or None if the
    server could not tell.
    """
    protocol = protocol or CalDAVProtocol(str(base_url), credentials)
    try:
        return _find_href(
            protocol,
            transport,
            str(base_url),
            "current-user-principal",
            dav.CurrentUserPrincipal.tag,
        )
    except _NoDiscovery:
        return None


def check_connection(
    transport: SyncIOProtocol,
    base_url: Union[str, URL],
    credentials: Optional[Credentials] = None,
    huge_tree: bool = False,
) -> str:
    """
    Verifies that the server at base_url answers and accepts the
    credentials, by asking for the current-user-principal.

    Returns the url of the principal, or base_url if the server does
    not do principal discovery there.  Raises like discover_calendars.
    """
    base_url = str(base_url)
    protocol = CalDAVProtocol(base_url, credentials, huge_tree=huge_tree)
    principal = find_principal(transport, base_url, protocol=protocol)
    if principal is None:
        log.info("connection to %s ok, no principal", base_url)
        return base_url
    log.info("connection to %s ok, principal %s", base_url, principal)
    return principal


def find_calendar_home_set(
    transport: SyncIOProtocol,
    principal_url: Union[str, URL],
    credentials: Optional[Credentials] = None,
    protocol: Optional[CalDAVProtocol] = None,
) -> Optional[str]:
    """
    Returns the url of the calendar home set of a principal, or None
    if the server could not tell.
    """
    protocol = protocol or CalDAVProtocol(str(principal_url), credentials)
    try:
        return _find_href(
            protocol,
            transport,
            str(principal_url),
            "calendar-home-set",
            cdav.CalendarHomeSet.tag,
        )
    except _NoDiscovery:
        return None


def list_calendars(
    transport: SyncIOProtocol,
    home_set_url: Union[str, URL],
    credentials: Optional[Credentials] = None,
    protocol: Optional[CalDAVProtocol] = None,
) -> List[Calendar]:
    """
    Lists the calendar collections in a calendar home set.  Children
    that are not calendars (like the home set itself, or address
    books on servers doing both) are skipped, and so are calendars
    whose supported-calendar-component-set holds neither VEVENT nor
    VTODO.  A calendar not announcing the set is kept.
    """
    home_set_url = str(home_set_url)
    protocol = protocol or CalDAVProtocol(home_set_url, credentials)
    request = protocol.propfind_request(
        home_set_url,
        [
            "resourcetype",
            "displayname",
            "getctag",
            "calendar-color",
            "supported-calendar-component-set",
        ],
        depth=1,
    )
    response = transport.execute(request)
    protocol.check_response(request, response, error.PropfindError)

    calendars = []
    for result in protocol.parse_propfind(response):
        if not result.ok:
            log.info("skipping %s, status %i", result.href, result.status)
            continue
        resource_types = result.properties.get(dav.ResourceType.tag) or []
        if cdav.Calendar.tag not in resource_types:
            continue
        components = result.properties.get(cdav.SupportedCalendarComponentSet.tag)
        if components and not set(components) & READABLE_COMPONENTS:
            log.info("skipping %s, it holds only %s", result.href, components)
            continue
        try:
            url = make_absolute(home_set_url, result.href)
        except error.FormatError as e:
            error.weirdness("calendar with unusable href", result.href, e.reason)
            continue
        calendars.append(
            Calendar(
                url=str(url),
                display_name=result.properties.get(dav.DisplayName.tag),
                ctag=result.properties.get(cs.GetCtag.tag),
                color=result.properties.get(ical.CalendarColor.tag),
                components=tuple(components) if components else None,
            )
        )
    log.debug("found %i calendars in %s", len(calendars), home_set_url)
    return calendars


def discover_calendars(
    transport: SyncIOProtocol,
    base_url: Union[str, URL],
    credentials: Optional[Credentials] = None,
    huge_tree: bool = False,
) -> List[Calendar]:
    """
    Finds the calendars available for the credentials, starting at
    base_url.

    Raises AuthorizationError on 401/403, PropfindError on other
    errors from the server, TransportError on network trouble and
    FormatError if the server sends garbage.
    """
    base_url = str(base_url)
    protocol = CalDAVProtocol(base_url, credentials, huge_tree=huge_tree)

    principal = find_principal(transport, base_url, protocol=protocol)
    if principal is None:
        log.info("no principal found, assuming %s is a calendar", base_url)
        return [Calendar(url=base_url)]

    home_set = find_calendar_home_set(transport, principal, protocol=protocol)
    if home_set is None:
        log.info("no calendar home set found, assuming %s is a calendar", base_url)
        return [Calendar(url=base_url)]

    return list_calendars(transport, home_set, protocol=protocol)
