"""
Pure functions for building CalDAV XML request bodies.

All functions in this module are pure - they take data in and return XML out,
with no side effects or I/O.
"""
from datetime import datetime
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from minicaldav.elements import cdav
from minicaldav.elements import cs
from minicaldav.elements import dav
from minicaldav.elements import ical
from minicaldav.elements.base import BaseElement


def build_propfind_body(props: Optional[List[str]] = None) -> bytes:
    """
    Build PROPFIND request body XML.

    Args:
        props: List of property names to retrieve, like "displayname" or
               "calendar-home-set".  Unknown names are skipped.

    Returns:
        UTF-8 encoded XML bytes
    """
    prop_elements = []
    for prop_name in props or []:
        prop_element = _prop_name_to_element(prop_name)
        if prop_element is not None:
            prop_elements.append(prop_element)
    propfind = dav.Propfind() + (dav.Prop() + prop_elements)

    return propfind.to_bytes()


def build_calendar_query_body(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    comp: str = "VEVENT",
) -> bytes:
    """
    Build calendar-query REPORT request body.

    The query asks for getetag and calendar-data of all components of
    the given type inside a VCALENDAR, optionally restricted to a time
    range.

    Args:
        start: Start of time range filter
        end: End of time range filter
        comp: Component type filter name (VEVENT, VTODO, VJOURNAL)

    Returns:
        UTF-8 encoded XML bytes
    """
    prop = dav.Prop() + [dav.GetEtag(), cdav.CalendarData()]

    comp_filter = cdav.CompFilter(comp)
    if start or end:
        comp_filter += cdav.TimeRange(start, end)
    vcalendar = cdav.CompFilter("VCALENDAR") + comp_filter

    root = cdav.CalendarQuery() + [prop, cdav.Filter() + vcalendar]

    return root.to_bytes()


def build_calendar_multiget_body(hrefs: List[str]) -> bytes:
    """
    Build calendar-multiget REPORT request body.

    Used to retrieve multiple calendar objects by their URLs in a single request.

    Args:
        hrefs: List of calendar object URLs to retrieve

    Returns:
        UTF-8 encoded XML bytes
    """
    elements: List[BaseElement] = [dav.Prop() + [dav.GetEtag(), cdav.CalendarData()]]

    for href in hrefs:
        elements.append(dav.Href(str(href)))

    multiget = cdav.CalendarMultiGet() + elements

    return multiget.to_bytes()


# Property name to element mapping

_props: Dict[str, Any] = {
    "displayname": dav.DisplayName,
    "resourcetype": dav.ResourceType,
    "getetag": dav.GetEtag,
    "current-user-principal": dav.CurrentUserPrincipal,
    "calendar-data": cdav.CalendarData,
    "calendar-home-set": cdav.CalendarHomeSet,
    "supported-calendar-component-set": cdav.SupportedCalendarComponentSet,
    "getctag": cs.GetCtag,
    "calendar-color": ical.CalendarColor,
}


def _prop_name_to_element(name: str) -> Optional[BaseElement]:
    """
    Convert property name string to element object.

    Args:
        name: Property name (case-insensitive, "_" may be used for "-")

    Returns:
        BaseElement instance or None if unknown property
    """
    cls = _props.get(name.lower().replace("_", "-"))
    if cls is None:
        return None
    return cls()
