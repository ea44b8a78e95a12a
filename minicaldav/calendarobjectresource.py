#!/usr/bin/env python
"""
Calendar object resources are the items living in a calendar
collection, each one holding a VCALENDAR with one or more events or
tasks.

This module decodes VEVENT components into :class:`Event` objects and
VTODO components into :class:`Todo` objects.  Recurrence sets (a
master component plus overrides carrying a RECURRENCE-ID) are not
merged, each component becomes an object of its own.
"""
import logging
from dataclasses import dataclass
from dataclasses import field
from datetime import date
from datetime import datetime
from datetime import timedelta
from typing import Any
from typing import ClassVar
from typing import Dict
from typing import List
from typing import Optional
from typing import Tuple
from typing import Type
from typing import Union

import icalendar

from minicaldav.ical.types import Component
from minicaldav.ical.types import ComponentKind
from minicaldav.ical.values import decode_date_or_datetime
from minicaldav.ical.values import decode_duration
from minicaldav.ical.values import split_text_list
from minicaldav.ical.values import TimezoneResolver
from minicaldav.ical.values import unescape_text
from minicaldav.lib import error

log = logging.getLogger(__name__)

DateOrDatetime = Union[date, datetime]


@dataclass
class CalendarObject:
    """
    Fields shared by the decoded components.

    ``start`` and ``end`` are dates for all-day items and datetimes
    otherwise.  UTC datetimes are timezone aware.  Datetimes with a
    TZID are aware if the zone could be resolved, otherwise naive; the
    zone label is kept in ``start_tzid``/``end_tzid`` in both cases.

    ``component`` is the raw component, all properties not decoded
    here can be found there.
    """

    _KIND: ClassVar[ComponentKind]
    _ENDPARAM: ClassVar[str]
    _ICALENDAR_CLASS: ClassVar[Type[icalendar.Component]]

    uid: str
    summary: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    categories: List[str] = field(default_factory=list)
    start: Optional[DateOrDatetime] = None
    end: Optional[DateOrDatetime] = None
    start_tzid: Optional[str] = None
    end_tzid: Optional[str] = None
    recurrence_id: Optional[str] = None
    href: Optional[str] = None
    etag: Optional[str] = None
    component: Optional[Component] = field(default=None, repr=False)

    @classmethod
    def from_component(
        cls,
        component: Component,
        href: Optional[str] = None,
        etag: Optional[str] = None,
        resolver: Optional[TimezoneResolver] = None,
    ):
        """
        Decodes a component.  Raises FormatError if the UID is missing
        or a date or duration value can't be decoded.
        """
        if component.kind != cls._KIND:
            raise error.FormatError(
                url=href,
                reason="expected %s, got %s" % (cls._KIND.value, component.name),
            )
        return cls(
            href=href,
            etag=etag,
            component=component,
            **cls._decode(component, href, resolver),
        )

    @classmethod
    def _decode(
        cls,
        component: Component,
        href: Optional[str],
        resolver: Optional[TimezoneResolver],
    ) -> Dict[str, Any]:
        uid = component.get("UID")
        if uid is None or not uid.value.strip():
            raise error.FormatError(
                url=href, reason="%s without UID" % cls._KIND.value
            )

        start, start_tzid = _decode_date(component, "DTSTART", resolver)
        end, end_tzid = _decode_date(component, cls._ENDPARAM, resolver)
        if end is None and start is not None:
            duration = component.get("DURATION")
            if duration is not None:
                end = _add_duration(start, decode_duration(duration.value), href)
                end_tzid = start_tzid

        categories = []
        for prop in component.get_all("CATEGORIES"):
            categories.extend(split_text_list(prop.value))

        recurrence_id = component.get("RECURRENCE-ID")

        return dict(
            uid=uid.value.strip(),
            summary=_text(component, "SUMMARY"),
            description=_text(component, "DESCRIPTION"),
            location=_text(component, "LOCATION"),
            categories=categories,
            start=start,
            end=end,
            start_tzid=start_tzid,
            end_tzid=end_tzid,
            recurrence_id=recurrence_id.value.strip() if recurrence_id else None,
        )

    @property
    def all_day(self) -> bool:
        return self.start is not None and not isinstance(self.start, datetime)

    @property
    def duration(self) -> timedelta:
        """
        Length of the item.  Following RFC5545 section 3.6.1, an item
        without an end and DURATION lasts one day if it starts on a
        date, and zero time if it starts at a datetime.
        """
        duration = self.component.get("DURATION") if self.component else None
        if duration is not None:
            return decode_duration(duration.value)
        start = self.start
        end = self.end
        if start is not None and end is not None:
            ## We do have a problem here if one is a date and the other is a
            ## datetime.  This is NOT explicitly defined as a technical
            ## breach in the RFC, so we need to work around it.
            if isinstance(end, datetime) != isinstance(start, datetime):
                start = datetime(start.year, start.month, start.day)
                end = datetime(end.year, end.month, end.day)
            elif isinstance(start, datetime) and (start.tzinfo is None) != (
                end.tzinfo is None
            ):
                start = start.replace(tzinfo=None)
                end = end.replace(tzinfo=None)
            return end - start
        if start is not None and not isinstance(start, datetime):
            return timedelta(days=1)
        return timedelta(0)

    @property
    def icalendar_component(self) -> icalendar.Component:
        """
        The component as an icalendar object, for callers needing more
        than what is decoded here.  The returned object is a copy,
        changes to it are not reflected back.
        """
        if self.component is None:
            raise ValueError("%s has no component" % self.__class__.__name__)
        return self._ICALENDAR_CLASS.from_ical(self.component.to_ical())


@dataclass
class Event(CalendarObject):
    """The decoded view of one VEVENT."""

    _KIND: ClassVar[ComponentKind] = ComponentKind.VEVENT
    _ENDPARAM: ClassVar[str] = "DTEND"
    _ICALENDAR_CLASS: ClassVar[Type[icalendar.Component]] = icalendar.Event


@dataclass
class Todo(CalendarObject):
    """
    The decoded view of one VTODO.  ``end`` holds the DUE date (or
    DTSTART plus DURATION), ``due`` is an alias for it.
    """

    _KIND: ClassVar[ComponentKind] = ComponentKind.VTODO
    _ENDPARAM: ClassVar[str] = "DUE"
    _ICALENDAR_CLASS: ClassVar[Type[icalendar.Component]] = icalendar.Todo

    status: Optional[str] = None
    priority: Optional[int] = None
    completed: Optional[DateOrDatetime] = None

    @classmethod
    def _decode(cls, component, href, resolver):
        ret = super()._decode(component, href, resolver)
        status = component.get("STATUS")
        ret["status"] = status.value.strip().upper() if status else None
        ret["priority"] = _priority(component)
        ret["completed"] = _decode_date(component, "COMPLETED", resolver)[0]
        return ret

    @property
    def due(self) -> Optional[DateOrDatetime]:
        return self.end

    def is_pending(self) -> bool:
        """False if the task is completed or cancelled"""
        if self.completed is not None:
            return False
        return self.status not in ("COMPLETED", "CANCELLED")


def _decode_date(
    component: Component, name: str, resolver: Optional[TimezoneResolver]
) -> Tuple[Optional[DateOrDatetime], Optional[str]]:
    prop = component.get(name)
    if prop is None:
        return (None, None)
    return decode_date_or_datetime(prop, resolver)


def _add_duration(
    start: DateOrDatetime, duration: timedelta, href: Optional[str]
) -> DateOrDatetime:
    ## date + timedelta silently drops the time part
    if not isinstance(start, datetime) and (duration.seconds or duration.microseconds):
        raise error.FormatError(
            url=href, reason="DURATION with a time part on a DATE start"
        )
    try:
        return start + duration
    except OverflowError as e:
        raise error.FormatError(url=href, reason="end out of range") from e


def _text(component: Component, name: str) -> Optional[str]:
    prop = component.get(name)
    if prop is None:
        return None
    return unescape_text(prop.value)


def _priority(component: Component) -> Optional[int]:
    prop = component.get("PRIORITY")
    if prop is None:
        return None
    try:
        return int(prop.value.strip())
    except ValueError:
        error.weirdness("PRIORITY is not an integer", prop.value)
        return None


_classes: Dict[ComponentKind, Type[CalendarObject]] = {
    ComponentKind.VEVENT: Event,
    ComponentKind.VTODO: Todo,
}

SUPPORTED_KINDS = tuple(_classes)


def objects_from_components(
    roots: List[Component],
    kind: Union[ComponentKind, str] = ComponentKind.VEVENT,
    href: Optional[str] = None,
    etag: Optional[str] = None,
    resolver: Optional[TimezoneResolver] = None,
) -> Tuple[List[CalendarObject], List[error.PartialResourceError]]:
    """
    Decodes every component of the given kind (VEVENT or VTODO) found
    in a parsed calendar object resource.

    A component failing to decode gives a PartialResourceError for the
    href, its siblings are decoded anyway.
    """
    if isinstance(kind, str):
        kind = ComponentKind.from_name(kind)
    if kind not in _classes:
        raise ValueError("can't decode %s components" % kind.value)
    cls = _classes[kind]
    objects = []
    errors = []
    for root in roots:
        for component in root.walk(kind):
            try:
                objects.append(
                    cls.from_component(
                        component, href=href, etag=etag, resolver=resolver
                    )
                )
            except error.FormatError as e:
                log.info("could not decode %s in %s: %s", kind.value, href, e.reason)
                errors.append(error.PartialResourceError(href, reason=e.reason, cause=e))
    return (objects, errors)


def events_from_components(
    roots: List[Component],
    href: Optional[str] = None,
    etag: Optional[str] = None,
    resolver: Optional[TimezoneResolver] = None,
) -> Tuple[List[Event], List[error.PartialResourceError]]:
    """Decodes every VEVENT, see objects_from_components"""
    return objects_from_components(
        roots, ComponentKind.VEVENT, href=href, etag=etag, resolver=resolver
    )
