"""
Core protocol types for the Sans-I/O CalDAV implementation.

These dataclasses represent HTTP requests and responses at the protocol level,
independent of any I/O implementation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from requests.structures import CaseInsensitiveDict


class DAVMethod(Enum):
    """WebDAV/CalDAV HTTP methods used by this library."""

    PROPFIND = "PROPFIND"
    REPORT = "REPORT"


@dataclass(frozen=True)
class DAVRequest:
    """
    Represents an HTTP request to be made.

    This is a pure data structure with no I/O. It describes what request
    should be made, but does not make it.

    Attributes:
        method: HTTP method (PROPFIND or REPORT)
        url: Full URL for the request
        headers: HTTP headers as dict, Authorization included
        body: Request body as bytes (optional)
    """

    method: DAVMethod
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None


@dataclass(frozen=True)
class DAVResponse:
    """
    Represents an HTTP response received.

    Attributes:
        status: HTTP status code
        headers: HTTP headers, looked up case-insensitively
        body: Response body as bytes
    """

    status: int
    headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict)
    body: bytes = b""

    def __post_init__(self) -> None:
        if not isinstance(self.headers, CaseInsensitiveDict):
            object.__setattr__(self, "headers", CaseInsensitiveDict(self.headers))

    @property
    def ok(self) -> bool:
        """True if status indicates success (2xx)."""
        return 200 <= self.status < 300

    @property
    def reason(self) -> str:
        """Return a reason phrase for the status code."""
        reasons = {
            200: "OK",
            207: "Multi-Status",
            301: "Moved Permanently",
            302: "Found",
            400: "Bad Request",
            401: "Unauthorized",
            403: "Forbidden",
            404: "Not Found",
            405: "Method Not Allowed",
            500: "Internal Server Error",
            501: "Not Implemented",
            502: "Bad Gateway",
            503: "Service Unavailable",
        }
        return reasons.get(self.status, "Unknown")


@dataclass
class PropfindResult:
    """
    Parsed result of a PROPFIND request for a single resource.

    Attributes:
        href: URL/path of the resource, as delivered by the server
        properties: Dict of property tag -> value, 2xx propstats only
        status: HTTP status for this resource (default 200)
    """

    href: str
    properties: dict[str, Any] = field(default_factory=dict)
    status: int = 200

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass
class Resource:
    """
    One calendar object resource from a calendar-query or
    calendar-multiget REPORT.

    Attributes:
        href: URL/path of the calendar object
        etag: ETag of the object
        calendar_data: iCalendar data as string
        status: HTTP status for this resource (default 200)
    """

    href: str
    etag: Optional[str] = None
    calendar_data: Optional[str] = None
    status: int = 200

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass
class MultistatusResponse:
    """
    Parsed multi-status response containing multiple results.

    This is the raw parsed form of a 207 Multi-Status response.
    """

    responses: list[PropfindResult] = field(default_factory=list)
