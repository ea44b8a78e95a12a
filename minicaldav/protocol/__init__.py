"""
Sans-I/O CalDAV protocol implementation.

This package builds the XML request bodies and parses the multistatus
responses of the few WebDAV/CalDAV operations this library uses,
without doing any I/O.  Sending the requests is the job of the
transport in :mod:`minicaldav.io`.

Example:
    from minicaldav.protocol import CalDAVProtocol

    protocol = CalDAVProtocol(base_url="https://cal.example.com/")
    request = protocol.propfind_request("/calendars/", ["displayname"], depth=1)
    response = io.execute(request)
    results = protocol.parse_propfind(response)
"""

from .operations import CalDAVProtocol
from .types import (
    DAVMethod,
    DAVRequest,
    DAVResponse,
    MultistatusResponse,
    PropfindResult,
    Resource,
)
from .xml_builders import (
    build_calendar_multiget_body,
    build_calendar_query_body,
    build_propfind_body,
)
from .xml_parsers import (
    parse_calendar_query_response,
    parse_multistatus,
    parse_propfind_response,
)

__all__ = [
    # Types
    "DAVMethod",
    "DAVRequest",
    "DAVResponse",
    "MultistatusResponse",
    "PropfindResult",
    "Resource",
    # Builders
    "build_calendar_multiget_body",
    "build_calendar_query_body",
    "build_propfind_body",
    # Parsers
    "parse_calendar_query_response",
    "parse_multistatus",
    "parse_propfind_response",
    # Protocol
    "CalDAVProtocol",
]
