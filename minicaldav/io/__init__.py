"""
I/O layer for the CalDAV protocol.

This module provides the transport interface and a default implementation
executing DAVRequest objects and returning DAVResponse objects.

The I/O layer is intentionally thin - it only handles HTTP transport.
All protocol logic (XML building/parsing) is in minicaldav.protocol.

Example:
    from minicaldav.protocol import CalDAVProtocol
    from minicaldav.io import SyncIO

    protocol = CalDAVProtocol(base_url="https://cal.example.com")
    with SyncIO() as io:
        request = protocol.propfind_request("/calendars/", ["displayname"])
        response = io.execute(request)
        results = protocol.parse_propfind(response)
"""

from .base import SyncIOProtocol
from .sync import SyncIO

__all__ = [
    "SyncIOProtocol",
    "SyncIO",
]
