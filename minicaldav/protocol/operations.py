"""
CalDAV protocol operations combining request building and response parsing.

This class provides a high-level interface to CalDAV operations while
remaining completely I/O-free.
"""

from datetime import datetime
from typing import Dict, List, Optional, Type

from minicaldav import __version__
from minicaldav.lib import error
from minicaldav.lib.auth import Credentials
from minicaldav.lib.auth import extract_auth_types
from minicaldav.lib.url import make_absolute

from .types import (
    DAVMethod,
    DAVRequest,
    DAVResponse,
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
    parse_propfind_response,
)


class CalDAVProtocol:
    """
    Sans-I/O CalDAV protocol handler.

    Builds requests and parses responses without doing any I/O.
    All HTTP communication is delegated to an external I/O implementation.

    Example:
        protocol = CalDAVProtocol(base_url="https://cal.example.com/")

        # Build request
        request = protocol.propfind_request("/calendars/user/", ["displayname"])

        # Execute with your I/O (not shown)
        response = io.execute(request)

        # Parse response
        results = protocol.parse_propfind(request, response)
    """

    def __init__(
        self,
        base_url: str = "",
        credentials: Optional[Credentials] = None,
        huge_tree: bool = False,
    ):
        """
        Initialize the protocol handler.

        Args:
            base_url: Base URL for the CalDAV server
            credentials: Credentials for the Authorization header
            huge_tree: Allow parsing very large XML documents
        """
        self.base_url = str(base_url)
        self.credentials = credentials
        self.huge_tree = huge_tree

    def _base_headers(self) -> Dict[str, str]:
        """Return base headers for all requests."""
        headers = {
            "User-Agent": "minicaldav/" + __version__,
            "Content-Type": "application/xml; charset=utf-8",
            "Accept": "text/xml, text/calendar",
        }
        if self.credentials is not None:
            auth = self.credentials.as_header()
            if auth:
                headers["Authorization"] = auth
        return headers

    def _resolve_url(self, path: str) -> str:
        """
        Resolve a path to a full URL.

        Args:
            path: Relative path or absolute URL

        Returns:
            Full URL
        """
        if not path:
            return self.base_url
        return str(make_absolute(self.base_url, path))

    # =========================================================================
    # Request builders
    # =========================================================================

    def propfind_request(
        self,
        path: str,
        props: Optional[List[str]] = None,
        depth: int = 0,
    ) -> DAVRequest:
        """
        Build a PROPFIND request.

        Args:
            path: Resource path or URL
            props: Property names to retrieve
            depth: Depth header value (0 or 1)

        Returns:
            DAVRequest ready for execution
        """
        body = build_propfind_body(props)
        headers = {
            **self._base_headers(),
            "Depth": str(depth),
        }
        return DAVRequest(
            method=DAVMethod.PROPFIND,
            url=self._resolve_url(path),
            headers=headers,
            body=body,
        )

    def calendar_query_request(
        self,
        path: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        comp: str = "VEVENT",
    ) -> DAVRequest:
        """
        Build a calendar-query REPORT request.

        Args:
            path: Calendar collection path or URL
            start: Start of time range
            end: End of time range
            comp: Component type to ask for

        Returns:
            DAVRequest ready for execution
        """
        body = build_calendar_query_body(start=start, end=end, comp=comp)
        headers = {
            **self._base_headers(),
            "Depth": "1",
        }
        return DAVRequest(
            method=DAVMethod.REPORT,
            url=self._resolve_url(path),
            headers=headers,
            body=body,
        )

    def calendar_multiget_request(
        self,
        path: str,
        hrefs: List[str],
    ) -> DAVRequest:
        """
        Build a calendar-multiget REPORT request.

        Args:
            path: Calendar collection path or URL
            hrefs: List of calendar object URLs to retrieve

        Returns:
            DAVRequest ready for execution
        """
        body = build_calendar_multiget_body(hrefs)
        headers = {
            **self._base_headers(),
            "Depth": "1",
        }
        return DAVRequest(
            method=DAVMethod.REPORT,
            url=self._resolve_url(path),
            headers=headers,
            body=body,
        )

    # =========================================================================
    # Response handling
    # =========================================================================

    def check_response(
        self,
        request: DAVRequest,
        response: DAVResponse,
        error_class: Type[error.TransportError] = error.TransportError,
    ) -> None:
        """
        Raise if the request as a whole failed.

        401 and 403 raise AuthorizationError, any other non-2xx status
        raises error_class.
        """
        if response.ok:
            return
        if response.status in (401, 403):
            reason = "%i %s" % (response.status, response.reason)
            www_auth = response.headers.get("WWW-Authenticate")
            if www_auth:
                reason += ", server supports %s" % ", ".join(
                    sorted(extract_auth_types(www_auth))
                )
            raise error.AuthorizationError(url=request.url, reason=reason)
        raise error_class(
            url=request.url,
            reason="%i %s" % (response.status, response.reason),
            status=response.status,
        )

    def parse_propfind(self, response: DAVResponse) -> List[PropfindResult]:
        """Parse a PROPFIND multistatus body"""
        return parse_propfind_response(response.body, huge_tree=self.huge_tree)

    def parse_calendar_query(self, response: DAVResponse) -> List[Resource]:
        """Parse a calendar-query or calendar-multiget multistatus body"""
        return parse_calendar_query_response(response.body, huge_tree=self.huge_tree)
