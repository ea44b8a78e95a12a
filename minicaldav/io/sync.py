"""
Synchronous I/O implementation using the requests library.
"""

import logging
from typing import Optional, Union

import requests
from requests.structures import CaseInsensitiveDict

from minicaldav.lib import error
from minicaldav.protocol.types import DAVRequest, DAVResponse

log = logging.getLogger(__name__)


class SyncIO:
    """
    Synchronous I/O shell using the requests library.

    This is a thin wrapper that executes DAVRequest objects via HTTP
    and returns DAVResponse objects.

    Example:
        io = SyncIO()
        request = protocol.propfind_request("/calendars/", ["displayname"])
        response = io.execute(request)
        results = protocol.parse_propfind(response)
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = 30.0,
        verify: Union[bool, str] = True,
    ):
        """
        Initialize the sync I/O handler.

        Args:
            session: Existing requests Session to use (creates new if None)
            timeout: Request timeout in seconds
            verify: Verify SSL certificates, or path to a CA bundle
        """
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.timeout = timeout
        self.verify = verify

    def execute(self, request: DAVRequest) -> DAVResponse:
        """
        Execute a DAVRequest and return DAVResponse.

        Args:
            request: The request to execute

        Returns:
            DAVResponse with status, headers, and body

        Raises:
            TransportError: if no response could be obtained
        """
        log.debug(
            "sending request - method={0}, url={1}, headers={2}\nbody:\n{3}".format(
                request.method.value,
                request.url,
                {
                    k: ("***" if k.lower() == "authorization" else v)
                    for k, v in request.headers.items()
                },
                request.body.decode("utf-8", "replace") if request.body else "",
            )
        )
        try:
            response = self.session.request(
                method=request.method.value,
                url=request.url,
                headers=request.headers,
                data=request.body,
                timeout=self.timeout,
                verify=self.verify,
            )
        except requests.exceptions.RequestException as e:
            raise error.TransportError(url=request.url, reason=str(e)) from e

        log.debug(
            "server responded with %i %s\n%s",
            response.status_code,
            response.reason,
            response.content.decode("utf-8", "replace"),
        )

        return DAVResponse(
            status=response.status_code,
            headers=CaseInsensitiveDict(response.headers),
            body=response.content,
        )

    def close(self) -> None:
        """Close the session if we created it."""
        if self._owns_session and self.session:
            self.session.close()

    def __enter__(self) -> "SyncIO":
        """Context manager entry."""
        return self

    def __exit__(self, *args) -> None:
        """Context manager exit."""
        self.close()
