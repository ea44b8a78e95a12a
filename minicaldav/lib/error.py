#!/usr/bin/env python
import logging
import os
from typing import Optional

from minicaldav import __version__

## one of DEBUG_PDB, DEBUG, DEVELOPMENT, PRODUCTION
debugmode = os.environ.get("PYTHON_MINICALDAV_DEBUGMODE")
if not debugmode:
    if "dev" in __version__:
        debugmode = "DEVELOPMENT"
    else:
        debugmode = "PRODUCTION"

log = logging.getLogger("minicaldav")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)


def weirdness(*reasons):
    from minicaldav.lib.debug import xmlstring

    reason = " : ".join([xmlstring(x) for x in reasons])
    log.warning(f"Deviation from expectations found: {reason}")
    if debugmode == "DEBUG_PDB":
        log.error(f"Dropping into debugger due to {reason}")
        import pdb

        pdb.set_trace()


class DAVError(Exception):
    url: Optional[str] = None
    reason: str = "no reason"

    def __init__(self, url: Optional[str] = None, reason: Optional[str] = None) -> None:
        if url:
            self.url = str(url)
        if reason:
            self.reason = reason
        super().__init__(self.url, self.reason)

    def __str__(self) -> str:
        if self.url is None:
            return "%s: %s" % (self.__class__.__name__, self.reason)
        return "%s at '%s', reason %s" % (
            self.__class__.__name__,
            self.url,
            self.reason,
        )


class TransportError(DAVError):
    """
    The request could not be completed, either because the network
    failed or because the server answered the request as a whole with
    an error status.  ``status`` is None for network failures.
    """

    status: Optional[int] = None

    def __init__(
        self,
        url: Optional[str] = None,
        reason: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(url, reason)
        self.status = status


class PropfindError(TransportError):
    pass


class ReportError(TransportError):
    pass


class AuthorizationError(DAVError):
    """
    The server answered with HTTP 401 or 403.  This is kept apart from
    the other errors so that the caller may ask for new credentials.
    The url property will contain the url in question, the reason
    property will contain the excuse the server sent.
    """

    pass


AuthError = AuthorizationError


class FormatError(DAVError):
    """
    Malformed XML or iCalendar data.  Malformed XML is fatal to the
    whole request, malformed iCalendar data only to the resource
    carrying it.
    """

    pass


class PartialResourceError(DAVError):
    """
    One resource in a batch could not be delivered, either because the
    server gave it a non-2xx status or because its calendar data could
    not be decoded.  Those are collected and returned alongside the
    successfully decoded events, never raised.
    """

    status: Optional[int] = None
    cause: Optional[BaseException] = None

    def __init__(
        self,
        href: str,
        reason: Optional[str] = None,
        status: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        if reason is None and cause is not None:
            reason = str(cause)
        super().__init__(href, reason)
        self.status = status
        self.cause = cause

    @property
    def href(self) -> Optional[str]:
        return self.url
