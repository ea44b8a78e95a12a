"""
Authentication utilities for CalDAV clients.

The transport never deals with credentials itself; the protocol layer
renders the ``Authorization`` header from a :class:`Credentials` object
and passes it along with every request.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Credentials:
    """
    Basic (username and password) or bearer (token only) credentials.

    Example:
        >>> Credentials("user", "pass").as_header()
        'Basic dXNlcjpwYXNz'
        >>> Credentials(token="abc").as_header()
        'Bearer abc'
    """

    username: Optional[str] = None
    password: Optional[str] = None
    token: Optional[str] = None

    def __repr__(self) -> str:
        ## never leak the secret into logs or tracebacks
        if self.token is not None:
            return "Credentials(token=***)"
        return f"Credentials(username={self.username!r}, password=***)"

    def as_header(self) -> Optional[str]:
        """
        Returns the value for the Authorization header, or None if
        there is nothing to authenticate with.
        """
        if self.token is not None:
            return f"Bearer {self.token}"
        if self.username is None:
            return None
        secret = f"{self.username}:{self.password or ''}"
        return "Basic " + base64.b64encode(secret.encode("utf-8")).decode("ascii")


def extract_auth_types(header: str) -> set[str]:
    """
    Extract authentication types from WWW-Authenticate header.

    Parses the WWW-Authenticate header value and extracts the
    authentication scheme names (e.g., "basic", "digest", "bearer").
    Used for giving the caller a hint when the server rejects the
    credentials.

    Args:
        header: WWW-Authenticate header value from server response.

    Returns:
        Set of lowercase auth type strings.

    Example:
        >>> extract_auth_types('Basic realm="test", Digest realm="test"')
        {'basic', 'digest'}

    Reference:
        https://developer.mozilla.org/en-US/docs/Web/HTTP/Headers/WWW-Authenticate#syntax
    """
    return {h.split()[0] for h in header.lower().split(",") if h.strip()}
