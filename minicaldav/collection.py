#!/usr/bin/env python
"""
A "collection" in WebDAV terminology is a folder.  The only kind of
collection this library cares about is the calendar collection, as
found in the calendar home set of a principal.
"""
from dataclasses import dataclass
from dataclasses import field
from typing import Optional
from typing import Tuple

from minicaldav.lib.url import URL


@dataclass(frozen=True)
class Calendar:
    """
    A calendar collection on the server.

    Two Calendar objects are considered equal if they have the same
    url, the other attributes are metadata only.  The ctag changes
    whenever something in the calendar changes, callers may compare it
    with a previously seen value to decide whether to fetch again.

    ``components`` lists the component types the server allows in the
    calendar, like ("VEVENT", "VTODO"), or is None if the server did
    not tell.
    """

    url: str
    display_name: Optional[str] = field(default=None, compare=False)
    ctag: Optional[str] = field(default=None, compare=False)
    color: Optional[str] = field(default=None, compare=False)
    components: Optional[Tuple[str, ...]] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        ## urls may come in as URL objects
        object.__setattr__(self, "url", str(self.url))

    @property
    def name(self) -> str:
        """The display name, falling back to the last path segment"""
        if self.display_name:
            return self.display_name
        path = URL.objectify(self.url).path or ""
        return path.rstrip("/").rsplit("/", 1)[-1]
