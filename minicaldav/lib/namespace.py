#!/usr/bin/env python
from typing import Dict
from typing import Optional

nsmap: Dict[str, str] = {
    "D": "DAV:",
    "C": "urn:ietf:params:xml:ns:caldav",
}

## getctag lives in the calendarserver namespace and calendar-color in
## the apple namespace.  Neither is standardized, but most servers
## support them.  They are only added to the request where needed.
nsmap2: Dict[str, str] = nsmap.copy()
nsmap2["CS"] = "http://calendarserver.org/ns/"
nsmap2["I"] = "http://apple.com/ns/ical/"


def ns(prefix: str, tag: Optional[str] = None) -> str:
    name = "{%s}" % nsmap2[prefix]
    if tag is not None:
        name = "%s%s" % (name, tag)
    return name
