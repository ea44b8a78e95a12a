#!/usr/bin/env python
from typing import ClassVar

from .base import ValuedBaseElement
from minicaldav.lib.namespace import ns


# Properties
## getctag changes whenever anything in the collection changes,
## ref https://github.com/apple/ccs-calendarserver/blob/master/doc/Extensions/caldav-ctag.txt
class GetCtag(ValuedBaseElement):
    tag: ClassVar[str] = ns("CS", "getctag")
