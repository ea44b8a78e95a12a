#!/usr/bin/env python
"""
The request bodies are built from small element objects, one class
per XML tag, combined with ``+``:

    cdav.CompFilter("VCALENDAR") + cdav.CompFilter("VEVENT")
"""
import sys
from collections.abc import Iterable
from typing import ClassVar
from typing import Dict
from typing import List
from typing import Optional
from typing import Union

from lxml import etree
from lxml.etree import _Element

from minicaldav.lib.namespace import nsmap
from minicaldav.lib.python_utilities import to_unicode

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self


class BaseElement:
    tag: ClassVar[Optional[str]] = None

    def __init__(
        self, name: Optional[str] = None, value: Union[str, bytes, None] = None
    ) -> None:
        self.children: List[BaseElement] = []
        self.attributes: Dict[str, str] = {}
        self.value: Optional[str] = to_unicode(value)
        if name is not None:
            self.attributes["name"] = name

    def __add__(self, other: Union["BaseElement", Iterable["BaseElement"]]) -> Self:
        return self.append(other)

    def __repr__(self) -> str:
        return "%s(%r)" % (self.__class__.__name__, self.attributes or self.value)

    def append(self, element: Union["BaseElement", Iterable["BaseElement"]]) -> Self:
        """Adds one child or several, returns self so calls can be chained"""
        if isinstance(element, BaseElement):
            self.children.append(element)
        else:
            self.children.extend(element)
        return self

    def xmlelement(self) -> _Element:
        if self.tag is None:
            raise ValueError("%s has no tag" % self.__class__.__name__)
        root = etree.Element(self.tag, nsmap=nsmap)
        if self.value is not None:
            root.text = self.value
        for key, value in self.attributes.items():
            root.set(key, value)
        for child in self.children:
            root.append(child.xmlelement())
        return root

    def to_bytes(self) -> bytes:
        """The element as a UTF-8 encoded XML document"""
        return etree.tostring(self.xmlelement(), encoding="utf-8", xml_declaration=True)


class NamedBaseElement(BaseElement):
    """An element that is useless without its name attribute, like comp-filter"""

    def __init__(self, name: Optional[str] = None) -> None:
        super().__init__(name=name)

    def xmlelement(self) -> _Element:
        if not self.attributes.get("name"):
            raise ValueError("%s needs a name" % self.__class__.__name__)
        return super().xmlelement()


class ValuedBaseElement(BaseElement):
    def __init__(self, value: Union[str, bytes, None] = None) -> None:
        super().__init__(value=value)
