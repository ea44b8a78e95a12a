"""
Pure functions for parsing CalDAV XML responses.

All functions in this module are pure - they take XML bytes in and return
structured data out, with no side effects or I/O (except for logging of
server deviations).
"""

import logging
from typing import Any, Optional, Union

from lxml import etree
from lxml.etree import _Element

from minicaldav.elements import cdav, dav
from minicaldav.lib import error

from .types import MultistatusResponse, PropfindResult, Resource

log = logging.getLogger(__name__)


def parse_multistatus(
    body: Union[bytes, str],
    huge_tree: bool = False,
) -> MultistatusResponse:
    """
    Parse a 207 Multi-Status response body.

    A non-2xx status on one response never stops the parsing of its
    siblings; the status is recorded on the result instead.

    Args:
        body: Raw XML response bytes
        huge_tree: Allow parsing very large XML documents

    Returns:
        Structured MultistatusResponse with parsed results

    Raises:
        FormatError: If body is empty, not valid XML, or not a multistatus
    """
    if isinstance(body, str):
        body = body.encode("utf-8")
    if not body or not body.strip():
        raise error.FormatError(reason="empty response body where XML was expected")

    parser = etree.XMLParser(huge_tree=huge_tree, resolve_entities=False)
    try:
        tree = etree.fromstring(body, parser)
    except etree.XMLSyntaxError as e:
        raise error.FormatError(reason="invalid XML: %s" % e) from e

    responses: list[PropfindResult] = []

    for elem in _strip_to_multistatus(tree):
        if elem.tag != dav.Response.tag:
            ## responsedescription, sync-token, comments ...
            continue

        href, propstats, status = _parse_response_element(elem)
        if href is None:
            error.weirdness("response without href", elem)
            continue

        if status:
            status_code = _status_to_code(status)
        else:
            status_code = _propstats_to_code(propstats)

        responses.append(
            PropfindResult(
                href=href,
                properties=_extract_properties(propstats),
                status=status_code,
            )
        )

    log.debug("multistatus with %i responses", len(responses))
    return MultistatusResponse(responses=responses)


def parse_propfind_response(
    body: Union[bytes, str],
    huge_tree: bool = False,
) -> list[PropfindResult]:
    """
    Parse a PROPFIND response.

    Args:
        body: Raw XML response bytes
        huge_tree: Allow parsing very large XML documents

    Returns:
        List of PropfindResult with properties for each resource
    """
    return parse_multistatus(body, huge_tree=huge_tree).responses


def parse_calendar_query_response(
    body: Union[bytes, str],
    huge_tree: bool = False,
) -> list[Resource]:
    """
    Parse a calendar-query or calendar-multiget REPORT response.

    Args:
        body: Raw XML response bytes
        huge_tree: Allow parsing very large XML documents

    Returns:
        List of Resource with etag and calendar data
    """
    results: list[Resource] = []
    for response in parse_multistatus(body, huge_tree=huge_tree).responses:
        results.append(
            Resource(
                href=response.href,
                etag=response.properties.get(dav.GetEtag.tag),
                calendar_data=response.properties.get(cdav.CalendarData.tag),
                status=response.status,
            )
        )
    return results


# Helper functions


def _strip_to_multistatus(tree: _Element) -> Union[_Element, list[_Element]]:
    """
    Strip outer elements to get to the multistatus content.

    The general format is:
        <xml><multistatus>
            <response>...</response>
            <response>...</response>
        </multistatus></xml>

    But sometimes multistatus and/or xml element is missing.
    Returns the element(s) containing responses.
    """
    if tree.tag == "xml" and len(tree) > 0 and tree[0].tag == dav.MultiStatus.tag:
        return tree[0]
    if tree.tag == dav.MultiStatus.tag:
        return tree
    if tree.tag == dav.Response.tag:
        error.weirdness("response without multistatus wrapper")
        return [tree]
    raise error.FormatError(reason="expected a multistatus, got %s" % tree.tag)


def _parse_response_element(
    response: _Element,
) -> tuple[Optional[str], list[_Element], Optional[str]]:
    """
    Parse a single DAV:response element.

    The href is kept exactly as the server sent it, it's an identifier
    the server will recognize in later requests.

    Returns:
        Tuple of (href, propstat elements list, status string)
    """
    status: Optional[str] = None
    href: Optional[str] = None
    propstats: list[_Element] = []

    for elem in response:
        if elem.tag == dav.Status.tag:
            status = elem.text
        elif elem.tag == dav.Href.tag:
            if href is not None:
                error.weirdness("more than one href in response", response)
                continue
            text = (elem.text or "").strip()
            # Fix for double-encoded URLs (e.g., Confluence)
            if "%2540" in text:
                text = text.replace("%2540", "%40")
            href = text
        elif elem.tag == dav.PropStat.tag:
            propstats.append(elem)

    return (href, propstats, status)


def _propstat_code(propstat: _Element) -> int:
    status_elem = propstat.find(dav.Status.tag)
    if status_elem is None:
        return 200
    return _status_to_code(status_elem.text)


def _propstats_to_code(propstats: list[_Element]) -> int:
    """
    Without a response-level status, the resource is fine if any of
    its propstats is; otherwise the status of the first propstat wins.
    """
    codes = [_propstat_code(p) for p in propstats]
    if not codes:
        return 200
    for code in codes:
        if 200 <= code < 300:
            return code
    return codes[0]


def _extract_properties(propstats: list[_Element]) -> dict[str, Any]:
    """
    Extract properties from the 2xx propstat elements into a dict.

    Properties reported under 404 (and other non-2xx) propstats are
    left out, missing properties are simply absent from the dict.

    Args:
        propstats: List of propstat elements

    Returns:
        Dict mapping property tag to value (text or element)
    """
    properties: dict[str, Any] = {}

    for propstat in propstats:
        code = _propstat_code(propstat)
        if not 200 <= code < 300:
            continue

        prop = propstat.find(dav.Prop.tag)
        if prop is None:
            continue

        for child in prop:
            properties[child.tag] = _element_to_value(child)

    return properties


def _first_href(elem: _Element) -> Optional[str]:
    hrefs = [child.text.strip() for child in elem if child.tag == dav.Href.tag and child.text]
    if len(hrefs) > 1:
        error.weirdness("expected one href, got several", elem)
    return hrefs[0] if hrefs else None


def _element_to_value(elem: _Element) -> Any:
    """
    Convert an XML element to a Python value.

    For simple elements, returns text content.
    For complex elements with children, returns a str, a list or the element.
    """
    tag = elem.tag

    # resourcetype: extract child tag names (e.g., collection, calendar)
    if tag == dav.ResourceType.tag:
        return [child.tag for child in elem if isinstance(child.tag, str)]

    # supported-calendar-component-set: the names of the comp children
    if tag == cdav.SupportedCalendarComponentSet.tag:
        return [
            child.get("name").upper()
            for child in elem
            if isinstance(child.tag, str) and child.get("name")
        ]

    # current-user-principal and calendar-home-set: extract href
    if tag in (dav.CurrentUserPrincipal.tag, cdav.CalendarHomeSet.tag):
        return _first_href(elem)

    if len(elem) == 0:
        return elem.text

    # Generic handling for elements with children
    children_texts = []
    for child in elem:
        if child.text:
            children_texts.append(child.text)
        elif child.get("name"):
            # Elements with name attribute (like comp)
            children_texts.append(child.get("name"))
        elif len(child) == 0:
            # Empty element - use tag name
            children_texts.append(child.tag)

    if len(children_texts) == 1:
        return children_texts[0]
    elif children_texts:
        return children_texts

    # Fallback: return the element for further processing
    return elem


def _status_to_code(status: Optional[str]) -> int:
    """
    Extract status code from status string like "HTTP/1.1 200 OK".

    Args:
        status: Status string

    Returns:
        Integer status code (defaults to 200 if parsing fails)
    """
    if not status:
        return 200

    parts = status.split()
    if len(parts) >= 2:
        try:
            return int(parts[1])
        except ValueError:
            pass

    error.weirdness("unparsable status line", status)
    return 200
