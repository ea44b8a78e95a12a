"""
Tests for calendar discovery.  The transport is a mock answering the
PROPFIND requests in order.
"""

from unittest import mock

import pytest

from minicaldav import check_connection, discover_calendars
from minicaldav.collection import Calendar
from minicaldav.lib.auth import Credentials
from minicaldav.lib.error import (
    AuthorizationError,
    FormatError,
    PropfindError,
    TransportError,
)
from minicaldav.protocol import DAVMethod, DAVResponse

BASE_URL = "https://caldav.example.com/dav/"

PRINCIPAL = b"""<?xml version="1.0" encoding="utf-8"?>
<d:multistatus xmlns:d="DAV:">
  <d:response>
    <d:href>/dav/</d:href>
    <d:propstat>
      <d:prop>
        <d:current-user-principal><d:href>/principals/user/</d:href></d:current-user-principal>
      </d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
  </d:response>
</d:multistatus>"""

HOME_SET = b"""<?xml version="1.0" encoding="utf-8"?>
<d:multistatus xmlns:d="DAV:" xmlns:c="urn:ietf:params:xml:ns:caldav">
  <d:response>
    <d:href>/principals/user/</d:href>
    <d:propstat>
      <d:prop>
        <c:calendar-home-set><d:href>/calendars/user/</d:href></c:calendar-home-set>
      </d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
  </d:response>
</d:multistatus>"""

NO_HOME_SET = b"""<?xml version="1.0" encoding="utf-8"?>
<d:multistatus xmlns:d="DAV:" xmlns:c="urn:ietf:params:xml:ns:caldav">
  <d:response>
    <d:href>/principals/user/</d:href>
    <d:propstat>
      <d:prop><c:calendar-home-set/></d:prop>
      <d:status>HTTP/1.1 404 Not Found</d:status>
    </d:propstat>
  </d:response>
</d:multistatus>"""

CALENDARS = b"""<?xml version="1.0" encoding="utf-8"?>
<d:multistatus xmlns:d="DAV:" xmlns:c="urn:ietf:params:xml:ns:caldav"
               xmlns:cs="http://calendarserver.org/ns/" xmlns:i="http://apple.com/ns/ical/"
               xmlns:card="urn:ietf:params:xml:ns:carddav">
  <d:response>
    <d:href>/calendars/user/</d:href>
    <d:propstat>
      <d:prop><d:resourcetype><d:collection/></d:resourcetype></d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
  </d:response>
  <d:response>
    <d:href>/calendars/user/work/</d:href>
    <d:propstat>
      <d:prop>
        <d:resourcetype><d:collection/><c:calendar/></d:resourcetype>
        <d:displayname>Work</d:displayname>
        <cs:getctag>ctag-1</cs:getctag>
        <i:calendar-color>#FF0000FF</i:calendar-color>
      </d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
  </d:response>
  <d:response>
    <d:href>/calendars/user/private/</d:href>
    <d:propstat>
      <d:prop><d:resourcetype><d:collection/><c:calendar/></d:resourcetype></d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
    <d:propstat>
      <d:prop><d:displayname/><cs:getctag/><i:calendar-color/></d:prop>
      <d:status>HTTP/1.1 404 Not Found</d:status>
    </d:propstat>
  </d:response>
  <d:response>
    <d:href>/calendars/user/contacts/</d:href>
    <d:propstat>
      <d:prop><d:resourcetype><d:collection/><card:addressbook/></d:resourcetype></d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
  </d:response>
</d:multistatus>"""


COMPONENT_SETS = b"""<?xml version="1.0" encoding="utf-8"?>
<d:multistatus xmlns:d="DAV:" xmlns:c="urn:ietf:params:xml:ns:caldav">
  <d:response>
    <d:href>/calendars/user/tasks/</d:href>
    <d:propstat>
      <d:prop>
        <d:resourcetype><d:collection/><c:calendar/></d:resourcetype>
        <c:supported-calendar-component-set><c:comp name="VTODO"/></c:supported-calendar-component-set>
      </d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
  </d:response>
  <d:response>
    <d:href>/calendars/user/journal/</d:href>
    <d:propstat>
      <d:prop>
        <d:resourcetype><d:collection/><c:calendar/></d:resourcetype>
        <c:supported-calendar-component-set><c:comp name="VJOURNAL"/></c:supported-calendar-component-set>
      </d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
  </d:response>
  <d:response>
    <d:href>/calendars/user/both/</d:href>
    <d:propstat>
      <d:prop>
        <d:resourcetype><d:collection/><c:calendar/></d:resourcetype>
        <c:supported-calendar-component-set>
          <c:comp name="VEVENT"/><c:comp name="VTODO"/><c:comp name="VJOURNAL"/>
        </c:supported-calendar-component-set>
      </d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
  </d:response>
  <d:response>
    <d:href>/calendars/user/unannounced/</d:href>
    <d:propstat>
      <d:prop><d:resourcetype><d:collection/><c:calendar/></d:resourcetype></d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
    <d:propstat>
      <d:prop><c:supported-calendar-component-set/></d:prop>
      <d:status>HTTP/1.1 404 Not Found</d:status>
    </d:propstat>
  </d:response>
  <d:response>
    <d:href>mailto:user@example.com</d:href>
    <d:propstat>
      <d:prop><d:resourcetype><d:collection/><c:calendar/></d:resourcetype></d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
  </d:response>
</d:multistatus>"""


def transport_answering(*responses):
    transport = mock.Mock()
    transport.execute.side_effect = list(responses)
    return transport


def sent(transport):
    return [c.args[0] for c in transport.execute.call_args_list]


class TestDiscovery:
    def test_full_chain(self):
        transport = transport_answering(
            DAVResponse(status=207, body=PRINCIPAL),
            DAVResponse(status=207, body=HOME_SET),
            DAVResponse(status=207, body=CALENDARS),
        )
        calendars = discover_calendars(transport, BASE_URL, Credentials("user", "pass"))

        assert calendars == [
            Calendar(url="https://caldav.example.com/calendars/user/work/"),
            Calendar(url="https://caldav.example.com/calendars/user/private/"),
        ]
        work, private = calendars
        assert work.display_name == "Work"
        assert work.ctag == "ctag-1"
        assert work.color == "#FF0000FF"
        assert private.display_name is None
        assert private.ctag is None
        assert private.color is None
        assert private.name == "private"

        first, second, third = sent(transport)
        assert first.method == DAVMethod.PROPFIND
        assert first.url == BASE_URL
        assert first.headers["Depth"] == "0"
        assert b"current-user-principal" in first.body
        assert second.url == "https://caldav.example.com/principals/user/"
        assert second.headers["Depth"] == "0"
        assert b"calendar-home-set" in second.body
        assert third.url == "https://caldav.example.com/calendars/user/"
        assert third.headers["Depth"] == "1"
        for request in (first, second, third):
            assert request.headers["Authorization"] == "Basic dXNlcjpwYXNz"

    def test_credentials_as_tuple(self):
        transport = transport_answering(DAVResponse(status=404))
        discover_calendars(transport, BASE_URL, ("user", "pass"))
        assert sent(transport)[0].headers["Authorization"] == "Basic dXNlcjpwYXNz"

    @pytest.mark.parametrize("status", [404, 405, 501])
    def test_no_principal_support(self, status):
        transport = transport_answering(DAVResponse(status=status))
        calendars = discover_calendars(transport, BASE_URL)
        assert calendars == [Calendar(url=BASE_URL)]
        assert transport.execute.call_count == 1

    def test_principal_property_missing(self):
        body = b"""<d:multistatus xmlns:d="DAV:"><d:response><d:href>/dav/</d:href>
        <d:propstat><d:prop><d:current-user-principal/></d:prop>
        <d:status>HTTP/1.1 404 Not Found</d:status></d:propstat></d:response></d:multistatus>"""
        transport = transport_answering(DAVResponse(status=207, body=body))
        assert discover_calendars(transport, BASE_URL) == [Calendar(url=BASE_URL)]

    def test_no_home_set(self):
        transport = transport_answering(
            DAVResponse(status=207, body=PRINCIPAL),
            DAVResponse(status=207, body=NO_HOME_SET),
        )
        assert discover_calendars(transport, BASE_URL) == [Calendar(url=BASE_URL)]
        assert transport.execute.call_count == 2

    def test_home_set_not_supported(self):
        transport = transport_answering(
            DAVResponse(status=207, body=PRINCIPAL),
            DAVResponse(status=405),
        )
        assert discover_calendars(transport, BASE_URL) == [Calendar(url=BASE_URL)]

    def test_home_set_on_other_host(self):
        home_set = HOME_SET.replace(
            b"<d:href>/calendars/user/</d:href>",
            b"<d:href>https://p42-caldav.example.net/123/calendars/</d:href>",
        )
        calendars_body = CALENDARS.replace(b"/calendars/user/", b"/123/calendars/")
        transport = transport_answering(
            DAVResponse(status=207, body=PRINCIPAL),
            DAVResponse(status=207, body=home_set),
            DAVResponse(status=207, body=calendars_body),
        )
        calendars = discover_calendars(transport, BASE_URL)
        assert sent(transport)[2].url == "https://p42-caldav.example.net/123/calendars/"
        assert calendars[0].url == "https://p42-caldav.example.net/123/calendars/work/"

    @pytest.mark.parametrize("status", [401, 403])
    def test_unauthorized(self, status):
        transport = transport_answering(DAVResponse(status=status))
        with pytest.raises(AuthorizationError):
            discover_calendars(transport, BASE_URL, Credentials("user", "wrong"))

    def test_unauthorized_at_home_set(self):
        transport = transport_answering(
            DAVResponse(status=207, body=PRINCIPAL),
            DAVResponse(status=207, body=HOME_SET),
            DAVResponse(status=401),
        )
        with pytest.raises(AuthorizationError):
            discover_calendars(transport, BASE_URL)

    def test_server_error(self):
        transport = transport_answering(DAVResponse(status=500))
        with pytest.raises(PropfindError) as excinfo:
            discover_calendars(transport, BASE_URL)
        assert excinfo.value.status == 500

    def test_listing_fails(self):
        transport = transport_answering(
            DAVResponse(status=207, body=PRINCIPAL),
            DAVResponse(status=207, body=HOME_SET),
            DAVResponse(status=404),
        )
        with pytest.raises(PropfindError):
            discover_calendars(transport, BASE_URL)

    def test_malformed_xml(self):
        transport = transport_answering(DAVResponse(status=207, body=b"<d:multistatus"))
        with pytest.raises(FormatError):
            discover_calendars(transport, BASE_URL)

    def test_transport_error(self):
        transport = mock.Mock()
        transport.execute.side_effect = TransportError(BASE_URL, "connection refused")
        with pytest.raises(TransportError):
            discover_calendars(transport, BASE_URL)

    def test_supported_component_set(self):
        transport = transport_answering(
            DAVResponse(status=207, body=PRINCIPAL),
            DAVResponse(status=207, body=HOME_SET),
            DAVResponse(status=207, body=COMPONENT_SETS),
        )
        calendars = discover_calendars(transport, BASE_URL)
        assert [c.name for c in calendars] == ["tasks", "both", "unannounced"]
        tasks, both, unannounced = calendars
        assert tasks.components == ("VTODO",)
        assert both.components == ("VEVENT", "VTODO", "VJOURNAL")
        assert unannounced.components is None
        assert b"supported-calendar-component-set" in sent(transport)[2].body


class TestCheckConnection:
    def test_principal(self):
        transport = transport_answering(DAVResponse(status=207, body=PRINCIPAL))
        principal = check_connection(transport, BASE_URL, ("user", "pass"))
        assert principal == "https://caldav.example.com/principals/user/"
        (request,) = sent(transport)
        assert request.method == DAVMethod.PROPFIND
        assert request.headers["Depth"] == "0"
        assert request.headers["Authorization"] == "Basic dXNlcjpwYXNz"

    def test_no_principal_support(self):
        transport = transport_answering(DAVResponse(status=404))
        assert check_connection(transport, BASE_URL) == BASE_URL

    def test_unauthorized(self):
        transport = transport_answering(
            DAVResponse(status=401, headers={"www-authenticate": 'Basic realm="x"'})
        )
        with pytest.raises(AuthorizationError) as excinfo:
            check_connection(transport, BASE_URL, Credentials("user", "wrong"))
        assert "basic" in excinfo.value.reason

    def test_server_error(self):
        transport = transport_answering(DAVResponse(status=500))
        with pytest.raises(PropfindError):
            check_connection(transport, BASE_URL)
