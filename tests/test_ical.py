"""
Unit tests for the iCalendar tokenizer, parser and serializer.
"""

import icalendar
import pytest

from minicaldav.ical import (
    Component,
    ComponentKind,
    Property,
    parse_content_line,
    parse_ical,
    unfold_lines,
)
from minicaldav.ical.types import fold_line
from minicaldav.lib.error import FormatError


def ics(*lines, eol="\r\n"):
    return eol.join(lines) + eol


STANDUP = ics(
    "BEGIN:VCALENDAR",
    "VERSION:2.0",
    "PRODID:-//Example Corp//Example Client//EN",
    "BEGIN:VEVENT",
    "UID:abc-1",
    "DTSTAMP:20231220T120000Z",
    "DTSTART:20240101T090000Z",
    "SUMMARY:Standup",
    "END:VEVENT",
    "END:VCALENDAR",
)

WITH_ALARM_AND_TIMEZONE = ics(
    "BEGIN:VCALENDAR",
    "VERSION:2.0",
    "PRODID:-//Example Corp//Example Client//EN",
    "BEGIN:VTIMEZONE",
    "TZID:Europe/Oslo",
    "BEGIN:STANDARD",
    "DTSTART:19701025T030000",
    "TZOFFSETFROM:+0200",
    "TZOFFSETTO:+0100",
    "END:STANDARD",
    "BEGIN:DAYLIGHT",
    "DTSTART:19700329T020000",
    "TZOFFSETFROM:+0100",
    "TZOFFSETTO:+0200",
    "END:DAYLIGHT",
    "END:VTIMEZONE",
    "BEGIN:VEVENT",
    "UID:meeting-1",
    "DTSTART;TZID=Europe/Oslo:20240301T100000",
    "DTEND;TZID=Europe/Oslo:20240301T110000",
    'ATTENDEE;CN="Doe: John";ROLE=REQ-PARTICIPANT:mailto:john@example.com',
    "DESCRIPTION:A rather long description that will certainly need to be fol",
    " ded when written back\\, since it is longer than seventy-five octets",
    "BEGIN:VALARM",
    "ACTION:DISPLAY",
    "TRIGGER:-PT15M",
    "END:VALARM",
    "X-VENDOR-THING:whatever",
    "END:VEVENT",
    "BEGIN:X-VENDOR",
    "X-FOO:bar",
    "END:X-VENDOR",
    "END:VCALENDAR",
)


class TestUnfoldLines:
    def test_plain_lines(self):
        assert list(unfold_lines("A:1\r\nB:2\r\n")) == ["A:1", "B:2"]

    def test_folded_with_space_and_tab(self):
        text = "DESCRIPTION:abc\r\n def\r\n\tghi\r\nX:1\r\n"
        assert list(unfold_lines(text)) == ["DESCRIPTION:abcdefghi", "X:1"]

    def test_only_one_whitespace_is_removed(self):
        assert list(unfold_lines("SUMMARY:a\r\n  b\r\n")) == ["SUMMARY:a b"]

    def test_folded_value_equals_unfolded(self):
        folded = "SUMMARY:Weekly\r\n  planning\r\n meeting\r\n"
        unfolded = "SUMMARY:Weekly planningmeeting\r\n"
        assert list(unfold_lines(folded)) == list(unfold_lines(unfolded))

    def test_bare_lf_and_bare_cr(self):
        assert list(unfold_lines("A:1\nB:2\n c\rD:3")) == ["A:1", "B:2c", "D:3"]

    def test_missing_final_line_break(self):
        assert list(unfold_lines("A:1\r\nB:2")) == ["A:1", "B:2"]

    def test_blank_lines_are_skipped(self):
        assert list(unfold_lines("\r\nA:1\r\n\r\nB:2\r\n\r\n")) == [
            "A:1",
            "B:2",
        ]

    def test_bytes_input(self):
        text = "SUMMARY:Møte\r\n".encode("utf-8")
        assert list(unfold_lines(text)) == ["SUMMARY:Møte"]

    def test_bytes_not_utf8(self):
        text = b"BEGIN:VCALENDAR\r\nX:\xff\xfe\r\nEND:VCALENDAR\r\n"
        with pytest.raises(FormatError):
            list(unfold_lines(text))
        with pytest.raises(FormatError):
            parse_ical(text)

    def test_line_without_colon_is_taken_as_continuation(self):
        assert list(unfold_lines("SUMMARY:Hello\r\nWorld\r\nX:1\r\n")) == [
            "SUMMARY:HelloWorld",
            "X:1",
        ]

    def test_first_line_without_colon(self):
        with pytest.raises(FormatError):
            list(unfold_lines("garbage\r\nA:1\r\n"))

    def test_continuation_without_preceding_line(self):
        with pytest.raises(FormatError):
            list(unfold_lines(" continued:1\r\n"))

    def test_is_lazy(self):
        lines = unfold_lines("A:1\r\nB:2\r\n")
        assert next(lines) == "A:1"
        assert next(lines) == "B:2"
        with pytest.raises(StopIteration):
            next(lines)


class TestContentLine:
    def test_simple(self):
        prop = parse_content_line("SUMMARY:Standup")
        assert prop.name == "SUMMARY"
        assert prop.value == "Standup"
        assert len(prop.params) == 0

    def test_name_is_uppercased(self):
        assert parse_content_line("summary:x").name == "SUMMARY"

    def test_value_may_contain_colons(self):
        prop = parse_content_line("URL:https://example.com:8443/x")
        assert prop.value == "https://example.com:8443/x"

    def test_quoted_parameter_with_colon_and_semicolon(self):
        prop = parse_content_line(
            'ATTENDEE;CN="Doe: John; Jr";ROLE=REQ-PARTICIPANT:mailto:john@example.com'
        )
        assert prop.name == "ATTENDEE"
        assert prop.value == "mailto:john@example.com"
        assert prop.params["cn"] == '"Doe: John; Jr"'
        assert prop.param("CN") == "Doe: John; Jr"
        assert prop.param("role") == "REQ-PARTICIPANT"

    def test_multi_valued_parameter(self):
        prop = parse_content_line('X-P;MEMBER="mailto:a@x,y","mailto:b@x":v')
        assert prop.param_values("member") == ["mailto:a@x,y", "mailto:b@x"]
        assert prop.param_values("missing") == []
        assert prop.param("missing") is None

    def test_empty_value(self):
        assert parse_content_line("DESCRIPTION:").value == ""

    def test_empty_name(self):
        with pytest.raises(FormatError):
            parse_content_line(":value")

    def test_parameter_without_value(self):
        with pytest.raises(FormatError):
            parse_content_line("DTSTART;VALUE:20240101")


class TestParser:
    def test_standup(self):
        roots = parse_ical(STANDUP)
        assert len(roots) == 1
        vcal = roots[0]
        assert vcal.kind == ComponentKind.VCALENDAR
        assert [c.kind for c in vcal.children] == [ComponentKind.VEVENT]
        vevent = vcal.children[0]
        assert vevent.get("uid").value == "abc-1"
        assert vevent.get("SUMMARY").value == "Standup"
        assert vevent.get("LOCATION") is None

    def test_property_order_is_preserved(self):
        vevent = parse_ical(STANDUP)[0].children[0]
        assert [p.name for p in vevent.properties] == [
            "UID",
            "DTSTAMP",
            "DTSTART",
            "SUMMARY",
        ]

    def test_nested_components(self):
        vcal = parse_ical(WITH_ALARM_AND_TIMEZONE)[0]
        assert [c.kind for c in vcal.children] == [
            ComponentKind.VTIMEZONE,
            ComponentKind.VEVENT,
            ComponentKind.UNKNOWN,
        ]
        assert vcal.children[2].name == "X-VENDOR"
        vtimezone = vcal.children[0]
        assert [c.kind for c in vtimezone.children] == [
            ComponentKind.STANDARD,
            ComponentKind.DAYLIGHT,
        ]
        vevent = vcal.children[1]
        assert [c.kind for c in vevent.children] == [ComponentKind.VALARM]
        assert vevent.get("X-VENDOR-THING").value == "whatever"
        assert vevent.get("DESCRIPTION").value.endswith("seventy-five octets")

    def test_walk(self):
        vcal = parse_ical(WITH_ALARM_AND_TIMEZONE)[0]
        assert [c.name for c in vcal.walk("VEVENT")] == ["VEVENT"]
        assert [c.name for c in vcal.walk(ComponentKind.VALARM)] == ["VALARM"]
        assert len(list(vcal.walk())) == 7

    def test_get_all(self):
        vevent = parse_ical(
            ics(
                "BEGIN:VCALENDAR",
                "BEGIN:VEVENT",
                "UID:x",
                "CATEGORIES:a,b",
                "CATEGORIES:c",
                "END:VEVENT",
                "END:VCALENDAR",
            )
        )[0].children[0]
        assert [p.value for p in vevent.get_all("categories")] == ["a,b", "c"]

    def test_lowercase_component_names(self):
        roots = parse_ical("begin:vcalendar\nbegin:vevent\nuid:x\nend:vevent\nend:vcalendar\n")
        assert roots[0].kind == ComponentKind.VCALENDAR
        assert roots[0].children[0].kind == ComponentKind.VEVENT

    def test_several_calendars(self):
        roots = parse_ical(STANDUP + STANDUP)
        assert len(roots) == 2

    def test_missing_end(self):
        with pytest.raises(FormatError):
            parse_ical(ics("BEGIN:VCALENDAR", "BEGIN:VEVENT", "UID:x", "END:VCALENDAR"))

    def test_missing_end_at_eof(self):
        with pytest.raises(FormatError):
            parse_ical(ics("BEGIN:VCALENDAR", "BEGIN:VEVENT", "UID:x"))

    def test_unmatched_end(self):
        with pytest.raises(FormatError):
            parse_ical(ics("BEGIN:VCALENDAR", "END:VEVENT", "END:VCALENDAR"))

    def test_end_without_begin(self):
        with pytest.raises(FormatError):
            parse_ical(ics("END:VEVENT"))

    def test_property_outside_component(self):
        with pytest.raises(FormatError):
            parse_ical(ics("VERSION:2.0", "BEGIN:VCALENDAR", "END:VCALENDAR"))

    def test_event_outside_calendar(self):
        with pytest.raises(FormatError):
            parse_ical(ics("BEGIN:VEVENT", "UID:x", "END:VEVENT"))

    def test_event_inside_event(self):
        with pytest.raises(FormatError):
            parse_ical(
                ics(
                    "BEGIN:VCALENDAR",
                    "BEGIN:VEVENT",
                    "BEGIN:VEVENT",
                    "END:VEVENT",
                    "END:VEVENT",
                    "END:VCALENDAR",
                )
            )

    def test_nested_calendar(self):
        with pytest.raises(FormatError):
            parse_ical(
                ics(
                    "BEGIN:VCALENDAR",
                    "BEGIN:VCALENDAR",
                    "END:VCALENDAR",
                    "END:VCALENDAR",
                )
            )

    def test_begin_without_name(self):
        with pytest.raises(FormatError):
            parse_ical(ics("BEGIN:", "END:"))

    def test_empty_input(self):
        assert parse_ical("") == []


class TestSerializer:
    def test_fold_short_line(self):
        assert fold_line("SUMMARY:x") == "SUMMARY:x\r\n"

    def test_fold_long_line(self):
        line = "DESCRIPTION:" + "x" * 200
        folded = fold_line(line)
        physical = folded.split("\r\n")[:-1]
        assert len(physical) == 3
        assert all(len(p.encode("utf-8")) <= 75 for p in physical)
        assert all(p.startswith(" ") for p in physical[1:])
        assert list(unfold_lines(folded)) == [line]

    def test_fold_does_not_split_utf8(self):
        line = "SUMMARY:" + "ø€😀" * 40
        folded = fold_line(line)
        for physical in folded.split("\r\n")[:-1]:
            assert len(physical.encode("utf-8")) <= 75
        assert list(unfold_lines(folded.encode("utf-8"))) == [line]

    def test_to_ical(self):
        vcal = parse_ical(STANDUP)[0]
        assert vcal.to_ical() == STANDUP

    def test_property_to_ical_keeps_quotes(self):
        prop = parse_content_line('ATTENDEE;CN="Doe: John":mailto:john@example.com')
        assert prop.to_ical() == 'ATTENDEE;CN="Doe: John":mailto:john@example.com'

    def test_reparse_gives_equal_forest(self):
        for text in (STANDUP, WITH_ALARM_AND_TIMEZONE, STANDUP + STANDUP):
            roots = parse_ical(text)
            written = "".join(root.to_ical() for root in roots)
            assert parse_ical(written) == roots

    def test_built_by_hand(self):
        vcal = Component.named("vcalendar")
        vevent = Component.named("VEVENT")
        vevent.properties.append(Property("uid", "x-1"))
        vevent.properties.append(Property("dtstart", "20240101", {"value": "DATE"}))
        vcal.children.append(vevent)
        assert vcal.to_ical() == ics(
            "BEGIN:VCALENDAR",
            "BEGIN:VEVENT",
            "UID:x-1",
            "DTSTART;value=DATE:20240101",
            "END:VEVENT",
            "END:VCALENDAR",
        )
        assert parse_ical(vcal.to_ical()) == [vcal]

    def test_output_is_understood_by_icalendar(self):
        roots = parse_ical(WITH_ALARM_AND_TIMEZONE)
        cal = icalendar.Calendar.from_ical(roots[0].to_ical())
        events = cal.walk("VEVENT")
        assert len(events) == 1
        assert str(events[0]["UID"]) == "meeting-1"
        assert len(events[0].walk("VALARM")) == 1
