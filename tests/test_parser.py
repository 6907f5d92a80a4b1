"""Tests for the line grammar parser."""

import time

import pytest

from gelf_adapter.parser import LinePart, get_part, parse_line

LINE = '[2021-05-01T10:00:00.123456+00:00] web.INFO: boot complete {"user":"bob"} {"req":"r-1"}'


class TestParseLineMatch:
    def test_extracts_all_parts(self):
        parsed = parse_line(LINE)
        assert parsed.matched is True
        assert parsed.raw == LINE
        assert parsed.timestamp == "2021-05-01T10:00:00.123456+00:00"
        assert parsed.facility == "web"
        assert parsed.level == "INFO"
        assert parsed.message == "boot complete"
        assert parsed.context == '{"user":"bob"}'
        assert parsed.extra == '{"req":"r-1"}'

    def test_empty_json_tokens(self):
        parsed = parse_line("[2021-05-01T10:00:00.123456+00:00] web.INFO: boot complete {} []")
        assert parsed.matched is True
        assert parsed.message == "boot complete"
        assert parsed.context == "{}"
        assert parsed.extra == "[]"

    @pytest.mark.parametrize("timestamp", [
        "2021-05-01T10:00:00+0000",
        "2021-05-01T10:00:00-0130",
        "2021-05-01T10:00:00+02:00",
        "2021-05-01T10:00:00.000001-05:00",
    ])
    def test_timestamp_variants(self, timestamp):
        parsed = parse_line(f"[{timestamp}] app.DEBUG: x [] []")
        assert parsed.matched is True
        assert parsed.timestamp == timestamp

    def test_facility_with_hyphen_and_underscore(self):
        parsed = parse_line("[2021-05-01T10:00:00+00:00] my-app_worker.ERROR: failed [] []")
        assert parsed.facility == "my-app_worker"
        assert parsed.level == "ERROR"

    def test_empty_message(self):
        parsed = parse_line("[2021-05-01T10:00:00+00:00] app.INFO:  [] []")
        assert parsed.matched is True
        assert parsed.message == ""

    def test_message_keeps_colons_and_brackets(self):
        parsed = parse_line("[2021-05-01T10:00:00+00:00] app.INFO: a: [b] {c} [] []")
        assert parsed.message == "a: [b] {c}"

    def test_nested_json_object(self):
        parsed = parse_line('[2021-05-01T10:00:00+00:00] app.INFO: m {"a":{"b":1}} []')
        assert parsed.message == "m"
        assert parsed.context == '{"a":{"b":1}}'
        assert parsed.extra == "[]"

    def test_unknown_level_still_matches(self):
        parsed = parse_line("[2021-05-01T10:00:00+00:00] app.verbose: hi [] []")
        assert parsed.level == "verbose"


class TestParseLineNoMatch:
    @pytest.mark.parametrize("line", [
        "panic: something broke",
        "",
        # missing both JSON tokens
        "[2021-05-01T10:00:00+00:00] app.INFO: hello",
        # missing the extra token
        "[2021-05-01T10:00:00+00:00] app.INFO: hello {}",
        # missing UTC offset
        "[2021-05-01T10:00:00] app.INFO: hello [] []",
        # 3-digit fraction
        "[2021-05-01T10:00:00.123+00:00] app.INFO: hello [] []",
        # leading text before the bracket
        "x [2021-05-01T10:00:00+00:00] app.INFO: hello [] []",
        # trailing text after the extra token
        "[2021-05-01T10:00:00+00:00] app.INFO: hello [] [] x",
        # non-empty array is not a JSON token
        "[2021-05-01T10:00:00+00:00] app.INFO: hello [1] []",
        # trailing newline is not part of the grammar
        "[2021-05-01T10:00:00+00:00] app.INFO: hello [] []\n",
    ])
    def test_no_match_yields_empty_parts(self, line):
        parsed = parse_line(line)
        assert parsed.matched is False
        assert parsed.raw == line
        assert parsed.timestamp == ""
        assert parsed.facility == ""
        assert parsed.level == ""
        assert parsed.message == ""
        assert parsed.context == ""
        assert parsed.extra == ""


class TestGetPart:
    def test_positions(self):
        assert get_part(LINE, LinePart.TIMESTAMP) == "2021-05-01T10:00:00.123456+00:00"
        assert get_part(LINE, LinePart.FACILITY) == "web"
        assert get_part(LINE, LinePart.LEVEL) == "INFO"
        assert get_part(LINE, LinePart.MESSAGE) == "boot complete"
        assert get_part(LINE, LinePart.CONTEXT) == '{"user":"bob"}'
        assert get_part(LINE, LinePart.EXTRA) == '{"req":"r-1"}'

    def test_plain_int_positions(self):
        assert get_part(LINE, 5) == "web"
        assert get_part(LINE, 7) == "boot complete"

    @pytest.mark.parametrize("part", [0, 2, 3, 4, 10, -1, 99])
    def test_out_of_grammar_positions_are_empty(self, part):
        assert get_part(LINE, part) == ""

    def test_non_matching_line_is_empty(self):
        assert get_part("panic: something broke", LinePart.MESSAGE) == ""


class TestParseLineLongInput:
    HEAD = "[2021-05-01T10:00:00+00:00] app.INFO:"

    @pytest.mark.parametrize("tail", [
        " {}" * 20000 + " x",
        " {" * 30000 + " x",
        " {" * 30000 + "}",
        " []" * 20000 + " x",
        ' {"a":' * 20000 + " [] []\n",
    ])
    def test_non_matching_line_rejected_quickly(self, tail):
        start = time.monotonic()
        parsed = parse_line(self.HEAD + tail)
        assert time.monotonic() - start < 1.0
        assert parsed.matched is False

    def test_long_run_of_objects_keeps_longest_message(self):
        start = time.monotonic()
        parsed = parse_line(self.HEAD + " {}" * 20000)
        assert time.monotonic() - start < 1.0
        assert parsed.matched is True
        assert parsed.message == " ".join(["{}"] * 19998)
        assert parsed.context == "{}"
        assert parsed.extra == "{}"

    def test_long_message_before_tokens(self):
        parsed = parse_line(self.HEAD + " {}" * 20000 + " [] []")
        assert parsed.message == " ".join(["{}"] * 20000)
        assert parsed.context == "[]"
        assert parsed.extra == "[]"

    def test_context_is_shortest_object(self):
        parsed = parse_line(self.HEAD + ' m {"a":1} {"b":2} {"c":3}')
        assert parsed.message == 'm {"a":1}'
        assert parsed.context == '{"b":2}'
        assert parsed.extra == '{"c":3}'

    def test_context_with_spaces(self):
        parsed = parse_line(self.HEAD + ' m {"a": 1, "b": 2} []')
        assert parsed.message == "m"
        assert parsed.context == '{"a": 1, "b": 2}'

    def test_tab_separators(self):
        parsed = parse_line(self.HEAD + "\tm\t{}\t[]")
        assert parsed.matched is True
        assert parsed.message == "m"

    def test_newline_inside_message_is_rejected(self):
        assert parse_line(self.HEAD + " a\nb [] []").matched is False
