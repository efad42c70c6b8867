"""
pytest suite for TimeParser.
"""

from datetime import date, datetime, timezone

import pytest

from years.components.clock import FixedClock
from years.components.parser import (
    DEFAULT_PARSER_OPTIONS,
    ParserOptions,
    TimeParser,
    extend_parser_defaults,
    get_parser_defaults,
    just_parse,
    parse_raw,
    set_parser_defaults,
)
from years.exceptions import MisconfigurationError, ParseError

UTC = timezone.utc
TIMESTAMP = 1709682885
TIMESTAMP_TIME = datetime(2024, 3, 5, 23, 54, 45, tzinfo=UTC)


class StaticClock(FixedClock):
    def __init__(self) -> None:
        super().__init__(datetime(2024, 3, 1, 14, 30, 59, tzinfo=UTC))


# ---------------------------------------------------------------------------
# Default parser
# ---------------------------------------------------------------------------


class TestDefaultParser:
    def test_parses_unix_timestamp(self):
        assert TimeParser().just_parse(str(TIMESTAMP)) == TIMESTAMP_TIME

    def test_defaults_accept_seconds_and_aliases(self):
        options = get_parser_defaults()
        assert options.accept_epoch_seconds
        assert options.accept_aliases
        assert options.layouts == ()

    def test_parses_date_once_layout_is_a_default(self):
        extend_parser_defaults(layouts=["2006-01-02"])
        assert just_parse("2024-03-06") == datetime(2024, 3, 6, tzinfo=UTC)

    def test_parser_captures_defaults_at_construction(self):
        parser = TimeParser()
        set_parser_defaults(ParserOptions(layouts=("2006-01-02",)))
        with pytest.raises(ParseError):
            parser.just_parse("2024-03-06")
        assert TimeParser().just_parse("2024-03-06") == datetime(2024, 3, 6, tzinfo=UTC)

    def test_explicit_changes_on_top_of_defaults(self):
        parser = TimeParser(accept_epoch_millis=True)
        assert parser.options.accept_epoch_seconds
        assert parser.options.accept_epoch_millis

    def test_extend_defaults_with_single_layout_string(self):
        extend_parser_defaults(layouts="2006-01-02")
        assert get_parser_defaults().layouts == ("2006-01-02",)


# ---------------------------------------------------------------------------
# Layouts
# ---------------------------------------------------------------------------


class TestLayouts:
    def setup_method(self):
        self.parser = TimeParser(ParserOptions(layouts=("2006-01-02", "Jan 2006", "log_U@000.txt")))

    def test_first_matching_layout_wins(self):
        resolution = self.parser.resolve("", "Mar 2024")
        assert resolution.time == datetime(2024, 3, 1, tzinfo=UTC)
        assert resolution.source == "layout:Jan 2006"
        assert not resolution.ambiguous

    def test_embedded_epoch_template(self):
        assert self.parser.just_parse("log_1709682885000.txt") == TIMESTAMP_TIME

    def test_strict_layout_failure_is_an_error(self):
        with pytest.raises(ParseError):
            self.parser.parse("2006-01-02", "Mar 2024")

    def test_strict_layout_outside_configured_layouts(self):
        assert self.parser.parse("02/01/2006", "06/03/2024") == datetime(2024, 3, 6, tzinfo=UTC)

    def test_strict_unrecognized_layout(self):
        with pytest.raises(ParseError):
            self.parser.parse("foo-bar", "foo-bar")

    def test_unrecognized_configured_layout_is_skipped(self):
        parser = TimeParser(ParserOptions(layouts=("foo-bar", "2006-01-02")))
        assert parser.just_parse("2024-03-06") == datetime(2024, 3, 6, tzinfo=UTC)

    def test_no_match_raises(self):
        with pytest.raises(ParseError):
            self.parser.just_parse("not a date")

    def test_strict_layout_skips_aliases(self):
        parser = TimeParser(ParserOptions(accept_aliases=True))
        with pytest.raises(ParseError):
            parser.parse("2006-01-02", "today")


# ---------------------------------------------------------------------------
# Aliases
# ---------------------------------------------------------------------------


class TestAliases:
    def setup_method(self):
        self.parser = TimeParser(
            ParserOptions(clock=StaticClock(), accept_aliases=True, accept_epoch_seconds=True)
        )

    def test_today_yesterday_tomorrow(self):
        assert str(self.parser.just_parse("today")) == "2024-03-01 00:00:00+00:00"
        assert str(self.parser.just_parse("yesterday")) == "2024-02-29 00:00:00+00:00"
        assert str(self.parser.just_parse("tomorrow")) == "2024-03-02 00:00:00+00:00"

    def test_alias_source(self):
        assert self.parser.resolve("", "today").source == "alias:today"

    def test_aliases_disabled(self):
        parser = TimeParser(ParserOptions(clock=StaticClock()))
        with pytest.raises(ParseError):
            parser.just_parse("today")

    def test_custom_alias_overrides_builtin(self):
        parser = TimeParser(
            ParserOptions(
                clock=StaticClock(),
                accept_aliases=True,
                aliases={"today": lambda now: now, "noon": lambda now: now.replace(hour=12, minute=0, second=0)},
            )
        )
        assert parser.just_parse("today") == datetime(2024, 3, 1, 14, 30, 59, tzinfo=UTC)
        assert parser.just_parse("noon") == datetime(2024, 3, 1, 12, tzinfo=UTC)

    def test_default_clock_is_used_without_own_clock(self, frozen_now):
        parser = TimeParser(ParserOptions(accept_aliases=True))
        assert parser.just_parse("today") == datetime(2025, 5, 7, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Epochs
# ---------------------------------------------------------------------------


class TestEpochs:
    def test_single_precision(self):
        parser = TimeParser(ParserOptions(accept_epoch_millis=True))
        resolution = parser.resolve("", "1709682885000")
        assert resolution.time == TIMESTAMP_TIME
        assert not resolution.ambiguous

    def test_ambiguous_seconds_and_millis(self):
        parser = TimeParser(ParserOptions(accept_epoch_seconds=True, accept_epoch_millis=True))
        resolution = parser.resolve("", str(TIMESTAMP))
        # seconds outrank millis
        assert resolution.time == TIMESTAMP_TIME
        assert resolution.ambiguous
        assert resolution.candidates == (
            TIMESTAMP_TIME,
            datetime(1970, 1, 20, 18, 54, 42, 885000, tzinfo=UTC),
        )

    def test_implausible_candidates_are_dropped(self):
        parser = TimeParser(ParserOptions(accept_epoch_seconds=True, accept_epoch_millis=True))
        resolution = parser.resolve("", "1709682885000")
        # as seconds this is far beyond year 3000
        assert resolution.time == TIMESTAMP_TIME
        assert not resolution.ambiguous

    def test_priority_does_not_depend_on_option_order(self):
        parser = TimeParser(ParserOptions(accept_epoch_nanos=True, accept_epoch_micros=True))
        resolution = parser.resolve("", "1709682885000000")
        assert resolution.time == TIMESTAMP_TIME
        assert resolution.ambiguous

    def test_overlong_digit_run_is_a_parse_error(self):
        parser = TimeParser(ParserOptions(accept_epoch_seconds=True, accept_epoch_nanos=True))
        with pytest.raises(ParseError):
            parser.just_parse("9" * 5000)

    def test_no_plausible_candidate(self):
        parser = TimeParser(ParserOptions(accept_epoch_seconds=True))
        with pytest.raises(ParseError):
            parser.just_parse("-5")

    def test_numeric_value_without_epoch_or_layouts(self):
        parser = TimeParser(ParserOptions())
        with pytest.raises(MisconfigurationError):
            parser.just_parse("1709682885")

    def test_numeric_value_with_layouts_only(self):
        parser = TimeParser(ParserOptions(layouts=("20060102",)))
        assert parser.just_parse("20240306") == datetime(2024, 3, 6, tzinfo=UTC)


# ---------------------------------------------------------------------------
# parse_raw
# ---------------------------------------------------------------------------


class TestParseRaw:
    def test_none(self):
        assert parse_raw(None) is None

    def test_datetime_passthrough(self):
        now = datetime.now(UTC).replace(microsecond=0)
        assert parse_raw(now) is now

    def test_date(self):
        assert parse_raw(date(2024, 3, 6)) == datetime(2024, 3, 6, tzinfo=UTC)

    def test_numeric_string(self):
        assert parse_raw(str(TIMESTAMP)) == TIMESTAMP_TIME

    def test_integer(self):
        assert parse_raw(12345) == datetime(1970, 1, 1, 3, 25, 45, tzinfo=UTC)

    def test_unsupported_type(self):
        with pytest.raises(TypeError, match="unsupported type float for parse_raw"):
            parse_raw(3.14)


def test_default_options_are_immutable():
    with pytest.raises(Exception):
        DEFAULT_PARSER_OPTIONS.accept_aliases = False
