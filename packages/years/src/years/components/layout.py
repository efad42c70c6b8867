"""
Layout mini-language: tokenizer, analyzer, parser and formatter.

Layouts are written against the reference instant ``Mon Jan 2 15:04:05 MST 2006``
(e.g. ``"2006-01-02"``, ``"Jan"``, ``"02.txt"``), plus a sentinel family for
embedded Unix epochs:

    U@            seconds
    U@000         milliseconds
    U@000000      microseconds
    U@000000000   nanoseconds

The tokenizer scans left to right and always takes the longest directive at a
position, so ``2006`` is a year (never a day ``2`` followed by ``006``) and
``15`` is an hour (never a month ``1`` followed by ``5``).

Multi-level layouts separate per-level segments with ``/``:
``"2006/Jan/2006-01-02.txt"``.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from enum import StrEnum

from years.components.units import (
    LayoutDescriptor,
    PatternKind,
    TimeUnit,
)
from years.exceptions import ParseError

LAYOUT_SEPARATOR = "/"

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# sort key for nodes without a time of their own
EARLIEST = datetime.min.replace(tzinfo=timezone.utc)

# a nanosecond epoch for year 3000 has 20 digits
MAX_EPOCH_DIGITS = 20

EPOCH_SENTINEL = "U@"

# longest first: the most precise sentinel wins
EPOCH_SENTINELS: tuple[tuple[str, TimeUnit], ...] = (
    ("U@000000000", TimeUnit.EPOCH_NANOSECOND),
    ("U@000000", TimeUnit.EPOCH_MICROSECOND),
    ("U@000", TimeUnit.EPOCH_MILLISECOND),
    ("U@", TimeUnit.EPOCH_SECOND),
)

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


class Directive(StrEnum):
    LITERAL = "literal"

    YEAR = "2006"
    YEAR_SHORT = "06"
    MONTH_NAME = "January"
    MONTH_ABBR = "Jan"
    MONTH_PADDED = "01"
    MONTH = "1"
    DAY_PADDED = "02"
    DAY_SPACED = "_2"
    DAY = "2"
    YEAR_DAY_PADDED = "002"
    YEAR_DAY_SPACED = "__2"
    WEEKDAY_NAME = "Monday"
    WEEKDAY_ABBR = "Mon"

    HOUR = "15"
    HOUR12_PADDED = "03"
    HOUR12 = "3"
    MINUTE_PADDED = "04"
    MINUTE = "4"
    SECOND_PADDED = "05"
    SECOND = "5"
    PM = "PM"
    PM_LOWER = "pm"
    FRACTION = ".000"
    FRACTION_OPTIONAL = ".999"

    ZONE_NAME = "MST"
    ZONE = "-0700"
    ZONE_COLON = "-07:00"
    ZONE_HOURS = "-07"
    ZONE_SECONDS = "-070000"
    ZONE_COLON_SECONDS = "-07:00:00"
    ISO_ZONE = "Z0700"
    ISO_ZONE_COLON = "Z07:00"
    ISO_ZONE_HOURS = "Z07"
    ISO_ZONE_SECONDS = "Z070000"
    ISO_ZONE_COLON_SECONDS = "Z07:00:00"

    EPOCH = "U@"


_YEAR_DIRECTIVES = {Directive.YEAR, Directive.YEAR_SHORT}
_MONTH_DIRECTIVES = {
    Directive.MONTH_NAME,
    Directive.MONTH_ABBR,
    Directive.MONTH_PADDED,
    Directive.MONTH,
}
_DAY_DIRECTIVES = {Directive.DAY_PADDED, Directive.DAY_SPACED, Directive.DAY}
_YEAR_DAY_DIRECTIVES = {Directive.YEAR_DAY_PADDED, Directive.YEAR_DAY_SPACED}

# checked in order, so longer forms come first
_ZONE_FORMS = (
    ("-07:00:00", Directive.ZONE_COLON_SECONDS),
    ("-070000", Directive.ZONE_SECONDS),
    ("-07:00", Directive.ZONE_COLON),
    ("-0700", Directive.ZONE),
    ("-07", Directive.ZONE_HOURS),
    ("Z07:00:00", Directive.ISO_ZONE_COLON_SECONDS),
    ("Z070000", Directive.ISO_ZONE_SECONDS),
    ("Z07:00", Directive.ISO_ZONE_COLON),
    ("Z0700", Directive.ISO_ZONE),
    ("Z07", Directive.ISO_ZONE_HOURS),
)


@dataclass(frozen=True)
class Token:
    directive: Directive
    text: str

    # epoch precision for EPOCH tokens
    unit: TimeUnit | None = None

    @property
    def is_literal(self) -> bool:
        return self.directive == Directive.LITERAL


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------


def _match_directive(layout: str, i: int) -> Token | None:
    """Return the directive starting at position *i*, or None for a literal char."""
    rest = layout[i:]
    c = rest[0]

    if rest.startswith(EPOCH_SENTINEL):
        for sentinel, unit in EPOCH_SENTINELS:
            if rest.startswith(sentinel):
                return Token(Directive.EPOCH, sentinel, unit)

    if c == "J":
        if rest.startswith("January"):
            return Token(Directive.MONTH_NAME, "January")
        if rest.startswith("Jan"):
            return Token(Directive.MONTH_ABBR, "Jan")
    elif c == "M":
        if rest.startswith("Monday"):
            return Token(Directive.WEEKDAY_NAME, "Monday")
        if rest.startswith("Mon"):
            return Token(Directive.WEEKDAY_ABBR, "Mon")
        if rest.startswith("MST"):
            return Token(Directive.ZONE_NAME, "MST")
    elif c == "0":
        if len(rest) >= 2 and "1" <= rest[1] <= "6":
            return Token(Directive(rest[:2]), rest[:2])
        if rest.startswith("002"):
            return Token(Directive.YEAR_DAY_PADDED, "002")
    elif c == "1":
        if rest.startswith("15"):
            return Token(Directive.HOUR, "15")
        return Token(Directive.MONTH, "1")
    elif c == "2":
        if rest.startswith("2006"):
            return Token(Directive.YEAR, "2006")
        return Token(Directive.DAY, "2")
    elif c == "_":
        # "_2006" is a literal underscore followed by a year
        if rest.startswith("_2") and not rest.startswith("_2006"):
            return Token(Directive.DAY_SPACED, "_2")
        if rest.startswith("__2"):
            return Token(Directive.YEAR_DAY_SPACED, "__2")
    elif c == "3":
        return Token(Directive.HOUR12, "3")
    elif c == "4":
        return Token(Directive.MINUTE, "4")
    elif c == "5":
        return Token(Directive.SECOND, "5")
    elif c == "P":
        if rest.startswith("PM"):
            return Token(Directive.PM, "PM")
    elif c == "p":
        if rest.startswith("pm"):
            return Token(Directive.PM_LOWER, "pm")
    elif c in "-Z":
        for form, directive in _ZONE_FORMS:
            if rest.startswith(form):
                return Token(directive, form)
    elif c in ".,":
        if len(rest) >= 2 and rest[1] in "09":
            digit = rest[1]
            j = 1
            while j < len(rest) and rest[j] == digit:
                j += 1
            # only a fraction if the run of digits ends here
            if j == len(rest) or not rest[j].isdigit():
                directive = Directive.FRACTION if digit == "0" else Directive.FRACTION_OPTIONAL
                return Token(directive, rest[:j])

    return None


@functools.lru_cache(maxsize=512)
def _tokenize(layout: str) -> tuple[Token, ...]:
    tokens: list[Token] = []
    literal: list[str] = []
    i = 0
    while i < len(layout):
        token = _match_directive(layout, i)
        if token is None:
            literal.append(layout[i])
            i += 1
            continue
        if literal:
            tokens.append(Token(Directive.LITERAL, "".join(literal)))
            literal = []
        tokens.append(token)
        i += len(token.text)
    if literal:
        tokens.append(Token(Directive.LITERAL, "".join(literal)))
    return tuple(tokens)


def tokenize(layout: str) -> list[Token]:
    """Split *layout* into literal and directive tokens."""
    return list(_tokenize(layout))


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------


def analyze_layout(fragment: str) -> LayoutDescriptor | None:
    """Describe which calendar units a single-level layout fragment encodes.

    Returns None when the fragment holds no date token at all; callers treat
    that as "not a calendar fragment", never as an error.
    """
    tokens = _tokenize(fragment)

    epoch_units = [t.unit for t in tokens if t.directive == Directive.EPOCH]
    if epoch_units:
        unit = max(epoch_units)
        return LayoutDescriptor(
            units=frozenset({unit}),
            minimal_unit=unit,
            pattern_kind=PatternKind.EPOCH_TEMPLATE,
        )

    units: set[TimeUnit] = set()
    for token in tokens:
        if token.directive in _YEAR_DIRECTIVES:
            units.add(TimeUnit.YEAR)
        elif token.directive in _MONTH_DIRECTIVES:
            units.add(TimeUnit.MONTH)
        elif token.directive in _DAY_DIRECTIVES:
            units.add(TimeUnit.DAY)
        elif token.directive in _YEAR_DAY_DIRECTIVES:
            # a day of the year pins the month as well
            units.update((TimeUnit.DAY, TimeUnit.MONTH))

    if not units:
        return None

    return LayoutDescriptor(
        units=frozenset(units),
        minimal_unit=min(units),
        pattern_kind=PatternKind.CALENDAR,
    )


def split_layout(layout: str) -> list[str]:
    """Split a multi-level layout into its per-level segments."""
    return [part for part in layout.split(LAYOUT_SEPARATOR) if part]


def find_epoch_part(layout: str) -> tuple[int, int] | None:
    """Locate the epoch sentinel in *layout*.

    e.g. ``"log_U@000.txt"`` -> ``(4, 9)``.
    """
    for sentinel, _ in EPOCH_SENTINELS:
        start = layout.find(sentinel)
        if start != -1:
            return start, start + len(sentinel)
    return None


# ---------------------------------------------------------------------------
# Epoch handling
# ---------------------------------------------------------------------------

_DIGITS = re.compile(r"[0-9]+")


def extract_epoch_digits(layout: str, value: str) -> tuple[int, TimeUnit]:
    """Strip the literal text around the sentinel and return the epoch digits.

    ``extract_epoch_digits("log_U@000.txt", "log_1709682885000.txt")``
    returns ``(1709682885000, TimeUnit.EPOCH_MILLISECOND)``.
    """
    span = find_epoch_part(layout)
    if span is None:
        raise ParseError(f"layout has no epoch sentinel: {layout!r}", value=value, layout=layout)

    start, end = span
    unit = next(u for s, u in EPOCH_SENTINELS if s == layout[start:end])
    prefix, suffix = layout[:start], layout[end:]

    if len(value) < len(prefix) + len(suffix):
        raise ParseError(f"value too short for layout {layout!r}", value=value, layout=layout)
    if not value.startswith(prefix) or not value.endswith(suffix):
        raise ParseError(f"value does not match layout {layout!r}", value=value, layout=layout)

    digits = value[len(prefix):len(value) - len(suffix)]
    if not _DIGITS.fullmatch(digits):
        raise ParseError(f"no epoch digits in {value!r}", value=value, layout=layout)
    if len(digits) > MAX_EPOCH_DIGITS:
        raise ParseError(f"too many epoch digits in {value!r}", value=value, layout=layout)

    return int(digits), unit


def epoch_to_datetime(digits: int, unit: TimeUnit) -> datetime:
    """Convert an integer epoch of the given precision to an aware UTC datetime.

    Nanosecond input is truncated to microseconds.
    """
    try:
        if unit == TimeUnit.EPOCH_SECOND:
            delta = timedelta(seconds=digits)
        elif unit == TimeUnit.EPOCH_MILLISECOND:
            delta = timedelta(milliseconds=digits)
        elif unit == TimeUnit.EPOCH_MICROSECOND:
            delta = timedelta(microseconds=digits)
        elif unit == TimeUnit.EPOCH_NANOSECOND:
            delta = timedelta(microseconds=digits // 1000)
        else:
            raise ValueError(f"not an epoch unit: {unit!r}")
        return EPOCH + delta
    except OverflowError as exc:
        raise ParseError(f"epoch {digits} ({unit}) is out of range") from exc


def datetime_to_epoch(moment: datetime, unit: TimeUnit) -> int:
    micros = (moment - EPOCH) // timedelta(microseconds=1)
    if unit == TimeUnit.EPOCH_SECOND:
        return micros // 1_000_000
    if unit == TimeUnit.EPOCH_MILLISECOND:
        return micros // 1000
    if unit == TimeUnit.EPOCH_MICROSECOND:
        return micros
    if unit == TimeUnit.EPOCH_NANOSECOND:
        return micros * 1000
    raise ValueError(f"not an epoch unit: {unit!r}")


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _names(names: tuple[str, ...], abbreviate: bool) -> str:
    options = [n[:3] if abbreviate else n for n in names]
    return "(?i:" + "|".join(options) + ")"


_PATTERNS: dict[Directive, str] = {
    Directive.YEAR: r"(\d{4})",
    Directive.YEAR_SHORT: r"(\d{2})",
    Directive.MONTH_NAME: "(" + _names(MONTH_NAMES, False) + ")",
    Directive.MONTH_ABBR: "(" + _names(MONTH_NAMES, True) + ")",
    Directive.MONTH_PADDED: r"(\d{2})",
    Directive.MONTH: r"(\d{1,2})",
    Directive.DAY_PADDED: r"(\d{2})",
    Directive.DAY_SPACED: r"( \d|\d{2})",
    Directive.DAY: r"(\d{1,2})",
    Directive.YEAR_DAY_PADDED: r"(\d{3})",
    Directive.YEAR_DAY_SPACED: r"([ \d]{2}\d)",
    Directive.WEEKDAY_NAME: "(" + _names(WEEKDAY_NAMES, False) + ")",
    Directive.WEEKDAY_ABBR: "(" + _names(WEEKDAY_NAMES, True) + ")",
    Directive.HOUR: r"(\d{2})",
    Directive.HOUR12_PADDED: r"(\d{2})",
    Directive.HOUR12: r"(\d{1,2})",
    Directive.MINUTE_PADDED: r"(\d{2})",
    Directive.MINUTE: r"(\d{1,2})",
    Directive.SECOND_PADDED: r"(\d{2})",
    Directive.SECOND: r"(\d{1,2})",
    Directive.PM: r"(?i:(AM|PM))",
    Directive.PM_LOWER: r"(?i:(am|pm))",
    Directive.ZONE_NAME: r"([A-Z]{3,5})",
    Directive.ZONE: r"([+-]\d{4})",
    Directive.ZONE_COLON: r"([+-]\d{2}:\d{2})",
    Directive.ZONE_HOURS: r"([+-]\d{2})",
    Directive.ZONE_SECONDS: r"([+-]\d{6})",
    Directive.ZONE_COLON_SECONDS: r"([+-]\d{2}:\d{2}:\d{2})",
    Directive.ISO_ZONE: r"(Z|[+-]\d{4})",
    Directive.ISO_ZONE_COLON: r"(Z|[+-]\d{2}:\d{2})",
    Directive.ISO_ZONE_HOURS: r"(Z|[+-]\d{2})",
    Directive.ISO_ZONE_SECONDS: r"(Z|[+-]\d{6})",
    Directive.ISO_ZONE_COLON_SECONDS: r"(Z|[+-]\d{2}:\d{2}:\d{2})",
}


def _token_pattern(token: Token) -> str:
    if token.is_literal:
        return re.escape(token.text)
    if token.directive == Directive.FRACTION:
        return r"[.,](\d{%d})" % (len(token.text) - 1)
    if token.directive == Directive.FRACTION_OPTIONAL:
        return r"(?:[.,](\d{1,%d}))?" % (len(token.text) - 1)
    if token.directive == Directive.EPOCH:
        return r"(\d+)"
    return _PATTERNS[token.directive]


@functools.lru_cache(maxsize=512)
def _compile(layout: str) -> tuple[re.Pattern[str], tuple[Token, ...]]:
    tokens = _tokenize(layout)
    pattern = "".join(_token_pattern(t) for t in tokens)
    directives = tuple(t for t in tokens if not t.is_literal)
    return re.compile(pattern), directives


@dataclass
class ParsedFields:
    """Individual fields read from a value; None means the layout did not carry it."""

    year: int | None = None
    month: int | None = None
    day: int | None = None
    year_day: int | None = None
    hour: int | None = None
    minute: int | None = None
    second: int | None = None
    microsecond: int | None = None
    pm: bool | None = None
    tzinfo: timezone | None = None

    def to_datetime(self, year: int | None = None, month: int | None = None) -> datetime:
        """Assemble an aware datetime.

        *year* and *month* fill in units the layout did not carry (ancestor
        backfill); anything still missing falls back to year 1, January,
        day 1, midnight UTC.
        """
        y = self.year if self.year is not None else (year if year is not None else 1)
        m = self.month if self.month is not None else (month if month is not None else 1)
        d = self.day if self.day is not None else 1

        if self.year_day is not None:
            days_in_year = 366 if _is_leap(y) else 365
            if not 1 <= self.year_day <= days_in_year:
                raise ParseError(f"day of year out of range: {self.year_day}")
            resolved = date(y, 1, 1) + timedelta(days=self.year_day - 1)
            if self.month is not None and self.month != resolved.month:
                raise ParseError("day of year does not match month")
            if self.day is not None and self.day != resolved.day:
                raise ParseError("day of year does not match day")
            m, d = resolved.month, resolved.day

        hour = self.hour or 0
        if self.pm is not None:
            if self.pm and hour < 12:
                hour += 12
            elif not self.pm and hour == 12:
                hour = 0

        try:
            return datetime(
                y, m, d,
                hour, self.minute or 0, self.second or 0, self.microsecond or 0,
                tzinfo=self.tzinfo or timezone.utc,
            )
        except ValueError as exc:
            raise ParseError(str(exc)) from exc


def _is_leap(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def _parse_offset(text: str) -> timezone:
    if text == "Z":
        return timezone.utc
    sign = -1 if text[0] == "-" else 1
    digits = text[1:].replace(":", "")
    hours, minutes, seconds = int(digits[:2]), int(digits[2:4] or 0), int(digits[4:6] or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise ParseError(f"zone offset out of range: {text}")
    return timezone(sign * timedelta(hours=hours, minutes=minutes, seconds=seconds))


def _in_range(value: int, low: int, high: int, what: str) -> int:
    if not low <= value <= high:
        raise ParseError(f"{what} out of range: {value}")
    return value


def _apply(fields: ParsedFields, token: Token, text: str | None) -> None:
    directive = token.directive
    if text is None:  # optional fraction absent
        return

    if directive == Directive.YEAR:
        fields.year = int(text)
    elif directive == Directive.YEAR_SHORT:
        short = int(text)
        fields.year = short + (1900 if short >= 69 else 2000)
    elif directive in (Directive.MONTH_NAME, Directive.MONTH_ABBR):
        lowered = text.lower()
        fields.month = next(i for i, n in enumerate(MONTH_NAMES, 1) if n.lower().startswith(lowered))
    elif directive in (Directive.MONTH_PADDED, Directive.MONTH):
        fields.month = _in_range(int(text), 1, 12, "month")
    elif directive in _DAY_DIRECTIVES:
        fields.day = _in_range(int(text.strip()), 1, 31, "day")
    elif directive in _YEAR_DAY_DIRECTIVES:
        fields.year_day = _in_range(int(text.strip()), 1, 366, "day of year")
    elif directive == Directive.HOUR:
        fields.hour = _in_range(int(text), 0, 23, "hour")
    elif directive in (Directive.HOUR12_PADDED, Directive.HOUR12):
        fields.hour = _in_range(int(text), 0, 12, "hour")
    elif directive in (Directive.MINUTE_PADDED, Directive.MINUTE):
        fields.minute = _in_range(int(text), 0, 59, "minute")
    elif directive in (Directive.SECOND_PADDED, Directive.SECOND):
        fields.second = _in_range(int(text), 0, 59, "second")
    elif directive in (Directive.FRACTION, Directive.FRACTION_OPTIONAL):
        fields.microsecond = int(text[:6].ljust(6, "0"))
    elif directive in (Directive.PM, Directive.PM_LOWER):
        fields.pm = text.upper() == "PM"
    elif directive == Directive.ZONE_NAME:
        # abbreviations are not resolved to real zones
        fields.tzinfo = timezone.utc
    elif directive in (Directive.WEEKDAY_NAME, Directive.WEEKDAY_ABBR):
        pass
    elif directive == Directive.EPOCH:
        raise ParseError("epoch templates are resolved with extract_epoch_digits")
    else:
        fields.tzinfo = _parse_offset(text)


def parse_fields(layout: str, value: str) -> ParsedFields:
    """Match *value* against a calendar *layout* and return its fields."""
    pattern, directives = _compile(layout)
    match = pattern.fullmatch(value)
    if match is None:
        raise ParseError(f"{value!r} does not match layout {layout!r}", value=value, layout=layout)

    fields = ParsedFields()
    try:
        for token, text in zip(directives, match.groups()):
            _apply(fields, token, text)
    except ParseError as exc:
        raise ParseError(f"cannot parse {value!r} with layout {layout!r}: {exc}", value=value, layout=layout) from exc
    return fields


def parse_with_layout(layout: str, value: str) -> datetime:
    """Parse *value* against a calendar *layout* into an aware datetime."""
    fields = parse_fields(layout, value)
    try:
        return fields.to_datetime()
    except ParseError as exc:
        raise ParseError(f"cannot parse {value!r} with layout {layout!r}: {exc}", value=value, layout=layout) from exc


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def _format_offset(moment: datetime, token: Token) -> str:
    offset = moment.utcoffset() or timedelta(0)
    if token.directive.value.startswith("Z") and offset == timedelta(0):
        return "Z"
    sign = "-" if offset < timedelta(0) else "+"
    total = abs(int(offset.total_seconds()))
    hours, rem = divmod(total, 3600)
    minutes, seconds = divmod(rem, 60)
    shape = token.directive.value.lstrip("-Z")
    if shape == "07":
        return f"{sign}{hours:02d}"
    if shape == "0700":
        return f"{sign}{hours:02d}{minutes:02d}"
    if shape == "07:00":
        return f"{sign}{hours:02d}:{minutes:02d}"
    if shape == "070000":
        return f"{sign}{hours:02d}{minutes:02d}{seconds:02d}"
    return f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_with_layout(layout: str, moment: datetime) -> str:
    """Render *moment* with *layout*; the inverse of parse_with_layout."""
    out: list[str] = []
    for token in _tokenize(layout):
        d = token.directive
        if d == Directive.LITERAL:
            out.append(token.text)
        elif d == Directive.YEAR:
            out.append(f"{moment.year:04d}")
        elif d == Directive.YEAR_SHORT:
            out.append(f"{moment.year % 100:02d}")
        elif d == Directive.MONTH_NAME:
            out.append(MONTH_NAMES[moment.month - 1])
        elif d == Directive.MONTH_ABBR:
            out.append(MONTH_NAMES[moment.month - 1][:3])
        elif d == Directive.MONTH_PADDED:
            out.append(f"{moment.month:02d}")
        elif d == Directive.MONTH:
            out.append(str(moment.month))
        elif d == Directive.DAY_PADDED:
            out.append(f"{moment.day:02d}")
        elif d == Directive.DAY_SPACED:
            out.append(f"{moment.day:2d}")
        elif d == Directive.DAY:
            out.append(str(moment.day))
        elif d == Directive.YEAR_DAY_PADDED:
            out.append(f"{moment.timetuple().tm_yday:03d}")
        elif d == Directive.YEAR_DAY_SPACED:
            out.append(f"{moment.timetuple().tm_yday:3d}")
        elif d == Directive.WEEKDAY_NAME:
            out.append(WEEKDAY_NAMES[moment.weekday()])
        elif d == Directive.WEEKDAY_ABBR:
            out.append(WEEKDAY_NAMES[moment.weekday()][:3])
        elif d == Directive.HOUR:
            out.append(f"{moment.hour:02d}")
        elif d == Directive.HOUR12_PADDED:
            out.append(f"{moment.hour % 12 or 12:02d}")
        elif d == Directive.HOUR12:
            out.append(str(moment.hour % 12 or 12))
        elif d == Directive.MINUTE_PADDED:
            out.append(f"{moment.minute:02d}")
        elif d == Directive.MINUTE:
            out.append(str(moment.minute))
        elif d == Directive.SECOND_PADDED:
            out.append(f"{moment.second:02d}")
        elif d == Directive.SECOND:
            out.append(str(moment.second))
        elif d == Directive.PM:
            out.append("PM" if moment.hour >= 12 else "AM")
        elif d == Directive.PM_LOWER:
            out.append("pm" if moment.hour >= 12 else "am")
        elif d in (Directive.FRACTION, Directive.FRACTION_OPTIONAL):
            digits = f"{moment.microsecond * 1000:09d}"[:len(token.text) - 1]
            if d == Directive.FRACTION_OPTIONAL:
                digits = digits.rstrip("0")
                if not digits:
                    continue
            out.append(token.text[0] + digits)
        elif d == Directive.ZONE_NAME:
            out.append(moment.tzname() or "UTC")
        elif d == Directive.EPOCH:
            out.append(str(datetime_to_epoch(moment, token.unit)))
        else:
            out.append(_format_offset(moment, token))
    return "".join(out)
