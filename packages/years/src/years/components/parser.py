"""
TimeParser - resolves strings to points in time.

A value is tried, in order, against:

  1. the epoch fast path (empty layout, purely numeric value, epoch mode on),
  2. the requested layout (strict) or every configured layout,
  3. the alias table, evaluated against the parser's clock.

Usage (library):
    parser = TimeParser(ParserOptions(layouts=("2006-01-02",), accept_aliases=True))
    parser.parse("", "2024-03-06")
    parser.resolve("", "1709682885").ambiguous
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from years.components.aliases import AliasFunc, default_aliases
from years.components.clock import Clock, get_default_clock
from years.components.layout import (
    MAX_EPOCH_DIGITS,
    epoch_to_datetime,
    extract_epoch_digits,
    parse_with_layout,
    analyze_layout,
)
from years.components.units import PatternKind, TimeUnit
from years.exceptions import MisconfigurationError, ParseError

logger = logging.getLogger(__name__)

# plausibility window for bare numeric epochs
PLAUSIBLE_MIN = datetime(1970, 1, 1, tzinfo=timezone.utc)
PLAUSIBLE_MAX = datetime(3000, 1, 1, tzinfo=timezone.utc)

_NUMERIC = re.compile(r"[+-]?[0-9]+")


class ParserOptions(BaseModel):
    """Configuration captured by a TimeParser at construction time."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    accept_epoch_seconds: bool = False
    accept_epoch_millis: bool = False
    accept_epoch_micros: bool = False
    accept_epoch_nanos: bool = False

    accept_aliases: bool = False

    layouts: tuple[str, ...] = ()

    # None means "use the process-wide default clock"
    clock: Clock | None = None

    # per-instance additions/overrides on top of the default alias table
    aliases: dict[str, Callable[[datetime], datetime]] = Field(default_factory=dict)

    @property
    def epoch_units(self) -> tuple[TimeUnit, ...]:
        """Enabled epoch precisions, in tie-break priority order."""
        enabled = (
            (self.accept_epoch_seconds, TimeUnit.EPOCH_SECOND),
            (self.accept_epoch_millis, TimeUnit.EPOCH_MILLISECOND),
            (self.accept_epoch_micros, TimeUnit.EPOCH_MICROSECOND),
            (self.accept_epoch_nanos, TimeUnit.EPOCH_NANOSECOND),
        )
        return tuple(unit for on, unit in enabled if on)

    def merged(self, **changes: Any) -> "ParserOptions":
        return self.model_copy(update=changes)

    def with_layouts(self, *layouts: str) -> "ParserOptions":
        return self.merged(layouts=self.layouts + layouts)


DEFAULT_PARSER_OPTIONS = ParserOptions(accept_epoch_seconds=True, accept_aliases=True)

_parser_defaults: ParserOptions = DEFAULT_PARSER_OPTIONS


def get_parser_defaults() -> ParserOptions:
    return _parser_defaults


def set_parser_defaults(options: ParserOptions) -> None:
    """Replace the options used by parsers constructed without explicit options."""
    global _parser_defaults
    _parser_defaults = options


def extend_parser_defaults(**changes: Any) -> None:
    """Update selected fields of the default options; layouts are appended."""
    layouts = changes.pop("layouts", ())
    if isinstance(layouts, str):
        layouts = (layouts,)
    layouts = tuple(layouts)
    set_parser_defaults(_parser_defaults.merged(**changes).with_layouts(*layouts))


def reset_parser_defaults() -> None:
    set_parser_defaults(DEFAULT_PARSER_OPTIONS)


@dataclass(frozen=True)
class Resolution:
    """Outcome of TimeParser.resolve.

    ``ambiguous`` is set when more than one epoch precision produced a
    plausible instant; ``time`` is then the first one in priority order
    (seconds, millis, micros, nanos) and ``candidates`` holds them all.
    """

    time: datetime
    source: str
    ambiguous: bool = False
    candidates: tuple[datetime, ...] = ()


class TimeParser:
    def __init__(self, options: ParserOptions | None = None, **changes: Any) -> None:
        options = options if options is not None else get_parser_defaults()
        if changes:
            options = options.merged(**changes)
        self.options = options
        self._aliases: dict[str, AliasFunc] = {**default_aliases(), **options.aliases}

    @property
    def clock(self) -> Clock:
        return self.options.clock or get_default_clock()

    @property
    def aliases(self) -> dict[str, AliasFunc]:
        return dict(self._aliases)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, layout: str, value: str) -> Resolution:
        """Resolve *value* to a point in time.

        An empty *layout* tries every configured layout; a non-empty one is
        strict and any mismatch raises ParseError.

        Raises:
            ParseError: nothing matched.
            MisconfigurationError: numeric input with no epoch mode and no layouts.
        """
        epoch_units = self.options.epoch_units
        is_numeric = _NUMERIC.fullmatch(value) is not None

        if not layout and is_numeric:
            if epoch_units:
                return self._resolve_epoch(value, epoch_units)
            if not self.options.layouts:
                raise MisconfigurationError(
                    f"numeric value {value!r} but no epoch mode and no layouts configured"
                )

        strict = bool(layout)
        layouts = (layout,) if strict else self.options.layouts
        for candidate in layouts:
            resolved = self._resolve_layout(candidate, value, strict)
            if resolved is not None:
                return resolved

        if self.options.accept_aliases and value in self._aliases:
            moment = self._aliases[value](self.clock.now())
            if moment.tzinfo is None:
                moment = moment.replace(tzinfo=timezone.utc)
            return Resolution(time=moment, source=f"alias:{value}")

        raise ParseError(f"unable to parse time from {value!r}", value=value, layout=layout or None)

    def _resolve_layout(self, layout: str, value: str, strict: bool) -> Resolution | None:
        descriptor = analyze_layout(layout)
        if descriptor is None:
            if strict:
                raise ParseError(f"unrecognized layout {layout!r}", value=value, layout=layout)
            logger.debug("Skipping unrecognized layout %r", layout)
            return None

        try:
            if descriptor.pattern_kind == PatternKind.EPOCH_TEMPLATE:
                digits, unit = extract_epoch_digits(layout, value)
                moment = epoch_to_datetime(digits, unit)
            else:
                moment = parse_with_layout(layout, value)
        except ParseError:
            if strict:
                raise
            return None

        return Resolution(time=moment, source=f"layout:{layout}")

    def _resolve_epoch(self, value: str, units: tuple[TimeUnit, ...]) -> Resolution:
        if len(value.lstrip("+-")) > MAX_EPOCH_DIGITS:
            raise ParseError(f"{value!r} has too many digits for an epoch timestamp", value=value)

        digits = int(value)
        candidates: list[datetime] = []
        for unit in units:
            try:
                moment = epoch_to_datetime(digits, unit)
            except ParseError:
                continue
            if PLAUSIBLE_MIN <= moment <= PLAUSIBLE_MAX:
                candidates.append(moment)

        if not candidates:
            raise ParseError(f"{value!r} is not a plausible epoch timestamp", value=value)

        ambiguous = len(candidates) > 1
        if ambiguous:
            logger.debug("Ambiguous epoch %s: %d plausible candidates", value, len(candidates))
        return Resolution(
            time=candidates[0],
            source="epoch",
            ambiguous=ambiguous,
            candidates=tuple(candidates),
        )

    # ------------------------------------------------------------------
    # Shortcuts
    # ------------------------------------------------------------------

    def parse(self, layout: str, value: str) -> datetime:
        return self.resolve(layout, value).time

    def just_parse(self, value: str) -> datetime:
        """Parse with every configured layout (shortcut for parse("", value))."""
        return self.parse("", value)

    def parse_raw(self, value: Any) -> datetime | None:
        """Convert an arbitrary value to a datetime.

        - None gives None.
        - datetime is returned as is; a date becomes midnight UTC.
        - str is parsed with just_parse.
        - int is stringified and parsed (so it goes through the epoch path).

        Raises:
            TypeError: for any other type.
        """
        if value is None:
            return None
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
        if isinstance(value, str):
            return self.just_parse(value)
        if isinstance(value, int) and not isinstance(value, bool):
            return self.just_parse(str(value))
        raise TypeError(f"unsupported type {type(value).__name__} for parse_raw")


def default_parser() -> TimeParser:
    """Build a parser from the current process-wide defaults."""
    return TimeParser()


def parse(layout: str, value: str) -> datetime:
    return default_parser().parse(layout, value)


def just_parse(value: str) -> datetime:
    return default_parser().just_parse(value)


def parse_raw(value: Any) -> datetime | None:
    return default_parser().parse_raw(value)
