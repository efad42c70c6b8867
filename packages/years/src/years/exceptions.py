"""Exceptions raised by the years library.

Rules:
- Only errors that cross a layer boundary live here.
- "Layout not recognised" is never an exception: analysis returns None.
- Ambiguous epoch input is reported through Resolution.ambiguous, not raised.
"""

from __future__ import annotations


class YearsError(Exception):
    """Base class for all errors raised by the years library."""


class ParseError(YearsError, ValueError):
    """Raised when a value does not match a layout, an alias or an epoch pattern."""

    def __init__(self, message: str, value: str | None = None, layout: str | None = None) -> None:
        super().__init__(message)
        self.value = value
        self.layout = layout


class MisconfigurationError(YearsError):
    """Raised when a parser is asked to do something its options cannot support.

    E.g. numeric input given to a parser with no epoch mode and no layouts.
    """
