from enum import IntEnum, StrEnum

from pydantic import BaseModel, ConfigDict, model_validator


class TimeUnit(IntEnum):
    """Calendar unit encoded by a layout. Smaller values are more specific."""

    DAY = 1
    WEEK = 2  # reserved, never produced
    MONTH = 4
    QUARTER = 8  # reserved, never produced
    YEAR = 16

    EPOCH_SECOND = 32
    EPOCH_MILLISECOND = 64
    EPOCH_MICROSECOND = 128
    EPOCH_NANOSECOND = 256

    @property
    def is_epoch(self) -> bool:
        return self >= TimeUnit.EPOCH_SECOND

    def __str__(self) -> str:
        return self.name.lower()


CALENDAR_UNITS = (TimeUnit.DAY, TimeUnit.MONTH, TimeUnit.YEAR)

EPOCH_UNITS = (
    TimeUnit.EPOCH_SECOND,
    TimeUnit.EPOCH_MILLISECOND,
    TimeUnit.EPOCH_MICROSECOND,
    TimeUnit.EPOCH_NANOSECOND,
)


class PatternKind(StrEnum):
    CALENDAR = "calendar"
    EPOCH_TEMPLATE = "epoch_template"
    UNDEFINED = "undefined"


class LayoutDescriptor(BaseModel):
    """Structural description of a single layout fragment.

    e.g. "2006-01-02" -> units {DAY, MONTH, YEAR}, minimal unit DAY.
    """

    model_config = ConfigDict(frozen=True)

    units: frozenset[TimeUnit] = frozenset()
    minimal_unit: TimeUnit | None = None
    pattern_kind: PatternKind = PatternKind.UNDEFINED

    @model_validator(mode="after")
    def _check_consistency(self) -> "LayoutDescriptor":
        if bool(self.units) != (self.minimal_unit is not None):
            raise ValueError("minimal_unit must be set exactly when units is non-empty")
        if self.minimal_unit is not None and self.minimal_unit not in self.units:
            raise ValueError("minimal_unit must be one of units")
        if self.pattern_kind == PatternKind.EPOCH_TEMPLATE:
            if len(self.units) != 1 or not self.minimal_unit.is_epoch:
                raise ValueError("epoch templates carry exactly one epoch unit")
        return self

    def has_unit(self, unit: TimeUnit) -> bool:
        return unit in self.units

    @property
    def is_calendar(self) -> bool:
        return self.pattern_kind == PatternKind.CALENDAR

    @property
    def is_epoch_template(self) -> bool:
        return self.pattern_kind == PatternKind.EPOCH_TEMPLATE
