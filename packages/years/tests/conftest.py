import os
from datetime import datetime, timezone

import pytest

from years.components.aliases import reset_aliases
from years.components.clock import FixedClock, reset_default_clock, set_default_clock
from years.components.parser import reset_parser_defaults

FIXTURES = os.path.join(os.path.dirname(__file__), "fixtures")

# a Wednesday
WEDNESDAY = datetime(2025, 5, 7, 15, 30, 45, 123456, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _restore_process_defaults():
    """Undo changes tests make to the process-wide parser, alias and clock state."""
    yield
    reset_parser_defaults()
    reset_aliases()
    reset_default_clock()


@pytest.fixture()
def fixed_clock() -> FixedClock:
    return FixedClock(WEDNESDAY)


@pytest.fixture()
def frozen_now(fixed_clock: FixedClock) -> FixedClock:
    """Install the fixed clock as the process-wide default."""
    set_default_clock(fixed_clock)
    return fixed_clock
