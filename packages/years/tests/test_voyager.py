"""
pytest suite for Voyager traversal and lookup.
"""

import logging
import os
from datetime import datetime, timezone

import pytest

from years.components.clock import FixedClock, set_default_clock
from years.components.parser import ParserOptions, TimeParser
from years.components.provider import MemoryProvider
from years.components.voyager import Direction, NodesMode, TraverseOptions, Voyager
from years.exceptions import ParseError

FIXTURES = os.path.join(os.path.dirname(__file__), "fixtures")
UTC = timezone.utc


def names(waypoints) -> list[str]:
    return [w.name for w in waypoints]


# ---------------------------------------------------------------------------
# calendar/
# └── 2024/
#     ├── Feb/
#     │   └── 2024-02-01.txt
#     └── Mar/
#         ├── 2024-03-05.txt
#         ├── 2024-03-06.txt
#         └── notes.md
# ---------------------------------------------------------------------------

class TestTraverse:
    ROOT = os.path.join(FIXTURES, "calendar")

    def setup_method(self):
        self.voyager = Voyager.from_hierarchy(self.ROOT, "2006/Jan/2006-01-02.txt")

    def test_future_leaves(self):
        found = self.voyager.waypoints(direction="future", nodes="leaves")
        assert names(found) == ["2024-02-01.txt", "2024-03-05.txt", "2024-03-06.txt"]

    def test_past_leaves(self):
        found = self.voyager.waypoints(direction=Direction.PAST, nodes=NodesMode.LEAVES)
        assert names(found) == ["2024-03-06.txt", "2024-03-05.txt", "2024-02-01.txt"]

    def test_default_is_past_all(self):
        assert names(self.voyager.waypoints()) == [
            "2024-03-06.txt",
            "2024-03-05.txt",
            "Mar",
            "2024-02-01.txt",
            "Feb",
            "2024",
        ]

    def test_future_containers(self):
        found = self.voyager.waypoints(direction="future", nodes="containers")
        assert names(found) == ["2024", "Feb", "Mar"]

    def test_containers_precede_descendants_going_forward(self):
        found = self.voyager.waypoints(direction="future")
        assert names(found) == ["2024", "Feb", "2024-02-01.txt", "Mar", "2024-03-05.txt", "2024-03-06.txt"]

    def test_include_non_calendar(self):
        found = self.voyager.waypoints(direction="future", include_non_calendar=True)
        # non-calendar nodes take their ancestor's place in the order
        assert names(found) == [
            "calendar",
            "2024",
            "Feb",
            "2024-02-01.txt",
            "Mar",
            "notes.md",
            "2024-03-05.txt",
            "2024-03-06.txt",
        ]

    def test_past_is_exact_reverse_of_future(self):
        options = TraverseOptions(direction=Direction.FUTURE, include_non_calendar=True)
        future = self.voyager.waypoints(options)
        past = self.voyager.waypoints(options, direction="past")
        assert past == list(reversed(future))

    def test_traverse_callback(self):
        seen = []
        self.voyager.traverse(lambda w: seen.append(w.time()), direction="future", nodes="leaves")
        assert seen == sorted(seen)
        assert len(seen) == 3

    def test_invalid_direction(self):
        with pytest.raises(ValueError):
            self.voyager.traverse(print, direction="sideways")

    def test_invalid_nodes_mode(self):
        with pytest.raises(ValueError):
            self.voyager.waypoints(nodes="branches")


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

class TestNavigate:
    ROOT = os.path.join(FIXTURES, "calendar")

    def setup_method(self):
        self.voyager = Voyager.from_hierarchy(self.ROOT, "2006/Jan/2006-01-02.txt")

    def test_navigate_to_date(self):
        found = self.voyager.navigate("2024-03-06")
        assert found.name == "2024-03-06.txt"

    def test_navigate_prefers_oldest_first_order(self):
        # Feb and its first day share an instant; the container comes first
        assert self.voyager.navigate("2024-02-01").name == "Feb"

    def test_navigate_to_month(self):
        assert self.voyager.navigate("2024-03").name == "Mar"

    def test_navigate_to_alias(self):
        set_default_clock(FixedClock(datetime(2024, 3, 5, 17, 42, tzinfo=UTC)))
        voyager = Voyager.from_hierarchy(self.ROOT, "2006/Jan/2006-01-02.txt")
        assert voyager.navigate("today").name == "2024-03-05.txt"
        assert voyager.navigate("tomorrow").name == "2024-03-06.txt"

    def test_navigate_with_own_parser_clock(self):
        parser = TimeParser(ParserOptions(accept_aliases=True, clock=FixedClock(datetime(2024, 3, 6, tzinfo=UTC))))
        voyager = Voyager(self.voyager.root, parser)
        assert voyager.navigate("yesterday").name == "2024-03-05.txt"

    def test_navigate_miss(self):
        assert self.voyager.navigate("1999-01-01") is None

    def test_navigate_unparseable(self):
        with pytest.raises(ParseError):
            self.voyager.navigate("whenever")

    def test_find(self):
        assert names(self.voyager.find("2024-02-01")) == ["Feb", "2024-02-01.txt"]
        assert self.voyager.find("1999-01-01") == []


# ---------------------------------------------------------------------------
# Other roots
# ---------------------------------------------------------------------------

class TestOtherRoots:
    def test_from_strings(self):
        voyager = Voyager.from_strings(["2024-03-06", "2024-03-05", "not a date"])
        assert names(voyager.waypoints(direction="future", nodes="leaves")) == ["2024-03-05", "2024-03-06"]
        assert names(voyager.waypoints(direction="future", nodes="leaves", include_non_calendar=True)) == [
            "not a date",
            "2024-03-05",
            "2024-03-06",
        ]

    def test_from_strings_with_layout(self):
        voyager = Voyager.from_strings(["05.03.2024", "06.03.2024"], layout="02.01.2006")
        assert voyager.navigate("2024-03-05").name == "05.03.2024"

    def test_ambiguous_query_is_logged(self, caplog):
        parser = TimeParser(ParserOptions(accept_epoch_seconds=True, accept_epoch_millis=True))
        voyager = Voyager.from_strings(["1709682885"], parser=parser)
        with caplog.at_level(logging.INFO, logger="years.components.voyager"):
            found = voyager.navigate("1709682885")
        assert found.time() == datetime(2024, 3, 5, 23, 54, 45, tzinfo=UTC)
        assert "ambiguous" in caplog.text

    def test_from_metadata(self):
        provider = MemoryProvider(
            ["docs/a.txt", "docs/b.txt"],
            metadata={
                "docs/a.txt": {"modified": datetime(2024, 6, 1, tzinfo=UTC)},
                "docs/b.txt": {"modified": datetime(2024, 1, 1, tzinfo=UTC)},
            },
        )
        voyager = Voyager.from_metadata("docs", provider=provider)
        assert names(voyager.waypoints(nodes="leaves")) == ["a.txt", "b.txt"]
        assert voyager.navigate("2024-01-01").name == "b.txt"

    def test_epoch_hierarchy(self):
        voyager = Voyager.from_hierarchy(os.path.join(FIXTURES, "epoch", "2024"), "2006/U@000.log")
        newest = voyager.waypoints(nodes="leaves")[0]
        assert newest.name == "1709682885000.log"
        assert voyager.navigate("1709682885").name == "1709682885000.log"


class TestNaiveClock:
    def setup_method(self):
        set_default_clock(FixedClock(datetime(2024, 3, 5, 15, 30, 45)))

    def test_alias_labels_sort_with_dated_labels(self):
        voyager = Voyager.from_strings(["today", "2024-03-06", "2024-03-04"])
        assert names(voyager.waypoints(direction="future")) == ["2024-03-04", "today", "2024-03-06"]

    def test_navigate_today(self):
        voyager = Voyager.from_strings(["2024-03-05"])
        assert voyager.navigate("today").name == "2024-03-05"
