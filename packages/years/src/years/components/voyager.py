"""
Voyager - ordered traversal and time lookup over a waypoint tree.

The tree is read-only once handed to a Voyager, so several traversals (or
several voyagers sharing a root) may run concurrently.

Usage (library):
    voyager = Voyager.from_hierarchy("archive", "2006/Jan/2006-01-02.txt")
    voyager.traverse(print, direction="future", nodes="leaves")
    voyager.navigate("yesterday")
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

from years.components.layout import EARLIEST
from years.components.node import Waypoint, group_from_strings
from years.components.parser import TimeParser, get_parser_defaults
from years.components.provider import HierarchyProvider
from years.components.scanner import MetadataAccessor, build_hierarchy, build_metadata_tree

logger = logging.getLogger(__name__)

# layouts a voyager understands in navigation queries when given no parser
NAVIGATION_LAYOUTS = (
    "2006-01-02",
    "2006-01-02T15:04:05Z07:00",
    "2006-01-02 15:04:05",
    "2006-01",
)


class Direction(StrEnum):
    PAST = "past"
    FUTURE = "future"


class NodesMode(StrEnum):
    LEAVES = "leaves"
    CONTAINERS = "containers"
    ALL = "all"


class TraverseOptions(BaseModel):
    """Traversal settings; the default walks from the newest node to the oldest."""

    model_config = ConfigDict(frozen=True)

    direction: Direction = Direction.PAST
    nodes: NodesMode = NodesMode.ALL
    include_non_calendar: bool = False

    def accepts(self, waypoint: Waypoint) -> bool:
        if waypoint.time() is None and not self.include_non_calendar:
            return False
        if self.nodes == NodesMode.ALL:
            return True
        if self.nodes == NodesMode.LEAVES:
            return not waypoint.is_container()
        return waypoint.is_container()


def navigation_parser() -> TimeParser:
    """Parser built from the current defaults plus NAVIGATION_LAYOUTS."""
    return TimeParser(get_parser_defaults().with_layouts(*NAVIGATION_LAYOUTS))


class Voyager:
    def __init__(self, root: Waypoint, parser: TimeParser | None = None) -> None:
        self._root = root
        self.parser = parser if parser is not None else navigation_parser()

    @property
    def root(self) -> Waypoint:
        return self._root

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_hierarchy(
        cls,
        root: str,
        layout: str,
        provider: HierarchyProvider | None = None,
        parser: TimeParser | None = None,
    ) -> "Voyager":
        return cls(build_hierarchy(root, layout, provider), parser)

    @classmethod
    def from_metadata(
        cls,
        root: str,
        accessor: str | MetadataAccessor = "modified",
        provider: HierarchyProvider | None = None,
        parser: TimeParser | None = None,
    ) -> "Voyager":
        return cls(build_metadata_tree(root, accessor, provider), parser)

    @classmethod
    def from_strings(
        cls,
        values: Iterable[str],
        layout: str = "",
        parser: TimeParser | None = None,
    ) -> "Voyager":
        """Voyager over a group of labels, parsed with the same parser used for queries."""
        parser = parser if parser is not None else navigation_parser()
        return cls(group_from_strings(values, layout, parser), parser)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _ordered(self, direction: Direction) -> list[Waypoint]:
        # pre-order walk; a non-calendar node borrows its ancestor's time for ordering
        entries: list[tuple[datetime, Waypoint]] = []

        def _walk(waypoint: Waypoint, inherited: datetime) -> None:
            moment = waypoint.time()
            key = moment if moment is not None else inherited
            entries.append((key, waypoint))
            for child in waypoint.children():
                _walk(child, key)

        _walk(self._root, EARLIEST)
        entries.sort(key=lambda entry: entry[0])
        ordered = [waypoint for _, waypoint in entries]

        if direction == Direction.FUTURE:
            return ordered
        if direction == Direction.PAST:
            ordered.reverse()
            return ordered
        raise ValueError(f"invalid traverse direction: {direction!r}")

    @staticmethod
    def _options(options: TraverseOptions | None, overrides: dict[str, Any]) -> TraverseOptions:
        options = options if options is not None else TraverseOptions()
        if overrides:
            options = TraverseOptions.model_validate({**options.model_dump(), **overrides})
        return options

    def traverse(
        self,
        callback: Callable[[Waypoint], Any],
        options: TraverseOptions | None = None,
        **overrides: Any,
    ) -> None:
        """Call *callback* for every node passing the filter, in time order.

        Future is ascending; Past is the exact reverse, so at equal times a
        container comes before its descendants going forward and after them
        going back.

        Raises:
            ValueError: for an invalid direction or nodes mode.
        """
        options = self._options(options, overrides)
        for waypoint in self._ordered(options.direction):
            if options.accepts(waypoint):
                callback(waypoint)

    def waypoints(self, options: TraverseOptions | None = None, **overrides: Any) -> list[Waypoint]:
        """List form of traverse()."""
        found: list[Waypoint] = []
        self.traverse(found.append, options, **overrides)
        return found

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def _target(self, query: str) -> datetime:
        resolution = self.parser.resolve("", query)
        if resolution.ambiguous:
            logger.info("Query %r is ambiguous, using %s", query, resolution.time.isoformat())
        return resolution.time

    def navigate(self, query: str) -> Waypoint | None:
        """Return the first node (oldest first) whose time equals *query*'s instant.

        Raises:
            ParseError: if *query* cannot be resolved to a time.
        """
        target = self._target(query)
        for waypoint in self._ordered(Direction.FUTURE):
            if waypoint.time() == target:
                return waypoint
        return None

    def find(self, query: str) -> list[Waypoint]:
        """Return every node whose time equals *query*'s instant, oldest first."""
        target = self._target(query)
        return [w for w in self._ordered(Direction.FUTURE) if w.time() == target]
