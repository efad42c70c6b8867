from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from enum import StrEnum
from typing import Any, Iterable, List

from pydantic import BaseModel, Field

from years.components.layout import analyze_layout
from years.components.parser import Resolution, TimeParser
from years.components.units import TimeUnit
from years.exceptions import YearsError

logger = logging.getLogger(__name__)


class WaypointKind(StrEnum):
    HIERARCHY = "hierarchy"
    METADATA = "metadata"
    LABEL = "label"
    GROUP = "group"


class Waypoint(ABC):
    """A node of a time-ordered tree.

    Subclasses must report an identifier, a time (None for non-calendar
    nodes), whether they contain other waypoints, and their children.
    """

    kind: WaypointKind

    @abstractmethod
    def identifier(self) -> str:
        """Identity of the node, e.g. a file path or a label."""
        ...

    @abstractmethod
    def time(self) -> datetime | None:
        """Resolved time, or None when the node is not calendar-bearing."""
        ...

    @abstractmethod
    def is_container(self) -> bool:
        ...

    @abstractmethod
    def children(self) -> list[Waypoint]:
        ...

    @property
    def name(self) -> str:
        return self.identifier()

    @property
    def unit(self) -> TimeUnit | None:
        return None

    def is_calendar(self) -> bool:
        return self.time() is not None

    def __repr__(self) -> str:
        moment = self.time()
        return f"{type(self).__name__}({self.identifier()!r}, {moment.isoformat() if moment else None})"


class WaypointRecord(BaseModel):
    """Serializable snapshot of one waypoint."""

    identifier: str
    name: str
    kind: WaypointKind
    time: datetime | None = None
    unit: str | None = None
    is_container: bool = False
    depth: int = 0
    parent: str | None = None
    children: List[str] = Field(default_factory=list)


class LabelNode(Waypoint):
    """Standalone label whose time is parsed from the label itself."""

    kind = WaypointKind.LABEL

    def __init__(self, label: str, layout: str = "", parser: TimeParser | None = None) -> None:
        self.label = label
        self.layout = layout
        self.resolution: Resolution | None = None

        parser = parser if parser is not None else TimeParser()
        try:
            self.resolution = parser.resolve(layout, label)
        except YearsError as exc:
            logger.debug("Label %r is not a calendar value: %s", label, exc)

    def identifier(self) -> str:
        return self.label

    def time(self) -> datetime | None:
        return self.resolution.time if self.resolution else None

    def is_container(self) -> bool:
        return False

    def children(self) -> list[Waypoint]:
        return []

    @property
    def unit(self) -> TimeUnit | None:
        if self.resolution is None or not self.resolution.source.startswith("layout:"):
            return None
        descriptor = analyze_layout(self.resolution.source.removeprefix("layout:"))
        return descriptor.minimal_unit if descriptor else None


class GroupNode(Waypoint):
    """Container without a time of its own; keeps children in the given order."""

    kind = WaypointKind.GROUP

    def __init__(self, identifier: str, *children: Waypoint) -> None:
        self._identifier = identifier
        self._children: list[Waypoint] = []
        seen: set[int] = set()
        for child in children:
            if id(child) in seen:
                continue
            seen.add(id(child))
            self._children.append(child)

    def identifier(self) -> str:
        return self._identifier

    def time(self) -> datetime | None:
        return None

    def is_container(self) -> bool:
        return True

    def children(self) -> list[Waypoint]:
        return list(self._children)


def waypoints_from_strings(
    values: Iterable[str], layout: str = "", parser: TimeParser | None = None
) -> list[Waypoint]:
    """Wrap each string in a LabelNode, sharing one parser."""
    parser = parser if parser is not None else TimeParser()
    return [LabelNode(v, layout, parser) for v in values]


def group_from_strings(
    values: Iterable[str],
    layout: str = "",
    parser: TimeParser | None = None,
    identifier: str = "",
) -> GroupNode:
    return GroupNode(identifier, *waypoints_from_strings(values, layout, parser))


def all_children(waypoint: Waypoint) -> list[Waypoint]:
    """Return every descendant of *waypoint*, depth first, parents before children."""
    result: list[Waypoint] = []
    if waypoint.is_container():
        for child in waypoint.children():
            result.append(child)
            result.extend(all_children(child))
    return result


def to_record(waypoint: Waypoint, parent: Waypoint | None = None, depth: int = 0) -> WaypointRecord:
    unit = waypoint.unit
    return WaypointRecord(
        identifier=waypoint.identifier(),
        name=waypoint.name,
        kind=waypoint.kind,
        time=waypoint.time(),
        unit=str(unit) if unit is not None else None,
        is_container=waypoint.is_container(),
        depth=depth,
        parent=parent.identifier() if parent is not None else None,
        children=[c.identifier() for c in waypoint.children()],
    )


def flatten_records(root: Waypoint) -> list[WaypointRecord]:
    """Records for *root* and all descendants, depth first."""
    records: list[WaypointRecord] = []

    def _walk(current: Waypoint, parent: Waypoint | None, depth: int) -> None:
        records.append(to_record(current, parent, depth))
        for child in current.children():
            _walk(child, current, depth + 1)

    _walk(root, None, 0)
    return records


def to_tree(waypoint: Waypoint) -> dict[str, Any]:
    """Nested JSON-ready representation of the subtree under *waypoint*."""
    data = to_record(waypoint).model_dump(mode="json", exclude={"children", "depth", "parent"})
    data["children"] = [to_tree(c) for c in waypoint.children()]
    return data
