import bisect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from years.components.layout import (
    EARLIEST,
    analyze_layout,
    epoch_to_datetime,
    extract_epoch_digits,
    parse_fields,
    split_layout,
)
from years.components.node import Waypoint, WaypointKind
from years.components.provider import EntryStat, FileSystemProvider, HierarchyProvider
from years.components.units import LayoutDescriptor, TimeUnit
from years.exceptions import ParseError, YearsError

logger = logging.getLogger(__name__)

MetadataAccessor = Callable[[EntryStat], Optional[datetime]]


@dataclass(frozen=True)
class AncestorContext:
    """Calendar units already resolved by ancestors, handed down the recursion."""

    year: int | None = None
    month: int | None = None


class EntryNode(Waypoint):
    """Fields shared by nodes that mirror one entry of a hierarchy."""

    def __init__(self, locator: str, name: str, is_container: bool, time: datetime | None = None) -> None:
        self.locator = locator
        self._name = name
        self._is_container = is_container
        self._time = time
        self._children: list[Waypoint] = []

    def identifier(self) -> str:
        return self.locator

    def time(self) -> datetime | None:
        return self._time

    def is_container(self) -> bool:
        return self._is_container

    def children(self) -> list[Waypoint]:
        return list(self._children)

    @property
    def name(self) -> str:
        return self._name


class HierarchyNode(EntryNode):
    """Entry whose time is parsed from its own name plus its ancestors' units."""

    kind = WaypointKind.HIERARCHY

    def __init__(self, locator: str, name: str, is_container: bool) -> None:
        super().__init__(locator, name, is_container)
        # own layout segment, set only when the name parsed
        self.layout = ""
        self._unit: TimeUnit | None = None

    @property
    def unit(self) -> TimeUnit | None:
        return self._unit


class MetadataNode(EntryNode):
    """Entry whose time comes from provider metadata (e.g. modification time)."""

    kind = WaypointKind.METADATA


def _order_key(waypoint: Waypoint) -> tuple[bool, datetime]:
    moment = waypoint.time()
    return (moment is not None, moment if moment is not None else EARLIEST)


def insert_ordered(children: list[Waypoint], child: Waypoint) -> None:
    """Insert *child* keeping *children* ascending by time.

    Equal times keep insertion order; non-calendar nodes sort first.
    """
    bisect.insort_right(children, child, key=_order_key)


# ---------------------------------------------------------------------------
# Hierarchy (time parsed from names)
# ---------------------------------------------------------------------------


def build_hierarchy(root: str, layout: str, provider: HierarchyProvider | None = None) -> HierarchyNode:
    """
    Recursively walk *root* and build a time-ordered tree of HierarchyNodes.

    *layout* holds one segment per nesting level, e.g. ``"2006/Jan/2006-01-02.txt"``.
    A level whose name does not match its segment becomes a non-calendar node
    and does not consume the segment, so its members are matched against the
    same remaining layout.

    Args:
        root:     Locator of the root entry (a directory path for the file system).
        layout:   Multi-level layout.
        provider: Hierarchy source; defaults to the local file system.

    Returns:
        The root node.

    Raises:
        OSError: if the root itself cannot be read.
    """
    provider = provider if provider is not None else FileSystemProvider()
    return _build_hierarchy_node(provider, root, split_layout(layout), AncestorContext())


def _build_hierarchy_node(
    provider: HierarchyProvider,
    locator: str,
    segments: list[str],
    context: AncestorContext,
) -> HierarchyNode:
    entry = provider.stat(locator)
    node = HierarchyNode(locator, entry.name, entry.is_container)

    segment = segments[0] if segments else ""
    resolved = _resolve_segment(segment, entry.name, context)

    remaining, child_context = segments, context
    if resolved is None:
        logger.debug("Non-calendar entry %s (layout segment %r)", locator, segment)
    else:
        moment, descriptor = resolved
        node._time = moment
        node._unit = descriptor.minimal_unit
        node.layout = segment
        remaining = segments[1:]
        child_context = _context_for_children(moment, descriptor, context)

    if entry.is_container:
        for child_locator in provider.list_children(locator):
            try:
                child = _build_hierarchy_node(provider, child_locator, remaining, child_context)
            except (OSError, YearsError) as exc:
                logger.warning("Skipping %s: %s", child_locator, exc)
                continue
            insert_ordered(node._children, child)

    return node


def _resolve_segment(
    segment: str, name: str, context: AncestorContext
) -> tuple[datetime, LayoutDescriptor] | None:
    descriptor = analyze_layout(segment) if segment else None
    if descriptor is None:
        return None

    try:
        if descriptor.is_epoch_template:
            digits, unit = extract_epoch_digits(segment, name)
            return epoch_to_datetime(digits, unit), descriptor

        fields = parse_fields(segment, name)
        minimal = descriptor.minimal_unit
        year = context.year if not descriptor.has_unit(TimeUnit.YEAR) and minimal < TimeUnit.YEAR else None
        month = context.month if not descriptor.has_unit(TimeUnit.MONTH) and minimal < TimeUnit.MONTH else None
        return fields.to_datetime(year=year, month=month), descriptor
    except ParseError as exc:
        logger.debug("Name %r does not match %r: %s", name, segment, exc)
        return None


def _context_for_children(
    moment: datetime, descriptor: LayoutDescriptor, context: AncestorContext
) -> AncestorContext:
    if descriptor.is_epoch_template:
        return AncestorContext(year=moment.year, month=moment.month)

    year_known = descriptor.has_unit(TimeUnit.YEAR) or context.year is not None
    month_known = descriptor.has_unit(TimeUnit.MONTH) or (
        descriptor.minimal_unit < TimeUnit.MONTH and context.month is not None
    )
    return AncestorContext(
        year=moment.year if year_known else context.year,
        month=moment.month if month_known else context.month,
    )


# ---------------------------------------------------------------------------
# Metadata (time read from the provider)
# ---------------------------------------------------------------------------


def metadata_accessor(key: str) -> MetadataAccessor:
    """Accessor reading one named metadata timestamp (e.g. ``"modified"``)."""

    def _access(entry: EntryStat) -> datetime | None:
        return entry.metadata.get(key)

    return _access


def build_metadata_tree(
    root: str,
    accessor: str | MetadataAccessor = "modified",
    provider: HierarchyProvider | None = None,
) -> MetadataNode:
    """Build a time-ordered tree of MetadataNodes mirroring *root*.

    Raises:
        OSError: if the root itself cannot be read.
    """
    provider = provider if provider is not None else FileSystemProvider()
    access = metadata_accessor(accessor) if isinstance(accessor, str) else accessor
    return _build_metadata_node(provider, root, access)


def _build_metadata_node(provider: HierarchyProvider, locator: str, access: MetadataAccessor) -> MetadataNode:
    entry = provider.stat(locator)
    node = MetadataNode(locator, entry.name, entry.is_container, time=access(entry))

    if entry.is_container:
        for child_locator in provider.list_children(locator):
            try:
                child = _build_metadata_node(provider, child_locator, access)
            except OSError as exc:
                logger.warning("Skipping %s: %s", child_locator, exc)
                continue
            insert_ordered(node._children, child)

    return node
