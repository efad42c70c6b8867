"""
years - locate and order entities that are timestamped by their place in a hierarchy.

A directory tree such as ``2024/Mar/2024-03-05.txt`` (or a flat list of
date-like strings) becomes a tree of waypoints with calendar-complete times,
which a Voyager walks in chronological order or searches by time.

Usage (library):
    from years import Voyager
    voyager = Voyager.from_hierarchy("archive", "2006/Jan/2006-01-02.txt")
    for waypoint in voyager.waypoints(direction="future", nodes="leaves"):
        print(waypoint.identifier(), waypoint.time())
"""

from years.components.aliases import CORE_ALIASES, register_alias, unregister_alias
from years.components.clock import (
    Clock,
    FixedClock,
    SystemClock,
    get_default_clock,
    set_default_clock,
)
from years.components.layout import analyze_layout, format_with_layout, parse_with_layout
from years.components.node import (
    GroupNode,
    LabelNode,
    Waypoint,
    WaypointKind,
    WaypointRecord,
    all_children,
    group_from_strings,
    waypoints_from_strings,
)
from years.components.parser import (
    ParserOptions,
    Resolution,
    TimeParser,
    default_parser,
    extend_parser_defaults,
    get_parser_defaults,
    just_parse,
    parse,
    parse_raw,
    reset_parser_defaults,
    set_parser_defaults,
)
from years.components.provider import EntryStat, FileSystemProvider, HierarchyProvider, MemoryProvider
from years.components.scanner import (
    HierarchyNode,
    MetadataNode,
    build_hierarchy,
    build_metadata_tree,
)
from years.components.units import LayoutDescriptor, PatternKind, TimeUnit
from years.components.voyager import Direction, NodesMode, TraverseOptions, Voyager
from years.exceptions import MisconfigurationError, ParseError, YearsError

__all__ = [
    "CORE_ALIASES",
    "Clock",
    "Direction",
    "EntryStat",
    "FileSystemProvider",
    "FixedClock",
    "GroupNode",
    "HierarchyNode",
    "HierarchyProvider",
    "LabelNode",
    "LayoutDescriptor",
    "MemoryProvider",
    "MetadataNode",
    "MisconfigurationError",
    "NodesMode",
    "ParseError",
    "ParserOptions",
    "PatternKind",
    "Resolution",
    "SystemClock",
    "TimeParser",
    "TimeUnit",
    "TraverseOptions",
    "Voyager",
    "Waypoint",
    "WaypointKind",
    "WaypointRecord",
    "YearsError",
    "all_children",
    "analyze_layout",
    "build_hierarchy",
    "build_metadata_tree",
    "default_parser",
    "extend_parser_defaults",
    "format_with_layout",
    "get_default_clock",
    "get_parser_defaults",
    "group_from_strings",
    "just_parse",
    "parse",
    "parse_raw",
    "parse_with_layout",
    "register_alias",
    "reset_parser_defaults",
    "set_default_clock",
    "set_parser_defaults",
    "unregister_alias",
    "waypoints_from_strings",
]
