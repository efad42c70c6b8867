from years.components.clock import Clock, FixedClock, SystemClock
from years.components.layout import analyze_layout, format_with_layout, parse_with_layout
from years.components.node import GroupNode, LabelNode, Waypoint, WaypointKind, WaypointRecord
from years.components.parser import ParserOptions, Resolution, TimeParser
from years.components.provider import EntryStat, FileSystemProvider, HierarchyProvider, MemoryProvider
from years.components.scanner import AncestorContext, HierarchyNode, MetadataNode
from years.components.units import LayoutDescriptor, PatternKind, TimeUnit
from years.components.voyager import Direction, NodesMode, TraverseOptions, Voyager

__all__ = [
    "AncestorContext",
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
    "NodesMode",
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
    "analyze_layout",
    "format_with_layout",
    "parse_with_layout",
]
