from typing import Any

from years import Direction, NodesMode, Voyager, WaypointRecord
from years.components.node import all_children, to_record, to_tree


async def count(voyager: Voyager) -> int:
    return 1 + len(all_children(voyager.root))


async def traverse(
    voyager: Voyager,
    direction: Direction,
    nodes: NodesMode,
    include_non_calendar: bool,
) -> list[WaypointRecord]:
    found = voyager.waypoints(
        direction=direction,
        nodes=nodes,
        include_non_calendar=include_non_calendar,
    )
    return [to_record(w) for w in found]


async def navigate(voyager: Voyager, query: str) -> WaypointRecord | None:
    found = voyager.navigate(query)
    return to_record(found) if found is not None else None


async def find(voyager: Voyager, query: str) -> list[WaypointRecord]:
    return [to_record(w) for w in voyager.find(query)]


async def tree(voyager: Voyager) -> dict[str, Any]:
    return to_tree(voyager.root)
