from typing import Any

from fastapi import APIRouter, HTTPException, Query

from years import Direction, NodesMode, WaypointRecord, YearsError
from years_api.dependencies import VoyagerDep
from years_api.services import waypoints as waypoints_service

router = APIRouter(prefix="/waypoints", tags=["waypoints"])


# ── Routes ────────────────────────────────────────────────────────────────────

@router.get("", response_model=list[WaypointRecord])
async def list_waypoints(
    voyager: VoyagerDep,
    direction: Direction = Direction.PAST,
    nodes: NodesMode = NodesMode.ALL,
    non_calendar: bool = False,
) -> list[WaypointRecord]:
    """Walk the tree in time order."""
    return await waypoints_service.traverse(voyager, direction, nodes, non_calendar)


@router.get("/navigate", response_model=WaypointRecord)
async def navigate(voyager: VoyagerDep, to: str = Query(..., description="Date, epoch or alias")) -> WaypointRecord:
    """Return the first waypoint exactly at the given time."""
    try:
        found = await waypoints_service.navigate(voyager, to)
    except YearsError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    if found is None:
        raise HTTPException(status_code=404, detail=f"No waypoint at {to}")
    return found


@router.get("/find", response_model=list[WaypointRecord])
async def find(voyager: VoyagerDep, at: str = Query(..., description="Date, epoch or alias")) -> list[WaypointRecord]:
    """Return every waypoint exactly at the given time."""
    try:
        return await waypoints_service.find(voyager, at)
    except YearsError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/tree", response_model=dict[str, Any])
async def tree(voyager: VoyagerDep) -> dict[str, Any]:
    """Return the nested tree."""
    return await waypoints_service.tree(voyager)
