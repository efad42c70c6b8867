from fastapi import APIRouter
from pydantic import BaseModel

from years_api.dependencies import VoyagerDep
from years_api.services import waypoints as waypoints_service


router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    status: str
    waypoints: int


@router.get("", response_model=HealthResponse)
async def health_check(voyager: VoyagerDep) -> HealthResponse:
    """Return API liveness and the size of the loaded tree."""
    return HealthResponse(status="ok", waypoints=await waypoints_service.count(voyager))
