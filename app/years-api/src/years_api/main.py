import uvicorn
from fastapi import FastAPI

from years_api.config import settings
from years_api.routers import health, waypoints


app = FastAPI(
    title="years API",
    description="REST interface for walking and searching a time-ordered waypoint tree.",
    version="0.1.0",
)

app.include_router(health.router)
app.include_router(waypoints.router, prefix="/api/v1")


@app.get("/", tags=["root"])
def root() -> dict[str, str]:
    return {"message": "years API", "docs": "/docs"}


def start() -> None:
    """CLI entrypoint used by the `years-api` script."""
    uvicorn.run(
        "years_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )


if __name__ == "__main__":
    start()
