"""Scenario library API routes."""

from pydantic import BaseModel
from fastapi import APIRouter

from ...app import Application


class ScenarioResponse(BaseModel):
    """Response model for a library scenario."""

    id: str
    category: str
    summary: str


def create_scenarios_router(app: Application) -> APIRouter:
    """Create scenarios router."""
    router = APIRouter(prefix="/api", tags=["scenarios"])

    @router.get("/scenarios", response_model=list[ScenarioResponse])
    async def get_scenarios() -> list[dict]:
        """List the scenarios that can be opened by id."""
        return [
            {"id": s.id, "category": s.category, "summary": s.summary}
            for s in app.scenarios()
        ]

    return router
