"""Session API routes: open, inspect and close playback sessions."""

from typing import Any

from pydantic import BaseModel, Field
from fastapi import APIRouter

from ...app import Application, Session
from ...errors import TracelabError
from ...render import snapshot_to_dict
from . import http_error


class SelectRequest(BaseModel):
    """Request model for opening a library scenario."""

    scenario_id: str
    domain: str | None = None
    record_type: str = "A"
    mode: str | None = None
    resolver: str | None = None
    auto_advance_ms: int | None = Field(None, ge=1)


class LoadRequest(BaseModel):
    """Request model for opening a raw scenario document."""

    document: dict[str, Any]
    config: dict[str, Any] | None = None
    auto_advance_ms: int | None = Field(None, ge=1)


class SessionResponse(BaseModel):
    """Response model for a session and its current snapshot."""

    session_id: str
    scenario_id: str
    snapshot: dict[str, Any]


def session_response(session: Session) -> dict:
    controller = session.controller
    return {
        "session_id": session.id,
        "scenario_id": controller.trace.scenario_id,
        "snapshot": snapshot_to_dict(controller.current_snapshot()),
    }


def create_sessions_router(app: Application) -> APIRouter:
    """Create sessions router."""
    router = APIRouter(prefix="/api/sessions", tags=["sessions"])

    @router.post("", response_model=SessionResponse)
    async def select_scenario(request: SelectRequest) -> dict:
        """Open a library scenario."""
        try:
            session = app.select(
                request.scenario_id,
                domain=request.domain,
                record_type=request.record_type,
                mode=request.mode,
                resolver=request.resolver,
                auto_advance_ms=request.auto_advance_ms,
            )
        except TracelabError as e:
            raise http_error(e)
        return session_response(session)

    @router.post("/load", response_model=SessionResponse)
    async def load_document(request: LoadRequest) -> dict:
        """Open a scenario document. Malformed documents are rejected with 422."""
        try:
            session = app.load_document(
                request.document,
                config=request.config,
                auto_advance_ms=request.auto_advance_ms,
            )
        except TracelabError as e:
            raise http_error(e)
        return session_response(session)

    @router.get("/{session_id}/snapshot", response_model=SessionResponse)
    async def get_snapshot(session_id: str) -> dict:
        """Current snapshot of a session."""
        try:
            return session_response(app.get(session_id))
        except TracelabError as e:
            raise http_error(e)

    @router.delete("/{session_id}")
    async def close_session(session_id: str) -> dict:
        """Close a session and cancel its autoplay."""
        try:
            app.deselect(session_id)
        except TracelabError as e:
            raise http_error(e)
        return {"status": "ok"}

    return router
