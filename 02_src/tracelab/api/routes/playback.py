"""Playback API routes."""

from enum import Enum

from pydantic import BaseModel
from fastapi import APIRouter

from ...app import Application
from ...errors import TracelabError
from .sessions import SessionResponse, session_response
from . import http_error


class PlaybackAction(str, Enum):
    PLAY = "play"
    PAUSE = "pause"
    TOGGLE = "toggle"
    STEP_FORWARD = "step_forward"
    STEP_BACKWARD = "step_backward"
    FIRST = "first"
    LAST = "last"


class SeekRequest(BaseModel):
    """Request model for seeking. Out-of-range indices are clamped."""

    index: int


def create_playback_router(app: Application) -> APIRouter:
    """Create playback router."""
    router = APIRouter(prefix="/api/sessions", tags=["playback"])

    @router.post("/{session_id}/playback/{action}", response_model=SessionResponse)
    async def playback(session_id: str, action: PlaybackAction) -> dict:
        """Apply a playback action and return the resulting snapshot."""
        try:
            session = app.get(session_id)
        except TracelabError as e:
            raise http_error(e)

        controller = session.controller
        {
            PlaybackAction.PLAY: controller.play,
            PlaybackAction.PAUSE: controller.pause,
            PlaybackAction.TOGGLE: controller.toggle,
            PlaybackAction.STEP_FORWARD: controller.step_forward,
            PlaybackAction.STEP_BACKWARD: controller.step_backward,
            PlaybackAction.FIRST: controller.jump_to_first,
            PlaybackAction.LAST: controller.jump_to_last,
        }[action]()
        return session_response(session)

    @router.post("/{session_id}/seek", response_model=SessionResponse)
    async def seek(session_id: str, request: SeekRequest) -> dict:
        """Move to a step index."""
        try:
            session = app.get(session_id)
        except TracelabError as e:
            raise http_error(e)
        session.controller.seek(request.index)
        return session_response(session)

    return router
