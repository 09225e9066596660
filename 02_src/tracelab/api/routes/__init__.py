"""API routers."""

from fastapi import HTTPException

from ...errors import (
    SessionNotFoundError,
    StructuralError,
    TracelabError,
    UnknownScenarioError,
)


def http_error(e: TracelabError) -> HTTPException:
    """Map a tracelab error to its HTTP status."""
    if isinstance(e, (SessionNotFoundError, UnknownScenarioError)):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, StructuralError):
        return HTTPException(
            status_code=422, detail={"kind": e.kind.value, "detail": e.detail}
        )
    return HTTPException(status_code=400, detail=str(e))
