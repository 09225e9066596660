"""Application bootstrap and playback session management."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Protocol

from .config import DEFAULT_AUTO_ADVANCE_MS
from .diagnostics import DiagnosticConfig
from .errors import SessionNotFoundError
from .logging_config import get_logger, trace_context
from .models import Trace
from .playback import PlaybackController
from .scenarios import DEFAULT_DOMAIN, ScenarioInfo, list_scenarios, load_scenario
from .trace import load_trace

logger = get_logger(__name__)


@dataclass
class Session:
    """One open trace and the controller playing it."""

    id: str
    controller: PlaybackController
    config: DiagnosticConfig
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Prepare the application for requests."""
        ...

    async def stop(self) -> None:
        """Dispose every open session."""
        ...

    async def reset(self) -> None:
        """Close all sessions between runs."""
        ...


class Application:
    """
    Owns the open playback sessions.

    A session is created by selecting a library scenario or by loading a
    scenario document; deselecting it disposes its controller, which cancels
    any pending autoplay timer.
    """

    def __init__(self, auto_advance_ms: int | None = None):
        self._auto_advance_ms = auto_advance_ms or DEFAULT_AUTO_ADVANCE_MS
        self._sessions: dict[str, Session] = {}
        self._started = False

    async def start(self) -> None:
        logger.info("Starting application")
        self._started = True
        logger.info("%s scenarios available", len(list_scenarios()))

    async def stop(self) -> None:
        for session_id in list(self._sessions):
            self.deselect(session_id)
        self._started = False
        logger.info("Application stopped")

    async def reset(self) -> None:
        for session_id in list(self._sessions):
            self.deselect(session_id)
        logger.info("Reset complete")

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def sessions(self) -> dict[str, Session]:
        return dict(self._sessions)

    def scenarios(self) -> list[ScenarioInfo]:
        return list_scenarios()

    def select(
        self,
        scenario_id: str,
        domain: str | None = None,
        record_type: str = "A",
        mode: str | None = None,
        resolver: str | None = None,
        auto_advance_ms: int | None = None,
    ) -> Session:
        """
        Open a library scenario.

        Raises:
            UnknownScenarioError: if the scenario id is not in the library.
        """
        domain = domain or DEFAULT_DOMAIN
        trace = load_scenario(scenario_id, domain)
        config = DiagnosticConfig(
            domain=domain, record_type=record_type, mode=mode, resolver=resolver
        )
        return self._open(trace, config, auto_advance_ms)

    def load_document(
        self,
        document: Mapping[str, Any] | str | bytes,
        config: Mapping[str, Any] | None = None,
        auto_advance_ms: int | None = None,
    ) -> Session:
        """
        Open a raw scenario document.

        Raises:
            StructuralError: if the document is malformed; no session is created.
        """
        trace = load_trace(document)
        return self._open(trace, DiagnosticConfig.from_mapping(config), auto_advance_ms)

    def get(self, session_id: str) -> Session:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(f"Session not found: {session_id}") from None

    def deselect(self, session_id: str) -> None:
        """Dispose the session's controller and forget the session."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")
        session.controller.dispose()
        logger.info(
            "Closed session %s",
            session_id,
            extra=trace_context(
                session_id=session_id, scenario_id=session.controller.trace.scenario_id
            ),
        )

    def _open(
        self, trace: Trace, config: DiagnosticConfig, auto_advance_ms: int | None
    ) -> Session:
        controller = PlaybackController(
            trace,
            config=config,
            auto_advance_ms=auto_advance_ms or self._auto_advance_ms,
        )
        session = Session(id=str(uuid.uuid4()), controller=controller, config=config)
        self._sessions[session.id] = session
        logger.info(
            "Opened session %s for %s (%s steps)",
            session.id,
            trace.scenario_id,
            len(trace),
            extra=trace_context(session_id=session.id, scenario_id=trace.scenario_id),
        )
        return session
