"""PlaybackController: Paused/Playing state machine over a trace."""

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Protocol

from ..config import DEFAULT_AUTO_ADVANCE_MS, MIN_AUTO_ADVANCE_MS
from ..diagnostics import DiagnosticConfig, DiagnosticEngine, IDiagnosticEngine
from ..diagnostics.engine import ConfigLike
from ..event_bus import EventBus, IEventBus
from ..logging_config import get_logger, trace_context
from ..models import (
    Diagnostic,
    Issue,
    PlaybackEvent,
    PlaybackEventKind,
    PlaybackState,
    Severity,
    StepCategory,
    Topic,
    Trace,
)
from ..render import Snapshot, SnapshotHandler
from ..trace import flows_at, validate

logger = get_logger(__name__)


class IPlaybackController(Protocol):
    """Read cursor over a trace with timed auto-advance."""

    def step_forward(self) -> None:
        """index := min(index + 1, length - 1)."""
        ...

    def step_backward(self) -> None:
        """index := max(index - 1, 0)."""
        ...

    def seek(self, index: int) -> None:
        """index := clamp(index, 0, length - 1)."""
        ...

    def play(self) -> None:
        """Start auto-advance unless already at the last step."""
        ...

    def pause(self) -> None:
        """Stop auto-advance."""
        ...

    def dispose(self) -> None:
        """Cancel the pending timer and drop subscribers."""
        ...

    def current_snapshot(self) -> Snapshot:
        """Snapshot of the current step. O(1)."""
        ...


class PlaybackController:
    """Owns the playback truth for one trace.

    Every method is synchronous: the next ``current_snapshot()`` reflects the
    change before the method returns. The only asynchronous part is the
    autoplay task, of which at most one exists per controller.

    Live traces are pinned to their last step; play and navigation are
    rejected here rather than left to the caller.
    """

    def __init__(
        self,
        trace: Trace,
        config: ConfigLike = None,
        auto_advance_ms: int = DEFAULT_AUTO_ADVANCE_MS,
        event_bus: IEventBus | None = None,
        engine: IDiagnosticEngine | None = None,
    ):
        validate(trace)

        self._trace = trace
        self._config = (
            config
            if isinstance(config, DiagnosticConfig)
            else DiagnosticConfig.from_mapping(config)
        )
        self._auto_advance_ms = max(int(auto_advance_ms), MIN_AUTO_ADVANCE_MS)
        self._event_bus = event_bus or EventBus()
        self._engine = engine or DiagnosticEngine()

        self._index = trace.last_index if trace.is_live else 0
        self._playing = False
        self._timer: asyncio.Task | None = None
        self._disposed = False
        self._snapshot = self._build_snapshot()

    # --- state ---

    @property
    def trace(self) -> Trace:
        return self._trace

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def state(self) -> PlaybackState:
        return self._snapshot.playback_state

    def current_snapshot(self) -> Snapshot:
        """Snapshot of the current step. O(1), no side effects."""
        return self._snapshot

    # --- subscriptions ---

    def subscribe(self, handler: SnapshotHandler) -> None:
        self._event_bus.subscribe(Topic.PLAYBACK, handler)

    def unsubscribe(self, handler: SnapshotHandler) -> None:
        self._event_bus.unsubscribe(Topic.PLAYBACK, handler)

    # --- navigation ---

    def step_forward(self) -> None:
        """index := min(index + 1, length - 1). Does not stop autoplay."""
        if self._rejects("step_forward"):
            return
        self._move(min(self._index + 1, self._trace.last_index), PlaybackEventKind.STEP_FORWARD)

    def step_backward(self) -> None:
        """index := max(index - 1, 0). Does not stop autoplay."""
        if self._rejects("step_backward"):
            return
        self._move(max(self._index - 1, 0), PlaybackEventKind.STEP_BACKWARD)

    def seek(self, index: int) -> None:
        """index := clamp(index, 0, length - 1). Does not stop autoplay."""
        if self._rejects("seek"):
            return
        self._move(max(0, min(int(index), self._trace.last_index)), PlaybackEventKind.SEEK)

    def jump_to_first(self) -> None:
        self.seek(0)

    def jump_to_last(self) -> None:
        self.seek(self._trace.last_index)

    # --- autoplay ---

    def play(self) -> None:
        """
        Start auto-advance. No-op at the last step.

        Any previously scheduled timer is cancelled first, so two timers never
        coexist. Requires a running event loop.
        """
        if self._rejects("play"):
            return
        if self.state.at_end:
            logger.debug("play ignored for %s: already at last step", self._trace.scenario_id)
            return

        self._cancel_timer()
        self._timer = asyncio.get_running_loop().create_task(self._autoplay())
        if not self._playing:
            self._playing = True
            self._transition(PlaybackEventKind.PLAY)

    def pause(self) -> None:
        """Stop auto-advance."""
        if self._disposed or not self._playing:
            return
        self._cancel_timer()
        self._playing = False
        self._transition(PlaybackEventKind.PAUSE)

    def toggle(self) -> None:
        if self._playing:
            self.pause()
        else:
            self.play()

    async def _autoplay(self) -> None:
        """Background timer: one step_forward every auto_advance_ms."""
        while self._playing:
            try:
                await asyncio.sleep(self._auto_advance_ms / 1000)
            except asyncio.CancelledError:
                break

            if not self._playing or self._disposed:
                break

            self._move(
                min(self._index + 1, self._trace.last_index),
                PlaybackEventKind.STEP_FORWARD,
            )
            if self.state.at_end:
                self._playing = False
                self._timer = None
                self._transition(PlaybackEventKind.AUTO_PAUSE)
                break

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    # --- live traces ---

    def replace_live_trace(self, trace: Trace) -> None:
        """Accept a newer version of a live trace and pin to its last step."""
        if self._disposed:
            return
        if not self._trace.is_live:
            raise ValueError(
                f"Controller for {self._trace.scenario_id!r} plays a recorded trace"
            )
        if not trace.is_live:
            raise ValueError(f"Trace {trace.scenario_id!r} is not live")
        validate(trace)

        self._trace = trace
        self._index = trace.last_index
        self._transition(PlaybackEventKind.LIVE_UPDATE)

    # --- lifecycle ---

    def dispose(self) -> None:
        """Cancel the pending timer and drop all subscribers."""
        if self._disposed:
            return
        self._cancel_timer()
        self._playing = False
        self._disposed = True
        self._transition(PlaybackEventKind.DISPOSED)
        self._event_bus.clear()
        logger.info(
            "Disposed playback controller for %s",
            self._trace.scenario_id,
            extra=self._log_context(),
        )

    # --- internals ---

    def _log_context(self, **fields) -> dict:
        return trace_context(
            scenario_id=self._trace.scenario_id, step_index=self._index, **fields
        )

    def _rejects(self, action: str) -> bool:
        if self._disposed:
            return True
        if self._trace.is_live:
            logger.warning(
                "%s rejected for live trace %s: pinned to last step",
                action,
                self._trace.scenario_id,
                extra=self._log_context(event=action),
            )
            return True
        return False

    def _move(self, index: int, kind: PlaybackEventKind) -> None:
        if index == self._index:
            return
        self._index = index
        self._transition(kind)

    def _transition(self, kind: PlaybackEventKind) -> None:
        self._snapshot = self._build_snapshot()
        logger.debug(
            "Playback %s",
            kind.value,
            extra=self._log_context(
                event=kind.value,
                severity=self._snapshot.diagnostic.worst_severity.value,
            ),
        )
        self._event_bus.publish(
            PlaybackEvent(
                id=str(uuid.uuid4()),
                topic=Topic.PLAYBACK,
                kind=kind,
                snapshot=self._snapshot,
                timestamp=datetime.now(timezone.utc),
            )
        )

    def _build_snapshot(self) -> Snapshot:
        step = self._trace.steps[self._index]
        return Snapshot(
            step=step,
            flows=flows_at(self._trace, self._index),
            diagnostic=self._diagnose(),
            playback_state=PlaybackState(
                trace_id=self._trace.scenario_id,
                current_index=self._index,
                is_playing=self._playing,
                auto_advance_ms=self._auto_advance_ms,
                length=len(self._trace),
                is_live=self._trace.is_live,
            ),
            races=step.races,
        )

    def _diagnose(self) -> Diagnostic:
        try:
            return self._engine.explain(self._trace, self._index, self._config)
        except Exception as e:
            logger.error(
                "Diagnostic error for %s step %s: %s",
                self._trace.scenario_id,
                self._index,
                e,
                exc_info=True,
                extra=self._log_context(),
            )
            step = self._trace.steps[self._index]
            return Diagnostic(
                step_index=step.index,
                category=StepCategory.GENERIC,
                overview=step.title,
                what_happened=step.description,
                technical_notes="",
                why_it_matters="",
                issues=(
                    Issue(
                        kind="diagnostic_unavailable",
                        description="Analysis for this step could not be produced",
                        impact="Explanatory text is limited to the step description",
                        severity=Severity.WARNING,
                    ),
                ),
                next_steps="",
            )
