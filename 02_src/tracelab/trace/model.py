"""TraceModel: structural validation and read-only views over a Trace."""

import copy
import dataclasses
from typing import Any

from ..errors import StructuralError, StructuralErrorKind
from ..models import PacketFlow, Step, Trace


def validate(trace: Trace) -> None:
    """
    Check the structural invariants of a trace.

    Every race group must already carry its resolution in ``Step.races``,
    so playback and diagnostics never see an undecided race.

    Raises:
        StructuralError: on the first violated invariant.
    """
    if not trace.steps:
        raise StructuralError(
            StructuralErrorKind.MISSING_FIELD,
            f"trace {trace.scenario_id!r} has no steps",
        )

    previous_offset: int | None = None
    for position, step in enumerate(trace.steps):
        if step.index != position:
            raise StructuralError(
                StructuralErrorKind.NON_MONOTONIC_INDEX,
                f"step at position {position} declares index {step.index}",
            )

        if previous_offset is not None and step.timing_offset_ms < previous_offset:
            raise StructuralError(
                StructuralErrorKind.TIMING_REGRESSION,
                f"step {step.index} starts at {step.timing_offset_ms}ms, "
                f"before previous step at {previous_offset}ms",
            )
        previous_offset = step.timing_offset_ms

        _check_actors(trace, step)
        _check_race_groups(step)


def _check_actors(trace: Trace, step: Step) -> None:
    referenced: list[tuple[str, str]] = [
        (actor_id, "participant") for actor_id in step.participant_ids
    ]
    if step.highlight_actor_id is not None:
        referenced.append((step.highlight_actor_id, "highlight"))
    for flow in step.flows:
        referenced.append((flow.source_actor_id, "flow source"))
        referenced.append((flow.target_actor_id, "flow target"))
    for actor_id, _ in step.expected_match_keys:
        referenced.append((actor_id, "expected match key"))

    for actor_id, where in referenced:
        if actor_id not in trace.actors:
            raise StructuralError(
                StructuralErrorKind.UNKNOWN_ACTOR,
                f"step {step.index} {where} refers to unknown actor {actor_id!r}",
            )


def _check_race_groups(step: Step) -> None:
    targets: dict[str, str] = {}
    for flow in step.flows:
        if flow.race_group_id is None:
            continue
        target = targets.setdefault(flow.race_group_id, flow.target_actor_id)
        if target != flow.target_actor_id:
            raise StructuralError(
                StructuralErrorKind.INVALID_RACE_GROUP,
                f"step {step.index} race group {flow.race_group_id!r} targets "
                f"both {target!r} and {flow.target_actor_id!r}",
            )

    resolved = [resolution.race_group_id for resolution in step.races]
    if resolved != step.race_group_ids:
        unresolved = [g for g in step.race_group_ids if g not in resolved]
        raise StructuralError(
            StructuralErrorKind.INVALID_RACE_GROUP,
            f"step {step.index} race groups {unresolved or resolved!r} do not match "
            "its resolutions; build traces with load_trace or resolve_races",
        )


def _clamp(trace: Trace, index: int) -> int:
    return max(0, min(index, trace.last_index))


def steps_up_to(trace: Trace, index: int) -> tuple[Step, ...]:
    """Visible history: steps [0..index] inclusive. Never exposes later steps."""
    return trace.steps[: _clamp(trace, index) + 1]


def flows_at(trace: Trace, index: int) -> tuple[PacketFlow, ...]:
    """Flows of exactly one step."""
    return trace.steps[_clamp(trace, index)].flows


def _accepted_updates(step: Step) -> list[tuple[PacketFlow, dict[str, Any]]]:
    """(flow, after_state) of every accepted state change in the step."""
    updates = [
        (flow, flow.after_state)
        for flow in step.flows
        if flow.race_group_id is None and flow.delivered and flow.after_state
    ]
    for resolution in step.races:
        if resolution.winner is not None and resolution.target_state:
            updates.append((resolution.winner, resolution.target_state))
    return updates


def durable_states(trace: Trace, index: int) -> dict[str, dict[str, Any]]:
    """
    Per-actor state after the step at ``index``.

    Folds the after_state of every accepted flow in the visible prefix into
    its target actor's state. Discarded race candidates never contribute.
    The result is a copy; changing it never changes the trace.
    """
    states: dict[str, dict[str, Any]] = {}
    for step in steps_up_to(trace, index):
        for flow, after in _accepted_updates(step):
            states.setdefault(flow.target_actor_id, {}).update(copy.deepcopy(after))
    return states


def poisoned_actors(trace: Trace, index: int) -> dict[str, int]:
    """Actors whose latest accepted state came from a malicious flow, with the step index."""
    poisoned: dict[str, int] = {}
    for step in steps_up_to(trace, index):
        for flow, _ in _accepted_updates(step):
            if flow.malicious:
                poisoned[flow.target_actor_id] = step.index
            else:
                poisoned.pop(flow.target_actor_id, None)
    return poisoned


def truncated(trace: Trace, length: int) -> Trace:
    """Copy of the trace keeping only its first ``length`` steps."""
    if length < 1:
        raise ValueError("A trace keeps at least one step")
    return dataclasses.replace(trace, steps=trace.steps[:length])
