"""Helpers for authoring scenario documents."""

from typing import Any, Iterable

from pydantic.alias_generators import to_camel

from ..models import FlowKind, Role


def _camel(values: dict[str, Any]) -> dict[str, Any]:
    return {to_camel(key): value for key, value in values.items() if value is not None}


def flow(
    source: str,
    target: str,
    label: str,
    kind: FlowKind = FlowKind.QUERY,
    **fields: Any,
) -> dict[str, Any]:
    """One flow entry of a scenario document. Extra fields use snake_case names."""
    return _camel(
        {
            "source_actor_id": source,
            "target_actor_id": target,
            "label": label,
            "kind": kind.value,
            **fields,
        }
    )


class ScenarioBuilder:
    """Accumulates actors and steps; assigns indices and timing offsets."""

    def __init__(self, scenario_id: str, title: str, live: bool = False):
        self._scenario_id = scenario_id
        self._title = title
        self._live = live
        self._actors: list[dict[str, Any]] = []
        self._steps: list[dict[str, Any]] = []
        self._offset_ms = 0

    def actor(
        self,
        actor_id: str,
        role: Role,
        display_name: str | None = None,
        address: str | None = None,
    ) -> "ScenarioBuilder":
        self._actors.append(
            _camel(
                {
                    "id": actor_id,
                    "role": role.value,
                    "display_name": display_name,
                    "address": address,
                }
            )
        )
        return self

    def step(
        self,
        stage: str,
        title: str,
        description: str,
        participants: Iterable[str],
        flows: Iterable[dict[str, Any]] = (),
        latency_ms: int | None = None,
        flags: dict[str, Any] | None = None,
        **extra: Any,
    ) -> "ScenarioBuilder":
        """Append a step starting where the previous one ended."""
        self._steps.append(
            _camel(
                {
                    "index": len(self._steps),
                    "stage": stage,
                    "title": title,
                    "description": description,
                    "participant_ids": list(participants),
                    "timing_offset_ms": self._offset_ms,
                    "latency_ms": latency_ms,
                    "flows": list(flows),
                    "flags": _camel(flags) if flags else None,
                    **extra,
                }
            )
        )
        self._offset_ms += latency_ms or 0
        return self

    def build(self) -> dict[str, Any]:
        return {
            "scenarioId": self._scenario_id,
            "title": self._title,
            "live": self._live,
            "actors": list(self._actors),
            "steps": list(self._steps),
        }
