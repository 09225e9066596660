"""TraceModel module."""

from .loader import ScenarioDocument, load_trace, parse_document, resolve_races
from .model import (
    durable_states,
    flows_at,
    poisoned_actors,
    steps_up_to,
    truncated,
    validate,
)

__all__ = [
    "ScenarioDocument",
    "load_trace",
    "parse_document",
    "resolve_races",
    "validate",
    "steps_up_to",
    "flows_at",
    "durable_states",
    "poisoned_actors",
    "truncated",
]
