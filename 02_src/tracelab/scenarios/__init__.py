"""Scenario library."""

from .builder import ScenarioBuilder, flow
from .library import (
    DEFAULT_DOMAIN,
    SCENARIOS,
    ScenarioInfo,
    build_scenario,
    list_scenarios,
    load_scenario,
)

__all__ = [
    "DEFAULT_DOMAIN",
    "SCENARIOS",
    "ScenarioBuilder",
    "ScenarioInfo",
    "build_scenario",
    "flow",
    "list_scenarios",
    "load_scenario",
]
