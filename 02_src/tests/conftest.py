"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))


def race_flow(source: str, rank: int, key: str, malicious: bool = True) -> dict:
    return {
        "sourceActorId": source,
        "targetActorId": "resolver",
        "label": f"A answer ({key})",
        "kind": "response",
        "malicious": malicious,
        "raceGroupId": "race-1",
        "arrivalRank": rank,
        "matchKey": key,
        "afterState": {"cache": {"example.com": f"addr-{rank}"}, "poisoned": malicious},
    }


@pytest.fixture
def race_document():
    """Three-step document whose middle step is a four-flow race (only rank 3 matches)."""
    return {
        "scenarioId": "four_flow_race",
        "title": "Four-flow race",
        "actors": [
            {"id": "client", "role": "client"},
            {"id": "resolver", "role": "recursive_resolver"},
            {"id": "auth", "role": "authoritative_server"},
            {"id": "attacker", "role": "attacker"},
        ],
        "steps": [
            {
                "index": 0,
                "stage": "resolver_query",
                "title": "Resolver query",
                "participantIds": ["resolver", "auth"],
                "timingOffsetMs": 0,
                "latencyMs": 100,
                "flows": [
                    {"sourceActorId": "resolver", "targetActorId": "auth", "label": "A?"}
                ],
            },
            {
                "index": 1,
                "stage": "response_race",
                "title": "Response race",
                "participantIds": ["attacker", "auth", "resolver"],
                "timingOffsetMs": 100,
                "latencyMs": 100,
                "flags": {"isAttack": True},
                "expectedMatchKeys": {"resolver": "txid-3"},
                "flows": [
                    race_flow("attacker", 1, "txid-1"),
                    race_flow("attacker", 2, "txid-2"),
                    race_flow("attacker", 3, "txid-3"),
                    race_flow("auth", 4, "txid-4", malicious=False),
                ],
            },
            {
                "index": 2,
                "stage": "resolver_cache_hit",
                "title": "Client served",
                "participantIds": ["client", "resolver"],
                "timingOffsetMs": 200,
                "latencyMs": 100,
                "flows": [
                    {"sourceActorId": "client", "targetActorId": "resolver", "label": "A?"},
                    {
                        "sourceActorId": "resolver",
                        "targetActorId": "client",
                        "label": "A addr-3",
                        "kind": "response",
                    },
                ],
            },
        ],
    }


@pytest.fixture
def plain_document():
    """Three uneventful steps between two actors."""
    return {
        "scenarioId": "plain",
        "actors": [
            {"id": "a", "role": "generic", "displayName": "Alpha"},
            {"id": "b", "role": "generic", "displayName": "Beta"},
        ],
        "steps": [
            {
                "index": i,
                "stage": "exchange",
                "title": f"Exchange {i}",
                "participantIds": ["a", "b"],
                "timingOffsetMs": i * 100,
                "latencyMs": 100,
                "flows": [{"sourceActorId": "a", "targetActorId": "b", "label": "ping"}],
            }
            for i in range(3)
        ],
    }


@pytest.fixture
def race_trace(race_document):
    """Loaded four-flow race trace."""
    from tracelab.trace import load_trace

    return load_trace(race_document)


@pytest.fixture
def plain_trace(plain_document):
    """Loaded uneventful trace."""
    from tracelab.trace import load_trace

    return load_trace(plain_document)


@pytest.fixture
def recursive_trace():
    """Library recursive resolution scenario."""
    from tracelab.scenarios import load_scenario

    return load_scenario("recursive_resolution", "example.com")


@pytest.fixture
def event_bus():
    """Create EventBus."""
    from tracelab.event_bus import EventBus

    return EventBus()


@pytest.fixture
def controller(recursive_trace):
    """Controller over the recursive scenario with a fast autoplay interval."""
    from tracelab.playback import PlaybackController

    pc = PlaybackController(
        recursive_trace,
        config={"domain": "example.com", "record_type": "A", "mode": "recursive"},
        auto_advance_ms=10,
    )
    yield pc
    pc.dispose()


@pytest.fixture
def events(controller):
    """PlaybackEvents published by the controller fixture."""
    received = []
    controller.subscribe(received.append)
    return received


@pytest_asyncio.fixture
async def application():
    """Started Application."""
    from tracelab.app import Application

    app = Application(auto_advance_ms=10)
    await app.start()
    yield app
    await app.stop()
