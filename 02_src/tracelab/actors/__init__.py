"""ActorRegistry module."""

from .registry import (
    DISPLAY_NAMES,
    ROLE_CAPABILITIES,
    ActorRegistry,
    IActorRegistry,
    make_actor,
)

__all__ = [
    "ActorRegistry",
    "IActorRegistry",
    "make_actor",
    "ROLE_CAPABILITIES",
    "DISPLAY_NAMES",
]
