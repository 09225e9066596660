"""RaceResolver module."""

from .resolver import IRaceResolver, RaceResolver, resolve_group, resolve_step

__all__ = ["IRaceResolver", "RaceResolver", "resolve_group", "resolve_step"]
