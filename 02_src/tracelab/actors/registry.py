"""ActorRegistry: static catalog of participants and their capabilities."""

from typing import Iterable, Iterator, Protocol

from ..models import Actor, Capability, Role

# Capabilities an actor gets from its role when the scenario declares none.
ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.CLIENT: frozenset(),
    Role.BROWSER_CACHE: frozenset({Capability.CACHES_RESPONSES}),
    Role.OS_CACHE: frozenset({Capability.CACHES_RESPONSES}),
    Role.STUB_RESOLVER: frozenset({Capability.CACHES_RESPONSES}),
    Role.RECURSIVE_RESOLVER: frozenset(
        {
            Capability.IS_RECURSIVE,
            Capability.CACHES_RESPONSES,
            Capability.VALIDATES_DNSSEC,
        }
    ),
    Role.ROOT_SERVER: frozenset(
        {Capability.IS_AUTHORITATIVE, Capability.IS_TRUST_ANCHOR}
    ),
    Role.TLD_SERVER: frozenset({Capability.IS_AUTHORITATIVE}),
    Role.AUTHORITATIVE_SERVER: frozenset({Capability.IS_AUTHORITATIVE}),
    Role.ENCRYPTED_RESOLVER: frozenset(
        {
            Capability.IS_RECURSIVE,
            Capability.CACHES_RESPONSES,
            Capability.SUPPORTS_ENCRYPTION,
            Capability.VALIDATES_DNSSEC,
        }
    ),
    Role.ATTACKER: frozenset(
        {Capability.CAN_SPOOF_SOURCE, Capability.INTERCEPTS_TRAFFIC}
    ),
    Role.BOTNET: frozenset({Capability.CAN_SPOOF_SOURCE}),
    Role.VICTIM: frozenset(),
    Role.FIREWALL: frozenset({Capability.INTERCEPTS_TRAFFIC}),
    Role.GENERIC: frozenset(),
}

DISPLAY_NAMES: dict[Role, str] = {
    Role.CLIENT: "Client",
    Role.BROWSER_CACHE: "Browser Cache",
    Role.OS_CACHE: "OS Cache",
    Role.STUB_RESOLVER: "Stub Resolver",
    Role.RECURSIVE_RESOLVER: "Recursive Resolver",
    Role.ROOT_SERVER: "Root Server",
    Role.TLD_SERVER: "TLD Server",
    Role.AUTHORITATIVE_SERVER: "Authoritative Server",
    Role.ENCRYPTED_RESOLVER: "Encrypted Resolver",
    Role.ATTACKER: "Attacker",
    Role.BOTNET: "Botnet",
    Role.VICTIM: "Victim",
    Role.FIREWALL: "Firewall",
    Role.GENERIC: "Participant",
}


class IActorRegistry(Protocol):
    """Lookup of actors by id."""

    def get(self, actor_id: str) -> Actor | None:
        """Return the actor or None."""
        ...

    def __contains__(self, actor_id: object) -> bool:
        ...


class ActorRegistry:
    """Catalog of actors for one scenario. Read-only once built."""

    def __init__(self, actors: Iterable[Actor] = ()):
        self._actors: dict[str, Actor] = {}
        for actor in actors:
            if actor.id in self._actors:
                raise ValueError(f"Duplicate actor id: {actor.id}")
            self._actors[actor.id] = actor

    @classmethod
    def from_roles(cls, roles: dict[str, Role]) -> "ActorRegistry":
        """Build a registry from {actor_id: role} using catalog defaults."""
        return cls(make_actor(actor_id, role) for actor_id, role in roles.items())

    def get(self, actor_id: str) -> Actor | None:
        return self._actors.get(actor_id)

    def require(self, actor_id: str) -> Actor:
        try:
            return self._actors[actor_id]
        except KeyError:
            raise KeyError(f"Unknown actor: {actor_id}") from None

    def with_capability(self, capability: Capability) -> list[Actor]:
        return [a for a in self._actors.values() if a.can(capability)]

    def has_capability(self, actor_id: str, capability: Capability) -> bool:
        actor = self._actors.get(actor_id)
        return actor is not None and actor.can(capability)

    def display_name(self, actor_id: str) -> str:
        actor = self._actors.get(actor_id)
        return actor.display_name if actor else actor_id

    @property
    def ids(self) -> list[str]:
        return list(self._actors)

    def __contains__(self, actor_id: object) -> bool:
        return actor_id in self._actors

    def __iter__(self) -> Iterator[Actor]:
        return iter(self._actors.values())

    def __len__(self) -> int:
        return len(self._actors)


def make_actor(
    actor_id: str,
    role: Role,
    display_name: str | None = None,
    capabilities: Iterable[Capability] | None = None,
    address: str | None = None,
) -> Actor:
    """Create an Actor, filling name and capabilities from the role catalog."""
    return Actor(
        id=actor_id,
        display_name=display_name or DISPLAY_NAMES[role],
        role=role,
        capabilities=(
            frozenset(capabilities)
            if capabilities is not None
            else ROLE_CAPABILITIES[role]
        ),
        address=address,
    )
