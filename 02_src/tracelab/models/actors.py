"""Actor-related data models."""

from dataclasses import dataclass, field
from enum import Enum


class Role(str, Enum):
    """Participant roles known to the registry."""

    CLIENT = "client"
    BROWSER_CACHE = "browser_cache"
    OS_CACHE = "os_cache"
    STUB_RESOLVER = "stub_resolver"
    RECURSIVE_RESOLVER = "recursive_resolver"
    ROOT_SERVER = "root_server"
    TLD_SERVER = "tld_server"
    AUTHORITATIVE_SERVER = "authoritative_server"
    ENCRYPTED_RESOLVER = "encrypted_resolver"
    ATTACKER = "attacker"
    BOTNET = "botnet"
    VICTIM = "victim"
    FIREWALL = "firewall"
    GENERIC = "generic"


class Capability(str, Enum):
    """Abstract capability tags, read by diagnostics only."""

    CAN_SPOOF_SOURCE = "can_spoof_source"
    IS_AUTHORITATIVE = "is_authoritative"
    IS_RECURSIVE = "is_recursive"
    CACHES_RESPONSES = "caches_responses"
    VALIDATES_DNSSEC = "validates_dnssec"
    SUPPORTS_ENCRYPTION = "supports_encryption"
    IS_TRUST_ANCHOR = "is_trust_anchor"
    INTERCEPTS_TRAFFIC = "intercepts_traffic"


@dataclass(frozen=True)
class Actor:
    """A named participant in a trace."""

    id: str
    display_name: str
    role: Role
    capabilities: frozenset[Capability] = field(default_factory=frozenset)
    address: str | None = None

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities
