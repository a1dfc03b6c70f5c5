"""Identity and quota value types shared by the interceptor, engine and adapters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

# Redis INCR counters are signed 64-bit integers
MAX_REQUESTS = 2**63 - 1
# Well inside both the Redis EXPIRE range and float-second arithmetic
MAX_WINDOW_SECONDS = 2**31 - 1


@dataclass(frozen=True)
class Quota:
    """Requests allowed per window for one identity.

    Attributes:
        max_requests: Requests admitted before the window must lapse.
        window_seconds: Lifetime of the counter after the last counted request.
    """

    max_requests: int
    window_seconds: int

    @property
    def is_valid(self) -> bool:
        return 0 < self.max_requests <= MAX_REQUESTS and 0 < self.window_seconds <= MAX_WINDOW_SECONDS


@dataclass(frozen=True)
class NetworkAddress:
    """Client identified by its network address."""

    value: str

    key_type = "ip"

    @property
    def counter_key(self) -> str:
        return f"[ip]{self.value}"


@dataclass(frozen=True)
class Credential:
    """Client identified by a signed quota credential."""

    value: str

    key_type = "token"

    @property
    def counter_key(self) -> str:
        return f"[token]{self.value}"


Identity = Union[NetworkAddress, Credential]


def resolve_identity(address: str | None, credential: str | None) -> Identity | None:
    """Pick the identity a request is counted against.

    A non-empty credential always wins over the address. Returns None when
    neither is available.

    Examples:
        >>> resolve_identity("1.2.3.4", "tok")
        Credential(value='tok')
        >>> resolve_identity("1.2.3.4", "")
        NetworkAddress(value='1.2.3.4')
        >>> resolve_identity("", None) is None
        True
    """

    if credential:
        return Credential(credential)
    if address:
        return NetworkAddress(address)
    return None
