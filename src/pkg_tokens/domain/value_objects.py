# src/pkg_tokens/domain/value_objects.py

from __future__ import annotations

import secrets
import uuid
from dataclasses import dataclass
from typing import Optional

from .constants import ID_LENGTH, PrincipalKind

# 100ns intervals between 1582-10-15 (UUIDv1 epoch) and 1970-01-01
_GREGORIAN_OFFSET = 0x01B21DD213814000


# --- Token identifier ----------------------------------------------------


@dataclass(frozen=True, slots=True)
class TokenId:
    """
    128-bit time-ordered token identifier.

    New ids use the UUIDv7 layout: the leading 48 bits hold the creation
    time in epoch milliseconds, so the TTL check never has to trust a
    separate "created" value from the caller. Time-based UUIDv1 ids are
    accepted as well; their timestamp is converted from Gregorian ticks.
    """
    value: uuid.UUID

    def __post_init__(self) -> None:
        if self.value.version not in (1, 7):
            raise ValueError(f"Token id carries no timestamp: {self.value}")

    @classmethod
    def generate(cls, now_ms: int) -> TokenId:
        rand_a = secrets.randbits(12)
        rand_b = secrets.randbits(62)
        raw = (now_ms & 0xFFFF_FFFF_FFFF) << 80
        raw |= 0x7 << 76
        raw |= rand_a << 64
        raw |= 0b10 << 62
        raw |= rand_b
        return cls(uuid.UUID(int=raw))

    @classmethod
    def from_bytes(cls, raw: bytes) -> TokenId:
        if len(raw) != ID_LENGTH:
            raise ValueError(f"Token id must be {ID_LENGTH} bytes, got {len(raw)}")
        return cls(uuid.UUID(bytes=raw))

    @classmethod
    def parse(cls, text: str) -> TokenId:
        return cls(uuid.UUID(text))

    @property
    def timestamp_ms(self) -> int:
        if self.value.version == 7:
            return self.value.int >> 80
        return (self.value.time - _GREGORIAN_OFFSET) // 10_000

    @property
    def bytes(self) -> bytes:
        return self.value.bytes

    @property
    def canonical(self) -> str:
        return str(self.value)

    def __str__(self) -> str:
        return self.canonical


# --- Principal -----------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PrincipalRef:
    """
    Reference to the principal a token is bound to.

    `scope_id` is the owning application / organization, when there is one.
    """
    kind: PrincipalKind
    principal_id: uuid.UUID
    scope_id: Optional[uuid.UUID] = None
