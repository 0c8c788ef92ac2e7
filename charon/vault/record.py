"""
Vault record and its fixed-width storage encoding.

Layout (201 bytes, big-endian):

    discriminator      8   sha256(b"account:VaultAccount")[:8]
    owner             32
    heir_commitment   32
    heir_public_key   32
    encrypted_secret  80
    heartbeat_interval 8   i64
    last_heartbeat     8   i64
    claimed            1   0 | 1
"""

from __future__ import annotations

import enum
import hashlib
import struct
from dataclasses import dataclass, replace

from ..core.errors import CorruptRecord

IDENTITY_LEN = 32
COMMITMENT_LEN = 32
SECRET_LEN = 80

DISCRIMINATOR = hashlib.sha256(b"account:VaultAccount").digest()[:8]

_LAYOUT = struct.Struct(">8s32s32s32s80sqqB")
RECORD_SIZE = _LAYOUT.size  # 201

I64_MAX = 2**63 - 1


class VaultState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    CLAIMED = "claimed"


@dataclass(frozen=True)
class VaultRecord:
    owner: bytes
    heir_commitment: bytes
    heir_public_key: bytes
    encrypted_secret: bytes
    heartbeat_interval_seconds: int
    last_heartbeat_timestamp: int
    claimed: bool = False

    @property
    def state(self) -> VaultState:
        return VaultState.CLAIMED if self.claimed else VaultState.ACTIVE

    @property
    def claimable_at(self) -> int:
        """First second at which a claim passes the expiry gate."""
        return self.last_heartbeat_timestamp + self.heartbeat_interval_seconds + 1

    def is_expired(self, now: int) -> bool:
        return now > self.last_heartbeat_timestamp + self.heartbeat_interval_seconds

    def with_heartbeat(self, ts: int) -> "VaultRecord":
        return replace(self, last_heartbeat_timestamp=ts)

    def as_claimed(self) -> "VaultRecord":
        return replace(self, claimed=True)

    def encode(self) -> bytes:
        return _LAYOUT.pack(
            DISCRIMINATOR,
            self.owner,
            self.heir_commitment,
            self.heir_public_key,
            self.encrypted_secret,
            self.heartbeat_interval_seconds,
            self.last_heartbeat_timestamp,
            1 if self.claimed else 0,
        )

    @classmethod
    def decode(cls, raw: bytes) -> "VaultRecord":
        if len(raw) != RECORD_SIZE:
            raise CorruptRecord("vault record has the wrong size", size=len(raw), expected=RECORD_SIZE)
        disc, owner, commitment, heir_pk, secret, interval, last, flag = _LAYOUT.unpack(raw)
        if disc != DISCRIMINATOR:
            raise CorruptRecord("vault record discriminator mismatch", discriminator=disc)
        if flag not in (0, 1):
            raise CorruptRecord("vault record claimed flag is not 0/1", flag=flag)
        return cls(
            owner=owner,
            heir_commitment=commitment,
            heir_public_key=heir_pk,
            encrypted_secret=secret,
            heartbeat_interval_seconds=interval,
            last_heartbeat_timestamp=last,
            claimed=bool(flag),
        )


__all__ = [
    "IDENTITY_LEN",
    "COMMITMENT_LEN",
    "SECRET_LEN",
    "DISCRIMINATOR",
    "RECORD_SIZE",
    "I64_MAX",
    "VaultState",
    "VaultRecord",
]
