"""
charon.vault.program
====================

The vault lifecycle: Uninitialized → Active → Claimed (terminal), with Active
looping on heartbeats.

Operations
----------
- initialize_vault(owner, heir_commitment, heir_public_key, encrypted_secret,
  heartbeat_interval_seconds) → VaultRecord
- ping(caller, owner=None) → new last_heartbeat_timestamp
- claim(claimant, owner, proof_a, proof_b, proof_c) → the claimed VaultRecord

Callers are 32-byte identities already authenticated by the host; the program
only compares bytes. Claim preconditions are checked in a fixed order:

    1. the record exists                         → VaultNotFound
    2. now > last_heartbeat + interval           → HeartbeatNotExpired
    3. not yet claimed                           → AlreadyClaimed
    4. the proof verifies for heir_commitment    → InvalidProof / ProofVerificationFailed

Concurrency
-----------
Every mutation is a single `compare_and_swap` against the bytes that were
read. A writer that loses the race re-reads and re-checks 1–3; a concurrent
claim therefore surfaces as AlreadyClaimed. The proof is verified at most
once per call; the commitment it binds to is immutable, so the result stays
valid across re-reads.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Optional, Tuple

from ..core import logging as clog
from ..core.errors import (
    AlreadyClaimed,
    DuplicateVault,
    HeartbeatNotExpired,
    InvalidArgument,
    StoreConflict,
    Unauthorized,
    VaultNotFound,
)
from ..db import open_store
from ..db.kv import VAULT, RecordStore, vault_key
from ..zk.field import is_canonical_fr
from ..zk.groth16 import verify_proof
from ..zk.verifying_key import VerifyingKey, deployed_verifying_key
from .clock import Clock, SystemClock
from .record import (
    COMMITMENT_LEN,
    I64_MAX,
    IDENTITY_LEN,
    SECRET_LEN,
    VaultRecord,
    VaultState,
)

log = clog.get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 8


# ---------------------------
# Guards
# ---------------------------


def _require_bytes(name: str, value: Any, size: int) -> bytes:
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise InvalidArgument(f"{name} must be bytes", field=name, got=type(value).__name__)
    b = bytes(value)
    if len(b) != size:
        raise InvalidArgument(f"{name} must be {size} bytes", field=name, got=len(b))
    return b


def _require_interval(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument("heartbeat interval must be an integer", got=type(value).__name__)
    if not (0 < value <= I64_MAX):
        raise InvalidArgument("heartbeat interval must be positive and fit in i64", got=value)
    return value


def is_owner(record: VaultRecord, caller: bytes) -> bool:
    return record.owner == caller


@contextmanager
def _op_scope(op: str, **fields: Any) -> Iterator[None]:
    with clog.trace_scope():
        clog.bind(component="vault", op=op, **fields)
        yield


# ---------------------------
# Program
# ---------------------------


class VaultProgram:
    """
    Lifecycle state machine over a `RecordStore`.

    `verifying_key` defaults to the process-wide deployed key, resolved on
    the first claim. That raises ConfigError unless a key file is configured
    or the network is explicitly devnet.
    """

    def __init__(
        self,
        store: RecordStore,
        clock: Optional[Clock] = None,
        verifying_key: Optional[VerifyingKey] = None,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.store = store
        self.clock = clock or SystemClock()
        self._vk = verifying_key
        self.max_attempts = max_attempts

    @classmethod
    def from_config(cls, cfg: Any, clock: Optional[Clock] = None) -> "VaultProgram":
        return cls(open_store(cfg.db.uri), clock, deployed_verifying_key(cfg))

    @property
    def verifying_key(self) -> VerifyingKey:
        if self._vk is None:
            self._vk = deployed_verifying_key()
        return self._vk

    # ----- internals -----

    def _load(self, owner: bytes) -> Tuple[bytes, VaultRecord]:
        raw = self.store.get(vault_key(owner))
        if raw is None:
            raise VaultNotFound(owner)
        return raw, VaultRecord.decode(raw)

    # ----- operations -----

    def initialize_vault(
        self,
        owner: bytes,
        heir_commitment: bytes,
        heir_public_key: bytes,
        encrypted_secret: bytes,
        heartbeat_interval_seconds: int,
    ) -> VaultRecord:
        owner = _require_bytes("owner", owner, IDENTITY_LEN)
        heir_commitment = _require_bytes("heir_commitment", heir_commitment, COMMITMENT_LEN)
        heir_public_key = _require_bytes("heir_public_key", heir_public_key, IDENTITY_LEN)
        encrypted_secret = _require_bytes("encrypted_secret", encrypted_secret, SECRET_LEN)
        interval = _require_interval(heartbeat_interval_seconds)
        if not is_canonical_fr(heir_commitment):
            raise InvalidArgument("heir_commitment is not a canonical scalar", field="heir_commitment")

        with _op_scope("initialize", owner=owner):
            record = VaultRecord(
                owner=owner,
                heir_commitment=heir_commitment,
                heir_public_key=heir_public_key,
                encrypted_secret=encrypted_secret,
                heartbeat_interval_seconds=interval,
                last_heartbeat_timestamp=self.clock.now(),
                claimed=False,
            )
            if not self.store.create(vault_key(owner), record.encode()):
                raise DuplicateVault(owner)
            log.info(
                "vault initialized",
                extra={"interval": interval, "last_heartbeat": record.last_heartbeat_timestamp},
            )
            return record

    def ping(self, caller: bytes, owner: Optional[bytes] = None) -> int:
        """Heartbeat: record the owner as alive now. Returns the stored timestamp."""
        caller = _require_bytes("caller", caller, IDENTITY_LEN)
        owner = caller if owner is None else _require_bytes("owner", owner, IDENTITY_LEN)

        with _op_scope("ping", owner=owner, caller=caller):
            now = self.clock.now()
            for attempt in range(1, self.max_attempts + 1):
                raw, record = self._load(owner)
                if not is_owner(record, caller):
                    raise Unauthorized(caller)
                if record.claimed:
                    raise AlreadyClaimed(owner)
                ts = now
                if now < record.last_heartbeat_timestamp:
                    log.warning(
                        "clock behind last heartbeat; keeping stored timestamp",
                        extra={"now": now, "last_heartbeat": record.last_heartbeat_timestamp},
                    )
                    ts = record.last_heartbeat_timestamp
                if self.store.compare_and_swap(vault_key(owner), raw, record.with_heartbeat(ts).encode()):
                    log.info("heartbeat updated", extra={"last_heartbeat": ts})
                    return ts
                log.debug("heartbeat lost a write race", extra={"attempt": attempt})
            raise StoreConflict(vault_key(owner), self.max_attempts)

    def claim(
        self,
        claimant: bytes,
        owner: bytes,
        proof_a: bytes,
        proof_b: bytes,
        proof_c: bytes,
    ) -> VaultRecord:
        """
        Claim the vault of `owner` with a Groth16 proof of knowledge of the
        heir secret. Any caller may claim; the proof is the credential.
        """
        claimant = _require_bytes("claimant", claimant, IDENTITY_LEN)
        owner = _require_bytes("owner", owner, IDENTITY_LEN)

        with _op_scope("claim", owner=owner, caller=claimant):
            now = self.clock.now()
            verified = False
            for attempt in range(1, self.max_attempts + 1):
                raw, record = self._load(owner)
                if not record.is_expired(now):
                    raise HeartbeatNotExpired(now, record.claimable_at)
                if record.claimed:
                    raise AlreadyClaimed(owner)
                if not verified:
                    verify_proof(proof_a, proof_b, proof_c, [record.heir_commitment], self.verifying_key)
                    verified = True
                claimed = record.as_claimed()
                if self.store.compare_and_swap(vault_key(owner), raw, claimed.encode()):
                    log.info("vault claimed", extra={"now": now})
                    return claimed
                log.debug("claim lost a write race", extra={"attempt": attempt})
            raise StoreConflict(vault_key(owner), self.max_attempts)

    # ----- views -----

    def get_vault(self, owner: bytes) -> Optional[VaultRecord]:
        raw = self.store.get(vault_key(bytes(owner)))
        return VaultRecord.decode(raw) if raw is not None else None

    def state_of(self, owner: bytes) -> VaultState:
        record = self.get_vault(owner)
        return VaultState.UNINITIALIZED if record is None else record.state

    def claimable_at(self, owner: bytes) -> int:
        record = self.get_vault(owner)
        if record is None:
            raise VaultNotFound(owner)
        return record.claimable_at

    def vaults(self) -> Iterator[VaultRecord]:
        for _, raw in self.store.iter_prefix(VAULT.raw):
            yield VaultRecord.decode(raw)


__all__ = ["VaultProgram", "is_owner", "DEFAULT_MAX_ATTEMPTS"]
