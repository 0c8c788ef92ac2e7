# -*- coding: utf-8 -*-
"""
Property tests for the vault record codec and heartbeat monotonicity.

- encode/decode is the identity on every well-formed record and every
  encoding has the same static size
- any sequence of (possibly backwards) clock readings yields a
  non-decreasing stored heartbeat
- non-owners never move the heartbeat
"""
from __future__ import annotations

import pytest

from charon.core.errors import Unauthorized
from charon.db.memory import MemoryStore
from charon.vault.clock import ManualClock
from charon.vault.program import VaultProgram
from charon.vault.record import RECORD_SIZE, VaultRecord
from charon.zk.devsetup import dev_ceremony
from tests.property import given, settings, st

I64 = st.integers(min_value=-(2**63), max_value=2**63 - 1)
ID = st.binary(min_size=32, max_size=32)

RECORDS = st.builds(
    VaultRecord,
    owner=ID,
    heir_commitment=ID,
    heir_public_key=ID,
    encrypted_secret=st.binary(min_size=80, max_size=80),
    heartbeat_interval_seconds=I64,
    last_heartbeat_timestamp=I64,
    claimed=st.booleans(),
)


@given(RECORDS)
def test_record_codec_is_stable(rec):
    raw = rec.encode()
    assert len(raw) == RECORD_SIZE
    assert VaultRecord.decode(raw) == rec
    assert VaultRecord.decode(raw).encode() == raw


def _program(t0: int):
    clock = ManualClock(t0)
    return VaultProgram(MemoryStore(), clock, dev_ceremony().vk), clock


OWNER = b"\x11" * 32
HEIR = b"\x22" * 32


@given(
    t0=st.integers(min_value=0, max_value=2**40),
    steps=st.lists(st.integers(min_value=-10_000, max_value=10_000), min_size=1, max_size=30),
)
def test_heartbeat_is_monotonic(t0, steps):
    program, clock = _program(t0)
    program.initialize_vault(OWNER, b"\x00" * 32, HEIR, bytes(80), 3600)
    last = t0
    for delta in steps:
        clock.advance(delta)
        ts = program.ping(OWNER)
        assert ts >= last
        assert ts == max(last, clock.now())
        last = ts
    assert program.get_vault(OWNER).last_heartbeat_timestamp == last


@given(caller=ID.filter(lambda c: c != OWNER), advance=st.integers(min_value=1, max_value=10**6))
def test_non_owner_cannot_heartbeat(caller, advance):
    program, clock = _program(1_000)
    before = program.initialize_vault(OWNER, b"\x00" * 32, HEIR, bytes(80), 60)
    clock.advance(advance)
    with pytest.raises(Unauthorized):
        program.ping(caller, owner=OWNER)
    assert program.get_vault(OWNER) == before
