# -*- coding: utf-8 -*-
"""
Property tests for proof integrity.

Flipping any single bit of a valid (proof_a, proof_b, proof_c) must make the
claim fail with InvalidProof or ProofVerificationFailed, and must leave the
vault unclaimed. Most flips are caught by decoding (non-canonical or
off-curve coordinates); the rest fail the pairing equation, which is why
these properties are marked slow and run few examples.
"""
from __future__ import annotations

import pytest

from charon.core.errors import InvalidProof, ProofVerificationFailed
from charon.db.memory import MemoryStore
from charon.vault.clock import ManualClock
from charon.vault.program import VaultProgram
from charon.vault.record import VaultState
from charon.zk.devsetup import dev_ceremony
from charon.zk.field import CURVE_ORDER
from charon.zk.groth16 import verify
from tests.property import given, settings, st

pytestmark = pytest.mark.slow

OWNER = b"\x0a" * 32
HEIR = b"\x0b" * 32
COMMITMENT = (987654321).to_bytes(32, "big")
PROOF = dev_ceremony().prove(COMMITMENT, seed=b"property")


def _flip(data: bytes, bit: int) -> bytes:
    b = bytearray(data)
    b[bit // 8] ^= 0x80 >> (bit % 8)
    return bytes(b)


@settings(max_examples=30)
@given(which=st.sampled_from(["a", "b", "c"]), data=st.data())
def test_single_bit_flip_never_claims(which, data):
    parts = {"a": PROOF.a, "b": PROOF.b, "c": PROOF.c}
    bit = data.draw(st.integers(min_value=0, max_value=len(parts[which]) * 8 - 1), label="bit")
    parts[which] = _flip(parts[which], bit)

    clock = ManualClock(0)
    program = VaultProgram(MemoryStore(), clock, dev_ceremony().vk)
    program.initialize_vault(OWNER, COMMITMENT, HEIR, bytes(80), 10)
    clock.set(11)
    with pytest.raises((InvalidProof, ProofVerificationFailed)):
        program.claim(HEIR, OWNER, parts["a"], parts["b"], parts["c"])
    assert program.state_of(OWNER) is VaultState.ACTIVE


@settings(max_examples=10)
@given(x=st.integers(min_value=0, max_value=CURVE_ORDER - 1))
def test_ceremony_proofs_verify_only_their_own_input(x):
    vk = dev_ceremony().vk
    proof = dev_ceremony().prove(x, seed=b"p")
    assert verify(*proof.as_tuple(), [x.to_bytes(32, "big")], vk)
    other = ((x + 1) % CURVE_ORDER).to_bytes(32, "big")
    assert not verify(*proof.as_tuple(), [other], vk)
