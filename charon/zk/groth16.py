"""
charon.zk.groth16
=================

Stateless Groth16 verifier for BN254 over the byte-exact wire layout.

Verification equation (standard form)
-------------------------------------
    e(A, B) == e(alpha1, beta2) * e(VK_x, gamma2) * e(C, delta2)
    VK_x    =  IC[0] + sum_i input_i * IC[i+1]

Wire convention
---------------
Claimants submit `proof_a` already negated (the client computes (x, p - y)
from snarkjs `pi_a`), so with `proof_a = -A` the equation becomes a single
product check in GT:

    e(proof_a, B) * e(alpha1, beta2) * e(VK_x, gamma2) * e(C, delta2) == 1

evaluated as four Miller loops and one final exponentiation.

Outcomes
--------
- malformed bytes, off-curve / wrong-subgroup points, a non-canonical or
  wrongly-counted public input → `InvalidProof`, raised before any pairing
  work is done;
- a well-formed proof that fails the equation → `ProofVerificationFailed`.

`verify_proof` raises; `verify` is the boolean convenience form.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from ..core import logging as clog
from ..core.errors import CharonError, InvalidProof, ProofVerificationFailed
from .curve import (
    G1_BYTES,
    G2_BYTES,
    G1Point,
    G2Point,
    decode_g1,
    decode_g2,
    g1_add,
    g1_mul,
    pairing_product_is_one,
)
from .field import BytesLike, decode_fr
from .verifying_key import VerifyingKey

log = clog.get_logger(__name__)

PROOF_A_BYTES = G1_BYTES
PROOF_B_BYTES = G2_BYTES
PROOF_C_BYTES = G1_BYTES


@dataclass(frozen=True)
class Proof:
    neg_a: G1Point  # -A as carried on the wire
    b: G2Point
    c: G1Point


def decode_proof(proof_a: BytesLike, proof_b: BytesLike, proof_c: BytesLike) -> Proof:
    return Proof(
        neg_a=decode_g1(proof_a, what="proof_a"),
        b=decode_g2(proof_b, what="proof_b"),
        c=decode_g1(proof_c, what="proof_c"),
    )


def decode_public_inputs(inputs: Sequence[BytesLike], vk: VerifyingKey) -> Tuple[int, ...]:
    if len(inputs) != vk.n_public:
        raise InvalidProof(
            "wrong number of public inputs", expected=vk.n_public, got=len(inputs)
        )
    return tuple(decode_fr(x, what=f"public input {i}") for i, x in enumerate(inputs))


def compute_vk_x(ic: Sequence[G1Point], inputs: Sequence[int]) -> G1Point:
    """VK_x = IC[0] + sum_i inputs[i] * IC[i+1] in G1."""
    if len(ic) != len(inputs) + 1:
        raise InvalidProof(f"IC length {len(ic)} != 1 + {len(inputs)} inputs")
    acc = ic[0]
    for point, s in zip(ic[1:], inputs):
        if s:
            acc = g1_add(acc, g1_mul(point, s))
    return acc


def verify_proof(
    proof_a: BytesLike,
    proof_b: BytesLike,
    proof_c: BytesLike,
    public_inputs: Sequence[BytesLike],
    vk: VerifyingKey,
) -> None:
    """
    Verify a wire-format proof against `vk`. Returns None on success.

    Raises
    ------
    InvalidProof
        If any input fails to decode.
    ProofVerificationFailed
        If the pairing equation does not hold.
    """
    proof = decode_proof(proof_a, proof_b, proof_c)
    inputs = decode_public_inputs(public_inputs, vk)
    vk_x = compute_vk_x(vk.ic, inputs)

    ok = pairing_product_is_one(
        [
            (proof.neg_a, proof.b),
            (vk.alpha_g1, vk.beta_g2),
            (vk_x, vk.gamma_g2),
            (proof.c, vk.delta_g2),
        ]
    )
    if not ok:
        raise ProofVerificationFailed()
    log.debug("groth16 proof verified")


def verify(
    proof_a: BytesLike,
    proof_b: BytesLike,
    proof_c: BytesLike,
    public_inputs: Sequence[BytesLike],
    vk: VerifyingKey,
) -> bool:
    """Boolean form of `verify_proof`: True iff the proof is valid."""
    try:
        verify_proof(proof_a, proof_b, proof_c, public_inputs, vk)
    except CharonError as e:
        log.debug("groth16 proof rejected", extra={"reason": e.code})
        return False
    return True


__all__ = [
    "PROOF_A_BYTES",
    "PROOF_B_BYTES",
    "PROOF_C_BYTES",
    "Proof",
    "decode_proof",
    "decode_public_inputs",
    "compute_vk_x",
    "verify_proof",
    "verify",
]
