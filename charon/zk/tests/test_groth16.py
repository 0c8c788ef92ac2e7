"""
Groth16 verifier against the development ceremony.

The ceremony knows its trapdoor, so it can produce a valid proof for any
commitment; everything negative is derived from such a proof.
"""

import pytest
from py_ecc.optimized_bn128 import G1, multiply

from charon.core.errors import InvalidProof, ProofVerificationFailed
from charon.zk.curve import decode_g1, encode_g1, g1_neg
from charon.zk.field import CURVE_ORDER
from charon.zk.groth16 import compute_vk_x, verify, verify_proof
from charon.zk.tests import configure_test_logging, flip_bit

configure_test_logging()

pytestmark = pytest.mark.slow

X = (123456789).to_bytes(32, "big")


@pytest.fixture(scope="module")
def proof(ceremony):
    return ceremony.prove(X, seed=b"groth16-tests")


def test_valid_proof_verifies(proof, vk):
    verify_proof(proof.a, proof.b, proof.c, [X], vk)
    assert verify(*proof.as_tuple(), [X], vk)


def test_fresh_randomness_gives_distinct_valid_proofs(ceremony, vk):
    p1 = ceremony.prove(X)
    p2 = ceremony.prove(X)
    assert p1 != p2
    assert verify(*p1.as_tuple(), [X], vk)
    assert verify(*p2.as_tuple(), [X], vk)


def test_wrong_public_input_fails_equation(proof, vk):
    other = (123456790).to_bytes(32, "big")
    with pytest.raises(ProofVerificationFailed):
        verify_proof(proof.a, proof.b, proof.c, [other], vk)


def test_unnegated_a_fails(proof, vk):
    # a snarkjs pi_a submitted as-is (without negation) must not verify
    a = encode_g1(g1_neg(decode_g1(proof.a)))
    with pytest.raises(ProofVerificationFailed):
        verify_proof(a, proof.b, proof.c, [X], vk)


def test_valid_points_wrong_proof_fails(proof, vk):
    c = encode_g1(multiply(G1, 5))
    with pytest.raises(ProofVerificationFailed):
        verify_proof(proof.a, proof.b, c, [X], vk)


def test_non_canonical_public_input_is_invalid_proof(vk, ceremony):
    # x + r is congruent to x; it must be rejected before any pairing
    proof = ceremony.prove(5, seed=b"alias")
    aliased = (5 + CURVE_ORDER).to_bytes(32, "big")
    with pytest.raises(InvalidProof):
        verify_proof(proof.a, proof.b, proof.c, [aliased], vk)


@pytest.mark.parametrize("n_inputs", [0, 2])
def test_wrong_input_count(proof, vk, n_inputs):
    with pytest.raises(InvalidProof):
        verify_proof(proof.a, proof.b, proof.c, [X] * n_inputs, vk)


@pytest.mark.parametrize("which", ["a", "b", "c"])
def test_truncated_element_is_invalid_proof(proof, vk, which):
    parts = dict(a=proof.a, b=proof.b, c=proof.c)
    parts[which] = parts[which][:-1]
    with pytest.raises(InvalidProof):
        verify_proof(parts["a"], parts["b"], parts["c"], [X], vk)


@pytest.mark.parametrize("which,bit", [("a", 511), ("b", 1000), ("c", 300), ("a", 7)])
def test_bit_flips_never_verify(proof, vk, which, bit):
    parts = dict(a=proof.a, b=proof.b, c=proof.c)
    parts[which] = flip_bit(parts[which], bit)
    with pytest.raises((InvalidProof, ProofVerificationFailed)):
        verify_proof(parts["a"], parts["b"], parts["c"], [X], vk)
    assert not verify(parts["a"], parts["b"], parts["c"], [X], vk)


def test_compute_vk_x_matches_linear_combination(vk):
    from py_ecc.optimized_bn128 import add, eq

    x = 99
    assert eq(compute_vk_x(vk.ic, [x]), add(vk.ic[0], multiply(vk.ic[1], x)))
    assert eq(compute_vk_x(vk.ic, [0]), vk.ic[0])
