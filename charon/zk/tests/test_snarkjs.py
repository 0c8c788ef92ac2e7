import pytest
from py_ecc.optimized_bn128 import G1, G2, multiply, neg

from charon.core.errors import InvalidProof
from charon.zk.curve import encode_g1, encode_g2
from charon.zk.field import CURVE_ORDER
from charon.zk.groth16 import verify
from charon.zk.snarkjs import proof_to_wire, public_to_wire, vk_to_wire
from charon.zk.tests import g1_json, snarkjs_proof_json, snarkjs_vk_json


def test_proof_to_wire_negates_pi_a():
    A, B, C = multiply(G1, 3), multiply(G2, 4), multiply(G1, 5)
    a, b, c = proof_to_wire(snarkjs_proof_json(A, B, C))
    assert a == encode_g1(neg(A))
    assert b == encode_g2(B)
    assert c == encode_g1(C)


def test_proof_to_wire_accepts_wrapped_document():
    A, B, C = G1, G2, G1
    doc = {"proof": snarkjs_proof_json(A, B, C), "publicSignals": ["1"]}
    assert proof_to_wire(doc)[0] == encode_g1(neg(A))


def test_proof_to_wire_rejects_off_curve():
    doc = snarkjs_proof_json(G1, G2, G1)
    doc["pi_c"] = ["1", "3", "1"]
    with pytest.raises(InvalidProof):
        proof_to_wire(doc)


def test_public_to_wire():
    out = public_to_wire(["7", "0x10", 3])
    assert out == [n.to_bytes(32, "big") for n in (7, 16, 3)]
    with pytest.raises(ValueError):
        public_to_wire([str(CURVE_ORDER)])


def test_vk_to_wire_shapes(vk):
    table = vk_to_wire(snarkjs_vk_json(vk))
    assert len(table["alpha_g1"]) == 64
    assert all(len(table[k]) == 128 for k in ("beta_g2", "gamma_g2", "delta_g2"))
    assert [len(p) for p in table["ic"]] == [64, 64]
    assert g1_json(vk.alpha_g1)[2] == "1"


@pytest.mark.slow
def test_snarkjs_style_proof_verifies_after_conversion(ceremony, vk):
    # Rebuild an un-negated snarkjs proof from a ceremony proof and convert it back.
    from charon.zk.curve import decode_g1, decode_g2

    wire = ceremony.prove(42, seed=b"snarkjs")
    A = neg(decode_g1(wire.a))
    doc = snarkjs_proof_json(A, decode_g2(wire.b), decode_g1(wire.c))
    a, b, c = proof_to_wire(doc)
    assert (a, b, c) == wire.as_tuple()
    assert verify(a, b, c, public_to_wire(["42"]), vk)
