"""
charon.zk.snarkjs
=================

Conversions from snarkjs JSON artifacts to Charon's byte-exact wire layout.

- `proof_to_wire(proof_json)` → (proof_a, proof_b, proof_c)
  `pi_a` is negated, `pi_b` limbs are re-ordered imaginary-first.
- `public_to_wire(public_json)` → list of 32-byte big-endian field elements
  (the first one is the heir commitment).
- `vk_to_wire(vk_json)` → dict of 64/128-byte words, the constant table a
  ledger deployment compiles in.

Coordinates may be decimal strings, 0x-hex strings or ints.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

from .curve import G1Point, G2Point, encode_g1, encode_g2, g1_from_ints, g1_neg, g2_from_ints
from .field import CURVE_ORDER, FE_BYTE_LEN

Num = Union[int, str]


def to_int(z: Num) -> int:
    if isinstance(z, int):
        return z
    s = str(z).strip().lower()
    return int(s, 16) if s.startswith("0x") else int(s)


def g1_from_json(v: Sequence[Num], what: str) -> G1Point:
    return g1_from_ints(to_int(v[0]), to_int(v[1]), what=what)


def g2_from_json(v: Sequence[Sequence[Num]], what: str) -> G2Point:
    """G2 from snarkjs `[[x.c0, x.c1], [y.c0, y.c1], ...]`; extra projective rows are ignored."""
    return g2_from_ints(to_int(v[0][0]), to_int(v[0][1]), to_int(v[1][0]), to_int(v[1][1]), what=what)


def proof_to_wire(proof_json: Mapping[str, Any]) -> Tuple[bytes, bytes, bytes]:
    """Convert a snarkjs Groth16 proof to (proof_a, proof_b, proof_c) bytes."""
    if isinstance(proof_json.get("proof"), Mapping):
        proof_json = proof_json["proof"]
    a = g1_from_json(proof_json["pi_a"], "pi_a")
    b = g2_from_json(proof_json["pi_b"], "pi_b")
    c = g1_from_json(proof_json["pi_c"], "pi_c")
    return encode_g1(g1_neg(a)), encode_g2(b), encode_g1(c)


def public_to_wire(public_json: Sequence[Num]) -> List[bytes]:
    out: List[bytes] = []
    for i, s in enumerate(public_json):
        n = to_int(s)
        if not (0 <= n < CURVE_ORDER):
            raise ValueError(f"public signal {i} is not a canonical scalar")
        out.append(n.to_bytes(FE_BYTE_LEN, "big"))
    return out


def vk_to_wire(vk_json: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "alpha_g1": encode_g1(g1_from_json(vk_json["vk_alpha_1"], "vk_alpha_1")),
        "beta_g2": encode_g2(g2_from_json(vk_json["vk_beta_2"], "vk_beta_2")),
        "gamma_g2": encode_g2(g2_from_json(vk_json["vk_gamma_2"], "vk_gamma_2")),
        "delta_g2": encode_g2(g2_from_json(vk_json["vk_delta_2"], "vk_delta_2")),
        "ic": [encode_g1(g1_from_json(p, f"IC[{i}]")) for i, p in enumerate(vk_json["IC"])],
    }


__all__ = ["to_int", "g1_from_json", "g2_from_json", "proof_to_wire", "public_to_wire", "vk_to_wire"]
