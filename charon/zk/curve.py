"""
charon.zk.curve
===============

BN254 (alt_bn128) point codec and pairing-product check, backed by
`py_ecc.optimized_bn128`.

Wire layout
-----------
- G1: 64 bytes  = x ‖ y                       (each 32-byte big-endian, < p)
- G2: 128 bytes = x.c1 ‖ x.c0 ‖ y.c1 ‖ y.c0   (imaginary limb first)
- The all-zero encoding is the point at infinity, as with the EIP-196/197
  precompiles and the Solana alt_bn128 syscalls.

Validation on decode
--------------------
- every coordinate is canonical (< p);
- the point satisfies the curve equation (y² = x³ + 3 over F_p for G1,
  y² = x³ + 3/(9+u) over F_p² for G2);
- G2 points lie in the order-r subgroup ([r]Q = O). G1 has cofactor 1, so
  the curve check already implies subgroup membership.

Any failure raises `InvalidProof`; a decoded point is always safe to pair.

Points are the opaque projective tuples `py_ecc` understands.
"""

from __future__ import annotations

from typing import Any, Iterable, Tuple

from py_ecc.optimized_bn128 import (
    FQ,
    FQ2,
    FQ12,
    Z1,
    Z2,
    add,
    b,
    b2,
    final_exponentiate,
    is_inf,
    is_on_curve,
    multiply,
    neg,
    normalize,
    pairing,
)

from ..core.errors import InvalidProof
from .field import CURVE_ORDER, FE_BYTE_LEN, BytesLike, decode_fq, encode_fe, split_words

G1Point = Any
G2Point = Any

G1_BYTES = 2 * FE_BYTE_LEN
G2_BYTES = 4 * FE_BYTE_LEN

__all__ = [
    "G1Point",
    "G2Point",
    "G1_BYTES",
    "G2_BYTES",
    "decode_g1",
    "decode_g2",
    "encode_g1",
    "encode_g2",
    "g1_from_ints",
    "g2_from_ints",
    "in_g2_subgroup",
    "g1_add",
    "g1_mul",
    "g1_neg",
    "pairing_product_is_one",
]


def _exact(data: BytesLike, size: int, what: str) -> bytes:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise InvalidProof(f"{what}: expected bytes", got=type(data).__name__)
    raw = bytes(data)
    if len(raw) != size:
        raise InvalidProof(f"{what}: expected {size} bytes", got=len(raw))
    return raw


# -------------------------
# Construction from integers
# -------------------------


def g1_from_ints(x: int, y: int, *, what: str = "G1 point") -> G1Point:
    """Build and validate a G1 point from affine integer coordinates."""
    if x == 0 and y == 0:
        return Z1
    P = (FQ(x), FQ(y), FQ.one())
    if not is_on_curve(P, b):
        raise InvalidProof(f"{what}: not on curve")
    return P


def g2_from_ints(x_c0: int, x_c1: int, y_c0: int, y_c1: int, *, what: str = "G2 point") -> G2Point:
    """Build and validate a G2 point from affine F_p² limbs (c0 + c1·u)."""
    if x_c0 == 0 and x_c1 == 0 and y_c0 == 0 and y_c1 == 0:
        return Z2
    Q = (FQ2([x_c0, x_c1]), FQ2([y_c0, y_c1]), FQ2.one())
    if not is_on_curve(Q, b2):
        raise InvalidProof(f"{what}: not on curve")
    if not in_g2_subgroup(Q):
        raise InvalidProof(f"{what}: not in the prime-order subgroup")
    return Q


def in_g2_subgroup(Q: G2Point) -> bool:
    return bool(is_inf(multiply(Q, CURVE_ORDER)))


# -------------------------
# Bytes codec
# -------------------------


def decode_g1(data: BytesLike, *, what: str = "G1 point") -> G1Point:
    raw = _exact(data, G1_BYTES, what)
    x_b, y_b = split_words(raw, 2)
    x = decode_fq(x_b, what=f"{what}.x")
    y = decode_fq(y_b, what=f"{what}.y")
    return g1_from_ints(x, y, what=what)


def decode_g2(data: BytesLike, *, what: str = "G2 point") -> G2Point:
    raw = _exact(data, G2_BYTES, what)
    x_c1_b, x_c0_b, y_c1_b, y_c0_b = split_words(raw, 4)
    x_c1 = decode_fq(x_c1_b, what=f"{what}.x.c1")
    x_c0 = decode_fq(x_c0_b, what=f"{what}.x.c0")
    y_c1 = decode_fq(y_c1_b, what=f"{what}.y.c1")
    y_c0 = decode_fq(y_c0_b, what=f"{what}.y.c0")
    return g2_from_ints(x_c0, x_c1, y_c0, y_c1, what=what)


def _affine_g1(P: G1Point) -> Tuple[int, int]:
    x, y = normalize(P)
    return int(x), int(y)


def _affine_g2(Q: G2Point) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    x, y = normalize(Q)
    return (int(x.coeffs[0]), int(x.coeffs[1])), (int(y.coeffs[0]), int(y.coeffs[1]))


def encode_g1(P: G1Point) -> bytes:
    if is_inf(P):
        return bytes(G1_BYTES)
    x, y = _affine_g1(P)
    return encode_fe(x) + encode_fe(y)


def encode_g2(Q: G2Point) -> bytes:
    if is_inf(Q):
        return bytes(G2_BYTES)
    (x0, x1), (y0, y1) = _affine_g2(Q)
    return encode_fe(x1) + encode_fe(x0) + encode_fe(y1) + encode_fe(y0)


# -------------------------
# Group operations
# -------------------------


def g1_add(P: G1Point, Q: G1Point) -> G1Point:
    return add(P, Q)


def g1_mul(P: G1Point, k: int) -> G1Point:
    k %= CURVE_ORDER
    if k == 0:
        return Z1
    return multiply(P, k)


def g1_neg(P: G1Point) -> G1Point:
    return neg(P)


# -------------------------
# Pairing
# -------------------------


def pairing_product_is_one(pairs: Iterable[Tuple[G1Point, G2Point]]) -> bool:
    """
    Return True iff ∏ e(P_i, Q_i) == 1 in GT.

    Runs one Miller loop per pair and a single final exponentiation over the
    accumulated product. Pairs containing the point at infinity contribute the
    identity and are skipped. Inputs must already be validated points.
    """
    acc = FQ12.one()
    for P, Q in pairs:
        if is_inf(P) or is_inf(Q):
            continue
        # py_ecc expects (G2, G1)
        acc = acc * pairing(Q, P, final_exponentiate=False)
    return final_exponentiate(acc) == FQ12.one()
