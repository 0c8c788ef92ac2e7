"""
BN254 (alt_bn128) field elements: canonical 32-byte big-endian codec.

Two prime fields matter to the verifier:

- the *base* field F_p, in which curve coordinates live, and
- the *scalar* field F_r (the group order), in which public inputs live.

Decoding is strict: an input of the wrong width, or whose integer value is
not below the modulus, is rejected with `InvalidProof`. Nothing is ever
reduced modulo the field; a value ≥ modulus has a second, non-canonical
encoding and accepting it would make the wire format malleable.

References:
- EIP-196 / EIP-197 (alt_bn128 precompiles) and the Solana alt_bn128 syscalls.
"""

from __future__ import annotations

from typing import Union

from ..core.errors import InvalidProof

# Base field prime p (curve coordinates).
FIELD_MODULUS: int = (
    21888242871839275222246405745257275088696311157297823662689037894645226208583
)
# Scalar field prime r (subgroup order; public inputs).
CURVE_ORDER: int = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)

FE_BYTE_LEN = 32

BytesLike = Union[bytes, bytearray, memoryview]


def _as_bytes(data: BytesLike, what: str) -> bytes:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise InvalidProof(f"{what}: expected bytes", got=type(data).__name__)
    return bytes(data)


def _decode_canonical(data: BytesLike, modulus: int, what: str) -> int:
    raw = _as_bytes(data, what)
    if len(raw) != FE_BYTE_LEN:
        raise InvalidProof(f"{what}: expected {FE_BYTE_LEN} bytes", got=len(raw))
    n = int.from_bytes(raw, "big")
    if n >= modulus:
        raise InvalidProof(f"{what}: value is not below the field modulus")
    return n


def decode_fq(data: BytesLike, *, what: str = "coordinate") -> int:
    """Decode a canonical base-field element (curve coordinate)."""
    return _decode_canonical(data, FIELD_MODULUS, what)


def decode_fr(data: BytesLike, *, what: str = "public input") -> int:
    """Decode a canonical scalar-field element (public input)."""
    return _decode_canonical(data, CURVE_ORDER, what)


def is_canonical_fr(data: BytesLike) -> bool:
    try:
        decode_fr(data)
    except InvalidProof:
        return False
    return True


def encode_fe(n: int) -> bytes:
    """Encode a non-negative integer below p as 32 big-endian bytes."""
    if not (0 <= n < FIELD_MODULUS):
        raise ValueError("field element out of range")
    return n.to_bytes(FE_BYTE_LEN, "big")


def split_words(data: bytes, count: int) -> list[bytes]:
    """Split `data` into `count` consecutive 32-byte words (length pre-checked)."""
    return [data[i * FE_BYTE_LEN : (i + 1) * FE_BYTE_LEN] for i in range(count)]


__all__ = [
    "FIELD_MODULUS",
    "CURVE_ORDER",
    "FE_BYTE_LEN",
    "decode_fq",
    "decode_fr",
    "is_canonical_fr",
    "encode_fe",
    "split_words",
]
