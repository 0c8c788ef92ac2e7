"""
charon.zk.tests helpers

Utilities shared by the zk tests.

Exports:
- g1_json(P) / g2_json(Q)       -> snarkjs-style coordinate lists
- snarkjs_vk_json(vk)           -> a verification_key.json dict for `vk`
- snarkjs_proof_json(A, B, C)   -> a proof.json dict (pi_a NOT negated)
- flip_bit(data, i)             -> data with bit i inverted
- configure_test_logging()

Environment toggles:
- CHARON_TEST_LOG=1  → enable DEBUG logging for charon.*
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List

from py_ecc.optimized_bn128 import is_inf, normalize


def _affine(P: Any):
    x, y = normalize(P)
    return x, y


def g1_json(P: Any) -> List[str]:
    if is_inf(P):
        return ["0", "0", "0"]
    x, y = _affine(P)
    return [str(int(x)), str(int(y)), "1"]


def g2_json(Q: Any) -> List[List[str]]:
    x, y = _affine(Q)
    return [
        [str(int(x.coeffs[0])), str(int(x.coeffs[1]))],
        [str(int(y.coeffs[0])), str(int(y.coeffs[1]))],
        ["1", "0"],
    ]


def snarkjs_vk_json(vk: Any) -> Dict[str, Any]:
    return {
        "protocol": "groth16",
        "curve": "bn128",
        "nPublic": vk.n_public,
        "vk_alpha_1": g1_json(vk.alpha_g1),
        "vk_beta_2": g2_json(vk.beta_g2),
        "vk_gamma_2": g2_json(vk.gamma_g2),
        "vk_delta_2": g2_json(vk.delta_g2),
        "IC": [g1_json(p) for p in vk.ic],
    }


def snarkjs_proof_json(A: Any, B: Any, C: Any) -> Dict[str, Any]:
    return {
        "pi_a": g1_json(A),
        "pi_b": g2_json(B),
        "pi_c": g1_json(C),
        "protocol": "groth16",
        "curve": "bn128",
    }


def flip_bit(data: bytes, i: int) -> bytes:
    b = bytearray(data)
    b[i // 8] ^= 0x80 >> (i % 8)
    return bytes(b)


def configure_test_logging() -> None:
    """Turn on DEBUG for charon.* when CHARON_TEST_LOG is set."""
    if os.getenv("CHARON_TEST_LOG", "").strip().lower() in {"1", "true", "yes", "on"}:
        logging.basicConfig(level=logging.DEBUG)
        logging.getLogger("charon").setLevel(logging.DEBUG)


__all__ = [
    "g1_json",
    "g2_json",
    "snarkjs_vk_json",
    "snarkjs_proof_json",
    "flip_bit",
    "configure_test_logging",
]
