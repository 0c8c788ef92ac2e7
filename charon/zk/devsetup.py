"""
charon.zk.devsetup
==================

A deterministic *development* trusted setup for the heir circuit.

The toxic waste (alpha, beta, gamma, delta and the IC scalars) is derived
from fixed labels, so anyone can reproduce it. That makes the resulting key
worthless for protecting real secrets and exactly right for devnet and tests:
knowing the trapdoor, the ceremony can produce a valid proof for *any*
commitment without running a circuit.

For a public input x and prover randomness (r_a, r_b) the simulated proof is

    A = r_a·G1,   B = r_b·G2,
    C = (r_a·r_b − alpha·beta − (ic0 + x·ic1)·gamma) / delta · G1

which satisfies e(A, B) = e(alpha, beta)·e(VK_x, gamma)·e(C, delta).
Proofs are returned in the wire layout, with A negated.

Never point a non-devnet deployment at this key; `charon.core.config`
refuses to fall back to it outside devnet.
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple, Union

from py_ecc.optimized_bn128 import G1, G2, multiply

from .curve import encode_g1, encode_g2, g1_neg
from .field import CURVE_ORDER, decode_fr
from .verifying_key import VerifyingKey

DEV_LABEL = b"charon/devnet-ceremony/v1"


def _scalar(label: bytes) -> int:
    """Hash a label to a non-zero scalar mod r."""
    n = int.from_bytes(hashlib.sha256(label).digest(), "big") % CURVE_ORDER
    return n or 1


@dataclass(frozen=True)
class Trapdoor:
    alpha: int
    beta: int
    gamma: int
    delta: int
    ic: Tuple[int, ...]

    @classmethod
    def from_label(cls, label: bytes, n_public: int = 1) -> "Trapdoor":
        return cls(
            alpha=_scalar(label + b"/alpha"),
            beta=_scalar(label + b"/beta"),
            gamma=_scalar(label + b"/gamma"),
            delta=_scalar(label + b"/delta"),
            ic=tuple(_scalar(label + b"/ic/%d" % i) for i in range(n_public + 1)),
        )


@dataclass(frozen=True)
class WireProof:
    """A proof in the byte layout `claim` accepts."""

    a: bytes  # 64 bytes, negated A
    b: bytes  # 128 bytes
    c: bytes  # 64 bytes

    def as_tuple(self) -> Tuple[bytes, bytes, bytes]:
        return self.a, self.b, self.c


class DevCeremony:
    def __init__(self, trapdoor: Trapdoor) -> None:
        self.trapdoor = trapdoor
        self.vk = VerifyingKey(
            alpha_g1=multiply(G1, trapdoor.alpha),
            beta_g2=multiply(G2, trapdoor.beta),
            gamma_g2=multiply(G2, trapdoor.gamma),
            delta_g2=multiply(G2, trapdoor.delta),
            ic=tuple(multiply(G1, s) for s in trapdoor.ic),
        )

    def prove(
        self,
        commitment: Union[bytes, int],
        *,
        seed: Optional[bytes] = None,
    ) -> WireProof:
        """
        Produce a valid proof for the public input `commitment`.

        `seed` makes the prover randomness deterministic; without it fresh
        randomness is drawn, so two proofs of the same statement differ.
        """
        td = self.trapdoor
        if len(td.ic) != 2:
            raise ValueError("prove() supports the single-input heir circuit only")
        x = decode_fr(commitment) if isinstance(commitment, (bytes, bytearray)) else int(commitment)
        if not (0 <= x < CURVE_ORDER):
            raise ValueError("commitment is not a canonical scalar")

        if seed is None:
            r_a = secrets.randbelow(CURVE_ORDER - 1) + 1
            r_b = secrets.randbelow(CURVE_ORDER - 1) + 1
        else:
            r_a = _scalar(DEV_LABEL + b"/r_a/" + seed)
            r_b = _scalar(DEV_LABEL + b"/r_b/" + seed)

        vk_x = (td.ic[0] + x * td.ic[1]) % CURVE_ORDER
        numer = (r_a * r_b - td.alpha * td.beta - vk_x * td.gamma) % CURVE_ORDER
        c = numer * pow(td.delta, -1, CURVE_ORDER) % CURVE_ORDER

        A = multiply(G1, r_a)
        B = multiply(G2, r_b)
        C = multiply(G1, c) if c else None
        return WireProof(
            a=encode_g1(g1_neg(A)),
            b=encode_g2(B),
            c=encode_g1(C) if C is not None else bytes(64),
        )


@lru_cache(maxsize=None)
def dev_ceremony(label: bytes = DEV_LABEL) -> DevCeremony:
    """The (cached) development ceremony for `label`."""
    return DevCeremony(Trapdoor.from_label(label))


__all__ = ["DEV_LABEL", "Trapdoor", "WireProof", "DevCeremony", "dev_ceremony"]
