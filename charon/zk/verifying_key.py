"""
charon.zk.verifying_key
=======================

The Groth16 verifying key of the heir circuit.

A key is produced once by the circuit's trusted setup and never changes for a
deployment. Two input layouts are understood:

- snarkjs `verification_key.json`:
  {
    "vk_alpha_1": [ax, ay, "1"],
    "vk_beta_2":  [[bx0, bx1], [by0, by1], ["1", "0"]],
    "vk_gamma_2": [[gx0, gx1], [gy0, gy1], ["1", "0"]],
    "vk_delta_2": [[dx0, dx1], [dy0, dy1], ["1", "0"]],
    "IC": [[ic0x, ic0y, "1"], [ic1x, ic1y, "1"]],
    "nPublic": 1
  }
  (decimal strings; G2 limbs are [c0, c1]; a trailing projective "1" is ignored)

- the byte layout of the on-ledger constant table: 64-byte G1 / 128-byte G2
  words as described in `charon.zk.curve`.

The deployed key
----------------
`deployed_verifying_key()` resolves the process-wide key exactly once, from
the configured file or, on devnet only, from the development ceremony. The
result is cached for the life of the process; there is no way to replace it.
"""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from ..core import logging as clog
from ..core.errors import CharonError, ConfigError
from .curve import G1Point, G2Point, decode_g1, decode_g2
from .snarkjs import g1_from_json, g2_from_json

log = clog.get_logger(__name__)

# The heir circuit exposes a single public signal: the commitment.
N_PUBLIC_INPUTS = 1


@dataclass(frozen=True)
class VerifyingKey:
    alpha_g1: G1Point
    beta_g2: G2Point
    gamma_g2: G2Point
    delta_g2: G2Point
    ic: Tuple[G1Point, ...]  # [IC0, IC1, ..., ICn]

    def __post_init__(self) -> None:
        if len(self.ic) < 1:
            raise ValueError("verifying key needs at least IC[0]")

    @property
    def n_public(self) -> int:
        return len(self.ic) - 1


# ---------------------------
# Loaders
# ---------------------------


def load_snarkjs_vk(vk_json: Mapping[str, Any]) -> VerifyingKey:
    """Parse a snarkjs Groth16 verification key. Raises ConfigError if invalid."""
    try:
        protocol = vk_json.get("protocol", "groth16")
        if protocol != "groth16":
            raise ConfigError("verifying key is not a groth16 key", protocol=protocol)
        curve = str(vk_json.get("curve", "bn128")).lower()
        if curve not in ("bn128", "bn254", "alt_bn128"):
            raise ConfigError("verifying key is not over BN254", curve=curve)
        vk = VerifyingKey(
            alpha_g1=g1_from_json(vk_json["vk_alpha_1"], "vk_alpha_1"),
            beta_g2=g2_from_json(vk_json["vk_beta_2"], "vk_beta_2"),
            gamma_g2=g2_from_json(vk_json["vk_gamma_2"], "vk_gamma_2"),
            delta_g2=g2_from_json(vk_json["vk_delta_2"], "vk_delta_2"),
            ic=tuple(g1_from_json(p, f"IC[{i}]") for i, p in enumerate(vk_json["IC"])),
        )
    except ConfigError:
        raise
    except CharonError as e:
        raise ConfigError("verifying key point rejected", detail=e.message, **e.data) from e
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise ConfigError("malformed verifying key", detail=str(e)) from e

    n_public = vk_json.get("nPublic")
    if n_public is not None and int(n_public) != vk.n_public:
        raise ConfigError("nPublic disagrees with IC length", nPublic=n_public, ic=len(vk.ic))
    return vk


def load_wire_vk(
    alpha_g1: bytes,
    beta_g2: bytes,
    gamma_g2: bytes,
    delta_g2: bytes,
    ic: Sequence[bytes],
) -> VerifyingKey:
    """Build a key from the fixed-width byte table (64-byte G1 / 128-byte G2)."""
    try:
        return VerifyingKey(
            alpha_g1=decode_g1(alpha_g1, what="vk_alpha_g1"),
            beta_g2=decode_g2(beta_g2, what="vk_beta_g2"),
            gamma_g2=decode_g2(gamma_g2, what="vk_gamma_g2"),
            delta_g2=decode_g2(delta_g2, what="vk_delta_g2"),
            ic=tuple(decode_g1(p, what=f"vk_ic[{i}]") for i, p in enumerate(ic)),
        )
    except CharonError as e:
        raise ConfigError("verifying key point rejected", detail=e.message, **e.data) from e


def load_vk_file(path: Union[str, Path]) -> VerifyingKey:
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except OSError as e:
        raise ConfigError("cannot read verifying key", path=str(p), detail=str(e)) from e
    except json.JSONDecodeError as e:
        raise ConfigError("verifying key is not valid JSON", path=str(p), detail=str(e)) from e
    return load_snarkjs_vk(data)


# ---------------------------
# Process-wide deployed key
# ---------------------------

_DEPLOYED: Optional[VerifyingKey] = None
_DEPLOYED_LOCK = threading.Lock()


def deployed_verifying_key(cfg: Any = None) -> VerifyingKey:
    """
    Return the process-wide verifying key, resolving it on first use.

    Resolution (first call only): `cfg.zk.verifying_key_path` if set, else
    the development ceremony when `cfg.network == "devnet"`. `cfg` defaults
    to `charon.core.config.load()`. Subsequent calls ignore `cfg`.
    """
    global _DEPLOYED
    if _DEPLOYED is not None:
        return _DEPLOYED
    with _DEPLOYED_LOCK:
        if _DEPLOYED is None:
            if cfg is None:
                from ..core.config import load

                cfg = load()
            _DEPLOYED = _resolve(cfg)
    return _DEPLOYED


def _resolve(cfg: Any) -> VerifyingKey:
    path = cfg.zk.verifying_key_path
    if path is not None:
        vk = load_vk_file(path)
        source = str(path)
    elif cfg.network == "devnet":
        from .devsetup import dev_ceremony

        vk = dev_ceremony().vk
        source = "devnet ceremony"
    else:
        raise ConfigError("no verifying key configured", network=cfg.network)

    if vk.n_public != N_PUBLIC_INPUTS:
        raise ConfigError(
            "verifying key has the wrong number of public inputs",
            expected=N_PUBLIC_INPUTS,
            got=vk.n_public,
        )
    log.info("verifying key loaded", extra={"source": source, "network": cfg.network})
    return vk


__all__ = [
    "N_PUBLIC_INPUTS",
    "VerifyingKey",
    "load_snarkjs_vk",
    "load_wire_vk",
    "load_vk_file",
    "deployed_verifying_key",
]
