"""
Charon: a custodian-free inheritance vault.

An owner deposits a secret pre-encrypted to an heir. The owner keeps the
vault alive with heartbeats; once they stop for longer than the configured
interval, anyone holding a Groth16 proof of knowledge of the heir's committed
preimage may flip the vault to *claimed*, exactly once.

Packages
--------
- charon.core   errors, logging, configuration
- charon.zk     BN254 field/curve codec and the Groth16 verifier
- charon.db     record store contract and backends
- charon.vault  the record, the clock and the lifecycle program
"""

from .core.version import __version__

__all__ = ["__version__"]
