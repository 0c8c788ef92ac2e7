"""
charon.zk: BN254 primitives and the Groth16 verifier that gates claims.

Public surface
--------------
- verify_proof(proof_a, proof_b, proof_c, public_inputs, vk) -> None (raises)
- verify(...) -> bool
- VerifyingKey, deployed_verifying_key()

Modules
-------
- field          canonical 32-byte field-element decoding
- curve          G1/G2 codec with curve and subgroup checks; pairing product
- verifying_key  key type, loaders, process-wide deployed key
- groth16        the verifier
- devsetup       reproducible development ceremony (devnet/tests only)
- snarkjs        snarkjs JSON → wire layout
"""

from .groth16 import verify, verify_proof
from .verifying_key import VerifyingKey, deployed_verifying_key

__all__ = ["verify", "verify_proof", "VerifyingKey", "deployed_verifying_key"]
