"""
Shared pytest fixtures for the charon test-suite.

Valid proofs come from the development ceremony, which knows the trapdoor of
its verifying key and can prove any commitment without running a circuit.
"""

from __future__ import annotations

import hashlib

import pytest

from charon.core import logging as clog
from charon.db.memory import MemoryStore
from charon.vault.clock import ManualClock
from charon.vault.program import VaultProgram
from charon.zk.devsetup import dev_ceremony
from charon.zk.field import CURVE_ORDER

T0 = 1_700_000_000
INTERVAL = 3600


def identity(label: str) -> bytes:
    """A deterministic 32-byte identity for tests."""
    return hashlib.sha256(b"identity/" + label.encode()).digest()


def commitment_for(label: str) -> bytes:
    """A canonical 32-byte heir commitment derived from `label`."""
    n = int.from_bytes(hashlib.sha256(b"commitment/" + label.encode()).digest(), "big") % CURVE_ORDER
    return n.to_bytes(32, "big")


@pytest.fixture(autouse=True)
def _isolated_log_context():
    clog.clear_context()
    yield
    clog.clear_context()


@pytest.fixture(scope="session")
def ceremony():
    return dev_ceremony()


@pytest.fixture(scope="session")
def vk(ceremony):
    return ceremony.vk


@pytest.fixture
def clock():
    return ManualClock(T0)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def program(store, clock, vk):
    return VaultProgram(store, clock, vk)


@pytest.fixture
def owner():
    return identity("owner")


@pytest.fixture
def heir():
    return identity("heir")


@pytest.fixture
def commitment():
    return commitment_for("heir-secret")


@pytest.fixture
def secret():
    return bytes(range(80))


@pytest.fixture
def vault(program, owner, heir, commitment, secret):
    """An initialized vault at T0 with a one-hour interval."""
    return program.initialize_vault(owner, commitment, heir, secret, INTERVAL)


@pytest.fixture(scope="session")
def valid_proof(ceremony):
    """A valid proof for `commitment_for("heir-secret")`."""
    return ceremony.prove(commitment_for("heir-secret"), seed=b"fixture")
