"""
charon.vault: the inheritance vault lifecycle (initialize / heartbeat / claim).
"""

from .clock import Clock, ManualClock, SystemClock
from .program import VaultProgram
from .record import RECORD_SIZE, VaultRecord, VaultState

__all__ = [
    "VaultProgram",
    "VaultRecord",
    "VaultState",
    "RECORD_SIZE",
    "Clock",
    "SystemClock",
    "ManualClock",
]
