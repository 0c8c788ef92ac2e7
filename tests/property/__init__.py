"""
tests.property package bootstrap.

Registers Hypothesis profiles and selects one on import:
HYPOTHESIS_PROFILE if set, else "ci" when CI is truthy, else "dev".

Usage in tests:
    from tests.property import st, given, settings

Pairing-heavy properties override `max_examples` locally with @settings.
"""
from __future__ import annotations

import os

from hypothesis import HealthCheck, Verbosity, given, settings
from hypothesis import strategies as st

_SUPPRESS = (HealthCheck.too_slow, HealthCheck.filter_too_much, HealthCheck.function_scoped_fixture)

settings.register_profile(
    "dev",
    settings(max_examples=100, deadline=None, suppress_health_check=_SUPPRESS),
)
settings.register_profile(
    "ci",
    settings(
        max_examples=200,
        deadline=None,
        suppress_health_check=_SUPPRESS,
        verbosity=Verbosity.verbose,
        derandomize=True,
    ),
)
settings.register_profile(
    "fast",
    settings(max_examples=25, deadline=None, suppress_health_check=_SUPPRESS),
)


def _truthy(v: str | None) -> bool:
    return (v or "").strip().lower() in {"1", "true", "yes", "on"}


_profile = os.getenv("HYPOTHESIS_PROFILE") or ("ci" if _truthy(os.getenv("CI")) else "dev")
settings.load_profile(_profile)

__all__ = ["given", "settings", "st"]
