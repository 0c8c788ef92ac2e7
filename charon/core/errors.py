"""
Charon: core.errors
--------------------

A small, consistent error system for the vault program and its collaborators.

Design goals
------------
- One root `CharonError` with machine-friendly `code` and optional `data`.
- Concrete subclasses for every failure a caller can observe (vault lifecycle,
  proof decoding/verification, configuration, storage).
- Safe JSON representation (`to_dict`) suitable for structured logs.
- Clear separation of *retryable* vs *permanent* failures.

Every error raised by a vault operation is one of the classes below; nothing
is retried by the program itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

# ---------------------------------------------------------------------------
# Error codes & classes
# ---------------------------------------------------------------------------


class Severity(IntEnum):
    """Optional severity hint for operators/metrics."""

    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


class ErrorCode(str, Enum):
    # Generic
    INTERNAL = "CORE/INTERNAL"
    CONFIG = "CORE/CONFIG"

    # Vault lifecycle
    VAULT_NOT_FOUND = "VAULT/NOT_FOUND"
    UNAUTHORIZED = "VAULT/UNAUTHORIZED"
    DUPLICATE_VAULT = "VAULT/DUPLICATE"
    HEARTBEAT_NOT_EXPIRED = "VAULT/HEARTBEAT_NOT_EXPIRED"
    ALREADY_CLAIMED = "VAULT/ALREADY_CLAIMED"
    INVALID_ARGUMENT = "VAULT/INVALID_ARGUMENT"

    # Proofs
    INVALID_PROOF = "ZK/INVALID_PROOF"
    PROOF_VERIFICATION_FAILED = "ZK/VERIFICATION_FAILED"

    # Storage
    DB_CONFLICT = "DB/CONFLICT"
    DB_CORRUPT = "DB/CORRUPT"


@dataclass(eq=False)
class CharonError(Exception):
    """
    Root error for Charon components.

    Attributes
    ----------
    code: str
        Machine-stable error code (an ErrorCode value; enums are stored as
        their string value).
    message: str
        Human hint suitable for logs; never includes secret material.
    data: dict
        Optional machine data (owners, timestamps, sizes). JSON-serializable.
    severity: Severity
        Optional severity hint (default ERROR).
    retryable: bool
        Whether the same request may succeed later without changing inputs.
    cause: Optional[BaseException]
        Wrapped original exception; not included in equality comparison.
    """

    code: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    severity: Severity = Severity.ERROR
    retryable: bool = False
    cause: Optional[BaseException] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if isinstance(self.code, Enum):
            self.code = self.code.value
        super().__init__(f"{self.code}: {self.message}")

    # ---------------- Public API ----------------

    def with_context(self, **ctx: Any) -> "CharonError":
        """Return a *new* error of the same type with extra context merged."""
        d = dict(self.data)
        for k, v in ctx.items():
            d[k] = _coerce_json(v)
        # Subclass __init__ signatures differ; clone without calling them.
        cls = type(self)
        out = cls.__new__(cls)
        out.__dict__.update(self.__dict__)
        out.args = self.args
        out.data = d
        return out

    def to_dict(self, include_cause: bool = False) -> Dict[str, Any]:
        """JSON-safe shape suitable for structured logs."""
        out = {
            "code": self.code,
            "message": self.message,
            "data": _coerce_json(self.data),
            "severity": int(self.severity),
            "retryable": self.retryable,
        }
        if include_cause and self.cause is not None:
            out["cause"] = {
                "type": type(self.cause).__name__,
                "message": str(self.cause),
            }
        return out

    def __str__(self) -> str:  # pragma: no cover - human formatting
        parts = [f"{self.code}: {self.message}"]
        if self.data:
            preview = ", ".join(f"{k}={_preview(v)}" for k, v in self.data.items())
            parts.append(f"[{preview}]")
        return " ".join(parts)


# Concrete subclasses (thin wrappers for ergonomics)
class InternalError(CharonError):
    def __init__(self, message="internal error", **data: Any) -> None:
        super().__init__(
            code=ErrorCode.INTERNAL, message=message, data=_jsonmap(data)
        )


class ConfigError(CharonError):
    def __init__(self, message="invalid configuration", **data: Any) -> None:
        super().__init__(
            code=ErrorCode.CONFIG,
            message=message,
            data=_jsonmap(data),
            severity=Severity.CRITICAL,
        )


class VaultNotFound(CharonError):
    def __init__(self, owner: bytes | str) -> None:
        super().__init__(
            code=ErrorCode.VAULT_NOT_FOUND,
            message="no vault for owner",
            data={"owner": _coerce_json(owner)},
            severity=Severity.WARNING,
        )


class Unauthorized(CharonError):
    def __init__(self, caller: bytes | str, required: str = "owner") -> None:
        super().__init__(
            code=ErrorCode.UNAUTHORIZED,
            message=f"caller is not the vault {required}",
            data={"caller": _coerce_json(caller), "required": required},
            severity=Severity.WARNING,
        )


class DuplicateVault(CharonError):
    def __init__(self, owner: bytes | str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_VAULT,
            message="vault already exists for owner",
            data={"owner": _coerce_json(owner)},
            severity=Severity.WARNING,
        )


class HeartbeatNotExpired(CharonError):
    """The liveness window has not lapsed yet; waiting makes the claim valid."""

    def __init__(self, now: int, claimable_at: int) -> None:
        super().__init__(
            code=ErrorCode.HEARTBEAT_NOT_EXPIRED,
            message="the heartbeat interval has not expired yet",
            data={"now": now, "claimable_at": claimable_at},
            severity=Severity.INFO,
            retryable=True,
        )


class AlreadyClaimed(CharonError):
    def __init__(self, owner: bytes | str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_CLAIMED,
            message="the vault has already been claimed",
            data={"owner": _coerce_json(owner)},
            severity=Severity.WARNING,
        )


class InvalidArgument(CharonError):
    def __init__(self, message="invalid argument", **data: Any) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ARGUMENT, message=message, data=_jsonmap(data)
        )


class InvalidProof(CharonError):
    """Structurally bad proof bytes or a non-canonical public input."""

    def __init__(self, message="the provided proof is malformed", **data: Any) -> None:
        super().__init__(
            code=ErrorCode.INVALID_PROOF, message=message, data=_jsonmap(data)
        )


class ProofVerificationFailed(CharonError):
    """Well-formed proof that does not satisfy the pairing equation."""

    def __init__(self, message="proof verification failed", **data: Any) -> None:
        super().__init__(
            code=ErrorCode.PROOF_VERIFICATION_FAILED,
            message=message,
            data=_jsonmap(data),
        )


class StoreConflict(CharonError):
    def __init__(self, key: bytes, attempts: int) -> None:
        super().__init__(
            code=ErrorCode.DB_CONFLICT,
            message="record kept changing under a conditional update",
            data={"key": _coerce_json(key), "attempts": attempts},
            retryable=True,
        )


class CorruptRecord(CharonError):
    def __init__(self, message="stored record is corrupt", **data: Any) -> None:
        super().__init__(
            code=ErrorCode.DB_CORRUPT,
            message=message,
            data=_jsonmap(data),
            severity=Severity.CRITICAL,
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

T = TypeVar("T", bound=CharonError)


def wrap(exc: BaseException, *, as_: Type[T] = InternalError, **ctx: Any) -> CharonError:
    """
    Wrap any exception into a CharonError subclass, attaching context.
    If `exc` is already a CharonError it is returned unchanged.
    """
    if isinstance(exc, CharonError):
        return exc
    err = as_("wrapped exception", **ctx)  # type: ignore[call-arg]
    err.cause = exc
    return err


def _jsonmap(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: _coerce_json(v) for k, v in data.items()}


def _coerce_json(v: Any) -> Any:
    # Keep JSON primitives; hex-encode bytes; stringify the rest.
    if v is None or isinstance(v, (bool, int, float, str)):
        return v
    if isinstance(v, (bytes, bytearray, memoryview)):
        return bytes(v).hex()
    if isinstance(v, Mapping):
        return {str(k): _coerce_json(x) for k, x in v.items()}
    if isinstance(v, (list, tuple)):
        return [_coerce_json(x) for x in v]
    try:
        return str(v)
    except Exception:
        return "<unprintable>"


def _preview(v: Any, limit: int = 96) -> str:
    s = str(_coerce_json(v))
    return s if len(s) <= limit else s[:limit] + "…"


__all__ = [
    "Severity",
    "ErrorCode",
    "CharonError",
    "InternalError",
    "ConfigError",
    "VaultNotFound",
    "Unauthorized",
    "DuplicateVault",
    "HeartbeatNotExpired",
    "AlreadyClaimed",
    "InvalidArgument",
    "InvalidProof",
    "ProofVerificationFailed",
    "StoreConflict",
    "CorruptRecord",
    "wrap",
]
