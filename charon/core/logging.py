"""
Charon: core.logging
---------------------

Structured logging with:
- JSON or concise colored text formats
- Context-local fields via `contextvars` (trace_id, network, owner, ...)
- Safe JSON serialization (datetimes, bytes → hex, Paths → str)
- Helpers to bind context fields and generate trace IDs
- Optional file logging

Usage
-----
    from charon.core import logging as clog

    clog.configure(json=False, level="INFO")  # once at process start
    log = clog.get_logger(__name__)

    with clog.trace_scope():
        clog.bind(owner=owner_key)
        log.info("vault initialized", extra={"interval": 3600})

Hosts that run each request as a unit should open a `trace_scope()` per
request so every line of that request carries the same trace_id.
"""

from __future__ import annotations

import datetime as _dt
import io
import json
import logging
import os
import sys
import threading
import traceback
import types
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict, Optional

# ----------------------------
# Context
# ----------------------------

_LOG_CONTEXT: ContextVar[Dict[str, Any]] = ContextVar("_LOG_CONTEXT", default={})

DEFAULT_CONTEXT_KEYS = (
    "trace_id",
    "network",
    "component",
    "owner",
    "caller",
)

# LogRecord attributes that are never treated as structured extras.
_RESERVED = frozenset(
    (
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "asctime",
    )
)


def context() -> Dict[str, Any]:
    """Return a *copy* of the active logging context."""
    return dict(_LOG_CONTEXT.get())


def bind(**fields: Any) -> None:
    """Merge fields into the active context."""
    cur = dict(_LOG_CONTEXT.get())
    cur.update({k: _coerce_value(v) for k, v in fields.items()})
    _LOG_CONTEXT.set(cur)


def clear_context() -> None:
    _LOG_CONTEXT.set({})


@contextmanager
def trace_scope(trace_id: Optional[str] = None):
    """
    Context manager that ensures a trace_id is present for the duration
    of the scope. Restores prior context on exit.
    """
    prev = dict(_LOG_CONTEXT.get())
    try:
        bind(trace_id=trace_id or short_uuid())
        yield
    finally:
        _LOG_CONTEXT.set(prev)


def short_uuid() -> str:
    return uuid.uuid4().hex[:12]


# ----------------------------
# JSON & Text formatters
# ----------------------------


class _SafeJSONEncoder(json.JSONEncoder):
    def default(self, o: Any) -> Any:  # type: ignore[override]
        try:
            return _coerce_value(o)
        except Exception:
            return f"<nonserializable:{type(o).__name__}>"


def _utcnow_iso() -> str:
    return _dt.datetime.now(_dt.timezone.utc).isoformat(timespec="milliseconds")


_LEVEL_TO_INT = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "NOTSET": logging.NOTSET,
}

ANSI = types.SimpleNamespace(
    RESET="\x1b[0m",
    BOLD="\x1b[1m",
    FG=types.SimpleNamespace(
        RED="\x1b[31m",
        GREEN="\x1b[32m",
        YELLOW="\x1b[33m",
        MAGENTA="\x1b[35m",
        CYAN="\x1b[36m",
        GREY="\x1b[90m",
        WHITE="\x1b[37m",
    ),
)

_LEVEL_COLOR = {
    logging.DEBUG: ANSI.FG.GREY,
    logging.INFO: ANSI.FG.GREEN,
    logging.WARNING: ANSI.FG.YELLOW,
    logging.ERROR: ANSI.FG.RED,
    logging.CRITICAL: ANSI.BOLD + ANSI.FG.MAGENTA,
}


def _supports_color(stream: io.TextIOBase) -> bool:
    try:
        return stream.isatty() and os.environ.get("NO_COLOR") is None
    except Exception:
        return False


def _coerce_value(v: Any) -> Any:
    if v is None or isinstance(v, (bool, int, float, str, list, dict)):
        return v
    if isinstance(v, (bytes, bytearray, memoryview)):
        return bytes(v).hex()
    if isinstance(v, Path):
        return str(v)
    if isinstance(v, _dt.datetime):
        if v.tzinfo is None:
            v = v.replace(tzinfo=_dt.timezone.utc)
        return v.isoformat()
    if is_dataclass(v) and not isinstance(v, type):
        return {k: _coerce_value(x) for k, x in asdict(v).items()}
    return str(v)


def _extras(record: logging.LogRecord, skip: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for k, v in record.__dict__.items():
        if k.startswith("_") or k in _RESERVED or k in skip:
            continue
        out[k] = _coerce_value(v)
    return out


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": _utcnow_iso(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "pid": os.getpid(),
            "tid": threading.get_ident(),
        }
        payload.update({k: _coerce_value(v) for k, v in context().items()})
        payload.update(_extras(record, payload))

        if record.exc_info:
            payload["err"] = "".join(
                traceback.format_exception(*record.exc_info)
            ).rstrip()

        return json.dumps(payload, cls=_SafeJSONEncoder, separators=(",", ":"))


class TextFormatter(logging.Formatter):
    """
    Human-friendly one-liner:
      2026-01-05T12:34:56.789+00:00 | INFO  | charon.vault.program | trace_id=abc123 | vault claimed
    With colors when supported.
    """

    def __init__(self, stream: io.TextIOBase):
        super().__init__()
        self._color = _supports_color(stream)

    def format(self, record: logging.LogRecord) -> str:
        ts = _utcnow_iso()
        lvl = record.levelname
        name = record.name

        ctx = context()
        ctx_str = " ".join(
            f"{k}={ctx[k]}" for k in DEFAULT_CONTEXT_KEYS if ctx.get(k) is not None
        )
        extras = _extras(record, ctx)
        extras_str = (" " + " ".join(f"{k}={v}" for k, v in extras.items())) if extras else ""

        if self._color:
            c = _LEVEL_COLOR.get(record.levelno, ANSI.FG.WHITE)
            lvl_s = f"{c}{lvl:<5}{ANSI.RESET}"
            name_s = f"{ANSI.FG.CYAN}{name}{ANSI.RESET}"
            ts_s = f"{ANSI.FG.GREY}{ts}{ANSI.RESET}"
            ctx_s = f"{ANSI.FG.GREY}{ctx_str}{ANSI.RESET}" if ctx_str else ""
        else:
            lvl_s = f"{lvl:<5}"
            name_s = name
            ts_s = ts
            ctx_s = ctx_str

        line = f"{ts_s} | {lvl_s} | {name_s}"
        if ctx_s:
            line += f" | {ctx_s}"
        line += extras_str
        line += f" | {record.getMessage()}"

        if record.exc_info:
            tb = "".join(traceback.format_exception(*record.exc_info)).rstrip()
            line += "\n" + tb
        return line


# ----------------------------
# Public setup API
# ----------------------------


def configure(
    *,
    json: Optional[bool] = None,
    level: str | int = "INFO",
    stream: io.TextIOBase = sys.stderr,
    file_path: Optional[Path | str] = None,
    propagate_existing: bool = False,
) -> None:
    """
    Configure the root logger.

    Parameters
    ----------
    json : bool | None
        If None, determined by env CHARON_LOG_FORMAT=(json|text) and TTY detection.
    level : str | int
        Minimum log level.
    stream : TextIO
        Stream for console handler (default: stderr).
    file_path : Path | str | None
        Optional path to a file to additionally write JSON logs.
    propagate_existing : bool
        If True, leave existing handlers in place. Defaults to false (fresh config).
    """
    chosen_json = _decide_json(json, stream)

    root = logging.getLogger()
    root.setLevel(_coerce_level(level))

    if not propagate_existing:
        for h in list(root.handlers):
            root.removeHandler(h)

    console = logging.StreamHandler(stream)
    console.setLevel(_coerce_level(level))
    if chosen_json:
        console.setFormatter(JSONFormatter())
    else:
        console.setFormatter(TextFormatter(stream))
    root.addHandler(console)

    if file_path:
        p = Path(file_path).expanduser()
        p.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(p, encoding="utf-8")
        fh.setLevel(_coerce_level(level))
        fh.setFormatter(JSONFormatter())
        root.addHandler(fh)


def configure_from_config(cfg: Any) -> None:
    """
    Configure logging from a `charon.core.config.Config`.
    Environment variables still win over the file values they were loaded from.
    """
    bind(network=getattr(cfg, "network", None))
    log_cfg = getattr(cfg, "logging", None)
    fmt = getattr(log_cfg, "format", None)
    use_json = _env_json_override()
    if use_json is None and fmt in ("json", "text"):
        use_json = fmt == "json"
    configure(
        json=use_json,
        level=os.environ.get("CHARON_LOG_LEVEL") or getattr(log_cfg, "level", "INFO"),
        file_path=getattr(log_cfg, "file", None),
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a standard logger. Per-operation fields go through `bind`."""
    return logging.getLogger(name or "charon")


# ----------------------------
# Internals
# ----------------------------


def _coerce_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return _LEVEL_TO_INT.get(level.upper(), logging.INFO)


def _decide_json(json_flag: Optional[bool], stream: io.TextIOBase) -> bool:
    if json_flag is not None:
        return json_flag
    env = _env_json_override()
    if env is not None:
        return env
    # JSON in non-tty (services), text when interactive
    return not _supports_color(stream)


def _env_json_override() -> Optional[bool]:
    env = os.environ.get("CHARON_LOG_FORMAT", "").strip().lower()
    if env == "json":
        return True
    if env == "text":
        return False
    return None


__all__ = [
    "bind",
    "clear_context",
    "context",
    "trace_scope",
    "short_uuid",
    "JSONFormatter",
    "TextFormatter",
    "configure",
    "configure_from_config",
    "get_logger",
]
