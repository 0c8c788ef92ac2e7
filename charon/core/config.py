"""
Charon configuration loader.

Layered config with clear precedence:
    1) Explicit overrides passed to `load()` (highest)
    2) Environment variables (CHARON_*)
    3) Config file (TOML or JSON)
    4) Built-in defaults (lowest)

This module configures only deployment concerns:
  - network identity (devnet / testnet / mainnet)
  - record store URI
  - location of the trusted-setup verifying key
  - logging level / format / file

Nothing here is request-supplied: a configuration is resolved once when the
host process starts.
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import ConfigError

try:  # py311+
    import tomllib as _toml  # type: ignore[attr-defined]
except Exception:  # py310
    _toml = None  # type: ignore[assignment]


# ------------------------------
# Defaults & helpers
# ------------------------------

NETWORKS = ("devnet", "testnet", "mainnet")
# devnet must be chosen explicitly: it is the only network that trusts the
# development ceremony key.
DEFAULT_NETWORK = "mainnet"
DEFAULT_DB_URI = "memory://"
LOG_FORMATS = ("auto", "json", "text")


def _expand(p: str | Path) -> Path:
    return Path(p).expanduser().resolve()


# ------------------------------
# Typed configuration model
# ------------------------------


@dataclass
class DBConfig:
    uri: str = DEFAULT_DB_URI  # memory:// or sqlite:////abs/path/charon.db

    def validate(self) -> None:
        if self.uri == "memory://" or self.uri.startswith("sqlite:///"):
            return
        raise ConfigError(
            "unsupported db uri; use memory:// or sqlite:///path/to.db", uri=self.uri
        )


@dataclass
class ZKConfig:
    # snarkjs verification_key.json from the trusted setup
    verifying_key_path: Optional[Path] = None


@dataclass
class LoggingConfig:
    level: str = "INFO"
    format: str = "auto"
    file: Optional[Path] = None

    def validate(self) -> None:
        if self.format not in LOG_FORMATS:
            raise ConfigError("invalid log format", format=self.format, allowed=list(LOG_FORMATS))


@dataclass
class Config:
    network: str = DEFAULT_NETWORK
    db: DBConfig = field(default_factory=DBConfig)
    zk: ZKConfig = field(default_factory=ZKConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def is_devnet(self) -> bool:
        return self.network == "devnet"

    def to_dict(self) -> Dict[str, Any]:
        def _normalize(obj: Any) -> Any:
            if isinstance(obj, Path):
                return str(obj)
            if isinstance(obj, list):
                return [_normalize(i) for i in obj]
            if isinstance(obj, dict):
                return {k: _normalize(v) for k, v in obj.items()}
            return obj

        return _normalize(asdict(self))


# ------------------------------
# File loader (TOML / JSON)
# ------------------------------


def _load_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError("config file not found", path=str(path))
    suffix = path.suffix.lower()
    with path.open("rb") as f:
        if suffix in {".toml", ".tml"}:
            if not _toml:
                raise ConfigError("tomllib is unavailable (Python < 3.11); use a JSON config")
            return _toml.load(f)  # type: ignore[no-any-return]
        if suffix == ".json":
            return json.load(f)
    raise ConfigError("unsupported config format; use .toml or .json", suffix=suffix)


def _merge_dict(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """Nested dict merge: values in b override a."""
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge_dict(out[k], v)  # type: ignore[arg-type]
        else:
            out[k] = v
    return out


def _env_layer() -> Dict[str, Any]:
    env: Dict[str, Any] = {}
    if "CHARON_NETWORK" in os.environ:
        env["network"] = os.environ["CHARON_NETWORK"].strip().lower()
    if "CHARON_DB_URI" in os.environ:
        env.setdefault("db", {})["uri"] = os.environ["CHARON_DB_URI"].strip()
    if "CHARON_VK_PATH" in os.environ:
        env.setdefault("zk", {})["verifying_key_path"] = os.environ["CHARON_VK_PATH"].strip()
    if "CHARON_LOG_LEVEL" in os.environ:
        env.setdefault("logging", {})["level"] = os.environ["CHARON_LOG_LEVEL"].strip().upper()
    if "CHARON_LOG_FORMAT" in os.environ:
        env.setdefault("logging", {})["format"] = os.environ["CHARON_LOG_FORMAT"].strip().lower()
    if "CHARON_LOG_FILE" in os.environ:
        env.setdefault("logging", {})["file"] = os.environ["CHARON_LOG_FILE"].strip()
    return env


# ------------------------------
# Main loader
# ------------------------------


def load(config_file: Optional[str | Path] = None, **overrides: Any) -> Config:
    """
    Load the configuration.

    Precedence: overrides > env > file > defaults.

    Parameters
    ----------
    config_file : str | Path | None
        Optional path to a TOML or JSON file with keys:
          network: "devnet" | "testnet" | "mainnet"
          db:      { uri }
          zk:      { verifying_key_path }
          logging: { level, format, file }

    overrides : Any
        Keyword overrides, e.g. load(network="testnet", db={"uri": "sqlite:////tmp/v.db"})
    """
    base: Dict[str, Any] = asdict(Config())

    if config_file:
        base = _merge_dict(base, _load_file(_expand(config_file)))
    base = _merge_dict(base, _env_layer())
    if overrides:
        base = _merge_dict(base, overrides)

    try:
        vk_path = base["zk"].get("verifying_key_path")
        log_file = base["logging"].get("file")
        cfg = Config(
            network=str(base["network"]).strip().lower(),
            db=DBConfig(uri=str(base["db"]["uri"])),
            zk=ZKConfig(verifying_key_path=_expand(vk_path) if vk_path else None),
            logging=LoggingConfig(
                level=str(base["logging"]["level"]).upper(),
                format=str(base["logging"]["format"]).lower(),
                file=_expand(log_file) if log_file else None,
            ),
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise ConfigError("malformed configuration", detail=str(e)) from e

    _validate_config(cfg)
    return cfg


def _validate_config(cfg: Config) -> None:
    if cfg.network not in NETWORKS:
        raise ConfigError("unknown network", network=cfg.network, allowed=list(NETWORKS))
    cfg.db.validate()
    cfg.logging.validate()
    if not cfg.is_devnet and cfg.zk.verifying_key_path is None:
        raise ConfigError(
            "a verifying key path is required outside devnet", network=cfg.network
        )
    if cfg.zk.verifying_key_path is not None and not cfg.zk.verifying_key_path.exists():
        raise ConfigError(
            "verifying key file not found", path=str(cfg.zk.verifying_key_path)
        )


# ------------------------------
# CLI helper
# ------------------------------


def main(argv: List[str] | None = None) -> int:
    """
    CLI usage:

        CHARON_NETWORK=devnet python -m charon.core.config  # devnet defaults; print JSON
        python -m charon.core.config path/to/config.toml    # load file; print JSON
    """
    argv = list(argv if argv is not None else sys.argv[1:])
    path = argv[0] if argv else None
    try:
        cfg = load(path)
    except ConfigError as e:
        print(f"config error: {e}", file=sys.stderr)
        return 2
    print(json.dumps(cfg.to_dict(), indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
