from __future__ import annotations

"""
Record store interface & key prefixes
=====================================

The vault program keeps exactly one record per owner and needs only three
primitive operations from storage:

- `create(key, value)`           insert iff the key is absent (→ bool)
- `get(key)`                     fetch or None
- `compare_and_swap(key, e, n)`  replace iff the current value == e (→ bool)

Every state transition of a vault is a single `create` or `compare_and_swap`,
so a backend that makes those two atomic makes the whole program
linearizable per vault. There is no delete: a record is never removed.

Backends (memory, sqlite) implement the `RecordStore` protocol.
This file is *pure interface + helpers* and contains no I/O.

Key building
------------
`Prefix(ns).key(*parts)` builds `ns ":" ∑ (uvarlen | part)` keys, which avoids
delimiter-escaping pitfalls and keeps ordering stable:

>>> VAULT.key(b"vault", b"\\x01" * 32).startswith(VAULT.raw)
True
"""

from typing import Iterator, Optional, Protocol, Tuple, Union, runtime_checkable

NS_SEP = b":"

Part = Union[bytes, bytearray, memoryview, str]


class Prefix:
    """
    A logical namespace prefix (e.g. b"v:" for vault records).

    .raw gives the raw bytes prefix.
    .key(*parts) builds prefix + ∑ (uvarlen | part_bytes).
    """

    __slots__ = ("_raw",)

    def __init__(self, ns: Union[bytes, str]) -> None:
        ns_b = ns.encode("ascii") if isinstance(ns, str) else bytes(ns)
        if len(ns_b) == 0:
            raise ValueError("namespace must be non-empty")
        self._raw = ns_b.rstrip(NS_SEP) + NS_SEP

    @property
    def raw(self) -> bytes:
        return self._raw

    def key(self, *parts: Part) -> bytes:
        out = bytearray(self._raw)
        for p in parts:
            pb = p.encode("utf-8") if isinstance(p, str) else bytes(p)
            out.extend(_uvarint_len(len(pb)))
            out.extend(pb)
        return bytes(out)


def _uvarint_len(n: int) -> bytes:
    """LEB128 unsigned length prefix."""
    if n < 0:
        raise ValueError("length must be non-negative")
    out = bytearray()
    while True:
        b = n & 0x7F
        n >>= 7
        if n:
            out.append(0x80 | b)
        else:
            out.append(b)
            break
    return bytes(out)


VAULT = Prefix(b"v")  # vault records, keyed by owner


def vault_key(owner: bytes) -> bytes:
    """Storage key of the vault controlled by `owner` (the ["vault", owner] address)."""
    return VAULT.key(b"vault", owner)


@runtime_checkable
class RecordStore(Protocol):
    """Atomic create / compare-and-swap record storage."""

    def get(self, key: bytes) -> Optional[bytes]:
        """Fetch value or None if missing."""
        ...

    def create(self, key: bytes, value: bytes) -> bool:
        """Insert `value` iff `key` is absent. Returns False if it already existed."""
        ...

    def compare_and_swap(self, key: bytes, expected: bytes, new: bytes) -> bool:
        """Replace the value iff it currently equals `expected`. Returns success."""
        ...

    def iter_prefix(self, prefix: bytes) -> Iterator[Tuple[bytes, bytes]]:
        """(key, value) pairs whose key starts with `prefix`, in byte order."""
        ...

    def close(self) -> None:
        ...


__all__ = ["Prefix", "VAULT", "vault_key", "RecordStore"]
