from __future__ import annotations

"""
In-process record store (dict + lock). The default for devnet and tests.
"""

import threading
from typing import Dict, Iterator, Optional, Tuple


class MemoryStore:
    __slots__ = ("_data", "_lock")

    def __init__(self) -> None:
        self._data: Dict[bytes, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: bytes) -> Optional[bytes]:
        with self._lock:
            return self._data.get(bytes(key))

    def create(self, key: bytes, value: bytes) -> bool:
        k = bytes(key)
        with self._lock:
            if k in self._data:
                return False
            self._data[k] = bytes(value)
            return True

    def compare_and_swap(self, key: bytes, expected: bytes, new: bytes) -> bool:
        k = bytes(key)
        with self._lock:
            if self._data.get(k) != bytes(expected):
                return False
            self._data[k] = bytes(new)
            return True

    def iter_prefix(self, prefix: bytes) -> Iterator[Tuple[bytes, bytes]]:
        with self._lock:
            items = sorted((k, v) for k, v in self._data.items() if k.startswith(prefix))
        return iter(items)

    def close(self) -> None:
        pass

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


__all__ = ["MemoryStore"]
