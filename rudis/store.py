"""A small persistent ordered key-value store with named trees."""

from __future__ import annotations

import bisect
import json
import os
import threading
from os import PathLike
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

Key = Union[str, bytes, bytearray, memoryview]

DATA_FILE = "store.json"
DEFAULT_TREE = "__default__"


class StoreError(Exception):
    """Raised for unsupported operations or an unreadable data file."""


def _as_bytes(value: Key) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"expected str or bytes, got {type(value).__name__}")


class Tree:
    """An ordered mapping of byte keys to byte values."""

    def __init__(
        self,
        name: str,
        lock: threading.RLock,
        flusher: Callable[[], None],
        entries: Optional[Dict[bytes, bytes]] = None,
    ) -> None:
        self.name = name
        self._lock = lock
        self._flusher = flusher
        self._data: Dict[bytes, bytes] = dict(entries or {})
        self._keys: List[bytes] = sorted(self._data)

    def get(self, key: Key) -> Optional[bytes]:
        """Return the value stored under *key*, or None."""
        with self._lock:
            return self._data.get(_as_bytes(key))

    def insert(self, key: Key, value: Key) -> Optional[bytes]:
        """Store *value* under *key* and return the previous value, if any."""
        k, v = _as_bytes(key), _as_bytes(value)
        with self._lock:
            previous = self._data.get(k)
            if previous is None:
                bisect.insort(self._keys, k)
            self._data[k] = v
            return previous

    def remove(self, key: Key) -> Optional[bytes]:
        """Delete *key* and return its value, if it was present."""
        k = _as_bytes(key)
        with self._lock:
            previous = self._data.pop(k, None)
            if previous is not None:
                del self._keys[bisect.bisect_left(self._keys, k)]
            return previous

    def contains_key(self, key: Key) -> bool:
        with self._lock:
            return _as_bytes(key) in self._data

    def items(self) -> Iterator[Tuple[bytes, bytes]]:
        """Iterate over a snapshot of all entries in key order."""
        with self._lock:
            snapshot = [(k, self._data[k]) for k in self._keys]
        return iter(snapshot)

    def items_upto(self, bound: Key) -> Iterator[Tuple[bytes, bytes]]:
        """Iterate over entries whose key is less than or equal to *bound*."""
        b = _as_bytes(bound)
        with self._lock:
            end = bisect.bisect_right(self._keys, b)
            snapshot = [(k, self._data[k]) for k in self._keys[:end]]
        return iter(snapshot)

    def first(self) -> Optional[Tuple[bytes, bytes]]:
        """Return the entry with the smallest key, or None when empty."""
        with self._lock:
            if not self._keys:
                return None
            k = self._keys[0]
            return k, self._data[k]

    def last(self) -> Optional[Tuple[bytes, bytes]]:
        """Return the entry with the largest key, or None when empty."""
        with self._lock:
            if not self._keys:
                return None
            k = self._keys[-1]
            return k, self._data[k]

    def flush(self) -> None:
        """Write the owning store to disk."""
        self._flusher()

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)


class Store:
    """A directory-backed collection of trees, one of which is the default."""

    def __init__(self, path: Union[str, PathLike]) -> None:
        self.path = Path(path)
        self.path.mkdir(parents=True, exist_ok=True)
        self._file = self.path / DATA_FILE
        self._lock = threading.RLock()
        self._trees: Dict[str, Tree] = {}
        for name, entries in self._read().items():
            self._trees[name] = Tree(name, self._lock, self.flush, entries)
        if DEFAULT_TREE not in self._trees:
            self._trees[DEFAULT_TREE] = Tree(DEFAULT_TREE, self._lock, self.flush)
        self._default = self._trees[DEFAULT_TREE]

    def _read(self) -> Dict[str, Dict[bytes, bytes]]:
        if not self._file.exists():
            return {}
        try:
            raw = json.loads(self._file.read_text(encoding="utf-8"))
            return {
                str(name): {bytes.fromhex(k): bytes.fromhex(v) for k, v in pairs}
                for name, pairs in raw["trees"].items()
            }
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            raise StoreError(f"corrupt data file {self._file}") from exc

    def open_tree(self, name: str) -> Tree:
        """Return the tree called *name*, creating it if needed."""
        with self._lock:
            tree = self._trees.get(name)
            if tree is None:
                tree = Tree(name, self._lock, self.flush)
                self._trees[name] = tree
            return tree

    def drop_tree(self, name: str) -> bool:
        """Delete the tree called *name*; return whether it existed."""
        if name == DEFAULT_TREE:
            raise StoreError("cannot remove the default tree")
        with self._lock:
            return self._trees.pop(name, None) is not None

    def get(self, key: Key) -> Optional[bytes]:
        return self._default.get(key)

    def insert(self, key: Key, value: Key) -> Optional[bytes]:
        return self._default.insert(key, value)

    def remove(self, key: Key) -> Optional[bytes]:
        return self._default.remove(key)

    def items(self) -> Iterator[Tuple[bytes, bytes]]:
        return self._default.items()

    def flush(self) -> None:
        """Atomically write every tree to the data file."""
        with self._lock:
            payload = {
                "trees": {
                    name: [[k.hex(), v.hex()] for k, v in tree.items()]
                    for name, tree in self._trees.items()
                }
            }
            tmp = self._file.with_suffix(".tmp")
            with open(tmp, "w", encoding="utf-8") as fh:
                json.dump(payload, fh)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp, self._file)

    def close(self) -> None:
        self.flush()

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, *args) -> None:
        self.close()