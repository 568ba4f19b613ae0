"""Key expiry: deadlines live in the ``expire`` tree as big-endian milliseconds."""

from __future__ import annotations

import asyncio
import time
from typing import Optional

from rudis.store import Store, StoreError, Tree

EXPIRE_TREE = "expire"
_U64_MAX = (1 << 64) - 1


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def _expire_tree(db: Store) -> Tree:
    return db.open_tree(EXPIRE_TREE)


def _deadline(raw: bytes) -> int:
    if len(raw) != 8:
        raise StoreError("corrupt expiry entry")
    return int.from_bytes(raw, "big")


def _stored_deadline(db: Store, key: str) -> Optional[int]:
    raw = _expire_tree(db).get(key)
    return None if raw is None else _deadline(raw)


def expire(db: Store, key: str, secs: int) -> str:
    """Set *key* to expire *secs* seconds from now; reply "1"."""
    tree = _expire_tree(db)
    deadline = min(_now_ms() + secs * 1000, _U64_MAX)
    tree.insert(key, deadline.to_bytes(8, "big"))
    tree.flush()
    return "1"


def ttl(db: Store, key: str) -> str:
    """Seconds left (rounded up), "-1" without a deadline, "-2" once expired."""
    deadline = _stored_deadline(db, key)
    if deadline is None:
        return "-1"
    now = _now_ms()
    if deadline <= now:
        remove_key(db, key)
        return "-2"
    return str((deadline - now + 999) // 1000)


def persist(db: Store, key: str) -> str:
    """Drop the deadline of *key*; reply "1" if one existed, else "0"."""
    tree = _expire_tree(db)
    if tree.remove(key) is None:
        return "0"
    tree.flush()
    return "1"


def remove_if_expired(db: Store, key: str) -> None:
    """Delete *key* and everything attached to it if its deadline has passed."""
    deadline = _stored_deadline(db, key)
    if deadline is not None and deadline <= _now_ms():
        remove_key(db, key)


def remove_key(db: Store, key: str) -> None:
    """Delete *key* from the main tree, its typed trees and the expiry tree."""
    db.remove(key)
    for prefix in ("hash", "list", "set"):
        db.drop_tree(f"{prefix}:{key}")
    _expire_tree(db).remove(key)
    db.flush()


def _sweep(db: Store) -> None:
    now = _now_ms()
    expired = []
    for raw_key, raw_deadline in _expire_tree(db).items():
        try:
            if _deadline(raw_deadline) <= now:
                expired.append(raw_key.decode("utf-8"))
        except (StoreError, UnicodeDecodeError):
            continue
    for key in expired:
        remove_key(db, key)


async def start_cleaner(db: Store, interval_secs: float) -> None:
    """Remove expired keys now and then every *interval_secs* seconds, forever."""
    if interval_secs <= 0:
        raise ValueError("interval_secs must be positive")
    while True:
        _sweep(db)
        await asyncio.sleep(interval_secs)