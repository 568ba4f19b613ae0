"""List values: a double-ended queue stored in the tree ``list:<key>``.

Entries are keyed by a signed sequence number whose sign bit is flipped so
that the big-endian byte order matches numeric order.
"""

from __future__ import annotations

from typing import Optional, Tuple

from rudis.store import Store, Tree

PREFIX = "list:"
_SIGN = 1 << 63
_MASK = (1 << 64) - 1


def _seq_to_key(seq: int) -> bytes:
    return ((seq & _MASK) ^ _SIGN).to_bytes(8, "big")


def _key_to_seq(key: bytes) -> int:
    raw = int.from_bytes(key[:8], "big") ^ _SIGN
    return raw - (1 << 64) if raw & _SIGN else raw


def _tree(db: Store, key: str) -> Tree:
    return db.open_tree(f"{PREFIX}{key}")


def _bounds(tree: Tree) -> Optional[Tuple[int, int]]:
    first = tree.first()
    if first is None:
        return None
    last = tree.last()
    return _key_to_seq(first[0]), _key_to_seq(last[0] if last else first[0])


def _push(db: Store, key: str, value: str, left: bool) -> str:
    tree = _tree(db, key)
    bounds = _bounds(tree)
    if bounds is None:
        tree.insert(_seq_to_key(0), value)
        tree.flush()
        return "1"
    head, tail = bounds
    tree.insert(_seq_to_key(head - 1 if left else tail + 1), value)
    tree.flush()
    return str(len(tree))


def _pop(db: Store, key: str, left: bool) -> str:
    tree = _tree(db, key)
    bounds = _bounds(tree)
    if bounds is not None:
        value = tree.remove(_seq_to_key(bounds[0] if left else bounds[1]))
        if value is not None:
            tree.flush()
            return value.decode("utf-8")
    return "nil"


def lpush(db: Store, key: str, value: str) -> str:
    """Prepend *value*; reply with the new length."""
    return _push(db, key, value, left=True)


def rpush(db: Store, key: str, value: str) -> str:
    """Append *value*; reply with the new length."""
    return _push(db, key, value, left=False)


def lpop(db: Store, key: str) -> str:
    """Remove and return the first element, or "nil"."""
    return _pop(db, key, left=True)


def rpop(db: Store, key: str) -> str:
    """Remove and return the last element, or "nil"."""
    return _pop(db, key, left=False)


def lrange(db: Store, key: str, start: int, stop: int) -> str:
    """Elements from *start* to *stop* inclusive, comma separated.

    Negative indices count from the end; both ends are clamped into range.
    """
    tree = _tree(db, key)
    bounds = _bounds(tree)
    if bounds is None:
        return ""
    head, tail = bounds
    total = tail - head + 1
    s = total + start if start < 0 else start
    e = total + stop if stop < 0 else stop
    s = min(max(s, 0), total - 1)
    e = min(max(e, 0), total - 1)
    if s > e:
        return ""
    values = (tree.get(_seq_to_key(head + idx)) for idx in range(s, e + 1))
    return ",".join(v.decode("utf-8") for v in values if v is not None)