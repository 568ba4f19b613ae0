"""Set values: members are keys of the tree ``set:<key>``."""

from __future__ import annotations

from rudis.store import Store

PREFIX = "set:"


def _tree(db: Store, key: str):
    return db.open_tree(f"{PREFIX}{key}")


def sadd(db: Store, key: str, member: str) -> str:
    """Add *member*; reply "1" if new, "0" if already present."""
    tree = _tree(db, key)
    previous = tree.insert(member, b"")
    tree.flush()
    return "1" if previous is None else "0"


def srem(db: Store, key: str, member: str) -> str:
    """Remove *member*; reply "1" if it was present, else "0"."""
    tree = _tree(db, key)
    previous = tree.remove(member)
    tree.flush()
    return "1" if previous is not None else "0"


def smembers(db: Store, key: str) -> str:
    """All members, comma separated."""
    return ",".join(k.decode("utf-8") for k, _ in _tree(db, key).items())


def sismember(db: Store, key: str, member: str) -> str:
    """Reply "1" if *member* is in the set, else "0"."""
    tree = _tree(db, key)
    present = tree.contains_key(member)
    if present:
        return "1"
    return "0"