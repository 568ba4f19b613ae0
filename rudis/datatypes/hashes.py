"""Hash values: each hash lives in its own tree named ``hash:<key>``."""

from __future__ import annotations

from rudis.store import Store


def _tree(db: Store, key: str):
    return db.open_tree(f"hash:{key}")


def hset(db: Store, key: str, field: str, value: str) -> str:
    """Set *field*; reply "1" for a new field, "0" when overwriting."""
    tree = _tree(db, key)
    previous = tree.insert(field, value)
    tree.flush()
    return "1" if previous is None else "0"


def hget(db: Store, key: str, field: str) -> str:
    """Return the field's value, or "nil" when absent."""
    value = _tree(db, key).get(field)
    return "nil" if value is None else value.decode("utf-8")


def hdel(db: Store, key: str, field: str) -> str:
    """Delete *field*; reply "1" if it existed, else "0"."""
    tree = _tree(db, key)
    previous = tree.remove(field)
    tree.flush()
    return "1" if previous is not None else "0"


def hkeys(db: Store, key: str) -> str:
    """All field names, comma separated."""
    return ",".join(k.decode("utf-8") for k, _ in _tree(db, key).items())


def hvals(db: Store, key: str) -> str:
    """All values, comma separated."""
    return ",".join(v.decode("utf-8") for _, v in _tree(db, key).items())


def hgetall(db: Store, key: str) -> str:
    """Fields and values interleaved, comma separated."""
    return ",".join(
        part.decode("utf-8") for pair in _tree(db, key).items() for part in pair
    )