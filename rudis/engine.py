"""Command execution: turns a tokenised command into a textual reply."""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from rudis import expire
from rudis.datatypes import hashes, lists, sets
from rudis.store import Store, StoreError

Handler = Callable[[Store, List[str]], str]

_WRITE_COMMANDS = frozenset({"SET", "DEL"})
_STRING_COMMANDS = frozenset({"SET", "GET", "DEL"})
_NO_EXPIRY_CHECK = frozenset({"PING", "QUIT"})

# Commands that take any number of arguments and always give the same reply.
_FIXED_REPLIES: Dict[str, str] = {"PING": "PONG", "QUIT": "OK"}

_SIGNED = re.compile(r"[+-]?[0-9]+")
_UNSIGNED = re.compile(r"\+?[0-9]+")
_ISIZE_MIN, _ISIZE_MAX = -(1 << 63), (1 << 63) - 1
_U64_MAX = (1 << 64) - 1

_STORAGE_ERRORS = (StoreError, UnicodeDecodeError, OSError)


def is_write_command(name: str) -> bool:
    """Whether the command called *name* is recorded in the append-only log."""
    return name.upper() in _WRITE_COMMANDS


def _parse_signed(text: str) -> Optional[int]:
    if not _SIGNED.fullmatch(text):
        return None
    value = int(text)
    return value if _ISIZE_MIN <= value <= _ISIZE_MAX else None


def _parse_unsigned(text: str) -> Optional[int]:
    if not _UNSIGNED.fullmatch(text):
        return None
    value = int(text)
    return value if value <= _U64_MAX else None


def _set(db: Store, args: List[str]) -> str:
    db.insert(args[0], args[1])
    return "OK"


def _get(db: Store, args: List[str]) -> str:
    key = args[0]
    value = db.get(key)
    if value is None:
        return "ERR key not found"
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError:
        return f"ERR non-utf8 data for key '{key}'"


def _del(db: Store, args: List[str]) -> str:
    removed = db.remove(args[0])
    if removed is None:
        return "ERR key not found"
    return "OK"


def _lrange(db: Store, args: List[str]) -> str:
    start, stop = _parse_signed(args[1]), _parse_signed(args[2])
    if start is None or stop is None:
        return "ERR invalid start or stop"
    return lists.lrange(db, args[0], start, stop)


def _expire(db: Store, args: List[str]) -> str:
    secs = _parse_unsigned(args[1])
    if secs is None:
        return "ERR value is not an integer or out of range"
    return expire.expire(db, args[0], secs)


# name -> (number of tokens including the name; handler)
_COMMANDS: Dict[str, Tuple[int, Handler]] = {
    "SET": (3, _set),
    "GET": (2, _get),
    "DEL": (2, _del),
    "HSET": (4, lambda db, a: hashes.hset(db, a[0], a[1], a[2])),
    "HGET": (3, lambda db, a: hashes.hget(db, a[0], a[1])),
    "HDEL": (3, lambda db, a: hashes.hdel(db, a[0], a[1])),
    "HKEYS": (2, lambda db, a: hashes.hkeys(db, a[0])),
    "HVALS": (2, lambda db, a: hashes.hvals(db, a[0])),
    "HGETALL": (2, lambda db, a: hashes.hgetall(db, a[0])),
    "LPUSH": (3, lambda db, a: lists.lpush(db, a[0], a[1])),
    "RPUSH": (3, lambda db, a: lists.rpush(db, a[0], a[1])),
    "LPOP": (2, lambda db, a: lists.lpop(db, a[0])),
    "RPOP": (2, lambda db, a: lists.rpop(db, a[0])),
    "LRANGE": (4, _lrange),
    "SADD": (3, lambda db, a: sets.sadd(db, a[0], a[1])),
    "SREM": (3, lambda db, a: sets.srem(db, a[0], a[1])),
    "SMEMBERS": (2, lambda db, a: sets.smembers(db, a[0])),
    "SISMEMBER": (3, lambda db, a: sets.sismember(db, a[0], a[1])),
    "EXPIRE": (3, _expire),
    "TTL": (2, lambda db, a: expire.ttl(db, a[0])),
    "PERSIST": (2, lambda db, a: expire.persist(db, a[0])),
}


def execute(parts: Sequence[str], db: Store) -> str:
    """Run one command against *db* and return its reply.

    Replies that signal failure start with ``ERR``.
    """
    if not parts:
        return "ERR empty command"
    name = parts[0].upper()
    args = list(parts[1:])

    if args and name not in _NO_EXPIRY_CHECK:
        try:
            expire.remove_if_expired(db, args[0])
        except _STORAGE_ERRORS:
            pass

    fixed = _FIXED_REPLIES.get(name)
    if fixed is not None:
        return fixed

    entry = _COMMANDS.get(name)
    if entry is None:
        return f"ERR unknown command '{name}'"
    arity, handler = entry
    if len(parts) != arity:
        suffix = " command" if name in _STRING_COMMANDS else ""
        return f"ERR wrong number of arguments for '{name}'{suffix}"

    try:
        return handler(db, args)
    except _STORAGE_ERRORS as exc:
        if name in _STRING_COMMANDS:
            return f"ERR failed to {name}: {exc}"
        return f"ERR {exc}"