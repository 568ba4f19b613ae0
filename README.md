# rudis

A small key-value server that speaks a subset of the Redis command set. Data
is kept in an on-disk store, a directory holding a single JSON data file. You
can also record write commands in an append-only log (AOF) and take full
snapshots (RDB).

## Commands

- Strings: `SET key value`, `GET key`, `DEL key`
- Hashes: `HSET`, `HGET`, `HDEL`, `HKEYS`, `HVALS`, `HGETALL`
- Lists: `LPUSH`, `RPUSH`, `LPOP`, `RPOP`, `LRANGE key start stop`. Negative
  indices count from the end, and both ends are clamped into range.
- Sets: `SADD`, `SREM`, `SMEMBERS`, `SISMEMBER`
- Expiry:
  - `EXPIRE key seconds` replies `1`.
  - `TTL key` replies with the seconds left, rounded up. It replies `-1` when
    the key has no deadline and `-2` once the deadline has passed.
  - `PERSIST key` replies `1` if a deadline was removed, else `0`.
  - An expired key is deleted, together with its hash, list and set data, the
    next time a command names it.
- `PING` replies `PONG`. `QUIT` replies `OK` and leaves the connection open.

Command names are case-insensitive. A missing hash field, or popping an empty
list, gives `nil`. `GET` or `DEL` of a missing key gives `ERR key not found`.
Replies that hold several items, such as `HKEYS`, `SMEMBERS` or `LRANGE`, are
joined with commas.

Clients can send commands as RESP arrays of bulk strings or as plain
whitespace-separated text lines. Each reply is a RESP simple string (`+...`).
Replies that start with `ERR` are sent as RESP errors (`-ERR ...`).

## Installation

```
pip install .
```

## Configuration

The server reads a JSON configuration file. All four fields are required:

```json
{
  "aof": true,
  "rdb": true,
  "snapshot_interval_secs": 60,
  "snapshot_threshold": 100
}
```

- `aof`: append write commands to the AOF file, and replay that file at
  startup. Only `SET` and `DEL` are recorded.
- `rdb`: write a snapshot on a timer, and also after every
  `snapshot_threshold` recorded write commands. A snapshot holds the string
  keys only. Each line has the key length, the value length, the key in hex
  and the value in hex. The file is replaced atomically.
- `snapshot_interval_secs`: the number of seconds between timed snapshots.

## Running

```
rudis --listen 127.0.0.1:6380 --config config.json --db-path kv.db \
      --aof-path appendonly.aof --rdb-path dump.rdb
```

Every option is optional, and the values above are the defaults. The short
forms are `-l`, `-c` and `-d`, and `-V` prints the version. An IPv6 listen
address goes in brackets, for example `[::1]:6380`. Stop the server with
Ctrl-C. On shutdown it syncs the AOF to disk and writes the store out. If the
configuration or the address is invalid, the server prints `Error: ...` and
exits with status 1.

## Talking to it

```
$ printf 'SET greeting hello\r\nGET greeting\r\n' | nc 127.0.0.1 6380
+OK
+hello
```

## Using it as a library

```python
from rudis.store import Store
from rudis.engine import execute

with Store("kv.db") as db:
    execute(["RPUSH", "jobs", "a"], db)
    execute(["RPUSH", "jobs", "b"], db)
    print(execute(["LRANGE", "jobs", "0", "-1"], db))  # a,b
```

The main modules are:

- `rudis.store`: `Store` and its named `Tree`s.
- `rudis.engine`: `execute` and `is_write_command`.
- `rudis.datatypes.hashes`, `rudis.datatypes.lists` and
  `rudis.datatypes.sets`: the typed operations.
- `rudis.expire`: expiry. It includes `start_cleaner`, a coroutine that sweeps
  out expired keys at a fixed interval.
- `rudis.persistence.Persistence`: the AOF and snapshots.
- `rudis.server`: `start`, `serve`, `handle_connection`, `read_command` and
  `encode_reply`.
- `rudis.config.load`: reads the configuration file.

## What it does not do

- The server does not run a background expiry sweep. It removes expired keys
  only when they are touched. Use `rudis.expire.start_cleaner` yourself if you
  want a sweep.
- Snapshots are written but never read back at startup. Recovery relies on
  the store directory and the AOF.
- Hash, list, set and expiry commands are not written to the AOF.
- There are no transactions, no monitoring or diagnostic commands, no
  authentication, and no replication.

## Tests

```
pip install ".[test]"
pytest
```