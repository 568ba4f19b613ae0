"""Durability: an append-only command log plus periodic full snapshots."""

from __future__ import annotations

import os
import sys
import threading
from os import PathLike
from pathlib import Path
from typing import Optional, TextIO, Union

from rudis import engine
from rudis.config import Config
from rudis.store import Store, StoreError


class Persistence:
    """Writes commands to the append-only log and takes snapshots of *db*."""

    def __init__(
        self,
        config: Config,
        db: Store,
        aof_path: Union[str, PathLike],
        rdb_path: Union[str, PathLike],
    ) -> None:
        self.config = config
        self.db = db
        self.aof_path = Path(aof_path)
        self.rdb_path = Path(rdb_path)
        self._aof_lock = threading.Lock()
        self._count_lock = threading.Lock()
        self._snapshot_lock = threading.Lock()
        self._write_count = 0
        self._stop = threading.Event()
        self._aof: Optional[TextIO] = (
            open(self.aof_path, "a", encoding="utf-8", newline="")
            if config.aof
            else None
        )
        self._aof_enabled = config.aof
        if config.rdb:
            thread = threading.Thread(
                target=self._snapshot_loop, name="rdb-snapshot", daemon=True
            )
            thread.start()

    def _snapshot_loop(self) -> None:
        interval = self.config.snapshot_interval_secs
        while not self._stop.wait(interval):
            self._try_snapshot()

    def _try_snapshot(self) -> None:
        try:
            self.snapshot()
        except (OSError, StoreError) as exc:
            print(f"RDB snapshot failed: {exc}", file=sys.stderr)

    def load_aof(self) -> None:
        """Replay every logged command against the store."""
        if not self._aof_enabled or not self.aof_path.exists():
            return
        with open(self.aof_path, encoding="utf-8") as fh:
            for line in fh:
                parts = line.split()
                if parts:
                    engine.execute(parts, self.db)
        self.db.flush()

    def append_aof_and_maybe_snapshot(self, raw: str) -> None:
        """Log a write command and snapshot once the write threshold is reached."""
        with self._aof_lock:
            if self._aof is not None:
                try:
                    self._aof.write(raw + "\n")
                    self._aof.flush()
                except OSError:
                    pass
        if not self.config.rdb:
            return
        with self._count_lock:
            self._write_count += 1
            due = self._write_count >= self.config.snapshot_threshold
            if due:
                self._write_count = 0
        if due:
            self._try_snapshot()

    def snapshot(self) -> None:
        """Write every main-tree entry to the snapshot file, replacing it atomically.

        Each line holds the key length, the value length, and both in hex.
        """
        with self._snapshot_lock:
            self.db.flush()
            tmp = self.rdb_path.with_suffix(".tmp")
            with open(tmp, "w", encoding="ascii", newline="") as fh:
                for key, value in self.db.items():
                    fh.write(f"{len(key)} {len(value)} {key.hex()} {value.hex()}\n")
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp, self.rdb_path)

    def fsync_and_close(self) -> None:
        """Force the log to disk, close it and stop periodic snapshots."""
        self._stop.set()
        with self._aof_lock:
            if self._aof is None:
                return
            try:
                self._aof.flush()
                os.fsync(self._aof.fileno())
            except OSError:
                pass
            finally:
                self._aof.close()
                self._aof = None

    def __enter__(self) -> "Persistence":
        return self

    def __exit__(self, *args) -> None:
        self.fsync_and_close()