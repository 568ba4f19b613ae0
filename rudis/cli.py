"""Command-line entry point for the server."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import sys
from pathlib import Path
from typing import Optional, Sequence, Tuple

from rudis import server
from rudis.config import ConfigError, load
from rudis.persistence import Persistence
from rudis.store import Store, StoreError


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line options."""
    parser = argparse.ArgumentParser(
        prog="rudis", description="Rudis server with AOF+RDB"
    )
    parser.add_argument(
        "-V", "--version", action="version", version="%(prog)s 0.1.0"
    )
    parser.add_argument(
        "-l", "--listen", default="127.0.0.1:6380", help="listen address (host:port)"
    )
    parser.add_argument(
        "-c", "--config", type=Path, default=Path("config.json"),
        help="JSON configuration file",
    )
    parser.add_argument(
        "-d", "--db-path", type=Path, default=Path("kv.db"),
        help="database directory",
    )
    parser.add_argument(
        "--aof-path", type=Path, default=Path("appendonly.aof"),
        help="append-only log file",
    )
    parser.add_argument(
        "--rdb-path", type=Path, default=Path("dump.rdb"),
        help="snapshot file",
    )
    return parser.parse_args(argv)


def parse_address(addr: str) -> Tuple[str, int]:
    """Split ``host:port`` (or ``[v6host]:port``) into its parts."""
    return server._split_address(addr)


def run(args: argparse.Namespace) -> int:
    """Start the server described by *args* and serve until interrupted."""
    print(f"Starting Rudis with args: {args}")
    config = load(args.config)
    print(f"Loaded config: {config}")

    with contextlib.ExitStack() as stack:
        db = stack.enter_context(Store(args.db_path))
        persistence = stack.enter_context(
            Persistence(config, db, args.aof_path, args.rdb_path)
        )
        persistence.load_aof()
        host, port = parse_address(args.listen)
        try:
            asyncio.run(server.serve(host, port, db, persistence))
        except KeyboardInterrupt:
            print("Shutting down…")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the server; return the process exit status."""
    args = parse_args(argv)
    try:
        return run(args)
    except (ConfigError, StoreError, OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())