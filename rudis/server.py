"""Network layer: accepts TCP clients, decodes commands and sends replies.

Two request formats are understood: RESP arrays of bulk strings
(``*N`` followed by ``$len`` payloads) and plain whitespace separated
text lines. Replies are RESP simple strings or errors.
"""

from __future__ import annotations

import asyncio
import re
import sys
from typing import List, Optional, Tuple

from rudis import engine
from rudis.persistence import Persistence
from rudis.store import Store

_LENGTH = re.compile(r"\+?[0-9]+")
_PORT = re.compile(r"[0-9]{1,5}")


def _parse_length(line: bytes, what: str) -> int:
    text = line.decode("utf-8").lstrip("$").strip()
    if not _LENGTH.fullmatch(text):
        raise ValueError(f"invalid {what}: {text!r}")
    return int(text)


async def _read_exactly(reader: asyncio.StreamReader, size: int) -> bytes:
    try:
        return await reader.readexactly(size)
    except asyncio.IncompleteReadError as exc:
        raise ValueError("unexpected end of stream") from exc


async def read_command(reader: asyncio.StreamReader) -> Optional[List[str]]:
    """Read one command and return its tokens.

    Returns None once the peer has gone away, and an empty list for a blank
    text line. Malformed input raises ValueError.
    """
    try:
        first = await reader.readexactly(1)
    except (asyncio.IncompleteReadError, ConnectionResetError):
        return None

    if first == b"*":
        count = _parse_length(await reader.readline(), "array length")
        parts = []
        for _ in range(count):
            length = _parse_length(await reader.readline(), "bulk length")
            payload = await _read_exactly(reader, length)
            await _read_exactly(reader, 2)
            parts.append(payload.decode("utf-8"))
        return parts

    line = await reader.readline()
    text = chr(first[0]) + line.decode("utf-8")
    return text.split()


def encode_reply(response: str) -> bytes:
    """Encode an engine reply as a RESP error or simple string."""
    prefix = "-" if response.startswith("ERR") else "+"
    return f"{prefix}{response}\r\n".encode("utf-8")


def _format_peer(peer: object) -> str:
    if isinstance(peer, tuple) and len(peer) >= 2:
        host, port = peer[0], peer[1]
        return f"[{host}]:{port}" if ":" in str(host) else f"{host}:{port}"
    return str(peer)


async def handle_connection(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    db: Store,
    persistence: Optional[Persistence],
) -> None:
    """Serve one client until it disconnects; the writer is closed afterwards."""
    peer = _format_peer(writer.get_extra_info("peername"))
    try:
        while True:
            parts = await read_command(reader)
            if parts is None:
                print(f"{peer} disconnected")
                break
            if not parts:
                continue
            is_write = engine.is_write_command(parts[0])
            raw = " ".join(parts)
            reply = engine.execute(parts, db)
            if is_write and persistence is not None:
                persistence.append_aof_and_maybe_snapshot(raw)
            writer.write(encode_reply(reply))
            await writer.drain()
    finally:
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass


async def serve(
    host: str, port: int, db: Store, persistence: Optional[Persistence]
) -> None:
    """Listen on *host*:*port* and serve clients until cancelled."""

    async def on_client(
        reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        peer = _format_peer(writer.get_extra_info("peername"))
        print(f"Accepted connection from {peer}")
        try:
            await handle_connection(reader, writer, db, persistence)
        except (ValueError, OSError) as exc:
            print(f"Connection error: {exc}", file=sys.stderr)

    server = await asyncio.start_server(on_client, host, port)
    async with server:
        bound = ", ".join(
            _format_peer(sock.getsockname()) for sock in server.sockets
        )
        print(f"Rudis server listening on {bound}")
        await server.serve_forever()


def _split_address(addr: str) -> Tuple[str, int]:
    host, sep, port_text = addr.rpartition(":")
    if not sep or not host:
        raise ValueError(f"invalid address {addr!r}: expected host:port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ValueError(f"invalid address {addr!r}: IPv6 hosts need brackets")
    if not host or not _PORT.fullmatch(port_text) or int(port_text) > 65535:
        raise ValueError(f"invalid address {addr!r}: expected host:port")
    return host, int(port_text)


async def start(addr: str, db: Store, persistence: Optional[Persistence]) -> None:
    """Serve on the ``host:port`` address *addr* until cancelled."""
    host, port = _split_address(addr)
    await serve(host, port, db, persistence)