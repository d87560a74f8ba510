import asyncio
from typing import Optional

from .messages import U16, U32

"""
framing.py — exact-size reads and whole-payload writes on asyncio streams.

Every failure surfaces as ConnectionError so the session layer has exactly
one thing to catch for "the peer is gone":
- EOF before the requested size arrived (peer closed mid-frame).
- Any OSError raised by the transport (reset, broken pipe, ...).
"""


async def read_exactly(reader: asyncio.StreamReader, n: int) -> bytes:
    """Read exactly n bytes; short reads are retried by the stream itself."""
    try:
        return await reader.readexactly(n)
    except asyncio.IncompleteReadError as exc:
        raise ConnectionError(
            f"peer closed after {len(exc.partial)} of {n} bytes"
        ) from exc
    except OSError as exc:
        raise ConnectionError(f"recv failed: {exc.strerror or exc}") from exc


async def read_some(reader: asyncio.StreamReader, limit: int) -> bytes:
    """
    One bounded read for the unprefixed text frames (username, hash).

    Whatever arrives in a single read is the frame; an empty read means the
    peer closed before sending anything.
    """
    try:
        data = await reader.read(limit)
    except OSError as exc:
        raise ConnectionError(f"recv failed: {exc.strerror or exc}") from exc
    if not data:
        raise ConnectionError("peer closed before sending a frame")
    return data


async def write_all(writer: asyncio.StreamWriter, payload: bytes) -> None:
    """Write the whole payload and wait for the transport to flush it."""
    try:
        writer.write(payload)
        await writer.drain()
    except OSError as exc:
        raise ConnectionError(f"send failed: {exc.strerror or exc}") from exc


async def read_u32(reader: asyncio.StreamReader) -> int:
    (value,) = U32.unpack(await read_exactly(reader, U32.size))
    return value


async def read_u16(reader: asyncio.StreamReader) -> int:
    (value,) = U16.unpack(await read_exactly(reader, U16.size))
    return value


async def write_u32(writer: asyncio.StreamWriter, value: int) -> None:
    await write_all(writer, U32.pack(value))


def peer_name(writer: asyncio.StreamWriter) -> Optional[str]:
    """host:port of the remote end, if the transport knows it."""
    peer = writer.get_extra_info("peername")
    if not peer:
        return None
    return f"{peer[0]}:{peer[1]}"
