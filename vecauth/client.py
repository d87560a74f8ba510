import asyncio
from typing import List, Sequence

from . import messages as m
from .crypto import salted_hash
from .errors import AuthRejected, ProtocolLimitExceeded
from .framing import read_exactly, read_u32, write_all

"""
client.py — the client half of the protocol, for scripts and tests.

Usage:
    products = await request_products("127.0.0.1", 9090, "alice", "secret123",
                                      [[10, 10, 10], [2, 3, 4]])
    # → [1000, 24]

Each step waits for the server's reply before sending the next frame; the
username and hash frames have no length prefix, so sending them back to back
would merge them on the server side.
"""


async def login(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    username: str,
    secret: str,
) -> str:
    """Run the handshake. Returns the salt on success, raises AuthRejected otherwise."""
    await write_all(writer, username.encode("utf-8"))

    # Salt and verdict are fixed-size: read them exactly, however TCP splits them.
    reply = await read_exactly(reader, m.SALT_LENGTH)
    if m.ERR_USER_NOT_FOUND.startswith(reply):
        # '_' is outside the salt alphabet, so this prefix is never a salt.
        reply += await read_exactly(reader, len(m.ERR_USER_NOT_FOUND) - len(reply))
        raise AuthRejected(reply.decode("ascii"))
    salt = reply.decode("ascii")

    await write_all(writer, salted_hash(salt, secret).encode("ascii"))

    verdict = await read_exactly(reader, len(m.OK))
    if verdict != m.OK:
        if m.ERR_AUTH_FAILED.startswith(verdict):
            verdict += await read_exactly(reader, len(m.ERR_AUTH_FAILED) - len(verdict))
        raise AuthRejected(verdict.decode("ascii", errors="replace"))
    return salt


def encode_vector(elements: Sequence[int]) -> bytes:
    """u32 size followed by the u16 elements."""
    return m.U32.pack(len(elements)) + b"".join(m.U16.pack(e) for e in elements)


async def send_vectors(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    vectors: Sequence[Sequence[int]],
) -> List[int]:
    """Send the count, then each vector, collecting one u32 result per vector."""
    if len(vectors) > m.MAX_VECTORS:
        # The server would clamp the count and stop answering halfway.
        raise ProtocolLimitExceeded("vector count", len(vectors), m.MAX_VECTORS)

    await write_all(writer, m.U32.pack(len(vectors)))
    results = []
    for vec in vectors:
        await write_all(writer, encode_vector(vec))
        results.append(await read_u32(reader))
    return results


async def request_products(
    host: str,
    port: int,
    username: str,
    secret: str,
    vectors: Sequence[Sequence[int]],
) -> List[int]:
    """Connect, authenticate, and return the server's product for each vector."""
    reader, writer = await asyncio.open_connection(host, port)
    try:
        await login(reader, writer, username, secret)
        return await send_vectors(reader, writer, vectors)
    finally:
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass
