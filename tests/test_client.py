"""Tests for the client handshake in vecauth/client.py against stub servers.

Covers:
- Salt and verdict split across several TCP writes are reassembled
- ERR_USER_NOT_FOUND and ERR_AUTH_FAILED split the same way still surface
  as AuthRejected with the full token
"""

import asyncio

import pytest

from vecauth import messages as m
from vecauth.client import login
from vecauth.crypto import salted_hash
from vecauth.errors import AuthRejected

DIGEST_LENGTH = 64  # hex SHA-256
PAUSE = 0.05


async def _send_in_chunks(writer, chunks):
    for chunk in chunks:
        writer.write(chunk)
        await writer.drain()
        await asyncio.sleep(PAUSE)


async def start_stub(first_reply, verdict=None, received=None):
    """Stub server: answers the username with `first_reply` chunks, the hash with `verdict` chunks."""
    async def handler(reader, writer):
        await reader.read(m.LOGIN_FRAME_SIZE)
        await _send_in_chunks(writer, first_reply)
        if verdict is not None:
            claimed = await reader.readexactly(DIGEST_LENGTH)
            if received is not None:
                received.append(claimed)
            await _send_in_chunks(writer, verdict)
        writer.close()

    server = await asyncio.start_server(handler, "127.0.0.1", 0)
    return server, server.sockets[0].getsockname()[1]


async def client_login(port, username="alice", secret="secret123"):
    reader, writer = await asyncio.open_connection("127.0.0.1", port)
    try:
        return await login(reader, writer, username, secret)
    finally:
        writer.close()


@pytest.mark.asyncio
async def test_split_salt_and_verdict_are_reassembled():
    received = []
    server, port = await start_stub([b"ABCDEFGH", b"IJKLMNOP"], [b"O", b"K"], received)
    try:
        salt = await client_login(port)
    finally:
        server.close()
        await server.wait_closed()

    assert salt == "ABCDEFGHIJKLMNOP"
    assert received == [salted_hash("ABCDEFGHIJKLMNOP", "secret123").encode("ascii")]


@pytest.mark.asyncio
async def test_split_user_not_found_token():
    server, port = await start_stub([m.ERR_USER_NOT_FOUND[:10], m.ERR_USER_NOT_FOUND[10:]])
    try:
        with pytest.raises(AuthRejected) as excinfo:
            await client_login(port, username="mallory")
    finally:
        server.close()
        await server.wait_closed()

    assert excinfo.value.token == "ERR_USER_NOT_FOUND"


@pytest.mark.asyncio
async def test_split_auth_failed_token():
    server, port = await start_stub(
        [b"0123456789abcdef"], [m.ERR_AUTH_FAILED[:1], m.ERR_AUTH_FAILED[1:6], m.ERR_AUTH_FAILED[6:]]
    )
    try:
        with pytest.raises(AuthRejected) as excinfo:
            await client_login(port, secret="wrong")
    finally:
        server.close()
        await server.wait_closed()

    assert excinfo.value.token == "ERR_AUTH_FAILED"
