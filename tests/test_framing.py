"""Unit tests for vecauth/framing.py.

Covers:
- Exact reads assembled from several partial deliveries
- EOF mid-frame and empty reads surfacing as ConnectionError
- Transport errors on write surfacing as ConnectionError
- Native-order u32/u16 helpers
"""

import asyncio

import pytest

from conftest import FakeWriter, make_reader
from vecauth import messages as m
from vecauth.framing import peer_name, read_exactly, read_some, read_u16, read_u32, write_all, write_u32


@pytest.mark.asyncio
async def test_read_exactly_joins_partial_deliveries():
    reader = make_reader(eof=False)

    async def trickle():
        for chunk in (b"ab", b"c", b"def"):
            await asyncio.sleep(0)
            reader.feed_data(chunk)

    feeder = asyncio.create_task(trickle())
    assert await read_exactly(reader, 6) == b"abcdef"
    await feeder


@pytest.mark.asyncio
async def test_read_exactly_peer_closed_mid_frame():
    reader = make_reader(b"\x01\x02")
    with pytest.raises(ConnectionError, match="2 of 4"):
        await read_exactly(reader, 4)


@pytest.mark.asyncio
async def test_read_some_returns_single_read_bounded_by_limit():
    reader = make_reader(b"x" * 2000)
    data = await read_some(reader, m.LOGIN_FRAME_SIZE)
    assert data == b"x" * m.LOGIN_FRAME_SIZE


@pytest.mark.asyncio
async def test_read_some_empty_read_is_connection_error():
    with pytest.raises(ConnectionError):
        await read_some(make_reader(), 16)


@pytest.mark.asyncio
async def test_write_all_wraps_transport_errors():
    writer = FakeWriter(fail=True)
    with pytest.raises(ConnectionError, match="Connection reset"):
        await write_all(writer, b"OK")


@pytest.mark.asyncio
async def test_integer_helpers_use_native_order():
    reader = make_reader(m.U32.pack(70000) + m.U16.pack(65535))
    assert await read_u32(reader) == 70000
    assert await read_u16(reader) == 65535

    writer = FakeWriter()
    await write_u32(writer, 1000)
    assert writer.data == m.U32.pack(1000)


def test_peer_name_formats_host_and_port():
    assert peer_name(FakeWriter()) == "127.0.0.1:50000"
