"""
tests/conftest.py -- shared helpers for the vecauth test suite.

This module provides:
  - make_reader(): an asyncio.StreamReader pre-fed with bytes
  - FakeWriter: records everything the code under test writes, and can
    answer like a client through an on_write callback
  - creds_file / store fixtures: a credential store with alice and bob

make_reader() must be called from inside a running event loop (i.e. inside
an async test), because StreamReader binds to the current loop.
"""

import asyncio
import logging
import random
from typing import Callable, Optional

import pytest

from vecauth.credentials import CredentialStore
from vecauth.crypto import SaltGenerator
from vecauth.log import configure_logging

# ---------------------------------------------------------------------------
# Stream helpers
# ---------------------------------------------------------------------------


def make_reader(data: bytes = b"", eof: bool = True) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()
    if data:
        reader.feed_data(data)
    if eof:
        reader.feed_eof()
    return reader


class FakeWriter:
    """Minimal StreamWriter stand-in: collects frames, never touches a socket."""

    def __init__(self, on_write: Optional[Callable[[bytes], None]] = None, fail: bool = False):
        self.frames = []
        self.closed = False
        self._on_write = on_write
        self._fail = fail

    @property
    def data(self) -> bytes:
        return b"".join(self.frames)

    def write(self, data: bytes) -> None:
        self.frames.append(bytes(data))
        if self._on_write:
            self._on_write(bytes(data))

    async def drain(self) -> None:
        if self._fail:
            raise ConnectionResetError(104, "Connection reset by peer")

    def get_extra_info(self, name, default=None):
        if name == "peername":
            return ("127.0.0.1", 50000)
        return default

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        return None


# ---------------------------------------------------------------------------
# Credential store fixtures
# ---------------------------------------------------------------------------

CREDS = """\
# test users
alice:secret123
; disabled account below
bob : hunter2
"""


@pytest.fixture
def creds_file(tmp_path):
    path = tmp_path / "users.txt"
    path.write_text(CREDS, encoding="utf-8")
    return path


@pytest.fixture
def store(creds_file):
    return CredentialStore(creds_file)


@pytest.fixture
def seeded_salts():
    return SaltGenerator(random.Random(1234))


@pytest.fixture(autouse=True)
def _reset_logging():
    """Leave the vecauth loggers without handlers so caplog sees everything."""
    yield
    configure_logging(console=False)
    logging.getLogger("vecauth").setLevel(logging.NOTSET)
