"""
errors.py — the few exception types the server and client agree on.

Plain ConnectionError (the builtin) is used for mid-session I/O failures so
callers can catch it together with the OSErrors asyncio already raises.
"""


class SocketSetupError(OSError):
    """Creating, binding or listening on the server socket failed."""


class AuthRejected(Exception):
    """The server answered the handshake with a rejection token."""

    def __init__(self, token: str) -> None:
        super().__init__(f"authentication rejected: {token}")
        self.token = token


class ProtocolLimitExceeded(ValueError):
    """A declared vector count or size is above the server's limits."""

    def __init__(self, what: str, value: int, limit: int) -> None:
        super().__init__(f"{what} {value} exceeds limit {limit}")
        self.what = what
        self.value = value
        self.limit = limit
