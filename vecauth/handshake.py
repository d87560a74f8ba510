import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Optional

from . import messages as m
from .credentials import CredentialStore
from .crypto import SaltGenerator, hashes_match, salted_hash
from .framing import read_some, write_all

"""
handshake.py — salted-hash challenge/response login.

States:
    AWAIT_LOGIN → SALT_ISSUED → AWAIT_RESPONSE → AUTHENTICATED | REJECTED

The secret never crosses the wire: the client proves it knows the secret by
hashing it together with a salt that is fresh for this connection, so a
captured digest is useless against any later session.

Rejections are outcomes, not exceptions. Only I/O failures raise
(ConnectionError), and they are never retried.
"""

logger = logging.getLogger("vecauth.handshake")


class AuthState(enum.Enum):
    AWAIT_LOGIN = "await_login"
    SALT_ISSUED = "salt_issued"
    AWAIT_RESPONSE = "await_response"
    AUTHENTICATED = "authenticated"
    REJECTED = "rejected"


@dataclass
class HandshakeOutcome:
    """
    Terminal state plus where the exchange stopped.

    `stage` is the last non-terminal state reached: AWAIT_LOGIN for an
    unknown user, AWAIT_RESPONSE once a salt went out.
    """
    state: AuthState
    stage: AuthState
    username: Optional[str] = None
    salt: Optional[str] = None
    reason: Optional[str] = None

    @property
    def authenticated(self) -> bool:
        return self.state is AuthState.AUTHENTICATED


def decode_text_frame(frame: bytes) -> str:
    """Drop a trailing newline/NUL if the client sent one; keep everything else."""
    return frame.rstrip(m.FRAME_TERMINATORS).decode("utf-8", errors="replace")


async def perform_handshake(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    store: CredentialStore,
    salts: SaltGenerator,
) -> HandshakeOutcome:
    """Run the server side of the login exchange on an accepted connection."""
    # 1) Username.
    username = decode_text_frame(await read_some(reader, m.LOGIN_FRAME_SIZE))
    secret = store.find(username)
    if secret is None:
        await write_all(writer, m.ERR_USER_NOT_FOUND)
        logger.error("Authentication failed: unknown user %r", username)
        return HandshakeOutcome(
            AuthState.REJECTED, AuthState.AWAIT_LOGIN,
            username=username, reason="user not found",
        )

    # 2) Fresh salt for this connection only.
    salt = salts.new_salt()
    await write_all(writer, salt.encode("ascii"))

    # 3) Client's claimed digest.
    claimed = (await read_some(reader, m.LOGIN_FRAME_SIZE)).rstrip(m.FRAME_TERMINATORS)
    expected = salted_hash(salt, secret)

    if not hashes_match(expected, claimed):
        await write_all(writer, m.ERR_AUTH_FAILED)
        logger.error("Authentication failed for %r: hash mismatch", username)
        return HandshakeOutcome(
            AuthState.REJECTED, AuthState.AWAIT_RESPONSE,
            username=username, salt=salt, reason="hash mismatch",
        )

    await write_all(writer, m.OK)
    logger.info("User %r authenticated", username)
    return HandshakeOutcome(
        AuthState.AUTHENTICATED, AuthState.AWAIT_RESPONSE,
        username=username, salt=salt,
    )
