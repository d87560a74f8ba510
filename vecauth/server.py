import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from . import messages as m
from .credentials import CredentialStore
from .crypto import SaltGenerator
from .errors import SocketSetupError
from .framing import peer_name, read_u32, write_u32
from .handshake import HandshakeOutcome, perform_handshake
from .vectors import VectorPolicy, process_vector

"""
server.py — listening socket + per-connection session driver.

Per connection:
  1. handshake (handshake.py); anything but AUTHENTICATED ends the session
  2. u32 vector count, clamped to MAX_VECTORS
  3. per vector: u32 size → process_vector() → u32 result back

Each accepted connection runs in its own task with its own Session. The only
shared objects are the credential store (read-only after loading) and the
salt generator.

Exit status per session: 0 on success, 1 if the session ended before it was
authenticated (rejection or I/O failure). Failures after authentication are
logged and leave the status at 0.
"""

logger = logging.getLogger("vecauth.server")
journal = logging.getLogger("vecauth.journal")

EXIT_OK = 0
EXIT_FAILURE = 1


@dataclass(frozen=True)
class ServerConfig:
    base_path: str
    journal_path: str
    log_path: str = "journal.txt"
    address: str = "127.0.0.1"
    port: int = 0
    max_connections: int = 1  # 0 = serve until cancelled
    vector_policy: VectorPolicy = VectorPolicy.HARDENED


class Session:
    """Per-connection state; lives exactly as long as the client stream."""
    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self.reader = reader
        self.writer = writer
        self.peer = peer_name(writer) or "unknown peer"
        self.username: Optional[str] = None
        self.salt: Optional[str] = None
        self.authenticated = False
        self.vector_count = 0
        self.vectors_done = 0
        self.status = EXIT_FAILURE


class VectorServer:
    """
    Accepts clients, authenticates them and answers their vector products.

    max_connections=1 reproduces the classic one-shot server: accept one
    client, serve it, close the listener. 0 keeps accepting until the
    serve() task is cancelled.
    """
    def __init__(
        self,
        config: ServerConfig,
        store: Optional[CredentialStore] = None,
        salts: Optional[SaltGenerator] = None,
    ) -> None:
        self.config = config
        self.store = store or CredentialStore(config.base_path)
        self.salts = salts or SaltGenerator()
        self.port = config.port
        self.last_status = EXIT_OK
        self._server: Optional[asyncio.AbstractServer] = None
        self._accepted = 0
        self._finished = 0
        # Created in open() so it belongs to the loop that serves.
        self._done: Optional[asyncio.Event] = None

    # -------------------------
    # Listening socket
    # -------------------------

    async def open(self) -> None:
        """Bind and listen. Raises SocketSetupError if the socket can't be set up."""
        self._done = asyncio.Event()
        try:
            self._server = await asyncio.start_server(
                self.handle_conn,
                self.config.address,
                self.config.port,
                backlog=m.LISTEN_BACKLOG,
                reuse_address=True,
            )
        except (OSError, OverflowError) as exc:
            # OverflowError: port outside 0-65535, rejected before any syscall.
            reason = getattr(exc, "strerror", None) or exc
            msg = f"Cannot listen on {self.config.address}:{self.config.port}: {reason}"
            logger.error(msg)
            raise SocketSetupError(msg) from exc

        sockets = self._server.sockets or []
        if sockets:
            self.port = sockets[0].getsockname()[1]
        addrs = ", ".join(str(sock.getsockname()) for sock in sockets)
        logger.info("Server started, listening on %s", addrs)

    async def serve(self) -> int:
        """Serve until max_connections sessions finished (or forever). Returns last status."""
        if self._server is None:
            await self.open()
        try:
            if self.config.max_connections > 0:
                await self._done.wait()
            else:
                await self._server.serve_forever()
        finally:
            await self.close()
        return self.last_status

    async def close(self) -> None:
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
            logger.info("Server stopped")

    # -------------------------
    # Per-connection session
    # -------------------------

    def _over_limit(self) -> bool:
        limit = self.config.max_connections
        return limit > 0 and self._accepted >= limit

    async def handle_conn(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        """Entry point for every accepted connection."""
        if self._over_limit():
            # Listener is about to close; don't start a session we won't count.
            writer.close()
            return
        self._accepted += 1

        session = Session(reader, writer)
        logger.info("Client connected from %s", session.peer)
        try:
            await self.run_session(session)
        except Exception as exc:
            # Single boundary: log, keep whatever status the session reached, clean up.
            logger.error("Session with %s aborted: %s", session.peer, exc)
        finally:
            try:
                writer.close()
                await writer.wait_closed()
            except OSError:
                pass
            self._record(session)

    async def run_session(self, session: Session) -> None:
        outcome: HandshakeOutcome = await perform_handshake(
            session.reader, session.writer, self.store, self.salts
        )
        session.username = outcome.username
        session.salt = outcome.salt
        if not outcome.authenticated:
            session.status = EXIT_FAILURE
            return

        session.authenticated = True
        session.status = EXIT_OK

        count = await read_u32(session.reader)
        if count > m.MAX_VECTORS:
            logger.error("Vector count %d exceeds limit %d; clamped", count, m.MAX_VECTORS)
            count = m.MAX_VECTORS
        session.vector_count = count

        for index in range(count):
            size = await read_u32(session.reader)
            result = await process_vector(session.reader, size, self.config.vector_policy)
            logger.debug("Vector %d (size %d) -> %d", index, size, result.result)
            await write_u32(session.writer, result.result)
            session.vectors_done += 1

    def _record(self, session: Session) -> None:
        self._finished += 1
        self.last_status = session.status
        journal.info(
            "peer=%s user=%s authenticated=%s vectors=%d/%d status=%d",
            session.peer, session.username, session.authenticated,
            session.vectors_done, session.vector_count, session.status,
        )
        limit = self.config.max_connections
        if limit > 0 and self._finished >= limit and self._done is not None:
            self._done.set()
