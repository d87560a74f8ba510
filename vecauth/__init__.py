"""
VECAUTH (authenticated vector-product server).

Flow per connection:
- Client sends a username; unknown users get ERR_USER_NOT_FOUND.
- Server issues a fresh 16-char salt; client answers with hex SHA-256(salt + secret).
- On OK the client streams vectors of u16 elements; the server replies with
  each vector's product clamped to u32.

HARDENINGS:
- Salt comes from an OS-seeded generator, never from the wall clock.
- Credentials live in an explicit store object, not a hidden global cache.
- Oversized or overflowing vectors are still drained so the stream stays in sync.
- One asyncio task per connection; sessions share only read-only state.
"""
__all__ = [
    "client",
    "credentials",
    "crypto",
    "errors",
    "framing",
    "handshake",
    "log",
    "messages",
    "run_server",
    "server",
    "vectors",
]
