import struct

"""
messages.py — wire-level constants shared by server and client.

Protocol (client C, server S):
- C → S  username (raw bytes, no length prefix, at most LOGIN_FRAME_SIZE)
- S → C  ERR_USER_NOT_FOUND, or a SALT_LENGTH-byte ASCII salt
- C → S  hex digest of salt + secret (raw bytes)
- S → C  OK or ERR_AUTH_FAILED
- C → S  u32 vector count
- per vector: C → S u32 element count, then count × u16; S → C u32 product

Integers travel in the sender's native byte order with standard sizes,
which is what the "=" struct prefix gives us.
"""

# -----------------------
# Handshake tokens
# -----------------------
OK = b"OK"
ERR_USER_NOT_FOUND = b"ERR_USER_NOT_FOUND"
ERR_AUTH_FAILED = b"ERR_AUTH_FAILED"

REJECTION_TOKENS = (ERR_USER_NOT_FOUND, ERR_AUTH_FAILED)

# -----------------------
# Frame layouts
# -----------------------
U32 = struct.Struct("=I")  # counts, sizes and results
U16 = struct.Struct("=H")  # vector elements

UINT32_MAX = 0xFFFFFFFF

# -----------------------
# Limits
# -----------------------
LOGIN_FRAME_SIZE = 1024   # upper bound for the username and hash frames
SALT_LENGTH = 16
MAX_VECTORS = 1000        # larger counts are clamped
MAX_VECTOR_SIZE = 10000   # larger vectors are rejected under the hardened policy
LISTEN_BACKLOG = 10

# Elements drained per read when skipping elements we won't multiply.
DRAIN_CHUNK_ELEMENTS = 4096

# Trailing bytes some clients append to text frames.
FRAME_TERMINATORS = b"\r\n\x00"
