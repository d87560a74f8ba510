import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Iterable

from . import messages as m
from .framing import read_exactly, read_u16

"""
vectors.py — product of one streamed vector, clamped to u32.

Rules (in order):
- size 0 → 1, nothing is read.
- hardened policy and size > MAX_VECTOR_SIZE → 0, vector rejected.
- the next multiplication would leave u32 → UINT32_MAX.
- otherwise the exact product.

Whatever the outcome, every declared element is consumed from the stream.
Skipping them would leave the next vector's size field pointing into the
middle of this vector's elements.
"""

logger = logging.getLogger("vecauth.vectors")


class VectorPolicy(enum.Enum):
    HARDENED = "hardened"      # cap vector size at MAX_VECTOR_SIZE
    PERMISSIVE = "permissive"  # no size cap


@dataclass
class VectorOutcome:
    result: int
    elements_read: int
    overflowed: bool = False
    rejected: bool = False


def vector_product(elements: Iterable[int]) -> int:
    """Same arithmetic as process_vector, for values already in memory."""
    acc = 1
    for element in elements:
        if element and acc > m.UINT32_MAX // element:
            return m.UINT32_MAX
        acc *= element
    return min(acc, m.UINT32_MAX)


async def drain_elements(reader: asyncio.StreamReader, count: int) -> int:
    """Read and discard `count` u16 elements. Returns how many were consumed."""
    remaining = count
    while remaining:
        batch = min(remaining, m.DRAIN_CHUNK_ELEMENTS)
        await read_exactly(reader, batch * m.U16.size)
        remaining -= batch
    return count


async def process_vector(
    reader: asyncio.StreamReader,
    declared_size: int,
    policy: VectorPolicy = VectorPolicy.HARDENED,
) -> VectorOutcome:
    """Consume one vector's elements and compute its clamped product. No writes."""
    if declared_size == 0:
        return VectorOutcome(result=1, elements_read=0)

    if policy is VectorPolicy.HARDENED and declared_size > m.MAX_VECTOR_SIZE:
        logger.error(
            "Vector size %d exceeds limit %d; draining elements, result 0",
            declared_size, m.MAX_VECTOR_SIZE,
        )
        consumed = await drain_elements(reader, declared_size)
        return VectorOutcome(result=0, elements_read=consumed, rejected=True)

    acc = 1
    for index in range(declared_size):
        element = await read_u16(reader)
        if element and acc > m.UINT32_MAX // element:
            rest = declared_size - index - 1
            logger.warning(
                "Vector product overflowed u32 at element %d; clamped, skipping %d element(s)",
                index, rest,
            )
            await drain_elements(reader, rest)
            return VectorOutcome(result=m.UINT32_MAX, elements_read=declared_size, overflowed=True)
        acc *= element

    return VectorOutcome(result=min(acc, m.UINT32_MAX), elements_read=declared_size)
