# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Signer bitmaps for K-of-N multi keys.

A bitmap is 4 bytes wide, one bit per signer slot. Slot ``i`` lives in byte
``i // 8`` and bits are counted from the most significant end of each byte, so
slot 0 is ``0x80`` of byte 0 and slot 31 is ``0x01`` of byte 3::

    create_bitmap([0, 2]) == b"\\xa0\\x00\\x00\\x00"

The same encoder serves a ``MultiKey``, whose slots are its key positions, and
a ``MultiKeySignature``, which allows all 32 slots.
"""

from __future__ import annotations

import typing
import unittest
from typing import List

from .errors import DuplicateIndex, IndexOutOfRange

BITMAP_NUM_OF_BYTES: int = 4
MAX_BITMAP_BITS: int = BITMAP_NUM_OF_BYTES * 8
FIRST_BIT_IN_BYTE: int = 0x80


def create_bitmap(
    indices: typing.Iterable[int], slots: int = MAX_BITMAP_BITS
) -> bytes:
    """Encode signer positions as a bitmap.

    Args:
        indices: Signer positions, in any order.
        slots: Number of usable slots, between 0 and 32. Positions must be
            below this bound.

    Returns:
        The 4-byte bitmap.

    Raises:
        DuplicateIndex: If a position appears twice.
        IndexOutOfRange: If a position is negative or not below ``slots``.
    """
    if slots < 0 or slots > MAX_BITMAP_BITS:
        raise ValueError(f"slots must be between 0 and {MAX_BITMAP_BITS}, got {slots}")

    bitmap = bytearray(BITMAP_NUM_OF_BYTES)
    seen = set()
    for index in indices:
        if index in seen:
            raise DuplicateIndex(index)
        if index < 0 or index >= slots:
            raise IndexOutOfRange(index, slots)
        seen.add(index)
        bitmap[index // 8] |= FIRST_BIT_IN_BYTE >> (index % 8)
    return bytes(bitmap)


def bit_count(bitmap: bytes) -> int:
    """Number of set bits."""
    return sum(bin(byte).count("1") for byte in bitmap)


def bitmap_indices(bitmap: bytes) -> List[int]:
    """Positions of the set bits, ascending."""
    return [
        byte_index * 8 + bit
        for byte_index, byte in enumerate(bitmap)
        for bit in range(8)
        if byte & (FIRST_BIT_IN_BYTE >> bit)
    ]


class Test(unittest.TestCase):
    def test_bit_order(self):
        self.assertEqual(create_bitmap([0]), b"\x80\x00\x00\x00")
        self.assertEqual(create_bitmap([31]), b"\x00\x00\x00\x01")
        self.assertEqual(create_bitmap([0, 2]), b"\xa0\x00\x00\x00")
        self.assertEqual(create_bitmap([]), b"\x00\x00\x00\x00")

    def test_order_independent(self):
        self.assertEqual(create_bitmap([0, 2, 31]), create_bitmap([31, 0, 2]))

    def test_duplicate(self):
        with self.assertRaises(DuplicateIndex) as ctx:
            create_bitmap([1, 1])
        self.assertEqual(ctx.exception.index, 1)

    def test_out_of_range(self):
        with self.assertRaises(IndexOutOfRange):
            create_bitmap([32])
        with self.assertRaises(IndexOutOfRange):
            create_bitmap([-1])
        with self.assertRaises(IndexOutOfRange) as ctx:
            create_bitmap([0, 3], slots=3)
        self.assertEqual(ctx.exception.index, 3)
        self.assertEqual(ctx.exception.slots, 3)
        with self.assertRaises(ValueError):
            create_bitmap([0], slots=33)

    def test_bit_count_and_indices(self):
        indices = [0, 5, 8, 17, 31]
        bitmap = create_bitmap(reversed(indices))
        self.assertEqual(bit_count(bitmap), 5)
        self.assertEqual(bitmap_indices(bitmap), indices)
        self.assertEqual(bit_count(b"\xff\xff\xff\xff"), 32)
        self.assertEqual(bitmap_indices(b"\x00\x00\x00\x00"), [])


if __name__ == "__main__":
    unittest.main()
