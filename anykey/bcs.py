# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Binary Canonical Serialization (BCS) for anykey values.

BCS gives every value exactly one byte representation, which is what lets two
independent implementations agree on the bytes that get hashed into an
authentication key. Only the subset of BCS used by keys and signatures is
implemented here:

- fixed-width little-endian unsigned integers (u8, u16, u32, u64)
- ULEB128 variable-length integers, used for lengths and enum tags
- length-prefixed byte strings
- length-prefixed homogeneous sequences
- nested structs via their own ``serialize``/``deserialize`` methods

Learn more at https://github.com/diem/bcs

Examples:
    Round trip of a length-prefixed byte string::

        ser = Serializer()
        ser.to_bytes(b"abc")
        assert ser.output() == b"\\x03abc"

        der = Deserializer(ser.output())
        assert der.to_bytes() == b"abc"
"""

from __future__ import annotations

import io
import typing
import unittest
from typing import List

from typing_extensions import Protocol

from .errors import NonCanonicalEncoding, SerializationError, TruncatedInput

MAX_U8 = 2**8 - 1
MAX_U16 = 2**16 - 1
MAX_U32 = 2**32 - 1
MAX_U64 = 2**64 - 1


class Deserializable(Protocol):
    """Values that can be read back from BCS bytes.

    Implementers provide a static ``deserialize``; ``from_bytes`` decodes a
    complete value and rejects any bytes left over.
    """

    @classmethod
    def from_bytes(cls, indata: bytes) -> Deserializable:
        der = Deserializer(indata)
        value = der.struct(cls)
        if der.remaining() != 0:
            raise NonCanonicalEncoding(
                f"{der.remaining()} trailing bytes after {cls.__name__}"
            )
        return value

    @staticmethod
    def deserialize(deserializer: Deserializer) -> Deserializable:
        ...


class Serializable(Protocol):
    """Values that can write themselves as BCS bytes."""

    def to_bytes(self) -> bytes:
        ser = Serializer()
        ser.struct(self)
        return ser.output()

    def serialize(self, serializer: Serializer):
        ...


class Deserializer:
    """Reads BCS values from an in-memory buffer, front to back.

    Every reader raises :class:`TruncatedInput` when the buffer ends early, so
    a short input is never silently accepted.
    """

    _input: io.BytesIO
    _length: int

    def __init__(self, data: bytes):
        self._length = len(data)
        self._input = io.BytesIO(data)

    def remaining(self) -> int:
        """Number of bytes not yet consumed."""
        return self._length - self._input.tell()

    def bool(self) -> bool:
        value = self._read_int(1)
        if value == 0:
            return False
        elif value == 1:
            return True
        else:
            raise NonCanonicalEncoding(f"Unexpected boolean value: {value}")

    def to_bytes(self) -> bytes:
        """Read a ULEB128 length followed by that many bytes."""
        return self._read(self.uleb128())

    def fixed_bytes(self, length: int) -> bytes:
        """Read exactly ``length`` bytes with no length prefix."""
        return self._read(length)

    def sequence(
        self,
        value_decoder: typing.Callable[[Deserializer], typing.Any],
    ) -> List[typing.Any]:
        """Read a ULEB128 element count, then decode that many elements.

        Args:
            value_decoder: Called once per element with this deserializer.

        Returns:
            The decoded elements, in wire order.
        """
        length = self.uleb128()
        values: List = []
        while len(values) < length:
            values.append(value_decoder(self))
        return values

    def struct(self, struct: typing.Any) -> typing.Any:
        return struct.deserialize(self)

    def u8(self) -> int:
        return self._read_int(1)

    def u16(self) -> int:
        return self._read_int(2)

    def u32(self) -> int:
        return self._read_int(4)

    def u64(self) -> int:
        return self._read_int(8)

    def uleb128(self) -> int:
        """Read an unsigned LEB128 integer in its smallest form.

        Each byte carries seven bits of payload, least significant group
        first; the high bit marks a continuation. The value must fit in a u32
        and must not carry redundant trailing zero groups.

        Raises:
            NonCanonicalEncoding: If the value overflows u32 or is over-long.
            TruncatedInput: If the input ends inside the integer.
        """
        value = 0
        shift = 0

        while True:
            byte = self._read_int(1)
            value |= (byte & 0x7F) << shift
            if value > MAX_U32:
                raise NonCanonicalEncoding("Unexpectedly large uleb128 value")
            if byte & 0x80 == 0:
                if byte == 0 and shift > 0:
                    raise NonCanonicalEncoding("Non-minimal uleb128 encoding")
                return value
            shift += 7
            if shift > 28:
                raise NonCanonicalEncoding("Unexpectedly large uleb128 value")

    def _read(self, length: int) -> bytes:
        value = self._input.read(length)
        if value is None or len(value) < length:
            actual_length = 0 if value is None else len(value)
            raise TruncatedInput(length, actual_length)
        return value

    def _read_int(self, length: int) -> int:
        return int.from_bytes(self._read(length), byteorder="little", signed=False)


class Serializer:
    """Accumulates BCS-encoded values in an in-memory buffer.

    Examples:
        Encoding a sequence of u8 values::

            ser = Serializer()
            ser.sequence([1, 2, 3], Serializer.u8)
            ser.output()  # b"\\x03\\x01\\x02\\x03"
    """

    _output: io.BytesIO

    def __init__(self):
        self._output = io.BytesIO()

    def output(self) -> bytes:
        return self._output.getvalue()

    def bool(self, value: bool):
        self._write_int(int(value), 1)

    def to_bytes(self, value: bytes):
        """Write a ULEB128 length followed by the bytes themselves."""
        self.uleb128(len(value))
        self._output.write(value)

    def fixed_bytes(self, value: bytes):
        """Write raw bytes with no length prefix."""
        self._output.write(value)

    def sequence(
        self,
        values: typing.Sequence[typing.Any],
        value_encoder: typing.Callable[[Serializer, typing.Any], None],
    ):
        """Write a ULEB128 element count, then each element in order.

        Args:
            values: The elements to write.
            value_encoder: Unbound serializer method or function used for each
                element, for example ``Serializer.struct`` or ``Serializer.u8``.
        """
        self.uleb128(len(values))
        for value in values:
            self.fixed_bytes(encoder(value, value_encoder))

    def struct(self, value: typing.Any):
        value.serialize(self)

    def u8(self, value: int):
        self._write_checked(value, MAX_U8, 1, "u8")

    def u16(self, value: int):
        self._write_checked(value, MAX_U16, 2, "u16")

    def u32(self, value: int):
        self._write_checked(value, MAX_U32, 4, "u32")

    def u64(self, value: int):
        self._write_checked(value, MAX_U64, 8, "u64")

    def uleb128(self, value: int):
        """Write an unsigned LEB128 integer in its smallest form (u32 range)."""
        if value < 0 or value > MAX_U32:
            raise SerializationError(f"Cannot encode {value} into uleb128")

        while value >= 0x80:
            # Low seven bits with the continuation bit set.
            self._write_int((value & 0x7F) | 0x80, 1)
            value >>= 7

        self._write_int(value, 1)

    def _write_checked(self, value: int, maximum: int, length: int, name: str):
        if value < 0 or value > maximum:
            raise SerializationError(f"Cannot encode {value} into {name}")
        self._write_int(value, length)

    def _write_int(self, value: int, length: int):
        self._output.write(value.to_bytes(length, "little", signed=False))


def encoder(
    value: typing.Any, encoder: typing.Callable[[Serializer, typing.Any], typing.Any]
) -> bytes:
    """Encode a single value with ``encoder`` into a fresh buffer."""
    ser = Serializer()
    encoder(ser, value)
    return ser.output()


class Test(unittest.TestCase):
    def test_bool(self):
        for in_value in (True, False):
            ser = Serializer()
            ser.bool(in_value)
            self.assertEqual(Deserializer(ser.output()).bool(), in_value)

    def test_bool_error(self):
        with self.assertRaises(NonCanonicalEncoding):
            Deserializer(b"\x02").bool()

    def test_bytes(self):
        in_value = b"1234567890"

        ser = Serializer()
        ser.to_bytes(in_value)
        self.assertEqual(ser.output(), b"\x0a" + in_value)

        der = Deserializer(ser.output())
        self.assertEqual(der.to_bytes(), in_value)
        self.assertEqual(der.remaining(), 0)

    def test_fixed_bytes(self):
        ser = Serializer()
        ser.fixed_bytes(b"\x01\x02\x03\x04")
        der = Deserializer(ser.output())
        self.assertEqual(der.fixed_bytes(4), b"\x01\x02\x03\x04")

    def test_sequence(self):
        in_value = [1, 200, 3]

        ser = Serializer()
        ser.sequence(in_value, Serializer.u8)
        self.assertEqual(ser.output(), b"\x03\x01\xc8\x03")

        der = Deserializer(ser.output())
        self.assertEqual(der.sequence(Deserializer.u8), in_value)

    def test_integers(self):
        ser = Serializer()
        ser.u8(15)
        ser.u16(11115)
        ser.u32(1111111115)
        ser.u64(1111111111111111115)

        der = Deserializer(ser.output())
        self.assertEqual(der.u8(), 15)
        self.assertEqual(der.u16(), 11115)
        self.assertEqual(der.u32(), 1111111115)
        self.assertEqual(der.u64(), 1111111111111111115)

    def test_integer_out_of_range(self):
        with self.assertRaises(SerializationError):
            Serializer().u8(256)
        with self.assertRaises(SerializationError):
            Serializer().u16(-1)
        with self.assertRaises(SerializationError):
            Serializer().uleb128(MAX_U32 + 1)

    def test_uleb128(self):
        vectors = {
            0: b"\x00",
            1: b"\x01",
            127: b"\x7f",
            128: b"\x80\x01",
            16384: b"\x80\x80\x01",
            MAX_U32: b"\xff\xff\xff\xff\x0f",
        }
        for value, encoded in vectors.items():
            ser = Serializer()
            ser.uleb128(value)
            self.assertEqual(ser.output(), encoded)
            self.assertEqual(Deserializer(encoded).uleb128(), value)

    def test_uleb128_rejects_non_canonical(self):
        with self.assertRaises(NonCanonicalEncoding):
            Deserializer(b"\x80\x00").uleb128()
        with self.assertRaises(NonCanonicalEncoding):
            Deserializer(b"\xff\xff\xff\xff\x10").uleb128()

    def test_truncated_input(self):
        with self.assertRaises(TruncatedInput) as ctx:
            Deserializer(b"\x05abc").to_bytes()
        self.assertEqual(ctx.exception.requested, 5)
        self.assertEqual(ctx.exception.found, 3)

        with self.assertRaises(TruncatedInput):
            Deserializer(b"\x80").uleb128()

        with self.assertRaises(TruncatedInput):
            Deserializer(b"\x01\x02").u32()


if __name__ == "__main__":
    unittest.main()
