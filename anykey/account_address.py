# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Authentication keys and the account addresses they define.

An authentication key is ``SHA3-256(key_bytes || scheme)``, where ``scheme`` is
a one-byte domain separator naming how ``key_bytes`` authenticates: a legacy
single Ed25519 key, a single wrapped key of any scheme, or a K-of-N multi key.
Identical bytes under different schemes therefore never yield the same key.
The account address of a freshly created account is its authentication key.

Addresses are rendered following AIP-40: the special addresses ``0x0`` to
``0xf`` in SHORT form, every other address as ``0x`` plus 64 hex characters.

See https://github.com/aptos-foundation/AIPs/blob/main/aips/aip-40.md
"""

from __future__ import annotations

import hashlib
import typing
import unittest
from dataclasses import dataclass

from .bcs import Deserializable, Deserializer, Serializable, Serializer
from .errors import LengthMismatch, ParseAddressError, UnsupportedKeyType


class AuthKeyScheme:
    """One-byte suffixes appended to key bytes before hashing.

    Attributes:
        Ed25519: Legacy single Ed25519 key (0x00).
        SingleKey: A single ``AnyPublicKey`` of any scheme (0x02).
        MultiKey: A K-of-N ``MultiKey`` (0x03).
    """

    Ed25519: bytes = b"\x00"
    SingleKey: bytes = b"\x02"
    MultiKey: bytes = b"\x03"


class AuthenticationKey(Deserializable, Serializable):
    LENGTH: int = 32

    key: bytes

    def __init__(self, key: bytes):
        if len(key) != AuthenticationKey.LENGTH:
            raise LengthMismatch(
                "Authentication key", AuthenticationKey.LENGTH, len(key)
            )
        self.key = bytes(key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AuthenticationKey):
            return NotImplemented
        return self.key == other.key

    def __hash__(self):
        return hash(self.key)

    def __str__(self) -> str:
        return f"0x{self.key.hex()}"

    def __repr__(self) -> str:
        return f"AuthenticationKey({self})"

    @staticmethod
    def from_scheme_and_bytes(scheme: bytes, data: bytes) -> AuthenticationKey:
        """Hash ``data`` followed by the ``scheme`` byte with SHA3-256.

        Args:
            scheme: One of the :class:`AuthKeyScheme` constants.
            data: Canonical bytes of the key or key set.
        """
        hasher = hashlib.sha3_256()
        hasher.update(data)
        hasher.update(scheme)
        return AuthenticationKey(hasher.digest())

    def account_address(self) -> AccountAddress:
        return AccountAddress(self.key)

    @staticmethod
    def deserialize(deserializer: Deserializer) -> AuthenticationKey:
        return AuthenticationKey(deserializer.fixed_bytes(AuthenticationKey.LENGTH))

    def serialize(self, serializer: Serializer):
        serializer.fixed_bytes(self.key)


class AccountAddress(Deserializable, Serializable):
    """A 32-byte account address.

    Attributes:
        address: The raw address bytes.
        LENGTH: The byte length of every address (32).
    """

    address: bytes
    LENGTH: int = 32

    def __init__(self, address: bytes):
        if len(address) != AccountAddress.LENGTH:
            raise ParseAddressError("Expected address of length 32")
        self.address = bytes(address)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AccountAddress):
            return NotImplemented
        return self.address == other.address

    def __hash__(self):
        return hash(self.address)

    def __str__(self):
        """AIP-40 form: SHORT for special addresses, LONG for all others."""
        suffix = self.address.hex()
        if self.is_special():
            suffix = suffix.lstrip("0") or "0"
        return f"0x{suffix}"

    def __repr__(self):
        return self.__str__()

    def is_special(self):
        """True for ``0x0`` through ``0xf``: 31 zero bytes, then a byte below 16."""
        return all(b == 0 for b in self.address[:-1]) and self.address[-1] < 0b10000

    @staticmethod
    def from_str(address: str) -> AccountAddress:
        """Parse an address that is strictly AIP-40 formatted.

        Accepts ``0x`` plus 64 hex characters, or ``0x0`` to ``0xf`` for the
        special addresses.

        Raises:
            ParseAddressError: On a missing ``0x``, padding zeroes in a short
                form, or a short form for a non-special address.
        """
        if not address.startswith("0x"):
            raise ParseAddressError("Hex string must start with a leading 0x.")

        out = AccountAddress.from_str_relaxed(address)

        # Anything shorter than LONG form must be a special address in SHORT form.
        if len(address) != AccountAddress.LENGTH * 2 + 2:
            if not out.is_special():
                raise ParseAddressError(
                    "The given hex string is not a special address, it must be "
                    "represented as 0x + 64 chars."
                )
            elif len(address) != 3:
                raise ParseAddressError(
                    "The given hex string is a special address not in LONG form, "
                    "it must be 0x0 to 0xf without padding zeroes."
                )

        return out

    @staticmethod
    def from_str_relaxed(address: str) -> AccountAddress:
        """Parse 1 to 64 hex characters, with or without ``0x``, left padding with zeroes.

        Raises:
            ParseAddressError: If the string is empty, too long or not hex.
        """
        addr = address.removeprefix("0x")

        if len(addr) < 1:
            raise ParseAddressError(
                "Hex string is too short, must be 1 to 64 chars long, excluding the "
                "leading 0x."
            )
        if len(addr) > AccountAddress.LENGTH * 2:
            raise ParseAddressError(
                "Hex string is too long, must be 1 to 64 chars long, excluding the "
                "leading 0x."
            )

        addr = addr.rjust(AccountAddress.LENGTH * 2, "0")
        try:
            return AccountAddress(bytes.fromhex(addr))
        except ValueError as e:
            raise ParseAddressError(f"Invalid hex string: {address}") from e

    @staticmethod
    def from_key(key: typing.Any) -> AccountAddress:
        """Address of a fresh account controlled by ``key``.

        ``key`` is any key type that derives its own authentication key: an
        Ed25519 public key, an ``AnyPublicKey`` or a ``MultiKey``.

        Raises:
            UnsupportedKeyType: If ``key`` has no ``auth_key`` method.
        """
        auth_key = getattr(key, "auth_key", None)
        if not callable(auth_key):
            raise UnsupportedKeyType(key)
        return auth_key().account_address()

    @staticmethod
    def deserialize(deserializer: Deserializer) -> AccountAddress:
        return AccountAddress(deserializer.fixed_bytes(AccountAddress.LENGTH))

    def serialize(self, serializer: Serializer):
        serializer.fixed_bytes(self.address)


@dataclass(init=True, frozen=True)
class TestAddresses:
    shortWith0x: str
    shortWithout0x: str
    longWith0x: str
    longWithout0x: str
    bytes: bytes


ADDRESS_ZERO = TestAddresses(
    shortWith0x="0x0",
    shortWithout0x="0",
    longWith0x="0x0000000000000000000000000000000000000000000000000000000000000000",
    longWithout0x="0000000000000000000000000000000000000000000000000000000000000000",
    bytes=bytes([0] * 32),
)

ADDRESS_F = TestAddresses(
    shortWith0x="0xf",
    shortWithout0x="f",
    longWith0x="0x000000000000000000000000000000000000000000000000000000000000000f",
    longWithout0x="000000000000000000000000000000000000000000000000000000000000000f",
    bytes=bytes([0] * 31 + [15]),
)

ADDRESS_TEN = TestAddresses(
    shortWith0x="0x10",
    shortWithout0x="10",
    longWith0x="0x0000000000000000000000000000000000000000000000000000000000000010",
    longWithout0x="0000000000000000000000000000000000000000000000000000000000000010",
    bytes=bytes([0] * 31 + [16]),
)


class Test(unittest.TestCase):
    def test_scheme_separates_domains(self):
        data = bytes(range(32))
        keys = {
            AuthenticationKey.from_scheme_and_bytes(scheme, data)
            for scheme in (
                AuthKeyScheme.Ed25519,
                AuthKeyScheme.SingleKey,
                AuthKeyScheme.MultiKey,
            )
        }
        self.assertEqual(len(keys), 3)
        self.assertEqual(
            AuthenticationKey.from_scheme_and_bytes(AuthKeyScheme.SingleKey, data),
            AuthenticationKey.from_scheme_and_bytes(AuthKeyScheme.SingleKey, data),
        )

    def test_auth_key_vector(self):
        public_key = bytes.fromhex(
            "754bb6a4720a658bdd5f532995955db0971ad3519acbde2f1149c3857348006c"
        )
        auth_key = AuthenticationKey.from_scheme_and_bytes(
            AuthKeyScheme.Ed25519, public_key
        )
        expected = "0x37e547afc6ccaa058a6b9ca615d6177b4c9b8bbead76a72d2967b7b5ab166af4"
        self.assertEqual(str(auth_key), expected)
        self.assertEqual(auth_key.account_address(), AccountAddress.from_str(expected))
        self.assertEqual(AuthenticationKey.from_bytes(auth_key.to_bytes()), auth_key)

    def test_auth_key_length(self):
        with self.assertRaises(LengthMismatch):
            AuthenticationKey(b"\x00" * 31)

    def test_from_key_unsupported(self):
        with self.assertRaises(UnsupportedKeyType):
            AccountAddress.from_key(b"\x00" * 32)

    def test_to_standard_string(self):
        self.assertEqual(str(AccountAddress(ADDRESS_ZERO.bytes)), "0x0")
        self.assertEqual(str(AccountAddress(ADDRESS_F.bytes)), "0xf")
        self.assertEqual(
            str(AccountAddress(ADDRESS_TEN.bytes)), ADDRESS_TEN.longWith0x
        )

    def test_from_str_relaxed(self):
        for addresses in (ADDRESS_ZERO, ADDRESS_F, ADDRESS_TEN):
            for text in (
                addresses.shortWith0x,
                addresses.shortWithout0x,
                addresses.longWith0x,
                addresses.longWithout0x,
            ):
                self.assertEqual(
                    AccountAddress.from_str_relaxed(text).address, addresses.bytes
                )

        self.assertRaises(ParseAddressError, AccountAddress.from_str_relaxed, "0x")
        self.assertRaises(
            ParseAddressError, AccountAddress.from_str_relaxed, "0x" + "0" * 65
        )
        self.assertRaises(ParseAddressError, AccountAddress.from_str_relaxed, "0xzz")

    def test_from_str(self):
        self.assertEqual(
            str(AccountAddress.from_str(ADDRESS_ZERO.longWith0x)),
            ADDRESS_ZERO.shortWith0x,
        )
        self.assertEqual(
            str(AccountAddress.from_str(ADDRESS_F.shortWith0x)), ADDRESS_F.shortWith0x
        )
        self.assertEqual(
            str(AccountAddress.from_str(ADDRESS_TEN.longWith0x)), ADDRESS_TEN.longWith0x
        )

        self.assertRaises(
            ParseAddressError, AccountAddress.from_str, ADDRESS_ZERO.shortWithout0x
        )
        self.assertRaises(ParseAddressError, AccountAddress.from_str, "0x0f")
        self.assertRaises(
            ParseAddressError, AccountAddress.from_str, ADDRESS_TEN.shortWith0x
        )
        self.assertRaises(
            ParseAddressError, AccountAddress.from_str, ADDRESS_TEN.longWithout0x
        )

    def test_serialization(self):
        address = AccountAddress(ADDRESS_TEN.bytes)
        self.assertEqual(address.to_bytes(), ADDRESS_TEN.bytes)
        self.assertEqual(AccountAddress.from_bytes(address.to_bytes()), address)


if __name__ == "__main__":
    unittest.main()
