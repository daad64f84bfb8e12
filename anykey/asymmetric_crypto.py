# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Structural interfaces shared by every key and signature scheme.

Concrete schemes live in :mod:`anykey.ed25519` and :mod:`anykey.secp256k1_ecdsa`;
the polymorphic wrappers in :mod:`anykey.asymmetric_crypto_wrapper` are written
against the protocols below rather than against a particular scheme.

This module also implements the AIP-80 text format for private keys, a scheme
prefix in front of the hex key so that a key string says which curve it is for::

    ed25519-priv-0x4e5e3be60f4bbd5e98d086d932f3ce779ff4b58da99bf9e5241ae1212a29e5fe

See https://github.com/aptos-foundation/AIPs/blob/main/aips/aip-80.md
"""

from __future__ import annotations

import logging
import unittest
from enum import Enum

from typing_extensions import Protocol

from .bcs import Deserializable, Serializable


class PrivateKeyVariant(Enum):
    """Schemes that have an AIP-80 private key prefix."""

    Ed25519 = "ed25519"
    Secp256k1 = "secp256k1"


class PrivateKey(Deserializable, Serializable, Protocol):
    """A signing key.

    Implementations derive their :class:`PublicKey`, produce a
    :class:`Signature` over arbitrary bytes, and render themselves in the
    AIP-80 format through :meth:`format_private_key`.
    """

    AIP80_PREFIXES: dict[PrivateKeyVariant, str] = {
        PrivateKeyVariant.Ed25519: "ed25519-priv-",
        PrivateKeyVariant.Secp256k1: "secp256k1-priv-",
    }

    def hex(self) -> str:
        ...

    def public_key(self) -> PublicKey:
        ...

    def sign(self, data: bytes) -> Signature:
        ...

    @staticmethod
    def format_private_key(
        private_key: bytes | str, key_type: PrivateKeyVariant
    ) -> str:
        """Render a private key as an AIP-80 string.

        Args:
            private_key: Raw bytes, a hex string, or a string that already
                carries the AIP-80 prefix for ``key_type``.
            key_type: Scheme whose prefix is applied.

        Returns:
            ``"<scheme>-priv-0x<hex>"``.

        Raises:
            ValueError: If ``key_type`` has no AIP-80 prefix.
            TypeError: If ``private_key`` is neither ``str`` nor ``bytes``.
        """
        if key_type not in PrivateKey.AIP80_PREFIXES:
            raise ValueError(f"Unknown private key type: {key_type}")
        aip80_prefix = PrivateKey.AIP80_PREFIXES[key_type]

        if isinstance(private_key, bytes):
            key_value = f"0x{private_key.hex()}"
        elif isinstance(private_key, str):
            key_value = private_key.removeprefix(aip80_prefix)
        else:
            raise TypeError("Input value must be a string or bytes.")

        return f"{aip80_prefix}{key_value}"

    @staticmethod
    def parse_hex_input(
        value: str | bytes, key_type: PrivateKeyVariant, strict: bool | None = None
    ) -> bytes:
        """Decode a private key from bytes, legacy hex, or AIP-80 text.

        Args:
            value: Raw key bytes, ``"0x…"``/bare hex, or an AIP-80 string.
            key_type: The scheme the key must belong to.
            strict: ``True`` accepts only AIP-80 strings. ``False`` also
                accepts legacy hex. ``None`` accepts legacy hex and logs a
                warning recommending AIP-80.

        Returns:
            The raw private key bytes.

        Raises:
            ValueError: On an unknown scheme, on legacy hex in strict mode, or
                on text that is not hex.
            TypeError: If ``value`` is neither ``str`` nor ``bytes``.
        """
        if key_type not in PrivateKey.AIP80_PREFIXES:
            raise ValueError(f"Unknown private key type: {key_type}")
        aip80_prefix = PrivateKey.AIP80_PREFIXES[key_type]

        if isinstance(value, bytes):
            return value
        if not isinstance(value, str):
            raise TypeError("Input value must be a string or bytes.")

        if value.startswith(aip80_prefix):
            value = value[len(aip80_prefix) :]
        elif strict:
            raise ValueError("Invalid HexString input. Must be AIP-80 compliant string.")
        elif strict is None:
            logging.warning(
                "It is recommended that private keys are AIP-80 compliant "
                "(https://github.com/aptos-foundation/AIPs/blob/main/aips/aip-80.md)."
            )

        return bytes.fromhex(value.removeprefix("0x"))


class PublicKey(Deserializable, Serializable, Protocol):
    """A verification key.

    ``to_crypto_bytes`` is the byte string that feeds authentication key
    derivation. For the primitive schemes it is the raw key; for the wrapped
    keys it is their full BCS encoding, variant tag included.
    """

    def to_crypto_bytes(self) -> bytes:
        ...

    def verify(self, data: bytes, signature: Signature) -> bool:
        ...


class Signature(Deserializable, Serializable, Protocol):
    """A signature produced by a :class:`PrivateKey`. Treated as immutable."""

    ...


class Test(unittest.TestCase):
    KEY_HEX = "0x4e5e3be60f4bbd5e98d086d932f3ce779ff4b58da99bf9e5241ae1212a29e5fe"

    def test_format_private_key(self):
        expected = f"ed25519-priv-{self.KEY_HEX}"
        self.assertEqual(
            PrivateKey.format_private_key(self.KEY_HEX, PrivateKeyVariant.Ed25519),
            expected,
        )
        self.assertEqual(
            PrivateKey.format_private_key(expected, PrivateKeyVariant.Ed25519),
            expected,
        )
        self.assertEqual(
            PrivateKey.format_private_key(
                bytes.fromhex(self.KEY_HEX[2:]), PrivateKeyVariant.Ed25519
            ),
            expected,
        )

    def test_parse_hex_input(self):
        raw = bytes.fromhex(self.KEY_HEX[2:])
        aip80 = f"secp256k1-priv-{self.KEY_HEX}"
        self.assertEqual(
            PrivateKey.parse_hex_input(aip80, PrivateKeyVariant.Secp256k1, True), raw
        )
        self.assertEqual(
            PrivateKey.parse_hex_input(self.KEY_HEX, PrivateKeyVariant.Ed25519, False),
            raw,
        )
        self.assertEqual(
            PrivateKey.parse_hex_input(raw, PrivateKeyVariant.Ed25519, True), raw
        )

    def test_parse_hex_input_strict(self):
        with self.assertRaises(ValueError):
            PrivateKey.parse_hex_input(self.KEY_HEX, PrivateKeyVariant.Ed25519, True)
        # The prefix of another scheme is not AIP-80 for this one.
        with self.assertRaises(ValueError):
            PrivateKey.parse_hex_input(
                f"ed25519-priv-{self.KEY_HEX}", PrivateKeyVariant.Secp256k1, True
            )

    def test_parse_hex_input_warns_on_legacy(self):
        with self.assertLogs(level="WARNING"):
            PrivateKey.parse_hex_input(self.KEY_HEX, PrivateKeyVariant.Ed25519)


if __name__ == "__main__":
    unittest.main()
