# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Ed25519 keys and signatures, backed by PyNaCl.

Wire sizes: public keys are 32 bytes, signatures 64 bytes and private keys 32
bytes. Each is written as a BCS byte string, so a public key occupies 33 bytes
on the wire (one length byte, ``0x20``, then the key).

Examples:
    Signing and verifying::

        private_key = PrivateKey.random()
        signature = private_key.sign(b"hello")
        assert private_key.public_key().verify(b"hello", signature)
"""

from __future__ import annotations

import logging
import unittest

from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from . import asymmetric_crypto
from .account_address import AuthenticationKey, AuthKeyScheme
from .bcs import Deserializer, Serializer
from .errors import LengthMismatch


class PrivateKey(asymmetric_crypto.PrivateKey):
    """Ed25519 signing key.

    Attributes:
        LENGTH: Byte length of the seed (32).
        key: The wrapped NaCl ``SigningKey``.
    """

    LENGTH: int = 32

    key: SigningKey

    def __init__(self, key: SigningKey):
        self.key = key

    def __eq__(self, other: object):
        if not isinstance(other, PrivateKey):
            return NotImplemented
        return self.key == other.key

    def __str__(self):
        return self.aip80()

    @staticmethod
    def from_hex(value: str | bytes, strict: bool | None = None) -> PrivateKey:
        """Build a key from raw bytes, hex or AIP-80 text.

        Args:
            value: The encoded key.
            strict: See :meth:`asymmetric_crypto.PrivateKey.parse_hex_input`.

        Raises:
            LengthMismatch: If the decoded key is not 32 bytes.
        """
        key = PrivateKey.parse_hex_input(
            value, asymmetric_crypto.PrivateKeyVariant.Ed25519, strict
        )
        if len(key) != PrivateKey.LENGTH:
            raise LengthMismatch("Ed25519 private key", PrivateKey.LENGTH, len(key))
        return PrivateKey(SigningKey(key))

    @staticmethod
    def from_str(value: str, strict: bool | None = None) -> PrivateKey:
        return PrivateKey.from_hex(value, strict)

    def hex(self) -> str:
        return f"0x{self.key.encode().hex()}"

    def aip80(self) -> str:
        return PrivateKey.format_private_key(
            self.hex(), asymmetric_crypto.PrivateKeyVariant.Ed25519
        )

    def public_key(self) -> PublicKey:
        return PublicKey(self.key.verify_key)

    @staticmethod
    def random() -> PrivateKey:
        return PrivateKey(SigningKey.generate())

    def sign(self, data: bytes) -> Signature:
        return Signature(self.key.sign(data).signature)

    @staticmethod
    def deserialize(deserializer: Deserializer) -> PrivateKey:
        key = deserializer.to_bytes()
        if len(key) != PrivateKey.LENGTH:
            raise LengthMismatch("Ed25519 private key", PrivateKey.LENGTH, len(key))
        return PrivateKey(SigningKey(key))

    def serialize(self, serializer: Serializer):
        serializer.to_bytes(self.key.encode())


class PublicKey(asymmetric_crypto.PublicKey):
    """Ed25519 verification key.

    Attributes:
        LENGTH: Byte length of the key (32).
        key: The wrapped NaCl ``VerifyKey``.
    """

    LENGTH: int = 32

    key: VerifyKey

    def __init__(self, key: VerifyKey):
        self.key = key

    def __eq__(self, other: object):
        if not isinstance(other, PublicKey):
            return NotImplemented
        return self.key == other.key

    def __hash__(self):
        return hash(self.key.encode())

    def __str__(self) -> str:
        return f"0x{self.key.encode().hex()}"

    @staticmethod
    def from_str(value: str) -> PublicKey:
        key = bytes.fromhex(value.removeprefix("0x"))
        if len(key) != PublicKey.LENGTH:
            raise LengthMismatch("Ed25519 public key", PublicKey.LENGTH, len(key))
        return PublicKey(VerifyKey(key))

    def verify(self, data: bytes, signature: asymmetric_crypto.Signature) -> bool:
        """Check an Ed25519 signature over ``data``.

        Returns False for a signature that does not verify or that is not an
        Ed25519 signature at all; never raises for bad input.
        """
        if not isinstance(signature, Signature):
            logging.debug("Ed25519 key given a %s", type(signature).__name__)
            return False
        try:
            self.key.verify(data, signature.data())
        except (BadSignatureError, ValueError):
            return False
        return True

    def to_crypto_bytes(self) -> bytes:
        return self.key.encode()

    def auth_key(self) -> AuthenticationKey:
        """Legacy Ed25519 authentication key: SHA3-256 of the key and ``0x00``."""
        return AuthenticationKey.from_scheme_and_bytes(
            AuthKeyScheme.Ed25519, self.to_crypto_bytes()
        )

    @staticmethod
    def deserialize(deserializer: Deserializer) -> PublicKey:
        key = deserializer.to_bytes()
        if len(key) != PublicKey.LENGTH:
            raise LengthMismatch("Ed25519 public key", PublicKey.LENGTH, len(key))
        return PublicKey(VerifyKey(key))

    def serialize(self, serializer: Serializer):
        serializer.to_bytes(self.key.encode())


class Signature(asymmetric_crypto.Signature):
    """Ed25519 signature, 64 raw bytes."""

    LENGTH: int = 64

    signature: bytes

    def __init__(self, signature: bytes):
        if len(signature) != Signature.LENGTH:
            raise LengthMismatch("Ed25519 signature", Signature.LENGTH, len(signature))
        self.signature = bytes(signature)

    def __eq__(self, other: object):
        if not isinstance(other, Signature):
            return NotImplemented
        return self.signature == other.signature

    def __hash__(self):
        return hash(self.signature)

    def __str__(self) -> str:
        return f"0x{self.signature.hex()}"

    def data(self) -> bytes:
        return self.signature

    @staticmethod
    def from_str(value: str) -> Signature:
        return Signature(bytes.fromhex(value.removeprefix("0x")))

    @staticmethod
    def deserialize(deserializer: Deserializer) -> Signature:
        return Signature(deserializer.to_bytes())

    def serialize(self, serializer: Serializer):
        serializer.to_bytes(self.signature)


class Test(unittest.TestCase):
    PRIVATE_KEY = (
        "ed25519-priv-0x4e5e3be60f4bbd5e98d086d932f3ce779ff4b58da99bf9e5241ae1212a29e5fe"
    )
    PUBLIC_KEY = "0x754bb6a4720a658bdd5f532995955db0971ad3519acbde2f1149c3857348006c"

    def test_private_key_from_str(self):
        private_key_hex = PrivateKey.from_str(
            "0x4e5e3be60f4bbd5e98d086d932f3ce779ff4b58da99bf9e5241ae1212a29e5fe", False
        )
        private_key_with_prefix = PrivateKey.from_str(self.PRIVATE_KEY, True)
        private_key_bytes = PrivateKey.from_hex(
            bytes.fromhex(
                "4e5e3be60f4bbd5e98d086d932f3ce779ff4b58da99bf9e5241ae1212a29e5fe"
            ),
            False,
        )
        self.assertEqual(private_key_hex, private_key_with_prefix)
        self.assertEqual(private_key_hex, private_key_bytes)
        self.assertEqual(str(private_key_hex), self.PRIVATE_KEY)

    def test_public_key_vector(self):
        public_key = PrivateKey.from_str(self.PRIVATE_KEY).public_key()
        self.assertEqual(str(public_key), self.PUBLIC_KEY)
        self.assertEqual(public_key, PublicKey.from_str(self.PUBLIC_KEY))

    def test_sign_and_verify(self):
        in_value = b"test_message"

        private_key = PrivateKey.random()
        public_key = private_key.public_key()

        signature = private_key.sign(in_value)
        self.assertTrue(public_key.verify(in_value, signature))
        self.assertFalse(public_key.verify(b"other_message", signature))
        self.assertFalse(
            PrivateKey.random().public_key().verify(in_value, signature)
        )

    def test_serialization(self):
        private_key = PrivateKey.random()
        public_key = private_key.public_key()
        signature = private_key.sign(b"another_message")

        self.assertEqual(PrivateKey.from_bytes(private_key.to_bytes()), private_key)
        self.assertEqual(PublicKey.from_bytes(public_key.to_bytes()), public_key)
        self.assertEqual(Signature.from_bytes(signature.to_bytes()), signature)
        self.assertEqual(
            public_key.to_bytes(), b"\x20" + public_key.to_crypto_bytes()
        )

    def test_length_mismatch(self):
        ser = Serializer()
        ser.to_bytes(b"\x01" * 31)
        with self.assertRaises(LengthMismatch):
            PublicKey.deserialize(Deserializer(ser.output()))
        with self.assertRaises(LengthMismatch):
            Signature(b"\x00" * 63)

    def test_auth_key(self):
        public_key = PublicKey.from_str(self.PUBLIC_KEY)
        self.assertEqual(
            str(public_key.auth_key()),
            "0x37e547afc6ccaa058a6b9ca615d6177b4c9b8bbead76a72d2967b7b5ab166af4",
        )


if __name__ == "__main__":
    unittest.main()
