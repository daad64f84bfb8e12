# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
secp256k1 ECDSA keys and signatures, backed by the ``ecdsa`` package.

Messages are hashed with SHA3-256 and signed with RFC 6979 deterministic
nonces. Signatures are the raw 64-byte ``r || s`` form (not DER) with ``s``
normalized to the lower half of the curve order; verification rejects the
high-``s`` twin of a valid signature so that a signature has one valid form.

Public keys are written uncompressed, ``0x04`` followed by the 64-byte
``x || y``, as a BCS byte string. Decoding from BCS accepts only that form;
``from_str`` and ``from_crypto_bytes`` also accept a bare 64-byte key.
"""

from __future__ import annotations

import hashlib
import logging
import unittest

from ecdsa import SECP256k1, BadSignatureError, SigningKey, VerifyingKey, util

from . import asymmetric_crypto
from .bcs import Deserializer, Serializer
from .errors import LengthMismatch, NonCanonicalEncoding

CURVE_ORDER = SECP256k1.generator.order()


class PrivateKey(asymmetric_crypto.PrivateKey):
    LENGTH: int = 32

    key: SigningKey

    def __init__(self, key: SigningKey):
        self.key = key

    def __eq__(self, other: object):
        if not isinstance(other, PrivateKey):
            return NotImplemented
        return self.key.to_string() == other.key.to_string()

    def __str__(self):
        return self.aip80()

    @staticmethod
    def from_hex(value: str | bytes, strict: bool | None = None) -> PrivateKey:
        """Build a key from raw bytes, hex or AIP-80 text.

        Raises:
            LengthMismatch: If the decoded key is not 32 bytes.
        """
        key = PrivateKey.parse_hex_input(
            value, asymmetric_crypto.PrivateKeyVariant.Secp256k1, strict
        )
        if len(key) != PrivateKey.LENGTH:
            raise LengthMismatch("Secp256k1 private key", PrivateKey.LENGTH, len(key))
        return PrivateKey(SigningKey.from_string(key, SECP256k1, hashlib.sha3_256))

    @staticmethod
    def from_str(value: str, strict: bool | None = None) -> PrivateKey:
        return PrivateKey.from_hex(value, strict)

    def hex(self) -> str:
        return f"0x{self.key.to_string().hex()}"

    def aip80(self) -> str:
        return PrivateKey.format_private_key(
            self.hex(), asymmetric_crypto.PrivateKeyVariant.Secp256k1
        )

    def public_key(self) -> PublicKey:
        return PublicKey(self.key.verifying_key)

    @staticmethod
    def random() -> PrivateKey:
        return PrivateKey(
            SigningKey.generate(curve=SECP256k1, hashfunc=hashlib.sha3_256)
        )

    def sign(self, data: bytes) -> Signature:
        """Sign ``data`` deterministically and return the low-``s`` signature."""
        sig = self.key.sign_deterministic(data, hashfunc=hashlib.sha3_256)
        r, s = util.sigdecode_string(sig, CURVE_ORDER)
        # (r, s) and (r, n - s) both verify; only the low form is accepted.
        if s > CURVE_ORDER // 2:
            sig = util.sigencode_string(r, CURVE_ORDER - s, CURVE_ORDER)
        return Signature(sig)

    @staticmethod
    def deserialize(deserializer: Deserializer) -> PrivateKey:
        key = deserializer.to_bytes()
        if len(key) != PrivateKey.LENGTH:
            raise LengthMismatch("Secp256k1 private key", PrivateKey.LENGTH, len(key))
        return PrivateKey(SigningKey.from_string(key, SECP256k1, hashlib.sha3_256))

    def serialize(self, serializer: Serializer):
        serializer.to_bytes(self.key.to_string())


class PublicKey(asymmetric_crypto.PublicKey):
    """secp256k1 verification key.

    Attributes:
        LENGTH: Length of the bare ``x || y`` point (64).
        LENGTH_WITH_PREFIX_LENGTH: Length with the ``0x04`` marker (65).
        key: The wrapped ``ecdsa`` ``VerifyingKey``.
    """

    LENGTH: int = 64
    LENGTH_WITH_PREFIX_LENGTH: int = 65

    key: VerifyingKey

    def __init__(self, key: VerifyingKey):
        self.key = key

    def __eq__(self, other: object):
        if not isinstance(other, PublicKey):
            return NotImplemented
        return self.key.to_string() == other.key.to_string()

    def __hash__(self):
        return hash(self.key.to_string())

    def __str__(self) -> str:
        return self.hex()

    @staticmethod
    def from_crypto_bytes(key: bytes) -> PublicKey:
        """Build a key from 65 prefixed bytes or 64 bare bytes.

        Raises:
            LengthMismatch: For any other length.
        """
        if len(key) == PublicKey.LENGTH_WITH_PREFIX_LENGTH:
            key = key[1:]
        elif len(key) != PublicKey.LENGTH:
            raise LengthMismatch(
                "Secp256k1 public key", PublicKey.LENGTH_WITH_PREFIX_LENGTH, len(key)
            )
        return PublicKey(VerifyingKey.from_string(key, SECP256k1, hashlib.sha3_256))

    @staticmethod
    def from_str(value: str) -> PublicKey:
        return PublicKey.from_crypto_bytes(bytes.fromhex(value.removeprefix("0x")))

    def hex(self) -> str:
        return f"0x{self.to_crypto_bytes().hex()}"

    def verify(self, data: bytes, signature: asymmetric_crypto.Signature) -> bool:
        """Check a low-``s`` secp256k1 signature over ``data``.

        Returns False for a signature that does not verify, a high-``s``
        signature, or a signature of another scheme.
        """
        if not isinstance(signature, Signature):
            logging.debug("Secp256k1 key given a %s", type(signature).__name__)
            return False
        _, s = util.sigdecode_string(signature.data(), CURVE_ORDER)
        if s > CURVE_ORDER // 2:
            logging.debug("Rejecting non-canonical secp256k1 signature")
            return False
        try:
            self.key.verify(signature.data(), data)
        except BadSignatureError:
            return False
        return True

    def to_crypto_bytes(self) -> bytes:
        return b"\x04" + self.key.to_string()

    @staticmethod
    def deserialize(deserializer: Deserializer) -> PublicKey:
        """Read the 65-byte uncompressed form, the only form written on the wire.

        Raises:
            LengthMismatch: If the key is not 65 bytes.
            NonCanonicalEncoding: If the key does not start with ``0x04``.
        """
        key = deserializer.to_bytes()
        if len(key) != PublicKey.LENGTH_WITH_PREFIX_LENGTH:
            raise LengthMismatch(
                "Secp256k1 public key", PublicKey.LENGTH_WITH_PREFIX_LENGTH, len(key)
            )
        if key[0] != 0x04:
            raise NonCanonicalEncoding(
                f"Secp256k1 public key must start with 0x04, got 0x{key[0]:02x}"
            )
        return PublicKey.from_crypto_bytes(key)

    def serialize(self, serializer: Serializer):
        serializer.to_bytes(self.to_crypto_bytes())


class Signature(asymmetric_crypto.Signature):
    """secp256k1 signature, ``r || s`` as 64 raw bytes."""

    LENGTH: int = 64

    signature: bytes

    def __init__(self, signature: bytes):
        if len(signature) != Signature.LENGTH:
            raise LengthMismatch(
                "Secp256k1 signature", Signature.LENGTH, len(signature)
            )
        self.signature = bytes(signature)

    def __eq__(self, other: object):
        if not isinstance(other, Signature):
            return NotImplemented
        return self.signature == other.signature

    def __hash__(self):
        return hash(self.signature)

    def __str__(self) -> str:
        return self.hex()

    def hex(self) -> str:
        return f"0x{self.signature.hex()}"

    @staticmethod
    def from_str(value: str) -> Signature:
        return Signature(bytes.fromhex(value.removeprefix("0x")))

    def data(self) -> bytes:
        return self.signature

    @staticmethod
    def deserialize(deserializer: Deserializer) -> Signature:
        return Signature(deserializer.to_bytes())

    def serialize(self, serializer: Serializer):
        serializer.to_bytes(self.signature)


class Test(unittest.TestCase):
    PRIVATE_KEY = "secp256k1-priv-0x306fa009600e27c09d2659145ce1785249360dd5fb992da01a578fe67ed607f4"
    PUBLIC_KEY = "0x04210c9129e35337ff5d6488f90f18d842cf985f06e0baeff8df4bfb2ac4221863e2631b971a237b5db0aa71188e33250732dd461d56ee623cbe0426a5c2db79ef"
    SIGNATURE = "0xa539b0973e76fa99b2a864eebd5da950b4dfb399c7afe57ddb34130e454fc9db04dceb2c3d4260b8cc3d3952ab21b5d36c7dc76277fe3747764e6762d12bd9a9"

    def test_private_key_from_str(self):
        private_key_hex = PrivateKey.from_str(
            "0x306fa009600e27c09d2659145ce1785249360dd5fb992da01a578fe67ed607f4", False
        )
        private_key_with_prefix = PrivateKey.from_str(self.PRIVATE_KEY, True)
        self.assertEqual(private_key_hex, private_key_with_prefix)
        self.assertEqual(str(private_key_hex), self.PRIVATE_KEY)

    def test_vectors(self):
        data = b"Hello world"
        private_key = PrivateKey.from_str(self.PRIVATE_KEY)
        local_public_key = private_key.public_key()
        local_signature = private_key.sign(data)
        self.assertTrue(local_public_key.verify(data, local_signature))

        original_public_key = PublicKey.from_str(self.PUBLIC_KEY)
        self.assertEqual(original_public_key, local_public_key)
        self.assertEqual(str(local_public_key), self.PUBLIC_KEY)

        original_signature = Signature.from_str(self.SIGNATURE)
        self.assertTrue(original_public_key.verify(data, original_signature))

    def test_rejects_high_s(self):
        data = b"Hello world"
        private_key = PrivateKey.from_str(self.PRIVATE_KEY)
        signature = private_key.sign(data)
        r, s = util.sigdecode_string(signature.data(), CURVE_ORDER)
        self.assertLessEqual(s, CURVE_ORDER // 2)

        malleated = Signature(util.sigencode_string(r, CURVE_ORDER - s, CURVE_ORDER))
        self.assertFalse(private_key.public_key().verify(data, malleated))

    def test_sign_and_verify(self):
        in_value = b"test_message"

        private_key = PrivateKey.random()
        public_key = private_key.public_key()

        signature = private_key.sign(in_value)
        self.assertTrue(public_key.verify(in_value, signature))
        self.assertFalse(public_key.verify(b"other_message", signature))

    def test_serialization(self):
        private_key = PrivateKey.random()
        public_key = private_key.public_key()
        signature = private_key.sign(b"another_message")

        self.assertEqual(PrivateKey.from_bytes(private_key.to_bytes()), private_key)
        self.assertEqual(PublicKey.from_bytes(public_key.to_bytes()), public_key)
        self.assertEqual(Signature.from_bytes(signature.to_bytes()), signature)
        self.assertEqual(len(public_key.to_bytes()), 66)

    def test_bare_public_key(self):
        public_key = PublicKey.from_str(self.PUBLIC_KEY)
        bare = PublicKey.from_crypto_bytes(public_key.to_crypto_bytes()[1:])
        self.assertEqual(bare, public_key)
        with self.assertRaises(LengthMismatch):
            PublicKey.from_crypto_bytes(b"\x04" * 33)

    def test_deserialize_rejects_non_canonical_key(self):
        public_key = PublicKey.from_str(self.PUBLIC_KEY)
        encoded = public_key.to_bytes()
        self.assertEqual(encoded[:2], b"\x41\x04")

        with self.assertRaises(NonCanonicalEncoding):
            PublicKey.from_bytes(encoded[:1] + b"\x05" + encoded[2:])

        ser = Serializer()
        ser.to_bytes(public_key.to_crypto_bytes()[1:])
        with self.assertRaises(LengthMismatch):
            PublicKey.from_bytes(ser.output())


if __name__ == "__main__":
    unittest.main()
