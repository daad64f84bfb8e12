# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Scheme-agnostic keys and signatures, and K-of-N multi keys built from them.

:class:`AnyPublicKey` and :class:`AnySignature` tag a primitive key or signature
with its :class:`SchemeVariant`, so that code holding one can store, encode and
verify it without knowing the scheme. On the wire a wrapped value is its
ULEB128 variant followed by the primitive's own encoding.

:class:`MultiKey` is an ordered list of wrapped keys plus the number of
signatures required. A key's position in the list is its slot in the signer
bitmap of a :class:`MultiKeySignature`, whose i-th signature belongs to the
i-th set bit.

Examples:
    A 2-of-3 multi key over mixed schemes::

        multi_key = MultiKey([alice.public_key(), bob.public_key(), carol.public_key()], 2)
        signature = MultiKeySignature.from_key_map(
            multi_key,
            [
                (alice.public_key(), alice.sign(message)),
                (carol.public_key(), carol.sign(message)),
            ],
        )
        assert multi_key.verify(message, signature)
"""

from __future__ import annotations

import logging
import typing
import unittest
from enum import IntEnum
from typing import Dict, List, Optional, Tuple, Type

from . import asymmetric_crypto, ed25519, secp256k1_ecdsa
from .account_address import AccountAddress, AuthenticationKey, AuthKeyScheme
from .bcs import Deserializer, Serializer
from .bitmap import (
    BITMAP_NUM_OF_BYTES,
    MAX_BITMAP_BITS,
    bit_count,
    bitmap_indices,
    create_bitmap,
)
from .errors import (
    DuplicateIndex,
    IndexOutOfRange,
    InvalidBitmapLength,
    InvalidThreshold,
    LengthMismatch,
    NonCanonicalEncoding,
    SignatureCountMismatch,
    TooManyKeys,
    TooManySignatures,
    TruncatedInput,
    UnknownVariant,
    UnsupportedKeyType,
    UnsupportedSignatureType,
    VariantMismatch,
)


class SchemeVariant(IntEnum):
    """Wire tag of a wrapped key or signature."""

    ED25519 = 0
    SECP256K1_ECDSA = 1


# A new scheme needs a SchemeVariant member and a row here, nothing else.
SCHEMES: Dict[
    SchemeVariant,
    Tuple[Type[asymmetric_crypto.PublicKey], Type[asymmetric_crypto.Signature]],
] = {
    SchemeVariant.ED25519: (ed25519.PublicKey, ed25519.Signature),
    SchemeVariant.SECP256K1_ECDSA: (
        secp256k1_ecdsa.PublicKey,
        secp256k1_ecdsa.Signature,
    ),
}


def _public_key_variant(public_key: typing.Any) -> Optional[SchemeVariant]:
    for variant, (public_key_type, _) in SCHEMES.items():
        if isinstance(public_key, public_key_type):
            return variant
    return None


def _signature_variant(signature: typing.Any) -> Optional[SchemeVariant]:
    for variant, (_, signature_type) in SCHEMES.items():
        if isinstance(signature, signature_type):
            return variant
    return None


def _check_variant(derived: SchemeVariant, variant: Optional[int]):
    if variant is not None and variant != derived:
        raise VariantMismatch(int(derived), int(variant))


def _read_variant(deserializer: Deserializer, type_name: str) -> SchemeVariant:
    tag = deserializer.uleb128()
    try:
        return SchemeVariant(tag)
    except ValueError as e:
        raise UnknownVariant(tag, type_name) from e


class AnyPublicKey(asymmetric_crypto.PublicKey):
    """A primitive public key tagged with its scheme.

    Attributes:
        variant: The scheme of ``public_key``, fixed at construction.
        public_key: The wrapped primitive key.
    """

    variant: SchemeVariant
    public_key: asymmetric_crypto.PublicKey

    def __init__(
        self,
        public_key: asymmetric_crypto.PublicKey,
        variant: Optional[SchemeVariant] = None,
    ):
        """Wrap ``public_key``.

        Args:
            public_key: An Ed25519 or Secp256k1 public key.
            variant: Optional expected scheme, checked against the key's type.

        Raises:
            UnsupportedKeyType: If ``public_key`` is not a supported primitive.
            VariantMismatch: If ``variant`` is given and names another scheme.
        """
        derived = _public_key_variant(public_key)
        if derived is None:
            raise UnsupportedKeyType(public_key)
        _check_variant(derived, variant)
        self.variant = derived
        self.public_key = public_key

    @staticmethod
    def from_public_key(public_key: asymmetric_crypto.PublicKey) -> AnyPublicKey:
        """Wrap a primitive key; an ``AnyPublicKey`` is returned as is."""
        if isinstance(public_key, AnyPublicKey):
            return public_key
        return AnyPublicKey(public_key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AnyPublicKey):
            return NotImplemented
        return self.variant == other.variant and self.public_key == other.public_key

    def __hash__(self):
        return hash(self.to_crypto_bytes())

    def __str__(self) -> str:
        return str(self.public_key)

    def __repr__(self) -> str:
        return f"AnyPublicKey({self.variant.name}, {self.public_key})"

    def verify(self, data: bytes, signature: asymmetric_crypto.Signature) -> bool:
        """True if ``signature`` is of this key's scheme and verifies ``data``.

        ``signature`` may be wrapped or primitive. A signature of another
        scheme, or of no supported scheme, does not verify.
        """
        if isinstance(signature, AnySignature):
            any_signature = signature
        elif _signature_variant(signature) is not None:
            any_signature = AnySignature(signature)
        else:
            logging.debug("Cannot verify a %s", type(signature).__name__)
            return False

        if any_signature.variant != self.variant:
            logging.debug(
                "Signature variant %s does not match key variant %s",
                any_signature.variant.name,
                self.variant.name,
            )
            return False
        return self.public_key.verify(data, any_signature.signature)

    def to_crypto_bytes(self) -> bytes:
        return self.to_bytes()

    def auth_key(self) -> AuthenticationKey:
        return AuthenticationKey.from_scheme_and_bytes(
            AuthKeyScheme.SingleKey, self.to_crypto_bytes()
        )

    def account_address(self) -> AccountAddress:
        return self.auth_key().account_address()

    @staticmethod
    def deserialize(deserializer: Deserializer) -> AnyPublicKey:
        variant = _read_variant(deserializer, "AnyPublicKey")
        public_key_type, _ = SCHEMES[variant]
        return AnyPublicKey(public_key_type.deserialize(deserializer), variant)

    def serialize(self, serializer: Serializer):
        serializer.uleb128(int(self.variant))
        serializer.struct(self.public_key)


class AnySignature(asymmetric_crypto.Signature):
    """A primitive signature tagged with its scheme.

    The tag written on serialization is ``variant`` as recorded when the value
    was built.
    """

    variant: SchemeVariant
    signature: asymmetric_crypto.Signature

    def __init__(
        self,
        signature: asymmetric_crypto.Signature,
        variant: Optional[SchemeVariant] = None,
    ):
        derived = _signature_variant(signature)
        if derived is None:
            raise UnsupportedSignatureType(signature)
        _check_variant(derived, variant)
        self.variant = derived
        self.signature = signature

    @staticmethod
    def from_signature(signature: asymmetric_crypto.Signature) -> AnySignature:
        if isinstance(signature, AnySignature):
            return signature
        return AnySignature(signature)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AnySignature):
            return NotImplemented
        return self.variant == other.variant and self.signature == other.signature

    def __hash__(self):
        return hash(self.to_bytes())

    def __str__(self) -> str:
        return str(self.signature)

    def __repr__(self) -> str:
        return f"AnySignature({self.variant.name}, {self.signature})"

    @staticmethod
    def deserialize(deserializer: Deserializer) -> AnySignature:
        variant = _read_variant(deserializer, "AnySignature")
        _, signature_type = SCHEMES[variant]
        return AnySignature(signature_type.deserialize(deserializer), variant)

    def serialize(self, serializer: Serializer):
        serializer.uleb128(int(self.variant))
        serializer.struct(self.signature)


class MultiKey(asymmetric_crypto.PublicKey):
    """A K-of-N policy over wrapped public keys.

    Attributes:
        keys: The keys, in bitmap slot order.
        threshold: Number of valid signatures required.
        MAX_KEYS: Slots available in a signer bitmap (32).
    """

    keys: List[AnyPublicKey]
    threshold: int

    MAX_KEYS: int = MAX_BITMAP_BITS

    def __init__(
        self, keys: typing.Sequence[asymmetric_crypto.PublicKey], threshold: int
    ):
        """Build the key set, wrapping primitive keys.

        Raises:
            TooManyKeys: If more than 32 keys are given.
            InvalidThreshold: Unless ``1 <= threshold <= len(keys)``.
            UnsupportedKeyType: If a key is not a supported primitive.
        """
        if len(keys) > self.MAX_KEYS:
            raise TooManyKeys(len(keys), self.MAX_KEYS)
        if threshold < 1 or threshold > len(keys):
            raise InvalidThreshold(threshold, len(keys))

        self.keys = [AnyPublicKey.from_public_key(key) for key in keys]
        self.threshold = threshold

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MultiKey):
            return NotImplemented
        return self.keys == other.keys and self.threshold == other.threshold

    def __hash__(self):
        return hash(self.to_bytes())

    def __str__(self) -> str:
        return f"{self.threshold}-of-{len(self.keys)} Multi key"

    def create_bitmap(self, indices: typing.Iterable[int]) -> bytes:
        """Bitmap of signer positions, each below the number of keys."""
        return create_bitmap(indices, len(self.keys))

    def signer_index(self, public_key: asymmetric_crypto.PublicKey) -> int:
        """Position of ``public_key`` in this key set.

        Raises:
            ValueError: If the key is not part of the set.
        """
        try:
            return self.keys.index(AnyPublicKey.from_public_key(public_key))
        except ValueError as e:
            raise ValueError(f"{public_key} is not part of the {self}") from e

    def verify(self, data: bytes, signature: asymmetric_crypto.Signature) -> bool:
        """True if every claimed signer verifies and at least ``threshold`` do.

        Each set bit of the bitmap must name one of the keys, and the matching
        signature must verify under that key.
        """
        if not isinstance(signature, MultiKeySignature):
            logging.debug("Multi key given a %s", type(signature).__name__)
            return False

        valid_signers = 0
        for index, any_signature in zip(
            signature.signer_indices(), signature.signatures
        ):
            if index >= len(self.keys):
                logging.debug("Signer %d is not part of the %s", index, self)
                return False
            if not self.keys[index].verify(data, any_signature):
                logging.debug("Signature of signer %d does not verify", index)
                return False
            valid_signers += 1

        if valid_signers < self.threshold:
            logging.debug(
                "Insufficient signatures, %d < %d", valid_signers, self.threshold
            )
            return False
        return True

    def to_crypto_bytes(self) -> bytes:
        return self.to_bytes()

    def auth_key(self) -> AuthenticationKey:
        return AuthenticationKey.from_scheme_and_bytes(
            AuthKeyScheme.MultiKey, self.to_crypto_bytes()
        )

    def account_address(self) -> AccountAddress:
        return self.auth_key().account_address()

    @staticmethod
    def deserialize(deserializer: Deserializer) -> MultiKey:
        keys = deserializer.sequence(AnyPublicKey.deserialize)
        threshold = deserializer.u8()
        return MultiKey(keys, threshold)

    def serialize(self, serializer: Serializer):
        serializer.sequence(self.keys, Serializer.struct)
        serializer.u8(self.threshold)


class MultiKeySignature(asymmetric_crypto.Signature):
    """Signatures from a subset of a multi key's signers.

    ``bitmap`` marks which slots signed; ``signatures[i]`` belongs to the i-th
    set bit in ascending order. The count is implied by the bitmap and is not
    written on the wire.
    """

    signatures: List[AnySignature]
    bitmap: bytes

    MAX_SIGNATURES: int = MAX_BITMAP_BITS

    def __init__(
        self,
        signatures: typing.Sequence[asymmetric_crypto.Signature],
        bitmap: typing.Union[bytes, bytearray, typing.Iterable[int]],
    ):
        """
        Args:
            signatures: Signatures in slot order, wrapped or primitive.
            bitmap: A 4-byte bitmap, or the signer positions to encode.

        Raises:
            TooManySignatures: If more than 32 signatures are given.
            InvalidBitmapLength: If a raw bitmap is not 4 bytes.
            SignatureCountMismatch: If the bitmap does not have exactly one
                set bit per signature.
        """
        if len(signatures) > self.MAX_SIGNATURES:
            raise TooManySignatures(len(signatures), self.MAX_SIGNATURES)
        self.signatures = [
            AnySignature.from_signature(signature) for signature in signatures
        ]

        if isinstance(bitmap, (bytes, bytearray, memoryview)):
            if len(bitmap) != BITMAP_NUM_OF_BYTES:
                raise InvalidBitmapLength(len(bitmap), BITMAP_NUM_OF_BYTES)
            self.bitmap = bytes(bitmap)
        else:
            self.bitmap = create_bitmap(bitmap)

        expected = bit_count(self.bitmap)
        if expected != len(self.signatures):
            raise SignatureCountMismatch(expected, len(self.signatures))

    @staticmethod
    def from_key_map(
        multi_key: MultiKey,
        signatures: typing.Iterable[
            Tuple[asymmetric_crypto.PublicKey, asymmetric_crypto.Signature]
        ],
    ) -> MultiKeySignature:
        """Build from ``(public_key, signature)`` pairs given in any order."""
        indexed = sorted(
            (
                (multi_key.signer_index(public_key), signature)
                for public_key, signature in signatures
            ),
            key=lambda entry: entry[0],
        )
        bitmap = multi_key.create_bitmap([index for index, _ in indexed])
        return MultiKeySignature([signature for _, signature in indexed], bitmap)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MultiKeySignature):
            return NotImplemented
        return self.bitmap == other.bitmap and self.signatures == other.signatures

    def __hash__(self):
        return hash(self.to_bytes())

    def __str__(self) -> str:
        return f"MultiKeySignature(signers={self.signer_indices()})"

    def signer_indices(self) -> List[int]:
        return bitmap_indices(self.bitmap)

    @staticmethod
    def deserialize(deserializer: Deserializer) -> MultiKeySignature:
        bitmap = deserializer.to_bytes()
        if len(bitmap) != BITMAP_NUM_OF_BYTES:
            raise InvalidBitmapLength(len(bitmap), BITMAP_NUM_OF_BYTES)
        signatures = [
            AnySignature.deserialize(deserializer) for _ in range(bit_count(bitmap))
        ]
        return MultiKeySignature(signatures, bitmap)

    def serialize(self, serializer: Serializer):
        serializer.to_bytes(self.bitmap)
        for signature in self.signatures:
            serializer.struct(signature)


class Test(unittest.TestCase):
    ED25519_PRIVATE_KEY = (
        "ed25519-priv-0x4e5e3be60f4bbd5e98d086d932f3ce779ff4b58da99bf9e5241ae1212a29e5fe"
    )
    ED25519_PUBLIC_KEY = (
        "754bb6a4720a658bdd5f532995955db0971ad3519acbde2f1149c3857348006c"
    )
    ED25519_PRIVATE_KEY_2 = (
        "ed25519-priv-0x1e70e49b78f976644e2c51754a2f049d3ff041869c669523ba95b172c7329901"
    )
    ED25519_PUBLIC_KEY_2 = (
        "1634cd4607073f2be4a6f2aadc2b866ddb117398a675f2096ed906b20e0bf2c9"
    )
    MULTISIG_SIGNATURE = (
        "02e90d8f300d79963cb7159ffa6f620f5bba4af5d32a7176bfb5480b43897cf4"
        "886bbb4042182f4647c9b04f02dbf989966f0facceec52d22bdcc7ce631bfc0c"
    )

    def setUp(self):
        self.private_key = ed25519.PrivateKey.from_str(self.ED25519_PRIVATE_KEY)
        self.private_key_2 = ed25519.PrivateKey.from_str(self.ED25519_PRIVATE_KEY_2)
        self.secp256k1_key = secp256k1_ecdsa.PrivateKey.random()

    def test_scheme_table_covers_every_variant(self):
        self.assertEqual(set(SCHEMES), set(SchemeVariant))

    def test_any_public_key_vector(self):
        public_key = AnyPublicKey(self.private_key.public_key())
        self.assertEqual(public_key.variant, SchemeVariant.ED25519)

        expected = bytes.fromhex("0020" + self.ED25519_PUBLIC_KEY)
        self.assertEqual(public_key.to_bytes(), expected)
        self.assertEqual(AnyPublicKey.from_bytes(expected), public_key)
        self.assertEqual(
            str(public_key.auth_key()),
            "0xc74af15f7e4a5d7dfab3a4dc35f404f7ce23abc6a939c0808dabd29e9b249158",
        )
        self.assertEqual(
            AccountAddress.from_key(public_key), public_key.account_address()
        )

    def test_any_public_key_secp256k1(self):
        public_key = AnyPublicKey(self.secp256k1_key.public_key())
        self.assertEqual(public_key.variant, SchemeVariant.SECP256K1_ECDSA)
        self.assertEqual(public_key.to_bytes()[:2], b"\x01\x41")
        self.assertEqual(AnyPublicKey.from_bytes(public_key.to_bytes()), public_key)

        signature = AnySignature(self.secp256k1_key.sign(b"msg"))
        self.assertEqual(signature.to_bytes()[:2], b"\x01\x40")
        self.assertEqual(AnySignature.from_bytes(signature.to_bytes()), signature)

    def test_normalization(self):
        public_key = AnyPublicKey(self.private_key.public_key())
        self.assertIs(AnyPublicKey.from_public_key(public_key), public_key)
        signature = AnySignature(self.private_key.sign(b"msg"))
        self.assertIs(AnySignature.from_signature(signature), signature)

    def test_unsupported_types(self):
        with self.assertRaises(UnsupportedKeyType):
            AnyPublicKey(b"\x00" * 32)  # type: ignore[arg-type]
        with self.assertRaises(UnsupportedKeyType):
            AnyPublicKey(AnyPublicKey(self.private_key.public_key()))
        with self.assertRaises(UnsupportedSignatureType):
            AnySignature(b"\x00" * 64)  # type: ignore[arg-type]

    def test_variant_mismatch(self):
        with self.assertRaises(VariantMismatch):
            AnyPublicKey(
                self.private_key.public_key(), SchemeVariant.SECP256K1_ECDSA
            )
        with self.assertRaises(VariantMismatch):
            AnySignature(self.secp256k1_key.sign(b"msg"), SchemeVariant.ED25519)

    def test_unknown_variant(self):
        encoded = AnyPublicKey(self.private_key.public_key()).to_bytes()
        with self.assertRaises(UnknownVariant) as ctx:
            AnyPublicKey.from_bytes(b"\x63" + encoded[1:])
        self.assertEqual(ctx.exception.variant, 99)

        encoded = AnySignature(self.private_key.sign(b"msg")).to_bytes()
        with self.assertRaises(UnknownVariant):
            AnySignature.from_bytes(b"\x02" + encoded[1:])

    def test_verify(self):
        message = b"test_message"
        public_key = AnyPublicKey(self.private_key.public_key())
        signature = self.private_key.sign(message)

        self.assertTrue(public_key.verify(message, signature))
        self.assertTrue(public_key.verify(message, AnySignature(signature)))
        self.assertFalse(public_key.verify(b"other_message", signature))

        # A valid signature of another scheme is not a valid signature here.
        other = self.secp256k1_key.sign(message)
        self.assertFalse(public_key.verify(message, other))
        self.assertTrue(
            AnyPublicKey(self.secp256k1_key.public_key()).verify(message, other)
        )

    def test_multi_key_threshold(self):
        key_1 = self.private_key.public_key()
        key_2 = self.private_key_2.public_key()
        with self.assertRaises(InvalidThreshold):
            MultiKey([key_1], 0)
        with self.assertRaises(InvalidThreshold):
            MultiKey([key_1, key_2], 3)
        with self.assertRaises(InvalidThreshold):
            MultiKey([], 1)

        keys = [ed25519.PrivateKey.random().public_key() for _ in range(33)]
        with self.assertRaises(TooManyKeys):
            MultiKey(keys, 1)
        self.assertEqual(len(MultiKey(keys[:32], 32).keys), 32)

    def test_multi_key_vector(self):
        multi_key = MultiKey(
            [self.private_key.public_key(), self.private_key_2.public_key()], 1
        )
        expected = bytes.fromhex(
            "02"
            + "0020"
            + self.ED25519_PUBLIC_KEY
            + "0020"
            + self.ED25519_PUBLIC_KEY_2
            + "01"
        )
        self.assertEqual(multi_key.to_bytes(), expected)
        self.assertEqual(MultiKey.from_bytes(expected), multi_key)
        self.assertEqual(
            str(multi_key.auth_key()),
            "0xb34636594464f0de040ae00165c53a95b69176ad249ebe7dc8b23ff65890e2e2",
        )
        self.assertEqual(AccountAddress.from_key(multi_key), multi_key.account_address())
        self.assertEqual(str(multi_key), "1-of-2 Multi key")

    def test_multi_key_mixed_schemes_round_trip(self):
        multi_key = MultiKey(
            [
                self.secp256k1_key.public_key(),
                self.private_key.public_key(),
                secp256k1_ecdsa.PrivateKey.random().public_key(),
            ],
            2,
        )
        decoded = MultiKey.from_bytes(multi_key.to_bytes())
        self.assertEqual(decoded, multi_key)
        self.assertEqual(
            [key.variant for key in decoded.keys],
            [
                SchemeVariant.SECP256K1_ECDSA,
                SchemeVariant.ED25519,
                SchemeVariant.SECP256K1_ECDSA,
            ],
        )
        self.assertEqual(decoded.auth_key(), multi_key.auth_key())

    def test_multi_values_are_hashable(self):
        keys = [self.private_key.public_key(), self.secp256k1_key.public_key()]
        multi_key = MultiKey(keys, 1)
        self.assertEqual(hash(multi_key), hash(MultiKey(keys, 1)))
        self.assertEqual(len({multi_key, MultiKey(keys, 1)}), 1)

        signature = MultiKeySignature([self.private_key.sign(b"msg")], [0])
        decoded = MultiKeySignature.from_bytes(signature.to_bytes())
        self.assertEqual(hash(signature), hash(decoded))
        self.assertIn(decoded, {signature})

    def test_secp256k1_key_has_one_wire_form(self):
        public_key = AnyPublicKey(self.secp256k1_key.public_key())
        encoded = public_key.to_bytes()
        with self.assertRaises(NonCanonicalEncoding):
            AnyPublicKey.from_bytes(encoded[:2] + b"\x05" + encoded[3:])
        with self.assertRaises(LengthMismatch):
            AnyPublicKey.from_bytes(b"\x01\x40" + encoded[3:])

    def test_multi_key_bitmap(self):
        multi_key = MultiKey(
            [
                self.private_key.public_key(),
                self.secp256k1_key.public_key(),
                self.private_key_2.public_key(),
            ],
            2,
        )
        self.assertEqual(multi_key.create_bitmap([0, 2]), b"\xa0\x00\x00\x00")
        with self.assertRaises(IndexOutOfRange):
            multi_key.create_bitmap([3])
        with self.assertRaises(DuplicateIndex):
            multi_key.create_bitmap([2, 2])

        self.assertEqual(multi_key.signer_index(self.secp256k1_key.public_key()), 1)
        with self.assertRaises(ValueError):
            multi_key.signer_index(ed25519.PrivateKey.random().public_key())

    def test_multi_key_signature_vector(self):
        multi_key = MultiKey(
            [self.private_key.public_key(), self.private_key_2.public_key()], 1
        )
        signature = self.private_key_2.sign(b"multisig")
        self.assertEqual(str(signature), "0x" + self.MULTISIG_SIGNATURE)

        multi_signature = MultiKeySignature([signature], [1])
        expected = bytes.fromhex("0440000000" + "0040" + self.MULTISIG_SIGNATURE)
        self.assertEqual(multi_signature.to_bytes(), expected)
        self.assertEqual(MultiKeySignature.from_bytes(expected), multi_signature)
        self.assertEqual(multi_signature.signer_indices(), [1])
        self.assertTrue(multi_key.verify(b"multisig", multi_signature))

    def test_two_of_three_mixed_schemes(self):
        message = b"two of three"
        secp256k1_public_key = self.secp256k1_key.public_key()
        multi_key = MultiKey(
            [
                self.private_key.public_key(),
                secp256k1_public_key,
                self.private_key_2.public_key(),
            ],
            2,
        )

        signature = MultiKeySignature.from_key_map(
            multi_key,
            [
                (self.private_key_2.public_key(), self.private_key_2.sign(message)),
                (self.private_key.public_key(), self.private_key.sign(message)),
            ],
        )
        self.assertEqual(signature.bitmap, b"\xa0\x00\x00\x00")
        self.assertEqual(signature.signer_indices(), [0, 2])
        self.assertTrue(multi_key.verify(message, signature))
        self.assertFalse(multi_key.verify(b"another message", signature))

        decoded = MultiKeySignature.from_bytes(signature.to_bytes())
        self.assertEqual(decoded, signature)
        self.assertEqual(len(decoded.signatures), 2)

        with_secp256k1 = MultiKeySignature(
            [self.secp256k1_key.sign(message), self.private_key_2.sign(message)],
            [1, 2],
        )
        self.assertTrue(multi_key.verify(message, with_secp256k1))

        # Below threshold.
        one = MultiKeySignature([self.private_key.sign(message)], [0])
        self.assertFalse(multi_key.verify(message, one))

        # Signatures swapped between slots.
        swapped = MultiKeySignature(
            [self.private_key_2.sign(message), self.private_key.sign(message)],
            [0, 2],
        )
        self.assertFalse(multi_key.verify(message, swapped))

        # A slot beyond the key set.
        beyond = MultiKeySignature(
            [self.private_key.sign(message), self.private_key_2.sign(message)],
            [0, 5],
        )
        self.assertFalse(multi_key.verify(message, beyond))

        self.assertFalse(multi_key.verify(message, self.private_key.sign(message)))

    def test_signature_count_mismatch(self):
        signatures = [
            self.private_key.sign(b"msg"),
            self.private_key_2.sign(b"msg"),
        ]
        with self.assertRaises(SignatureCountMismatch) as ctx:
            MultiKeySignature(signatures, create_bitmap([0, 1, 2]))
        self.assertEqual(ctx.exception.expected, 3)
        self.assertEqual(ctx.exception.actual, 2)

    def test_too_many_signatures(self):
        signature = self.private_key.sign(b"msg")
        with self.assertRaises(TooManySignatures):
            MultiKeySignature([signature] * 33, list(range(32)))
        self.assertEqual(
            MultiKeySignature([signature] * 32, list(range(32))).bitmap,
            b"\xff\xff\xff\xff",
        )

    def test_invalid_bitmap_length(self):
        signature = self.private_key.sign(b"msg")
        with self.assertRaises(InvalidBitmapLength):
            MultiKeySignature([signature], b"\x80\x00\x00")

        ser = Serializer()
        ser.to_bytes(b"\x80\x00\x00")
        ser.struct(AnySignature(signature))
        with self.assertRaises(InvalidBitmapLength):
            MultiKeySignature.from_bytes(ser.output())

    def test_truncated_signature_list(self):
        ser = Serializer()
        ser.to_bytes(b"\xc0\x00\x00\x00")
        ser.struct(AnySignature(self.private_key.sign(b"msg")))
        with self.assertRaises(TruncatedInput):
            MultiKeySignature.from_bytes(ser.output())

    def test_bitmap_is_copied(self):
        bitmap = bytearray(b"\x80\x00\x00\x00")
        signature = MultiKeySignature([self.private_key.sign(b"msg")], bitmap)
        bitmap[0] = 0xC0
        self.assertEqual(signature.bitmap, b"\x80\x00\x00\x00")


if __name__ == "__main__":
    unittest.main()
