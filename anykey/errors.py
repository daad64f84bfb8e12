# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Exceptions raised by the anykey key, signature and codec types.

Every exception derives from :class:`CryptoError`. Where a builtin exception
describes the same failure, the class also derives from it, so callers may
catch ``ValueError`` or ``TypeError`` without importing this module.
"""

from __future__ import annotations

import typing


class CryptoError(Exception):
    """Base exception for anykey errors."""


class UnsupportedKeyType(CryptoError, TypeError):
    """Raised when a public key is not one of the supported schemes."""

    def __init__(self, key: typing.Any):
        self.key_type = type(key)
        super().__init__(f"Unsupported public key type: {self.key_type.__name__}")


class UnsupportedSignatureType(CryptoError, TypeError):
    """Raised when a signature is not one of the supported schemes."""

    def __init__(self, signature: typing.Any):
        self.signature_type = type(signature)
        super().__init__(
            f"Unsupported signature type: {self.signature_type.__name__}"
        )


class VariantMismatch(CryptoError, ValueError):
    """Raised when an explicit variant disagrees with the wrapped value."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Variant {actual} does not match the wrapped type {expected}")


class SerializationError(CryptoError, ValueError):
    """Raised when a value cannot be represented in its encoding."""


class DeserializationError(CryptoError, ValueError):
    """Base exception for malformed input."""


class UnknownVariant(DeserializationError):
    """Raised when a decoded variant tag is not assigned."""

    def __init__(self, variant: int, type_name: str):
        self.variant = variant
        self.type_name = type_name
        super().__init__(f"Unknown variant index for {type_name}: {variant}")


class TruncatedInput(DeserializationError):
    """Raised when the input ends before a value is complete."""

    def __init__(self, requested: int, found: int):
        self.requested = requested
        self.found = found
        super().__init__(
            f"Unexpected end of input. Requested: {requested}, found: {found}"
        )


class NonCanonicalEncoding(DeserializationError):
    """Raised when input decodes but is not in its single canonical form."""


class LengthMismatch(DeserializationError):
    """Raised when a fixed-size key, signature or address has the wrong length."""

    def __init__(self, type_name: str, expected: int, actual: int):
        self.type_name = type_name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{type_name} length mismatch: expected {expected}, got {actual}"
        )


class InvalidThreshold(CryptoError, ValueError):
    """Raised when a threshold is below one or above the key count."""

    def __init__(self, threshold: int, num_keys: int):
        self.threshold = threshold
        self.num_keys = num_keys
        if threshold < 1:
            message = "The number of required signatures needs to be greater than 0"
        else:
            message = (
                f"Provided {num_keys} public keys is smaller than the "
                f"{threshold} required signatures"
            )
        super().__init__(message)


class TooManyKeys(CryptoError, ValueError):
    def __init__(self, num_keys: int, maximum: int):
        self.num_keys = num_keys
        self.maximum = maximum
        super().__init__(f"Cannot have more than {maximum} public keys, got {num_keys}")


class DuplicateIndex(CryptoError, ValueError):
    def __init__(self, index: int):
        self.index = index
        super().__init__(f"Duplicate bit {index} detected.")


class IndexOutOfRange(CryptoError, ValueError):
    def __init__(self, index: int, slots: int):
        self.index = index
        self.slots = slots
        super().__init__(
            f"Signature index {index} is out of range, must be between 0 and {slots - 1}."
        )


class TooManySignatures(CryptoError, ValueError):
    def __init__(self, count: int, maximum: int):
        self.count = count
        self.maximum = maximum
        super().__init__(
            f"The number of signatures cannot be greater than {maximum}, got {count}"
        )


class InvalidBitmapLength(CryptoError, ValueError):
    def __init__(self, length: int, expected: int):
        self.length = length
        self.expected = expected
        super().__init__(f"Bitmap length should be {expected}, got {length}")


class SignatureCountMismatch(CryptoError, ValueError):
    """Raised when the bitmap population count differs from the signature count."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Expecting {expected} signatures from the bitmap, but got {actual}"
        )


class ParseAddressError(CryptoError, ValueError):
    """Raised when an account address string or byte sequence is malformed."""
