# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

import typing

from behave import given, then, use_step_matcher, when

from anykey import ed25519
from anykey.asymmetric_crypto_wrapper import (
    AnyPublicKey,
    AnySignature,
    MultiKey,
    MultiKeySignature,
)
from anykey.bitmap import create_bitmap
from anykey.errors import CryptoError

# Use regular expressions
use_step_matcher("re")

DECODABLE = {
    "AnyPublicKey": AnyPublicKey,
    "AnySignature": AnySignature,
    "MultiKey": MultiKey,
    "MultiKeySignature": MultiKeySignature,
}


@given(r"ed25519 public key (?P<key>0x[0-9a-fA-F]+)")
def given_ed25519_public_key(context: typing.Any, key: str):
    context.value = ed25519.PublicKey.from_str(key)


@given(r"ed25519 public keys \[(?P<keys>[0-9a-fA-Fx,]+)\]")
def given_ed25519_public_keys(context: typing.Any, keys: str):
    context.input = [ed25519.PublicKey.from_str(key) for key in keys.split(",")]


@given(r"signer indices \[(?P<indices>[0-9,]*)\]")
def given_signer_indices(context: typing.Any, indices: str):
    context.input = [int(index) for index in indices.split(",") if index]


@when(r"I wrap the public key")
def when_wrap_public_key(context: typing.Any):
    context.value = AnyPublicKey.from_public_key(context.value)


@when(r"I build a multi key with threshold (?P<threshold>[0-9]+)")
def when_build_multi_key(context: typing.Any, threshold: str):
    try:
        context.value = MultiKey(context.input, int(threshold))
    except CryptoError as e:
        context.output = e


@when(r"I serialize the value")
def when_serialize_value(context: typing.Any):
    context.output = context.value.to_bytes()


@when(r"I derive the authentication key")
def when_derive_auth_key(context: typing.Any):
    context.output = context.value.auth_key().key


@when(r"I decode the bytes as (?P<type_name>[a-zA-Z]+)")
def when_decode(context: typing.Any, type_name: str):
    try:
        context.value = DECODABLE[type_name].from_bytes(context.input)
    except CryptoError as e:
        context.output = e


@when(r"I create a bitmap for (?P<slots>[0-9]+) keys")
def when_create_bitmap(context: typing.Any, slots: str):
    try:
        context.output = create_bitmap(context.input, int(slots))
    except CryptoError as e:
        context.output = e


@when(
    r'I verify the message "(?P<message>[^"]*)" with signature (?P<signature>0x[0-9a-fA-F]+)'
)
def when_verify_multi_key(context: typing.Any, message: str, signature: str):
    multi_signature = MultiKeySignature.from_bytes(
        bytes.fromhex(signature.removeprefix("0x"))
    )
    context.output = context.value.verify(message.encode(), multi_signature)


@then(r"it should fail with (?P<error>[a-zA-Z]+)")
def then_fail_with(context: typing.Any, error: str):
    assert type(context.output).__name__ == error, (
        "Expected " + error + " but got " + repr(context.output)
    )


@then(r"the signer indices should be \[(?P<indices>[0-9,]*)\]")
def then_signer_indices(context: typing.Any, indices: str):
    expected = [int(index) for index in indices.split(",") if index]
    assert context.value.signer_indices() == expected, (
        "Expected " + str(expected) + " but got " + str(context.value.signer_indices())
    )
