# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

import typing

from behave import then, use_step_matcher, when

from anykey.account_address import AccountAddress
from anykey.bcs import Deserializer, Serializer

# Use regular expressions
use_step_matcher("re")

ENCODERS: typing.Dict[str, typing.Callable[[Serializer, typing.Any], None]] = {
    "bool": Serializer.bool,
    "u8": Serializer.u8,
    "u16": Serializer.u16,
    "u32": Serializer.u32,
    "u64": Serializer.u64,
    "uleb128": Serializer.uleb128,
    "address": Serializer.struct,
    "bytes": Serializer.to_bytes,
}

DECODERS: typing.Dict[str, typing.Callable[[Deserializer], typing.Any]] = {
    "bool": Deserializer.bool,
    "u8": Deserializer.u8,
    "u16": Deserializer.u16,
    "u32": Deserializer.u32,
    "u64": Deserializer.u64,
    "uleb128": Deserializer.uleb128,
    "address": AccountAddress.deserialize,
    "bytes": Deserializer.to_bytes,
}


@when(r"I serialize as (?P<input_type>[a-zA-Z0-9]+)")
def when_serialize(context: typing.Any, input_type: str):
    if input_type not in ENCODERS:
        raise Exception(f"Unrecognized input type: {input_type}")

    ser = Serializer()
    ENCODERS[input_type](ser, context.input)
    context.output = ser.output()


@when(r"I deserialize as (?P<input_type>[a-zA-Z0-9]+)")
def when_deserialize(context: typing.Any, input_type: str):
    if input_type not in DECODERS:
        raise Exception(f"Unrecognized input type: {input_type}")

    try:
        context.output = DECODERS[input_type](Deserializer(context.input))
    except Exception as e:
        context.output = e


@when(r"I serialize as sequence of (?P<input_type>[a-zA-Z0-9]+)")
def when_serialize_sequence(context: typing.Any, input_type: str):
    ser = Serializer()
    ser.sequence(context.input, ENCODERS[input_type])
    context.output = ser.output()


@when(r"I deserialize as sequence of (?P<input_type>[a-zA-Z0-9]+)")
def when_deserialize_sequence(context: typing.Any, input_type: str):
    des = Deserializer(context.input)
    context.output = des.sequence(DECODERS[input_type])


@when(r"I serialize as fixed bytes with length (?P<length>[0-9]+)")
def when_serialize_fixed_bytes(context: typing.Any, length: str):
    assert len(context.input) == int(length)
    ser = Serializer()
    ser.fixed_bytes(context.input)
    context.output = ser.output()


@when(r"I deserialize as fixed bytes with length (?P<length>[0-9]+)")
def when_deserialize_fixed_bytes(context: typing.Any, length: str):
    try:
        des = Deserializer(context.input)
        context.output = des.fixed_bytes(int(length))
    except Exception as e:
        context.output = e


@then(r"the deserialization should fail")
def then_fail_deserialization(context: typing.Any):
    assert isinstance(context.output, Exception)
