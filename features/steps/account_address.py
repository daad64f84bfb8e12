# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

import typing

from behave import then, use_step_matcher, when

from anykey.account_address import AccountAddress
from anykey.errors import ParseAddressError

# Use regular expressions
use_step_matcher("re")


@when(r"I parse the account address")
def when_parse_account_address(context: typing.Any):
    try:
        context.output = AccountAddress.from_str_relaxed(context.input)
    except ParseAddressError as e:
        context.output = e


@when(r"I convert the address to a string")
def when_account_address_to_string(context: typing.Any):
    context.output = str(context.input)


@when(r"I convert the address to a string long")
def when_account_address_to_string_long(context: typing.Any):
    context.output = "0x" + context.input.to_bytes().hex()


@then(r"I should fail to parse the account address")
def then_fail_account_address(context: typing.Any):
    assert isinstance(context.output, ParseAddressError)
