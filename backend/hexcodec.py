"""
NEC command word codec

Parses the 8-digit hex codes printed in remote-control code tables
(e.g. "0x20DF10EF") and splits them into address and command bytes.

Word layout (bit 31 = MSB):
    bits 31..24  address
    bits 23..16  inverted address
    bits 15..8   command
    bits 7..0    inverted command

SPDX-License-Identifier: MIT
Copyright (c) 2025 Josh Cheshire
"""

import re
from typing import NamedTuple

from errors import FormatError, InvalidArgument

HEX_DIGITS = 8
_HEX_RE = re.compile(r'^[0-9A-Fa-f]{8}$')


class CommandFields(NamedTuple):
    address: int
    command: int


def decode_hex(text: str) -> int:
    """
    Parse a hex command code into a 32-bit command word

    Args:
        text: 8 hex digits, optionally prefixed with "0x" or "0X"

    Returns:
        Unsigned 32-bit integer

    Raises:
        FormatError: If the digits are not exactly 8 hex characters
    """
    if not isinstance(text, str):
        raise FormatError(f"Hex code must be a string, got {type(text).__name__}")

    code = text
    if code[:2] in ("0x", "0X"):
        code = code[2:]

    if len(code) != HEX_DIGITS:
        raise FormatError(
            f"Invalid hex code format. Expected {HEX_DIGITS} hex digits "
            f"(e.g. 0x20DF10EF), got {len(code)}"
        )
    if not _HEX_RE.match(code):
        raise FormatError(f"Invalid hex code: {text!r} contains non-hex characters")

    return int(code, 16)


def fields(word: int) -> CommandFields:
    """Extract address and command bytes from a command word"""
    return CommandFields(address=(word >> 24) & 0xFF, command=(word >> 8) & 0xFF)


def invert(byte: int) -> int:
    """Bitwise complement of a byte"""
    return ~byte & 0xFF


def build_word(address: int, command: int) -> int:
    """Pack address and command into a command word with complemented fields"""
    for name, value in (("address", address), ("command", command)):
        if not isinstance(value, int) or not 0 <= value <= 0xFF:
            raise InvalidArgument(f"{name} must be an integer in 0-255, got {value!r}")

    return (address << 24) | (invert(address) << 16) | (command << 8) | invert(command)


def format_word(word: int) -> str:
    """Render a command word the way remote code tables print it"""
    return f"0x{word & 0xFFFFFFFF:08X}"
