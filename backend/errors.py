"""
Error types raised by the NEC IR audio encoder

Both derive from ValueError so callers that already treat ValueError as
"bad input" (the API layer does) keep working unchanged.

SPDX-License-Identifier: MIT
Copyright (c) 2025 Josh Cheshire
"""


class FormatError(ValueError):
    """Malformed hex command code (wrong length or non-hex characters)"""


class InvalidArgument(ValueError):
    """Out-of-range argument or configuration value"""
