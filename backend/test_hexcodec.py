"""
Tests for hex command code parsing

SPDX-License-Identifier: MIT
Copyright (c) 2025 Josh Cheshire
"""

import random
import unittest

from errors import FormatError, InvalidArgument
from hexcodec import build_word, decode_hex, fields, format_word, invert


class TestDecodeHex(unittest.TestCase):
    """Parsing of remote code table entries"""

    def test_lg_power_code(self):
        """0x20DF10EF is address 0x20, command 0x10"""
        word = decode_hex("0x20DF10EF")

        self.assertEqual(word, 0x20DF10EF)
        self.assertEqual(fields(word), (0x20, 0x10))
        self.assertEqual(fields(word).address, 0x20)
        self.assertEqual(fields(word).command, 0x10)

    def test_prefix_and_case_variants(self):
        for text in ("0x20DF10EF", "0X20DF10EF", "20DF10EF", "0x20df10ef"):
            with self.subTest(text=text):
                self.assertEqual(decode_hex(text), 0x20DF10EF)

    def test_wrong_length_rejected(self):
        for text in ("", "0x", "0x20DF10E", "0x20DF10EF0", "20DF", "0x0x20DF10EF"):
            with self.subTest(text=text):
                with self.assertRaises(FormatError):
                    decode_hex(text)

    def test_non_hex_rejected(self):
        for text in ("0x20DG10EF", "0x20DF10E ", "+0x20DF10E", "0x-20DF10E", "0x20DF_0EF"):
            with self.subTest(text=text):
                with self.assertRaises(FormatError):
                    decode_hex(text)

    def test_surrounding_whitespace_rejected(self):
        for text in (" 0x20DF10EF", "0x20DF10EF\t", " 0x20DF10EF\t", "0x20DF10EF\n", " 20DF10EF "):
            with self.subTest(text=text):
                with self.assertRaises(FormatError):
                    decode_hex(text)

    def test_non_string_rejected(self):
        with self.assertRaises(FormatError):
            decode_hex(0x20DF10EF)

    def test_format_error_is_value_error(self):
        """API layer maps ValueError to HTTP 400"""
        with self.assertRaises(ValueError):
            decode_hex("not hex!")

    def test_full_range(self):
        self.assertEqual(decode_hex("0x00000000"), 0)
        self.assertEqual(decode_hex("FFFFFFFF"), 0xFFFFFFFF)


class TestCommandWord(unittest.TestCase):
    """Field extraction and re-encoding"""

    def test_fields_round_trip(self):
        """Re-encoding extracted fields preserves address and command"""
        rng = random.Random(0x20DF)
        words = [rng.getrandbits(32) for _ in range(500)] + [0, 0xFFFFFFFF, 0x20DF10EF]

        for word in words:
            text = format_word(word)
            address, command = fields(decode_hex(text))
            rebuilt = build_word(address, command)
            self.assertEqual(fields(rebuilt), (address, command), text)

    def test_canonical_codes_rebuild_exactly(self):
        lg_codes = [0x20DF10EF, 0x20DF08F7, 0x20DF40BF, 0x20DFC03F, 0x20DF22DD]
        for word in lg_codes:
            with self.subTest(code=format_word(word)):
                self.assertEqual(build_word(*fields(word)), word)

    def test_inverted_fields_for_all_bytes(self):
        for b in range(256):
            word = build_word(b, b)
            inv_address = (word >> 16) & 0xFF
            inv_command = word & 0xFF

            self.assertEqual(invert(b), 255 - b)
            self.assertEqual(inv_address, 255 - b)
            self.assertEqual(b ^ inv_address, 0xFF)
            self.assertEqual(b ^ inv_command, 0xFF)

    def test_fields_ignore_inverted_bytes(self):
        """Non-canonical inverted bytes are ignored, not validated"""
        self.assertEqual(fields(0x20001000), (0x20, 0x10))

    def test_build_word_range(self):
        for address, command in ((256, 0), (0, 256), (-1, 0), (0, 1.5)):
            with self.subTest(address=address, command=command):
                with self.assertRaises(InvalidArgument):
                    build_word(address, command)

    def test_format_word(self):
        self.assertEqual(format_word(0x20DF10EF), "0x20DF10EF")
        self.assertEqual(format_word(1), "0x00000001")


if __name__ == '__main__':
    unittest.main()
