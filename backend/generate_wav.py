#!/usr/bin/env python3
"""
Generate a WAV file for one NEC IR command

Usage:
    python generate_wav.py 0x20DF10EF -o power.wav
    python generate_wav.py 20DF40BF --modulation square --carrier-khz 36

SPDX-License-Identifier: MIT
Copyright (c) 2025 Josh Cheshire
"""

import argparse
import logging
import sys

from config import GeneratorConfig, ModulationStyle
from encoder import NECEncoder
from hexcodec import decode_hex

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Write an NEC IR command as WAV audio")
    parser.add_argument("hex_code", help="8 hex digits, e.g. 0x20DF10EF")
    parser.add_argument("-o", "--output", help="Output WAV path (default ir_command_<code>.wav)")
    parser.add_argument("--carrier-khz", type=float, default=38.0, help="Carrier frequency in kHz")
    parser.add_argument("--modulation", choices=[style.value for style in ModulationStyle],
                        default=ModulationStyle.DIFFERENTIAL.value)
    parser.add_argument("--repeat", type=int, default=1, help="Number of full frames")
    parser.add_argument("--compensate", action="store_true",
                        help="Stretch timing to offset slow playback hardware")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        word = decode_hex(args.hex_code)
        config = GeneratorConfig(modulation=args.modulation, repeat_count=args.repeat)
        config = config.with_carrier_khz(args.carrier_khz)
        if args.compensate:
            config = config.compensated()
    except ValueError as e:
        logger.error("%s", e)
        return 2

    encoder = NECEncoder(config)
    output_path = args.output or f"ir_command_{word:08X}.wav"
    info = encoder.describe(word)

    try:
        encoder.encode(word, output_path)
    except ValueError as e:
        logger.error("%s", e)
        return 2

    print(f"Generated IR WAV file: {output_path}")
    print(f"Address: {info['address_hex']}, Command: {info['command_hex']}")
    print(f"Channels: {info['channels']} ({info['modulation']})")
    print(f"Duration: {info['duration_ms']:.2f} ms")
    return 0


if __name__ == "__main__":
    sys.exit(main())
