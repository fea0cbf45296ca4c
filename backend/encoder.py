"""
NEC Infrared Remote Audio Encoder

Generates audio signals that drive an IR LED plugged into a headphone jack.
Based on the NEC remote-control protocol: a 9ms AGC burst, 32 pulse-distance
coded data bits and a stop burst, all on a 38kHz carrier.

SPDX-License-Identifier: MIT
Copyright (c) 2025 Josh Cheshire
"""

import logging
import os
from typing import Dict, Iterable, Optional, Union

import numpy as np

from carrier import empty_buffer, render_segment, sample_count
from config import GeneratorConfig
from errors import InvalidArgument
from hexcodec import build_word, decode_hex, fields, format_word, invert
from timing import TimingSegment, encode_repeated, frame_sections, total_duration_us
from wav import to_wav_bytes

logger = logging.getLogger(__name__)


def assemble(segments: Iterable[TimingSegment], config: GeneratorConfig) -> np.ndarray:
    """
    Render segments in order into one contiguous sample buffer

    The output length is exactly the sum of the per-segment sample counts.
    """
    segments = tuple(segments)
    lengths = [
        sample_count(s.duration_us, config.sample_rate_hz, config.timing_compensation_factor)
        for s in segments
    ]
    signal = empty_buffer(sum(lengths), config.channels)

    offset = 0
    for segment, length in zip(segments, lengths):
        signal[offset:offset + length] = render_segment(segment, config)
        offset += length

    return signal


class NECEncoder:
    """Encoder for NEC protocol IR commands"""

    PROTOCOL = "NEC"

    def __init__(self, config: Optional[GeneratorConfig] = None):
        self.config = config if config is not None else GeneratorConfig()

    @property
    def sample_rate(self) -> int:
        return self.config.sample_rate_hz

    def segments(self, address: int, command: int):
        """Timing segments for a command, honouring repeat_count and gap"""
        return encode_repeated(address, command, self.config.repeat_count,
                               self.config.inter_frame_gap_us)

    def generate(self, address: int, command: int) -> np.ndarray:
        """
        Generate the audio samples for an NEC command

        Args:
            address: 8-bit device address (e.g. 0x20 for LG TVs)
            command: 8-bit command code

        Returns:
            float64 samples, (n,) mono or (n, 2) stereo depending on modulation

        Raises:
            InvalidArgument: If address or command are outside 0-255
        """
        signal = assemble(self.segments(address, command), self.config)

        logger.debug(
            "Generated NEC address=0x%02X command=0x%02X: %d samples (%.2f ms) at %d Hz",
            address, command, len(signal), len(signal) / self.sample_rate * 1000, self.sample_rate
        )
        return signal

    def generate_from_word(self, word: int) -> np.ndarray:
        """Generate samples for a 32-bit command word (address/command fields only)"""
        address, command = fields(word)
        return self.generate(address, command)

    def generate_from_hex(self, hex_code: str) -> np.ndarray:
        """Generate samples for a hex code such as "0x20DF10EF" """
        return self.generate_from_word(decode_hex(hex_code))

    def to_wav(self, signal: np.ndarray) -> bytes:
        return to_wav_bytes(signal, self.sample_rate)

    def encode(self, code: Union[str, int], output_path: Optional[str] = None) -> Union[bytes, str]:
        """
        Encode an IR command into WAV audio

        Args:
            code: Hex code string ("0x20DF10EF") or 32-bit command word
            output_path: Optional path to save WAV file. If None, returns bytes.

        Returns:
            If output_path is provided, returns the path. Otherwise returns WAV file as bytes.

        Raises:
            FormatError: If the hex code is malformed
            InvalidArgument: If the command word or output_path is invalid
        """
        word = decode_hex(code) if isinstance(code, str) else code
        if isinstance(word, bool) or not isinstance(word, int) or not 0 <= word <= 0xFFFFFFFF:
            raise InvalidArgument(f"Command word must be a 32-bit unsigned integer, got {code!r}")

        # Security: Validate output_path if provided
        if output_path:
            abs_path = os.path.abspath(output_path)
            cwd = os.path.abspath(os.getcwd())
            # Ensure it's in a safe location (current directory or subdirectories only)
            if os.path.commonpath([abs_path, cwd]) != cwd:
                raise InvalidArgument("Output path must be within current working directory")

        wav_data = self.to_wav(self.generate_from_word(word))

        if output_path:
            with open(output_path, 'wb') as f:
                f.write(wav_data)
            return output_path
        return wav_data

    def describe(self, word: int) -> Dict:
        """
        Summarize what encoding a command word produces

        Returns:
            Dictionary with hex/binary views of the four payload bytes, the
            generator settings, the signal length (rendered and nominal) and
            the protocol sections of the first frame.
        """
        address, command = fields(word)
        segments = self.segments(address, command)
        samples = sum(
            sample_count(s.duration_us, self.sample_rate, self.config.timing_compensation_factor)
            for s in segments
        )

        return {
            "hex_code": format_word(word),
            "normalized_code": format_word(build_word(address, command)),
            "address": address,
            "address_hex": f"0x{address:02X}",
            "command": command,
            "command_hex": f"0x{command:02X}",
            "protocol": f"{self.PROTOCOL} Protocol",
            "carrier_khz": self.config.carrier_frequency_hz / 1000,
            "sample_rate": self.sample_rate,
            "modulation": self.config.modulation.value,
            "channels": self.config.channels,
            "repeat_count": self.config.repeat_count,
            "timing_compensation": self.config.timing_compensation_factor,
            "samples": samples,
            "duration_ms": round(samples / self.sample_rate * 1000, 2),
            "nominal_duration_ms": total_duration_us(segments) / 1000,
            "binary_address": f"{address:08b}",
            "binary_address_inv": f"{invert(address):08b}",
            "binary_command": f"{command:08b}",
            "binary_command_inv": f"{invert(command):08b}",
            "sections": [section._asdict() for section in frame_sections(segments)],
        }


def generate(address: int, command: int, config: Optional[GeneratorConfig] = None) -> np.ndarray:
    """Samples for an (address, command) pair"""
    return NECEncoder(config).generate(address, command)


def generate_from_word(word: int, config: Optional[GeneratorConfig] = None) -> np.ndarray:
    """Samples for a 32-bit command word"""
    return NECEncoder(config).generate_from_word(word)


if __name__ == "__main__":
    # Example usage
    encoder = NECEncoder()

    info = encoder.describe(decode_hex("0x20DF10EF"))
    print(f"Encoding {info['hex_code']}: address {info['address_hex']}, command {info['command_hex']}")
    encoder.encode("0x20DF10EF", "test_output.wav")
    print("Saved to test_output.wav")
