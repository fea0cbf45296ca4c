"""
WAV serialization

Quantizes float sample buffers to 16-bit PCM and wraps them in a canonical
44-byte RIFF/WAVE header (PCM format tag, 16-byte fmt chunk, no extra chunks).

SPDX-License-Identifier: MIT
Copyright (c) 2025 Josh Cheshire
"""

import io

import numpy as np
from scipy.io import wavfile

from errors import InvalidArgument

HEADER_SIZE = 44
BITS_PER_SAMPLE = 16
# RIFF chunk size counts everything after its own 8-byte header
RIFF_HEADER_BYTES = HEADER_SIZE - 8
MAX_RIFF_SIZE = 0xFFFFFFFF


def channel_count(buffer: np.ndarray) -> int:
    """1 for a (n,) buffer, the column count for an (n, c) buffer"""
    if buffer.ndim == 1:
        return 1
    if buffer.ndim == 2:
        return buffer.shape[1]
    raise InvalidArgument(f"Sample buffer must be 1-D or 2-D, got {buffer.ndim} dimensions")


def quantize(buffer) -> np.ndarray:
    """
    Convert float samples to int16

    Samples are clamped to [-1, 1]; negatives scale by 32768 and the rest by
    32767 so -1.0 -> -32768 and +1.0 -> 32767. Ties round toward +inf.
    """
    samples = np.asarray(buffer, dtype=np.float64)
    if not np.all(np.isfinite(samples)):
        raise InvalidArgument("Sample buffer contains NaN or infinite values")

    clipped = np.clip(samples, -1.0, 1.0)
    scaled = np.where(clipped < 0, clipped * 32768, clipped * 32767)
    return np.floor(scaled + 0.5).astype(np.int16)


def to_wav_bytes(buffer, sample_rate_hz: int) -> bytes:
    """
    Serialize a sample buffer as a 16-bit PCM WAV file

    Args:
        buffer: float samples, shape (n,) for mono or (n, 2) for stereo
        sample_rate_hz: Sample rate written to the header

    Returns:
        Complete WAV file as bytes (stereo data interleaved L0,R0,L1,R1,...)

    Raises:
        InvalidArgument: If the channel count is not 1 or 2, or the sample
            rate is not a positive integer, or the data overflows the
            32-bit RIFF size fields
    """
    buffer = np.asarray(buffer)
    channels = channel_count(buffer)
    if channels not in (1, 2):
        raise InvalidArgument(f"channel count must be 1 or 2, got {channels}")
    if isinstance(sample_rate_hz, bool) or not isinstance(sample_rate_hz, (int, np.integer)) \
            or sample_rate_hz <= 0:
        raise InvalidArgument(f"sample_rate_hz must be a positive integer, got {sample_rate_hz!r}")
    if RIFF_HEADER_BYTES + data_length(len(buffer), channels) > MAX_RIFF_SIZE:
        raise InvalidArgument(f"{len(buffer)} sample frames do not fit in a single WAV file")

    pcm = np.ascontiguousarray(quantize(buffer))

    out = io.BytesIO()
    wavfile.write(out, int(sample_rate_hz), pcm)
    return out.getvalue()


def data_length(sample_frames: int, channels: int) -> int:
    """Size of the data chunk for a given frame and channel count"""
    return sample_frames * channels * (BITS_PER_SAMPLE // 8)
