"""
NEC protocol timing model

Converts an (address, command) pair into the ordered pulse/space segments
of an NEC frame. Durations are in microseconds.

Frame layout:
    9000us pulse + 4500us space     AGC leader
    32 data bits, LSB first         address, ~address, command, ~command
        bit 0: 562.5us pulse + 562.5us space
        bit 1: 562.5us pulse + 1687.5us space
    562.5us pulse                   stop burst
    40000us space                   guard so the receiver resets

SPDX-License-Identifier: MIT
Copyright (c) 2025 Josh Cheshire
"""

import enum
from typing import List, NamedTuple, Tuple

from errors import InvalidArgument
from hexcodec import invert

# NEC Protocol Constants (microseconds)
LEADER_PULSE_US = 9000.0
LEADER_SPACE_US = 4500.0
BIT_PULSE_US = 562.5
ZERO_SPACE_US = 562.5
ONE_SPACE_US = 1687.5
STOP_PULSE_US = 562.5
FRAME_GAP_US = 40000.0


class SegmentKind(enum.Enum):
    PULSE = "pulse"
    SPACE = "space"


class TimingSegment(NamedTuple):
    """One carrier burst (pulse) or silence (space)"""
    kind: SegmentKind
    duration_us: float

    @property
    def is_pulse(self) -> bool:
        return self.kind is SegmentKind.PULSE


class FrameSection(NamedTuple):
    """Labelled span of a frame, in milliseconds from the frame start"""
    label: str
    start_ms: float
    end_ms: float


def _pulse(duration_us: float) -> TimingSegment:
    return TimingSegment(SegmentKind.PULSE, duration_us)


def _space(duration_us: float) -> TimingSegment:
    return TimingSegment(SegmentKind.SPACE, duration_us)


def _check_byte(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 0xFF:
        raise InvalidArgument(f"{name} must be an integer in 0-255, got {value!r}")


def _frame_body(address: int, command: int) -> List[TimingSegment]:
    """Leader, 32 data bits and stop burst (no trailing space)"""
    segments = [_pulse(LEADER_PULSE_US), _space(LEADER_SPACE_US)]

    for byte in (address, invert(address), command, invert(command)):
        for bit in range(8):
            segments.append(_pulse(BIT_PULSE_US))
            segments.append(_space(ONE_SPACE_US if (byte >> bit) & 1 else ZERO_SPACE_US))

    segments.append(_pulse(STOP_PULSE_US))
    return segments


def encode_repeated(
    address: int,
    command: int,
    repeat_count: int = 1,
    gap_us: float = FRAME_GAP_US
) -> Tuple[TimingSegment, ...]:
    """
    Encode an NEC command as one or more full frames

    Frames are separated by a gap_us space, and one more gap_us space
    follows the last frame.

    Args:
        address: 8-bit device address
        command: 8-bit command code
        repeat_count: Number of full frames (>= 1)
        gap_us: Space between frames and after the last one

    Returns:
        Tuple of TimingSegment in transmission order

    Raises:
        InvalidArgument: If any argument is out of range
    """
    _check_byte("address", address)
    _check_byte("command", command)
    if isinstance(repeat_count, bool) or not isinstance(repeat_count, int) or repeat_count < 1:
        raise InvalidArgument(f"repeat_count must be an integer >= 1, got {repeat_count!r}")
    if not gap_us > 0:
        raise InvalidArgument(f"gap_us must be positive, got {gap_us!r}")

    body = _frame_body(address, command)
    segments = []
    for i in range(repeat_count):
        if i:
            segments.append(_space(gap_us))
        segments.extend(body)
    segments.append(_space(gap_us))

    return tuple(segments)


def encode_frame(address: int, command: int) -> Tuple[TimingSegment, ...]:
    """Encode a single NEC frame followed by its guard space"""
    return encode_repeated(address, command, 1)


def total_duration_us(segments) -> float:
    return sum(segment.duration_us for segment in segments)


def frame_sections(segments) -> List[FrameSection]:
    """
    Label the protocol sections of the first frame in a segment sequence

    Returns AGC, Address, ~Address, Command, ~Command and Stop spans with
    their exact start/end times, computed from the segment durations.
    """
    segments = list(segments)
    # leader (2) + 32 bits (64) + stop (1)
    if len(segments) < 67:
        raise InvalidArgument(f"Expected at least 67 segments for an NEC frame, got {len(segments)}")

    edges = [0.0]
    for segment in segments[:67]:
        edges.append(edges[-1] + segment.duration_us / 1000.0)

    sections = [FrameSection("AGC", edges[0], edges[2])]
    for n, label in enumerate(("Address", "~Address", "Command", "~Command")):
        start = 2 + n * 16
        sections.append(FrameSection(label, edges[start], edges[start + 16]))
    sections.append(FrameSection("Stop", edges[66], edges[67]))

    return sections
