"""
Generator configuration

SPDX-License-Identifier: MIT
Copyright (c) 2025 Josh Cheshire
"""

import dataclasses
import enum
import math
from typing import Optional

from errors import InvalidArgument

DEFAULT_CARRIER_HZ = 38000
DEFAULT_SAMPLE_RATE = 192000      # High sample rate keeps the 38kHz carrier shape
DEFAULT_AMPLITUDE = 0.85          # Headroom below full scale after 16-bit quantization
DEFAULT_SPACE_AMPLITUDE = 0.02
DEFAULT_GAP_US = 40000.0

# Playback chains tend to run ~3.5% slow
COMPENSATED_TIMING_FACTOR = 1.035


class ModulationStyle(enum.Enum):
    """How a pulse is rendered onto the audio output"""

    # LED across L/R: +A/-A for the duty portion of each period, reversed otherwise
    DIFFERENTIAL = "differential"
    # Single channel 0/+A square carrier
    SQUARE = "square"
    # Single channel sine carrier shifted into 0..+A
    SINE = "sine"

    @property
    def channels(self) -> int:
        return 2 if self is ModulationStyle.DIFFERENTIAL else 1

    @property
    def default_duty_cycle(self) -> float:
        return _DEFAULT_DUTY[self]


_DEFAULT_DUTY = {
    ModulationStyle.DIFFERENTIAL: 0.70,
    ModulationStyle.SQUARE: 0.33,
    ModulationStyle.SINE: 0.5,
}


@dataclasses.dataclass(frozen=True)
class GeneratorConfig:
    """
    Immutable settings for one generator

    Changing a setting means building a new instance (see with_carrier_khz
    and compensated); instances can be shared between threads.
    """
    carrier_frequency_hz: float = DEFAULT_CARRIER_HZ
    sample_rate_hz: int = DEFAULT_SAMPLE_RATE
    modulation: ModulationStyle = ModulationStyle.DIFFERENTIAL
    duty_cycle: Optional[float] = None
    space_duty_cycle: float = 0.5
    amplitude: float = DEFAULT_AMPLITUDE
    space_amplitude: float = DEFAULT_SPACE_AMPLITUDE
    timing_compensation_factor: float = 1.0
    repeat_count: int = 1
    inter_frame_gap_us: float = DEFAULT_GAP_US

    def __post_init__(self):
        if isinstance(self.modulation, str):
            try:
                object.__setattr__(self, "modulation", ModulationStyle(self.modulation.lower()))
            except ValueError:
                choices = ", ".join(style.value for style in ModulationStyle)
                raise InvalidArgument(
                    f"Unknown modulation {self.modulation!r} (expected one of: {choices})"
                ) from None
        elif not isinstance(self.modulation, ModulationStyle):
            raise InvalidArgument(f"modulation must be a ModulationStyle, got {self.modulation!r}")

        if self.duty_cycle is None:
            object.__setattr__(self, "duty_cycle", self.modulation.default_duty_cycle)

        if isinstance(self.sample_rate_hz, bool) or not isinstance(self.sample_rate_hz, int) \
                or self.sample_rate_hz <= 0:
            raise InvalidArgument(f"sample_rate_hz must be a positive integer, got {self.sample_rate_hz!r}")
        if not self.carrier_frequency_hz > 0:
            raise InvalidArgument(f"carrier_frequency_hz must be positive, got {self.carrier_frequency_hz!r}")
        if self.carrier_frequency_hz * 2 > self.sample_rate_hz:
            raise InvalidArgument(
                f"carrier_frequency_hz {self.carrier_frequency_hz} is above the Nyquist "
                f"limit of {self.sample_rate_hz / 2} Hz"
            )

        for name in ("duty_cycle", "space_duty_cycle", "amplitude"):
            value = getattr(self, name)
            if not 0 < value <= 1:
                raise InvalidArgument(f"{name} must be in (0, 1], got {value!r}")
        if self.modulation is not ModulationStyle.SINE:
            if math.floor(self.carrier_period * self.duty_cycle) < 1:
                raise InvalidArgument(
                    f"duty_cycle {self.duty_cycle} leaves no 'on' samples in a "
                    f"{self.carrier_period:.3f}-sample carrier period"
                )
        if not 0 <= self.space_amplitude <= 1:
            raise InvalidArgument(f"space_amplitude must be in [0, 1], got {self.space_amplitude!r}")

        if not self.timing_compensation_factor > 0:
            raise InvalidArgument(
                f"timing_compensation_factor must be positive, got {self.timing_compensation_factor!r}"
            )
        if isinstance(self.repeat_count, bool) or not isinstance(self.repeat_count, int) \
                or self.repeat_count < 1:
            raise InvalidArgument(f"repeat_count must be an integer >= 1, got {self.repeat_count!r}")
        if not self.inter_frame_gap_us > 0:
            raise InvalidArgument(f"inter_frame_gap_us must be positive, got {self.inter_frame_gap_us!r}")

    @property
    def channels(self) -> int:
        return self.modulation.channels

    @property
    def carrier_period(self) -> float:
        """Carrier period in samples (usually fractional)"""
        return self.sample_rate_hz / self.carrier_frequency_hz

    def replace(self, **changes) -> "GeneratorConfig":
        # A duty cycle left at the old style's default follows the new style
        if "modulation" in changes and "duty_cycle" not in changes \
                and self.duty_cycle == self.modulation.default_duty_cycle:
            changes["duty_cycle"] = None
        return dataclasses.replace(self, **changes)

    def with_carrier_khz(self, carrier_khz: float) -> "GeneratorConfig":
        """New config with the carrier given in kHz, as remote tables list it"""
        return self.replace(carrier_frequency_hz=carrier_khz * 1000)

    def compensated(self, factor: float = COMPENSATED_TIMING_FACTOR) -> "GeneratorConfig":
        """New config that stretches every segment to offset slow playback"""
        return self.replace(timing_compensation_factor=factor)
