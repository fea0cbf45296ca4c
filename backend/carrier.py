"""
Carrier synthesis

Renders NEC timing segments into PCM sample arrays. A pulse becomes a
burst of carrier (38kHz by default), a space becomes silence or, in
differential mode, a small balanced square wave.

SPDX-License-Identifier: MIT
Copyright (c) 2025 Josh Cheshire
"""

import math

import numpy as np

from config import GeneratorConfig, ModulationStyle
from timing import TimingSegment


def sample_count(duration_us: float, sample_rate_hz: int, factor: float = 1.0) -> int:
    """Number of samples for a duration, always floored"""
    # Multiply first so whole-sample durations stay whole (562.5us is 108 samples at 192kHz)
    return math.floor(duration_us * factor * sample_rate_hz / 1000000)


def empty_buffer(samples: int, channels: int) -> np.ndarray:
    """Zeroed float buffer shaped (n,) for mono or (n, 2) for stereo"""
    if channels == 1:
        return np.zeros(samples, dtype=np.float64)
    return np.zeros((samples, channels), dtype=np.float64)


def _phase(samples: int, period: float) -> np.ndarray:
    """Position of every sample within its carrier period"""
    return np.mod(np.arange(samples, dtype=np.float64), period)


def _square(samples: int, period: float, duty_cycle: float) -> np.ndarray:
    """Boolean on/off pattern of a square carrier"""
    on_samples = math.floor(period * duty_cycle)
    return _phase(samples, period) < on_samples


def _balanced(samples: int, period: float, duty_cycle: float) -> np.ndarray:
    """On/off pattern split at the exact fraction of each period"""
    return _phase(samples, period) < period * duty_cycle


def _differential(segment: TimingSegment, samples: int, config: GeneratorConfig) -> np.ndarray:
    if segment.is_pulse:
        level = config.amplitude
        on = _square(samples, config.carrier_period, config.duty_cycle)
    else:
        level = config.space_amplitude
        on = _balanced(samples, config.carrier_period, config.space_duty_cycle)

    left = np.where(on, level, -level)
    # Right channel mirrors the left so the LED sees twice the swing
    return np.column_stack((left, -left))


def _unipolar_square(segment: TimingSegment, samples: int, config: GeneratorConfig) -> np.ndarray:
    if not segment.is_pulse:
        return np.zeros(samples, dtype=np.float64)
    on = _square(samples, config.carrier_period, config.duty_cycle)
    return np.where(on, config.amplitude, 0.0)


def _unipolar_sine(segment: TimingSegment, samples: int, config: GeneratorConfig) -> np.ndarray:
    if not segment.is_pulse:
        return np.zeros(samples, dtype=np.float64)
    t = np.arange(samples, dtype=np.float64)
    carrier = np.sin(2 * np.pi * t / config.carrier_period)
    return config.amplitude * (carrier + 1) / 2


_RENDERERS = {
    ModulationStyle.DIFFERENTIAL: _differential,
    ModulationStyle.SQUARE: _unipolar_square,
    ModulationStyle.SINE: _unipolar_sine,
}


def render_segment(segment: TimingSegment, config: GeneratorConfig) -> np.ndarray:
    """
    Render one timing segment

    Args:
        segment: Pulse or space with its duration in microseconds
        config: Generator settings (modulation, rates, levels)

    Returns:
        float64 array, shape (n,) for mono styles or (n, 2) for differential,
        where n = floor(duration * compensation / 1e6 * sample_rate)
    """
    samples = sample_count(segment.duration_us, config.sample_rate_hz,
                           config.timing_compensation_factor)
    if samples == 0:
        return empty_buffer(0, config.channels)
    return _RENDERERS[config.modulation](segment, samples, config)
