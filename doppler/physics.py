#!/usr/bin/env python3
"""
Doppler calculations for the Doppler Simulator.

Responsibilities
- Decide which wavefronts have geometrically reached the observer and when.
- Evaluate the classical moving-source / moving-observer Doppler ratio for a
  wavefront, clamped to a sane band around its emission frequency.

Model
- The line of sight is the unit vector from the wavefront origin (the source
  position at emission) to the observer's *current* position.
- Velocity components are projected on that line:

      f' = f * (c - v_o) / (c - v_s)

  where v_s is the source velocity captured at emission and v_o the observer's
  current velocity. This is not a full retarded-time solution; it pairs the
  emission-time source state with the present observer state.

Numerical notes
- When v_s approaches c the denominator vanishes (source closing in at the
  speed of sound). Results are clamped to [min_frequency, max_factor * f]
  instead of propagating infinities or NaNs.

Threading
- This module is pure compute and stateless besides the clamp parameters.
"""
from typing import Iterable, List

from .constants import DENOMINATOR_EPSILON, FREQ_MAX_FACTOR, FREQ_MIN
from .data_models import ArrivedWavefront, Wavefront
from .vector_utils import ZERO, Vector2, is_finite, vec_dist, vec_dot, vec_norm, vec_sub


def doppler_shift(frequency: float,
                  sound_speed: float,
                  observer_component: float,
                  source_component: float) -> float:
    """
    Raw Doppler ratio applied to a frequency (no clamping).

    Args:
        frequency: Emitted frequency in Hz
        sound_speed: Speed of sound in m/s
        observer_component: Observer velocity along the line of sight (m/s),
            positive when moving away from the source
        source_component: Source velocity along the line of sight (m/s),
            positive when moving toward the observer

    Returns:
        Observed frequency in Hz; may be infinite or negative for supersonic motion.
    """
    denominator = sound_speed - source_component
    if denominator == 0:
        return float("inf")
    return frequency * (sound_speed - observer_component) / denominator


def clamp_frequency(value: float, emitted: float,
                    min_frequency: float = FREQ_MIN,
                    max_factor: float = FREQ_MAX_FACTOR) -> float:
    """Clamp an observed frequency into [min_frequency, max_factor * emitted]."""
    upper = max(min_frequency, emitted * max_factor)
    if not is_finite(value):
        return upper
    return max(min_frequency, min(upper, value))


class DopplerCalculator:
    """
    Observed-frequency computations against a set of wavefronts.

    The calculator keeps no per-frame state; it only stores the clamp band.
    """

    def __init__(self, min_frequency: float = FREQ_MIN, max_factor: float = FREQ_MAX_FACTOR):
        self.min_frequency = float(min_frequency)
        self.max_factor = float(max_factor)

    def find_arrived_wavefronts(self,
                                waves: Iterable[Wavefront],
                                observer_position: Vector2,
                                sound_speed: float) -> List[ArrivedWavefront]:
        """
        Find wavefronts whose radius has reached the observer.

        For each wave with radius >= distance(origin, observer) the arrival time
        is birth_time + distance / sound_speed.

        Returns:
            Arrived wavefronts sorted by arrival time, most recent first. The
            first entry is the freshest causal information at the observer.
        """
        arrived: List[ArrivedWavefront] = []
        for wave in waves:
            distance = vec_dist(wave.origin, observer_position)
            if wave.radius >= distance:
                arrival_time = wave.birth_time + distance / sound_speed
                arrived.append(ArrivedWavefront(wave, distance, arrival_time))

        arrived.sort(key=lambda a: a.arrival_time, reverse=True)
        return arrived

    def observed_frequency(self,
                           wave: Wavefront,
                           observer_position: Vector2,
                           observer_velocity: Vector2,
                           sound_speed: float) -> float:
        """
        Frequency heard by the observer for a given wavefront.

        Args:
            wave: Wavefront reaching the observer
            observer_position: Current observer position (m)
            observer_velocity: Current observer velocity (m/s)
            sound_speed: Speed of sound (m/s)

        Returns:
            Observed frequency in Hz, clamped to the calculator's band.
        """
        direction = vec_norm(vec_sub(observer_position, wave.origin))
        source_component = vec_dot(wave.source_velocity, direction)
        observer_component = vec_dot(observer_velocity, direction)

        if sound_speed - source_component <= DENOMINATOR_EPSILON:
            return clamp_frequency(float("inf"), wave.source_frequency,
                                   self.min_frequency, self.max_factor)

        raw = doppler_shift(wave.source_frequency, sound_speed,
                            observer_component, source_component)
        return clamp_frequency(raw, wave.source_frequency, self.min_frequency, self.max_factor)

    def stationary_observed_frequency(self,
                                      wave: Wavefront,
                                      observer_position: Vector2,
                                      sound_speed: float) -> float:
        """Source-side contribution only: the observer is treated as at rest."""
        return self.observed_frequency(wave, observer_position, ZERO, sound_speed)
