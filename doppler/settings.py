#!/usr/bin/env python3
"""
Configuration state for the Doppler Simulator.

All external configuration passes through SimulationSettings before reaching
the engine. Values that would break the physics (non-numeric, NaN, zero or
negative speeds and frequencies) raise ValueError; finite values outside the
allowed ranges are clamped and logged.
"""
from enum import Enum
from typing import Tuple

from loguru import logger as log

from .constants import (
    EMITTED_FREQ,
    FREQUENCY_RANGE,
    MIC_POSITION,
    SOUND_SPEED,
    SOUND_SPEED_RANGE,
)
from .scenarios import Scenario
from .utils import positive_float
from .vector_utils import Vector2, clamp, is_finite


class TimeSpeed(Enum):
    """Time-speed selector; negative factors run the simulation backward."""
    SLOW = 0.25
    NORMAL = 1.0
    REVERSE_SLOW = -0.25
    REVERSE = -1.0

    @property
    def factor(self) -> float:
        return self.value

    @property
    def is_reverse(self) -> bool:
        return self.value < 0

    @classmethod
    def coerce(cls, value) -> "TimeSpeed":
        """Accept a TimeSpeed, its name, or its numeric factor."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper().replace(" ", "_")]
            except KeyError:
                raise ValueError(f"Unknown time speed {value!r}") from None
        try:
            return cls(float(value))
        except (TypeError, ValueError):
            raise ValueError(f"Unknown time speed {value!r}") from None


def _clamped(number: float, bounds: Tuple[float, float], label: str) -> float:
    result = clamp(number, bounds[0], bounds[1])
    if result != number:
        log.warning(f"{label} {number:g} outside [{bounds[0]:g}, {bounds[1]:g}]; clamped to {result:g}")
    return result


class SimulationSettings:
    """Container for user-adjustable simulation settings."""

    def __init__(self,
                 sound_speed: float = SOUND_SPEED,
                 emitted_frequency: float = EMITTED_FREQ,
                 time_speed=TimeSpeed.NORMAL,
                 scenario: Scenario = Scenario.FREE_PLAY,
                 microphone_enabled: bool = False,
                 microphone_position: Vector2 = MIC_POSITION,
                 playing: bool = True):
        self.sound_speed = SOUND_SPEED
        self.emitted_frequency = EMITTED_FREQ
        self.time_speed = TimeSpeed.NORMAL
        self.scenario = Scenario.FREE_PLAY
        self.microphone_enabled = False
        self.microphone_position: Vector2 = MIC_POSITION
        self.playing = True

        self.set_sound_speed(sound_speed)
        self.set_emitted_frequency(emitted_frequency)
        self.set_time_speed(time_speed)
        self.scenario = Scenario.coerce(scenario)
        self.microphone_enabled = bool(microphone_enabled)
        self.set_microphone_position(microphone_position)
        self.playing = bool(playing)

    def set_sound_speed(self, value) -> float:
        number = positive_float(value, "Sound speed")
        self.sound_speed = _clamped(number, SOUND_SPEED_RANGE, "Sound speed")
        return self.sound_speed

    def set_emitted_frequency(self, value) -> float:
        number = positive_float(value, "Emitted frequency")
        self.emitted_frequency = _clamped(number, FREQUENCY_RANGE, "Emitted frequency")
        return self.emitted_frequency

    def set_time_speed(self, value) -> TimeSpeed:
        self.time_speed = TimeSpeed.coerce(value)
        return self.time_speed

    def set_microphone_position(self, position) -> Vector2:
        try:
            x, y = float(position[0]), float(position[1])
        except (TypeError, ValueError, IndexError):
            raise ValueError(f"Microphone position must be an (x, y) pair, got {position!r}") from None
        if not (is_finite(x) and is_finite(y)):
            raise ValueError(f"Microphone position must be finite, got {position!r}")
        self.microphone_position = (x, y)
        return self.microphone_position

    def reset(self) -> None:
        self.sound_speed = SOUND_SPEED
        self.emitted_frequency = EMITTED_FREQ
        self.time_speed = TimeSpeed.NORMAL
        self.scenario = Scenario.FREE_PLAY
        self.microphone_enabled = False
        self.microphone_position = MIC_POSITION
        self.playing = True
