#!/usr/bin/env python3
"""
Wavefront emission and propagation.

Responsibilities
- Emit a new wavefront whenever one emission interval (1 / frequency) has
  elapsed since the previous one, capturing the source state at that moment.
- Grow every live wavefront at the speed of sound and prune expired ones.
- Keep an append-only emission log so the live set can be rebuilt exactly for
  any earlier model time (time reversal).

Ownership
- The emitter is the single owner of the live wavefront list. Consumers get a
  read-only tuple through `waves` and subscribe to additions/removals with
  `on_added` / `on_removed`.
"""
from dataclasses import replace
from typing import Callable, List, Optional, Tuple

from loguru import logger as log

from .constants import SOUND_SPEED, WAVE_MAX_AGE
from .data_models import Wavefront
from .vector_utils import Vector2, is_finite

WaveCallback = Callable[[Wavefront], None]


class WaveEmitter:
    """
    Creates, ages, and prunes wavefronts.

    Radii are advanced incrementally (radius += dt * sound_speed) so a change
    of sound speed mid-flight only affects propagation from that moment on.
    When time runs forward continuously this equals
    (sim_time - birth_time) * sound_speed.
    """

    def __init__(self, sound_speed: float = SOUND_SPEED, max_age: float = WAVE_MAX_AGE):
        self.sound_speed = float(sound_speed)
        self.max_age = float(max_age)
        self.last_emission_time = 0.0
        self._waves: List[Wavefront] = []
        self._history: List[Wavefront] = []
        self._added_callbacks: List[WaveCallback] = []
        self._removed_callbacks: List[WaveCallback] = []

    @property
    def waves(self) -> Tuple[Wavefront, ...]:
        return tuple(self._waves)

    @property
    def history_size(self) -> int:
        return len(self._history)

    def on_added(self, callback: WaveCallback) -> None:
        self._added_callbacks.append(callback)

    def on_removed(self, callback: WaveCallback) -> None:
        self._removed_callbacks.append(callback)

    def _add(self, wave: Wavefront) -> None:
        self._waves.append(wave)
        for callback in self._added_callbacks:
            callback(wave)

    def _remove_where(self, predicate: Callable[[Wavefront], bool]) -> None:
        kept: List[Wavefront] = []
        removed: List[Wavefront] = []
        for wave in self._waves:
            (removed if predicate(wave) else kept).append(wave)
        self._waves = kept
        for wave in removed:
            for callback in self._removed_callbacks:
                callback(wave)

    def tick(self,
             sim_time: float,
             source_position: Vector2,
             source_velocity: Vector2,
             frequency: float,
             phase: float) -> Optional[Wavefront]:
        """
        Emit a wavefront if the emission interval has elapsed.

        Args:
            sim_time: Current model time in seconds
            source_position: Source position at this instant (m)
            source_velocity: Source velocity at this instant (m/s)
            frequency: Emitted frequency in Hz (must be > 0)
            phase: Emitted-signal phase at this instant (rad)

        Returns:
            The new wavefront, or None if no emission happened.
        """
        if not is_finite(frequency) or frequency <= 0:
            raise ValueError(f"Emitted frequency must be positive, got {frequency!r}")

        if sim_time - self.last_emission_time <= 1.0 / frequency:
            return None

        wave = Wavefront(
            origin=(source_position[0], source_position[1]),
            birth_time=sim_time,
            radius=0.0,
            source_velocity=(source_velocity[0], source_velocity[1]),
            source_frequency=frequency,
            phase_at_emission=phase,
        )
        self._history.append(replace(wave))
        self._add(wave)
        self.last_emission_time = sim_time
        return wave

    def advance(self, sim_time: float, dt: float) -> None:
        """Grow all live wavefronts by dt * sound_speed and drop expired ones."""
        growth = dt * self.sound_speed
        for wave in self._waves:
            wave.radius += growth
        self._remove_where(lambda w: w.age(sim_time) > self.max_age or w.radius < 0)

    def restore_to_time(self, target_time: float) -> None:
        """
        Rebuild the live set as it was at target_time.

        History entries born after target_time belong to an abandoned future and
        are discarded, so replaying forward re-emits them deterministically.
        """
        self._history = [w for w in self._history if w.birth_time <= target_time]
        self.last_emission_time = self._history[-1].birth_time if self._history else 0.0

        self._remove_where(lambda w: True)
        for entry in self._history:
            age = target_time - entry.birth_time
            if age > self.max_age:
                continue
            self._add(replace(entry, radius=age * self.sound_speed))

    def forget_before(self, time: float) -> None:
        """Drop history entries that could never be restored again."""
        cutoff = time - self.max_age
        if self._history and self._history[0].birth_time < cutoff:
            self._history = [w for w in self._history if w.birth_time >= cutoff]

    def reset(self) -> None:
        self._remove_where(lambda w: True)
        self._history.clear()
        self.last_emission_time = 0.0
        log.debug("Wave emitter reset")
