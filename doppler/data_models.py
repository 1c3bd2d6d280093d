#!/usr/bin/env python3
"""
Data models for the Doppler Simulator.

This module defines the value types shared between the engine, its components,
and the front end.

Units and usage
- positions are in meters [m], velocities in meters per second [m/s], times in
  model seconds [s], frequencies in Hertz [Hz], phases in radians.
- KinematicBody is the only mutable entity that lives for the whole session; it
  is reset, never replaced.
- Snapshot-related types (BodyState, WaveformState, SimulationSnapshot) are
  frozen so a stored history entry can never be mutated after the fact.
"""
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, NamedTuple, Tuple

from .constants import MIN_VELOCITY_MAG, TRAIL_MAX_POINTS, VELOCITY_DECAY
from .vector_utils import ZERO, Vector2, vec_add, vec_len, vec_scale


class PositionHistoryPoint(NamedTuple):
    """A sampled trail point."""
    position: Vector2
    time: float


class WaveformSample(NamedTuple):
    """One point of a display waveform: t is the display time axis, y the amplitude."""
    t: float
    y: float


@dataclass(frozen=True)
class BodyState:
    position: Vector2
    velocity: Vector2
    controlled: bool


@dataclass
class KinematicBody:
    """
    A movable entity (sound source or observer).

    Fields:
    - name: Identifier used in logs and the UI
    - position: 2D position (x, y) in meters
    - velocity: 2D velocity (vx, vy) in meters/second
    - controlled: True while a scenario, drag, or key impulse drives the body;
      released bodies coast to a stop through geometric velocity decay
    - trail: Bounded deque of sampled positions for motion trails
    """
    name: str
    position: Vector2
    velocity: Vector2 = ZERO
    controlled: bool = False
    trail: Deque[PositionHistoryPoint] = field(
        default_factory=lambda: deque(maxlen=TRAIL_MAX_POINTS)
    )

    @property
    def speed(self) -> float:
        return vec_len(self.velocity)

    def integrate(self, dt: float) -> None:
        """Move along the current velocity while under active control."""
        if not self.controlled:
            return
        self.position = vec_add(self.position, vec_scale(self.velocity, dt))
        if self.speed < MIN_VELOCITY_MAG:
            self.velocity = ZERO
            self.controlled = False

    def apply_decay(self) -> None:
        """Shrink the velocity of a released body; snaps to zero below the cutoff."""
        if self.controlled or self.speed == 0:
            return
        self.velocity = vec_scale(self.velocity, VELOCITY_DECAY)
        if self.speed < MIN_VELOCITY_MAG:
            self.velocity = ZERO

    def update(self, dt: float) -> None:
        if self.controlled:
            self.integrate(dt)
        else:
            self.apply_decay()

    def reset(self, initial_position: Vector2) -> None:
        self.position = (float(initial_position[0]), float(initial_position[1]))
        self.velocity = ZERO
        self.controlled = False
        self.trail.clear()

    def state(self) -> BodyState:
        return BodyState(self.position, self.velocity, self.controlled)

    def restore(self, state: BodyState) -> None:
        self.position = state.position
        self.velocity = state.velocity
        self.controlled = state.controlled

    def add_trail_point(self, time: float) -> None:
        """Append the current position to the trail."""
        self.trail.append(PositionHistoryPoint(self.position, time))

    def prune_trail(self, now: float, max_age: float) -> None:
        while self.trail and now - self.trail[0].time > max_age:
            self.trail.popleft()

    def trim_trail_after(self, time: float) -> None:
        while self.trail and self.trail[-1].time > time:
            self.trail.pop()


@dataclass
class Wavefront:
    """
    A single emitted pulse, modelled as an expanding circle.

    The source state is captured at emission time; later motion of the source
    never affects a wavefront that is already in flight.
    """
    origin: Vector2
    birth_time: float
    radius: float
    source_velocity: Vector2
    source_frequency: float
    phase_at_emission: float

    def age(self, now: float) -> float:
        return now - self.birth_time


class ArrivedWavefront(NamedTuple):
    """A wavefront that has reached the observer, with its geometric arrival time."""
    wave: Wavefront
    distance: float
    arrival_time: float


@dataclass(frozen=True)
class WaveformState:
    emitted_phase: float
    observed_phase: float
    emitted: Tuple[float, ...]
    observed: Tuple[float, ...]


@dataclass(frozen=True)
class SimulationSnapshot:
    """Physical state at one model time, recorded while playing forward."""
    time: float
    source: BodyState
    observer: BodyState
    wavefronts: Tuple[Wavefront, ...]
    waveform: WaveformState
