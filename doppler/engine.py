#!/usr/bin/env python3
"""
Simulation engine for the Doppler Simulator.

Responsibilities
- Own the source and observer bodies, the wave emitter, the waveform
  synthesizer, the Doppler calculator, the configuration, the microphone
  probe, and the bounded snapshot history.
- Advance everything by one discrete step per call to `step`.

Step data flow (forward)
1) scale real elapsed time into model time
2) integrate both bodies and sample their trails
3) age/prune wavefronts, then emit a new one if the interval elapsed
4) scan for wavefronts crossing the microphone
5) find wavefronts that reached the observer and synthesize both waveforms
6) record a snapshot for time reversal

Time reversal
- A negative time-speed factor never integrates backward. Bodies are
  interpolated between the recorded frames around the target time and the
  live wavefronts are rebuilt from the emitter's emission log, so the rewound
  state is the one that was actually simulated.
- Requests older than the retained history snap to the oldest snapshot.

Threading
- The engine is single-threaded and lock-free. Front ends that call it from
  several threads must serialize access themselves.
"""
from dataclasses import replace
from typing import List, Optional, Union

from loguru import logger as log

from .constants import (
    MIC_COOLDOWN,
    MIC_TOLERANCE,
    OBSERVER_POSITION,
    REAL_TIME_FACTOR,
    SNAPSHOT_CAPACITY,
    SOURCE_POSITION,
    TIME_STEP_MAX,
    TRAIL_MAX_AGE,
    TRAIL_SAMPLE_INTERVAL,
    WAVE_MAX_AGE,
    WAVEFORM_SIZE,
)
from .data_models import (
    BodyState,
    KinematicBody,
    PositionHistoryPoint,
    SimulationSnapshot,
    WaveformSample,
)
from .history import SnapshotRing
from .physics import DopplerCalculator
from .scenarios import Scenario, ScenarioPreset, get_preset
from .settings import SimulationSettings, TimeSpeed
from .utils import positive_float
from .vector_utils import Vector2, as_vector, clamp, vec_dist
from .waveform import TWO_PI, WaveformSynthesizer
from .waves import WaveCallback, WaveEmitter


class SimulationEngine:
    """
    Frame-driven Doppler simulation.

    Inputs arrive through the command methods (velocity/position commands,
    configuration setters, play/pause, scenario selection). Outputs are plain
    attributes and read-only views read by the renderer after each step.
    """

    def __init__(self,
                 settings: Optional[SimulationSettings] = None,
                 waveform_size: int = WAVEFORM_SIZE,
                 snapshot_capacity: int = SNAPSHOT_CAPACITY,
                 max_wave_age: float = WAVE_MAX_AGE):
        self.settings = settings if settings is not None else SimulationSettings()

        self.source = KinematicBody("source", SOURCE_POSITION)
        self.observer = KinematicBody("observer", OBSERVER_POSITION)
        self.emitter = WaveEmitter(self.settings.sound_speed, max_wave_age)
        self.synthesizer = WaveformSynthesizer(waveform_size)
        self.calculator = DopplerCalculator()
        self.history = SnapshotRing(snapshot_capacity)

        self.time = 0.0
        self.observed_frequency = self.settings.emitted_frequency
        self.wave_detected = False
        self.detection_count = 0
        self._last_detection_time: Optional[float] = None
        self._last_trail_sample: Optional[float] = None
        self.scenario_name = self.settings.scenario.label

        self.apply_scenario(self.settings.scenario)

    # -----------------------
    # Read-only outputs
    # -----------------------

    @property
    def playing(self) -> bool:
        return self.settings.playing

    @property
    def sound_speed(self) -> float:
        return self.settings.sound_speed

    @property
    def emitted_frequency(self) -> float:
        return self.settings.emitted_frequency

    @property
    def time_speed(self) -> TimeSpeed:
        return self.settings.time_speed

    @property
    def microphone_enabled(self) -> bool:
        return self.settings.microphone_enabled

    @property
    def microphone_position(self) -> Vector2:
        return self.settings.microphone_position

    @property
    def waves(self):
        return self.emitter.waves

    @property
    def emitted_waveform(self) -> List[WaveformSample]:
        return self.synthesizer.emitted_samples

    @property
    def observed_waveform(self) -> List[WaveformSample]:
        return self.synthesizer.observed_samples

    @property
    def source_trail(self) -> List[PositionHistoryPoint]:
        return list(self.source.trail)

    @property
    def observer_trail(self) -> List[PositionHistoryPoint]:
        return list(self.observer.trail)

    @property
    def snapshot_count(self) -> int:
        return len(self.history)

    def on_wave_added(self, callback: WaveCallback) -> None:
        self.emitter.on_added(callback)

    def on_wave_removed(self, callback: WaveCallback) -> None:
        self.emitter.on_removed(callback)

    # -----------------------
    # Commands
    # -----------------------

    def set_playing(self, playing: bool) -> None:
        self.settings.playing = bool(playing)

    def toggle_playing(self) -> bool:
        self.settings.playing = not self.settings.playing
        return self.settings.playing

    def set_sound_speed(self, value) -> float:
        speed = self.settings.set_sound_speed(value)
        self.emitter.sound_speed = speed
        return speed

    def set_emitted_frequency(self, value) -> float:
        return self.settings.set_emitted_frequency(value)

    def set_time_speed(self, value) -> TimeSpeed:
        speed = self.settings.set_time_speed(value)
        self.synthesizer.refresh(speed.factor)
        return speed

    def set_microphone_enabled(self, enabled: bool) -> None:
        self.settings.microphone_enabled = bool(enabled)
        if not enabled:
            self.wave_detected = False

    def set_microphone_position(self, position) -> Vector2:
        return self.settings.set_microphone_position(position)

    def set_source_position(self, position) -> None:
        self.source.position = as_vector(position)

    def set_observer_position(self, position) -> None:
        self.observer.position = as_vector(position)

    def set_source_velocity(self, velocity, controlled: bool = True) -> None:
        self.source.velocity = as_vector(velocity)
        self.source.controlled = controlled

    def set_observer_velocity(self, velocity, controlled: bool = True) -> None:
        self.observer.velocity = as_vector(velocity)
        self.observer.controlled = controlled

    def release_source(self) -> None:
        self.source.controlled = False

    def release_observer(self) -> None:
        self.observer.controlled = False

    def apply_scenario(self, scenario: Union[Scenario, ScenarioPreset, str]) -> ScenarioPreset:
        """
        Put both bodies at their start conditions and discard all derived state.

        Accepts a built-in Scenario (or its name/label) or a ScenarioPreset
        loaded from JSON. A preset with an invalid sound speed or frequency
        raises ValueError before any state is touched.
        """
        if isinstance(scenario, ScenarioPreset):
            preset = scenario
        else:
            preset = get_preset(scenario)
        if preset.sound_speed is not None:
            positive_float(preset.sound_speed, "Sound speed")
        if preset.emitted_frequency is not None:
            positive_float(preset.emitted_frequency, "Emitted frequency")

        if not isinstance(scenario, ScenarioPreset):
            self.settings.scenario = Scenario.coerce(scenario)
        self.scenario_name = preset.name

        if preset.sound_speed is not None:
            self.set_sound_speed(preset.sound_speed)
        if preset.emitted_frequency is not None:
            self.set_emitted_frequency(preset.emitted_frequency)

        self.source.reset(preset.source_position)
        self.observer.reset(preset.observer_position)
        self.source.velocity = preset.source_velocity
        self.source.controlled = preset.source_controlled
        self.observer.velocity = preset.observer_velocity
        self.observer.controlled = preset.observer_controlled

        self._clear_derived_state()
        log.info(f"Applied scenario '{preset.name}'")
        return preset

    def reset(self) -> None:
        """Restore default settings and the free-play scenario."""
        self.settings.reset()
        self.emitter.sound_speed = self.settings.sound_speed
        self.apply_scenario(Scenario.FREE_PLAY)
        log.info("Simulation reset")

    def _clear_derived_state(self) -> None:
        self.time = 0.0
        self.emitter.reset()
        self.synthesizer.reset()
        self.history.clear()
        self.observed_frequency = self.settings.emitted_frequency
        self.wave_detected = False
        self._last_detection_time = None
        self._last_trail_sample = None

    # -----------------------
    # Stepping
    # -----------------------

    def step(self, real_dt: float, force: bool = False) -> None:
        """
        Advance the simulation by one frame.

        Args:
            real_dt: Real elapsed seconds since the previous frame; clamped to
                [0, TIME_STEP_MAX] so a stalled frame cannot jump the model.
            force: Step even while paused (frame-by-frame stepping).
        """
        if not self.settings.playing and not force:
            return

        self.wave_detected = False
        factor = self.settings.time_speed.factor
        model_dt = clamp(real_dt, 0.0, TIME_STEP_MAX) * REAL_TIME_FACTOR * factor

        if factor < 0:
            self._step_backward(model_dt)
        else:
            self._step_forward(model_dt)

    def _step_forward(self, dt: float) -> None:
        self.time += dt

        self.source.update(dt)
        self.observer.update(dt)
        self._sample_trails()

        self.emitter.advance(self.time, dt)
        self.emitter.tick(
            self.time,
            self.source.position,
            self.source.velocity,
            self.settings.emitted_frequency,
            self.synthesizer.emitted_phase,
        )

        if self.settings.microphone_enabled:
            self._detect_microphone()

        self._update_waveforms(dt)
        self._record_snapshot()

    def _step_backward(self, dt: float) -> None:
        factor = self.settings.time_speed.factor
        oldest = self.history.oldest()
        if oldest is None:
            self.synthesizer.refresh(factor)
            return

        target = self.time + dt
        if target < oldest.time:
            log.debug(f"Rewind to t={target:.3f}s is past retained history; holding at t={oldest.time:.3f}s")
            target = oldest.time

        # Bodies between two recorded frames are interpolated; the live state
        # stands in for the later frame when no newer snapshot is kept
        before, after = self.history.around(target)
        if after is not None:
            later_time, later_source, later_observer = after.time, after.source, after.observer
        else:
            later_time, later_source, later_observer = self.time, self.source.state(), self.observer.state()
        span = later_time - before.time
        alpha = (target - before.time) / span if span > 0 else 0.0
        self.source.restore(_interpolate_state(before.source, later_source, alpha))
        self.observer.restore(_interpolate_state(before.observer, later_observer, alpha))

        self.synthesizer.restore(before.waveform)
        self.synthesizer.emitted_phase = (
            before.waveform.emitted_phase
            + TWO_PI * self.settings.emitted_frequency * (target - before.time)
        ) % TWO_PI
        self.emitter.restore_to_time(target)
        self.history.discard_after(target)

        for body in (self.source, self.observer):
            body.trim_trail_after(target)
        self._last_trail_sample = self.source.trail[-1].time if self.source.trail else None
        if self._last_detection_time is not None and self._last_detection_time > target:
            self._last_detection_time = None

        self.time = target
        arrived = self.calculator.find_arrived_wavefronts(
            self.emitter.waves, self.observer.position, self.settings.sound_speed
        )
        if arrived:
            self.observed_frequency = self.calculator.observed_frequency(
                arrived[0].wave, self.observer.position, self.observer.velocity,
                self.settings.sound_speed,
            )
        else:
            self.observed_frequency = self.settings.emitted_frequency
        self.synthesizer.refresh(factor)

    def _sample_trails(self) -> None:
        # Throttle trail sampling to keep the point count meaningful at any frame rate
        if self._last_trail_sample is None or self.time - self._last_trail_sample >= TRAIL_SAMPLE_INTERVAL:
            self.source.add_trail_point(self.time)
            self.observer.add_trail_point(self.time)
            self._last_trail_sample = self.time
        self.source.prune_trail(self.time, TRAIL_MAX_AGE)
        self.observer.prune_trail(self.time, TRAIL_MAX_AGE)

    def _detect_microphone(self) -> None:
        if self._last_detection_time is not None and self.time - self._last_detection_time < MIC_COOLDOWN:
            return
        mic = self.settings.microphone_position
        for wave in self.emitter.waves:
            if abs(wave.radius - vec_dist(wave.origin, mic)) < MIC_TOLERANCE:
                self.wave_detected = True
                self.detection_count += 1
                self._last_detection_time = self.time
                log.debug(f"Wavefront born at t={wave.birth_time:.3f}s crossed the microphone at t={self.time:.3f}s")
                return

    def _update_waveforms(self, dt: float) -> None:
        factor = self.settings.time_speed.factor
        sound_speed = self.settings.sound_speed
        self.synthesizer.advance_emitted(self.settings.emitted_frequency, dt, factor)

        arrived = self.calculator.find_arrived_wavefronts(
            self.emitter.waves, self.observer.position, sound_speed
        )
        if not arrived:
            self.synthesizer.clear_observed()
            return

        # The most recently arrived wavefront is the freshest causal information
        current = arrived[0]
        self.observed_frequency = self.calculator.observed_frequency(
            current.wave, self.observer.position, self.observer.velocity, sound_speed
        )
        # Arrival time already reflects where the observer is, so only the
        # source-side shift drives the phase
        source_side = self.calculator.stationary_observed_frequency(
            current.wave, self.observer.position, sound_speed
        )
        self.synthesizer.advance_observed(
            source_side,
            current.wave.phase_at_emission,
            self.time - current.arrival_time,
            factor,
        )

    def _record_snapshot(self) -> None:
        self.history.append(SimulationSnapshot(
            time=self.time,
            source=self.source.state(),
            observer=self.observer.state(),
            wavefronts=tuple(replace(w) for w in self.emitter.waves),
            waveform=self.synthesizer.state(),
        ))
        self.emitter.forget_before(self.history.oldest().time)


def _interpolate_state(earlier: BodyState, later: BodyState, alpha: float) -> BodyState:
    """Position blended linearly; velocity and control come from the later frame."""
    if alpha <= 0.0:
        return earlier
    if alpha >= 1.0:
        return later
    position = (
        earlier.position[0] + (later.position[0] - earlier.position[0]) * alpha,
        earlier.position[1] + (later.position[1] - earlier.position[1]) * alpha,
    )
    return BodyState(position, later.velocity, later.controlled)
