#!/usr/bin/env python3
"""
Display waveforms for the emitted and observed signals.

Two fixed-length sample rings are kept at all times. Every update pushes one
sample and drops the oldest, then regenerates the time-tagged sample list the
graphs draw from. Consumers must treat those lists as current for one frame
only.
"""
import math
from collections import deque
from typing import Deque, List, Optional

from .constants import WAVEFORM_AMPLITUDE, WAVEFORM_SIZE
from .data_models import WaveformSample, WaveformState

TWO_PI = 2.0 * math.pi


class WaveformSynthesizer:
    """
    Phase-accumulating sine synthesis for the emitted and observed graphs.

    The emitted phase is integrated every frame. The observed phase is instead
    reconstructed from the arrival of the current wavefront, so it stays
    consistent however the per-frame dt varies.
    """

    def __init__(self, size: int = WAVEFORM_SIZE, amplitude: float = WAVEFORM_AMPLITUDE):
        self.amplitude = float(amplitude)
        self.size = 0
        self.emitted_phase = 0.0
        self.observed_phase = 0.0
        self.time_speed_factor = 1.0
        self._emitted: Deque[float] = deque()
        self._observed: Deque[float] = deque()
        self._emitted_samples: List[WaveformSample] = []
        self._observed_samples: List[WaveformSample] = []
        self.reset(size)

    @property
    def emitted_samples(self) -> List[WaveformSample]:
        return list(self._emitted_samples)

    @property
    def observed_samples(self) -> List[WaveformSample]:
        return list(self._observed_samples)

    def _tagged(self, ring: Deque[float]) -> List[WaveformSample]:
        n = len(ring)
        factor = self.time_speed_factor
        return [WaveformSample((i / n) * factor, y) for i, y in enumerate(ring)]

    def advance_emitted(self, frequency: float, dt: float, time_speed_factor: float) -> None:
        """
        Integrate the emitted phase and push its sample.

        Args:
            frequency: Emitted frequency in Hz
            dt: Elapsed model time in seconds
            time_speed_factor: Scales the displayed time axis
        """
        self.emitted_phase = (self.emitted_phase + TWO_PI * frequency * dt) % TWO_PI
        self.time_speed_factor = time_speed_factor
        self._emitted.append(self.amplitude * math.sin(self.emitted_phase))
        self._emitted_samples = self._tagged(self._emitted)

    def advance_observed(self,
                         observed_frequency: float,
                         phase_at_arrival: float,
                         time_since_arrival: float,
                         time_speed_factor: float) -> None:
        """
        Set the observed phase from the arrival event and push its sample.

        Args:
            observed_frequency: Frequency heard at the observer (Hz)
            phase_at_arrival: Phase carried by the arriving wavefront (rad)
            time_since_arrival: Model seconds since that wavefront arrived
            time_speed_factor: Scales the displayed time axis
        """
        self.observed_phase = phase_at_arrival + TWO_PI * observed_frequency * time_since_arrival
        self.time_speed_factor = time_speed_factor
        self._observed.append(self.amplitude * math.sin(self.observed_phase))
        self._observed_samples = self._tagged(self._observed)

    def clear_observed(self) -> None:
        """Push silence while no wavefront has reached the observer."""
        self._observed.append(0.0)
        self._observed_samples = self._tagged(self._observed)

    def refresh(self, time_speed_factor: float) -> None:
        """Regenerate both time axes without pushing new samples."""
        self.time_speed_factor = time_speed_factor
        self._emitted_samples = self._tagged(self._emitted)
        self._observed_samples = self._tagged(self._observed)

    def reset(self, size: Optional[int] = None) -> None:
        if size is not None:
            if size <= 0:
                raise ValueError(f"Waveform size must be positive, got {size!r}")
            self.size = int(size)
        self.emitted_phase = 0.0
        self.observed_phase = 0.0
        self._emitted = deque([0.0] * self.size, maxlen=self.size)
        self._observed = deque([0.0] * self.size, maxlen=self.size)
        self._emitted_samples = self._tagged(self._emitted)
        self._observed_samples = self._tagged(self._observed)

    def state(self) -> WaveformState:
        return WaveformState(
            emitted_phase=self.emitted_phase,
            observed_phase=self.observed_phase,
            emitted=tuple(self._emitted),
            observed=tuple(self._observed),
        )

    def restore(self, state: WaveformState) -> None:
        self.emitted_phase = state.emitted_phase
        self.observed_phase = state.observed_phase
        # Ring length is fixed; a state recorded at another size is padded/truncated.
        self._emitted = deque(_fit(state.emitted, self.size), maxlen=self.size)
        self._observed = deque(_fit(state.observed, self.size), maxlen=self.size)
        self._emitted_samples = self._tagged(self._emitted)
        self._observed_samples = self._tagged(self._observed)


def _fit(values, size: int) -> List[float]:
    values = list(values)[-size:]
    return [0.0] * (size - len(values)) + values
