import pytest

from doppler.constants import EMITTED_FREQ, FREQUENCY_RANGE, MIC_POSITION, SOUND_SPEED, SOUND_SPEED_RANGE
from doppler.scenarios import Scenario
from doppler.settings import SimulationSettings, TimeSpeed


def test_defaults():
    s = SimulationSettings()
    assert s.sound_speed == SOUND_SPEED
    assert s.emitted_frequency == EMITTED_FREQ
    assert s.time_speed is TimeSpeed.NORMAL
    assert s.scenario is Scenario.FREE_PLAY
    assert s.microphone_position == MIC_POSITION
    assert s.playing


@pytest.mark.parametrize("value", [0, -343.0, float("nan"), float("inf"), "fast", None])
def test_invalid_sound_speed_rejected(value):
    s = SimulationSettings()
    with pytest.raises(ValueError):
        s.set_sound_speed(value)
    assert s.sound_speed == SOUND_SPEED


@pytest.mark.parametrize("value", [0, -1.0, float("nan")])
def test_invalid_frequency_rejected(value):
    with pytest.raises(ValueError):
        SimulationSettings(emitted_frequency=value)


def test_out_of_range_values_are_clamped():
    s = SimulationSettings()
    assert s.set_sound_speed(10_000) == SOUND_SPEED_RANGE[1]
    assert s.set_sound_speed(1.0) == SOUND_SPEED_RANGE[0]
    assert s.set_emitted_frequency(100.0) == FREQUENCY_RANGE[1]
    assert s.set_emitted_frequency("0.5") == FREQUENCY_RANGE[0]


def test_in_range_values_pass_through():
    s = SimulationSettings()
    assert s.set_sound_speed(300.0) == 300.0
    assert s.set_emitted_frequency(6.5) == 6.5


def test_time_speed_coerce():
    assert TimeSpeed.coerce(TimeSpeed.SLOW) is TimeSpeed.SLOW
    assert TimeSpeed.coerce("reverse slow") is TimeSpeed.REVERSE_SLOW
    assert TimeSpeed.coerce(-1) is TimeSpeed.REVERSE
    assert TimeSpeed.REVERSE.is_reverse
    assert not TimeSpeed.SLOW.is_reverse
    with pytest.raises(ValueError):
        TimeSpeed.coerce("warp")
    with pytest.raises(ValueError):
        TimeSpeed.coerce(3.0)


def test_microphone_position_validation():
    s = SimulationSettings()
    assert s.set_microphone_position([1, 2]) == (1.0, 2.0)
    with pytest.raises(ValueError):
        s.set_microphone_position((float("nan"), 0.0))
    with pytest.raises(ValueError):
        s.set_microphone_position("x")


def test_reset_restores_defaults():
    s = SimulationSettings(sound_speed=300.0, time_speed="slow", microphone_enabled=True, playing=False)
    s.reset()
    assert s.sound_speed == SOUND_SPEED
    assert s.time_speed is TimeSpeed.NORMAL
    assert not s.microphone_enabled
    assert s.playing
