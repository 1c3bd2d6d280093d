import pytest

from doppler.constants import (
    EMITTED_FREQ,
    OBSERVER_POSITION,
    SOURCE_POSITION,
    TRAIL_MAX_AGE,
    TRAIL_MAX_POINTS,
    WAVEFORM_SIZE,
)
from doppler.engine import SimulationEngine
from doppler.scenarios import Scenario, ScenarioPreset
from doppler.settings import SimulationSettings, TimeSpeed

# One frame of real time; with the 0.5 real-time factor this is 0.025 model seconds
FRAME = 0.05


def run(engine, frames, real_dt=FRAME):
    for _ in range(frames):
        engine.step(real_dt)


@pytest.fixture
def engine():
    return SimulationEngine()


def test_initial_state(engine):
    assert engine.time == 0.0
    assert engine.waves == ()
    assert engine.source.position == SOURCE_POSITION
    assert engine.observer.position == OBSERVER_POSITION
    assert len(engine.emitted_waveform) == WAVEFORM_SIZE
    assert engine.observed_frequency == EMITTED_FREQ


def test_time_scaling(engine):
    engine.step(FRAME)
    assert engine.time == pytest.approx(0.025)
    # Long stalls are clamped
    engine.step(5.0)
    assert engine.time == pytest.approx(0.05)
    engine.set_time_speed(TimeSpeed.SLOW)
    engine.step(FRAME)
    assert engine.time == pytest.approx(0.05 + 0.025 * 0.25)


def test_paused_step_is_noop_unless_forced(engine):
    engine.set_playing(False)
    engine.step(FRAME)
    assert engine.time == 0.0
    assert engine.snapshot_count == 0
    engine.step(FRAME, force=True)
    assert engine.time == pytest.approx(0.025)
    assert not engine.playing
    assert engine.toggle_playing()


def test_stationary_pair_hears_emitted_frequency(engine):
    engine.set_observer_position((SOURCE_POSITION[0] + 100.0, SOURCE_POSITION[1]))
    run(engine, 40)
    assert engine.waves
    assert engine.observed_frequency == 4.0
    assert any(s.y != 0.0 for s in engine.observed_waveform)


def test_observed_waveform_silent_before_arrival(engine):
    run(engine, 12)
    assert engine.waves
    assert all(s.y == 0.0 for s in engine.observed_waveform)
    assert any(s.y != 0.0 for s in engine.emitted_waveform)


def test_source_approaching_shifts_up(engine):
    engine.apply_scenario(Scenario.SOURCE_APPROACHING)
    run(engine, 80)
    assert engine.source.position[0] == pytest.approx(SOURCE_POSITION[0] + 80.0 * engine.time)
    assert engine.observed_frequency == pytest.approx(4.0 * 343.0 / (343.0 - 80.0))


def test_source_receding_shifts_down(engine):
    engine.apply_scenario("Source Receding")
    run(engine, 80)
    assert engine.observed_frequency == pytest.approx(4.0 * 343.0 / (343.0 + 80.0))


def test_wave_radii_follow_sound_speed(engine):
    run(engine, 60)
    for wave in engine.waves:
        assert wave.radius == pytest.approx((engine.time - wave.birth_time) * engine.sound_speed)


def test_reset_during_playback(engine):
    engine.apply_scenario(Scenario.SAME_DIRECTION)
    engine.set_sound_speed(300.0)
    engine.set_microphone_enabled(True)
    run(engine, 60)
    assert engine.waves

    engine.reset()
    assert engine.waves == ()
    assert engine.time == 0.0
    assert engine.sound_speed == 343.0
    assert engine.source.position == SOURCE_POSITION
    assert engine.observer.position == OBSERVER_POSITION
    assert engine.source.velocity == (0.0, 0.0)
    assert engine.observer.velocity == (0.0, 0.0)
    assert all(s.y == 0.0 for s in engine.emitted_waveform)
    assert all(s.y == 0.0 for s in engine.observed_waveform)
    assert len(engine.observed_waveform) == WAVEFORM_SIZE
    assert engine.snapshot_count == 0
    assert not engine.microphone_enabled


def test_apply_scenario_clears_stale_state(engine):
    run(engine, 40)
    assert engine.waves
    preset = engine.apply_scenario(Scenario.OBSERVER_APPROACHING)
    assert preset.observer_velocity == (-80.0, 0.0)
    assert engine.waves == ()
    assert engine.time == 0.0
    assert engine.snapshot_count == 0
    assert engine.observer.velocity == (-80.0, 0.0)
    assert engine.observer.controlled


def test_apply_custom_preset_overrides_physics(engine):
    preset = ScenarioPreset("Custom", source_velocity=(20.0, 0.0), source_controlled=True,
                            source_position=(0.0, 0.0), sound_speed=300.0, emitted_frequency=6.0)
    engine.apply_scenario(preset)
    assert engine.source.position == (0.0, 0.0)
    assert engine.sound_speed == 300.0
    assert engine.emitter.sound_speed == 300.0
    assert engine.emitted_frequency == 6.0


def test_microphone_fires_once_per_crossing(engine):
    # Mic is 250 m from the source; the first wavefront (born ~0.25 s) crosses it
    # near 0.98 s, the second not before ~1.23 s
    engine.set_microphone_enabled(True)
    flags = 0
    for _ in range(220):
        engine.step(0.01)
        flags += engine.wave_detected
    assert engine.time == pytest.approx(1.1)
    assert engine.detection_count == 1
    assert flags == 1


def test_microphone_disabled_never_fires(engine):
    run(engine, 60)
    assert engine.detection_count == 0
    assert not engine.wave_detected


def test_reverse_restores_earlier_state(engine):
    engine.apply_scenario(Scenario.SOURCE_APPROACHING)
    # 3 Hz keeps emission instants away from frame boundaries
    engine.set_emitted_frequency(3.0)
    run(engine, 40)
    ahead = engine.source.position[0]
    births_ahead = [w.birth_time for w in engine.waves]

    engine.set_time_speed(TimeSpeed.REVERSE)
    run(engine, 20)
    assert engine.time == pytest.approx(0.5)
    assert engine.source.position[0] == pytest.approx(SOURCE_POSITION[0] + 80.0 * engine.time)
    assert engine.source.position[0] < ahead
    assert all(w.birth_time <= engine.time for w in engine.waves)
    assert len(engine.waves) < len(births_ahead)
    for wave in engine.waves:
        assert wave.radius == pytest.approx((engine.time - wave.birth_time) * engine.sound_speed)
    assert len(engine.emitted_waveform) == WAVEFORM_SIZE

    # Playing forward again continues from the rewound state
    engine.set_time_speed(TimeSpeed.NORMAL)
    run(engine, 20)
    assert engine.time == pytest.approx(1.0)
    assert engine.source.position[0] == pytest.approx(ahead)
    assert [w.birth_time for w in engine.waves] == pytest.approx(births_ahead)


def test_reverse_past_history_clamps_to_oldest():
    engine = SimulationEngine(snapshot_capacity=10)
    run(engine, 40)
    oldest = engine.history.oldest().time

    engine.set_time_speed(TimeSpeed.REVERSE)
    run(engine, 30)
    assert engine.time == pytest.approx(oldest)
    assert engine.snapshot_count == 1


def test_reverse_with_no_history_is_noop(engine):
    engine.set_time_speed(TimeSpeed.REVERSE_SLOW)
    engine.step(FRAME)
    assert engine.time == 0.0
    assert engine.waves == ()
    assert engine.emitted_waveform[1].t == pytest.approx(-0.25 / WAVEFORM_SIZE)


def test_trails_are_bounded(engine):
    engine.apply_scenario(Scenario.PERPENDICULAR)
    run(engine, 400)
    for trail in (engine.source_trail, engine.observer_trail):
        assert 0 < len(trail) <= TRAIL_MAX_POINTS
        assert all(engine.time - p.time <= TRAIL_MAX_AGE for p in trail)


def test_drag_then_release_decays():
    engine = SimulationEngine(SimulationSettings(scenario=Scenario.FREE_PLAY))
    engine.set_source_velocity((40.0, 0.0))
    run(engine, 4)
    assert engine.source.position[0] == pytest.approx(SOURCE_POSITION[0] + 40.0 * 0.1)
    engine.release_source()
    moved_to = engine.source.position
    run(engine, 20)
    assert engine.source.position == moved_to
    assert engine.source.velocity == (0.0, 0.0)


def test_wave_callbacks(engine):
    added = []
    engine.on_wave_added(added.append)
    run(engine, 40)
    assert len(added) == len(engine.waves)


def test_invalid_configuration_is_rejected(engine):
    with pytest.raises(ValueError):
        engine.set_sound_speed(0)
    with pytest.raises(ValueError):
        engine.set_emitted_frequency(-4.0)
    assert engine.sound_speed == 343.0
    assert engine.emitted_frequency == 4.0


def test_invalid_preset_leaves_state_untouched(engine):
    run(engine, 40)
    waves = engine.waves
    time_before = engine.time
    bad = ScenarioPreset("Bad", sound_speed=300.0, emitted_frequency=0.0)
    with pytest.raises(ValueError):
        engine.apply_scenario(bad)
    assert engine.sound_speed == 343.0
    assert engine.emitter.sound_speed == 343.0
    assert engine.time == time_before
    assert engine.waves == waves
    assert engine.scenario_name == Scenario.FREE_PLAY.label


def test_slow_reverse_lands_between_frames(engine):
    engine.apply_scenario(Scenario.SOURCE_APPROACHING)
    run(engine, 40)
    engine.set_time_speed(TimeSpeed.REVERSE_SLOW)
    engine.step(FRAME)
    assert engine.time == pytest.approx(0.99375)
    assert engine.source.position[0] == pytest.approx(SOURCE_POSITION[0] + 80.0 * engine.time)

    # Several slow steps inside one recorded frame stay consistent too
    run(engine, 5)
    assert engine.source.position[0] == pytest.approx(SOURCE_POSITION[0] + 80.0 * engine.time)
    for wave in engine.waves:
        assert wave.radius == pytest.approx((engine.time - wave.birth_time) * engine.sound_speed)

    engine.set_time_speed(TimeSpeed.NORMAL)
    run(engine, 10)
    assert engine.source.position[0] == pytest.approx(SOURCE_POSITION[0] + 80.0 * engine.time)


def test_rewind_before_first_arrival_resets_observed_frequency(engine):
    engine.apply_scenario(Scenario.SOURCE_APPROACHING)
    run(engine, 80)
    assert engine.observed_frequency > EMITTED_FREQ

    engine.set_time_speed(TimeSpeed.REVERSE)
    run(engine, 60)
    assert engine.time == pytest.approx(0.5)
    assert engine.observed_frequency == EMITTED_FREQ


def test_custom_preset_name_is_recorded(engine):
    engine.apply_scenario(ScenarioPreset("Custom Pass", source_velocity=(10.0, 0.0), source_controlled=True))
    assert engine.scenario_name == "Custom Pass"
    engine.apply_scenario("Source Receding")
    assert engine.scenario_name == Scenario.SOURCE_RECEDING.label
    engine.reset()
    assert engine.scenario_name == Scenario.FREE_PLAY.label
