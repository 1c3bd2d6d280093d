import pytest

from doppler.waves import WaveEmitter

C = 343.0


def run_forward(emitter, start, stop, dt, position=(0.0, 0.0), velocity=(0.0, 0.0), frequency=4.0):
    t = start
    steps = int(round((stop - start) / dt))
    for _ in range(steps):
        t += dt
        emitter.advance(t, dt)
        emitter.tick(t, position, velocity, frequency, 0.0)
    return t


def snapshot(emitter):
    return [(w.origin, w.birth_time, w.radius) for w in emitter.waves]


def test_emission_interval():
    emitter = WaveEmitter(C)
    assert emitter.tick(0.25, (0.0, 0.0), (0.0, 0.0), 4.0, 0.0) is None
    wave = emitter.tick(0.26, (5.0, 6.0), (1.0, 2.0), 4.0, 1.5)
    assert wave is not None
    assert wave.origin == (5.0, 6.0)
    assert wave.source_velocity == (1.0, 2.0)
    assert wave.radius == 0.0
    assert wave.phase_at_emission == 1.5
    assert emitter.tick(0.4, (0.0, 0.0), (0.0, 0.0), 4.0, 0.0) is None
    assert emitter.last_emission_time == 0.26


def test_radius_tracks_age_times_sound_speed():
    emitter = WaveEmitter(C)
    t = run_forward(emitter, 0.0, 2.0, 0.01)
    assert emitter.waves
    for wave in emitter.waves:
        assert wave.radius == pytest.approx((t - wave.birth_time) * C)


def test_wave_born_at_zero_reaches_343m_then_expires():
    emitter = WaveEmitter(C, max_age=1.0)
    emitter.last_emission_time = -1.0
    wave = emitter.tick(0.0, (0.0, 0.0), (0.0, 0.0), 4.0, 0.0)
    emitter.advance(1.0, 1.0)
    assert wave.radius == pytest.approx(343.0)
    assert wave in emitter.waves

    emitter.advance(1.01, 0.01)
    assert wave not in emitter.waves


def test_restore_to_time_reproduces_live_set():
    emitter = WaveEmitter(C)
    run_forward(emitter, 0.0, 1.5, 0.01)
    at_mark = snapshot(emitter)

    run_forward(emitter, 1.5, 2.5, 0.01)
    emitter.restore_to_time(1.5)
    restored = snapshot(emitter)

    assert len(restored) == len(at_mark)
    for (o1, b1, r1), (o2, b2, r2) in zip(at_mark, restored):
        assert o1 == o2
        assert b1 == b2
        assert r1 == pytest.approx(r2)

    # Replaying forward re-emits the discarded future at the same times
    run_forward(emitter, 1.5, 2.0, 0.01)
    births = [w.birth_time for w in emitter.waves]
    assert births == sorted(births)
    assert emitter.last_emission_time <= 2.0 + 1e-9


def test_forget_before_bounds_history():
    emitter = WaveEmitter(C, max_age=1.0)
    run_forward(emitter, 0.0, 5.0, 0.01)
    full = emitter.history_size
    emitter.forget_before(5.0)
    assert 0 < emitter.history_size < full


def test_callbacks_fire_on_add_and_remove():
    added, removed = [], []
    emitter = WaveEmitter(C, max_age=0.5)
    emitter.on_added(added.append)
    emitter.on_removed(removed.append)
    run_forward(emitter, 0.0, 2.0, 0.01)
    assert added
    assert removed
    assert set(map(id, emitter.waves)) == set(map(id, added)) - set(map(id, removed))


def test_waves_view_is_read_only_copy():
    emitter = WaveEmitter(C)
    run_forward(emitter, 0.0, 1.0, 0.01)
    view = emitter.waves
    assert isinstance(view, tuple)
    count = len(view)
    run_forward(emitter, 1.0, 2.0, 0.01)
    assert len(view) == count


@pytest.mark.parametrize("frequency", [0.0, -4.0, float("nan")])
def test_tick_rejects_bad_frequency(frequency):
    emitter = WaveEmitter(C)
    with pytest.raises(ValueError):
        emitter.tick(1.0, (0.0, 0.0), (0.0, 0.0), frequency, 0.0)


def test_reset_empties_everything():
    emitter = WaveEmitter(C)
    run_forward(emitter, 0.0, 1.0, 0.01)
    emitter.reset()
    assert emitter.waves == ()
    assert emitter.history_size == 0
    assert emitter.last_emission_time == 0.0
