import pytest

from doppler.data_models import BodyState, SimulationSnapshot, WaveformState
from doppler.history import SnapshotRing


def snap(t):
    body = BodyState((t, 0.0), (0.0, 0.0), False)
    return SimulationSnapshot(t, body, body, (), WaveformState(0.0, 0.0, (), ()))


def test_ring_drops_oldest_on_overflow():
    ring = SnapshotRing(capacity=3)
    for t in (0.1, 0.2, 0.3, 0.4):
        ring.append(snap(t))
    assert len(ring) == 3
    assert ring.oldest().time == 0.2
    assert ring.newest().time == 0.4


def test_nearest_snapshot():
    ring = SnapshotRing(capacity=10)
    for t in (0.1, 0.2, 0.3):
        ring.append(snap(t))
    assert ring.nearest(0.26).time == 0.3
    assert ring.nearest(0.14).time == 0.1
    assert ring.nearest(-5.0).time == 0.1


def test_empty_ring():
    ring = SnapshotRing()
    assert ring.oldest() is None
    assert ring.nearest(1.0) is None
    ring.discard_after(0.0)
    assert len(ring) == 0


def test_discard_after():
    ring = SnapshotRing(capacity=10)
    for t in (0.1, 0.2, 0.3, 0.4):
        ring.append(snap(t))
    ring.discard_after(0.25)
    assert [s.time for s in ring] == [0.1, 0.2]


def test_snapshots_are_immutable():
    s = snap(0.1)
    with pytest.raises(AttributeError):
        s.time = 1.0


def test_invalid_capacity():
    with pytest.raises(ValueError):
        SnapshotRing(capacity=0)


def test_around_brackets_time():
    ring = SnapshotRing(capacity=10)
    for t in (0.1, 0.2, 0.3):
        ring.append(snap(t))
    before, after = ring.around(0.25)
    assert (before.time, after.time) == (0.2, 0.3)
    before, after = ring.around(0.2)
    assert (before.time, after.time) == (0.2, 0.3)
    before, after = ring.around(0.5)
    assert before.time == 0.3 and after is None
    before, after = ring.around(0.05)
    assert before is None and after.time == 0.1
