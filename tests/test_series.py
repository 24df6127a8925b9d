"""Tests for the bounded series store and overflow policies."""

from __future__ import annotations

import pytest

from trajectory_exporter.recording.overflow import (
    DecimatePolicy,
    DropOldestPolicy,
    make_overflow_policy,
)
from trajectory_exporter.recording.series import Absent, Sample, SeriesStore


def _sample(t: float) -> Sample:
    return Sample.from_state((t, 2.0 * t, 0.0, 1.0, 0.0, 0.0))


def test_store_starts_cleared() -> None:
    store = SeriesStore(2, capacity=10)
    assert store.cleared
    store.append(0.0, [_sample(0.0), _sample(0.0)])
    assert not store.cleared
    store.clear()
    assert store.cleared
    assert len(store) == 0
    assert len(store.series(0)) == 0


def test_append_requires_one_result_per_body() -> None:
    store = SeriesStore(2, capacity=10)
    with pytest.raises(ValueError):
        store.append(0.0, [_sample(0.0)])


def test_absent_body_is_not_padded() -> None:
    store = SeriesStore(2, capacity=10)
    store.append(0.0, [_sample(0.0), _sample(0.0)])
    store.append(1.0, [_sample(1.0), Absent(1)])
    store.append(2.0, [_sample(2.0), _sample(2.0)])
    assert store.time == (0.0, 1.0, 2.0)
    assert len(store.series(0)) == 3
    assert store.series(1).steps == [0, 2]
    assert store.series(1).states()[1][0] == 2.0
    assert store.series(0).quaternions()[0] == [0.0, 0.0, 0.0, 1.0]


def test_capacity_is_never_exceeded() -> None:
    store = SeriesStore(1, capacity=5)
    for i in range(7):
        store.append(float(i), [_sample(float(i))])
        assert len(store) <= 5
    assert store.overflowed
    assert store.time[0] == 0.0
    assert store.time[-1] == 6.0


@pytest.mark.parametrize("policy", ["decimate", "drop_oldest"])
def test_reduction_keeps_bodies_aligned(policy: str) -> None:
    store = SeriesStore(2, capacity=8, policy=make_overflow_policy(policy))
    for i in range(30):
        second = Absent(1) if i % 3 == 0 else _sample(float(i))
        store.append(float(i), [_sample(float(i)), second])
    time = store.time
    assert len(time) <= 8
    assert store.reduction_count > 0
    first = store.series(0)
    assert [row[0] for row in first.states()] == list(time)
    second_series = store.series(1)
    assert [row[0] for row in second_series.states()] == [time[s] for s in second_series.steps]
    assert all(int(time[s]) % 3 != 0 for s in second_series.steps)


def test_clear_resets_reduction_state() -> None:
    store = SeriesStore(1, capacity=3)
    for i in range(5):
        store.append(float(i), [_sample(float(i))])
    store.clear()
    assert not store.overflowed
    assert store.summary()["steps"] == 0


def test_decimate_policy() -> None:
    policy = DecimatePolicy()
    assert policy.select(10, 10) == [0, 2, 4, 6, 8]
    assert policy.select(10, 5) == [0, 4, 8]
    assert policy.select(4, 1) == []


def test_drop_oldest_policy() -> None:
    assert DropOldestPolicy().select(20, 20) == list(range(2, 20))
    assert DropOldestPolicy().select(5, 5) == [1, 2, 3, 4]


def test_unknown_policy() -> None:
    with pytest.raises(ValueError):
        make_overflow_policy("random")


def test_invalid_store_arguments() -> None:
    with pytest.raises(ValueError):
        SeriesStore(1, capacity=0)
    with pytest.raises(ValueError):
        SeriesStore(-1, capacity=5)
