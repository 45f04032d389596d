from __future__ import annotations

from repo_analytics.store import AnalyticsState, SnapshotStore


def test_full_fetch_lifecycle(snapshot_factory):
    store = SnapshotStore()
    assert store.state is AnalyticsState.IDLE

    generation = store.begin_load()
    assert store.state is AnalyticsState.LOADING

    snapshot = snapshot_factory()
    assert store.replace(generation, snapshot) is True
    assert store.state is AnalyticsState.READY
    assert store.snapshot is snapshot
    assert store.fetched_at == snapshot.last_fetched


def test_failure_clears_snapshot_and_records_error(snapshot_factory):
    store = SnapshotStore()
    store.replace(store.begin_load(), snapshot_factory())

    generation = store.begin_load()
    assert store.fail(generation, "Repository not found") is True

    assert store.state is AnalyticsState.IDLE
    assert store.snapshot is None
    assert store.error == "Repository not found"


def test_stale_generation_is_discarded(snapshot_factory, caplog):
    store = SnapshotStore()
    stale = store.begin_load()
    fresh = store.begin_load()

    newest = snapshot_factory(stars=2)
    assert store.replace(fresh, newest) is True
    with caplog.at_level("INFO"):
        assert store.replace(stale, snapshot_factory(stars=1)) is False
        assert store.fail(stale, "late failure") is False

    assert store.snapshot is newest
    assert store.error is None
    assert "stale snapshot" in caplog.text


def test_merge_prefers_new_fields(snapshot_factory):
    store = SnapshotStore()
    store.replace(store.begin_load(), snapshot_factory(stars=1, activity=(1,) * 7))

    merged = store.merge(snapshot_factory(stars=9, activity=(2,) * 7))

    assert merged.stats.stars == 9
    assert [point.commits for point in merged.commit_activity.points] == [2] * 7
    assert store.snapshot is merged


def test_merge_keeps_measured_activity_over_synthetic(snapshot_factory):
    store = SnapshotStore()
    store.replace(store.begin_load(), snapshot_factory(stars=1, activity=(4,) * 7))

    merged = store.merge(snapshot_factory(stars=9, activity=(8,) * 7, synthetic=True))

    assert merged.stats.stars == 9
    assert merged.commit_activity.synthetic is False
    assert [point.commits for point in merged.commit_activity.points] == [4] * 7


def test_merge_into_empty_store_sets_snapshot(snapshot_factory):
    store = SnapshotStore()
    update = snapshot_factory()

    assert store.merge(update) is update
    assert store.state is AnalyticsState.READY


def test_listeners_and_reset(snapshot_factory):
    store = SnapshotStore()
    states: list[AnalyticsState] = []
    unsubscribe = store.subscribe(lambda current: states.append(current.state))

    generation = store.begin_load()
    store.replace(generation, snapshot_factory())
    store.reset()
    unsubscribe()
    store.begin_load()

    assert states == [AnalyticsState.LOADING, AnalyticsState.READY, AnalyticsState.IDLE]
    assert store.is_current(generation) is False
