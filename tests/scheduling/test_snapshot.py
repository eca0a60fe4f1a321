"""Tests for the generation-guarded appointment snapshot."""

from salon.scheduling.snapshot import AppointmentSnapshot


def test_new_snapshot_is_stale_and_empty() -> None:
    """Nothing has been fetched yet."""
    snapshot = AppointmentSnapshot()

    assert snapshot.is_fresh is False
    assert snapshot.records == ()


def test_publish_replaces_records(make_record) -> None:
    """A completed fetch becomes the current snapshot."""
    snapshot = AppointmentSnapshot()
    records = [make_record(), make_record()]

    token = snapshot.begin_fetch()
    accepted = snapshot.publish(token, records)

    assert accepted is True
    assert snapshot.is_fresh is True
    assert snapshot.records == tuple(records)


def test_older_fetch_cannot_overwrite_newer(make_record) -> None:
    """The fetch that started last wins regardless of completion order."""
    snapshot = AppointmentSnapshot()
    older = snapshot.begin_fetch()
    newer = snapshot.begin_fetch()
    newest_records = [make_record()]

    assert snapshot.publish(newer, newest_records) is True
    assert snapshot.publish(older, [make_record(), make_record()]) is False
    assert snapshot.records == tuple(newest_records)


def test_write_during_fetch_discards_its_result(make_record) -> None:
    """A fetch that started before a write is not published."""
    snapshot = AppointmentSnapshot()
    token = snapshot.begin_fetch()

    snapshot.invalidate()

    assert snapshot.publish(token, [make_record()]) is False
    assert snapshot.is_fresh is False


def test_invalidate_drops_records(make_record) -> None:
    """After a write the next read must refetch."""
    snapshot = AppointmentSnapshot()
    snapshot.publish(snapshot.begin_fetch(), [make_record()])
    generation = snapshot.generation

    snapshot.invalidate()

    assert snapshot.is_fresh is False
    assert snapshot.records == ()
    assert snapshot.generation == generation + 1
