"""Tests for grouping raw appointments into visits."""

import datetime as dt

import pytest

from salon.scheduling.aggregator import (
    UnresolvedReferenceError,
    group_appointments,
    group_key,
    resolve_records,
)
from salon.scheduling.models import ClientDetails, ServiceDetails

COLORING = ServiceDetails(id=11, name="Coloring", duration=45, color="#BAE1FF")
MANICURE = ServiceDetails(id=12, name="Manicure", duration=60, color="#E0BBE4")
JAN = ClientDetails(id=2, first_name="Jan", last_name="Nowak", phone="+48 987")


def test_group_key_combines_client_date_and_time(make_record) -> None:
    """Key is client id, ISO date and ISO time joined by dashes."""
    record = make_record(date=dt.date(2024, 6, 10), time=dt.time(9, 30))
    assert group_key(record) == "1-2024-06-10-09:30:00"


def test_same_slot_services_become_one_visit(make_record) -> None:
    """Two services for the same client and slot merge into one visit."""
    first = make_record()
    second = make_record(service=COLORING)

    (visit,) = group_appointments([first, second])

    assert visit.id == first.id
    assert visit.member_ids == [first.id, second.id]
    assert visit.client_name == "Anna Kowalska"
    assert visit.service_name == "Haircut, Coloring"
    assert visit.service_color == "#FFB3BA"
    assert visit.duration == 75
    assert visit.duration_label == "75 min"


def test_different_slots_and_clients_stay_separate(make_record) -> None:
    """Visits differ by client, date or time and keep first-appearance order."""
    records = [
        make_record(time=dt.time(11, 0)),
        make_record(client=JAN, time=dt.time(9, 0)),
        make_record(time=dt.time(9, 0)),
        make_record(date=dt.date(2024, 6, 11), time=dt.time(11, 0)),
        make_record(service=MANICURE, time=dt.time(11, 0)),
    ]

    visits = group_appointments(records)

    assert [visit.member_ids for visit in visits] == [[1, 5], [2], [3], [4]]
    assert visits[0].service_name == "Haircut, Manicure"
    assert visits[1].client_name == "Jan Nowak"


def test_grouping_is_idempotent(make_record) -> None:
    """Grouping the same records twice yields identical visits."""
    records = [
        make_record(),
        make_record(service=COLORING),
        make_record(client=JAN, time=dt.time(14, 0)),
    ]

    assert group_appointments(records) == group_appointments(records)


def test_first_member_decides_paid_and_notes_by_default(make_record) -> None:
    """Disagreeing members silently take the first member's status and notes."""
    records = [
        make_record(is_paid=True, notes="prefers darker shades"),
        make_record(service=COLORING, is_paid=False, notes="other"),
    ]

    (visit,) = group_appointments(records)

    assert visit.is_paid is True
    assert visit.notes == "prefers darker shades"


def test_all_policy_requires_every_member_paid(make_record) -> None:
    """With the `all` policy, one unpaid member makes the visit unpaid."""
    mixed = [make_record(is_paid=True), make_record(service=COLORING, is_paid=False)]
    paid = [
        make_record(time=dt.time(15, 0), is_paid=True),
        make_record(time=dt.time(15, 0), service=COLORING, is_paid=True),
    ]

    visits = group_appointments(mixed + paid, paid_policy="all")

    assert [visit.is_paid for visit in visits] == [False, True]


def test_unresolved_records_are_excluded_by_default(make_record) -> None:
    """Records with a missing service or client are dropped."""
    records = [
        make_record(),
        make_record(service=None, service_id=99),
        make_record(client=None, client_id=42),
    ]

    visits = group_appointments(records)

    assert len(visits) == 1
    assert visits[0].member_ids == [1]


def test_unresolved_records_fail_under_fail_policy(make_record) -> None:
    """The `fail` policy rejects the whole fetch."""
    records = [make_record(), make_record(client=None, client_id=42)]

    with pytest.raises(UnresolvedReferenceError, match="missing client 42"):
        group_appointments(records, unresolved="fail")


def test_resolve_records_keeps_order(make_record) -> None:
    """Resolved records come back in input order."""
    records = [make_record(), make_record(service=None, service_id=7), make_record()]

    assert [record.id for record in resolve_records(records)] == [1, 3]


def test_empty_input_gives_no_visits() -> None:
    """No records means no visits."""
    assert group_appointments([]) == []
