from datetime import datetime, timezone

import pytest

import vendordesk.periods as periods
from vendordesk.models import NewOccurrence, Occurrence, OccurrenceUpdate
from vendordesk.occurrences import (
    is_open,
    is_overdue,
    new_occurrence_row,
    occurrence_patch,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_occurrence(**overrides) -> Occurrence:
    data = dict(
        id=1,
        client_id=1,
        client_name="Acme",
        solicitor="John",
        title="Printer error",
        description="Invoice printing fails on save",
        status="open",
        opening_date="2026-10-10T09:00:00+00:00",
        deadline="2026-10-18",
    )
    data.update(overrides)
    return Occurrence(**data)


def test_new_occurrence_starts_open_and_unstamped():
    row = new_occurrence_row(
        NewOccurrence(
            client_id=3,
            solicitor="John",
            title="Printer error",
            description="Invoice printing fails on save",
            deadline="2026-10-25",
        ),
        "Acme",
        NOW,
    )

    assert row["status"] == "open"
    assert row["client_name"] == "Acme"
    assert row["opening_date"] == "2026-10-19T12:00:00+00:00"
    assert row["closing_date"] is None
    assert row["closed_by"] is None


def test_entering_resolved_stamps_closure():
    current = make_occurrence(status="in-progress")

    patch = occurrence_patch(current, OccurrenceUpdate(status="resolved"), 7, NOW)

    assert patch == {
        "status": "resolved",
        "closing_date": "2026-10-19T12:00:00+00:00",
        "closed_by": 7,
    }


def test_resolving_a_resolved_occurrence_does_not_restamp():
    current = make_occurrence(
        status="resolved", closing_date="2026-10-01T08:00:00+00:00", closed_by=2
    )

    patch = occurrence_patch(current, OccurrenceUpdate(status="resolved"), 7, NOW)

    assert patch == {"status": "resolved"}


def test_leaving_resolved_keeps_the_stamp():
    current = make_occurrence(
        status="resolved", closing_date="2026-10-01T08:00:00+00:00", closed_by=2
    )

    patch = occurrence_patch(current, OccurrenceUpdate(status="open"), 7, NOW)

    assert patch == {"status": "open"}
    assert "closing_date" not in patch


def test_edit_without_status_change_has_no_side_effect():
    patch = occurrence_patch(make_occurrence(), OccurrenceUpdate(title="Printer offline"), 7, NOW)

    assert patch == {"title": "Printer offline"}


@pytest.mark.parametrize(
    ("status", "deadline", "expected"),
    [
        ("open", "2026-10-18", True),
        ("in-progress", "2026-10-19T11:59:00+00:00", True),
        ("awaiting-client", "2026-10-01", True),
        ("open", "2026-10-20", False),
        ("resolved", "2026-10-18", False),
        ("cancelled", "2026-10-18", False),
        ("open", "next week", False),
        ("open", None, False),
    ],
)
def test_is_overdue(status, deadline, expected):
    assert is_overdue(make_occurrence(status=status, deadline=deadline), NOW) is expected


def test_is_overdue_defaults_to_module_clock(monkeypatch):
    monkeypatch.setattr(periods, "_now", lambda: NOW)

    assert is_overdue(make_occurrence(deadline="2026-10-18")) is True
    assert is_overdue(make_occurrence(deadline="2026-10-20")) is False


def test_only_open_and_in_progress_count_as_open():
    assert is_open(make_occurrence(status="open"))
    assert is_open(make_occurrence(status="in-progress"))
    assert not is_open(make_occurrence(status="awaiting-client"))
    assert not is_open(make_occurrence(status="resolved"))
