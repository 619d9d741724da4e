# Vendor Desk - Business management back office for software vendors
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Occurrence (support ticket) lifecycle rules.

Statuses: open, in-progress, awaiting-client, resolved, cancelled. Any status
may move to any other one. The only side effect of a transition is the
closure stamp: entering "resolved" from a non-resolved status records the
closing timestamp and the id of the user who closed the ticket. Leaving
"resolved" keeps the stamp untouched.

"Overdue" is derived, never stored: an occurrence that is neither resolved
nor cancelled and whose deadline lies in the past.
"""

from datetime import datetime
from typing import Any, Optional

from . import periods
from .models import NewOccurrence, Occurrence, OccurrenceUpdate
from .periods import parse_timestamp

OPEN_STATUSES = frozenset({"open", "in-progress"})
CLOSED_STATUSES = frozenset({"resolved", "cancelled"})


def new_occurrence_row(
    data: NewOccurrence,
    client_name: Optional[str],
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """Row for a new ticket: status "open", opened now, no closure stamp."""
    row = data.to_row()
    row.update(
        client_name=client_name,
        status="open",
        opening_date=(now or periods._now()).isoformat(timespec="seconds"),
        closing_date=None,
        closed_by=None,
    )
    return row


def occurrence_patch(
    current: Occurrence,
    update: OccurrenceUpdate,
    user_id: Optional[int],
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """
    Build the table patch for an occurrence update.

    When the update moves the ticket into "resolved" from any other status,
    ``closing_date`` and ``closed_by`` are added to the patch. Any other
    transition leaves them as they are.
    """
    patch = update.to_patch()
    if update.status == "resolved" and current.status != "resolved":
        patch["closing_date"] = (now or periods._now()).isoformat(timespec="seconds")
        patch["closed_by"] = user_id
    return patch


def is_overdue(occurrence: Occurrence, now: Optional[datetime] = None) -> bool:
    """
    True if the ticket is still pending and its deadline has passed.

    Missing or malformed deadlines are never overdue.
    """
    if occurrence.status in CLOSED_STATUSES:
        return False
    deadline = parse_timestamp(occurrence.deadline)
    if deadline is None:
        return False
    return deadline < (now or periods._now())


def is_open(occurrence: Occurrence) -> bool:
    """True for tickets counted as "open" on the dashboard."""
    return occurrence.status in OPEN_STATUSES
