# core/status.py
from datetime import datetime

from formco.db.enums import CompetitionStatus


def competition_status(
    now: datetime,
    deadline_to_apply: datetime,
    start_date: datetime,
    end_date: datetime,
) -> CompetitionStatus:
    """Lifecycle phase of a competition at ``now``; first matching rule wins.

    Must be evaluated per request since it depends on the wall clock. For an
    inverted configuration (deadline after start) the same ordered rules apply:
    the CLOSED window is empty and the deadline alone decides OPEN.
    """
    if now < deadline_to_apply:
        return CompetitionStatus.OPEN
    if now < start_date:
        return CompetitionStatus.CLOSED
    if now <= end_date:
        return CompetitionStatus.HAPPENING
    return CompetitionStatus.HAPPENED
