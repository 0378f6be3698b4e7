import random
from datetime import datetime, timedelta

import pytest

from formco.core.status import competition_status
from formco.db.enums import CompetitionStatus

DEADLINE = datetime(2025, 3, 1, 12, 0)
START = datetime(2025, 3, 10, 9, 0)
END = datetime(2025, 3, 12, 18, 0)


@pytest.mark.parametrize(
    "now, expected",
    [
        (DEADLINE - timedelta(seconds=1), CompetitionStatus.OPEN),
        (DEADLINE, CompetitionStatus.CLOSED),
        (START - timedelta(microseconds=1), CompetitionStatus.CLOSED),
        (START, CompetitionStatus.HAPPENING),
        (END, CompetitionStatus.HAPPENING),
        (END + timedelta(microseconds=1), CompetitionStatus.HAPPENED),
    ],
)
def test_boundaries(now, expected):
    assert competition_status(now, DEADLINE, START, END) == expected


def test_every_instant_falls_in_exactly_one_window():
    rng = random.Random(20250301)
    span = int((END - DEADLINE).total_seconds())
    for _ in range(2000):
        deadline = DEADLINE + timedelta(seconds=rng.randint(-span, span))
        start = deadline + timedelta(seconds=rng.randint(1, span))
        end = start + timedelta(seconds=rng.randint(1, span))
        now = deadline + timedelta(seconds=rng.randint(-2 * span, 4 * span))

        windows = {
            CompetitionStatus.OPEN: now < deadline,
            CompetitionStatus.CLOSED: deadline <= now < start,
            CompetitionStatus.HAPPENING: start <= now <= end,
            CompetitionStatus.HAPPENED: now > end,
        }
        assert sum(windows.values()) == 1
        assert windows[competition_status(now, deadline, start, end)]


def test_inverted_dates_skip_closed():
    deadline, start, end = START, DEADLINE, END
    assert competition_status(DEADLINE + timedelta(days=1), deadline, start, end) == CompetitionStatus.OPEN
    assert competition_status(START, deadline, start, end) == CompetitionStatus.HAPPENING
    assert competition_status(END + timedelta(days=1), deadline, start, end) == CompetitionStatus.HAPPENED
