import uuid
from datetime import datetime

import pytest
from pydantic import ValidationError

from formco.core import lifecycle
from formco.db.enums import AcceptanceStatus
from formco.db.schemas.application import AxisUpdate

NOW = datetime(2025, 7, 1, 12, 30)
APP_ID = uuid.uuid4()


def test_verifying_payment_stamps_date():
    assert lifecycle.set_payment_verified(APP_ID, True, NOW).changes() == {
        "payment_verified": True,
        "payment_date": NOW,
    }


def test_unverifying_payment_clears_date():
    assert lifecycle.set_payment_verified(APP_ID, False, NOW).changes() == {
        "payment_verified": False,
        "payment_date": None,
    }


def test_each_axis_touches_only_its_columns():
    assert lifecycle.set_attended(APP_ID, True).changes() == {"attended": True}
    assert lifecycle.set_acceptance(APP_ID, AcceptanceStatus.REJECTED).changes() == {
        "accepted": AcceptanceStatus.REJECTED
    }


def test_transition_dispatches_on_the_given_axis():
    update = lifecycle.transition(APP_ID, AxisUpdate(accepted="accepted"), NOW)
    assert update.changes() == {"accepted": AcceptanceStatus.ACCEPTED}
    update = lifecycle.transition(APP_ID, AxisUpdate(attended=False), NOW)
    assert update.changes() == {"attended": False}


@pytest.mark.parametrize("body", [{}, {"attended": True, "accepted": "accepted"}])
def test_axis_update_requires_exactly_one_axis(body):
    with pytest.raises(ValidationError):
        AxisUpdate(**body)
