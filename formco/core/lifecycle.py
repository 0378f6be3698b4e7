"""Lifecycle axes of an application.

An application carries three independent axes instead of one composite state:

* payment:    pending <-> verified (verifying stamps ``payment_date``, un-verifying clears it)
* attendance: absent <-> present
* acceptance: pending / accepted / rejected, freely settable

Each transition produces an :class:`ApplicationUpdate` touching only the columns
of its own axis, so the persistence layer can apply it as a single-statement
partial UPDATE.
"""
import uuid
from datetime import datetime

from formco.db.enums import AcceptanceStatus
from formco.db.schemas.application import ApplicationUpdate, AxisUpdate


def set_payment_verified(application_id: uuid.UUID, verified: bool, now: datetime) -> ApplicationUpdate:
    return ApplicationUpdate(
        id=application_id,
        payment_verified=verified,
        payment_date=now if verified else None,
    )


def set_attended(application_id: uuid.UUID, attended: bool) -> ApplicationUpdate:
    return ApplicationUpdate(id=application_id, attended=attended)


def set_acceptance(application_id: uuid.UUID, decision: AcceptanceStatus) -> ApplicationUpdate:
    return ApplicationUpdate(id=application_id, accepted=AcceptanceStatus(decision))


def transition(application_id: uuid.UUID, request: AxisUpdate, now: datetime) -> ApplicationUpdate:
    if request.payment_verified is not None:
        return set_payment_verified(application_id, request.payment_verified, now)
    if request.attended is not None:
        return set_attended(application_id, request.attended)
    return set_acceptance(application_id, request.accepted)
