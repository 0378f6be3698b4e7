"""Application routes for organizers (lifecycle) and students (own applications)."""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from pydantic import BaseModel

from formco.api.deps import CurrentActor, application_service
from formco.db.schemas.application import ApplicationRead, AxisUpdate, StudentApplicationRow
from formco.services.application import ApplicationService
from formco.utils.receipts import store_receipt

router = APIRouter()


class PaymentUpdate(BaseModel):
    payment_verified: bool


class ReceiptStored(BaseModel):
    receipt_image: str


@router.get("/applications/{application_id}", response_model=ApplicationRead)
async def get_application(
    application_id: UUID,
    actor: CurrentActor,
    applications: ApplicationService = Depends(application_service),
):
    return await applications.get_application(actor, application_id)


@router.patch("/applications/{application_id}/payment", response_model=ApplicationRead)
async def update_payment(
    application_id: UUID,
    body: PaymentUpdate,
    actor: CurrentActor,
    applications: ApplicationService = Depends(application_service),
):
    return await applications.set_payment_verified(actor, application_id, body.payment_verified)


@router.patch("/applications/{application_id}", response_model=ApplicationRead)
async def update_application(
    application_id: UUID,
    body: AxisUpdate,
    actor: CurrentActor,
    applications: ApplicationService = Depends(application_service),
):
    """Change exactly one axis (``attended`` or ``accepted``; ``payment_verified`` is also accepted)."""
    return await applications.update_axis(actor, application_id, body)


@router.get("/students/me/applications", response_model=List[StudentApplicationRow])
async def my_applications(
    actor: CurrentActor,
    applications: ApplicationService = Depends(application_service),
):
    return await applications.list_for_student(actor)


@router.post("/receipts", response_model=ReceiptStored, status_code=status.HTTP_201_CREATED)
async def upload_receipt(actor: CurrentActor, file: UploadFile = File(...)):
    """Store a payment receipt; the returned path goes into the application's ``receipt_image``."""
    data = await file.read()
    try:
        path = store_receipt(file.filename or "receipt", data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ReceiptStored(receipt_image=path)
