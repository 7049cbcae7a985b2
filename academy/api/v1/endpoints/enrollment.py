from typing import Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from academy.api import deps
from academy.schemas.billing import PaymentReceiptResponse
from academy.schemas.responses import SuccessResponse
from academy.schemas.student import EnrollmentDetails, EnrollmentReceiptUpload
from academy.services.enrollment_service import EnrollmentService

router = APIRouter()


@router.get("", response_model=SuccessResponse[EnrollmentDetails])
async def get_enrollment(
    token: str = Query(..., min_length=1),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Public: resolve an enrollment link token to its invoice."""
    details = await EnrollmentService.get_enrollment_by_token(db, token)
    return SuccessResponse(data=EnrollmentDetails(**details))


@router.post(
    "/receipt",
    response_model=SuccessResponse[PaymentReceiptResponse],
    status_code=status.HTTP_201_CREATED,
)
async def submit_enrollment_receipt(
    upload: EnrollmentReceiptUpload,
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Public: upload enrollment fee proof through the emailed link."""
    receipt = await EnrollmentService.submit_enrollment_receipt(
        db, upload.token, upload.file_url, upload.notes
    )
    return SuccessResponse(
        data=PaymentReceiptResponse.model_validate(receipt),
        message="Payment proof submitted. Awaiting admin verification.",
    )
