from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from academy.api import deps
from academy.models.user import User
from academy.schemas.billing import InvoiceResponse
from academy.schemas.responses import SuccessResponse
from academy.schemas.student import ConvertTrialRequest, ConvertTrialResult, TrialRequestResponse
from academy.services.email_service import EmailNotifier
from academy.services.enrollment_service import EnrollmentService

router = APIRouter()


@router.post("/{trial_request_id}/convert", response_model=SuccessResponse[ConvertTrialResult])
async def convert_trial_request(
    trial_request_id: UUID,
    convert_in: ConvertTrialRequest,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
    notifier: EmailNotifier = Depends(deps.get_notifier),
) -> Any:
    """
    Issue the enrollment invoice for a trial request and email its payment link.
    The student's account is created later, when the payment is approved.
    """
    result = await EnrollmentService.convert_trial_request(
        db,
        notifier,
        admin=current_user,
        trial_request_id=trial_request_id,
        enrollment_fee=convert_in.enrollment_fee,
        currency=convert_in.currency,
        teacher_id=convert_in.teacher_id,
    )
    return SuccessResponse(
        data=ConvertTrialResult(
            enrollment_invoice=InvoiceResponse.model_validate(result["invoice"]),
            trial_request=TrialRequestResponse.model_validate(result["trial_request"]),
            payment_link=result["payment_link"],
        ),
        message="Trial request converted successfully. Enrollment payment link sent to student.",
    )
