from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from academy.api import deps
from academy.models.enums import InvoiceStatus
from academy.models.user import User
from academy.schemas.billing import (
    InvoiceCreate,
    InvoiceResponse,
    InvoiceWithReceipts,
    PaymentReceiptResponse,
    ReceiptUpload,
    ReceiptUploadResult,
    VerificationHistory,
    VerifyPaymentRequest,
    VerifyPaymentResult,
)
from academy.schemas.responses import PaginatedResponse, PaginationMeta, SuccessResponse
from academy.services.invoice_service import InvoiceService
from academy.services.payment_verification_service import PaymentVerificationService

router = APIRouter()


@router.post("", response_model=SuccessResponse[InvoiceResponse], status_code=status.HTTP_201_CREATED)
async def create_invoice(
    invoice_in: InvoiceCreate,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Issue an invoice to a student (admin only)."""
    invoice = await InvoiceService.create_invoice(db, invoice_in)
    return SuccessResponse(data=InvoiceResponse.model_validate(invoice), message="Invoice created successfully")


@router.get("", response_model=PaginatedResponse[InvoiceWithReceipts])
async def list_invoices(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status_filter: Optional[InvoiceStatus] = Query(None, alias="status"),
    student_id: Optional[UUID] = None,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """List invoices visible to the caller's role."""
    invoices, total = await InvoiceService.list_invoices(
        db,
        current_user,
        skip=(page - 1) * limit,
        limit=limit,
        status=status_filter,
        student_id=student_id,
    )
    return PaginatedResponse(
        data=[InvoiceWithReceipts.model_validate(i) for i in invoices],
        meta=PaginationMeta.build(page, limit, total),
    )


@router.post(
    "/{invoice_id}/receipts",
    response_model=SuccessResponse[ReceiptUploadResult],
    status_code=status.HTTP_201_CREATED,
)
async def upload_receipt(
    invoice_id: UUID,
    upload: ReceiptUpload,
    current_user: User = Depends(deps.require_student),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Upload payment proof for one of the student's own invoices."""
    receipt, invoice = await InvoiceService.upload_receipt(
        db, current_user, invoice_id, upload.file_url, upload.notes
    )
    return SuccessResponse(
        data=ReceiptUploadResult(
            receipt=PaymentReceiptResponse.model_validate(receipt),
            invoice=InvoiceResponse.model_validate(invoice),
        ),
        message="Payment receipt uploaded successfully. Awaiting admin verification.",
    )


@router.post("/{invoice_id}/verify-payment", response_model=SuccessResponse[VerifyPaymentResult])
async def verify_payment(
    invoice_id: UUID,
    decision: VerifyPaymentRequest,
    current_user: User = Depends(deps.require_admin),
    service: PaymentVerificationService = Depends(deps.get_payment_verification_service),
) -> Any:
    """
    Approve or reject a payment receipt (admin only).
    Approving an enrollment invoice also creates the student's account.
    """
    result = await service.verify_payment(
        invoice_id=invoice_id,
        receipt_id=decision.receipt_id,
        approved=decision.approved,
        rejection_reason=decision.rejection_reason,
        acting_user_id=current_user.id,
    )
    return SuccessResponse(
        data=VerifyPaymentResult(
            receipt=PaymentReceiptResponse.model_validate(result.receipt),
            invoice=InvoiceResponse.model_validate(result.invoice),
            student_created=result.student_created,
        ),
        message=result.message,
    )


@router.get("/{invoice_id}/verify-payment", response_model=SuccessResponse[VerificationHistory])
async def get_verification_history(
    invoice_id: UUID,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    history = await InvoiceService.get_verification_history(db, invoice_id)
    return SuccessResponse(data=VerificationHistory.model_validate(history, from_attributes=True))
