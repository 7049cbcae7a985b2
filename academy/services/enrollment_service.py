"""Enrollment Service - trial conversion and enrollment-link payments"""

import logging
from decimal import Decimal
from typing import Optional, Dict, Any
from urllib.parse import quote
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from academy.config import settings
from academy.core.exceptions import ConflictError, NotFoundError, ValidationError
from academy.core.security import generate_enrollment_token, hash_token
from academy.models.billing import Invoice, PaymentReceipt
from academy.models.enums import InvoiceStatus, InvoiceType, ReceiptStatus
from academy.models.student import TrialRequest
from academy.models.user import Teacher, User
from academy.services.transitions import (
    invoice_status_after_receipt_upload,
    trial_request_status_after_invoice_issued,
)
from academy.utils.time import get_utc_now, utc_from_now

logger = logging.getLogger(__name__)


class EnrollmentService:
    """
    Admissions side of billing: an admin converts a trial request into an
    enrollment invoice with a one-time link, and the prospective student
    uploads payment proof through that link without an account.
    """

    @staticmethod
    async def get_or_create_admin_teacher(db: AsyncSession, admin: User) -> Teacher:
        """Admins may teach; give them a teacher profile on first use."""
        result = await db.execute(select(Teacher).where(Teacher.user_id == admin.id))
        teacher = result.scalar_one_or_none()
        if teacher is None:
            teacher = Teacher(user_id=admin.id, bio="Academy Administrator", is_active=True)
            db.add(teacher)
            await db.flush()
            logger.info("Created teacher profile for admin", extra={"user_id": str(admin.id)})
        return teacher

    @staticmethod
    async def convert_trial_request(
        db: AsyncSession,
        notifier,
        admin: User,
        trial_request_id: UUID,
        enrollment_fee: Decimal,
        currency: Optional[str] = None,
        teacher_id: Optional[UUID] = None,
    ) -> Dict[str, Any]:
        """
        Create (or refresh) the enrollment invoice for a trial request and
        email the payment link. With no ``teacher_id`` the admin is assigned.

        Raises:
            NotFoundError: trial request or teacher missing
            ConflictError: already converted, or enrollment already paid / awaiting verification
        """
        result = await db.execute(
            select(TrialRequest)
            .options(selectinload(TrialRequest.invoices))
            .where(TrialRequest.id == trial_request_id)
        )
        trial_request = result.scalar_one_or_none()
        if trial_request is None:
            raise NotFoundError("Trial request not found")

        new_trial_status = trial_request_status_after_invoice_issued(trial_request.status)

        if teacher_id is None:
            teacher = await EnrollmentService.get_or_create_admin_teacher(db, admin)
        else:
            teacher = await db.get(Teacher, teacher_id)
            if teacher is None:
                raise NotFoundError("Teacher not found")

        invoice = next(
            (inv for inv in trial_request.invoices if inv.invoice_type == InvoiceType.ENROLLMENT),
            None,
        )
        if invoice is not None and invoice.status in (
            InvoiceStatus.PAID,
            InvoiceStatus.PENDING_VERIFICATION,
        ):
            raise ConflictError(
                f"Enrollment invoice already {invoice.status.value.lower()}. Cannot recreate."
            )

        token, token_hash = generate_enrollment_token()
        fields = {
            "amount": enrollment_fee,
            "currency": currency or settings.DEFAULT_CURRENCY,
            "teacher_id": teacher.id,
            "due_date": utc_from_now(days=settings.ENROLLMENT_DUE_DAYS),
            "magic_token": token_hash,
            "magic_token_expiry": utc_from_now(hours=settings.ENROLLMENT_LINK_TTL_HOURS),
            "status": InvoiceStatus.UNPAID,
        }
        if invoice is None:
            invoice = Invoice(
                invoice_type=InvoiceType.ENROLLMENT,
                trial_request_id=trial_request.id,
                notes="Enrollment fee",
                **fields,
            )
            db.add(invoice)
        else:
            for key, value in fields.items():
                setattr(invoice, key, value)
            invoice.notes = "Enrollment fee - updated"

        trial_request.status = new_trial_status
        await db.commit()
        await db.refresh(invoice)

        payment_url = f"{settings.FRONTEND_ENROLL_URL.rstrip('/')}/{quote(token)}"
        try:
            sent = await notifier.send_enrollment_payment_link(
                trial_request.contact_email,
                trial_request.student_name,
                invoice.amount,
                invoice.currency,
                payment_url,
            )
            if not sent:
                logger.warning(
                    "Enrollment link email not delivered; share the link manually",
                    extra={"trial_request_id": str(trial_request.id)},
                )
        except Exception:
            logger.exception(
                "Failed to send enrollment link email",
                extra={"trial_request_id": str(trial_request.id)},
            )

        return {
            "invoice": invoice,
            "trial_request": trial_request,
            # Only echoed outside production so admins can test the flow
            "payment_link": None if settings.is_production else payment_url,
        }

    @staticmethod
    async def _get_invoice_for_token(db: AsyncSession, token: str) -> Invoice:
        result = await db.execute(
            select(Invoice)
            .options(selectinload(Invoice.trial_request), selectinload(Invoice.payment_receipts))
            .where(
                Invoice.magic_token == hash_token(token),
                Invoice.invoice_type == InvoiceType.ENROLLMENT,
            )
        )
        invoice = result.scalar_one_or_none()
        if invoice is None or invoice.trial_request is None:
            raise ValidationError("Invalid enrollment link")
        if invoice.magic_token_expiry is None or invoice.magic_token_expiry <= get_utc_now():
            raise ValidationError(
                "Enrollment link has expired. Please request a new link from the administrator."
            )
        if invoice.status == InvoiceStatus.PAID:
            raise ConflictError(
                "This enrollment has already been paid and processed. Please contact the administrator."
            )
        return invoice

    @staticmethod
    async def get_enrollment_by_token(db: AsyncSession, token: str) -> Dict[str, Any]:
        """Public view of the enrollment invoice behind a link token."""
        invoice = await EnrollmentService._get_invoice_for_token(db, token)
        trial_request = invoice.trial_request
        last_receipt = invoice.payment_receipts[0] if invoice.payment_receipts else None
        return {
            "invoice_id": invoice.id,
            "trial_request_id": trial_request.id,
            "student_name": trial_request.student_name,
            "course_name": trial_request.course_name,
            "amount": invoice.amount,
            "currency": invoice.currency,
            "status": invoice.status,
            "due_date": invoice.due_date,
            "last_receipt_status": last_receipt.verification_status if last_receipt else None,
        }

    @staticmethod
    async def submit_enrollment_receipt(
        db: AsyncSession, token: str, file_url: str, notes: Optional[str] = None
    ) -> PaymentReceipt:
        """Record payment proof for an enrollment invoice reached through its link."""
        invoice = await EnrollmentService._get_invoice_for_token(db, token)

        invoice.status = invoice_status_after_receipt_upload(invoice.status)
        receipt = PaymentReceipt(
            invoice_id=invoice.id,
            file_url=file_url,
            uploaded_by=invoice.trial_request.contact_email,
            verification_status=ReceiptStatus.SUBMITTED,
            notes=notes,
        )
        db.add(receipt)
        await db.commit()
        await db.refresh(receipt)

        logger.info(
            "Enrollment payment proof submitted",
            extra={"invoice_id": str(invoice.id), "receipt_id": str(receipt.id)},
        )
        return receipt
