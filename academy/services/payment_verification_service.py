"""Payment verification: approve or reject an uploaded receipt"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol
from uuid import UUID
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from academy.config import settings
from academy.core.exceptions import (
    ConflictError,
    InvalidRelationError,
    NotFoundError,
    ValidationError,
)
from academy.database import Database
from academy.models.billing import Invoice, PaymentReceipt
from academy.models.enums import InvoiceType, ReceiptStatus
from academy.services.account_provisioner import AccountProvisioner, ProvisioningResult
from academy.services.transitions import (
    invoice_status_after_verification,
    is_receipt_decidable,
    receipt_status_for_decision,
)
from academy.utils.time import get_utc_now

logger = logging.getLogger(__name__)

MESSAGE_APPROVED = "Payment approved successfully. Invoice marked as paid."
MESSAGE_APPROVED_WITH_ACCOUNT = (
    "Payment approved successfully. Invoice marked as paid and student account created."
)
MESSAGE_REJECTED = "Payment rejected. Invoice status updated."


class Notifier(Protocol):
    async def send_student_credentials(
        self, to_email: str, full_name: str, password: str, login_url: str
    ) -> bool: ...


@dataclass
class VerificationResult:
    receipt: PaymentReceipt
    invoice: Invoice
    student_created: bool
    message: str


class PaymentVerificationService:
    """
    Records an admin's decision on a payment receipt.

    The receipt update, the invoice status change and, for approved enrollment
    invoices, the student provisioning are one unit of work. The credentials
    email goes out only after that unit has committed, and its failure never
    undoes the decision.
    """

    def __init__(
        self,
        database: Database,
        notifier: Notifier,
        provisioner: Optional[AccountProvisioner] = None,
        login_url: Optional[str] = None,
        clock: Callable[[], datetime] = get_utc_now,
    ):
        self.database = database
        self.notifier = notifier
        self.provisioner = provisioner or AccountProvisioner()
        self.login_url = login_url or settings.FRONTEND_LOGIN_URL
        self._clock = clock

    async def verify_payment(
        self,
        invoice_id: UUID,
        receipt_id: UUID,
        approved: bool,
        rejection_reason: Optional[str],
        acting_user_id: UUID,
    ) -> VerificationResult:
        """
        Approve or reject one receipt of one invoice.

        Raises:
            NotFoundError: invoice or receipt missing
            InvalidRelationError: receipt belongs to another invoice
            ConflictError: receipt already approved (including a lost race)
            ValidationError: rejection without a reason
        """
        reason = (rejection_reason or "").strip() or None
        provisioning: Optional[ProvisioningResult] = None

        async with self.database.transaction() as session:
            invoice = await session.get(
                Invoice, invoice_id, options=[selectinload(Invoice.trial_request)]
            )
            if invoice is None:
                raise NotFoundError("Invoice not found")

            receipt = await session.get(PaymentReceipt, receipt_id)
            if receipt is None:
                raise NotFoundError("Receipt not found")
            if receipt.invoice_id != invoice.id:
                raise InvalidRelationError("Receipt does not belong to this invoice")
            if not is_receipt_decidable(receipt.verification_status):
                raise ConflictError("Receipt has already been approved")
            if not approved and not reason:
                raise ValidationError("Rejection reason is required when rejecting a receipt")

            now = self._clock()
            await self._record_decision(session, receipt, approved, reason, acting_user_id, now)
            invoice.status = invoice_status_after_verification(approved, invoice.due_date, now)

            if (
                approved
                and invoice.invoice_type == InvoiceType.ENROLLMENT
                and invoice.trial_request is not None
            ):
                provisioning = await self.provisioner.provision(session, invoice)

            await session.flush()

        student_created = provisioning is not None and provisioning.created
        logger.info(
            "Payment receipt %s",
            "approved" if approved else "rejected",
            extra={
                "invoice_id": str(invoice.id),
                "receipt_id": str(receipt.id),
                "invoice_status": invoice.status.value,
                "student_created": student_created,
            },
        )

        if student_created:
            await self._notify_student(provisioning)

        if not approved:
            message = MESSAGE_REJECTED
        elif student_created:
            message = MESSAGE_APPROVED_WITH_ACCOUNT
        else:
            message = MESSAGE_APPROVED
        return VerificationResult(
            receipt=receipt,
            invoice=invoice,
            student_created=student_created,
            message=message,
        )

    async def _record_decision(
        self,
        session: AsyncSession,
        receipt: PaymentReceipt,
        approved: bool,
        reason: Optional[str],
        acting_user_id: UUID,
        now: datetime,
    ) -> None:
        """Compare-and-set: only a receipt that is still not APPROVED is updated."""
        values = {
            "verification_status": receipt_status_for_decision(approved),
            "verified_by_user_id": acting_user_id,
            "verified_at": now,
            # Null unless rejected
            "rejection_reason": None if approved else reason,
        }

        result = await session.execute(
            update(PaymentReceipt)
            .where(
                PaymentReceipt.id == receipt.id,
                PaymentReceipt.verification_status != ReceiptStatus.APPROVED,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConflictError("Receipt has already been approved")
        await session.refresh(receipt)

    async def _notify_student(self, provisioning: ProvisioningResult) -> None:
        student = provisioning.student
        try:
            sent = await self.notifier.send_student_credentials(
                student.contact_email,
                student.full_name,
                provisioning.temporary_password,
                self.login_url,
            )
        except Exception:
            logger.exception(
                "Failed to send credentials to provisioned student",
                extra={"student_id": str(student.id)},
            )
            return
        if not sent:
            logger.warning(
                "Credentials email not delivered; resend manually",
                extra={"student_id": str(student.id)},
            )
