"""Invoice Service - Business Logic Layer"""

import logging
from typing import Optional, List, Tuple, Dict, Any
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from academy.config import settings
from academy.core.exceptions import ForbiddenError, NotFoundError
from academy.models.billing import Invoice, PaymentReceipt
from academy.models.enums import InvoiceStatus, ReceiptStatus
from academy.models.student import Student
from academy.models.user import User
from academy.schemas.billing import InvoiceCreate
from academy.services.scope_service import apply_scope_to_invoices, get_student_id
from academy.services.transitions import invoice_status_after_receipt_upload
from academy.utils.time import to_naive_utc

logger = logging.getLogger(__name__)


class InvoiceService:
    """Service layer for invoices and the receipts uploaded against them"""

    @staticmethod
    async def get_invoice_by_id(db: AsyncSession, invoice_id: UUID) -> Optional[Invoice]:
        result = await db.execute(
            select(Invoice)
            .options(selectinload(Invoice.payment_receipts))
            .where(Invoice.id == invoice_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def create_invoice(db: AsyncSession, invoice_in: InvoiceCreate) -> Invoice:
        """
        Issue an invoice to an existing student. The student's teacher is
        copied onto the invoice so teacher scoping works without a join.

        Raises:
            NotFoundError: student does not exist
        """
        student = await db.get(Student, invoice_in.student_id)
        if student is None:
            raise NotFoundError("Student not found")

        invoice = Invoice(
            invoice_type=invoice_in.invoice_type,
            student_id=student.id,
            teacher_id=student.teacher_id,
            amount=invoice_in.amount,
            currency=invoice_in.currency or settings.DEFAULT_CURRENCY,
            due_date=to_naive_utc(invoice_in.due_date),
            notes=invoice_in.notes,
            status=InvoiceStatus.UNPAID,
        )
        db.add(invoice)
        await db.commit()
        await db.refresh(invoice)
        logger.info("Invoice created", extra={"invoice_id": str(invoice.id), "student_id": str(student.id)})
        return invoice

    @staticmethod
    async def list_invoices(
        db: AsyncSession,
        user: User,
        skip: int = 0,
        limit: int = 20,
        status: Optional[InvoiceStatus] = None,
        student_id: Optional[UUID] = None,
    ) -> Tuple[List[Invoice], int]:
        """Invoices visible to ``user``, latest due date first."""
        stmt = select(Invoice)
        if status is not None:
            stmt = stmt.where(Invoice.status == status)
        if student_id is not None:
            stmt = stmt.where(Invoice.student_id == student_id)
        stmt = await apply_scope_to_invoices(db, user, stmt)

        total = (await db.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one()
        result = await db.execute(
            stmt.options(selectinload(Invoice.payment_receipts))
            .order_by(Invoice.due_date.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    @staticmethod
    async def get_verification_history(db: AsyncSession, invoice_id: UUID) -> Dict[str, Any]:
        """Receipts for an invoice (newest first) with per-status counts."""
        invoice = await InvoiceService.get_invoice_by_id(db, invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice not found")

        receipts = list(invoice.payment_receipts)

        def _count(status: ReceiptStatus) -> int:
            return sum(1 for r in receipts if r.verification_status == status)

        return {
            "invoice": invoice,
            "receipts": receipts,
            "pending_count": _count(ReceiptStatus.PENDING) + _count(ReceiptStatus.SUBMITTED),
            "approved_count": _count(ReceiptStatus.APPROVED),
            "rejected_count": _count(ReceiptStatus.REJECTED),
        }

    @staticmethod
    async def upload_receipt(
        db: AsyncSession,
        user: User,
        invoice_id: UUID,
        file_url: str,
        notes: Optional[str] = None,
    ) -> Tuple[PaymentReceipt, Invoice]:
        """
        Attach a payment proof to the student's own invoice and queue it for verification.

        Raises:
            NotFoundError: no student profile, or invoice missing
            ForbiddenError: invoice belongs to another student
            ConflictError: invoice already paid or cancelled
        """
        student_id = await get_student_id(db, user.id)
        if student_id is None:
            raise NotFoundError("Student profile not found")

        invoice = await db.get(Invoice, invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice not found")
        if invoice.student_id != student_id:
            raise ForbiddenError("You can only upload receipts for your own invoices")

        invoice.status = invoice_status_after_receipt_upload(invoice.status)
        receipt = PaymentReceipt(
            invoice_id=invoice.id,
            file_url=file_url,
            uploaded_by=str(user.id),
            verification_status=ReceiptStatus.PENDING,
            notes=notes,
        )
        db.add(receipt)
        await db.commit()
        await db.refresh(receipt)
        await db.refresh(invoice)

        logger.info("Payment receipt uploaded", extra={"invoice_id": str(invoice.id), "receipt_id": str(receipt.id)})
        return receipt, invoice
