"""Billing: invoices and the payment receipts uploaded against them"""

from sqlalchemy import Column, String, Text, Numeric, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship

from academy.models.base import BaseModel
from academy.models.enums import InvoiceType, InvoiceStatus, ReceiptStatus
from academy.utils.time import get_utc_now


class Invoice(BaseModel):
    """
    A billable obligation.

    Enrollment invoices start linked to a TrialRequest and gain a Student link
    only once an approved payment provisions the student.
    """
    __tablename__ = "invoices"

    invoice_type = Column(
        Enum(InvoiceType, name="invoice_type"),
        default=InvoiceType.MONTHLY,
        nullable=False,
        index=True,
    )
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    due_date = Column(DateTime, nullable=False)
    status = Column(
        Enum(InvoiceStatus, name="invoice_status"),
        default=InvoiceStatus.UNPAID,
        nullable=False,
        index=True,
    )
    notes = Column(Text, nullable=True)

    student_id = Column(ForeignKey("students.id", ondelete="SET NULL"), nullable=True, index=True)
    trial_request_id = Column(ForeignKey("trial_requests.id", ondelete="SET NULL"), nullable=True, index=True)
    teacher_id = Column(ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True, index=True)

    # sha256 of the enrollment link token; the plaintext only travels in the email
    magic_token = Column(String(64), nullable=True, unique=True, index=True)
    magic_token_expiry = Column(DateTime, nullable=True)

    student = relationship("Student", back_populates="invoices")
    trial_request = relationship("TrialRequest", back_populates="invoices")
    teacher = relationship("Teacher")
    payment_receipts = relationship(
        "PaymentReceipt",
        back_populates="invoice",
        order_by="PaymentReceipt.uploaded_at.desc()",
    )

    def __repr__(self) -> str:
        return f"<Invoice {self.invoice_type} {self.amount} {self.currency} - {self.status}>"


class PaymentReceipt(BaseModel):
    """Proof of payment uploaded against one invoice"""
    __tablename__ = "payment_receipts"

    invoice_id = Column(ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    file_url = Column(String(1000), nullable=False)
    uploaded_by = Column(String(255), nullable=False)
    uploaded_at = Column(DateTime, default=get_utc_now, nullable=False)
    verification_status = Column(
        Enum(ReceiptStatus, name="receipt_status"),
        default=ReceiptStatus.PENDING,
        nullable=False,
        index=True,
    )
    verified_by_user_id = Column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    verified_at = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    invoice = relationship("Invoice", back_populates="payment_receipts")

    def __repr__(self) -> str:
        return f"<PaymentReceipt {self.id} - {self.verification_status}>"
