"""
State transitions for billing and admissions entities.

Every status change made by the service layer is decided here, one function
per entity event, so the approve/reject/overdue rules live in one place.
"""

from datetime import datetime

from academy.core.exceptions import ConflictError
from academy.models.enums import InvoiceStatus, ReceiptStatus, TrialRequestStatus


def receipt_status_for_decision(approved: bool) -> ReceiptStatus:
    """Status a receipt takes when an admin records a verification decision."""
    return ReceiptStatus.APPROVED if approved else ReceiptStatus.REJECTED


def is_receipt_decidable(status: ReceiptStatus) -> bool:
    """APPROVED is terminal; every other status may still receive a decision."""
    if status == ReceiptStatus.APPROVED:
        return False
    if status in (ReceiptStatus.PENDING, ReceiptStatus.SUBMITTED, ReceiptStatus.REJECTED):
        return True
    raise ValueError(f"Unknown receipt status: {status}")


def invoice_status_after_verification(
    approved: bool, due_date: datetime, now: datetime
) -> InvoiceStatus:
    """
    Invoice status following a verification decision.

    Approved payments settle the invoice. A rejected payment reopens it:
    UNPAID while ``now <= due_date``, OVERDUE afterwards.
    """
    if approved:
        return InvoiceStatus.PAID
    return InvoiceStatus.UNPAID if now <= due_date else InvoiceStatus.OVERDUE


def invoice_status_after_receipt_upload(current: InvoiceStatus) -> InvoiceStatus:
    """A new receipt puts the invoice into the verification queue."""
    if current == InvoiceStatus.PAID:
        raise ConflictError("Invoice is already marked as paid")
    if current == InvoiceStatus.CANCELLED:
        raise ConflictError("Invoice has been cancelled")
    if current in (
        InvoiceStatus.UNPAID,
        InvoiceStatus.OVERDUE,
        InvoiceStatus.PENDING_VERIFICATION,
    ):
        return InvoiceStatus.PENDING_VERIFICATION
    raise ValueError(f"Unknown invoice status: {current}")


def trial_request_status_after_invoice_issued(current: TrialRequestStatus) -> TrialRequestStatus:
    """Issuing an enrollment invoice parks the trial request until payment arrives."""
    if current == TrialRequestStatus.CONVERTED:
        raise ConflictError("Trial request already converted")
    if current in (
        TrialRequestStatus.PENDING,
        TrialRequestStatus.SCHEDULED,
        TrialRequestStatus.COMPLETED,
        TrialRequestStatus.CANCELLED,
    ):
        return TrialRequestStatus.SCHEDULED
    raise ValueError(f"Unknown trial request status: {current}")


def trial_request_status_after_conversion(current: TrialRequestStatus) -> TrialRequestStatus:
    """Approved enrollment payment converts the trial request. Idempotent."""
    if current in (
        TrialRequestStatus.PENDING,
        TrialRequestStatus.SCHEDULED,
        TrialRequestStatus.COMPLETED,
        TrialRequestStatus.CONVERTED,
        TrialRequestStatus.CANCELLED,
    ):
        return TrialRequestStatus.CONVERTED
    raise ValueError(f"Unknown trial request status: {current}")
