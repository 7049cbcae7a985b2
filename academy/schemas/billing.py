"""Billing Pydantic Schemas"""

from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator
from uuid import UUID
from datetime import datetime
from decimal import Decimal

from academy.models.enums import InvoiceStatus, InvoiceType, ReceiptStatus


class InvoiceCreate(BaseModel):
    """Admin-issued invoice for an existing student"""
    student_id: UUID
    amount: Decimal = Field(..., gt=0, description="Amount must be positive")
    due_date: datetime
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    invoice_type: InvoiceType = InvoiceType.MONTHLY
    notes: Optional[str] = None


class PaymentReceiptResponse(BaseModel):
    id: UUID
    invoice_id: UUID
    file_url: str
    uploaded_by: str
    uploaded_at: datetime
    verification_status: ReceiptStatus
    verified_by_user_id: Optional[UUID] = None
    verified_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class InvoiceResponse(BaseModel):
    id: UUID
    invoice_type: InvoiceType
    amount: Decimal
    currency: str
    due_date: datetime
    status: InvoiceStatus
    student_id: Optional[UUID] = None
    trial_request_id: Optional[UUID] = None
    teacher_id: Optional[UUID] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InvoiceWithReceipts(InvoiceResponse):
    payment_receipts: List[PaymentReceiptResponse] = []


class ReceiptUpload(BaseModel):
    """Receipt file already stored; the client sends its URL"""
    file_url: str = Field(..., min_length=1, max_length=1000)
    notes: Optional[str] = None

    @field_validator("file_url")
    @classmethod
    def must_be_url(cls, v: str) -> str:
        if not (v.startswith("https://") or v.startswith("http://") or v.startswith("/")):
            raise ValueError("Invalid file URL")
        return v


class VerifyPaymentRequest(BaseModel):
    """Admin decision on one receipt of the invoice in the path"""
    receipt_id: UUID
    approved: bool
    rejection_reason: Optional[str] = Field(None, max_length=1000)


class VerifyPaymentResult(BaseModel):
    receipt: PaymentReceiptResponse
    invoice: InvoiceResponse
    student_created: bool


class ReceiptUploadResult(BaseModel):
    receipt: PaymentReceiptResponse
    invoice: InvoiceResponse


class VerificationHistory(BaseModel):
    invoice: InvoiceResponse
    receipts: List[PaymentReceiptResponse]
    pending_count: int
    approved_count: int
    rejected_count: int
