"""Student and admissions schemas"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID
from datetime import datetime
from decimal import Decimal

from academy.models.enums import InvoiceStatus, ReceiptStatus, StudentStatus, TrialRequestStatus
from academy.schemas.billing import InvoiceResponse, ReceiptUpload


class StudentResponse(BaseModel):
    id: UUID
    user_id: Optional[UUID] = None
    full_name: str
    age: Optional[int] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    teacher_id: Optional[UUID] = None
    status: StudentStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TrialRequestResponse(BaseModel):
    id: UUID
    student_name: str
    contact_email: str
    contact_phone: Optional[str] = None
    course_name: Optional[str] = None
    status: TrialRequestStatus

    model_config = ConfigDict(from_attributes=True)


class ConvertTrialRequest(BaseModel):
    """Omit teacher_id to assign the acting admin as teacher"""
    teacher_id: Optional[UUID] = None
    enrollment_fee: Decimal = Field(..., gt=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)


class ConvertTrialResult(BaseModel):
    enrollment_invoice: InvoiceResponse
    trial_request: TrialRequestResponse
    payment_link: Optional[str] = None


class EnrollmentDetails(BaseModel):
    invoice_id: UUID
    trial_request_id: UUID
    student_name: str
    course_name: Optional[str] = None
    amount: Decimal
    currency: str
    status: InvoiceStatus
    due_date: datetime
    last_receipt_status: Optional[ReceiptStatus] = None


class EnrollmentReceiptUpload(ReceiptUpload):
    token: str = Field(..., min_length=1)
