"""Models Package - Export all models for easy imports"""

from academy.models.base import BaseModel, StatusMixin
from academy.models.enums import *
from academy.models.user import User, Teacher
from academy.models.student import Student, TrialRequest
from academy.models.billing import Invoice, PaymentReceipt
from academy.models.academic import ClassSession


__all__ = [
    # Base classes
    "BaseModel",
    "StatusMixin",
    # Enums
    "UserRole",
    "TrialRequestStatus",
    "StudentStatus",
    "ClassStatus",
    "InvoiceType",
    "InvoiceStatus",
    "ReceiptStatus",
    # Models
    "User",
    "Teacher",
    "Student",
    "TrialRequest",
    "Invoice",
    "PaymentReceipt",
    "ClassSession",
]
