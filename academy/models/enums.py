"""Centralized Enum Definitions"""

import enum


# Users & access
class UserRole(str, enum.Enum):
    """User roles for RBAC"""
    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"


# Admissions
class TrialRequestStatus(str, enum.Enum):
    """Lifecycle of a prospective-student inquiry"""
    PENDING = "PENDING"
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CONVERTED = "CONVERTED"
    CANCELLED = "CANCELLED"


class StudentStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    TRIAL = "TRIAL"


# Scheduling
class ClassStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Billing
class InvoiceType(str, enum.Enum):
    """What the invoice bills for"""
    ENROLLMENT = "ENROLLMENT"
    MONTHLY = "MONTHLY"
    OTHER = "OTHER"


class InvoiceStatus(str, enum.Enum):
    """Invoice payment status"""
    UNPAID = "UNPAID"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    PENDING_VERIFICATION = "PENDING_VERIFICATION"
    CANCELLED = "CANCELLED"


class ReceiptStatus(str, enum.Enum):
    """Verification state of an uploaded payment proof. APPROVED is terminal."""
    PENDING = "PENDING"
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
