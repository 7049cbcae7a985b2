"""Shared pytest fixtures: in-memory database, recording notifier, API client, seed data."""

import os
import uuid
from datetime import timedelta
from decimal import Decimal
from typing import Optional

# Settings are read at import time; pin the test environment first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-do-not-use-in-production"
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RESEND_API_KEY"] = ""

import pytest
from httpx import ASGITransport, AsyncClient

from academy.config import settings
from academy.core.security import create_access_token, get_password_hash
from academy.database import Database
from academy.main import app
from academy.models.billing import Invoice, PaymentReceipt
from academy.models.enums import (
    InvoiceStatus,
    InvoiceType,
    ReceiptStatus,
    StudentStatus,
    TrialRequestStatus,
    UserRole,
)
from academy.models.student import Student, TrialRequest
from academy.models.user import Teacher, User
from academy.utils.time import get_utc_now


class RecordingNotifier:
    """Stands in for EmailNotifier; records every message and can be told to fail."""

    def __init__(self):
        self.credentials = []
        self.enrollment_links = []
        self.fail_with: Optional[Exception] = None
        self.delivered = True

    async def send_student_credentials(self, to_email, full_name, password, login_url) -> bool:
        if self.fail_with is not None:
            raise self.fail_with
        self.credentials.append(
            {"to_email": to_email, "full_name": full_name, "password": password, "login_url": login_url}
        )
        return self.delivered

    async def send_enrollment_payment_link(self, to_email, student_name, amount, currency, payment_url) -> bool:
        if self.fail_with is not None:
            raise self.fail_with
        self.enrollment_links.append(
            {
                "to_email": to_email,
                "student_name": student_name,
                "amount": amount,
                "currency": currency,
                "payment_url": payment_url,
            }
        )
        return self.delivered


class Seeder:
    """Writes fixture rows through the same Database the code under test uses."""

    def __init__(self, database: Database):
        self.database = database

    async def user(
        self,
        role: UserRole,
        email: Optional[str] = None,
        password: str = "TestPassword123!",
        full_name: str = "Test User",
    ) -> User:
        email = email or f"{role.value.lower()}_{uuid.uuid4().hex[:8]}@academy.example.com"
        async with self.database.transaction() as session:
            user = User(
                email=email,
                hashed_password=get_password_hash(password),
                full_name=full_name,
                role=role,
                is_active=True,
            )
            session.add(user)
            await session.flush()
        return user

    async def teacher(self, full_name: str = "Test Teacher") -> tuple[User, Teacher]:
        user = await self.user(UserRole.TEACHER, full_name=full_name)
        async with self.database.transaction() as session:
            teacher = Teacher(user_id=user.id, bio="Tajweed", is_active=True)
            session.add(teacher)
        return user, teacher

    async def student(
        self,
        full_name: str = "Existing Student",
        contact_email: Optional[str] = None,
        user: Optional[User] = None,
        teacher_id: Optional[uuid.UUID] = None,
    ) -> Student:
        async with self.database.transaction() as session:
            student = Student(
                user_id=user.id if user else None,
                full_name=full_name,
                contact_email=contact_email,
                teacher_id=teacher_id,
                status=StudentStatus.ACTIVE,
            )
            session.add(student)
        return student

    async def trial_request(
        self,
        student_name: str = "Aisha",
        contact_email: Optional[str] = None,
        status: TrialRequestStatus = TrialRequestStatus.SCHEDULED,
    ) -> TrialRequest:
        async with self.database.transaction() as session:
            trial_request = TrialRequest(
                student_name=student_name,
                student_age=12,
                contact_email=contact_email or f"parent_{uuid.uuid4().hex[:8]}@academy.example.com",
                contact_phone="+92 300 0000000",
                course_name="Quran Recitation",
                status=status,
            )
            session.add(trial_request)
        return trial_request

    async def invoice(
        self,
        invoice_type: InvoiceType = InvoiceType.MONTHLY,
        trial_request: Optional[TrialRequest] = None,
        student: Optional[Student] = None,
        teacher_id: Optional[uuid.UUID] = None,
        amount: Decimal = Decimal("100.00"),
        currency: str = "USD",
        due_in: timedelta = timedelta(days=7),
        status: InvoiceStatus = InvoiceStatus.PENDING_VERIFICATION,
        magic_token: Optional[str] = None,
        magic_token_expiry=None,
    ) -> Invoice:
        async with self.database.transaction() as session:
            invoice = Invoice(
                invoice_type=invoice_type,
                trial_request_id=trial_request.id if trial_request else None,
                student_id=student.id if student else None,
                teacher_id=teacher_id,
                amount=amount,
                currency=currency,
                due_date=get_utc_now() + due_in,
                status=status,
                magic_token=magic_token,
                magic_token_expiry=magic_token_expiry,
            )
            session.add(invoice)
        return invoice

    async def receipt(
        self,
        invoice: Invoice,
        status: ReceiptStatus = ReceiptStatus.SUBMITTED,
        uploaded_by: str = "parent@academy.example.com",
    ) -> PaymentReceipt:
        async with self.database.transaction() as session:
            receipt = PaymentReceipt(
                invoice_id=invoice.id,
                file_url="https://files.academy.example.com/receipts/proof.jpg",
                uploaded_by=uploaded_by,
                verification_status=status,
            )
            session.add(receipt)
        return receipt


def auth_headers(user: User) -> dict:
    token = create_access_token(data={"sub": str(user.id), "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def database():
    """Fresh in-memory schema per test."""
    db = Database(settings)
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def seed(database: Database) -> Seeder:
    return Seeder(database)


@pytest.fixture
def api_base() -> str:
    """Base URL for API requests."""
    return f"http://test{settings.API_V1_PREFIX}"


@pytest.fixture
async def async_client(database: Database, notifier: RecordingNotifier):
    """
    Async HTTP client bound to the app. The transport does not run the
    lifespan, so the database and notifier are attached to app.state here.
    """
    app.state.database = database
    app.state.notifier = notifier
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    client = AsyncClient(transport=transport, base_url="http://test", timeout=30.0)
    yield client
    await client.aclose()
    del app.state.database
    del app.state.notifier


@pytest.fixture
async def admin_user(seed: Seeder) -> User:
    return await seed.user(UserRole.ADMIN, full_name="Academy Admin")


@pytest.fixture
def unique_suffix() -> str:
    """Unique suffix for test data to avoid collisions."""
    return str(uuid.uuid4())[:8]


@pytest.fixture
def headers_for():
    """Bearer headers for a seeded user."""
    return auth_headers
