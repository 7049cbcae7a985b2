"""Tests for trial conversion and enrollment-link payments."""

from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import select

from academy.core.exceptions import ConflictError, NotFoundError, ValidationError
from academy.core.security import hash_token
from academy.models.billing import Invoice
from academy.models.enums import (
    InvoiceStatus,
    InvoiceType,
    ReceiptStatus,
    TrialRequestStatus,
)
from academy.models.student import TrialRequest
from academy.models.user import Teacher
from academy.services.enrollment_service import EnrollmentService
from academy.utils.time import get_utc_now


async def _convert(database, notifier, admin, trial_request_id, **kwargs):
    async with database.session() as db:
        return await EnrollmentService.convert_trial_request(
            db, notifier, admin, trial_request_id, Decimal("5000"), **kwargs
        )


def _token_from(notifier) -> str:
    return notifier.enrollment_links[-1]["payment_url"].rsplit("/", 1)[-1]


@pytest.mark.asyncio
async def test_convert_issues_enrollment_invoice_and_emails_link(database, notifier, seed, admin_user):
    trial_request = await seed.trial_request(status=TrialRequestStatus.PENDING)

    result = await _convert(database, notifier, admin_user, trial_request.id)

    invoice = result["invoice"]
    assert invoice.invoice_type == InvoiceType.ENROLLMENT
    assert invoice.status == InvoiceStatus.UNPAID
    assert invoice.currency == "PKR"
    assert invoice.trial_request_id == trial_request.id
    assert invoice.student_id is None
    assert result["trial_request"].status == TrialRequestStatus.SCHEDULED

    # Only the hash is stored; the plaintext token travels in the link
    token = _token_from(notifier)
    assert invoice.magic_token == hash_token(token)
    assert result["payment_link"].endswith(token)
    assert invoice.magic_token_expiry > get_utc_now() + timedelta(hours=47)

    async with database.session() as db:
        teacher = (await db.execute(select(Teacher).where(Teacher.user_id == admin_user.id))).scalar_one()
    assert invoice.teacher_id == teacher.id


@pytest.mark.asyncio
async def test_convert_with_explicit_teacher(database, notifier, seed, admin_user):
    _, teacher = await seed.teacher()
    trial_request = await seed.trial_request()

    result = await _convert(database, notifier, admin_user, trial_request.id, teacher_id=teacher.id, currency="USD")

    assert result["invoice"].teacher_id == teacher.id
    assert result["invoice"].currency == "USD"


@pytest.mark.asyncio
async def test_convert_unknown_trial_or_teacher_is_not_found(database, notifier, seed, admin_user):
    with pytest.raises(NotFoundError, match="Trial request not found"):
        await _convert(database, notifier, admin_user, uuid4())

    trial_request = await seed.trial_request()
    with pytest.raises(NotFoundError, match="Teacher not found"):
        await _convert(database, notifier, admin_user, trial_request.id, teacher_id=uuid4())


@pytest.mark.asyncio
async def test_reconvert_refreshes_the_same_invoice(database, notifier, seed, admin_user):
    trial_request = await seed.trial_request()
    first = await _convert(database, notifier, admin_user, trial_request.id)
    first_token = _token_from(notifier)

    second = await _convert(database, notifier, admin_user, trial_request.id)

    assert second["invoice"].id == first["invoice"].id
    assert _token_from(notifier) != first_token
    async with database.session() as db:
        count = len((await db.execute(
            select(Invoice).where(Invoice.trial_request_id == trial_request.id)
        )).scalars().all())
    assert count == 1


@pytest.mark.asyncio
async def test_convert_refused_while_payment_awaits_verification(database, notifier, seed, admin_user):
    trial_request = await seed.trial_request()
    await seed.invoice(
        invoice_type=InvoiceType.ENROLLMENT,
        trial_request=trial_request,
        status=InvoiceStatus.PENDING_VERIFICATION,
    )

    with pytest.raises(ConflictError):
        await _convert(database, notifier, admin_user, trial_request.id)


@pytest.mark.asyncio
async def test_convert_refused_for_converted_trial(database, notifier, seed, admin_user):
    trial_request = await seed.trial_request(status=TrialRequestStatus.CONVERTED)

    with pytest.raises(ConflictError):
        await _convert(database, notifier, admin_user, trial_request.id)
    assert notifier.enrollment_links == []


@pytest.mark.asyncio
async def test_email_failure_does_not_undo_conversion(database, notifier, seed, admin_user):
    notifier.fail_with = RuntimeError("smtp down")
    trial_request = await seed.trial_request()

    result = await _convert(database, notifier, admin_user, trial_request.id)

    async with database.session() as db:
        stored = await db.get(TrialRequest, trial_request.id)
    assert stored.status == TrialRequestStatus.SCHEDULED
    assert result["invoice"].status == InvoiceStatus.UNPAID


@pytest.mark.asyncio
async def test_token_resolves_enrollment_details(database, notifier, seed, admin_user):
    trial_request = await seed.trial_request(student_name="Aisha")
    await _convert(database, notifier, admin_user, trial_request.id)

    async with database.session() as db:
        details = await EnrollmentService.get_enrollment_by_token(db, _token_from(notifier))

    assert details["trial_request_id"] == trial_request.id
    assert details["student_name"] == "Aisha"
    assert details["amount"] == Decimal("5000")
    assert details["last_receipt_status"] is None


@pytest.mark.asyncio
async def test_unknown_or_expired_token_is_rejected(database, seed):
    trial_request = await seed.trial_request()
    await seed.invoice(
        invoice_type=InvoiceType.ENROLLMENT,
        trial_request=trial_request,
        status=InvoiceStatus.UNPAID,
        magic_token=hash_token("expired-token"),
        magic_token_expiry=get_utc_now() - timedelta(minutes=1),
    )

    async with database.session() as db:
        with pytest.raises(ValidationError, match="Invalid enrollment link"):
            await EnrollmentService.get_enrollment_by_token(db, "no-such-token")
        with pytest.raises(ValidationError, match="expired"):
            await EnrollmentService.get_enrollment_by_token(db, "expired-token")


@pytest.mark.asyncio
async def test_paid_enrollment_token_conflicts(database, seed):
    trial_request = await seed.trial_request()
    await seed.invoice(
        invoice_type=InvoiceType.ENROLLMENT,
        trial_request=trial_request,
        status=InvoiceStatus.PAID,
        magic_token=hash_token("paid-token"),
        magic_token_expiry=get_utc_now() + timedelta(hours=1),
    )

    async with database.session() as db:
        with pytest.raises(ConflictError):
            await EnrollmentService.submit_enrollment_receipt(db, "paid-token", "https://files.example.org/r.jpg")


@pytest.mark.asyncio
async def test_submit_receipt_through_link_queues_verification(database, notifier, seed, admin_user):
    trial_request = await seed.trial_request(contact_email="parent@academy.example.com")
    result = await _convert(database, notifier, admin_user, trial_request.id)
    token = _token_from(notifier)

    async with database.session() as db:
        receipt = await EnrollmentService.submit_enrollment_receipt(
            db, token, "https://files.academy.example.com/r.jpg", notes="Bank transfer"
        )
    assert receipt.verification_status == ReceiptStatus.SUBMITTED
    assert receipt.uploaded_by == "parent@academy.example.com"

    async with database.session() as db:
        details = await EnrollmentService.get_enrollment_by_token(db, token)
        invoice = await db.get(Invoice, result["invoice"].id)
    assert invoice.status == InvoiceStatus.PENDING_VERIFICATION
    assert details["last_receipt_status"] == ReceiptStatus.SUBMITTED
