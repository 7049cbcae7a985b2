"""Student account provisioning for approved enrollment payments"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from academy.core.security import generate_temporary_password, get_password_hash
from academy.models.billing import Invoice
from academy.models.enums import StudentStatus, UserRole
from academy.models.student import Student, TrialRequest
from academy.models.user import User
from academy.services.transitions import trial_request_status_after_conversion

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Case-insensitive key used for every provisioning lookup and stored email."""
    return email.strip().lower()


@dataclass
class ProvisioningResult:
    student: Student
    created: bool
    # Only set when created; lives in memory until the credentials email goes out
    temporary_password: Optional[str] = field(default=None, repr=False)


class AccountProvisioner:
    """
    Converts an enrollment invoice's trial request into a Student with a login.

    At most one User/Student pair is created per contact email. The lookup by
    email handles the sequential case; the unique constraint on users.email
    handles two approvals racing for the same email, in which case the loser
    falls back to the winner's student.
    """

    async def find_student_by_email(self, session: AsyncSession, email: str) -> Optional[Student]:
        result = await session.execute(
            select(Student)
            .where(func.lower(Student.contact_email) == normalize_email(email))
            .order_by(Student.created_at)
            .limit(1)
        )
        return result.scalars().first()

    async def provision(self, session: AsyncSession, invoice: Invoice) -> ProvisioningResult:
        """
        Must run inside the caller's unit of work; nothing here commits.

        Args:
            session: Session with an open transaction
            invoice: Enrollment invoice with ``trial_request`` loaded

        Returns:
            The created or reused student and whether it was created here
        """
        trial_request: TrialRequest = invoice.trial_request
        email = normalize_email(trial_request.contact_email)

        student = await self.find_student_by_email(session, email)
        temporary_password = None
        created = False

        if student is None:
            try:
                student, temporary_password = await self._create_account(
                    session, trial_request, email, invoice.teacher_id
                )
                created = True
            except IntegrityError:
                logger.warning(
                    "Duplicate email while provisioning student, retrying lookup",
                    extra={"trial_request_id": str(trial_request.id)},
                )
                student = await self.find_student_by_email(session, email)
                if student is None:
                    # Email belongs to a non-student account; let the approval fail
                    raise
        else:
            logger.info(
                "Student already exists for trial request contact, skipping account creation",
                extra={"trial_request_id": str(trial_request.id), "student_id": str(student.id)},
            )

        # A newly created student always takes over the link; an existing one only fills a gap
        if created or invoice.student_id is None:
            invoice.student_id = student.id
        trial_request.status = trial_request_status_after_conversion(trial_request.status)

        return ProvisioningResult(student=student, created=created, temporary_password=temporary_password)

    async def _create_account(
        self,
        session: AsyncSession,
        trial_request: TrialRequest,
        email: str,
        teacher_id,
    ) -> tuple[Student, str]:
        temporary_password = generate_temporary_password()

        # Savepoint: a duplicate-email failure must not poison the outer transaction
        async with session.begin_nested():
            user = User(
                email=email,
                hashed_password=get_password_hash(temporary_password),
                full_name=trial_request.student_name,
                role=UserRole.STUDENT,
                must_reset_password=True,
                is_active=True,
            )
            session.add(user)
            await session.flush()

            student = Student(
                user_id=user.id,
                full_name=trial_request.student_name,
                age=trial_request.student_age,
                contact_email=email,
                contact_phone=trial_request.contact_phone,
                teacher_id=teacher_id,
                status=StudentStatus.ACTIVE,
            )
            session.add(student)
            await session.flush()

        logger.info(
            "Provisioned student account",
            extra={"student_id": str(student.id), "user_id": str(user.id)},
        )
        return student, temporary_password
