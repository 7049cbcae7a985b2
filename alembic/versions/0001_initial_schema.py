"""initial schema: users, teachers, students, trial requests, invoices, receipts, classes

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-16

"""
from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _base_columns():
    return [
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


user_role = sa.Enum("ADMIN", "TEACHER", "STUDENT", name="user_role")
trial_request_status = sa.Enum(
    "PENDING", "SCHEDULED", "COMPLETED", "CONVERTED", "CANCELLED", name="trial_request_status"
)
student_status = sa.Enum("ACTIVE", "INACTIVE", "TRIAL", name="student_status")
class_status = sa.Enum("SCHEDULED", "COMPLETED", "CANCELLED", name="class_status")
invoice_type = sa.Enum("ENROLLMENT", "MONTHLY", "OTHER", name="invoice_type")
invoice_status = sa.Enum(
    "UNPAID", "PAID", "OVERDUE", "PENDING_VERIFICATION", "CANCELLED", name="invoice_status"
)
receipt_status = sa.Enum("PENDING", "SUBMITTED", "APPROVED", "REJECTED", name="receipt_status")


def upgrade() -> None:
    op.create_table(
        "users",
        *_base_columns(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("role", user_role, nullable=False),
        sa.Column("must_reset_password", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"])
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_role"), "users", ["role"])
    op.create_index(op.f("ix_users_is_active"), "users", ["is_active"])

    op.create_table(
        "teachers",
        *_base_columns(),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_teachers_id"), "teachers", ["id"])
    op.create_index(op.f("ix_teachers_user_id"), "teachers", ["user_id"], unique=True)
    op.create_index(op.f("ix_teachers_is_active"), "teachers", ["is_active"])

    op.create_table(
        "trial_requests",
        *_base_columns(),
        sa.Column("student_name", sa.String(255), nullable=False),
        sa.Column("student_age", sa.Integer(), nullable=True),
        sa.Column("contact_email", sa.String(255), nullable=False),
        sa.Column("contact_phone", sa.String(50), nullable=True),
        sa.Column("course_name", sa.String(255), nullable=True),
        sa.Column("preferred_time", sa.String(255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", trial_request_status, nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_trial_requests_id"), "trial_requests", ["id"])
    op.create_index(op.f("ix_trial_requests_contact_email"), "trial_requests", ["contact_email"])
    op.create_index(op.f("ix_trial_requests_status"), "trial_requests", ["status"])

    op.create_table(
        "students",
        *_base_columns(),
        sa.Column("user_id", sa.Uuid(), nullable=True),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("contact_email", sa.String(255), nullable=True),
        sa.Column("contact_phone", sa.String(50), nullable=True),
        sa.Column("teacher_id", sa.Uuid(), nullable=True),
        sa.Column("status", student_status, nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["teacher_id"], ["teachers.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_students_id"), "students", ["id"])
    op.create_index(op.f("ix_students_user_id"), "students", ["user_id"], unique=True)
    op.create_index(op.f("ix_students_contact_email"), "students", ["contact_email"])
    op.create_index(op.f("ix_students_teacher_id"), "students", ["teacher_id"])
    op.create_index(op.f("ix_students_status"), "students", ["status"])

    op.create_table(
        "invoices",
        *_base_columns(),
        sa.Column("invoice_type", invoice_type, nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("due_date", sa.DateTime(), nullable=False),
        sa.Column("status", invoice_status, nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("student_id", sa.Uuid(), nullable=True),
        sa.Column("trial_request_id", sa.Uuid(), nullable=True),
        sa.Column("teacher_id", sa.Uuid(), nullable=True),
        sa.Column("magic_token", sa.String(64), nullable=True),
        sa.Column("magic_token_expiry", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["trial_request_id"], ["trial_requests.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["teacher_id"], ["teachers.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_invoices_id"), "invoices", ["id"])
    op.create_index(op.f("ix_invoices_invoice_type"), "invoices", ["invoice_type"])
    op.create_index(op.f("ix_invoices_status"), "invoices", ["status"])
    op.create_index(op.f("ix_invoices_student_id"), "invoices", ["student_id"])
    op.create_index(op.f("ix_invoices_trial_request_id"), "invoices", ["trial_request_id"])
    op.create_index(op.f("ix_invoices_teacher_id"), "invoices", ["teacher_id"])
    op.create_index(op.f("ix_invoices_magic_token"), "invoices", ["magic_token"], unique=True)

    op.create_table(
        "payment_receipts",
        *_base_columns(),
        sa.Column("invoice_id", sa.Uuid(), nullable=False),
        sa.Column("file_url", sa.String(1000), nullable=False),
        sa.Column("uploaded_by", sa.String(255), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(), nullable=False),
        sa.Column("verification_status", receipt_status, nullable=False),
        sa.Column("verified_by_user_id", sa.Uuid(), nullable=True),
        sa.Column("verified_at", sa.DateTime(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["invoice_id"], ["invoices.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["verified_by_user_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_payment_receipts_id"), "payment_receipts", ["id"])
    op.create_index(op.f("ix_payment_receipts_invoice_id"), "payment_receipts", ["invoice_id"])
    op.create_index(
        op.f("ix_payment_receipts_verification_status"), "payment_receipts", ["verification_status"]
    )

    op.create_table(
        "classes",
        *_base_columns(),
        sa.Column("teacher_id", sa.Uuid(), nullable=False),
        sa.Column("student_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("scheduled_at", sa.DateTime(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("status", class_status, nullable=False),
        sa.ForeignKeyConstraint(["teacher_id"], ["teachers.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_classes_id"), "classes", ["id"])
    op.create_index(op.f("ix_classes_teacher_id"), "classes", ["teacher_id"])
    op.create_index(op.f("ix_classes_student_id"), "classes", ["student_id"])
    op.create_index(op.f("ix_classes_scheduled_at"), "classes", ["scheduled_at"])
    op.create_index(op.f("ix_classes_status"), "classes", ["status"])


def downgrade() -> None:
    op.drop_table("classes")
    op.drop_table("payment_receipts")
    op.drop_table("invoices")
    op.drop_table("students")
    op.drop_table("trial_requests")
    op.drop_table("teachers")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in (
        receipt_status, invoice_status, invoice_type, class_status,
        student_status, trial_request_status, user_role,
    ):
        enum_type.drop(bind, checkfirst=True)
