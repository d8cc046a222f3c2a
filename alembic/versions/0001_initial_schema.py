"""Initial schema — users, facilities, complaints, notifications, inventory, medical.

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000 UTC

Creates the core tables from scratch:
  - users                     (identity + role)
  - facilities                (complaint targets)
  - complaints                (tickets and their lifecycle timestamps)
  - complaint_assignments     (at most one active per complaint)
  - complaint_status_history  (append-only transition trail)
  - notifications             (per-user inbox)
  - medicines                 (inventory)
  - entry_exit_logs           (append-only)
  - medical_records / medical_logs

All UUID primary keys use VARCHAR(36) for cross-DB compatibility.
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# ── Revision identifiers ──────────────────────────────────────────────────────
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(50), nullable=False, server_default="resident"),
        *_audit_columns(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # ── facilities ────────────────────────────────────────────────────────────
    op.create_table(
        "facilities",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_audit_columns(),
    )

    # ── complaints ────────────────────────────────────────────────────────────
    op.create_table(
        "complaints",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("priority", sa.String(20), nullable=False, server_default="medium"),
        sa.Column("status", sa.String(20), nullable=False, server_default="new"),
        sa.Column("attachment", sa.String(500), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("facility_id", sa.String(36), nullable=False),
        sa.Column("created_by_id", sa.String(36), nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(
            ["facility_id"], ["facilities.id"], name="fk_complaints_facility_id"
        ),
        sa.ForeignKeyConstraint(
            ["created_by_id"], ["users.id"], name="fk_complaints_created_by_id"
        ),
    )
    op.create_index("ix_complaints_priority", "complaints", ["priority"])
    op.create_index("ix_complaints_status", "complaints", ["status"])
    op.create_index("ix_complaints_facility_id", "complaints", ["facility_id"])
    op.create_index("ix_complaints_created_by_id", "complaints", ["created_by_id"])

    # ── complaint_assignments ─────────────────────────────────────────────────
    op.create_table(
        "complaint_assignments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("complaint_id", sa.String(36), nullable=False),
        sa.Column("assigned_to_id", sa.String(36), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(
            ["complaint_id"],
            ["complaints.id"],
            name="fk_complaint_assignments_complaint_id",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["assigned_to_id"], ["users.id"], name="fk_complaint_assignments_assigned_to_id"
        ),
    )
    op.create_index(
        "ix_complaint_assignments_complaint_id", "complaint_assignments", ["complaint_id"]
    )
    op.create_index(
        "ix_complaint_assignments_assigned_to_id", "complaint_assignments", ["assigned_to_id"]
    )

    # ── complaint_status_history ──────────────────────────────────────────────
    op.create_table(
        "complaint_status_history",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("complaint_id", sa.String(36), nullable=False),
        sa.Column("from_status", sa.String(20), nullable=True),
        sa.Column("to_status", sa.String(20), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("changed_at", sa.DateTime(timezone=True), nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(
            ["complaint_id"],
            ["complaints.id"],
            name="fk_complaint_status_history_complaint_id",
            ondelete="CASCADE",
        ),
    )
    op.create_index(
        "ix_complaint_status_history_complaint_id", "complaint_status_history", ["complaint_id"]
    )

    # ── notifications ─────────────────────────────────────────────────────────
    op.create_table(
        "notifications",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_notifications_user_id"),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    # ── medicines ─────────────────────────────────────────────────────────────
    op.create_table(
        "medicines",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("stock_level", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("unit", sa.String(50), nullable=False),
        sa.Column("expiry_date", sa.Date(), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        *_audit_columns(),
        sa.CheckConstraint("stock_level >= 0", name="ck_medicines_stock_level_non_negative"),
    )

    # ── entry_exit_logs ───────────────────────────────────────────────────────
    op.create_table(
        "entry_exit_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("type", sa.String(10), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_entry_exit_logs_user_id"),
    )
    op.create_index("ix_entry_exit_logs_user_id", "entry_exit_logs", ["user_id"])
    op.create_index("ix_entry_exit_logs_timestamp", "entry_exit_logs", ["timestamp"])

    # ── medical_records / medical_logs ────────────────────────────────────────
    op.create_table(
        "medical_records",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False, unique=True),
        sa.Column("blood_type", sa.String(10), nullable=True),
        sa.Column("allergies", sa.Text(), nullable=True),
        sa.Column("chronic_conditions", sa.Text(), nullable=True),
        sa.Column("emergency_contact", sa.String(255), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_medical_records_user_id"),
    )
    op.create_table(
        "medical_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("record_id", sa.String(36), nullable=False),
        sa.Column("staff_id", sa.String(36), nullable=False),
        sa.Column("diagnosis", sa.Text(), nullable=True),
        sa.Column("treatment", sa.Text(), nullable=True),
        sa.Column("medication", sa.Text(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(
            ["record_id"],
            ["medical_records.id"],
            name="fk_medical_logs_record_id",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(["staff_id"], ["users.id"], name="fk_medical_logs_staff_id"),
    )
    op.create_index("ix_medical_logs_record_id", "medical_logs", ["record_id"])


def downgrade() -> None:
    # Drop in reverse dependency order
    op.drop_table("medical_logs")
    op.drop_table("medical_records")
    op.drop_table("entry_exit_logs")
    op.drop_table("medicines")
    op.drop_table("notifications")
    op.drop_table("complaint_status_history")
    op.drop_table("complaint_assignments")
    op.drop_table("complaints")
    op.drop_table("facilities")
    op.drop_table("users")
