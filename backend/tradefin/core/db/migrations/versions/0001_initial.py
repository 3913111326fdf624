"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _id_column() -> sa.Column:
    return sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False)


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", sa.String(length=128), nullable=True),
        sa.Column("updated_by", sa.String(length=128), nullable=True),
    ]


def _audit_indexes(table: str) -> None:
    op.create_index(f"ix_{table}_id", table, ["id"])
    op.create_index(f"ix_{table}_created_by", table, ["created_by"])


def _party_columns() -> list[sa.Column]:
    return [
        sa.Column("reference_number", sa.String(length=50), nullable=False),
        sa.Column("applicant_name", sa.String(length=200), nullable=False),
        sa.Column("beneficiary_name", sa.String(length=200), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
    ]


def upgrade() -> None:
    # --- Core
    op.create_table(
        "users",
        _id_column(),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("role", sa.String(length=32), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_audit_columns(),
    )
    _audit_indexes("users")
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "audit_events",
        _id_column(),
        sa.Column("actor_id", sa.String(length=200), nullable=False),
        sa.Column("actor_role", sa.String(length=32), nullable=True),
        sa.Column("action", sa.String(length=200), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.String(length=200), nullable=False),
        sa.Column("before", sa.JSON(), nullable=True),
        sa.Column("after", sa.JSON(), nullable=True),
        sa.Column("request_id", sa.String(length=64), nullable=False),
        *_audit_columns(),
    )
    _audit_indexes("audit_events")
    op.create_index("ix_audit_events_actor_id", "audit_events", ["actor_id"])
    op.create_index("ix_audit_events_action", "audit_events", ["action"])
    op.create_index("ix_audit_events_entity_type", "audit_events", ["entity_type"])
    op.create_index("ix_audit_events_entity_id", "audit_events", ["entity_id"])
    op.create_index("ix_audit_events_request_id", "audit_events", ["request_id"])
    op.create_index("ix_audit_events_entity", "audit_events", ["entity_type", "entity_id"])

    # --- Instruments
    op.create_table(
        "letters_of_credit",
        _id_column(),
        *_party_columns(),
        sa.Column("issue_date", sa.Date(), nullable=True),
        sa.Column("expiry_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=18), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("issuing_bank", sa.String(length=200), nullable=True),
        sa.Column("advising_bank", sa.String(length=200), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        *_audit_columns(),
    )
    _audit_indexes("letters_of_credit")
    op.create_index("ix_letters_of_credit_reference_number", "letters_of_credit", ["reference_number"], unique=True)
    op.create_index("ix_letters_of_credit_beneficiary_name", "letters_of_credit", ["beneficiary_name"])
    op.create_index("ix_letters_of_credit_status", "letters_of_credit", ["status"])

    op.create_table(
        "bank_guarantees",
        _id_column(),
        *_party_columns(),
        sa.Column("guarantee_type", sa.String(length=50), nullable=False),
        sa.Column("issue_date", sa.Date(), nullable=True),
        sa.Column("validity_period", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=12), nullable=False),
        sa.Column("purpose", sa.Text(), nullable=True),
        sa.Column("issuing_bank", sa.String(length=200), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        *_audit_columns(),
    )
    _audit_indexes("bank_guarantees")
    op.create_index("ix_bank_guarantees_reference_number", "bank_guarantees", ["reference_number"], unique=True)
    op.create_index("ix_bank_guarantees_beneficiary_name", "bank_guarantees", ["beneficiary_name"])
    op.create_index("ix_bank_guarantees_status", "bank_guarantees", ["status"])

    # --- Documents
    op.create_table(
        "trade_documents",
        _id_column(),
        sa.Column("reference_number", sa.String(length=50), nullable=False),
        sa.Column("document_type", sa.String(length=100), nullable=False),
        sa.Column("trade_reference_number", sa.String(length=50), nullable=True),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("file_path", sa.String(length=1024), nullable=False),
        sa.Column("file_type", sa.String(length=200), nullable=True),
        sa.Column("file_size", sa.BigInteger(), nullable=False),
        sa.Column("uploaded_by", sa.String(length=128), nullable=False),
        sa.Column("upload_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=14), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_audit_columns(),
    )
    _audit_indexes("trade_documents")
    op.create_index("ix_trade_documents_reference_number", "trade_documents", ["reference_number"], unique=True)
    op.create_index("ix_trade_documents_document_type", "trade_documents", ["document_type"])
    op.create_index("ix_trade_documents_trade_reference_number", "trade_documents", ["trade_reference_number"])
    op.create_index("ix_trade_documents_uploaded_by", "trade_documents", ["uploaded_by"])
    op.create_index("ix_trade_documents_status", "trade_documents", ["status"])

    # --- Risk & compliance
    op.create_table(
        "risk_assessments",
        _id_column(),
        sa.Column("transaction_reference", sa.String(length=50), nullable=False),
        sa.Column("transaction_type", sa.String(length=20), nullable=True),
        sa.Column("risk_score", sa.Numeric(5, 2), nullable=False),
        sa.Column("risk_level", sa.String(length=8), nullable=False),
        sa.Column("risk_factors", sa.JSON(), nullable=True),
        sa.Column("recommendations", sa.Text(), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("assessed_by", sa.String(length=128), nullable=False),
        sa.Column("assessment_date", sa.Date(), nullable=False),
        *_audit_columns(),
    )
    _audit_indexes("risk_assessments")
    op.create_index("ix_risk_assessments_transaction_reference", "risk_assessments", ["transaction_reference"])
    op.create_index("ix_risk_assessments_risk_level", "risk_assessments", ["risk_level"])
    op.create_index("ix_risk_assessments_assessment_date", "risk_assessments", ["assessment_date"])
    op.create_index(
        "ix_risk_assessments_reference_date", "risk_assessments", ["transaction_reference", "assessment_date"]
    )

    op.create_table(
        "compliance_reports",
        _id_column(),
        sa.Column("transaction_reference", sa.String(length=50), nullable=False),
        sa.Column("transaction_type", sa.String(length=20), nullable=True),
        sa.Column("compliance_status", sa.String(length=13), nullable=False),
        sa.Column("documents_validated", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("risk_check_passed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("party_check_passed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("country_check_passed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("report_date", sa.Date(), nullable=True),
        sa.Column("reviewed_by", sa.String(length=128), nullable=True),
        sa.Column("review_date", sa.Date(), nullable=True),
        *_audit_columns(),
    )
    _audit_indexes("compliance_reports")
    op.create_index(
        "ix_compliance_reports_transaction_reference", "compliance_reports", ["transaction_reference"], unique=True
    )
    op.create_index("ix_compliance_reports_compliance_status", "compliance_reports", ["compliance_status"])


def downgrade() -> None:
    op.drop_table("compliance_reports")
    op.drop_table("risk_assessments")
    op.drop_table("trade_documents")
    op.drop_table("bank_guarantees")
    op.drop_table("letters_of_credit")
    op.drop_table("audit_events")
    op.drop_table("users")
