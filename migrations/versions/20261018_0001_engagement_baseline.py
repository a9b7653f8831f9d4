"""engagement baseline: clients, services, users, contracts, scopes, proposals

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 00:00:01
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None

JSON_MAP = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "clients",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_name", sa.String(length=255), nullable=False),
        sa.Column("contact_email", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=40), nullable=False),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_name"),
    )

    op.create_table(
        "services",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index("ix_services_is_active", "services", ["is_active"])

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "contracts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("renewal_date", sa.Date(), nullable=True),
        sa.Column("value", sa.Numeric(15, 2), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("document_link", sa.String(length=500), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("previous_contract_id", sa.Integer(), nullable=True),
        sa.Column("custom_field_data", JSON_MAP, nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["previous_contract_id"], ["contracts.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index("idx_contracts_client_start", "contracts", ["client_id", "start_date"])
    op.create_index("idx_contracts_end_date", "contracts", ["end_date"])
    op.create_index("idx_contracts_status", "contracts", ["status"])
    op.create_index("idx_contracts_previous", "contracts", ["previous_contract_id"])

    op.create_table(
        "service_scopes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("contract_id", sa.Integer(), nullable=False),
        sa.Column("service_id", sa.Integer(), nullable=False),
        sa.Column("scope_details", JSON_MAP, nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=True),
        sa.Column("unit", sa.String(length=50), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("saf_status", sa.String(length=32), nullable=False),
        sa.Column("saf_service_start_date", sa.Date(), nullable=True),
        sa.Column("saf_service_end_date", sa.Date(), nullable=True),
        sa.Column("saf_document_link", sa.String(length=500), nullable=True),
        sa.Column("custom_field_data", JSON_MAP, nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["contract_id"], ["contracts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["service_id"], ["services.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("contract_id", "service_id", name="uq_service_scopes_contract_service"),
    )
    op.create_index("idx_service_scopes_contract", "service_scopes", ["contract_id"])
    op.create_index("idx_service_scopes_service", "service_scopes", ["service_id"])
    op.create_index("idx_service_scopes_saf_status", "service_scopes", ["saf_status"])
    op.create_index("idx_service_scopes_is_active", "service_scopes", ["is_active"])

    op.create_table(
        "proposals",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("service_scope_id", sa.Integer(), nullable=False),
        sa.Column("proposal_type", sa.String(length=32), nullable=False),
        sa.Column("document_link", sa.String(length=500), nullable=False),
        sa.Column("version", sa.String(length=50), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("proposal_value", sa.Numeric(15, 2), nullable=True),
        sa.Column("currency", sa.String(length=3), nullable=True),
        sa.Column("valid_until_date", sa.Date(), nullable=True),
        sa.Column("estimated_duration_days", sa.Integer(), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("assignee_user_id", sa.Integer(), nullable=True),
        sa.Column("custom_field_data", JSON_MAP, nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["service_scope_id"], ["service_scopes.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["assignee_user_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_proposals_service_scope", "proposals", ["service_scope_id"])
    op.create_index("idx_proposals_type", "proposals", ["proposal_type"])
    op.create_index("idx_proposals_status", "proposals", ["status"])
    op.create_index("idx_proposals_assignee", "proposals", ["assignee_user_id"])
    op.create_index("idx_proposals_created_at", "proposals", ["created_at"])


def downgrade() -> None:
    op.drop_index("idx_proposals_created_at", table_name="proposals")
    op.drop_index("idx_proposals_assignee", table_name="proposals")
    op.drop_index("idx_proposals_status", table_name="proposals")
    op.drop_index("idx_proposals_type", table_name="proposals")
    op.drop_index("idx_proposals_service_scope", table_name="proposals")
    op.drop_table("proposals")

    op.drop_index("idx_service_scopes_is_active", table_name="service_scopes")
    op.drop_index("idx_service_scopes_saf_status", table_name="service_scopes")
    op.drop_index("idx_service_scopes_service", table_name="service_scopes")
    op.drop_index("idx_service_scopes_contract", table_name="service_scopes")
    op.drop_table("service_scopes")

    op.drop_index("idx_contracts_previous", table_name="contracts")
    op.drop_index("idx_contracts_status", table_name="contracts")
    op.drop_index("idx_contracts_end_date", table_name="contracts")
    op.drop_index("idx_contracts_client_start", table_name="contracts")
    op.drop_table("contracts")

    op.drop_table("users")
    op.drop_index("ix_services_is_active", table_name="services")
    op.drop_table("services")
    op.drop_table("clients")
