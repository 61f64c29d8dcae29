"""create integration sync schema

Revision ID: a7c1e2d3f4b5
Revises:
Create Date: 2026-10-16 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "a7c1e2d3f4b5"
down_revision = None
branch_labels = None
depends_on = None


def _created_at() -> sa.Column:  # type: ignore[type-arg]
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("(CURRENT_TIMESTAMP)"),
        nullable=True,
    )


def _updated_at() -> sa.Column:  # type: ignore[type-arg]
    return sa.Column(
        "updated_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("(CURRENT_TIMESTAMP)"),
        nullable=True,
    )


def _company_fk() -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(["company_id"], ["companies.id"], ondelete="RESTRICT")


def _provenance_fk() -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(["integration_id"], ["integrations.id"], ondelete="SET NULL")


def upgrade() -> None:
    # companies table
    op.create_table(
        "companies",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("default_currency", sa.String(length=3), nullable=False, server_default="USD"),
        sa.Column("timezone", sa.String(length=50), nullable=False, server_default="UTC"),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint("id"),
    )

    # api_keys table
    op.create_table(
        "api_keys",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("key_hash", sa.String(length=64), nullable=False),
        sa.Column("key_prefix", sa.String(length=12), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
        _company_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_api_keys_company_id", "api_keys", ["company_id"], unique=False)
    op.create_index("ix_api_keys_key_hash", "api_keys", ["key_hash"], unique=True)

    # integrations table
    op.create_table(
        "integrations",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("integration_type", sa.String(length=30), nullable=False),
        sa.Column("provider_type", sa.String(length=50), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("credentials", sa.JSON(), nullable=False),
        sa.Column("configuration", sa.JSON(), nullable=False),
        sa.Column("last_sync_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("error_details", sa.JSON(), nullable=True),
        _created_at(),
        _updated_at(),
        _company_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_integrations_company_id", "integrations", ["company_id"], unique=False)
    op.create_index("ix_integrations_provider_type", "integrations", ["provider_type"], unique=False)

    # integration_mappings table
    op.create_table(
        "integration_mappings",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("integration_id", sa.String(length=36), nullable=False),
        sa.Column("mappable_type", sa.String(length=50), nullable=False),
        sa.Column("mappable_id", sa.String(length=36), nullable=False),
        sa.Column("external_id", sa.String(length=255), nullable=False),
        sa.Column("external_parent_id", sa.String(length=255), nullable=True),
        sa.Column("external_data", sa.JSON(), nullable=True),
        sa.Column("sub_units_created", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("pushed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_synced_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(["integration_id"], ["integrations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "integration_id", "mappable_type", "mappable_id",
            name="uq_integration_mappings_integration_type_id",
        ),
    )
    op.create_index(
        "ix_integration_mappings_integration_id",
        "integration_mappings",
        ["integration_id"],
        unique=False,
    )

    # integration_sync_history table
    op.create_table(
        "integration_sync_history",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("integration_id", sa.String(length=36), nullable=False),
        sa.Column("sync_type", sa.String(length=30), nullable=False, server_default="full"),
        sa.Column("status", sa.String(length=30), nullable=False),
        sa.Column("synced_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("error_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("operations", sa.JSON(), nullable=False),
        sa.Column("error_message", sa.String(length=1000), nullable=True),
        sa.Column("duration_ms", sa.Integer(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(["integration_id"], ["integrations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_integration_sync_history_integration_id",
        "integration_sync_history",
        ["integration_id"],
        unique=False,
    )

    # sync_leases table
    op.create_table(
        "sync_leases",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("integration_id", sa.String(length=36), nullable=False),
        sa.Column("token", sa.String(length=64), nullable=False),
        sa.Column("acquired_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(["integration_id"], ["integrations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_sync_leases_integration_id", "sync_leases", ["integration_id"], unique=True
    )

    # opportunities table
    op.create_table(
        "opportunities",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("integration_id", sa.String(length=36), nullable=True),
        sa.Column("natural_key", sa.String(length=255), nullable=False),
        sa.Column("source", sa.String(length=50), nullable=False),
        sa.Column("external_id", sa.String(length=255), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("amount_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="USD"),
        sa.Column("stage", sa.String(length=30), nullable=False, server_default="needs_analysis"),
        sa.Column("probability", sa.Integer(), nullable=False, server_default="50"),
        sa.Column("close_date", sa.Date(), nullable=True),
        sa.Column("advertiser_name", sa.String(length=255), nullable=True),
        sa.Column("last_activity_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
        _company_fk(),
        _provenance_fk(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "company_id", "natural_key", "source", name="uq_opportunities_company_key_source"
        ),
    )
    op.create_index("ix_opportunities_company_id", "opportunities", ["company_id"], unique=False)
    op.create_index(
        "ix_opportunities_integration_id", "opportunities", ["integration_id"], unique=False
    )

    # contacts table
    op.create_table(
        "contacts",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("integration_id", sa.String(length=36), nullable=True),
        sa.Column("natural_key", sa.String(length=255), nullable=False),
        sa.Column("source", sa.String(length=50), nullable=False),
        sa.Column("external_id", sa.String(length=255), nullable=True),
        sa.Column("first_name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("last_name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=100), nullable=True),
        sa.Column("job_title", sa.String(length=255), nullable=True),
        sa.Column("company_name", sa.String(length=255), nullable=True),
        sa.Column("website", sa.String(length=2048), nullable=True),
        _created_at(),
        _updated_at(),
        _company_fk(),
        _provenance_fk(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "company_id", "natural_key", "source", name="uq_contacts_company_key_source"
        ),
    )
    op.create_index("ix_contacts_company_id", "contacts", ["company_id"], unique=False)
    op.create_index("ix_contacts_integration_id", "contacts", ["integration_id"], unique=False)

    # advertisers table
    op.create_table(
        "advertisers",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("integration_id", sa.String(length=36), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("source", sa.String(length=50), nullable=False),
        sa.Column("external_id", sa.String(length=255), nullable=True),
        sa.Column("website", sa.String(length=2048), nullable=True),
        _created_at(),
        _updated_at(),
        _company_fk(),
        _provenance_fk(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_id", "name", name="uq_advertisers_company_name"),
    )
    op.create_index("ix_advertisers_company_id", "advertisers", ["company_id"], unique=False)
    op.create_index(
        "ix_advertisers_integration_id", "advertisers", ["integration_id"], unique=False
    )

    # campaigns table
    op.create_table(
        "campaigns",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("integration_id", sa.String(length=36), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("budget_cents", sa.Integer(), nullable=True),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="USD"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
        _created_at(),
        _updated_at(),
        _company_fk(),
        _provenance_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_campaigns_company_id", "campaigns", ["company_id"], unique=False)
    op.create_index("ix_campaigns_integration_id", "campaigns", ["integration_id"], unique=False)

    # ad_spaces table
    op.create_table(
        "ad_spaces",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("integration_id", sa.String(length=36), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=False, server_default="display"),
        sa.Column("size", sa.String(length=50), nullable=True),
        sa.Column("location", sa.String(length=2048), nullable=True),
        sa.Column("base_price_cents", sa.Integer(), nullable=True),
        sa.Column("price_model", sa.String(length=20), nullable=False, server_default="cpm"),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="USD"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="available"),
        _created_at(),
        _updated_at(),
        _company_fk(),
        _provenance_fk(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_id", "name", name="uq_ad_spaces_company_name"),
    )
    op.create_index("ix_ad_spaces_company_id", "ad_spaces", ["company_id"], unique=False)
    op.create_index("ix_ad_spaces_integration_id", "ad_spaces", ["integration_id"], unique=False)

    # campaign_ad_spaces table
    op.create_table(
        "campaign_ad_spaces",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("campaign_id", sa.String(length=36), nullable=False),
        sa.Column("ad_space_id", sa.String(length=36), nullable=False),
        sa.Column("allocated_budget_cents", sa.Integer(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(["campaign_id"], ["campaigns.id"]),
        sa.ForeignKeyConstraint(["ad_space_id"], ["ad_spaces.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_campaign_ad_spaces_campaign_id", "campaign_ad_spaces", ["campaign_id"], unique=False
    )
    op.create_index(
        "ix_campaign_ad_spaces_ad_space_id", "campaign_ad_spaces", ["ad_space_id"], unique=False
    )

    # audit_logs table
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("resource_type", sa.String(length=50), nullable=False),
        sa.Column("resource_id", sa.String(length=36), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("changes", sa.JSON(), nullable=False),
        sa.Column("actor_type", sa.String(length=50), nullable=False),
        sa.Column("actor_id", sa.String(length=255), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        _created_at(),
        _company_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_logs_company_id", "audit_logs", ["company_id"], unique=False)
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"], unique=False)
    op.create_index(
        "ix_audit_logs_resource", "audit_logs", ["resource_type", "resource_id"], unique=False
    )
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"], unique=False)


def downgrade() -> None:
    for table in (
        "audit_logs",
        "campaign_ad_spaces",
        "ad_spaces",
        "campaigns",
        "advertisers",
        "contacts",
        "opportunities",
        "sync_leases",
        "integration_sync_history",
        "integration_mappings",
        "integrations",
        "api_keys",
        "companies",
    ):
        op.drop_table(table)
