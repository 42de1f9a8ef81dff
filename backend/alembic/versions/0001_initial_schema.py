"""Initial schema: identities, RM directory, jobs, entities, activity log, config.

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def _enum(*values: str, name: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False)


def upgrade() -> None:
    # ── Identities ───────────────────────────────────────────
    op.create_table(
        "user_accounts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_user_accounts_email", "user_accounts", ["email"], unique=True)

    op.create_table(
        "user_profiles",
        sa.Column(
            "id", sa.String(36),
            sa.ForeignKey("user_accounts.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("role", _enum("superadmin", "rms", name="userrole"), nullable=True),
        sa.Column("permissions", sa.JSON(), nullable=True),
        sa.Column("created_by", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )

    op.create_table(
        "relationship_managers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("login_code", sa.String(50), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("status", sa.String(20), nullable=True),
        sa.Column("permissions", sa.JSON(), nullable=True),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        sa.Column("created_by", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index(
        "ix_relationship_managers_login_code", "relationship_managers", ["login_code"], unique=True
    )

    # ── Jobs ─────────────────────────────────────────────────
    op.create_table(
        "jobs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("job_number", sa.String(50), nullable=False),
        sa.Column("booking_no", sa.String(100), nullable=True),
        sa.Column("invoice_no", sa.String(100), nullable=True),
        sa.Column(
            "status",
            _enum("Active", "Pending", "Completed", "Cancelled", name="jobstatus"),
            nullable=True,
        ),
        sa.Column("air_shipping_line", sa.String(255), nullable=True),
        sa.Column(
            "mode_of_shipment", _enum("Sea", "Air", "Road", "Rail", name="shipmentmode"), nullable=True
        ),
        sa.Column("shipment_type", _enum("Import", "Export", name="shipmenttype"), nullable=False),
        sa.Column("lcl_fcl_air", _enum("LCL", "FCL", "Air", name="loadtype"), nullable=True),
        sa.Column("container_flight_numbers", sa.JSON(), nullable=True),
        sa.Column("port_of_loading", sa.String(255), nullable=True),
        sa.Column("final_destination", sa.String(255), nullable=True),
        sa.Column("vessel_voy_details", sa.String(255), nullable=True),
        sa.Column("eta_pod", sa.String(30), nullable=True),
        sa.Column("gross_weight", sa.String(50), nullable=True),
        sa.Column("net_weight", sa.String(50), nullable=True),
        sa.Column("total_packages", sa.String(100), nullable=True),
        sa.Column("terms", _enum("FOB", "CIF", "CFR", "EXW", name="incoterm"), nullable=True),
        sa.Column("hbl_no", sa.String(100), nullable=True),
        sa.Column("hbl_date", sa.String(30), nullable=True),
        sa.Column("mbl_no", sa.String(100), nullable=True),
        sa.Column("mbl_date", sa.String(30), nullable=True),
        sa.Column("rm_name", sa.String(255), nullable=True),
        sa.Column("shipper_details", sa.Text(), nullable=True),
        sa.Column("consignee_details", sa.Text(), nullable=True),
        sa.Column("overseas_agent_details", sa.Text(), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_jobs_job_number", "jobs", ["job_number"], unique=True)
    op.create_index("ix_jobs_status", "jobs", ["status"])
    op.create_index("ix_jobs_rm_name", "jobs", ["rm_name"])
    op.create_index("ix_jobs_created_at", "jobs", ["created_at"])

    # ── Entities ─────────────────────────────────────────────
    op.create_table(
        "entities",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "entity_type",
            _enum("shippers", "consignees", "overseas_agents", name="entitytype"),
            nullable=False,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("document_url", sa.String(500), nullable=True),
        sa.Column("document_name", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_entities_entity_type", "entities", ["entity_type"])
    op.create_index("ix_entities_name", "entities", ["name"])

    # ── Support ──────────────────────────────────────────────
    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("user_name", sa.String(200), nullable=False),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(36), nullable=True),
        sa.Column("entity_code", sa.String(255), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_activity_logs_user_id", "activity_logs", ["user_id"])
    op.create_index("ix_activity_logs_action", "activity_logs", ["action"])
    op.create_index("ix_activity_logs_entity_type", "activity_logs", ["entity_type"])
    op.create_index("ix_activity_logs_created_at", "activity_logs", ["created_at"])

    op.create_table(
        "app_config",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("key", sa.String(100), nullable=False, unique=True),
        sa.Column("value", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("app_config")
    op.drop_table("activity_logs")
    op.drop_table("entities")
    op.drop_table("jobs")
    op.drop_table("relationship_managers")
    op.drop_table("user_profiles")
    op.drop_table("user_accounts")
