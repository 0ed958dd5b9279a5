"""Initial pricing schema

Revision ID: 000_initial_schema
Revises:
Create Date: 2026-10-17

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "000_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Create pricing, tier and marketplace tables."""

    # Commission tiers
    op.create_table(
        "commission_tiers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column(
            "commission_type",
            sa.Enum("percentage", "flat", name="tier_commission_type"),
            nullable=False,
        ),
        sa.Column("commission_value", sa.Numeric(14, 4), nullable=False),
        sa.Column("min_monthly_bookings", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("min_rating", sa.Numeric(3, 2), nullable=True),
        sa.Column("priority_order", sa.Integer(), nullable=False),
        sa.Column("effective_from", sa.DateTime(timezone=True), nullable=False),
        sa.Column("effective_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_commission_tiers_priority_order", "commission_tiers", ["priority_order"])
    op.create_index("ix_commission_tiers_is_active", "commission_tiers", ["is_active"])

    # Vendors
    op.create_table(
        "vendors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("business_name", sa.String(255), nullable=False),
        sa.Column(
            "status",
            sa.Enum("pending", "approved", "rejected", "suspended", name="vendorstatus"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("current_tier_id", sa.Integer(), sa.ForeignKey("commission_tiers.id"), nullable=True),
        sa.Column("current_commission_rate", sa.Numeric(9, 6), nullable=True),
        sa.Column("last_tier_evaluated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("monthly_booking_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("average_rating", sa.Numeric(3, 2), nullable=True),
        sa.Column("manual_tier_id", sa.Integer(), sa.ForeignKey("commission_tiers.id"), nullable=True),
        sa.Column("manual_tier_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("manual_tier_reason", sa.Text(), nullable=True),
        sa.Column("manual_tier_assigned_by", sa.Integer(), nullable=True),
        sa.Column("version_id", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
    )
    op.create_index("ix_vendors_status", "vendors", ["status"])
    op.create_index("ix_vendors_manual_tier_id", "vendors", ["manual_tier_id"])
    op.create_index("ix_vendors_manual_tier_expires_at", "vendors", ["manual_tier_expires_at"])

    # Users
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.Enum("admin", "vendor", name="userrole"), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_active_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("vendor_id", sa.Integer(), sa.ForeignKey("vendors.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_vendor_id", "users", ["vendor_id"])

    # Services
    op.create_table(
        "services",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("vendor_id", sa.Integer(), sa.ForeignKey("vendors.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(16, 4), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="TZS"),
        sa.Column(
            "status",
            sa.Enum("draft", "pending", "approved", "rejected", "inactive", name="servicestatus"),
            nullable=False,
            server_default="pending",
        ),
        *_timestamps(),
    )
    op.create_index("ix_services_vendor_id", "services", ["vendor_id"])
    op.create_index("ix_services_status", "services", ["status"])

    # Service price overrides
    op.create_table(
        "service_price_overrides",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "service_id",
            sa.Integer(),
            sa.ForeignKey("services.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("override_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "override_type",
            sa.Enum("percentage", "flat", name="override_commission_type"),
            nullable=False,
        ),
        sa.Column("override_value", sa.Numeric(14, 4), nullable=False),
        sa.Column(
            "fee_payer",
            sa.Enum("vendor", "tourist", "shared", name="feepayer"),
            nullable=False,
            server_default="vendor",
        ),
        sa.Column("tourist_percentage", sa.Numeric(7, 4), nullable=True),
        sa.Column("vendor_percentage", sa.Numeric(7, 4), nullable=True),
        sa.Column("effective_from", sa.DateTime(timezone=True), nullable=False),
        sa.Column("effective_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_service_price_overrides_service_id", "service_price_overrides", ["service_id"])
    op.create_index(
        "ix_service_price_overrides_effective_from", "service_price_overrides", ["effective_from"]
    )

    # Bookings
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("service_id", sa.Integer(), sa.ForeignKey("services.id"), nullable=False),
        sa.Column("vendor_id", sa.Integer(), sa.ForeignKey("vendors.id"), nullable=False),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("customer_email", sa.String(255), nullable=True),
        sa.Column(
            "status",
            sa.Enum("pending", "confirmed", "completed", "cancelled", name="bookingstatus"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("total_amount", sa.Numeric(16, 4), nullable=False),
        sa.Column("booking_date", sa.Date(), nullable=True),
        sa.Column("commission_rate_at_booking", sa.Numeric(9, 6), nullable=True),
        sa.Column("commission_amount", sa.Numeric(16, 4), nullable=True),
        sa.Column("vendor_payout_amount", sa.Numeric(16, 4), nullable=True),
        sa.Column("commission_snapshot_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_bookings_service_id", "bookings", ["service_id"])
    op.create_index("ix_bookings_vendor_id", "bookings", ["vendor_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])

    # Service reviews
    op.create_table(
        "service_reviews",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "service_id",
            sa.Integer(),
            sa.ForeignKey("services.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_service_reviews_rating_range"),
    )
    op.create_index("ix_service_reviews_service_id", "service_reviews", ["service_id"])

    # Audit logs
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "action",
            sa.Enum(
                "login",
                "logout",
                "create_tier",
                "update_tier",
                "deactivate_tier",
                "create_override",
                "update_override",
                "delete_override",
                "assign_manual_tier",
                "remove_manual_tier",
                "run_tier_evaluation",
                "run_tier_cleanup",
                "confirm_booking",
                name="auditaction",
            ),
            nullable=False,
        ),
        sa.Column("target_type", sa.String(50), nullable=True),
        sa.Column("target_id", sa.Integer(), nullable=True),
        sa.Column("action_metadata", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])


def downgrade() -> None:
    """Drop all tables and enum types."""
    op.drop_table("audit_logs")
    op.drop_table("service_reviews")
    op.drop_table("bookings")
    op.drop_table("service_price_overrides")
    op.drop_table("services")
    op.drop_table("users")
    op.drop_table("vendors")
    op.drop_table("commission_tiers")

    for enum_name in (
        "auditaction",
        "bookingstatus",
        "feepayer",
        "override_commission_type",
        "servicestatus",
        "userrole",
        "vendorstatus",
        "tier_commission_type",
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
