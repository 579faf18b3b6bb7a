"""Initial schema for RentPilot

Revision ID: 0001
Revises:
Create Date: 2026-10-18

Creates all tables for:
- Auth (profiles, refresh_tokens)
- Properties and leases (properties, leases, lease_tenants)
- Applications
- Messaging (messages, message_read_status)
- Notifications (notifications, notification_preferences)
- Documents
"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _enum(*values: str, name: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False, length=32)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Create all tables."""

    # =====================
    # AUTH
    # =====================

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(128), nullable=False),
        sa.Column("first_name", sa.String(120), nullable=True),
        sa.Column("last_name", sa.String(120), nullable=True),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("role", _enum("landlord", "tenant", name="userrole"), nullable=False),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("failed_login_attempts", sa.Integer(), nullable=True),
        sa.Column("locked_until", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("token_hash", sa.String(128), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("user_agent", sa.String(500), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("token_hash"),
    )
    op.create_index("ix_refresh_tokens_user", "refresh_tokens", ["user_id"])

    # =====================
    # PROPERTIES AND LEASES
    # =====================

    op.create_table(
        "properties",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("landlord_id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("property_type", sa.String(50), nullable=True),
        sa.Column("unit_count", sa.Integer(), nullable=True),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("city", sa.String(120), nullable=False),
        sa.Column("province", sa.String(120), nullable=False),
        sa.Column("postal_code", sa.String(20), nullable=False),
        sa.Column("monthly_rent", sa.Numeric(15, 2), nullable=False),
        sa.Column("bedrooms", sa.Integer(), nullable=True),
        sa.Column("bathrooms", sa.Numeric(4, 1), nullable=True),
        sa.Column("square_feet", sa.Integer(), nullable=True),
        sa.Column("amenities", sa.JSON(), nullable=False),
        sa.Column("available_date", sa.Date(), nullable=True),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["landlord_id"], ["profiles.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_properties_landlord", "properties", ["landlord_id"])
    op.create_index("ix_properties_available", "properties", ["is_available"])

    # active_property_id is set only while status = 'active'; unique so a
    # property can hold one active lease at a time
    op.create_table(
        "leases",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("property_id", sa.String(36), nullable=False),
        sa.Column("landlord_id", sa.String(36), nullable=False),
        sa.Column("tenant_id", sa.String(36), nullable=True),
        sa.Column("tenant_name", sa.Text(), nullable=False),
        sa.Column("monthly_rent", sa.Numeric(15, 2), nullable=False),
        sa.Column("security_deposit", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("pet_deposit", sa.Numeric(15, 2), nullable=True),
        sa.Column("lease_start_date", sa.Date(), nullable=False),
        sa.Column("lease_end_date", sa.Date(), nullable=False),
        sa.Column("status", _enum("draft", "active", "expired", name="leasestatus"), nullable=False),
        sa.Column("utilities_included", sa.JSON(), nullable=False),
        sa.Column("special_terms", sa.Text(), nullable=True),
        sa.Column("has_pets", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("snow_grass_responsibility", sa.String(50), nullable=True),
        sa.Column("reminder_settings", sa.JSON(), nullable=True),
        sa.Column("signature_name", sa.String(255), nullable=True),
        sa.Column("active_property_id", sa.String(36), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["landlord_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tenant_id"], ["profiles.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("active_property_id", name="uq_leases_active_property"),
    )
    op.create_index("ix_leases_property_status", "leases", ["property_id", "status"])
    op.create_index("ix_leases_landlord", "leases", ["landlord_id"])
    op.create_index("ix_leases_tenant", "leases", ["tenant_id"])

    op.create_table(
        "lease_tenants",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("lease_id", sa.String(36), nullable=False),
        sa.Column("tenant_name", sa.String(255), nullable=False),
        sa.Column("tenant_email", sa.String(255), nullable=True),
        sa.Column("tenant_phone", sa.String(40), nullable=True),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["lease_id"], ["leases.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_lease_tenants_lease", "lease_tenants", ["lease_id"])

    # =====================
    # APPLICATIONS
    # =====================

    op.create_table(
        "applications",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("property_id", sa.String(36), nullable=True),
        sa.Column("tenant_id", sa.String(36), nullable=False),
        sa.Column("status", _enum("pending", "approved", "rejected", name="applicationstatus"), nullable=False),
        sa.Column("first_name", sa.String(120), nullable=False),
        sa.Column("last_name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(40), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("current_address", sa.String(255), nullable=False),
        sa.Column("current_city", sa.String(120), nullable=False),
        sa.Column("current_province", sa.String(120), nullable=False),
        sa.Column("current_postal_code", sa.String(20), nullable=False),
        sa.Column("move_in_date", sa.Date(), nullable=False),
        sa.Column("employment_status", sa.String(50), nullable=False),
        sa.Column("current_employer", sa.String(255), nullable=True),
        sa.Column("employment_length", sa.String(50), nullable=True),
        sa.Column("monthly_income", sa.Numeric(15, 2), nullable=True),
        sa.Column("number_of_occupants", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("has_pets", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("pet_details", sa.Text(), nullable=True),
        sa.Column("has_been_evicted", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("emergency_contact_name", sa.String(255), nullable=False),
        sa.Column("emergency_contact_phone", sa.String(40), nullable=False),
        sa.Column("emergency_contact_relation", sa.String(50), nullable=False),
        sa.Column("reference_name", sa.String(255), nullable=True),
        sa.Column("reference_phone", sa.String(40), nullable=True),
        sa.Column("reference_relation", sa.String(50), nullable=True),
        sa.Column("additional_comments", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tenant_id"], ["profiles.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_applications_tenant", "applications", ["tenant_id"])
    op.create_index("ix_applications_property", "applications", ["property_id"])

    # =====================
    # MESSAGING
    # =====================

    op.create_table(
        "messages",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("lease_id", sa.String(36), nullable=False),
        sa.Column("sender_id", sa.String(36), nullable=True),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["lease_id"], ["leases.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["sender_id"], ["profiles.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("lease_id", "sequence", name="uq_messages_lease_sequence"),
    )
    op.create_index("ix_messages_lease_created", "messages", ["lease_id", "created_at"])

    op.create_table(
        "message_read_status",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("message_id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["message_id"], ["messages.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("message_id", "user_id", name="uq_message_read_status"),
    )
    op.create_index("ix_message_read_status_user", "message_read_status", ["user_id"])

    # =====================
    # NOTIFICATIONS
    # =====================

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("priority", _enum("low", "medium", "high", name="notificationpriority"), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("action_url", sa.String(500), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_notifications_user_created", "notifications", ["user_id", "created_at"])

    op.create_table(
        "notification_preferences",
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("app_alerts", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("billing_alerts", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("lease_reminders", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("maintenance_alerts", sa.Boolean(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("user_id"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
    )

    # =====================
    # DOCUMENTS
    # =====================

    op.create_table(
        "documents",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("property_id", sa.String(36), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("original_name", sa.String(255), nullable=False),
        sa.Column("file_path", sa.String(500), nullable=False),
        sa.Column("mime_type", sa.String(255), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=False),
        sa.Column("category", _enum("lease", "receipt", "inspection", "other", name="documentcategory"), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("file_path"),
    )
    op.create_index("ix_documents_user_uploaded", "documents", ["user_id", "uploaded_at"])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table("documents")
    op.drop_table("notification_preferences")
    op.drop_table("notifications")
    op.drop_table("message_read_status")
    op.drop_table("messages")
    op.drop_table("applications")
    op.drop_table("lease_tenants")
    op.drop_table("leases")
    op.drop_table("properties")
    op.drop_table("refresh_tokens")
    op.drop_table("profiles")
