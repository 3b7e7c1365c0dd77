"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("phone", sa.String(length=40), nullable=False, server_default=""),
        sa.Column("role", sa.String(length=30), nullable=False, server_default="customer"),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"], unique=False)

    op.create_table(
        "facilities",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("category", sa.String(length=60), nullable=False),
        sa.Column("location", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("city", sa.String(length=120), nullable=True),
        sa.Column("state", sa.String(length=120), nullable=True),
        sa.Column("capacity_min", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("capacity_max", sa.Integer(), nullable=False),
        sa.Column("price_hourly", sa.Float(), nullable=False, server_default="0"),
        sa.Column("price_half_day", sa.Float(), nullable=False, server_default="0"),
        sa.Column("price_full_day", sa.Float(), nullable=False, server_default="0"),
        sa.Column("open_time", sa.String(length=5), nullable=False, server_default="08:00"),
        sa.Column("close_time", sa.String(length=5), nullable=False, server_default="20:00"),
        sa.Column("amenities", sa.JSON(), nullable=True),
        sa.Column("images", sa.JSON(), nullable=True),
        sa.Column("rules", sa.JSON(), nullable=True),
        sa.Column("features", sa.JSON(), nullable=True),
        sa.Column("rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("review_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Available"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_facilities_name", "facilities", ["name"])
    op.create_index("ix_facilities_category", "facilities", ["category"])
    op.create_index("ix_facilities_city", "facilities", ["city"])
    op.create_index("ix_facilities_state", "facilities", ["state"])
    op.create_index("ix_facilities_status", "facilities", ["status"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("booking_ref", sa.String(length=20), nullable=False),
        sa.Column("idempotency_key", sa.String(length=80), nullable=True),
        sa.Column("facility_id", sa.String(length=36), nullable=False),
        sa.Column("facility_name", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("facility_location", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("date_str", sa.String(length=10), nullable=False),
        sa.Column("time_slot", sa.String(length=5), nullable=False),
        sa.Column("duration_hours", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("user_email", sa.String(length=320), nullable=False),
        sa.Column("user_name", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("user_phone", sa.String(length=40), nullable=False, server_default=""),
        sa.Column("attendees", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("purpose", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("special_requests", sa.Text(), nullable=False, server_default=""),
        sa.Column("equipment", sa.JSON(), nullable=True),
        sa.Column("total_amount", sa.Float(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="confirmed"),
        sa.Column("cancel_reason", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("idempotency_key", name="uq_bookings_idempotency_key"),
    )
    op.create_index("ix_bookings_booking_ref", "bookings", ["booking_ref"], unique=True)
    op.create_index("ix_bookings_facility_id", "bookings", ["facility_id"])
    op.create_index("ix_bookings_date_str", "bookings", ["date_str"])
    op.create_index("ix_bookings_user_email", "bookings", ["user_email"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index("ix_bookings_facility_date", "bookings", ["facility_id", "date_str"])
    # one live booking per facility/date/start
    op.create_index(
        "uq_bookings_live_slot",
        "bookings",
        ["facility_id", "date_str", "time_slot"],
        unique=True,
        postgresql_where=sa.text("status != 'cancelled'"),
        sqlite_where=sa.text("status != 'cancelled'"),
    )

    op.create_table(
        "states",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("code", sa.String(length=2), nullable=False),
        sa.Column("cities_csv", sa.String(length=4000), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("name", name="uq_states_name"),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("actor", sa.String(length=320), nullable=False),
        sa.Column("action", sa.String(length=80), nullable=False),
        sa.Column("entity_type", sa.String(length=40), nullable=False),
        sa.Column("entity_id", sa.String(length=36), nullable=False),
        sa.Column("details_json", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_audit_logs_actor", "audit_logs", ["actor"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_entity_type", "audit_logs", ["entity_type"])
    op.create_index("ix_audit_logs_entity_id", "audit_logs", ["entity_id"])


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("states")
    op.drop_table("bookings")
    op.drop_table("facilities")
    op.drop_table("users")
