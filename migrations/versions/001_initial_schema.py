"""Initial schema: drivers, riders, rides, transfers, connections,
messages, notifications, scheduled rides and saved riders.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(updated: bool = True) -> list:
    cols = [sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now())]
    if updated:
        cols.append(
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now())
        )
    return cols


def upgrade() -> None:
    # ── drivers ───────────────────────────────────────────────────────
    op.create_table(
        "drivers",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("photo_url", sa.String(512), nullable=True),
        sa.Column("location_id", sa.String(64), nullable=False),
        sa.Column("vehicle", sa.JSON, nullable=True),
        sa.Column("drivers_license", sa.JSON, nullable=True),
        sa.Column("rating", sa.Float, nullable=True),
        sa.Column("available", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column(
            "approval_status",
            sa.Enum("pending", "approved", "rejected", name="approval_status"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("total_rides", sa.Integer, nullable=False, server_default="0"),
        sa.Column("completed_rides", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index(
        "idx_drivers_availability", "drivers", ["location_id", "available", "is_active"]
    )
    op.create_index("idx_drivers_approval", "drivers", ["approval_status"])

    # ── riders ────────────────────────────────────────────────────────
    op.create_table(
        "riders",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(32), nullable=False),
        sa.Column("photo_url", sa.String(512), nullable=True),
        *_timestamps(),
    )

    # ── saved_riders ──────────────────────────────────────────────────
    op.create_table(
        "saved_riders",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("driver_id", sa.String(64), sa.ForeignKey("drivers.id"), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index("idx_saved_riders_driver", "saved_riders", ["driver_id"])

    # ── rides ─────────────────────────────────────────────────────────
    op.create_table(
        "rides",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("rider_id", sa.String(64), nullable=True),
        sa.Column("customer_name", sa.String(120), nullable=False),
        sa.Column("phone", sa.String(32), nullable=False),
        sa.Column("pickup", sa.String(255), nullable=False, server_default=""),
        sa.Column("dropoff", sa.String(255), nullable=False, server_default=""),
        sa.Column("location_id", sa.String(64), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "pending",
                "assigned",
                "transferred",
                "completed",
                "cancelled",
                name="ride_status",
            ),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("driver_id", sa.String(64), sa.ForeignKey("drivers.id"), nullable=True),
        sa.Column(
            "previous_driver_id", sa.String(64), sa.ForeignKey("drivers.id"), nullable=True
        ),
        sa.Column("assigned_driver", sa.JSON, nullable=True),
        sa.Column("available_drivers", sa.JSON, nullable=False),
        sa.Column("transfer_fee_amount", sa.Float, nullable=True),
        sa.Column("scheduled_time", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.Column("transferred_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
    )
    op.create_index("idx_rides_status_location", "rides", ["status", "location_id"])
    op.create_index("idx_rides_driver", "rides", ["driver_id"])
    op.create_index("idx_rides_rider", "rides", ["rider_id"])

    # ── ride_transfers ────────────────────────────────────────────────
    op.create_table(
        "ride_transfers",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("ride_id", sa.String(64), sa.ForeignKey("rides.id"), nullable=False),
        sa.Column(
            "original_driver_id", sa.String(64), sa.ForeignKey("drivers.id"), nullable=False
        ),
        sa.Column(
            "new_driver_id", sa.String(64), sa.ForeignKey("drivers.id"), nullable=False
        ),
        sa.Column("transfer_fee_amount", sa.Float, nullable=False, server_default="0"),
        sa.Column(
            "status",
            sa.Enum("pending", "accepted", "rejected", name="transfer_status"),
            nullable=False,
            server_default="pending",
        ),
        *_timestamps(),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
    )
    op.create_index(
        "idx_transfers_new_driver", "ride_transfers", ["new_driver_id", "status"]
    )
    op.create_index(
        "idx_transfers_original_driver", "ride_transfers", ["original_driver_id"]
    )
    op.create_index("idx_transfers_ride", "ride_transfers", ["ride_id"])

    # ── connections ───────────────────────────────────────────────────
    op.create_table(
        "connections",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("driver_id", sa.String(64), nullable=False),
        sa.Column("rider_id", sa.String(64), nullable=False),
        sa.Column("requested_by", sa.String(64), nullable=False),
        sa.Column(
            "status",
            sa.Enum("pending", "accepted", "rejected", name="connection_status"),
            nullable=False,
            server_default="pending",
        ),
        *_timestamps(),
        sa.UniqueConstraint("driver_id", "rider_id", name="uq_connections_pair"),
    )
    op.create_index("idx_connections_rider", "connections", ["rider_id"])

    # ── messages ──────────────────────────────────────────────────────
    op.create_table(
        "messages",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("conversation_id", sa.String(160), nullable=False),
        sa.Column("ride_id", sa.String(64), sa.ForeignKey("rides.id"), nullable=True),
        sa.Column("sender_id", sa.String(64), nullable=False),
        sa.Column(
            "sender_type", sa.Enum("driver", "rider", name="sender_type"), nullable=False
        ),
        sa.Column("receiver_id", sa.String(64), nullable=True),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("timestamp", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(
        "idx_messages_conversation", "messages", ["conversation_id", "timestamp"]
    )
    op.create_index("idx_messages_receiver_unread", "messages", ["receiver_id", "read"])

    # ── notifications ─────────────────────────────────────────────────
    op.create_table(
        "notifications",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column(
            "type",
            sa.Enum(
                "message",
                "ride_update",
                "system",
                "connection_request",
                "connection_accepted",
                "ride_request",
                "ride_accepted",
                "transfer_request",
                "transfer_update",
                name="notification_type",
            ),
            nullable=False,
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("read", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(updated=False),
    )
    op.create_index("idx_notifications_user", "notifications", ["user_id", "read"])

    # ── scheduled_rides ───────────────────────────────────────────────
    op.create_table(
        "scheduled_rides",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("driver_id", sa.String(64), sa.ForeignKey("drivers.id"), nullable=False),
        sa.Column("rider_id", sa.String(64), nullable=True),
        sa.Column("rider_name", sa.String(120), nullable=False),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("time", sa.Time, nullable=False),
        sa.Column("pickup", sa.String(255), nullable=False),
        sa.Column("dropoff", sa.String(255), nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column(
            "status",
            sa.Enum(
                "pending", "confirmed", "completed", "cancelled", name="scheduled_ride_status"
            ),
            nullable=False,
            server_default="pending",
        ),
        *_timestamps(),
    )
    op.create_index("idx_scheduled_rides_driver", "scheduled_rides", ["driver_id", "date"])
    op.create_index("idx_scheduled_rides_rider", "scheduled_rides", ["rider_id", "date"])


def downgrade() -> None:
    op.drop_table("scheduled_rides")
    op.drop_table("notifications")
    op.drop_table("messages")
    op.drop_table("connections")
    op.drop_table("ride_transfers")
    op.drop_table("rides")
    op.drop_table("saved_riders")
    op.drop_table("riders")
    op.drop_table("drivers")
    for enum_name in (
        "scheduled_ride_status",
        "notification_type",
        "sender_type",
        "connection_status",
        "transfer_status",
        "ride_status",
        "approval_status",
    ):
        op.execute(f"DROP TYPE IF EXISTS {enum_name}")
