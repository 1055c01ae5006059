"""Initial schema: users, donors, blood requests, donations, credit ledger, request responses

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

ENUMS = {
    "bloodgroup": ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"),
    "urgency": ("low", "medium", "high", "critical"),
    "requeststatus": ("active", "fulfilled", "cancelled"),
    "transactiontype": ("earned", "spent"),
    "responsestatus": ("accepted", "rejected"),
}


def _enum(name):
    # PostgreSQL types are created once up front and shared between tables
    values = ENUMS[name]
    return sa.Enum(*values, name=name).with_variant(
        postgresql.ENUM(*values, name=name, create_type=False), "postgresql"
    )


def upgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        for name, values in ENUMS.items():
            postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("subject", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("first_name", sa.String(), nullable=True),
        sa.Column("last_name", sa.String(), nullable=True),
        sa.Column("profile_image_url", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_subject", "users", ["subject"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "donors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("age", sa.Integer(), nullable=False),
        sa.Column("blood_group", _enum("bloodgroup"), nullable=False),
        sa.Column("weight", sa.Float(), nullable=False),
        sa.Column("whatsapp_number", sa.String(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("last_donation_date", sa.DateTime(), nullable=True),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("credits", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_donations", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("credits >= 0", name="ck_donors_credits_non_negative"),
    )
    op.create_index("ix_donors_id", "donors", ["id"])
    op.create_index("ix_donors_blood_group", "donors", ["blood_group"])
    op.create_index("ix_donors_is_available", "donors", ["is_available"])

    op.create_table(
        "blood_requests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("requester_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("blood_group", _enum("bloodgroup"), nullable=False),
        sa.Column("urgency", _enum("urgency"), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("contact_number", sa.String(), nullable=False),
        sa.Column("hospital_name", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", _enum("requeststatus"), nullable=False, server_default="active"),
        sa.Column("radius_km", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_blood_requests_id", "blood_requests", ["id"])
    op.create_index("ix_blood_requests_requester_id", "blood_requests", ["requester_id"])
    op.create_index("ix_blood_requests_status", "blood_requests", ["status"])

    op.create_table(
        "donations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("donor_id", sa.Integer(), sa.ForeignKey("donors.id"), nullable=False),
        sa.Column("request_id", sa.Integer(), sa.ForeignKey("blood_requests.id"), nullable=True),
        sa.Column("donation_date", sa.DateTime(), nullable=False),
        sa.Column("blood_group", _enum("bloodgroup"), nullable=False),
        sa.Column("units_given", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("credits_earned", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("hospital_name", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_donations_id", "donations", ["id"])
    op.create_index("ix_donations_donor_id", "donations", ["donor_id"])

    op.create_table(
        "credit_transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("donor_id", sa.Integer(), sa.ForeignKey("donors.id"), nullable=False),
        sa.Column("transaction_type", _enum("transactiontype"), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("related_donation_id", sa.Integer(), sa.ForeignKey("donations.id"), nullable=True),
        sa.Column("related_request_id", sa.Integer(), sa.ForeignKey("blood_requests.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("amount > 0", name="ck_credit_transactions_amount_positive"),
    )
    op.create_index("ix_credit_transactions_id", "credit_transactions", ["id"])
    op.create_index("ix_credit_transactions_donor_id", "credit_transactions", ["donor_id"])

    op.create_table(
        "request_responses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("request_id", sa.Integer(), sa.ForeignKey("blood_requests.id"), nullable=False),
        sa.Column("donor_id", sa.Integer(), sa.ForeignKey("donors.id"), nullable=False),
        sa.Column("status", _enum("responsestatus"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("request_id", "donor_id", name="uq_request_responses_request_donor"),
    )
    op.create_index("ix_request_responses_id", "request_responses", ["id"])
    op.create_index("ix_request_responses_request_id", "request_responses", ["request_id"])
    op.create_index("ix_request_responses_donor_id", "request_responses", ["donor_id"])


def downgrade() -> None:
    op.drop_table("request_responses")
    op.drop_table("credit_transactions")
    op.drop_table("donations")
    op.drop_table("blood_requests")
    op.drop_table("donors")
    op.drop_table("users")

    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        for name in reversed(list(ENUMS)):
            postgresql.ENUM(name=name).drop(bind, checkfirst=True)
