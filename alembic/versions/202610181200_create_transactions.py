"""create transactions ledger

Revision ID: 202610181200
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""

from alembic import op
import sqlalchemy as sa


revision = "202610181200"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_uid", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column(
            "type", sa.Enum("income", "expense", name="transactiontype"), nullable=False
        ),
        sa.Column("category", sa.String(length=100)),
        sa.Column(
            "status",
            sa.Enum("pending", "completed", "failed", name="transactionstatus"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("created_at", sa.DateTime()),
    )
    op.create_index(
        "ix_transactions_owner_status_created",
        "transactions",
        ["user_uid", "status", "created_at"],
    )


def downgrade():
    op.drop_index("ix_transactions_owner_status_created", table_name="transactions")
    op.drop_table("transactions")
    sa.Enum(name="transactionstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="transactiontype").drop(op.get_bind(), checkfirst=True)
