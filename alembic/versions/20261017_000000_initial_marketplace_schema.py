"""Initial marketplace schema for BookBridge

Revision ID: 20261017_000000
Revises: None
Create Date: 2026-10-17 00:00:00.000000

This is the initial migration that creates every table of the marketplace:
- Accounts, issued bearer tokens and public profiles
- Book listings with the sell-price and copy-count CHECK constraints
- Cash-on-delivery orders
- Conversations (one per book and buyer) and their messages

Revision format: YYYYMMDD_HHMMSS_description

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261017_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

BOOK_TYPES = ("textbook", "novel", "storybook", "comics", "biography", "other")
BOOK_MODES = ("sell", "donate", "exchange")


def upgrade() -> None:
    """Create all tables."""

    # Create accounts table
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(256), nullable=False),
        sa.Column("user_metadata", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_accounts_email", "email", unique=True),
    )

    # Create auth_tokens table
    op.create_table(
        "auth_tokens",
        sa.Column("token_hash", sa.String(64), nullable=False),
        sa.Column("account_id", sa.String(36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("token_hash"),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"], ondelete="CASCADE"),
        sa.Index("ix_auth_tokens_account_id", "account_id"),
    )

    # Create profiles table; the id is the owning account's id
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("full_name", sa.String(100), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["id"], ["accounts.id"], ondelete="CASCADE"),
    )

    # Create books table
    op.create_table(
        "books",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("author", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("book_type", sa.Enum(*BOOK_TYPES, name="book_type"), nullable=False),
        sa.Column("mode", sa.Enum(*BOOK_MODES, name="book_mode"), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("available_copies", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "mode <> 'sell' OR (price IS NOT NULL AND price > 0)",
            name="price_required_for_sell",
        ),
        sa.CheckConstraint("available_copies >= 0", name="available_copies_non_negative"),
        sa.Index("ix_books_user_id", "user_id"),
        sa.Index("ix_books_created_at", "created_at"),
    )

    # Create orders table
    op.create_table(
        "orders",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("book_id", sa.String(36), nullable=False),
        sa.Column("buyer_id", sa.String(36), nullable=False),
        sa.Column("seller_id", sa.String(36), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("full_name", sa.Text(), nullable=False),
        sa.Column("phone", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("address_line1", sa.Text(), nullable=False),
        sa.Column("address_line2", sa.Text(), nullable=True),
        sa.Column("city", sa.Text(), nullable=False),
        sa.Column("state", sa.Text(), nullable=False),
        sa.Column("pincode", sa.Text(), nullable=False),
        sa.Column("payment_method", sa.Text(), nullable=False, server_default="cod"),
        sa.Column("status", sa.Text(), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["book_id"], ["books.id"], ondelete="CASCADE"),
        sa.Index("ix_orders_book_id", "book_id"),
        sa.Index("ix_orders_buyer_id", "buyer_id"),
        sa.Index("ix_orders_seller_id", "seller_id"),
        sa.Index("ix_orders_created_at", "created_at"),
    )

    # Create conversations table
    op.create_table(
        "conversations",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("book_id", sa.String(36), nullable=False),
        sa.Column("buyer_id", sa.String(36), nullable=False),
        sa.Column("seller_id", sa.String(36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["book_id"], ["books.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("book_id", "buyer_id", name="uq_conversations_book_buyer"),
        sa.Index("ix_conversations_book_id", "book_id"),
        sa.Index("ix_conversations_buyer_id", "buyer_id"),
        sa.Index("ix_conversations_seller_id", "seller_id"),
    )

    # Create messages table; the serial id breaks created_at ties
    op.create_table(
        "messages",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("conversation_id", sa.String(36), nullable=False),
        sa.Column("sender_id", sa.String(36), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["conversation_id"], ["conversations.id"], ondelete="CASCADE"),
        sa.Index("ix_messages_conversation_id", "conversation_id"),
        sa.Index("ix_messages_created_at", "created_at"),
    )


def downgrade() -> None:
    op.drop_table("messages")
    op.drop_table("conversations")
    op.drop_table("orders")
    op.drop_table("books")
    op.drop_table("profiles")
    op.drop_table("auth_tokens")
    op.drop_table("accounts")

    # Drop the enum types
    op.execute("DROP TYPE IF EXISTS book_mode")
    op.execute("DROP TYPE IF EXISTS book_type")
