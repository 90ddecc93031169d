"""init_checkout_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

Schema:
- event / event_tier: events and per-tier seat counters (held + sold <= capacity)
- seat_reservation: one row per hold, HELD -> COMMITTED | RELEASED
- ticket_transaction: purchase attempts with the full price breakdown
- ticket: one per paid seat
- point_transaction: loyalty ledger (grants carry `remaining`, debits are negative)
- coupon / promotion: discount catalog
- review: event ratings, read for the average rating
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        'created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False
    )


def upgrade() -> None:
    """Create all tables with final schema."""

    # ========== Inventory ==========
    op.create_table(
        'event',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('average_rating', sa.Float(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'event_tier',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('tier_name', sa.String(length=100), nullable=False),
        sa.Column('price', sa.BigInteger(), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('held', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sold', sa.Integer(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['event_id'], ['event.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id', 'tier_name', name='uq_event_tier_name'),
    )
    op.create_index(op.f('ix_event_tier_event_id'), 'event_tier', ['event_id'])

    op.create_table(
        'seat_reservation',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('tier_name', sa.String(length=100), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('state', sa.String(length=20), nullable=False),
        _created_at(),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_seat_reservation_event_id'), 'seat_reservation', ['event_id'])

    # ========== Transactions & tickets ==========
    op.create_table(
        'ticket_transaction',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('tier_name', sa.String(length=100), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('payment_deadline', sa.DateTime(timezone=True), nullable=False),
        sa.Column('reservation_id', sa.Uuid(), nullable=False),
        sa.Column('coupon_id', sa.Integer(), nullable=True),
        sa.Column('promotion_id', sa.Integer(), nullable=True),
        sa.Column('points_used', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('base_price', sa.BigInteger(), nullable=False),
        sa.Column('coupon_discount', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('promotion_discount', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('points_discount', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('subtotal_before_tax', sa.BigInteger(), nullable=False),
        sa.Column('tax_amount', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('final_price', sa.BigInteger(), nullable=False),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('reservation_id'),
    )
    op.create_index(op.f('ix_ticket_transaction_user_id'), 'ticket_transaction', ['user_id'])
    op.create_index(op.f('ix_ticket_transaction_event_id'), 'ticket_transaction', ['event_id'])
    op.create_index(
        'ix_ticket_transaction_status_deadline',
        'ticket_transaction',
        ['status', 'payment_deadline'],
    )

    op.create_table(
        'ticket',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('transaction_id', sa.Uuid(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('tier_name', sa.String(length=100), nullable=False),
        sa.Column('is_used', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('used_at', sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['transaction_id'], ['ticket_transaction.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_ticket_transaction_id'), 'ticket', ['transaction_id'])
    op.create_index(op.f('ix_ticket_event_id'), 'ticket', ['event_id'])

    # ========== Loyalty ==========
    op.create_table(
        'point_transaction',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('points', sa.BigInteger(), nullable=False),
        sa.Column('remaining', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_expired', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('transaction_id', sa.Uuid(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_point_transaction_user_expiry', 'point_transaction', ['user_id', 'expires_at']
    )
    op.create_index(
        op.f('ix_point_transaction_transaction_id'), 'point_transaction', ['transaction_id']
    )

    # ========== Discount catalog ==========
    op.create_table(
        'coupon',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('discount_value', sa.BigInteger(), nullable=False),
        sa.Column('discount_type', sa.String(length=20), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_used', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('used_by_transaction_id', sa.Uuid(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
    )
    op.create_index(op.f('ix_coupon_user_id'), 'coupon', ['user_id'])

    op.create_table(
        'promotion',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('discount_value', sa.BigInteger(), nullable=False),
        sa.Column('discount_type', sa.String(length=20), nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('usage_limit', sa.Integer(), nullable=True),
        sa.Column('usage_count', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id', 'code', name='uq_promotion_event_code'),
    )
    op.create_index(op.f('ix_promotion_event_id'), 'promotion', ['event_id'])

    # ========== Reviews ==========
    op.create_table(
        'review',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.String(length=2000), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'event_id', name='uq_review_user_event'),
        sa.CheckConstraint('rating BETWEEN 1 AND 5', name='ck_review_rating_range'),
    )
    op.create_index(op.f('ix_review_event_id'), 'review', ['event_id'])


def downgrade() -> None:
    """Drop all tables in reverse order of creation."""
    op.drop_table('review')
    op.drop_table('promotion')
    op.drop_table('coupon')
    op.drop_table('point_transaction')
    op.drop_table('ticket')
    op.drop_table('ticket_transaction')
    op.drop_table('seat_reservation')
    op.drop_table('event_tier')
    op.drop_table('event')
