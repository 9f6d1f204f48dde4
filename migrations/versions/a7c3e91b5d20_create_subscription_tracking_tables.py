"""create users, subscriptions and transactions tables

Revision ID: a7c3e91b5d20
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa


revision = 'a7c3e91b5d20'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column('email', sa.String(254), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(100), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_unique_constraint('uq_users_email', 'users', ['email'])

    op.create_table(
        'subscriptions',
        sa.Column('id', sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('service_name', sa.String(100), nullable=False),
        sa.Column('plan_type', sa.String(50), nullable=False),
        sa.Column('cost', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('billing_cycle', sa.String(16), nullable=False),
        sa.Column('next_billing_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(16), nullable=False, server_default='active'),
        sa.Column('category', sa.String(50), nullable=False, server_default='other'),
        sa.Column('payment_method', sa.String(32), nullable=False, server_default='credit_card'),
        sa.Column('auto_renewal', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_subscriptions_user_id', 'subscriptions', ['user_id'])
    op.create_index('ix_subscriptions_user_next_billing', 'subscriptions', ['user_id', 'next_billing_date'])
    op.create_index('ix_subscriptions_user_status', 'subscriptions', ['user_id', 'status'])

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column('subscription_id', sa.Integer(), sa.ForeignKey('subscriptions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('payment_method', sa.String(32), nullable=False),
        sa.Column('status', sa.String(16), nullable=False),
        sa.Column('receipt_url', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_transactions_subscription_id', 'transactions', ['subscription_id'])


def downgrade():
    op.drop_table('transactions')
    op.drop_table('subscriptions')
    op.drop_table('users')
