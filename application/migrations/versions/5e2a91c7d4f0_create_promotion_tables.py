"""create promotion tables

Revision ID: 5e2a91c7d4f0
Revises:
Create Date: 2026-10-19 10:12:41.503114

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5e2a91c7d4f0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def audit_columns():
    return [
        sa.Column('is_active', sa.String(1), nullable=False, server_default=sa.text("'Y'")),
        sa.Column('createdate', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('createdby', sa.Integer(), nullable=False, server_default=sa.text('1')),
        sa.Column('updatedate', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('updatedby', sa.Integer(), nullable=True),
    ]


def promotion_fk():
    return sa.Column('promotion_id', sa.Integer(), sa.ForeignKey('promotions.id', ondelete='CASCADE'), nullable=False, index=True)


def upgrade() -> None:
    """Upgrade schema."""
    # master data, owned by the back office
    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('code', sa.String(50), nullable=True),
        sa.Column('type', sa.String(50), nullable=True),
        *audit_columns(),
    )
    op.create_table(
        'customer_category',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('category_code', sa.String(50), nullable=False, unique=True),
        sa.Column('category_name', sa.String(255), nullable=False),
        *audit_columns(),
    )
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('code', sa.String(50), nullable=False),
        *audit_columns(),
    )
    op.create_table(
        'depots',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('code', sa.String(50), nullable=True),
        *audit_columns(),
    )

    op.create_table(
        'promotions',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('code', sa.String(50), nullable=False, unique=True, index=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_date', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('end_date', sa.TIMESTAMP(timezone=True), nullable=False),
        *audit_columns(),
    )
    op.create_index('idx_promotions_active_window', 'promotions', ['is_active', 'start_date', 'end_date'])

    op.create_table(
        'promotion_channels',
        sa.Column('id', sa.Integer(), primary_key=True),
        promotion_fk(),
        sa.Column('channel_type', sa.String(50), nullable=False),
        *audit_columns(),
    )
    op.create_table(
        'promotion_depots',
        sa.Column('id', sa.Integer(), primary_key=True),
        promotion_fk(),
        sa.Column('depot_id', sa.Integer(), sa.ForeignKey('depots.id'), nullable=False, index=True),
        *audit_columns(),
    )
    op.create_table(
        'promotion_salespersons',
        sa.Column('id', sa.Integer(), primary_key=True),
        promotion_fk(),
        sa.Column('salesperson_id', sa.Integer(), nullable=False, index=True),
        *audit_columns(),
    )
    op.create_table(
        'promotion_routes',
        sa.Column('id', sa.Integer(), primary_key=True),
        promotion_fk(),
        sa.Column('route_id', sa.Integer(), nullable=False, index=True),
        *audit_columns(),
    )
    op.create_table(
        'promotion_customer_categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        promotion_fk(),
        sa.Column('customer_category_id', sa.Integer(), sa.ForeignKey('customer_category.id'), nullable=False),
        *audit_columns(),
    )
    op.create_table(
        'promotion_customer_exclusions',
        sa.Column('id', sa.Integer(), primary_key=True),
        promotion_fk(),
        sa.Column('customer_id', sa.Integer(), nullable=False, index=True),
        sa.Column('is_excluded', sa.String(1), nullable=False, server_default=sa.text("'Y'")),
        *audit_columns(),
    )
    op.create_table(
        'promotion_conditions',
        sa.Column('id', sa.Integer(), primary_key=True),
        promotion_fk(),
        sa.Column('min_value', sa.DECIMAL(18, 2), nullable=True),
        sa.Column('max_value', sa.DECIMAL(18, 2), nullable=True),
        *audit_columns(),
    )
    op.create_table(
        'promotion_condition_products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('condition_id', sa.Integer(), sa.ForeignKey('promotion_conditions.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('product_id', sa.Integer(), nullable=True),
        sa.Column('category_id', sa.Integer(), nullable=True),
        sa.Column('product_group', sa.String(100), nullable=True),
        sa.Column('condition_quantity', sa.DECIMAL(18, 2), nullable=False, server_default='0'),
        *audit_columns(),
    )
    op.create_table(
        'promotion_levels',
        sa.Column('id', sa.Integer(), primary_key=True),
        promotion_fk(),
        sa.Column('level_number', sa.Integer(), nullable=False),
        sa.Column('threshold_value', sa.DECIMAL(18, 2), nullable=False),
        sa.Column('discount_type', sa.String(20), nullable=False, server_default=sa.text("'PERCENTAGE'")),
        sa.Column('discount_value', sa.DECIMAL(18, 2), nullable=True),
        *audit_columns(),
    )
    op.create_table(
        'promotion_benefits',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('level_id', sa.Integer(), sa.ForeignKey('promotion_levels.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('benefit_type', sa.String(30), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=True),
        sa.Column('benefit_value', sa.DECIMAL(18, 2), nullable=False, server_default='0'),
        sa.Column('gift_limit', sa.Integer(), nullable=True),
        *audit_columns(),
    )
    op.create_table(
        'promotion_tracking',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('parent_id', sa.Integer(), sa.ForeignKey('promotions.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('action_type', sa.String(30), nullable=False),
        sa.Column('action_date', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('comments', sa.Text(), nullable=True),
        *audit_columns(),
    )
    op.create_index('idx_promotion_tracking_action', 'promotion_tracking', ['parent_id', 'action_type', 'action_date'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_promotion_tracking_action', table_name='promotion_tracking')
    for table in (
        'promotion_tracking',
        'promotion_benefits',
        'promotion_levels',
        'promotion_condition_products',
        'promotion_conditions',
        'promotion_customer_exclusions',
        'promotion_customer_categories',
        'promotion_routes',
        'promotion_salespersons',
        'promotion_depots',
        'promotion_channels',
    ):
        op.drop_table(table)
    op.drop_index('idx_promotions_active_window', table_name='promotions')
    for table in ('promotions', 'depots', 'products', 'customer_category', 'customers'):
        op.drop_table(table)
