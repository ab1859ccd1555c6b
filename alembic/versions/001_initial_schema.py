"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'hotels',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('slug', sa.String(), nullable=True),
        sa.Column('address', sa.String(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug'),
    )
    op.create_index(op.f('ix_hotels_id'), 'hotels', ['id'], unique=False)

    op.create_table(
        'restaurants',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('restaurant_guid', sa.String(length=36), nullable=False),
        sa.Column('hotel_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('source_url', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('delivery_fee', sa.String(), nullable=False),
        sa.Column('service_fee_percent', sa.String(), nullable=False),
        sa.ForeignKeyConstraint(['hotel_id'], ['hotels.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_restaurants_id'), 'restaurants', ['id'], unique=False)
    op.create_index(op.f('ix_restaurants_restaurant_guid'), 'restaurants', ['restaurant_guid'], unique=True)

    op.create_table(
        'menus',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('restaurant_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.ForeignKeyConstraint(['restaurant_id'], ['restaurants.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_menus_id'), 'menus', ['id'], unique=False)

    op.create_table(
        'menu_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('menu_item_guid', sa.String(length=36), nullable=False),
        sa.Column('menu_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['menu_id'], ['menus.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_menu_items_id'), 'menu_items', ['id'], unique=False)
    op.create_index(op.f('ix_menu_items_menu_item_guid'), 'menu_items', ['menu_item_guid'], unique=True)

    op.create_table(
        'modifier_groups',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('modifier_group_guid', sa.String(length=36), nullable=False),
        sa.Column('menu_item_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('min_selections', sa.Integer(), nullable=True),
        sa.Column('max_selections', sa.Integer(), nullable=True),
        sa.Column('is_required', sa.Boolean(), nullable=True),
        sa.Column('is_multi_select', sa.Boolean(), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.ForeignKeyConstraint(['menu_item_id'], ['menu_items.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_modifier_groups_id'), 'modifier_groups', ['id'], unique=False)
    op.create_index(
        op.f('ix_modifier_groups_modifier_group_guid'), 'modifier_groups', ['modifier_group_guid'], unique=True
    )

    op.create_table(
        'modifier_options',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('modifier_option_guid', sa.String(length=36), nullable=False),
        sa.Column('modifier_group_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['modifier_group_id'], ['modifier_groups.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_modifier_options_id'), 'modifier_options', ['id'], unique=False)
    op.create_index(
        op.f('ix_modifier_options_modifier_option_guid'), 'modifier_options', ['modifier_option_guid'], unique=True
    )

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('restaurant_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('room_number', sa.String(), nullable=False),
        sa.Column('guest_name', sa.String(), nullable=True),
        sa.Column('guest_phone', sa.String(), nullable=True),
        sa.Column('guest_email', sa.String(), nullable=True),
        sa.Column('special_instructions', sa.Text(), nullable=True),
        sa.Column('total_amount', sa.String(), nullable=False),
        sa.Column('order_metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['restaurant_id'], ['restaurants.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_orders_id'), 'orders', ['id'], unique=False)

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('item_name', sa.String(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('modifiers', sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_order_items_id'), 'order_items', ['id'], unique=False)


def downgrade() -> None:
    for table in (
        'order_items',
        'orders',
        'modifier_options',
        'modifier_groups',
        'menu_items',
        'menus',
        'restaurants',
        'hotels',
    ):
        op.drop_index(op.f(f'ix_{table}_id'), table_name=table)
    op.drop_index(op.f('ix_modifier_options_modifier_option_guid'), table_name='modifier_options')
    op.drop_index(op.f('ix_modifier_groups_modifier_group_guid'), table_name='modifier_groups')
    op.drop_index(op.f('ix_menu_items_menu_item_guid'), table_name='menu_items')
    op.drop_index(op.f('ix_restaurants_restaurant_guid'), table_name='restaurants')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('modifier_options')
    op.drop_table('modifier_groups')
    op.drop_table('menu_items')
    op.drop_table('menus')
    op.drop_table('restaurants')
    op.drop_table('hotels')
