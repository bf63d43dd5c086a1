"""initial schema

Revision ID: 001
Revises:
Create Date: 2025-10-15 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TRANSLATION_TABLES = (
    ('gemstone_type_translations', 'type_code'),
    ('gem_color_translations', 'color_code'),
    ('gem_cut_translations', 'cut_code'),
    ('gem_clarity_translations', 'clarity_code'),
)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    # Create origins table
    op.create_table(
        'origins',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False, unique=True),
        sa.Column('country', sa.String(length=100), nullable=True),
        *_timestamps(),
    )

    # Create gemstones table
    op.create_table(
        'gemstones',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('serial_number', sa.String(length=64), nullable=False, unique=True),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('color', sa.String(length=50), nullable=False),
        sa.Column('cut', sa.String(length=50), nullable=False),
        sa.Column('clarity', sa.String(length=50), nullable=False),
        sa.Column('type_code', sa.String(length=50), nullable=False),
        sa.Column('color_code', sa.String(length=50), nullable=False),
        sa.Column('cut_code', sa.String(length=50), nullable=False),
        sa.Column('clarity_code', sa.String(length=50), nullable=False),
        sa.Column('weight_carats', sa.Numeric(precision=8, scale=3), nullable=False),
        sa.Column('length_mm', sa.Numeric(precision=8, scale=2), nullable=True),
        sa.Column('width_mm', sa.Numeric(precision=8, scale=2), nullable=True),
        sa.Column('depth_mm', sa.Numeric(precision=8, scale=2), nullable=True),
        sa.Column('price_amount', sa.Integer(), nullable=False),
        sa.Column('price_currency', sa.String(length=3), nullable=False, server_default='USD'),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('in_stock', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('primary_image_url', sa.Text(), nullable=True),
        sa.Column('primary_video_url', sa.Text(), nullable=True),
        sa.Column('origin_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('origins.id', ondelete='SET NULL'), nullable=True),
        sa.Column('ai_analyzed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('ai_color', sa.String(length=50), nullable=True),
        sa.Column('ai_cut', sa.String(length=50), nullable=True),
        sa.Column('ai_color_confidence', sa.Numeric(precision=4, scale=3), nullable=True),
        sa.Column('ai_cut_confidence', sa.Numeric(precision=4, scale=3), nullable=True),
        sa.Column('ai_confidence_score', sa.Numeric(precision=4, scale=3), nullable=True),
        sa.Column('technical_description_en', sa.Text(), nullable=True),
        sa.Column('technical_description_ru', sa.Text(), nullable=True),
        sa.Column('narrative_story_en', sa.Text(), nullable=True),
        sa.Column('narrative_story_ru', sa.Text(), nullable=True),
        sa.Column('promotional_text', sa.Text(), nullable=True),
        sa.Column('promotional_text_ru', sa.Text(), nullable=True),
        sa.Column('marketing_highlights', postgresql.ARRAY(sa.Text()), nullable=True),
        sa.Column('marketing_highlights_ru', postgresql.ARRAY(sa.Text()), nullable=True),
        sa.Column('search_vector_en', postgresql.TSVECTOR(), nullable=True),
        sa.Column('search_vector_ru', postgresql.TSVECTOR(), nullable=True),
        sa.Column('description_vector_en', postgresql.TSVECTOR(), nullable=True),
        sa.Column('description_vector_ru', postgresql.TSVECTOR(), nullable=True),
        *_timestamps(),
    )

    op.create_index('ix_gemstones_type_code', 'gemstones', ['type_code'])
    op.create_index('ix_gemstones_color_code', 'gemstones', ['color_code'])
    op.create_index('ix_gemstones_cut_code', 'gemstones', ['cut_code'])
    op.create_index('ix_gemstones_clarity_code', 'gemstones', ['clarity_code'])
    op.create_index('idx_gemstones_visible', 'gemstones', ['price_amount', 'created_at'])
    for column in ('search_vector_en', 'search_vector_ru', 'description_vector_en', 'description_vector_ru'):
        op.create_index(f'idx_gemstones_{column}', 'gemstones', [column], postgresql_using='gin')

    # Create gemstone_images and certifications tables
    op.create_table(
        'gemstone_images',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('gemstone_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('gemstones.id', ondelete='CASCADE'), nullable=False),
        sa.Column('image_url', sa.Text(), nullable=False),
        sa.Column('image_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_primary', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('ix_gemstone_images_gemstone_id', 'gemstone_images', ['gemstone_id'])

    op.create_table(
        'certifications',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('gemstone_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('gemstones.id', ondelete='CASCADE'), nullable=False),
        sa.Column('lab_name', sa.String(length=100), nullable=False),
        sa.Column('certificate_number', sa.String(length=100), nullable=True),
        sa.Column('certificate_url', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_certifications_gemstone_id', 'certifications', ['gemstone_id'])

    # Create translation tables
    for table, code_column in TRANSLATION_TABLES:
        op.create_table(
            table,
            sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
            sa.Column(code_column, sa.String(length=50), nullable=False),
            sa.Column('locale', sa.String(length=8), nullable=False),
            sa.Column('name', sa.Text(), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.UniqueConstraint(code_column, 'locale'),
        )

    # Create search_analytics table
    op.create_table(
        'search_analytics',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('search_query', sa.Text(), nullable=False),
        sa.Column('filters', postgresql.JSON(astext_type=sa.Text()), nullable=True),
        sa.Column('results_count', sa.Integer(), nullable=False),
        sa.Column('used_fuzzy_search', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('session_id', sa.String(length=128), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    op.create_index('ix_search_analytics_search_query', 'search_analytics', ['search_query'])
    op.create_index('ix_search_analytics_user_id', 'search_analytics', ['user_id'])
    op.create_index('ix_search_analytics_session_id', 'search_analytics', ['session_id'])
    op.create_index('idx_search_analytics_created_at', 'search_analytics', ['created_at'])
    op.create_index(
        'idx_search_analytics_zero_results', 'search_analytics', ['results_count'],
        postgresql_where=sa.text('results_count = 0')
    )

    # Create orders, order_items, order_events and cart_items tables
    op.create_table(
        'orders',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('order_number', sa.String(length=32), nullable=False, unique=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('status', sa.Enum(
            'pending', 'confirmed', 'processing', 'shipped', 'delivered', 'cancelled',
            name='order_status', native_enum=False
        ), nullable=False),
        sa.Column('total_amount', sa.Integer(), nullable=False),
        sa.Column('currency_code', sa.String(length=3), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_orders_user_id', 'orders', ['user_id'])

    op.create_table(
        'order_items',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('gemstone_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('gemstones.id'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('unit_price', sa.Integer(), nullable=False),
        sa.Column('line_total', sa.Integer(), nullable=False),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])

    op.create_table(
        'order_events',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('event_type', sa.String(length=50), nullable=False),
        sa.Column('severity', sa.Enum(
            'info', 'warning', 'error', 'success',
            name='event_severity', native_enum=False
        ), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('metadata', postgresql.JSON(astext_type=sa.Text()), nullable=True),
        sa.Column('performed_by', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('performed_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('is_internal', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    op.create_index('ix_order_events_event_type', 'order_events', ['event_type'])
    op.create_index('idx_order_events_order_performed_at', 'order_events', ['order_id', 'performed_at'])

    op.create_table(
        'cart_items',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('gemstone_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('gemstones.id', ondelete='CASCADE'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'gemstone_id'),
    )
    op.create_index('ix_cart_items_user_id', 'cart_items', ['user_id'])


def downgrade() -> None:
    # Drop tables in reverse dependency order; indexes go with them
    op.drop_table('cart_items')
    op.drop_table('order_events')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('search_analytics')
    for table, _ in reversed(TRANSLATION_TABLES):
        op.drop_table(table)
    op.drop_table('certifications')
    op.drop_table('gemstone_images')
    op.drop_table('gemstones')
    op.drop_table('origins')
