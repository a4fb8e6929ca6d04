"""Alembic 마이그레이션: products 테이블 추가"""
from alembic import op
import sqlalchemy as sa


revision = "0001_products"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """상품 테이블 생성"""
    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.String(500), nullable=False, server_default=''),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('price', sa.Numeric(18, 2), nullable=False),
        sa.Column('stock_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('price >= 0', name='ck_products_price_non_negative'),
        sa.CheckConstraint('stock_quantity >= 0', name='ck_products_stock_non_negative'),
        sa.CheckConstraint('updated_at >= created_at', name='ck_products_updated_after_created'),
    )

    # 검색 필터/정렬 인덱스
    op.create_index('ix_products_name', 'products', ['name'])
    op.create_index('ix_products_category', 'products', ['category'])
    op.create_index('ix_products_price', 'products', ['price'])
    op.create_index('idx_products_category_name', 'products', ['category', 'name'])


def downgrade():
    """테이블 삭제"""
    op.drop_index('idx_products_category_name', table_name='products')
    op.drop_index('ix_products_price', table_name='products')
    op.drop_index('ix_products_category', table_name='products')
    op.drop_index('ix_products_name', table_name='products')
    op.drop_table('products')
