"""create pages and blocks tables

Revision ID: 20261017_001
Revises:
Create Date: 2026-10-17

Blocks keep the three core columns (id, type, position) plus a single
structured content payload; translations sit in their own nullable column.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '20261017_001'
down_revision = None
branch_labels = None
depends_on = None

JSON_PAYLOAD = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        'pages',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.func.now()),
    )

    op.create_table(
        'blocks',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('page_id', sa.Integer,
                  sa.ForeignKey('pages.id', ondelete='CASCADE'), nullable=False),

        # Core columns
        sa.Column('type', sa.String(100), nullable=False),
        sa.Column('position', sa.Integer, nullable=True),

        # Payload
        sa.Column('content', JSON_PAYLOAD, nullable=False),
        sa.Column('translations', JSON_PAYLOAD, nullable=True),

        # Audit
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )

    op.create_index('ix_blocks_page_id', 'blocks', ['page_id'])
    op.create_index('idx_blocks_page_position', 'blocks', ['page_id', 'position'])


def downgrade() -> None:
    op.drop_index('idx_blocks_page_position', table_name='blocks')
    op.drop_index('ix_blocks_page_id', table_name='blocks')
    op.drop_table('blocks')
    op.drop_table('pages')
