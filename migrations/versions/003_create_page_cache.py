"""create bluray_page_cache table

One row per canonical release-page URL: the raw HTML plus the spec and
rating fields derived from it when it was fetched.

See also: disc_specs/entities/cached_page.py (CachedPage entity)

Revision ID: 003
Revises: 002
Create Date: 2026-10-12 00:02:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '003'
down_revision = '002'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'bluray_page_cache',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('source_url', sa.String(length=1000), nullable=False),
        sa.Column('html_content', sa.Text(), nullable=False),
        sa.Column('derived_specs', sa.JSON(), nullable=True),
        sa.Column('derived_ratings', sa.JSON(), nullable=True),
        sa.Column('fetched_at', sa.DateTime(), nullable=False),
        sa.Column('last_accessed', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_bluray_page_cache_source_url'), 'bluray_page_cache', ['source_url'], unique=True
    )


def downgrade() -> None:
    op.drop_index(op.f('ix_bluray_page_cache_source_url'), table_name='bluray_page_cache')
    op.drop_table('bluray_page_cache')
