"""create scraping_queue table

Queue of titles waiting for technical-spec enrichment. The worker claims
rows by moving them from pending to processing with a conditional UPDATE,
and puts failed attempts back with a retry_after timestamp.

See also: disc_specs/entities/scrape_job.py (ScrapeJob entity)

Revision ID: 001
Revises: None
Create Date: 2026-10-12 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create scraping_queue with its claim-order and lookup indexes."""
    op.create_table(
        'scraping_queue',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('year', sa.Integer(), nullable=True),
        sa.Column('source_url', sa.String(length=1000), nullable=True),
        sa.Column('imdb_id', sa.String(length=20), nullable=True),
        sa.Column('search_query', sa.String(length=600), nullable=True),
        sa.Column('collection_item_id', sa.Integer(), nullable=True),
        sa.Column('requested_by', sa.String(length=100), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('priority', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('max_attempts', sa.Integer(), nullable=False, server_default='3'),
        sa.Column('retry_after', sa.DateTime(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('technical_specs_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('started_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_scraping_queue_status'), 'scraping_queue', ['status'])
    op.create_index(op.f('ix_scraping_queue_retry_after'), 'scraping_queue', ['retry_after'])
    op.create_index(op.f('ix_scraping_queue_imdb_id'), 'scraping_queue', ['imdb_id'])
    op.create_index(
        op.f('ix_scraping_queue_collection_item_id'), 'scraping_queue', ['collection_item_id']
    )
    op.create_index(
        'ix_scraping_queue_priority_created', 'scraping_queue', ['priority', 'created_at']
    )


def downgrade() -> None:
    op.drop_index('ix_scraping_queue_priority_created', table_name='scraping_queue')
    op.drop_index(op.f('ix_scraping_queue_collection_item_id'), table_name='scraping_queue')
    op.drop_index(op.f('ix_scraping_queue_imdb_id'), table_name='scraping_queue')
    op.drop_index(op.f('ix_scraping_queue_retry_after'), table_name='scraping_queue')
    op.drop_index(op.f('ix_scraping_queue_status'), table_name='scraping_queue')
    op.drop_table('scraping_queue')
