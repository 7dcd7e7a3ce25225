"""link physical_media_collections to bluray_technical_specs

The collection table belongs to the watchlist app; this revision only adds
the nullable technical_specs_id column the worker fills in.

Revision ID: 004
Revises: 003
Create Date: 2026-10-12 00:03:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '004'
down_revision = '003'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column(
        'physical_media_collections',
        sa.Column('technical_specs_id', sa.Integer(), nullable=True),
    )
    op.create_foreign_key(
        'fk_collections_technical_specs',
        'physical_media_collections',
        'bluray_technical_specs',
        ['technical_specs_id'],
        ['id'],
        ondelete='SET NULL',
    )
    op.create_index(
        op.f('ix_physical_media_collections_technical_specs_id'),
        'physical_media_collections',
        ['technical_specs_id'],
    )


def downgrade() -> None:
    op.drop_index(
        op.f('ix_physical_media_collections_technical_specs_id'),
        table_name='physical_media_collections',
    )
    op.drop_constraint('fk_collections_technical_specs', 'physical_media_collections', type_='foreignkey')
    op.drop_column('physical_media_collections', 'technical_specs_id')
