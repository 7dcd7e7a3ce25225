"""create bluray_technical_specs and bluray_ratings tables

Technical specs are keyed by (title, year, disc_format) and ratings by
(title, year); both are overwritten when a title is scraped again.

See also: disc_specs/entities/technical_spec.py, disc_specs/entities/disc_rating.py

Revision ID: 002
Revises: 001
Create Date: 2026-10-12 00:01:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None

RATING_FIELDS = ('video_4k', 'video_2k', 'three_d', 'audio', 'extras', 'overall')


def upgrade() -> None:
    op.create_table(
        'bluray_technical_specs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('year', sa.Integer(), nullable=True),
        sa.Column('disc_format', sa.String(length=20), nullable=False),
        sa.Column('imdb_id', sa.String(length=20), nullable=True),
        sa.Column('source_url', sa.String(length=1000), nullable=True),
        sa.Column('video_codec', sa.String(length=100), nullable=True),
        sa.Column('video_resolution', sa.String(length=50), nullable=True),
        sa.Column('hdr_format', sa.JSON(), nullable=True),
        sa.Column('aspect_ratio', sa.String(length=50), nullable=True),
        sa.Column('original_aspect_ratio', sa.String(length=50), nullable=True),
        sa.Column('audio_tracks', sa.JSON(), nullable=True),
        sa.Column('audio_codecs', sa.JSON(), nullable=True),
        sa.Column('audio_channels', sa.JSON(), nullable=True),
        sa.Column('audio_languages', sa.JSON(), nullable=True),
        sa.Column('subtitles', sa.JSON(), nullable=True),
        sa.Column('discs', sa.JSON(), nullable=True),
        sa.Column('disc_count', sa.Integer(), nullable=True),
        sa.Column('packaging', sa.Text(), nullable=True),
        sa.Column('playback_info', sa.String(length=255), nullable=True),
        sa.Column('digital_copy_included', sa.Boolean(), nullable=True),
        sa.Column('edition_cover_url', sa.String(length=1000), nullable=True),
        sa.Column('runtime_minutes', sa.Integer(), nullable=True),
        sa.Column('studio', sa.String(length=255), nullable=True),
        sa.Column('data_quality', sa.String(length=10), nullable=False, server_default='minimal'),
        sa.Column('last_scraped_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('title', 'year', 'disc_format', name='uq_specs_title_year_format'),
    )
    op.create_index(op.f('ix_bluray_technical_specs_title'), 'bluray_technical_specs', ['title'])
    op.create_index(op.f('ix_bluray_technical_specs_imdb_id'), 'bluray_technical_specs', ['imdb_id'])
    op.create_index(
        op.f('ix_bluray_technical_specs_data_quality'), 'bluray_technical_specs', ['data_quality']
    )
    op.create_index(
        op.f('ix_bluray_technical_specs_last_scraped_at'), 'bluray_technical_specs', ['last_scraped_at']
    )

    op.create_table(
        'bluray_ratings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('year', sa.Integer(), nullable=True),
        *(sa.Column(name, sa.Float(), nullable=True) for name in RATING_FIELDS),
        sa.Column('source_url', sa.String(length=1000), nullable=True),
        sa.Column('last_scraped_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('title', 'year', name='uq_ratings_title_year'),
        *(
            sa.CheckConstraint(
                f'{name} IS NULL OR ({name} >= 0 AND {name} <= 5)', name=f'ck_{name}_range'
            )
            for name in RATING_FIELDS
        ),
    )
    op.create_index(op.f('ix_bluray_ratings_title'), 'bluray_ratings', ['title'])


def downgrade() -> None:
    op.drop_index(op.f('ix_bluray_ratings_title'), table_name='bluray_ratings')
    op.drop_table('bluray_ratings')
    op.drop_index(op.f('ix_bluray_technical_specs_last_scraped_at'), table_name='bluray_technical_specs')
    op.drop_index(op.f('ix_bluray_technical_specs_data_quality'), table_name='bluray_technical_specs')
    op.drop_index(op.f('ix_bluray_technical_specs_imdb_id'), table_name='bluray_technical_specs')
    op.drop_index(op.f('ix_bluray_technical_specs_title'), table_name='bluray_technical_specs')
    op.drop_table('bluray_technical_specs')
