"""topic_engine_schema

Revision ID: 5a1c2e7d9b40
Revises:
Create Date: 2026-10-19 09:30:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5a1c2e7d9b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('image', sa.String(length=1024), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)

    op.create_table(
        'topics',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('slug', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('aliases', sa.JSON(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_topics_id'), 'topics', ['id'], unique=False)
    op.create_index(op.f('ix_topics_slug'), 'topics', ['slug'], unique=True)

    op.create_table(
        'roadmaps',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=True),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('content', sa.JSON(), nullable=True),
        sa.Column('published', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        sa.Column('verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug')
    )
    op.create_index(op.f('ix_roadmaps_id'), 'roadmaps', ['id'], unique=False)
    op.create_index(op.f('ix_roadmaps_user_id'), 'roadmaps', ['user_id'], unique=False)
    op.create_index(op.f('ix_roadmaps_created_at'), 'roadmaps', ['created_at'], unique=False)

    op.create_table(
        'roadmap_progress',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('roadmap_id', sa.Integer(), nullable=False),
        sa.Column('percent', sa.Float(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['roadmap_id'], ['roadmaps.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('roadmap_id')
    )
    op.create_index(op.f('ix_roadmap_progress_id'), 'roadmap_progress', ['id'], unique=False)

    label_source = sa.Enum('ai', 'author', name='label_source')
    op.create_table(
        'roadmap_topics',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('roadmap_id', sa.Integer(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=True),
        sa.Column('topic_id', sa.Integer(), nullable=False),
        sa.Column('confidence', sa.Float(), nullable=False),
        sa.Column('is_primary', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('source', label_source, nullable=False, server_default='ai'),
        sa.ForeignKeyConstraint(['roadmap_id'], ['roadmaps.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['topic_id'], ['topics.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'roadmap_id', 'version_id', 'topic_id', name='uq_roadmap_topics_scope_topic'
        )
    )
    op.create_index(op.f('ix_roadmap_topics_id'), 'roadmap_topics', ['id'], unique=False)
    op.create_index(op.f('ix_roadmap_topics_roadmap_id'), 'roadmap_topics', ['roadmap_id'], unique=False)
    op.create_index(op.f('ix_roadmap_topics_topic_id'), 'roadmap_topics', ['topic_id'], unique=False)
    op.create_index(
        'uq_roadmap_topics_current_topic',
        'roadmap_topics',
        ['roadmap_id', 'topic_id'],
        unique=True,
        postgresql_where=sa.text('version_id IS NULL'),
        sqlite_where=sa.text('version_id IS NULL'),
    )

    op.create_table(
        'app_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('settings_json', sa.JSON(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id')
    )


def downgrade() -> None:
    op.drop_table('app_settings')

    op.drop_index('uq_roadmap_topics_current_topic', table_name='roadmap_topics')
    op.drop_index(op.f('ix_roadmap_topics_topic_id'), table_name='roadmap_topics')
    op.drop_index(op.f('ix_roadmap_topics_roadmap_id'), table_name='roadmap_topics')
    op.drop_index(op.f('ix_roadmap_topics_id'), table_name='roadmap_topics')
    op.drop_table('roadmap_topics')
    sa.Enum(name='label_source').drop(op.get_bind(), checkfirst=True)

    op.drop_index(op.f('ix_roadmap_progress_id'), table_name='roadmap_progress')
    op.drop_table('roadmap_progress')

    op.drop_index(op.f('ix_roadmaps_created_at'), table_name='roadmaps')
    op.drop_index(op.f('ix_roadmaps_user_id'), table_name='roadmaps')
    op.drop_index(op.f('ix_roadmaps_id'), table_name='roadmaps')
    op.drop_table('roadmaps')

    op.drop_index(op.f('ix_topics_slug'), table_name='topics')
    op.drop_index(op.f('ix_topics_id'), table_name='topics')
    op.drop_table('topics')

    op.drop_index(op.f('ix_users_id'), table_name='users')
    op.drop_table('users')
