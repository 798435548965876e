"""Initial Kanban schema.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000

Creates Users, Projects, ProjectMembers, Sections, Items, Tags and the
ItemTags association table with cascading foreign keys, the per-parent
unique position constraints and the single-owner partial index.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all Kanban tables."""
    op.create_table(
        'Users',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('email_verified_at', sa.DateTime(), nullable=True),
        sa.Column('display_name', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_Users_email', 'Users', ['email'], unique=True)

    op.create_table(
        'Projects',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('owner_user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('color', sa.String(length=7), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['owner_user_id'], ['Users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_user_id', 'name', name='uq_projects_owner_name'),
    )
    op.create_index('ix_Projects_owner_user_id', 'Projects', ['owner_user_id'])
    op.create_index('ix_Projects_created_at', 'Projects', ['created_at'])

    op.create_table(
        'ProjectMembers',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('project_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['Projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['Users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('project_id', 'user_id', name='uq_project_members_project_user'),
    )
    op.create_index('ix_ProjectMembers_project_id', 'ProjectMembers', ['project_id'])
    op.create_index('ix_ProjectMembers_user_id', 'ProjectMembers', ['user_id'])
    op.create_index(
        'uq_project_members_single_owner',
        'ProjectMembers',
        ['project_id'],
        unique=True,
        postgresql_where=sa.text("role = 'owner'"),
    )

    op.create_table(
        'Sections',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('project_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('filter_type', sa.String(length=20), nullable=False),
        sa.Column('filter_value', sa.JSON(), nullable=True),
        sa.Column('item_limit', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['Projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('project_id', 'position', name='uq_sections_project_position'),
    )
    op.create_index('ix_Sections_project_id', 'Sections', ['project_id'])

    op.create_table(
        'Tags',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('project_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('color', sa.String(length=7), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['Projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('project_id', 'name', name='uq_tags_project_name'),
    )
    op.create_index('ix_Tags_project_id', 'Tags', ['project_id'])

    op.create_table(
        'Items',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('section_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('creator_user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('assigned_to', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('priority', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['section_id'], ['Sections.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['creator_user_id'], ['Users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['assigned_to'], ['Users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('section_id', 'position', name='uq_items_section_position'),
    )
    op.create_index('ix_Items_section_id', 'Items', ['section_id'])
    op.create_index('ix_Items_creator_user_id', 'Items', ['creator_user_id'])
    op.create_index('ix_Items_assigned_to', 'Items', ['assigned_to'])
    op.create_index('ix_Items_due_date', 'Items', ['due_date'])

    op.create_table(
        'ItemTags',
        sa.Column('item_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('tag_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['item_id'], ['Items.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_id'], ['Tags.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('item_id', 'tag_id'),
    )
    op.create_index('ix_ItemTags_tag_id', 'ItemTags', ['tag_id'])


def downgrade() -> None:
    """Drop all Kanban tables."""
    op.drop_index('ix_ItemTags_tag_id', table_name='ItemTags')
    op.drop_table('ItemTags')
    op.drop_index('ix_Items_due_date', table_name='Items')
    op.drop_index('ix_Items_assigned_to', table_name='Items')
    op.drop_index('ix_Items_creator_user_id', table_name='Items')
    op.drop_index('ix_Items_section_id', table_name='Items')
    op.drop_table('Items')
    op.drop_index('ix_Tags_project_id', table_name='Tags')
    op.drop_table('Tags')
    op.drop_index('ix_Sections_project_id', table_name='Sections')
    op.drop_table('Sections')
    op.drop_index('uq_project_members_single_owner', table_name='ProjectMembers')
    op.drop_index('ix_ProjectMembers_user_id', table_name='ProjectMembers')
    op.drop_index('ix_ProjectMembers_project_id', table_name='ProjectMembers')
    op.drop_table('ProjectMembers')
    op.drop_index('ix_Projects_created_at', table_name='Projects')
    op.drop_index('ix_Projects_owner_user_id', table_name='Projects')
    op.drop_table('Projects')
    op.drop_index('ix_Users_email', table_name='Users')
    op.drop_table('Users')
