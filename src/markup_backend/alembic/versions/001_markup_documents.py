"""Create organizations, sites, users, profiles and markup documents

Revision ID: 001_markup_documents
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '001_markup_documents'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'organization',
        sa.Column('id', sa.String(255), primary_key=True),
        *_timestamps(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.String(4096)),
    )

    op.create_table(
        'site',
        sa.Column('id', sa.String(255), primary_key=True),
        *_timestamps(),
        sa.Column('organization_id', sa.String(255), sa.ForeignKey('organization.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('address', sa.String(1024)),
        sa.Column('status', sa.Enum('active', 'inactive', 'completed', name='site_status'), server_default='active', nullable=False),
    )
    op.create_index('ix_site_organization_id', 'site', ['organization_id'])

    op.create_table(
        'user',
        sa.Column('id', sa.String(255), primary_key=True),
        *_timestamps(),
        sa.Column('archived_at', sa.DateTime(timezone=True)),
        sa.Column('email', sa.String(320), nullable=False, unique=True),
        sa.Column('username', sa.String(255), unique=True),
        sa.Column('user_type', sa.Enum('user', 'token', name='user_type'), server_default='user', nullable=False),
        sa.Column('token_expiration', sa.DateTime(timezone=True)),
        sa.Column('password', sa.String(255)),
        sa.Column('auth_token', sa.String(64), unique=True),
        sa.CheckConstraint("(user_type <> 'token') OR (token_expiration IS NOT NULL)", name='ck_user_token_expiration'),
    )

    op.create_table(
        'profile',
        sa.Column('id', sa.String(255), sa.ForeignKey('user.id', ondelete='CASCADE'), primary_key=True),
        *_timestamps(),
        sa.Column('email', sa.String(320)),
        sa.Column('full_name', sa.String(255)),
        sa.Column('role', sa.Enum('worker', 'site_manager', 'customer_manager', 'admin', 'system_admin', name='profile_role'),
                  server_default='worker', nullable=False),
        sa.Column('status', sa.Enum('active', 'inactive', 'suspended', name='profile_status'),
                  server_default='active', nullable=False),
        sa.Column('organization_id', sa.String(255), sa.ForeignKey('organization.id', ondelete='SET NULL')),
        sa.Column('site_id', sa.String(255), sa.ForeignKey('site.id', ondelete='SET NULL')),
    )
    op.create_index('ix_profile_organization_id', 'profile', ['organization_id'])
    op.create_index('ix_profile_site_id', 'profile', ['site_id'])

    op.create_table(
        'markup_document',
        sa.Column('id', sa.String(36), primary_key=True),
        *_timestamps(),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.String(4096)),
        sa.Column('original_blueprint_url', sa.String(2048), nullable=False),
        sa.Column('original_blueprint_filename', sa.String(1024), nullable=False),
        sa.Column('markup_data', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('preview_image_url', sa.String(2048)),
        sa.Column('location', sa.Enum('personal', 'shared', name='markup_document_location'),
                  server_default='personal', nullable=False),
        sa.Column('created_by', sa.String(255), sa.ForeignKey('profile.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('site_id', sa.String(255), sa.ForeignKey('site.id', ondelete='SET NULL')),
        sa.Column('is_deleted', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('file_size', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.Column('markup_count', sa.Integer(), server_default=sa.text('0'), nullable=False),
    )
    op.create_index('markup_document_visibility_idx', 'markup_document', ['is_deleted', 'location', 'site_id'])
    op.create_index('markup_document_created_by_idx', 'markup_document', ['created_by'])
    op.create_index('markup_document_created_at_idx', 'markup_document', ['created_at'])


def downgrade() -> None:
    op.drop_table('markup_document')
    op.drop_table('profile')
    op.drop_table('user')
    op.drop_table('site')
    op.drop_table('organization')

    for enum_name in ('markup_document_location', 'profile_status', 'profile_role', 'user_type', 'site_status'):
        op.execute(f"DROP TYPE IF EXISTS {enum_name}")
