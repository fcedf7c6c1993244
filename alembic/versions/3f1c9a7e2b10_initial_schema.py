"""initial schema

Revision ID: 3f1c9a7e2b10
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7e2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the integration, mirrored collection and sync bookkeeping tables."""
    op.create_table('integrations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(length=50), nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('avatar_url', sa.String(length=500), nullable=False),
        sa.Column('access_token', sa.String(length=255), nullable=False),
        sa.Column('granted_scopes', sa.JSON(), nullable=False),
        sa.Column('last_synced_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id')
    )
    op.create_table('organizations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(length=50), nullable=False),
        sa.Column('org_id', sa.Integer(), nullable=False),
        sa.Column('login', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('url', sa.String(length=500), nullable=False),
        sa.Column('public_repo_count', sa.Integer(), nullable=False),
        sa.Column('member_count', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id', 'org_id', name='uq_owner_org')
    )
    op.create_index('ix_organizations_owner_id', 'organizations', ['owner_id'])
    op.create_table('external_users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(length=50), nullable=False),
        sa.Column('external_id', sa.Integer(), nullable=False),
        sa.Column('login', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('avatar_url', sa.String(length=500), nullable=False),
        sa.Column('url', sa.String(length=500), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id', 'external_id', name='uq_owner_external_user')
    )
    op.create_index('ix_external_users_owner_id', 'external_users', ['owner_id'])
    op.create_table('repositories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(length=50), nullable=False),
        sa.Column('repo_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('full_name', sa.String(length=200), nullable=False),
        sa.Column('is_private', sa.Boolean(), nullable=False),
        sa.Column('url', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('language', sa.String(length=100), nullable=True),
        sa.Column('fork_count', sa.Integer(), nullable=False),
        sa.Column('star_count', sa.Integer(), nullable=False),
        sa.Column('open_issue_count', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id', 'repo_id', name='uq_owner_repo')
    )
    op.create_index('ix_repositories_owner_id', 'repositories', ['owner_id'])
    op.create_table('commits',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(length=50), nullable=False),
        sa.Column('repo_full_name', sa.String(length=200), nullable=False),
        sa.Column('sha', sa.String(length=40), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('author_name', sa.String(length=200), nullable=False),
        sa.Column('author_login', sa.String(length=100), nullable=False),
        sa.Column('committed_at', sa.DateTime(), nullable=True),
        sa.Column('url', sa.String(length=500), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id', 'repo_full_name', 'sha', name='uq_owner_repo_commit')
    )
    op.create_index('ix_commits_owner_id', 'commits', ['owner_id'])
    op.create_index('ix_commits_repo_full_name', 'commits', ['repo_full_name'])
    op.create_table('pull_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(length=50), nullable=False),
        sa.Column('repo_full_name', sa.String(length=200), nullable=False),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('state', sa.String(length=20), nullable=False),
        sa.Column('author_login', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('merged_at', sa.DateTime(), nullable=True),
        sa.Column('url', sa.String(length=500), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id', 'repo_full_name', 'number', name='uq_owner_repo_pull')
    )
    op.create_index('ix_pull_requests_owner_id', 'pull_requests', ['owner_id'])
    op.create_index('ix_pull_requests_repo_full_name', 'pull_requests', ['repo_full_name'])
    op.create_table('issues',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(length=50), nullable=False),
        sa.Column('repo_full_name', sa.String(length=200), nullable=False),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('state', sa.String(length=20), nullable=False),
        sa.Column('author_login', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('closed_at', sa.DateTime(), nullable=True),
        sa.Column('url', sa.String(length=500), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id', 'repo_full_name', 'number', name='uq_owner_repo_issue')
    )
    op.create_index('ix_issues_owner_id', 'issues', ['owner_id'])
    op.create_index('ix_issues_repo_full_name', 'issues', ['repo_full_name'])
    op.create_table('releases',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(length=50), nullable=False),
        sa.Column('repo_full_name', sa.String(length=200), nullable=False),
        sa.Column('release_id', sa.Integer(), nullable=False),
        sa.Column('tag_name', sa.String(length=200), nullable=False),
        sa.Column('name', sa.String(length=500), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        sa.Column('url', sa.String(length=500), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id', 'repo_full_name', 'release_id', name='uq_owner_repo_release')
    )
    op.create_index('ix_releases_owner_id', 'releases', ['owner_id'])
    op.create_index('ix_releases_repo_full_name', 'releases', ['repo_full_name'])
    op.create_table('sync_status',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(length=50), nullable=False),
        sa.Column('users', sa.Boolean(), nullable=False),
        sa.Column('organizations', sa.Boolean(), nullable=False),
        sa.Column('repos', sa.Boolean(), nullable=False),
        sa.Column('commits', sa.Boolean(), nullable=False),
        sa.Column('pulls', sa.Boolean(), nullable=False),
        sa.Column('issues', sa.Boolean(), nullable=False),
        sa.Column('changelogs', sa.Boolean(), nullable=False),
        sa.Column('all_synced', sa.Boolean(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id')
    )
    op.create_table('sync_leases',
        sa.Column('owner_id', sa.String(length=50), nullable=False),
        sa.Column('token', sa.String(length=64), nullable=False),
        sa.Column('acquired_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('owner_id')
    )


def downgrade() -> None:
    """Drop every table."""
    op.drop_table('sync_leases')
    op.drop_table('sync_status')
    for table in ('releases', 'issues', 'pull_requests', 'commits'):
        op.drop_index(f'ix_{table}_repo_full_name', table_name=table)
        op.drop_index(f'ix_{table}_owner_id', table_name=table)
        op.drop_table(table)
    for table in ('repositories', 'external_users', 'organizations'):
        op.drop_index(f'ix_{table}_owner_id', table_name=table)
        op.drop_table(table)
    op.drop_table('integrations')
