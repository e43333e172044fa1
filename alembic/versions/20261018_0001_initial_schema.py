"""Initial schema - paper workflow engine

Revision ID: 0001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users and roles
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(255), unique=True, nullable=False, index=True),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('credential_ref', sa.String(255), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        'user_roles',
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('role', sa.String(20), primary_key=True),
    )
    op.create_index('ix_user_roles_user_role', 'user_roles', ['user_id', 'role'])

    # Papers and versions
    op.create_table(
        'papers',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('current_version', sa.SmallInteger(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(30), nullable=False, server_default='DRAFT'),
        sa.Column('corresponding_author_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('current_version >= 0', name='ck_papers_current_version'),
    )
    op.create_index('ix_papers_status', 'papers', ['status'])

    op.create_table(
        'paper_versions',
        sa.Column('paper_id', sa.Integer(), sa.ForeignKey('papers.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('version', sa.SmallInteger(), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('abstract', sa.Text(), nullable=False),
        sa.Column('submission_date', sa.Date(), nullable=False),
        sa.Column('file_ref', sa.String(255), nullable=False),
        sa.Column('submitted_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.CheckConstraint('version >= 1', name='ck_paper_versions_version'),
    )

    # Reviews
    op.create_table(
        'reviews',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('paper_id', sa.Integer(), nullable=False),
        sa.Column('paper_version', sa.SmallInteger(), nullable=False),
        sa.Column('reviewer_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('score', sa.SmallInteger(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ['paper_id', 'paper_version'],
            ['paper_versions.paper_id', 'paper_versions.version'],
            ondelete='CASCADE',
        ),
        sa.CheckConstraint('score IS NULL OR (score BETWEEN 1 AND 5)', name='ck_reviews_score'),
    )
    op.create_index('ix_reviews_status', 'reviews', ['status'])
    op.create_index('ix_reviews_paper_version', 'reviews', ['paper_id', 'paper_version'])

    # Citations
    op.create_table(
        'citations',
        sa.Column('citing_paper_id', sa.Integer(), sa.ForeignKey('papers.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('cited_paper_id', sa.Integer(), sa.ForeignKey('papers.id', ondelete='CASCADE'), primary_key=True, index=True),
    )

    # Tags
    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(50), unique=True, nullable=False),
    )
    op.create_table(
        'paper_tags',
        sa.Column('paper_id', sa.Integer(), sa.ForeignKey('papers.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('tag_id', sa.Integer(), sa.ForeignKey('tags.id', ondelete='CASCADE'), primary_key=True),
    )

    # Audit log (append-only, no FK to audited tables)
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.BigInteger().with_variant(sa.Integer(), 'sqlite'), primary_key=True, autoincrement=True),
        sa.Column('table_name', sa.String(50), nullable=False),
        sa.Column('record_id', sa.String(100), nullable=False),
        sa.Column('action', sa.String(10), nullable=False),
        sa.Column('old_data', sa.JSON(), nullable=True),
        sa.Column('new_data', sa.JSON(), nullable=True),
        sa.Column('performed_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('performed_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, index=True),
    )
    op.create_index('ix_audit_logs_entity', 'audit_logs', ['table_name', 'record_id'])
    op.create_index('ix_audit_logs_user_time', 'audit_logs', ['performed_by', 'performed_at'])


def downgrade() -> None:
    op.drop_table('audit_logs')
    op.drop_table('paper_tags')
    op.drop_table('tags')
    op.drop_table('citations')
    op.drop_table('reviews')
    op.drop_table('paper_versions')
    op.drop_table('papers')
    op.drop_table('user_roles')
    op.drop_table('users')
