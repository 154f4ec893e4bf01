"""Initial casebook schema

Revision ID: 202610190000
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '202610190000'
down_revision = None
branch_labels = None
depends_on = None


def _id():
    return sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def _case_fk():
    return sa.Column(
        'case_id', postgresql.UUID(as_uuid=True),
        sa.ForeignKey('cases.id', ondelete='CASCADE'), nullable=False, index=True,
    )


def upgrade() -> None:
    # ------------------------------
    # users
    # ------------------------------
    op.create_table(
        'users',
        _id(),
        sa.Column('email', sa.String(255), nullable=False, unique=True, index=True),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('role', sa.String(50), nullable=False, server_default='PUBLIC'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('failed_attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_locked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('token_version', sa.Integer(), nullable=False, server_default='1'),
        *_timestamps(),
    )
    op.create_index('ix_users_role', 'users', ['role'])

    # ------------------------------
    # journalist_profiles / publications
    # ------------------------------
    op.create_table(
        'journalist_profiles',
        _id(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True, index=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('experience', sa.Text(), nullable=True),
        sa.Column('specialization', sa.String(255), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('languages', sa.String(255), nullable=True),
        sa.Column('website', sa.String(512), nullable=True),
        sa.Column('social_media', sa.Text(), nullable=True),
        sa.Column('membership_tier', sa.String(30), nullable=False, server_default='ASSOCIATE'),
        sa.Column('verification_status', sa.String(30), nullable=False, server_default='PENDING', index=True),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('mentor_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('journalist_profiles.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'publications',
        _id(),
        sa.Column('journalist_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('journalist_profiles.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('outlet', sa.String(255), nullable=True),
        sa.Column('url', sa.String(1024), nullable=True),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    # ------------------------------
    # cases and children
    # ------------------------------
    op.create_table(
        'cases',
        _id(),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('slug', sa.String(600), nullable=False, unique=True, index=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('tags', sa.String(500), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('priority', sa.String(20), nullable=False, server_default='MEDIUM'),
        sa.Column('status', sa.String(30), nullable=False, server_default='DRAFT'),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('journalist_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('journalist_profiles.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_cases_status', 'cases', ['status'])
    op.create_index('ix_cases_is_public', 'cases', ['is_public'])
    op.create_index('ix_cases_journalist_id', 'cases', ['journalist_id'])

    op.create_table(
        'timeline_events',
        _id(),
        _case_fk(),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('event_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('event_type', sa.String(100), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'sources',
        _id(),
        _case_fk(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('source_type', sa.String(100), nullable=True),
        sa.Column('contact_info', sa.Text(), nullable=True),
        sa.Column('is_confidential', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reliability', sa.Integer(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'authorities',
        _id(),
        _case_fk(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('designation', sa.String(255), nullable=True),
        sa.Column('department', sa.String(255), nullable=True),
        sa.Column('contact_info', sa.Text(), nullable=True),
        sa.Column('response_status', sa.String(100), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'case_updates',
        _id(),
        _case_fk(),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('author_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'comments',
        _id(),
        _case_fk(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('content', sa.Text(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'case_subscriptions',
        _id(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        _case_fk(),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'case_id', name='uq_case_subscriptions_user_case'),
    )

    # ------------------------------
    # documents
    # ------------------------------
    op.create_table(
        'documents',
        _id(),
        _case_fk(),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('file_name', sa.String(500), nullable=False),
        sa.Column('file_path', sa.String(1024), nullable=False),
        sa.Column('file_type', sa.String(255), nullable=True),
        sa.Column('file_size', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('document_type', sa.String(30), nullable=False, server_default='EVIDENCE'),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('uploaded_by', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )

    # ------------------------------
    # notifications and email
    # ------------------------------
    op.create_table(
        'notifications',
        _id(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('priority', sa.String(20), nullable=False, server_default='MEDIUM'),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('entity_id', sa.String(64), nullable=True),
        sa.Column('entity_type', sa.String(50), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_notifications_user_id_is_read', 'notifications', ['user_id', 'is_read'])

    op.create_table(
        'email_subscriptions',
        _id(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('preferences', sa.JSON(), nullable=True),
        sa.Column('frequency', sa.String(20), nullable=False, server_default='DAILY'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        'email_queue',
        _id(),
        sa.Column('to_address', sa.String(255), nullable=False),
        sa.Column('subject', sa.String(500), nullable=False),
        sa.Column('html_content', sa.Text(), nullable=False),
        sa.Column('text_content', sa.Text(), nullable=True),
        sa.Column('template_id', sa.String(100), nullable=True),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_email_queue_status_attempts', 'email_queue', ['status', 'attempts'])

    # ------------------------------
    # verifications
    # ------------------------------
    op.create_table(
        'verifications',
        _id(),
        sa.Column('target_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('target_type', sa.String(20), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('confidence', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('evidence', sa.Text(), nullable=True),
        sa.Column('verifier_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('verifier_type', sa.String(20), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_verifications_target', 'verifications', ['target_type', 'target_id'])


def downgrade() -> None:
    op.drop_table('verifications')
    op.drop_table('email_queue')
    op.drop_table('email_subscriptions')
    op.drop_table('notifications')
    op.drop_table('documents')
    op.drop_table('case_subscriptions')
    op.drop_table('comments')
    op.drop_table('case_updates')
    op.drop_table('authorities')
    op.drop_table('sources')
    op.drop_table('timeline_events')
    op.drop_table('cases')
    op.drop_table('publications')
    op.drop_table('journalist_profiles')
    op.drop_table('users')
