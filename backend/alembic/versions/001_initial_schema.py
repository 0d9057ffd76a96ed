"""initial schema: users, tokens, files

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    bind = op.get_bind()
    is_sqlite = bind.dialect.name == 'sqlite'

    timestamp_default = sa.text("(datetime('now'))") if is_sqlite else sa.text('now()')
    false_default = sa.text('0') if is_sqlite else sa.text('false')

    op.create_table(
        'users',
        sa.Column('id', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('device_id', sa.String(length=64), nullable=False),
        sa.Column('refresh_token', sa.String(length=255), nullable=False),
        sa.Column('access_token_hash', sa.String(length=64), nullable=True),
        sa.Column('is_revoked', sa.Boolean(), nullable=False, server_default=false_default),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tokens_id', 'tokens', ['id'])
    # Refresh lookups on every /signin/new_token
    op.create_index('ix_tokens_refresh_token', 'tokens', ['refresh_token'], unique=True)
    # Deny-list check on every authenticated request
    op.create_index('ix_tokens_access_token_hash', 'tokens', ['access_token_hash'])
    op.create_index('ix_tokens_user_device', 'tokens', ['user_id', 'device_id'])
    op.create_index('ix_tokens_revoked_expires', 'tokens', ['is_revoked', 'expires_at'])

    op.create_table(
        'files',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(length=255), nullable=False),
        sa.Column('original_name', sa.String(length=255), nullable=False),
        sa.Column('storage_name', sa.String(length=255), nullable=False),
        sa.Column('extension', sa.String(length=50), nullable=False, server_default=''),
        sa.Column('mime_type', sa.String(length=100), nullable=False),
        sa.Column('size', sa.BigInteger(), nullable=False),
        sa.Column('uploaded_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('storage_name'),
    )
    op.create_index('ix_files_id', 'files', ['id'])
    op.create_index('ix_files_owner_id', 'files', ['owner_id'])
    # Newest-first listing
    op.create_index('ix_files_uploaded_at', 'files', ['uploaded_at'])


def downgrade() -> None:
    op.drop_index('ix_files_uploaded_at', table_name='files')
    op.drop_index('ix_files_owner_id', table_name='files')
    op.drop_index('ix_files_id', table_name='files')
    op.drop_table('files')

    op.drop_index('ix_tokens_revoked_expires', table_name='tokens')
    op.drop_index('ix_tokens_user_device', table_name='tokens')
    op.drop_index('ix_tokens_access_token_hash', table_name='tokens')
    op.drop_index('ix_tokens_refresh_token', table_name='tokens')
    op.drop_index('ix_tokens_id', table_name='tokens')
    op.drop_table('tokens')

    op.drop_table('users')
