"""add_handle_system

Revision ID: 8d2f5a61c4e7
Revises: 4b1c7e2a9d30
Create Date: 2026-10-02 14:37:09.861145

"""
from datetime import datetime
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '8d2f5a61c4e7'
down_revision: Union[str, Sequence[str], None] = '4b1c7e2a9d30'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Catalog as of this revision; later additions belong in new revisions.
RESERVED_HANDLES_SEED = [
    # System/admin
    ('admin', 'System reserved'),
    ('administrator', 'System reserved'),
    ('support', 'System reserved'),
    ('help', 'System reserved'),
    ('api', 'System reserved'),
    ('team', 'System reserved'),
    ('staff', 'System reserved'),
    ('official', 'System reserved'),
    ('verified', 'System reserved'),
    ('root', 'System reserved'),
    ('system', 'System reserved'),
    # Route segments
    ('me', 'System path'),
    ('u', 'System path'),
    ('user', 'System path'),
    ('users', 'System path'),
    ('athlete', 'System path'),
    ('athletes', 'System path'),
    ('club', 'System path'),
    ('clubs', 'System path'),
    ('league', 'System path'),
    ('leagues', 'System path'),
    ('app', 'System path'),
    ('dashboard', 'System path'),
    ('settings', 'System path'),
    ('profile', 'System path'),
    ('account', 'System path'),
    ('search', 'System path'),
    ('handles', 'System path'),
    # Literals that break clients
    ('null', 'Technical term'),
    ('undefined', 'Technical term'),
    ('true', 'Technical term'),
    ('false', 'Technical term'),
    # Sports, held for official accounts
    ('golf', 'Sport name'),
    ('basketball', 'Sport name'),
    ('football', 'Sport name'),
    ('soccer', 'Sport name'),
    ('baseball', 'Sport name'),
    ('hockey', 'Sport name'),
    ('volleyball', 'Sport name'),
    ('tennis', 'Sport name'),
    ('swimming', 'Sport name'),
    ('trackandfield', 'Sport name'),
    # Brand
    ('edgeathletes', 'Brand protection'),
    ('edgeathlete', 'Brand protection'),
    ('edge', 'Brand protection'),
]


def upgrade() -> None:
    """Add handle columns to profiles, create handle_history and reserved_handles."""
    op.add_column('profiles', sa.Column('handle', sa.String(length=20), nullable=True))
    op.add_column('profiles', sa.Column('handle_updated_at', sa.DateTime(), nullable=True))
    op.add_column(
        'profiles',
        sa.Column('handle_change_count', sa.Integer(), server_default='0', nullable=False),
    )
    op.create_index('ix_profiles_handle', 'profiles', ['handle'], unique=False)
    # Case-insensitive uniqueness; the rename race is settled by this index.
    op.create_index(
        'uq_profiles_handle_lower',
        'profiles',
        [sa.text('lower(handle)')],
        unique=True,
    )

    op.create_table('handle_history',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('profile_id', sa.UUID(), nullable=False),
        sa.Column('old_handle', sa.Text(), nullable=False),
        sa.Column('new_handle', sa.Text(), nullable=False),
        sa.Column('changed_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('profile_id', 'old_handle', 'changed_at', name='uq_handle_history_entry'),
    )
    op.create_index(
        'ix_handle_history_profile_changed',
        'handle_history',
        ['profile_id', 'changed_at'],
        unique=False,
    )
    op.create_index(
        'ix_handle_history_old_handle_lower',
        'handle_history',
        [sa.text('lower(old_handle)')],
        unique=False,
    )

    reserved_handles = op.create_table('reserved_handles',
        sa.Column('handle', sa.String(length=50), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('reserved_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('handle'),
    )

    now = datetime.utcnow()
    op.bulk_insert(
        reserved_handles,
        [
            {'handle': handle, 'reason': reason, 'reserved_at': now}
            for handle, reason in RESERVED_HANDLES_SEED
        ],
    )


def downgrade() -> None:
    """Drop handle tables and columns."""
    op.drop_table('reserved_handles')
    op.drop_index('ix_handle_history_old_handle_lower', table_name='handle_history')
    op.drop_index('ix_handle_history_profile_changed', table_name='handle_history')
    op.drop_table('handle_history')
    op.drop_index('uq_profiles_handle_lower', table_name='profiles')
    op.drop_index('ix_profiles_handle', table_name='profiles')
    op.drop_column('profiles', 'handle_change_count')
    op.drop_column('profiles', 'handle_updated_at')
    op.drop_column('profiles', 'handle')
