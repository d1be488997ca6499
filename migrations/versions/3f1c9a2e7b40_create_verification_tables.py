"""create verification tables

Revision ID: 3f1c9a2e7b40
Revises:
Create Date: 2026-10-17 09:12:31.402118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel

# revision identifiers, used by Alembic.
revision: str = '3f1c9a2e7b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

verification_type = sa.Enum('ID_NUMBER', 'PROPERTY', 'VEHICLE', 'BOTH', name='verificationtype')
session_status = sa.Enum('PENDING', 'IN_PROGRESS', 'COMPLETED', 'EXPIRED', name='sessionstatus')
check_status = sa.Enum('VERIFIED', 'FAILED', 'PENDING', 'SKIPPED', name='checkstatus')


def upgrade() -> None:
    op.create_table('verification_sessions',
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('id', sqlmodel.sql.sqltypes.AutoString(length=21), nullable=False),
        sa.Column('session_token', sqlmodel.sql.sqltypes.AutoString(length=32), nullable=False),
        sa.Column('buyer_phone', sqlmodel.sql.sqltypes.AutoString(length=32), nullable=False),
        sa.Column('buyer_email', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True),
        sa.Column('seller_phone', sqlmodel.sql.sqltypes.AutoString(length=32), nullable=False),
        sa.Column('verification_type', verification_type, nullable=False),
        sa.Column('status', session_status, nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_verification_sessions_session_token'), 'verification_sessions', ['session_token'], unique=True)

    op.create_table('verification_results',
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('id', sqlmodel.sql.sqltypes.AutoString(length=21), nullable=False),
        sa.Column('session_id', sa.String(length=21), nullable=False),
        sa.Column('id_verification_status', check_status, nullable=False),
        sa.Column('id_hash', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=True),
        sa.Column('name_match', sa.Boolean(), nullable=True),
        sa.Column('property_verification_status', check_status, nullable=False),
        sa.Column('property_reference', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=True),
        sa.Column('property_match', sa.Boolean(), nullable=True),
        sa.Column('vehicle_verification_status', check_status, nullable=False),
        sa.Column('vehicle_reference', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=True),
        sa.Column('vehicle_match', sa.Boolean(), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['session_id'], ['verification_sessions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_verification_results_session_id'), 'verification_results', ['session_id'], unique=True)


def downgrade() -> None:
    op.drop_index(op.f('ix_verification_results_session_id'), table_name='verification_results')
    op.drop_table('verification_results')
    op.drop_index(op.f('ix_verification_sessions_session_token'), table_name='verification_sessions')
    op.drop_table('verification_sessions')
    check_status.drop(op.get_bind(), checkfirst=True)
    session_status.drop(op.get_bind(), checkfirst=True)
    verification_type.drop(op.get_bind(), checkfirst=True)
