"""add nft airdrops ledger table

Revision ID: 20250201_add_nft_airdrops
Revises:
Create Date: 2025-02-01
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20250201_add_nft_airdrops"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'nft_airdrops',
        sa.Column('id', sa.String(25), primary_key=True, index=True),
        sa.Column('recipient_address', sa.String(66), nullable=False),
        sa.Column('nft_contract_address', sa.String(66), nullable=False),
        sa.Column('token_id', sa.String(80), nullable=False),
        sa.Column('transaction_hash', sa.String(80), nullable=True),
        sa.Column('airdropped_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('room_id', sa.String(64), nullable=False),
        sa.Column('agent_id', sa.String(64), nullable=False),
        # One row per (recipient, contract, token); concurrent inserts race on this
        sa.UniqueConstraint(
            'recipient_address', 'nft_contract_address', 'token_id',
            name='uq_airdrop_recipient_contract_token',
        ),
    )

    op.create_index('ix_airdrop_recipient', 'nft_airdrops', ['recipient_address'])
    op.create_index('ix_airdrop_room_agent', 'nft_airdrops', ['room_id', 'agent_id'])


def downgrade() -> None:
    op.drop_index('ix_airdrop_room_agent', table_name='nft_airdrops')
    op.drop_index('ix_airdrop_recipient', table_name='nft_airdrops')
    op.drop_table('nft_airdrops')
