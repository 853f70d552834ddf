from sqlalchemy import Column, String, DateTime, UniqueConstraint, Index
from datetime import datetime
from nft_airdrop.database.base import Base
import cuid


class NFTAirdrop(Base):
    """
    One completed distribution of an NFT to a recipient.

    The (recipient, contract, token) constraint rejects recording the same
    token to the same recipient twice; nothing in the service updates or deletes rows.
    """
    __tablename__ = "nft_airdrops"

    id = Column(String(25), primary_key=True, index=True, default=lambda: cuid.cuid())
    recipient_address = Column(String(66), nullable=False)
    nft_contract_address = Column(String(66), nullable=False)
    token_id = Column(String(80), nullable=False)              # decimal string of the uint256 id
    transaction_hash = Column(String(80), nullable=True)
    airdropped_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Context keys: scope history/stats, never uniqueness
    room_id = Column(String(64), nullable=False)
    agent_id = Column(String(64), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "recipient_address", "nft_contract_address", "token_id",
            name="uq_airdrop_recipient_contract_token",
        ),
        Index("ix_airdrop_recipient", "recipient_address"),
        Index("ix_airdrop_room_agent", "room_id", "agent_id"),
    )

    def __repr__(self):
        return (
            f"<NFTAirdrop {self.id} recipient={self.recipient_address} "
            f"contract={self.nft_contract_address} token={self.token_id}>"
        )
