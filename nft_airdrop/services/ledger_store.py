"""
Airdrop Ledger Store
Durable record of completed NFT distributions; source of truth for "already served".
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
import logging

import cuid
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker

from nft_airdrop.exceptions.errors import StoreReadError
from nft_airdrop.models.nft_airdrop import NFTAirdrop

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AirdropStats:
    total_count: int
    unique_recipient_count: int


class LedgerStore:
    """
    Ledger of distributions backed by the `nft_airdrops` table.

    Uniqueness of (recipient, contract, token) is enforced by the database
    constraint on a single INSERT; no read precedes the write. Concurrent
    writers race on the constraint and exactly one wins.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory
        self.read_failures = 0

    async def lookup_served(self, recipient: str) -> bool:
        """Existence check that raises StoreReadError instead of degrading."""
        try:
            async with self.session_factory() as session:
                stmt = (
                    select(NFTAirdrop.id)
                    .where(NFTAirdrop.recipient_address == recipient)
                    .limit(1)
                )
                result = await session.execute(stmt)
                return result.first() is not None
        except Exception as e:
            raise StoreReadError(f"Failed to check airdrop status for {recipient}") from e

    def note_degraded_read(self, recipient: str, error: Exception) -> None:
        """Fallback policy for failed reads: count it, log it, answer "not served"."""
        self.read_failures += 1
        cause = error.__cause__ or error
        logger.error(
            f"LEDGER_READ_DEGRADED recipient={recipient} failures={self.read_failures}: {cause!r}"
        )

    async def has_served(self, recipient: str) -> bool:
        """True if any distribution exists for `recipient`. Never raises."""
        try:
            return await self.lookup_served(recipient)
        except StoreReadError as e:
            self.note_degraded_read(recipient, e)
            return False

    async def record_distribution(
        self,
        *,
        recipient_address: str,
        nft_contract_address: str,
        token_id: str,
        room_id: str,
        agent_id: str,
        transaction_hash: Optional[str] = None,
    ) -> bool:
        """
        Insert one distribution.

        Returns False, not an exception, when the uniqueness constraint
        rejects the row or the storage layer fails.
        """
        airdrop = NFTAirdrop(
            id=cuid.cuid(),
            recipient_address=recipient_address,
            nft_contract_address=nft_contract_address,
            token_id=str(token_id),
            transaction_hash=transaction_hash,
            airdropped_at=datetime.utcnow(),
            room_id=room_id,
            agent_id=agent_id,
        )

        try:
            async with self.session_factory() as session:
                session.add(airdrop)
                await session.commit()
        except IntegrityError:
            logger.warning(
                f"Duplicate airdrop rejected by ledger: recipient={recipient_address} "
                f"contract={nft_contract_address} token={token_id}"
            )
            return False
        except Exception as e:
            logger.error(f"Error recording NFT airdrop for {recipient_address}: {e}", exc_info=True)
            return False

        logger.info(f"Recorded airdrop {airdrop.id}: token {token_id} -> {recipient_address}")
        return True

    async def history(
        self,
        recipient: Optional[str] = None,
        room_id: Optional[str] = None,
        agent_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[NFTAirdrop]:
        """Distributions matching the filters, newest first."""
        stmt = select(NFTAirdrop)

        if room_id:
            stmt = stmt.where(NFTAirdrop.room_id == room_id)
        if agent_id:
            stmt = stmt.where(NFTAirdrop.agent_id == agent_id)
        if recipient:
            stmt = stmt.where(NFTAirdrop.recipient_address == recipient)

        stmt = stmt.order_by(NFTAirdrop.airdropped_at.desc(), NFTAirdrop.id.desc())

        if limit:
            stmt = stmt.limit(limit)

        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Error retrieving airdrop history: {e}")
            raise StoreReadError("Failed to retrieve airdrop history") from e

    async def stats(
        self,
        room_id: Optional[str] = None,
        agent_id: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> AirdropStats:
        """Total distributions and distinct recipients within the filters."""
        stmt = select(
            func.count(NFTAirdrop.id),
            func.count(func.distinct(NFTAirdrop.recipient_address)),
        )

        if room_id:
            stmt = stmt.where(NFTAirdrop.room_id == room_id)
        if agent_id:
            stmt = stmt.where(NFTAirdrop.agent_id == agent_id)
        if start_time:
            stmt = stmt.where(NFTAirdrop.airdropped_at >= start_time)
        if end_time:
            stmt = stmt.where(NFTAirdrop.airdropped_at <= end_time)

        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                total, unique = result.one()
        except Exception as e:
            logger.error(f"Error retrieving airdrop statistics: {e}")
            raise StoreReadError("Failed to retrieve airdrop statistics") from e

        return AirdropStats(total_count=total or 0, unique_recipient_count=unique or 0)
