"""
Eligibility Service
Answers "has this recipient already been served?" from the cache, then the ledger.
"""

from datetime import datetime
from typing import List, Optional
import logging

from nft_airdrop.exceptions.errors import StoreReadError
from nft_airdrop.models.nft_airdrop import NFTAirdrop
from nft_airdrop.services.eligibility_cache import EligibilityCache
from nft_airdrop.services.ledger_store import LedgerStore
from nft_airdrop.utils.validators import normalize_address

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S UTC"


def format_timestamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)


class EligibilityService:
    """
    Cache-aside composition of EligibilityCache and LedgerStore.

    The cached answer is a latency optimisation only. It may be stale for up
    to the cache TTL or miss a write made by another process. The ledger
    constraint only rejects a repeat of the same (recipient, contract, token)
    triple, so a stale negative can let a different token through.
    """

    def __init__(self, ledger: LedgerStore, cache: EligibilityCache):
        self.ledger = ledger
        self.cache = cache

    async def check_eligibility(self, recipient: str) -> bool:
        """True when `recipient` has already received an airdrop."""
        recipient = normalize_address(recipient)

        cached = self.cache.get_status(recipient)
        if cached is not None:
            logger.debug(f"[Cache] Hit for airdrop-status:{recipient}")
            return cached

        logger.debug(f"[Cache] Miss for airdrop-status:{recipient}")
        try:
            served = await self.ledger.lookup_served(recipient)
        except StoreReadError as e:
            # Degraded answers are not cached
            self.ledger.note_degraded_read(recipient, e)
            return False

        self.cache.set_status(recipient, served)
        return served

    async def get_history(self, recipient: str, limit: int = 1) -> List[NFTAirdrop]:
        """Most recent distributions for `recipient`, cached per recipient."""
        recipient = normalize_address(recipient)

        cached = self.cache.get_history(recipient)
        if cached is not None:
            logger.debug(f"[Cache] Hit for airdrop-history:{recipient}")
            return cached

        logger.debug(f"[Cache] Miss for airdrop-history:{recipient}")
        history = await self.ledger.history(recipient=recipient, limit=limit)
        self.cache.set_history(recipient, history)
        return history

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
        """Write through to the ledger; refresh the cache only after a confirmed insert."""
        recipient_address = normalize_address(recipient_address)
        recorded = await self.ledger.record_distribution(
            recipient_address=recipient_address,
            nft_contract_address=normalize_address(nft_contract_address),
            token_id=token_id,
            transaction_hash=transaction_hash,
            room_id=room_id,
            agent_id=agent_id,
        )
        if recorded:
            self.cache.invalidate(recipient_address)
            self.cache.set_status(recipient_address, True)
        return recorded

    async def describe_status(self, recipient: str) -> str:
        """Human-readable airdrop status. Never raises."""
        try:
            recipient = normalize_address(recipient)

            if not await self.check_eligibility(recipient):
                return f"Address {recipient} has not received an NFT airdrop yet."

            history = await self.get_history(recipient, limit=1)
            if history:
                airdrop = history[0]
                text = (
                    f"Address {recipient} has already received an NFT ({airdrop.token_id}) "
                    f"on {format_timestamp(airdrop.airdropped_at)}."
                )
                if airdrop.transaction_hash:
                    text += f"\nTransaction hash: {airdrop.transaction_hash}"
                return text

            return f"Address {recipient} has already received an NFT."
        except Exception as e:
            logger.error(f"Error formatting airdrop status for address {recipient}: {e}")
            return f"Failed to fetch airdrop status for address {recipient}."
