"""
Transfer Orchestrator
Validates an airdrop request, selects a token, submits the transfer and records it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional
from weakref import WeakValueDictionary
import asyncio
import logging

from nft_airdrop.chain.base import ChainAccount
from nft_airdrop.chain.erc721 import ERC721Token
from nft_airdrop.enums import TransferState
from nft_airdrop.exceptions.errors import (
    ApplicationException,
    AlreadyServedError,
    AssetUnavailableError,
    RecordCommitError,
    SubmissionError,
    ValidationError,
)
from nft_airdrop.services.eligibility_service import EligibilityService
from nft_airdrop.utils.validators import TransferRequest, parse_transfer_request

logger = logging.getLogger(__name__)

INVALID_REQUEST_TEXT = (
    "Not enough information to transfer the NFT. "
    "Please provide the NFT contract address and recipient."
)


@dataclass
class TransferOutcome:
    state: TransferState
    text: str
    error: Optional[ApplicationException] = None
    request: Optional[TransferRequest] = None
    token_id: Optional[str] = None
    transaction_hash: Optional[str] = None
    states: List[TransferState] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == TransferState.RECORDED

    @property
    def status_code(self) -> int:
        return self.error.status_code if self.error else 200

    def to_payload(self) -> Dict[str, Any]:
        """`{"text", "content"}` payload for the conversational caller."""
        content: Dict[str, Any] = {"state": self.state.value}
        if self.error:
            content["error"] = self.error.to_error()
        if self.token_id is not None:
            content["token_id"] = self.token_id
        if self.transaction_hash:
            content["transaction_hash"] = self.transaction_hash
        return {"text": self.text, "content": content}


class TransferOrchestrator:
    """
    Runs one airdrop request through
    VALIDATED -> ELIGIBLE_CHECKED -> ASSET_SELECTED -> TRANSFER_SUBMITTED -> RECORDED.

    Every failure ends in a terminal state on the returned outcome; nothing
    is raised to the caller and nothing is retried here.
    """

    def __init__(self, eligibility: EligibilityService, account: ChainAccount, token_index: int = 0):
        self.eligibility = eligibility
        self.account = account
        self.token_index = token_index
        self._recipient_locks: "WeakValueDictionary[str, asyncio.Lock]" = WeakValueDictionary()

    def _lock_for(self, recipient: str) -> asyncio.Lock:
        # Serialises same-recipient requests inside this process only
        lock = self._recipient_locks.get(recipient)
        if lock is None:
            lock = asyncio.Lock()
            self._recipient_locks[recipient] = lock
        return lock

    async def execute(
        self,
        content: Optional[Mapping],
        room_id: str,
        agent_id: str,
    ) -> TransferOutcome:
        logger.info("Starting SEND_NFT transfer...")

        try:
            request = parse_transfer_request(content)
        except ValidationError as e:
            logger.error(f"Invalid content for NFT transfer: {e.message}")
            return TransferOutcome(
                state=TransferState.REJECTED_INVALID,
                text=f"{INVALID_REQUEST_TEXT} ({e.message})",
                error=e,
                states=[TransferState.REJECTED_INVALID],
            )

        lock = self._lock_for(request.recipient)
        async with lock:
            try:
                return await self._distribute(request, room_id, agent_id)
            except Exception as e:
                logger.exception(f"Unexpected error during NFT transfer to {request.recipient}")
                return TransferOutcome(
                    state=TransferState.FAILED_SUBMISSION,
                    text="Error transferring NFT: unexpected error",
                    error=SubmissionError(str(e)),
                    request=request,
                )

    async def _distribute(self, request: TransferRequest, room_id: str, agent_id: str) -> TransferOutcome:
        states = [TransferState.VALIDATED]

        def finish(state: TransferState, text: str, **kwargs) -> TransferOutcome:
            states.append(state)
            logger.debug(f"Transfer to {request.recipient}: {' -> '.join(s.value for s in states)}")
            return TransferOutcome(state=state, text=text, request=request, states=states, **kwargs)

        if await self.eligibility.check_eligibility(request.recipient):
            status_text = await self.eligibility.describe_status(request.recipient)
            return finish(
                TransferState.REJECTED_ALREADY_SERVED,
                status_text,
                error=AlreadyServedError(),
            )
        states.append(TransferState.ELIGIBLE_CHECKED)

        token = ERC721Token(request.contract_address, self.account)
        try:
            token_id = await token.token_of_owner_by_index(self.account.address, self.token_index)
        except Exception as e:
            logger.error(f"Error selecting NFT from {request.contract_address}: {e}")
            return finish(
                TransferState.FAILED_SUBMISSION,
                f"Error transferring NFT: {e}",
                error=SubmissionError(str(e)),
            )

        if not token_id:
            logger.error(f"No NFTs found in the account for contract {request.contract_address}")
            return finish(
                TransferState.FAILED_NO_ASSET,
                "No NFTs are available to transfer from this collection.",
                error=AssetUnavailableError(),
            )
        states.append(TransferState.ASSET_SELECTED)

        call = token.transfer_call(self.account.address, request.recipient, token_id)
        logger.info(
            f"Transferring NFT ID {token_id} from {request.contract_address} to {request.recipient}"
        )
        try:
            tx_hash = await self.account.execute(call)
        except Exception as e:
            logger.error(f"Error during NFT transfer: {e}")
            return finish(
                TransferState.FAILED_SUBMISSION,
                f"Error transferring NFT: {e}",
                error=SubmissionError(str(e)),
                token_id=str(token_id),
            )

        if not tx_hash:
            return finish(
                TransferState.FAILED_SUBMISSION,
                "Error transferring NFT: no transaction hash returned",
                error=SubmissionError("No transaction hash returned"),
                token_id=str(token_id),
            )
        states.append(TransferState.TRANSFER_SUBMITTED)

        recorded = await self.eligibility.record_distribution(
            recipient_address=request.recipient,
            nft_contract_address=request.contract_address,
            token_id=str(token_id),
            transaction_hash=tx_hash,
            room_id=room_id,
            agent_id=agent_id,
        )
        if not recorded:
            logger.critical(
                "RECORD_COMMIT_FAILED: transfer is on chain but not in the ledger "
                f"recipient={request.recipient} contract={request.contract_address} "
                f"token={token_id} tx={tx_hash}"
            )
            return finish(
                TransferState.FAILED_RECORD_COMMIT,
                f"NFT was transferred (tx: {tx_hash}) but the airdrop could not be recorded. "
                "An operator needs to reconcile it.",
                error=RecordCommitError("Transfer succeeded but ledger write failed", tx_hash),
                token_id=str(token_id),
                transaction_hash=tx_hash,
            )

        logger.info(f"NFT transfer completed successfully! tx: {tx_hash}")
        return finish(
            TransferState.RECORDED,
            f"NFT transfer completed successfully! tx: {tx_hash}",
            token_id=str(token_id),
            transaction_hash=tx_hash,
        )
