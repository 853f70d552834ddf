"""
Airdrop Controller
Handles HTTP request/response logic for NFT airdrop endpoints
"""

from datetime import datetime, timezone
from typing import Dict, Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from nft_airdrop.core.config import settings
from nft_airdrop.core.logger import get_logger
from nft_airdrop.schemas.airdrop_schemas import (
    AirdropRecord,
    HealthResponse,
    HistoryResponse,
    StatsResponse,
    StatusResponse,
    TransferRequestInput,
)
from nft_airdrop.services.eligibility_service import EligibilityService
from nft_airdrop.services.transfer_orchestrator import TransferOrchestrator
from nft_airdrop.utils.validators import normalize_address

logger = get_logger("airdrop_controller")


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Stored timestamps are naive UTC
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def get_eligibility_service(request: Request) -> EligibilityService:
    return request.app.state.eligibility_service


def get_orchestrator(request: Request) -> Optional[TransferOrchestrator]:
    return getattr(request.app.state, "transfer_orchestrator", None)


class AirdropController:
    """Controller for airdrop operations."""

    @staticmethod
    async def transfer(request: Request, payload: TransferRequestInput) -> JSONResponse:
        """Run one airdrop request and map its outcome to an HTTP status."""
        orchestrator = get_orchestrator(request)
        if orchestrator is None:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="NFT transfers are not configured"
            )

        outcome = await orchestrator.execute(
            payload.transfer_content(),
            room_id=payload.room_id,
            agent_id=payload.agent_id or settings.AIRDROP_AGENT_ID,
        )
        logger.info(f"Airdrop request finished in state {outcome.state.value}")
        return JSONResponse(status_code=outcome.status_code, content=outcome.to_payload())

    @staticmethod
    async def get_status(request: Request, recipient: str) -> Dict:
        service = get_eligibility_service(request)
        text = await service.describe_status(recipient)
        return StatusResponse(text=text).model_dump()

    @staticmethod
    async def get_history(
        request: Request,
        recipient: Optional[str],
        room_id: Optional[str],
        agent_id: Optional[str],
        limit: Optional[int],
    ) -> Dict:
        service = get_eligibility_service(request)
        records = await service.ledger.history(
            recipient=normalize_address(recipient) if recipient else None,
            room_id=room_id,
            agent_id=agent_id,
            limit=limit,
        )
        data = [AirdropRecord.model_validate(r) for r in records]
        return HistoryResponse(success=True, data=data).model_dump(mode="json")

    @staticmethod
    async def get_stats(
        request: Request,
        room_id: Optional[str],
        agent_id: Optional[str],
        start_time: Optional[datetime],
        end_time: Optional[datetime],
    ) -> Dict:
        service = get_eligibility_service(request)
        stats = await service.ledger.stats(
            room_id=room_id,
            agent_id=agent_id,
            start_time=_naive_utc(start_time),
            end_time=_naive_utc(end_time),
        )
        return StatsResponse(
            total_airdrops=stats.total_count,
            unique_recipients=stats.unique_recipient_count,
        ).model_dump()

    @staticmethod
    async def get_health(request: Request) -> Dict:
        service = get_eligibility_service(request)
        return HealthResponse(
            cache_entries=len(service.cache),
            ledger_read_failures=service.ledger.read_failures,
            transfers_enabled=get_orchestrator(request) is not None,
        ).model_dump()
