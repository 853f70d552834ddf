"""
Airdrop Routes
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Query, Request

from nft_airdrop.api.v1.controllers.airdrop_controller import AirdropController
from nft_airdrop.schemas.airdrop_schemas import (
    ActionResponse,
    HealthResponse,
    HistoryResponse,
    StatsResponse,
    StatusResponse,
    TransferRequestInput,
)

router = APIRouter(prefix="/airdrops", tags=["Airdrops"])


@router.post("/transfer", response_model=ActionResponse)
async def transfer_nft(payload: TransferRequestInput, request: Request):
    """
    Send one NFT from the distributing account to a recipient, at most once.

    - **nftContractAddress**: ERC721 contract (0x + 64 hex chars)
    - **recipient**: recipient wallet (0x + 64 hex chars)

    Returns the outcome text and `content.error` when nothing was recorded.
    """
    return await AirdropController.transfer(request, payload)


@router.get("/status/{recipient}", response_model=StatusResponse)
async def get_airdrop_status(recipient: str, request: Request):
    """Human-readable airdrop status for a recipient."""
    return await AirdropController.get_status(request, recipient)


@router.get("/history", response_model=HistoryResponse)
async def get_airdrop_history(
    request: Request,
    recipient: Optional[str] = None,
    room_id: Optional[str] = None,
    agent_id: Optional[str] = None,
    limit: Optional[int] = Query(default=50, ge=1, le=500),
):
    """Ledger entries, newest first."""
    return await AirdropController.get_history(request, recipient, room_id, agent_id, limit)


@router.get("/stats", response_model=StatsResponse)
async def get_airdrop_stats(
    request: Request,
    room_id: Optional[str] = None,
    agent_id: Optional[str] = None,
    start_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
):
    """Total airdrops and unique recipients."""
    return await AirdropController.get_stats(request, room_id, agent_id, start_time, end_time)


@router.get("/health", response_model=HealthResponse)
async def get_airdrop_health(request: Request):
    return await AirdropController.get_health(request)
