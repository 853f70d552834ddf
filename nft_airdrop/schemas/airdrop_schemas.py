"""
Airdrop API Schemas
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional
from datetime import datetime


class TransferRequestInput(BaseModel):
    """Structured transfer request from the content extractor"""
    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "nftContractAddress": "0x00b1e866b32c772a26c5d42e8ebb50e08378bac49b01c0eea27a8bee1dd472a1",
                "recipient": "0x1234567890abcdef1234567890abcdef1234567890abcdef1234567890abcdef",
                "room_id": "room-42",
            }
        },
    )

    nftContractAddress: Optional[Any] = None
    assetContractAddress: Optional[Any] = None
    recipient: Optional[Any] = None
    recipients: Optional[List[Any]] = None
    room_id: str = Field(default="default", max_length=64, description="Conversation/session scope")
    agent_id: Optional[str] = Field(default=None, max_length=64, description="Agent scope; defaults to AIRDROP_AGENT_ID")

    def transfer_content(self) -> Dict[str, Any]:
        """Extractor fields only, without the context keys."""
        return self.model_dump(exclude={"room_id", "agent_id"}, exclude_none=True)


class ActionResponse(BaseModel):
    """Outcome text plus machine-readable content"""
    text: str
    content: Dict[str, Any] = Field(default_factory=dict)


class StatusResponse(BaseModel):
    text: str


class AirdropRecord(BaseModel):
    """One ledger entry"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    recipient_address: str
    nft_contract_address: str
    token_id: str
    transaction_hash: Optional[str] = None
    airdropped_at: datetime
    room_id: str
    agent_id: str


class HistoryResponse(BaseModel):
    success: bool
    data: List[AirdropRecord]


class StatsResponse(BaseModel):
    total_airdrops: int
    unique_recipients: int


class HealthResponse(BaseModel):
    cache_entries: int
    ledger_read_failures: int
    transfers_enabled: bool
