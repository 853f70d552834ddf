"""
Pytest configuration and fixtures for the NFT airdrop service tests.

Unit tests use in-memory fakes only. Integration tests run against a fresh
SQLite file database per test (aiosqlite), so every ledger call goes through
real SQL and the real uniqueness constraint.
"""

from __future__ import annotations

import os
import tempfile

# Must be set before nft_airdrop is imported: the engine and logger read them at import time
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'nft_airdrop_app_test.db')}",
)
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "nft_airdrop_test_logs"))

from typing import AsyncGenerator, Dict, List, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker

from nft_airdrop.chain.base import ChainAccount, TransferCall
from nft_airdrop.chain.erc721 import TOKEN_OF_OWNER_BY_INDEX, from_uint256, to_uint256
from nft_airdrop.database import Base, build_engine, build_session_factory
from nft_airdrop.models import NFTAirdrop  # noqa: F401
from nft_airdrop.services.eligibility_cache import EligibilityCache
from nft_airdrop.services.eligibility_service import EligibilityService
from nft_airdrop.services.ledger_store import LedgerStore
from nft_airdrop.services.transfer_orchestrator import TransferOrchestrator

CONTRACT = "0x00b1e866b32c772a26c5d42e8ebb50e08378bac49b01c0eea27a8bee1dd472a1"
DISTRIBUTOR = "0x" + "d" * 64
RECIPIENT_A = "0x" + "a" * 64
RECIPIENT_B = "0x" + "b" * 64


# ============================================================================
# FAKES
# ============================================================================


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeChainAccount(ChainAccount):
    """
    In-memory distributing account.

    `holdings` maps contract -> token ids owned, in index order. A successful
    execute moves the token out of the holdings, like the real transfer would.
    """

    def __init__(self, holdings: Optional[Dict[str, List[int]]] = None, address: str = DISTRIBUTOR):
        self._address = address
        self.holdings = {k.lower(): list(v) for k, v in (holdings or {}).items()}
        self.reads: List[tuple] = []
        self.submitted: List[TransferCall] = []
        self.read_error: Optional[Exception] = None
        self.submit_error: Optional[Exception] = None
        self._tx_counter = 0

    @property
    def address(self) -> str:
        return self._address

    async def call(self, contract_address, entrypoint, calldata):
        self.reads.append((contract_address, entrypoint, list(calldata)))
        if self.read_error:
            raise self.read_error
        assert entrypoint == TOKEN_OF_OWNER_BY_INDEX
        index = from_uint256(calldata[1:3])
        tokens = self.holdings.get(contract_address.lower(), [])
        if index >= len(tokens):
            return [0, 0]
        return to_uint256(tokens[index])

    async def execute(self, call: TransferCall) -> str:
        if self.submit_error:
            raise self.submit_error
        self.submitted.append(call)
        token_id = from_uint256(call.calldata[2:4])
        self.holdings[call.contract_address.lower()].remove(token_id)
        self._tx_counter += 1
        return f"0x{self._tx_counter:064x}"


# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest_asyncio.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh ledger database per test, schema created from the models."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield build_session_factory(engine)

    await engine.dispose()


@pytest_asyncio.fixture
async def broken_session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """Database without the ledger table: every query fails."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    yield build_session_factory(engine)
    await engine.dispose()


# ============================================================================
# SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ledger(session_factory) -> LedgerStore:
    return LedgerStore(session_factory)


@pytest.fixture
def cache(clock) -> EligibilityCache:
    return EligibilityCache(ttl_seconds=300, max_entries=100, clock=clock)


@pytest.fixture
def eligibility_service(ledger, cache) -> EligibilityService:
    return EligibilityService(ledger, cache)


@pytest.fixture
def chain_account() -> FakeChainAccount:
    return FakeChainAccount({CONTRACT: [7, 8, 9]})


@pytest.fixture
def orchestrator(eligibility_service, chain_account) -> TransferOrchestrator:
    return TransferOrchestrator(eligibility_service, chain_account)


@pytest.fixture
def transfer_content() -> dict:
    return {"nftContractAddress": CONTRACT, "recipient": RECIPIENT_B}
