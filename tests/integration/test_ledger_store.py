"""
Integration tests for LedgerStore against a real SQLite ledger.

The uniqueness constraint, newest-first ordering, stats filters and the
degraded read path.
"""

import asyncio
from datetime import datetime, timedelta

import pytest
from sqlalchemy import func, select

from nft_airdrop.exceptions.errors import StoreReadError
from nft_airdrop.models.nft_airdrop import NFTAirdrop
from nft_airdrop.services.ledger_store import LedgerStore
from tests.conftest import CONTRACT, RECIPIENT_A, RECIPIENT_B


def _record(ledger, recipient=RECIPIENT_A, token_id="7", room_id="room-1", agent_id="agent-1", tx="0x1"):
    return ledger.record_distribution(
        recipient_address=recipient,
        nft_contract_address=CONTRACT,
        token_id=token_id,
        room_id=room_id,
        agent_id=agent_id,
        transaction_hash=tx,
    )


async def _insert_at(session_factory, recipient, token_id, airdropped_at, room_id="room-1", agent_id="agent-1"):
    async with session_factory() as session:
        session.add(NFTAirdrop(
            recipient_address=recipient,
            nft_contract_address=CONTRACT,
            token_id=token_id,
            transaction_hash=f"0x{token_id}",
            airdropped_at=airdropped_at,
            room_id=room_id,
            agent_id=agent_id,
        ))
        await session.commit()


@pytest.mark.asyncio
class TestRecordDistribution:
    """Test inserts and the uniqueness constraint."""

    async def test_first_insert_succeeds(self, ledger):
        """A new triple is recorded and becomes visible to has_served."""
        assert await _record(ledger) is True
        assert await ledger.has_served(RECIPIENT_A) is True
        assert await ledger.has_served(RECIPIENT_B) is False

    async def test_duplicate_triple_returns_false(self, ledger):
        """The second insert of the same triple is rejected without raising."""
        assert await _record(ledger) is True
        assert await _record(ledger, tx="0x2") is False

        history = await ledger.history(recipient=RECIPIENT_A)
        assert len(history) == 1
        assert history[0].transaction_hash == "0x1"

    async def test_context_keys_do_not_affect_uniqueness(self, ledger):
        """Same triple under another room/agent is still a duplicate."""
        assert await _record(ledger) is True
        assert await _record(ledger, room_id="room-2", agent_id="agent-2") is False

    async def test_concurrent_inserts_exactly_one_wins(self, ledger, session_factory):
        """Racing writers on one triple produce exactly one row."""
        results = await asyncio.gather(*[_record(ledger, tx=f"0x{i}") for i in range(8)])

        assert results.count(True) == 1
        async with session_factory() as session:
            count = await session.scalar(select(func.count(NFTAirdrop.id)))
        assert count == 1

    async def test_storage_failure_returns_false(self, broken_session_factory):
        """A missing table is a storage failure, reported as False."""
        ledger = LedgerStore(broken_session_factory)
        assert await _record(ledger) is False


@pytest.mark.asyncio
class TestHistory:
    """Test history ordering and filters."""

    async def test_newest_first(self, ledger, session_factory):
        base = datetime(2025, 1, 1, 12, 0, 0)
        await _insert_at(session_factory, RECIPIENT_A, "1", base)
        await _insert_at(session_factory, RECIPIENT_A, "3", base + timedelta(hours=2))
        await _insert_at(session_factory, RECIPIENT_A, "2", base + timedelta(hours=1))

        history = await ledger.history(recipient=RECIPIENT_A)

        assert [h.token_id for h in history] == ["3", "2", "1"]

    async def test_limit_and_filters(self, ledger, session_factory):
        base = datetime(2025, 1, 1, 12, 0, 0)
        await _insert_at(session_factory, RECIPIENT_A, "1", base, room_id="room-1")
        await _insert_at(session_factory, RECIPIENT_B, "2", base + timedelta(minutes=1), room_id="room-2")
        await _insert_at(session_factory, RECIPIENT_B, "3", base + timedelta(minutes=2), room_id="room-1")

        assert [h.token_id for h in await ledger.history(room_id="room-1")] == ["3", "1"]
        assert [h.token_id for h in await ledger.history(recipient=RECIPIENT_B, limit=1)] == ["3"]
        assert await ledger.history(agent_id="someone-else") == []

    async def test_read_failure_raises(self, broken_session_factory):
        ledger = LedgerStore(broken_session_factory)
        with pytest.raises(StoreReadError):
            await ledger.history(recipient=RECIPIENT_A)


@pytest.mark.asyncio
class TestStats:
    """Test totals, distinct recipients and time windows."""

    async def test_empty_ledger(self, ledger):
        stats = await ledger.stats()
        assert stats.total_count == 0
        assert stats.unique_recipient_count == 0

    async def test_counts_and_filters(self, ledger, session_factory):
        base = datetime(2025, 3, 1)
        await _insert_at(session_factory, RECIPIENT_A, "1", base)
        await _insert_at(session_factory, RECIPIENT_A, "2", base + timedelta(days=1))
        await _insert_at(session_factory, RECIPIENT_B, "3", base + timedelta(days=2), agent_id="agent-2")

        stats = await ledger.stats()
        assert (stats.total_count, stats.unique_recipient_count) == (3, 2)

        stats = await ledger.stats(agent_id="agent-1")
        assert (stats.total_count, stats.unique_recipient_count) == (2, 1)

        stats = await ledger.stats(start_time=base + timedelta(hours=12))
        assert (stats.total_count, stats.unique_recipient_count) == (2, 2)

        stats = await ledger.stats(end_time=base + timedelta(hours=12))
        assert (stats.total_count, stats.unique_recipient_count) == (1, 1)

    async def test_read_failure_raises(self, broken_session_factory):
        ledger = LedgerStore(broken_session_factory)
        with pytest.raises(StoreReadError):
            await ledger.stats()


@pytest.mark.asyncio
class TestDegradedReads:
    """has_served falls back to "not served" and counts the failure."""

    async def test_failed_read_degrades_to_false(self, broken_session_factory):
        ledger = LedgerStore(broken_session_factory)

        assert await ledger.has_served(RECIPIENT_A) is False
        assert ledger.read_failures == 1

    async def test_lookup_served_raises(self, broken_session_factory):
        ledger = LedgerStore(broken_session_factory)

        with pytest.raises(StoreReadError):
            await ledger.lookup_served(RECIPIENT_A)
        assert ledger.read_failures == 0
