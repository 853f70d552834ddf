"""
Unit tests for the ERC721 helper: uint256 encoding, token selection reads and
the transferFrom instruction.
"""

import pytest

from nft_airdrop.chain.erc721 import (
    ERC721Token,
    TOKEN_OF_OWNER_BY_INDEX,
    TRANSFER_ENTRYPOINT,
    from_uint256,
    to_uint256,
)
from tests.conftest import CONTRACT, DISTRIBUTOR, RECIPIENT_A, FakeChainAccount


class TestUint256:
    """Token ids are split into (low, high) 128-bit felts."""

    def test_small_value_has_zero_high_part(self):
        assert to_uint256(42) == [42, 0]

    def test_large_value_splits(self):
        value = (5 << 128) + 17
        assert to_uint256(value) == [17, 5]
        assert from_uint256([17, 5]) == value

    def test_single_felt_result(self):
        assert from_uint256([9]) == 9

    def test_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            to_uint256(1 << 256)
        with pytest.raises(ValueError):
            to_uint256(-1)


@pytest.mark.asyncio
class TestTokenSelection:
    """token_of_owner_by_index reads through the account."""

    async def test_reads_first_owned_token(self):
        account = FakeChainAccount({CONTRACT: [11, 12]})
        token = ERC721Token(CONTRACT, account)

        assert await token.token_of_owner_by_index(DISTRIBUTOR, 0) == 11

        contract, entrypoint, calldata = account.reads[0]
        assert contract == CONTRACT
        assert entrypoint == TOKEN_OF_OWNER_BY_INDEX
        assert calldata == [int(DISTRIBUTOR, 16), 0, 0]

    async def test_no_holdings_reads_zero(self):
        token = ERC721Token(CONTRACT, FakeChainAccount())
        assert await token.token_of_owner_by_index(DISTRIBUTOR, 0) == 0


class TestTransferCall:
    """transferFrom(from, to, token_id) calldata layout."""

    def test_transfer_call_layout(self):
        token = ERC721Token(CONTRACT, FakeChainAccount())
        call = token.transfer_call(DISTRIBUTOR, RECIPIENT_A, 300)

        assert call.contract_address == CONTRACT
        assert call.entrypoint == TRANSFER_ENTRYPOINT
        assert call.calldata == [int(DISTRIBUTOR, 16), int(RECIPIENT_A, 16), 300, 0]
