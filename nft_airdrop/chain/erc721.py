"""
ERC721 helper for Starknet contracts.

Token ids are uint256 values encoded as two felts (low 128 bits, high 128 bits).
"""

from typing import List, Sequence

from nft_airdrop.chain.base import ChainAccount, TransferCall

TRANSFER_ENTRYPOINT = "transferFrom"
TOKEN_OF_OWNER_BY_INDEX = "token_of_owner_by_index"

_UINT128_MASK = (1 << 128) - 1


def to_uint256(value: int) -> List[int]:
    if value < 0 or value >> 256:
        raise ValueError(f"Value out of uint256 range: {value}")
    return [value & _UINT128_MASK, value >> 128]


def from_uint256(felts: Sequence[int]) -> int:
    if len(felts) == 1:
        return int(felts[0])
    low, high = felts[0], felts[1]
    return int(low) + (int(high) << 128)


def to_felt(address: str) -> int:
    return int(address, 16)


class ERC721Token:
    def __init__(self, contract_address: str, account: ChainAccount):
        self.contract_address = contract_address
        self.account = account

    async def token_of_owner_by_index(self, owner: str, index: int) -> int:
        result = await self.account.call(
            self.contract_address,
            TOKEN_OF_OWNER_BY_INDEX,
            [to_felt(owner), *to_uint256(index)],
        )
        if not result:
            return 0
        return from_uint256(result)

    def transfer_call(self, from_address: str, to_address: str, token_id: int) -> TransferCall:
        return TransferCall(
            contract_address=self.contract_address,
            entrypoint=TRANSFER_ENTRYPOINT,
            calldata=[to_felt(from_address), to_felt(to_address), *to_uint256(token_id)],
        )
