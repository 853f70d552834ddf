"""
Starknet implementation of ChainAccount backed by starknet-py.

Installed with the `starknet` extra. Reads are retried with backoff;
submissions are sent exactly once.
"""

from typing import List

from starknet_py.hash.selector import get_selector_from_name
from starknet_py.net.account.account import Account
from starknet_py.net.client_models import Call
from starknet_py.net.full_node_client import FullNodeClient
from starknet_py.net.models import StarknetChainId
from starknet_py.net.signer.stark_curve_signer import KeyPair

from nft_airdrop.chain.base import ChainAccount, TransferCall
from nft_airdrop.core.config import settings
from nft_airdrop.core.logger import get_logger
from nft_airdrop.utils.retry import retry_async

logger = get_logger("starknet_account")


def _to_call(contract_address: str, entrypoint: str, calldata: List[int]) -> Call:
    return Call(
        to_addr=int(contract_address, 16),
        selector=get_selector_from_name(entrypoint),
        calldata=list(calldata),
    )


class StarknetChainAccount(ChainAccount):
    def __init__(self, rpc_url: str, address: str, private_key: str, chain: str = "SEPOLIA"):
        self._address = address.lower()
        self._client = FullNodeClient(node_url=rpc_url)
        self._account = Account(
            client=self._client,
            address=address,
            key_pair=KeyPair.from_private_key(int(private_key, 16)),
            chain=StarknetChainId[chain.upper()],
        )

    @property
    def address(self) -> str:
        return self._address

    async def call(self, contract_address: str, entrypoint: str, calldata: List[int]) -> List[int]:
        call = _to_call(contract_address, entrypoint, calldata)
        return await retry_async(
            lambda: self._client.call_contract(call=call, block_number="latest"),
            max_retries=settings.CHAIN_READ_MAX_RETRIES,
            delay=settings.CHAIN_READ_RETRY_DELAY,
            max_delay=settings.CHAIN_READ_RETRY_MAX_DELAY,
            description=f"{entrypoint} on {contract_address}",
        )

    async def execute(self, call: TransferCall) -> str:
        response = await self._account.execute_v3(
            calls=[_to_call(call.contract_address, call.entrypoint, call.calldata)],
            auto_estimate=True,
        )
        tx_hash = hex(response.transaction_hash)
        logger.info(f"Submitted {call.entrypoint} on {call.contract_address}: {tx_hash}")
        return tx_hash


def build_starknet_account() -> StarknetChainAccount:
    """Build the distributing account from STARKNET_* settings."""
    return StarknetChainAccount(
        rpc_url=settings.STARKNET_RPC_URL,
        address=settings.STARKNET_ADDRESS,
        private_key=settings.STARKNET_PRIVATE_KEY,
        chain=settings.STARKNET_CHAIN,
    )
