"""
Chain client interface.

The distributing account, its signer and the RPC transport live outside this
service. The orchestrator only needs an address, read calls and submission.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class TransferCall:
    """A single contract invocation ready for submission."""
    contract_address: str
    entrypoint: str
    calldata: List[int] = field(default_factory=list)


class ChainAccount(ABC):
    """Account handle able to read contracts and submit invocations."""

    @property
    @abstractmethod
    def address(self) -> str:
        ...

    @abstractmethod
    async def call(self, contract_address: str, entrypoint: str, calldata: List[int]) -> List[int]:
        """Read-only contract call returning raw felts."""

    @abstractmethod
    async def execute(self, call: TransferCall) -> str:
        """Submit `call` and return the transaction hash; raise on failure."""
