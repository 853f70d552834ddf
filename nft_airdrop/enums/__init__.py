"""
Shared enums for the application.
"""

from .airdrop_enums import TransferState, TERMINAL_STATES

__all__ = [
    "TransferState",
    "TERMINAL_STATES",
]
