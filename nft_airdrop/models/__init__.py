"""
Models package for the application.
"""

from .nft_airdrop import NFTAirdrop

__all__ = [
    "NFTAirdrop",
]
