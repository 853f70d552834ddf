"""
API v1 routes package.
"""

from .airdrop_routes import router as airdrop_router

__all__ = [
    "airdrop_router",
]
