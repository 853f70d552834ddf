"""
Database package for the application.
"""

from .base import Base
from .connection import AsyncSessionLocal, engine, build_engine, build_session_factory

__all__ = [
    "Base",
    "AsyncSessionLocal",
    "engine",
    "build_engine",
    "build_session_factory",
]
