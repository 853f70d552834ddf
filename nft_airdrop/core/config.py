import os
from dotenv import load_dotenv
from urllib.parse import quote_plus

load_dotenv()

class Settings:
    # Environment setting
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

    # db creds
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")
    DB_NAME = os.getenv("DB_NAME", "postgres")
    DB_PORT = os.getenv("DB_PORT", "5432")

    # Eligibility cache (per process)
    AIRDROP_CACHE_TTL_SECONDS = int(os.getenv("AIRDROP_CACHE_TTL_SECONDS", "300"))
    AIRDROP_CACHE_MAX_ENTRIES = int(os.getenv("AIRDROP_CACHE_MAX_ENTRIES", "10000"))

    # Default context key when the caller does not supply an agent id
    AIRDROP_AGENT_ID = os.getenv("AIRDROP_AGENT_ID", "nft-airdrop-agent")

    # Starknet account used to distribute tokens
    STARKNET_RPC_URL = os.getenv("STARKNET_RPC_URL")
    STARKNET_ADDRESS = os.getenv("STARKNET_ADDRESS")
    STARKNET_PRIVATE_KEY = os.getenv("STARKNET_PRIVATE_KEY")
    STARKNET_CHAIN = os.getenv("STARKNET_CHAIN", "SEPOLIA")

    # Retry policy for idempotent chain reads (never used for submission)
    CHAIN_READ_MAX_RETRIES = int(os.getenv("CHAIN_READ_MAX_RETRIES", "3"))
    CHAIN_READ_RETRY_DELAY = float(os.getenv("CHAIN_READ_RETRY_DELAY", "1.0"))
    CHAIN_READ_RETRY_MAX_DELAY = float(os.getenv("CHAIN_READ_RETRY_MAX_DELAY", "10.0"))

    LOG_DIR = os.getenv("LOG_DIR", "logs")

    # Build URL with SSL requirement based on environment
    def _build_database_url(self):
        override = os.getenv("DATABASE_URL")
        if override:
            return override
        base_url = f"postgresql+asyncpg://{self.DB_USER}:{quote_plus(self.DB_PASSWORD)}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        if self.ENVIRONMENT == "development":
            return base_url
        return f"{base_url}?ssl=require"

    @property
    def DATABASE_URL(self):
        return self._build_database_url()

    @property
    def starknet_configured(self) -> bool:
        return bool(self.STARKNET_RPC_URL and self.STARKNET_ADDRESS and self.STARKNET_PRIVATE_KEY)

settings = Settings()
