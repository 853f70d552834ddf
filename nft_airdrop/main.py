import uvicorn
from fastapi import FastAPI, Request
from contextlib import asynccontextmanager
from fastapi.responses import JSONResponse
from nft_airdrop.exceptions.handlers import (
    application_exception_handler,
    http_exception_handler,
    generic_exception_handler
)
from nft_airdrop.exceptions.errors import ApplicationException
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError
from nft_airdrop.database.base import Base
from nft_airdrop.database.connection import engine, AsyncSessionLocal
from nft_airdrop.models import NFTAirdrop  # noqa: F401  (registers the table)
from nft_airdrop.services.eligibility_cache import EligibilityCache
from nft_airdrop.services.eligibility_service import EligibilityService
from nft_airdrop.services.ledger_store import LedgerStore
from nft_airdrop.services.transfer_orchestrator import TransferOrchestrator

from nft_airdrop.api.v1.routes import airdrop_router

from nft_airdrop.core.config import settings
from nft_airdrop.core.logger import get_logger

logger = get_logger("nft_airdrop")


def build_eligibility_service(session_factory=AsyncSessionLocal) -> EligibilityService:
    """One ledger and one cache per process; the cache is never shared across instances."""
    ledger = LedgerStore(session_factory)
    cache = EligibilityCache(
        ttl_seconds=settings.AIRDROP_CACHE_TTL_SECONDS,
        max_entries=settings.AIRDROP_CACHE_MAX_ENTRIES,
    )
    return EligibilityService(ledger, cache)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 NFT airdrop service is starting...")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Airdrop ledger tables ensured.")

        app.state.eligibility_service = build_eligibility_service()

        if settings.starknet_configured:
            from nft_airdrop.chain.starknet_account import build_starknet_account

            app.state.transfer_orchestrator = TransferOrchestrator(
                app.state.eligibility_service,
                build_starknet_account(),
            )
            logger.info(f"Transfers enabled from {settings.STARKNET_ADDRESS}")
        else:
            logger.warning("STARKNET_* settings missing; transfers are disabled.")

    except Exception as e:
        logger.error(f"Failed to initialize application: {e}")
        raise e

    yield

    await engine.dispose()
    logger.info("🛑 NFT airdrop service is shutting down...")


app = FastAPI(
    title="NFT Airdrop Service",
    version="1.0.0",
    lifespan=lifespan,
    description="""
    Distributes one NFT per recipient, exactly once.

    Eligibility is answered from a per-process cache in front of the airdrop
    ledger; the ledger's unique (recipient, contract, token) constraint is the
    final guard against double distribution.
    """,
)

app.include_router(airdrop_router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root():
    return {
        "message": "NFT Airdrop Service",
        "docs": "/docs",
        "version": "1.0.0"
    }


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Validation error on {request.url.path}: {exc.errors()}")

    errors = []
    for error in exc.errors():
        errors.append({
            "type": error.get("type"),
            "loc": error.get("loc"),
            "msg": error.get("msg"),
        })

    return JSONResponse(
        status_code=422,
        content={"detail": errors, "url": str(request.url), "method": request.method}
    )

# Exception handlers
app.add_exception_handler(ApplicationException, application_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

if __name__ == "__main__":
    uvicorn.run(
        "nft_airdrop.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
        timeout_keep_alive=30,
        timeout_graceful_shutdown=30
    )
