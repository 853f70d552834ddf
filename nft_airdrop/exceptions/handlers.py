from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from nft_airdrop.exceptions.errors import ApplicationException
import logging

logger = logging.getLogger(__name__)


def _route(request: Request) -> str:
    return f"{request.method} {request.url.path}"


async def application_exception_handler(request: Request, exc: ApplicationException):
    # 5xx means the ledger or chain misbehaved, not the caller
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"{_route(request)} -> {exc.status_code} {exc.code}: {exc.message}")
    return exc.to_response()


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.info(f"{_route(request)} -> {exc.status_code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail}
    )


async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {_route(request)}: {exc!r}")
    return JSONResponse(
        status_code=500,
        content={"error": "An unexpected error occurred"}
    )
