from fastapi import status
from fastapi.responses import JSONResponse

class ApplicationException(Exception):
    code = "application_error"

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def to_error(self) -> dict:
        """Machine-readable error carried in a response's `content.error`."""
        return {"code": self.code, "message": self.message}

    def to_response(self):
        return JSONResponse(
            status_code=self.status_code,
            content={"error": self.message, "code": self.code}
        )


class ValidationError(ApplicationException):
    """Malformed or missing transfer request fields. No side effects happened."""
    code = "invalid_request"

    def __init__(self, message: str):
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class AlreadyServedError(ApplicationException):
    """Soft outcome: the recipient already holds a distribution."""
    code = "already_served"

    def __init__(self, message: str = "Recipient already received NFT"):
        super().__init__(message, status.HTTP_409_CONFLICT)


class AssetUnavailableError(ApplicationException):
    """The distributing account holds no token of the requested contract."""
    code = "no_asset_available"

    def __init__(self, message: str = "No NFTs found in the distributing account"):
        super().__init__(message, 422)


class SubmissionError(ApplicationException):
    """Asset selection or transaction submission failed; nothing was recorded."""
    code = "submission_failed"

    def __init__(self, message: str):
        super().__init__(message, status.HTTP_502_BAD_GATEWAY)


class RecordCommitError(ApplicationException):
    """The transfer is on chain but the ledger write failed. Needs operator attention."""
    code = "record_commit_failed"

    def __init__(self, message: str, transaction_hash: str = None):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.transaction_hash = transaction_hash

    def to_error(self) -> dict:
        error = super().to_error()
        error["transaction_hash"] = self.transaction_hash
        return error


class StoreReadError(ApplicationException):
    """Ledger read failed. Logged and degraded, never shown to end users."""
    code = "store_read_failed"

    def __init__(self, message: str):
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)
