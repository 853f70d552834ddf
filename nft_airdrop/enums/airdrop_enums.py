"""
Airdrop-related enums for the application.
"""

from enum import Enum


class TransferState(str, Enum):
    # Intermediate
    VALIDATED = "validated"
    ELIGIBLE_CHECKED = "eligible_checked"
    ASSET_SELECTED = "asset_selected"
    TRANSFER_SUBMITTED = "transfer_submitted"

    # Terminal
    RECORDED = "recorded"
    REJECTED_INVALID = "rejected_invalid"
    REJECTED_ALREADY_SERVED = "rejected_already_served"
    FAILED_NO_ASSET = "failed_no_asset"
    FAILED_SUBMISSION = "failed_submission"
    FAILED_RECORD_COMMIT = "failed_record_commit"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({
    TransferState.RECORDED,
    TransferState.REJECTED_INVALID,
    TransferState.REJECTED_ALREADY_SERVED,
    TransferState.FAILED_NO_ASSET,
    TransferState.FAILED_SUBMISSION,
    TransferState.FAILED_RECORD_COMMIT,
})
