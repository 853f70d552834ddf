"""
Transfer request validation.

Checks the structured object produced by the content extractor before any
state is touched. Reasons are reported in a fixed precedence order and only
the first failing one is returned.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from nft_airdrop.exceptions.errors import ValidationError

ADDRESS_PREFIX = "0x"
ADDRESS_LENGTH = 66  # 0x + 32 bytes as hex
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")

MISSING_DETAILS = "Error: Missing transfer details"
CONTRACT_REQUIRED = "Error: Contract address required"
RECIPIENT_REQUIRED = "Error: Recipient address required"
SINGLE_RECIPIENT_ONLY = "Error: Only one recipient per request is supported"
INVALID_CONTRACT = "Error: Invalid contract address"
INVALID_RECIPIENT = "Error: Invalid recipient address"


@dataclass(frozen=True)
class TransferRequest:
    contract_address: str
    recipient: str


def is_valid_address(value: Any) -> bool:
    """True for a 0x-prefixed, 66 character hexadecimal string."""
    if not isinstance(value, str):
        return False
    if not value.startswith(ADDRESS_PREFIX) or len(value) != ADDRESS_LENGTH:
        return False
    return all(ch in _HEX_DIGITS for ch in value[len(ADDRESS_PREFIX):])


def normalize_address(address: str) -> str:
    return address.strip().lower()


def _contract_field(content: Mapping) -> Any:
    value = content.get("nftContractAddress")
    if _is_blank(value):
        value = content.get("assetContractAddress")
    return value


def _recipient_field(content: Mapping) -> Any:
    value = content.get("recipient")
    if not _is_blank(value):
        return value
    recipients = content.get("recipients")
    if isinstance(recipients, (list, tuple)) and len(recipients) == 1:
        return recipients[0]
    return None


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def get_transfer_error(content: Optional[Mapping]) -> str:
    """Return the first failing reason for `content`, or "" when it is valid."""
    if content is None or not isinstance(content, Mapping):
        return MISSING_DETAILS

    # Whitespace-only counts as missing; format checks see the raw value
    contract = _contract_field(content)
    if _is_blank(contract):
        return CONTRACT_REQUIRED

    recipient = _recipient_field(content)
    if _is_blank(recipient):
        recipients = content.get("recipients")
        if isinstance(recipients, (list, tuple)) and len(recipients) > 1:
            return SINGLE_RECIPIENT_ONLY
        return RECIPIENT_REQUIRED

    if not is_valid_address(contract):
        return INVALID_CONTRACT

    if not is_valid_address(recipient):
        return INVALID_RECIPIENT

    return ""


def parse_transfer_request(content: Optional[Mapping]) -> TransferRequest:
    """Validate `content` and return a normalised request, or raise ValidationError."""
    reason = get_transfer_error(content)
    if reason:
        raise ValidationError(reason)

    return TransferRequest(
        contract_address=normalize_address(_contract_field(content)),
        recipient=normalize_address(_recipient_field(content)),
    )
