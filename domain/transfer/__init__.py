"""Transfer domain exports."""
from .entity import TransferRequest, TransferOutcome
from .validator import REQUIRED_FIELDS, validate_transfer_payload

__all__ = [
    "TransferRequest",
    "TransferOutcome",
    "REQUIRED_FIELDS",
    "validate_transfer_payload",
]
