"""
Domain error taxonomy.

Every error is a recoverable, caller-facing condition. The HTTP layer maps
``code`` to a status code; nothing here is fatal to the process.
"""
from typing import Optional


class FulfillmentError(Exception):
    """Base class for all fulfillment errors."""

    code = "fulfillment_error"

    def __init__(self, message: str, *, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class NotFoundError(FulfillmentError):
    """Referenced order, item or plan does not exist."""

    code = "not_found"


class PermissionDeniedError(FulfillmentError):
    """Actor does not own the resource they are operating on."""

    code = "permission_denied"


class InvalidStateError(FulfillmentError):
    """Operation is not permitted from the current status."""

    code = "invalid_state"


class ClaimConflictError(FulfillmentError):
    """Another claimant won the race for the item."""

    code = "claim_conflict"


class AlreadyClaimedError(FulfillmentError):
    """Actor already holds a claim on this order."""

    code = "already_claimed"


class TransactionFailedError(FulfillmentError):
    """The underlying transaction failed and was rolled back as a whole."""

    code = "transaction_failed"
