"""Error taxonomy and response mapping for the lead/checkout endpoints."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class LeadServiceError(Exception):
    """Base class for errors raised while handling a lead submission."""

    status_code = 500

    def __init__(self, message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}


@dataclass
class LeadValidationError(LeadServiceError):
    """Malformed or incomplete submission.

    Attributes:
        field_errors: mapping of field path -> human-readable error message.
        message: combined top-level reason.
    """

    field_errors: Dict[str, str] = field(default_factory=dict)
    message: str = "Incomplete or invalid data received."

    status_code = 400

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        if not self.field_errors:
            return self.message
        details = "; ".join(self.field_errors.values())
        return f"{self.message} {details}"


class SinkError(LeadServiceError):
    """Lead storage unavailable or the write failed."""


class AmountTooLowError(LeadServiceError):
    status_code = 400

    def __init__(self, amount_in_cents: int, minimum_cents: int) -> None:
        super().__init__(
            "Quote amount below minimum charge.",
            context={"amount_in_cents": amount_in_cents, "minimum_cents": minimum_cents},
        )
        self.amount_in_cents = amount_in_cents
        self.minimum_cents = minimum_cents


class PaymentProviderError(LeadServiceError):
    """The checkout provider call failed; message carries the provider detail."""


class ErrorHandler:
    """Logs lead-service errors with context and builds the JSON error bodies.

    The log-only endpoint answers with ``{"status": "error", "message": ...}``,
    the checkout endpoint with ``{"error": ...}``.
    """

    def status_for(self, exc: Exception) -> int:
        if isinstance(exc, LeadServiceError):
            return exc.status_code
        return 500

    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        context = {**getattr(exc, "context", {}), **(context or {})}
        if isinstance(exc, LeadValidationError):
            logger.warning("Rejected lead submission: %s (context=%s)", exc, context)
        elif isinstance(exc, AmountTooLowError):
            logger.warning("Quote below minimum charge: %s (context=%s)", exc.message, context)
        elif isinstance(exc, LeadServiceError):
            logger.error("%s: %s (context=%s)", type(exc).__name__, exc.message, context)
        else:
            logger.error("Unhandled exception in lead service: %s (context=%s)", exc, context, exc_info=True)
        return {"message": self.public_message(exc), "status_code": self.status_for(exc), "context": context}

    def public_message(self, exc: Exception) -> str:
        if isinstance(exc, PaymentProviderError):
            return f"Failed to create payment session: {exc.message}"
        if isinstance(exc, LeadValidationError):
            return str(exc)
        if isinstance(exc, LeadServiceError):
            return exc.message
        return "An internal error occurred while processing your request. Please try again later."
