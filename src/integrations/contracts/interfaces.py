from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from src.leads.schemas import LeadRecord


# ---------------------------------------------------------------------------
# Shared data models
# ---------------------------------------------------------------------------

@dataclass
class CheckoutRequest:
    product_name: str
    description: str                     # order summary, <= 200 chars
    amount_in_cents: int
    currency: str
    success_url: str
    cancel_url: str
    customer_email: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CheckoutSession:
    session_id: str
    url: str
    created_at: datetime = field(default_factory=datetime.utcnow)
    metadata: Dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Abstract collaborator interfaces
# ---------------------------------------------------------------------------

class CheckoutProvider(ABC):
    """Every hosted-checkout client must implement this interface."""

    kind: str = "unknown"

    @abstractmethod
    async def create_session(self, request: CheckoutRequest) -> CheckoutSession:
        """Create a single-use checkout session; raise PaymentProviderError on failure."""


class LeadSink(ABC):
    """Append-only destination for lead records."""

    kind: str = "unknown"

    @abstractmethod
    def append(self, record: LeadRecord) -> None:
        """Persist one record; raise SinkError on failure. Never rewrites prior records."""

    def ensure_ready(self) -> None:
        """Eager readiness check at startup. Sinks also initialise lazily on first append."""
