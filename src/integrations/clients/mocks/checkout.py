"""
Hosted checkout, MOCK client.

⚠️  This is a mock implementation for development and testing.
    No network calls are made. Sessions get a deterministic-looking id and a
    URL under the configured base, and every request is kept in `requests`
    so tests can assert on what would have been sent to the provider.
"""

import logging
import uuid
from typing import List, Optional

from src.error_handler import PaymentProviderError
from src.integrations.contracts.interfaces import CheckoutProvider, CheckoutRequest, CheckoutSession

logger = logging.getLogger(__name__)


class MockCheckoutClient(CheckoutProvider):
    kind = "mock"

    def __init__(self, base_url: str = "https://checkout.mock.local", fail_with: Optional[str] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.fail_with = fail_with
        self.requests: List[CheckoutRequest] = []

    async def create_session(self, request: CheckoutRequest) -> CheckoutSession:
        self.requests.append(request)
        if self.fail_with:
            raise PaymentProviderError(self.fail_with, context={"provider": self.kind})

        session_id = f"cs_mock_{uuid.uuid4().hex[:24]}"
        logger.info(
            "[MOCK] Checkout session %s created for %s (%d %s)",
            session_id,
            request.customer_email,
            request.amount_in_cents,
            request.currency,
        )
        return CheckoutSession(
            session_id=session_id,
            url=f"{self.base_url}/pay/{session_id}",
            metadata={"mock": True},
        )
