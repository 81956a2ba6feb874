"""
Stripe Checkout client.

Used when STRIPE_SECRET_KEY is configured. The SDK call is blocking, so it is
run in the threadpool.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

import stripe
from starlette.concurrency import run_in_threadpool

from src.error_handler import PaymentProviderError
from src.integrations.contracts.interfaces import CheckoutProvider, CheckoutRequest, CheckoutSession

logger = logging.getLogger(__name__)


class StripeCheckoutClient(CheckoutProvider):
    kind = "stripe"

    def __init__(self, api_key: str, stripe_module: Any = stripe) -> None:
        if not api_key:
            raise ValueError("STRIPE_SECRET_KEY is not configured.")
        self.api_key = api_key
        self._stripe = stripe_module

    def _session_params(self, request: CheckoutRequest) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "price_data": {
                        "currency": request.currency,
                        "product_data": {
                            "name": request.product_name,
                            "description": request.description,
                        },
                        "unit_amount": request.amount_in_cents,
                    },
                    "quantity": 1,
                }
            ],
            "mode": "payment",
            "success_url": request.success_url,
            "cancel_url": request.cancel_url,
        }
        if request.customer_email:
            params["customer_email"] = request.customer_email
        if request.metadata:
            params["metadata"] = request.metadata
        return params

    async def create_session(self, request: CheckoutRequest) -> CheckoutSession:
        params = self._session_params(request)
        try:
            session = await run_in_threadpool(
                self._stripe.checkout.Session.create, api_key=self.api_key, **params
            )
        except self._stripe.StripeError as e:
            detail = getattr(e, "user_message", None) or str(e)
            raise PaymentProviderError(detail, context={"provider": self.kind}) from e

        logger.info("Stripe session created: %s", session.id)
        return CheckoutSession(session_id=session.id, url=session.url)
