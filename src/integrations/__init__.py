"""
Integrations layer.
This package contains all code used to communicate with external systems:
- Hosted payment checkout (Stripe Checkout)

Key rule:
- The lead service MUST NOT call the payment SDK directly.
- It calls a checkout client (under src/integrations/clients) through the
  CheckoutProvider contract.
- MOCK clients are used during development and tests; the REAL client is used
  when a Stripe secret key is configured.

Switching implementations:
- The selection of mock vs real clients happens in ONE place (src/api/main.py).
"""

from .contracts.interfaces import (
    CheckoutProvider,
    CheckoutRequest,
    CheckoutSession,
    LeadSink,
)

__all__ = ["CheckoutProvider", "CheckoutRequest", "CheckoutSession", "LeadSink"]
