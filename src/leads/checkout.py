"""Checkout request assembly: order summary, amount in cents, redirect URLs."""

from __future__ import annotations

import logging
import math
from typing import Optional

from src.error_handler import AmountTooLowError, LeadValidationError
from src.integrations.contracts.interfaces import CheckoutRequest
from src.leads.schemas import LeadSubmission
from src.leads.validation import MAX_QUOTE
from src.utils.config_loader import Settings

logger = logging.getLogger(__name__)

SUMMARY_MAX_LENGTH = 200
ADDRESS_PREVIEW_LENGTH = 50
ELLIPSIS = "..."

DEFAULT_SUCCESS_BASE = "https://your-default-success-url.com"
DEFAULT_CANCEL_URL = "https://your-default-cancel-url.com"
PLACEHOLDER_SITE_URLS = {"http://temp.com"}


def amount_in_cents(calculated_quote: float) -> int:
    """round(quote * 100), halves rounded up.

    Raises:
        ValueError: if the scaled amount is not a finite number
    """
    scaled = calculated_quote * 100 + 0.5
    if not math.isfinite(scaled):
        raise ValueError(f"quote out of range: {calculated_quote!r}")
    return int(math.floor(scaled))


def _shorten(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    if limit <= len(ELLIPSIS):
        return text[: max(limit, 0)]
    return text[: limit - len(ELLIPSIS)] + ELLIPSIS


def build_order_summary(submission: LeadSubmission, max_length: int = SUMMARY_MAX_LENGTH) -> str:
    service = submission.service_details
    miles = submission.total_miles or 0.0
    first_address = ""
    if submission.stops_data:
        first_address = submission.stops_data[0].address or ""

    head = (
        f"Delivery Quote: {len(submission.stops_data)} stops ({miles:.1f} miles). "
        f"Pickup: {service.pickup_date or 'N/A'} at {service.pickup_time or 'N/A'}. "
        f"Vehicle: {service.vehicle_type or 'N/A'}. First Stop: "
    )
    tail = "."

    if len(first_address) > ADDRESS_PREVIEW_LENGTH:
        first_address = first_address[:ADDRESS_PREVIEW_LENGTH] + ELLIPSIS
    budget = max_length - len(head) - len(tail)
    if budget < 0:
        # fixed part alone is over the cap
        return (head + tail)[:max_length]
    return head + _shorten(first_address, budget) + tail


def redirect_urls(site_url: Optional[str]) -> tuple:
    if not site_url or site_url in PLACEHOLDER_SITE_URLS:
        logger.critical("YOUR_WEBSITE_URL is not set correctly; checkout redirects will use placeholder URLs")
        return (
            f"{DEFAULT_SUCCESS_BASE}/payment-success.html?session_id={{CHECKOUT_SESSION_ID}}",
            DEFAULT_CANCEL_URL,
        )
    return f"{site_url}/payment-success.html?session_id={{CHECKOUT_SESSION_ID}}", site_url


def build_checkout_request(submission: LeadSubmission, settings: Settings) -> CheckoutRequest:
    """Raises LeadValidationError or AmountTooLowError before any provider is involved."""
    if abs(submission.calculated_quote) > MAX_QUOTE:
        raise LeadValidationError(
            field_errors={"calculatedQuote": f"calculatedQuote must not exceed {MAX_QUOTE:.2f}"}
        )
    cents = amount_in_cents(submission.calculated_quote)
    if cents < settings.minimum_charge_cents:
        raise AmountTooLowError(cents, settings.minimum_charge_cents)

    success_url, cancel_url = redirect_urls(settings.site_url)
    return CheckoutRequest(
        product_name=settings.product_name,
        description=build_order_summary(submission),
        amount_in_cents=cents,
        currency=settings.currency,
        customer_email=submission.contact_details.email,
        success_url=success_url,
        cancel_url=cancel_url,
    )
