"""
Lead service

Composes validation, encoding, the lead sink and the checkout provider for
the two POST endpoints.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from src.error_handler import LeadValidationError, SinkError
from src.integrations.contracts.interfaces import CheckoutProvider, CheckoutSession, LeadSink
from src.leads.checkout import build_checkout_request
from src.leads.encoder import encode
from src.leads.schemas import (
    LOG_TYPE_CALCULATED_QUOTE,
    LOG_TYPE_CHECKOUT_ATTEMPT,
    LeadRecord,
    LeadSubmission,
)
from src.leads.validation import ensure_valid
from src.utils.config_loader import Settings

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def submission_context(payload: Any) -> Dict[str, Any]:
    """Identifying fields for log lines."""
    if not isinstance(payload, dict):
        return {}
    contact = payload.get("contactDetails") if isinstance(payload.get("contactDetails"), dict) else {}
    return {
        "contact_email": contact.get("email"),
        "contact_name": contact.get("name"),
        "calculated_quote": payload.get("calculatedQuote"),
    }


class LeadService:
    def __init__(
        self,
        settings: Settings,
        sink: LeadSink,
        checkout: CheckoutProvider,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.settings = settings
        self.sink = sink
        self.checkout = checkout
        self.clock = clock

    def parse(self, payload: Any, *, require_full: bool) -> LeadSubmission:
        ensure_valid(payload, require_full=require_full)
        try:
            return LeadSubmission.model_validate(payload)
        except ValidationError as e:
            field_errors = {".".join(str(p) for p in err["loc"]): err["msg"] for err in e.errors()}
            raise LeadValidationError(field_errors=field_errors) from e

    async def persist(self, record: LeadRecord) -> Optional[SinkError]:
        """Append one record. The outcome is returned, never raised; callers decide."""
        try:
            await run_in_threadpool(self.sink.append, record)
        except SinkError as e:
            logger.error(
                "Error logging lead data (%s) for %s: %s",
                record.log_type,
                record.contact_email,
                e.message,
            )
            return e
        return None

    async def log_quote(self, payload: Any) -> LeadRecord:
        """Pre-payment log. A sink failure is the caller's error here."""
        submission = self.parse(payload, require_full=False)
        record = encode(submission, LOG_TYPE_CALCULATED_QUOTE, self.clock())
        error = await self.persist(record)
        if error is not None:
            raise error
        return record

    async def create_checkout(self, payload: Any) -> CheckoutSession:
        submission = self.parse(payload, require_full=True)
        record = encode(submission, LOG_TYPE_CHECKOUT_ATTEMPT, self.clock())
        if await self.persist(record) is not None:
            logger.warning("Continuing to checkout for %s without a stored lead", record.contact_email)

        request = build_checkout_request(submission, self.settings)
        session = await self.checkout.create_session(request)
        logger.info(
            "Checkout session %s created for %s (%d cents)",
            session.session_id,
            submission.contact_details.email,
            request.amount_in_cents,
        )
        return session
