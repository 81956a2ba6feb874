import json
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from src.error_handler import ErrorHandler, LeadValidationError
from src.leads.service import LeadService, submission_context

logger = logging.getLogger(__name__)

api = APIRouter()
quotes_api = api

error_handler = ErrorHandler()


def get_lead_service(request: Request) -> LeadService:
    return request.app.state.lead_service


async def _read_payload(request: Request) -> Any:
    body = await request.body()
    if not body:
        raise LeadValidationError(field_errors={"body": "request body is empty"})
    try:
        return json.loads(body)
    except (ValueError, RecursionError) as e:
        raise LeadValidationError(field_errors={"body": "request body is not valid JSON"}) from e


@api.post("/log-calculated-quote", tags=["Leads"])
async def log_calculated_quote(request: Request, service: LeadService = Depends(get_lead_service)):
    logger.info("POST /log-calculated-quote received at %s", datetime.now(timezone.utc).isoformat())
    payload = None
    try:
        payload = await _read_payload(request)
        await service.log_quote(payload)
    except Exception as e:
        handled = error_handler.handle_exception(e, context=submission_context(payload))
        return JSONResponse(
            status_code=handled["status_code"],
            content={"status": "error", "message": handled["message"]},
        )
    return {"status": "success", "message": "Quote data logged."}


@api.post("/create-checkout-session", tags=["Checkout"])
async def create_checkout_session(request: Request, service: LeadService = Depends(get_lead_service)):
    logger.info("POST /create-checkout-session received at %s", datetime.now(timezone.utc).isoformat())
    payload = None
    try:
        payload = await _read_payload(request)
        session = await service.create_checkout(payload)
    except Exception as e:
        handled = error_handler.handle_exception(e, context=submission_context(payload))
        return JSONResponse(status_code=handled["status_code"], content={"error": handled["message"]})
    return {"url": session.url}
