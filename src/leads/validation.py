"""Required-field rules for lead submissions.

The frontend posts the whole quote form as one nested dictionary. The log-only
endpoint needs a quote and a contact; the checkout endpoint additionally needs
the route, the packages and a vehicle type.

`validate_submission` is pure and returns every problem it finds;
`ensure_valid` raises `LeadValidationError` with the combined reason.
"""

from __future__ import annotations

from typing import Any, Dict

from src.error_handler import LeadValidationError
from src.leads.schemas import MAX_STORED_AMOUNT, parse_number

MIN_STOPS = 2
MIN_PACKAGES = 1
MAX_QUOTE = MAX_STORED_AMOUNT


def _strip(v: Any) -> str:
    if v is None or isinstance(v, (dict, list, bool)):
        return ""
    return str(v).strip()


def add_error(errors: Dict[str, str], field: str, message: str) -> None:
    if field not in errors:
        errors[field] = message


def _section(payload: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, dict) else {}


def validate_submission(payload: Any, *, require_full: bool) -> Dict[str, str]:
    """Return field path -> message for every broken rule. Empty means valid."""
    errors: Dict[str, str] = {}
    if not isinstance(payload, dict):
        add_error(errors, "body", "request body must be a JSON object")
        return errors

    quote = parse_number(payload.get("calculatedQuote"))
    if quote is None:
        add_error(errors, "calculatedQuote", "calculatedQuote must be a finite number")
    elif abs(quote) > MAX_QUOTE:
        add_error(errors, "calculatedQuote", f"calculatedQuote must not exceed {MAX_QUOTE:.2f}")

    contact = _section(payload, "contactDetails")
    if not _strip(contact.get("name")):
        add_error(errors, "contactDetails.name", "contactDetails.name is required")
    if not _strip(contact.get("email")):
        add_error(errors, "contactDetails.email", "contactDetails.email is required")

    for key in ("stopsData", "packagesData"):
        items = payload.get(key)
        if items is None:
            continue
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            add_error(errors, key, f"{key} must be a list of objects")
    for key in ("contactDetails", "serviceDetails"):
        if payload.get(key) is not None and not isinstance(payload.get(key), dict):
            add_error(errors, key, f"{key} must be an object")

    if not require_full:
        return errors

    stops = payload.get("stopsData")
    if not isinstance(stops, list) or len(stops) < MIN_STOPS:
        add_error(errors, "stopsData", f"stopsData must contain at least {MIN_STOPS} stops")

    packages = payload.get("packagesData")
    if not isinstance(packages, list) or len(packages) < MIN_PACKAGES:
        add_error(errors, "packagesData", f"packagesData must contain at least {MIN_PACKAGES} package")

    service = _section(payload, "serviceDetails")
    if not _strip(service.get("vehicleType")):
        add_error(errors, "serviceDetails.vehicleType", "serviceDetails.vehicleType is required")

    return errors


def ensure_valid(payload: Any, *, require_full: bool) -> None:
    errors = validate_submission(payload, require_full=require_full)
    if errors:
        raise LeadValidationError(field_errors=errors)
