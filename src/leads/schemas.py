"""Lead submission payload models and the persisted LeadRecord."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

LOG_TYPE_CALCULATED_QUOTE = "CalculatedQuote"
LOG_TYPE_CHECKOUT_ATTEMPT = "CheckoutAttempt"

# Largest value the Numeric(10, 2) lead columns hold
MAX_STORED_AMOUNT = 99_999_999.99


def coerce_text(v: Any) -> Optional[str]:
    """Render scalars the way the frontend prints them; None and blanks stay None."""
    if v is None or isinstance(v, (dict, list)):
        return None
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, float) and math.isfinite(v) and v.is_integer():
        v = int(v)
    s = str(v).strip()
    return s or None


def coerce_flag(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return False
    if isinstance(v, (int, float)):
        return v != 0
    return str(v).strip().lower() in ("true", "1", "yes", "y", "on")


def parse_number(v: Any) -> Optional[float]:
    """Return a finite float or None. Booleans are not numbers here."""
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        f = float(v)
    else:
        s = str(v).strip()
        if not s:
            return None
        try:
            f = float(s)
        except ValueError:
            return None
    return f if math.isfinite(f) else None


Text = Annotated[Optional[str], BeforeValidator(coerce_text)]
Flag = Annotated[bool, BeforeValidator(coerce_flag)]
OptionalNumber = Annotated[Optional[float], BeforeValidator(parse_number)]
Quote = Annotated[float, BeforeValidator(parse_number)]


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # JSON nulls fall back to field defaults
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class ContactDetails(_Payload):
    name: Text = None
    email: Text = None
    phone: Text = None
    company: Text = None


class Stop(_Payload):
    address: Text = None
    load_unload: Text = Field(default=None, alias="loadUnload")
    stairs: Flag = False
    floor: Text = None


class PackageItem(_Payload):
    qty: Text = None
    desc: Text = None
    weight: Text = None
    length: Text = None
    width: Text = None
    height: Text = None
    unit: Text = None


class ServiceDetails(_Payload):
    vehicle_type: Text = Field(default=None, alias="vehicleType")
    pickup_date: Text = Field(default=None, alias="pickupDate")
    pickup_time: Text = Field(default=None, alias="pickupTime")
    urgency: Text = None
    inside_delivery: Flag = Field(default=False, alias="insideDelivery")
    hazardous: Flag = False
    bio_hazardous: Flag = Field(default=False, alias="bioHazardous")
    extra_laborer: Flag = Field(default=False, alias="extraLaborer")


class LeadSubmission(_Payload):
    """One quote form submission as posted by the frontend."""

    contact_details: ContactDetails = Field(default_factory=ContactDetails, alias="contactDetails")
    stops_data: List[Stop] = Field(default_factory=list, alias="stopsData")
    packages_data: List[PackageItem] = Field(default_factory=list, alias="packagesData")
    service_details: ServiceDetails = Field(default_factory=ServiceDetails, alias="serviceDetails")
    total_miles: OptionalNumber = Field(default=None, alias="totalMiles")
    calculated_quote: Quote = Field(alias="calculatedQuote")


@dataclass(frozen=True)
class LeadRecord:
    """Flat, append-only lead row. Stops and packages are pre-serialized blobs."""

    timestamp: datetime
    log_type: str
    contact_name: Optional[str]
    contact_email: Optional[str]
    contact_phone: Optional[str]
    contact_company: Optional[str]
    all_stops_details: Optional[str]
    package_details: Optional[str]
    vehicle_type: Optional[str]
    pickup_date: Optional[str]
    pickup_time: Optional[str]
    urgency: Optional[str]
    inside_delivery: bool
    hazardous: bool
    bio_hazardous: bool
    extra_laborer: bool
    total_miles: Optional[Decimal]
    calculated_quote: Decimal
