"""
Lead record encoding.

`encode` turns a validated submission into a flat `LeadRecord`. The stops and
packages become single text blobs:

    stops:    123 Main St|Driver|No;456 Oak Ave|N/A|Yes, Fl: 3
    packages: Qty:1, Desc:Box, Wt:10lbs, Dim:1x1x1 ft; Qty:N/A, ...

Free text is sanitized first so a `|`, `;` or line break typed by the user can
never add a field or a line. The flat-file row adds the currency and Yes/No
formatting and every field is quoted for the CSV sink.
"""

from __future__ import annotations

import csv
import io
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, List, Optional, Sequence, Tuple

from src.leads.schemas import MAX_STORED_AMOUNT, LeadRecord, LeadSubmission, PackageItem, Stop

MISSING = "N/A"

CSV_HEADER: Tuple[str, ...] = (
    "Timestamp",
    "LogType",
    "ContactName",
    "ContactEmail",
    "ContactPhone",
    "ContactCompany",
    "AllStopsDetails",
    "PackageDetails",
    "VehicleType",
    "PickupDate",
    "PickupTime",
    "Urgency",
    "InsideDelivery",
    "Hazardous",
    "BioHazardous",
    "ExtraLaborer",
    "TotalMiles",
    "CalculatedQuote",
)

LOAD_UNLOAD_LABELS = {
    "driver": "Driver",
    "customer": "Customer",
    "driver_assist": "Driver Assist",
}

_SANITIZE_TABLE = str.maketrans({"|": "/", ";": ",", "\r": " ", "\n": " "})


def sanitize(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.translate(_SANITIZE_TABLE)


def _or_missing(value: Optional[str]) -> str:
    return sanitize(value) or MISSING


def encode_stop(stop: Stop) -> str:
    load_unload = LOAD_UNLOAD_LABELS.get((stop.load_unload or "").strip().lower(), MISSING)
    stairs = f"Yes, Fl: {_or_missing(stop.floor)}" if stop.stairs else "No"
    return f"{_or_missing(stop.address)}|{load_unload}|{stairs}"


def encode_stops(stops: Sequence[Stop]) -> Optional[str]:
    if not stops:
        return None
    return ";".join(encode_stop(s) for s in stops)


def decode_stops(blob: Optional[str]) -> List[Tuple[str, str, str]]:
    """Split a stops blob back into (address, loadUnload, stairs) triples."""
    if not blob or blob == MISSING:
        return []
    out = []
    for part in blob.split(";"):
        address, load_unload, stairs = part.split("|")
        out.append((address, load_unload, stairs))
    return out


def encode_package(p: PackageItem) -> str:
    return (
        f"Qty:{_or_missing(p.qty)}, Desc:{_or_missing(p.desc)}, Wt:{_or_missing(p.weight)}lbs, "
        f"Dim:{_or_missing(p.length)}x{_or_missing(p.width)}x{_or_missing(p.height)} {_or_missing(p.unit)}"
    )


def encode_packages(packages: Sequence[PackageItem]) -> Optional[str]:
    if not packages:
        return None
    return "; ".join(encode_package(p) for p in packages)


def _round(value: float, places: str) -> Decimal:
    raw = Decimal(str(value))
    try:
        return raw.quantize(Decimal(places), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # more digits than the decimal context holds
        return raw


def _miles(value: Optional[float]) -> Optional[Decimal]:
    """Mileage outside the stored column range is recorded as absent."""
    if value is None or abs(value) > MAX_STORED_AMOUNT:
        return None
    return _round(value, "0.1")


def encode(submission: LeadSubmission, log_type: str, timestamp: datetime) -> LeadRecord:
    contact = submission.contact_details
    service = submission.service_details
    return LeadRecord(
        timestamp=timestamp,
        log_type=log_type,
        contact_name=sanitize(contact.name),
        contact_email=sanitize(contact.email),
        contact_phone=sanitize(contact.phone),
        contact_company=sanitize(contact.company),
        all_stops_details=encode_stops(submission.stops_data),
        package_details=encode_packages(submission.packages_data),
        vehicle_type=sanitize(service.vehicle_type),
        pickup_date=sanitize(service.pickup_date),
        pickup_time=sanitize(service.pickup_time),
        urgency=sanitize(service.urgency),
        inside_delivery=service.inside_delivery,
        hazardous=service.hazardous,
        bio_hazardous=service.bio_hazardous,
        extra_laborer=service.extra_laborer,
        total_miles=_miles(submission.total_miles),
        calculated_quote=_round(submission.calculated_quote, "0.01"),
    )


# ---------------------------------------------------------------------------
# Flat-file rendering
# ---------------------------------------------------------------------------

def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def format_currency(amount: Decimal) -> str:
    return f"${amount:.2f}"


def to_row(record: LeadRecord) -> List[str]:
    """Render a record in CSV_HEADER order with flat-file formatting."""
    return [
        record.timestamp.isoformat(),
        record.log_type,
        record.contact_name or MISSING,
        record.contact_email or MISSING,
        record.contact_phone or MISSING,
        record.contact_company or MISSING,
        record.all_stops_details or MISSING,
        record.package_details or MISSING,
        record.vehicle_type or MISSING,
        record.pickup_date or MISSING,
        record.pickup_time or MISSING,
        record.urgency or MISSING,
        _yes_no(record.inside_delivery),
        _yes_no(record.hazardous),
        _yes_no(record.bio_hazardous),
        _yes_no(record.extra_laborer),
        f"{record.total_miles:.1f}" if record.total_miles is not None else "",
        format_currency(record.calculated_quote),
    ]


def from_row(row: Sequence[str]) -> LeadRecord:
    """Inverse of `to_row`.

    `N/A` is the placeholder for a missing value, so a text field that holds
    the literal string `N/A` reads back as None.
    """
    if len(row) != len(CSV_HEADER):
        raise ValueError(f"expected {len(CSV_HEADER)} fields, got {len(row)}")

    def text(v: str) -> Optional[str]:
        return None if v == MISSING else v

    return LeadRecord(
        timestamp=datetime.fromisoformat(row[0]),
        log_type=row[1],
        contact_name=text(row[2]),
        contact_email=text(row[3]),
        contact_phone=text(row[4]),
        contact_company=text(row[5]),
        all_stops_details=text(row[6]),
        package_details=text(row[7]),
        vehicle_type=text(row[8]),
        pickup_date=text(row[9]),
        pickup_time=text(row[10]),
        urgency=text(row[11]),
        inside_delivery=row[12] == "Yes",
        hazardous=row[13] == "Yes",
        bio_hazardous=row[14] == "Yes",
        extra_laborer=row[15] == "Yes",
        total_miles=Decimal(row[16]) if row[16] else None,
        calculated_quote=Decimal(row[17].lstrip("$")),
    )


def encode_csv_line(values: Iterable[str]) -> str:
    """Quote every field, double embedded quotes, terminate with a newline."""
    buf = io.StringIO()
    csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n").writerow(list(values))
    return buf.getvalue()


def decode_csv_line(line: str) -> List[str]:
    return next(csv.reader([line.rstrip("\r\n")]))
