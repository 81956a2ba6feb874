from datetime import datetime, timezone
from decimal import Decimal

import pytest

from src.leads.encoder import (
    CSV_HEADER,
    decode_csv_line,
    decode_stops,
    encode,
    encode_csv_line,
    encode_package,
    encode_stop,
    from_row,
    sanitize,
    to_row,
)
from src.leads.schemas import LOG_TYPE_CHECKOUT_ATTEMPT, LeadSubmission, PackageItem, Stop

FIXED_TIME = datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone.utc)


def _encode(payload, log_type=LOG_TYPE_CHECKOUT_ATTEMPT):
    return encode(LeadSubmission.model_validate(payload), log_type, FIXED_TIME)


def test_concrete_scenario_blobs(submission):
    record = _encode(submission)
    assert record.all_stops_details == "123 Main St|N/A|No;456 Oak Ave|N/A|No"
    assert record.package_details == "Qty:1, Desc:Box, Wt:10lbs, Dim:1x1x1 ft"
    assert record.calculated_quote == Decimal("25.00")
    assert record.total_miles == Decimal("12.3")
    assert record.timestamp == FIXED_TIME
    assert record.log_type == LOG_TYPE_CHECKOUT_ATTEMPT


@pytest.mark.parametrize(
    "load_unload, label",
    [("driver", "Driver"), ("customer", "Customer"), ("driver_assist", "Driver Assist"), ("other", "N/A"), (None, "N/A")],
)
def test_load_unload_labels(load_unload, label):
    stop = Stop.model_validate({"address": "1 Elm", "loadUnload": load_unload})
    assert encode_stop(stop) == f"1 Elm|{label}|No"


def test_stairs_label_with_and_without_floor():
    assert encode_stop(Stop.model_validate({"address": "A", "stairs": True, "floor": 3})) == "A|N/A|Yes, Fl: 3"
    assert encode_stop(Stop.model_validate({"address": "A", "stairs": True})) == "A|N/A|Yes, Fl: N/A"


def test_missing_package_fields_use_placeholder():
    assert encode_package(PackageItem()) == "Qty:N/A, Desc:N/A, Wt:N/Albs, Dim:N/AxN/AxN/A N/A"


def test_multiple_packages_join_with_semicolon_space(submission):
    submission["packagesData"].append({"qty": "2", "desc": "Crate", "weight": 10.5})
    record = _encode(submission)
    assert record.package_details == (
        "Qty:1, Desc:Box, Wt:10lbs, Dim:1x1x1 ft; Qty:2, Desc:Crate, Wt:10.5lbs, Dim:N/AxN/AxN/A N/A"
    )


def test_sanitize_neutralizes_delimiters_and_line_breaks():
    assert sanitize("a|b;c\r\nd") == "a/b,c  d"
    assert sanitize(None) is None


def test_delimiters_in_address_never_fracture_stop_fields(submission):
    submission["stopsData"][0]["address"] = "Suite 4|B; rear dock"
    submission["stopsData"][1]["address"] = "Unit;7|||"
    record = _encode(submission)
    stops = decode_stops(record.all_stops_details)
    assert len(stops) == 2
    assert all(len(s) == 3 for s in stops)
    assert stops[0][0] == "Suite 4/B, rear dock"


def test_delimiters_in_package_description_are_neutralized(submission):
    submission["packagesData"][0]["desc"] = "Glass; fragile | handle"
    record = _encode(submission)
    assert "Desc:Glass, fragile / handle" in record.package_details
    assert len(record.package_details.split("; ")) == 1


def test_flags_and_absent_miles_in_flat_row(submission):
    submission["serviceDetails"].update({"insideDelivery": True, "hazardous": "yes", "bioHazardous": None})
    del submission["totalMiles"]
    row = to_row(_encode(submission))
    assert len(row) == len(CSV_HEADER)
    named = dict(zip(CSV_HEADER, row))
    assert named["InsideDelivery"] == "Yes"
    assert named["Hazardous"] == "Yes"
    assert named["BioHazardous"] == "No"
    assert named["ExtraLaborer"] == "No"
    assert named["TotalMiles"] == ""
    assert named["CalculatedQuote"] == "$25.00"
    assert named["ContactCompany"] == "N/A"


def test_non_numeric_miles_treated_as_absent(submission):
    submission["totalMiles"] = "far"
    assert _encode(submission).total_miles is None


def test_quote_currency_rounds_to_cents(submission):
    submission["calculatedQuote"] = "123.456"
    row = to_row(_encode(submission))
    assert row[-1] == "$123.46"


def test_csv_line_quotes_every_field_and_doubles_quotes():
    line = encode_csv_line(["plain", 'say "hi"', ""])
    assert line == '"plain","say ""hi""",""\n'


def test_round_trip_with_embedded_quotes(submission):
    submission["contactDetails"]["company"] = 'Acme "Fast" Freight, Inc.'
    submission["stopsData"][0]["address"] = '12 "Old" Mill Rd'
    record = _encode(submission)

    line = encode_csv_line(to_row(record))
    decoded = from_row(decode_csv_line(line))

    assert decoded == record
    assert encode_csv_line(to_row(decoded)) == line
    assert decode_stops(decoded.all_stops_details)[0] == ('12 "Old" Mill Rd', "N/A", "No")


def test_encode_depends_only_on_explicit_timestamp(submission):
    other = datetime(2030, 1, 1, tzinfo=timezone.utc)
    first = _encode(submission)
    second = encode(LeadSubmission.model_validate(submission), LOG_TYPE_CHECKOUT_ATTEMPT, FIXED_TIME)
    assert first == second
    assert encode(LeadSubmission.model_validate(submission), LOG_TYPE_CHECKOUT_ATTEMPT, other).timestamp == other


def test_from_row_rejects_wrong_field_count():
    with pytest.raises(ValueError):
        from_row(["only", "two"])


def test_oversized_miles_recorded_as_absent(submission):
    submission["totalMiles"] = 1e30
    record = _encode(submission)
    assert record.total_miles is None
    assert to_row(record)[16] == ""


def test_encode_keeps_raw_quote_when_too_many_digits(submission):
    submission["calculatedQuote"] = 1e27
    assert _encode(submission).calculated_quote == Decimal("1e+27")


def test_literal_placeholder_text_reads_back_as_missing(submission):
    # "N/A" doubles as the missing-value marker in the flat file
    submission["contactDetails"]["company"] = "N/A"
    record = _encode(submission)
    assert record.contact_company == "N/A"
    assert from_row(to_row(record)).contact_company is None
