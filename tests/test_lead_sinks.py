import threading
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from src.database.csv_sink import CsvLeadSink
from src.database.postgres import InMemoryLeadSink
from src.database.postgres_real import PostgresLeadSink, _normalize_connection_string
from src.error_handler import SinkError
from src.leads.encoder import CSV_HEADER, decode_csv_line, encode, encode_csv_line
from src.leads.schemas import LOG_TYPE_CALCULATED_QUOTE, LOG_TYPE_CHECKOUT_ATTEMPT, LeadSubmission

WHEN = datetime(2024, 5, 1, 8, 0, 0, tzinfo=timezone.utc)


def _record(payload, log_type=LOG_TYPE_CALCULATED_QUOTE):
    return encode(LeadSubmission.model_validate(payload), log_type, WHEN)


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

def test_csv_sink_creates_directory_and_header_lazily(tmp_path, submission):
    path = tmp_path / "nested" / "leads.csv"
    sink = CsvLeadSink(path)
    assert not path.exists()

    sink.append(_record(submission))

    lines = sink.read_lines()
    assert lines[0] == encode_csv_line(CSV_HEADER)
    assert len(lines) == 2
    assert decode_csv_line(lines[1])[6] == "123 Main St|N/A|No;456 Oak Ave|N/A|No"


def test_csv_sink_appends_without_rewriting(tmp_path, submission):
    sink = CsvLeadSink(tmp_path / "leads.csv")
    sink.append(_record(submission, LOG_TYPE_CALCULATED_QUOTE))
    before = sink.read_lines()

    sink.append(_record(submission, LOG_TYPE_CHECKOUT_ATTEMPT))
    after = sink.read_lines()

    assert after[: len(before)] == before
    assert [r.log_type for r in sink.iter_records()] == [LOG_TYPE_CALCULATED_QUOTE, LOG_TYPE_CHECKOUT_ATTEMPT]


def test_csv_sink_reopened_does_not_repeat_header(tmp_path, submission):
    path = tmp_path / "leads.csv"
    CsvLeadSink(path).append(_record(submission))
    CsvLeadSink(path).append(_record(submission))
    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 3
    assert lines.count(encode_csv_line(CSV_HEADER).rstrip("\n")) == 1


def test_csv_sink_round_trips_records(tmp_path, submission):
    submission["contactDetails"]["company"] = 'The "Quoted" Co'
    record = _record(submission)
    sink = CsvLeadSink(tmp_path / "leads.csv")
    sink.append(record)
    assert list(sink.iter_records()) == [record]


def test_csv_sink_concurrent_appends_do_not_interleave(tmp_path, submission):
    sink = CsvLeadSink(tmp_path / "leads.csv")
    record = _record(submission)

    def worker():
        for _ in range(20):
            sink.append(record)

    threads = [threading.Thread(target=worker) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    records = list(sink.iter_records())
    assert len(records) == 100
    assert all(r == record for r in records)


def test_csv_sink_wraps_os_errors(tmp_path, submission):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x", encoding="utf-8")
    sink = CsvLeadSink(blocker / "leads.csv")
    with pytest.raises(SinkError):
        sink.append(_record(submission))


# ---------------------------------------------------------------------------
# SQL table
# ---------------------------------------------------------------------------

@pytest.fixture
def sql_sink():
    engine = create_engine("sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False})
    return PostgresLeadSink(engine=engine)


def test_table_sink_creates_schema_on_first_append(sql_sink, submission):
    sql_sink.append(_record(submission))
    leads = sql_sink.list_leads()
    assert len(leads) == 1
    lead = leads[0]
    assert lead.log_type == LOG_TYPE_CALCULATED_QUOTE
    assert lead.contact_email == "jane@example.com"
    assert lead.all_stops_details == "123 Main St|N/A|No;456 Oak Ave|N/A|No"
    assert lead.inside_delivery is False
    assert Decimal(str(lead.calculated_quote)) == Decimal("25.00")
    assert Decimal(str(lead.total_miles)) == Decimal("12.3")


def test_table_sink_keeps_both_log_types(sql_sink, submission):
    sql_sink.append(_record(submission, LOG_TYPE_CALCULATED_QUOTE))
    sql_sink.append(_record(submission, LOG_TYPE_CHECKOUT_ATTEMPT))
    leads = sql_sink.list_leads()
    assert [l.log_type for l in leads] == [LOG_TYPE_CALCULATED_QUOTE, LOG_TYPE_CHECKOUT_ATTEMPT]
    assert leads[0].id < leads[1].id


def test_table_sink_ensure_ready(sql_sink):
    sql_sink.ensure_ready()
    assert sql_sink.list_leads() == []


def test_table_sink_requires_connection_details():
    with pytest.raises(ValueError):
        PostgresLeadSink()


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("postgres://u:p@h:5432/db", "postgresql://u:p@h:5432/db"),
        ("psql 'postgresql://u:p@h/db'", "postgresql://u:p@h/db"),
        ('  "postgresql://u@h/db"  ', "postgresql://u@h/db"),
    ],
)
def test_normalize_connection_string(raw, expected):
    assert _normalize_connection_string(raw) == expected


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------

def test_memory_sink_records_in_order(submission):
    sink = InMemoryLeadSink()
    first = _record(submission, LOG_TYPE_CALCULATED_QUOTE)
    second = _record(submission, LOG_TYPE_CHECKOUT_ATTEMPT)
    sink.append(first)
    sink.append(second)
    assert sink.records == [first, second]


def test_memory_sink_failure_mode(submission):
    with pytest.raises(SinkError):
        InMemoryLeadSink(fail_with="disk full").append(_record(submission))
