"""
Append-only CSV lead sink.

The file and its directory are created on the first append, together with the
header row. Each record is written as one quoted line with a single write call
while holding the sink's lock, so concurrent requests never interleave.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Iterator, List, Union

from src.error_handler import SinkError
from src.integrations.contracts.interfaces import LeadSink
from src.leads.encoder import CSV_HEADER, decode_csv_line, encode_csv_line, from_row, to_row
from src.leads.schemas import LeadRecord

logger = logging.getLogger(__name__)


class CsvLeadSink(LeadSink):
    kind = "csv"

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _ensure_header(self) -> None:
        if self.path.exists() and self.path.stat().st_size > 0:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8", newline="") as f:
            f.write(encode_csv_line(CSV_HEADER))
        logger.info("Created lead log %s with header row", self.path)

    def append(self, record: LeadRecord) -> None:
        line = encode_csv_line(to_row(record))
        try:
            with self._lock:
                self._ensure_header()
                with open(self.path, "a", encoding="utf-8", newline="") as f:
                    f.write(line)
        except OSError as e:
            raise SinkError(
                f"Failed to append lead to {self.path}: {e}",
                context={"log_type": record.log_type, "contact_email": record.contact_email},
            ) from e
        logger.info("Lead (%s) appended to %s", record.log_type, self.path)

    def iter_records(self) -> Iterator[LeadRecord]:
        """Read back every record after the header row."""
        if not self.path.exists():
            return
        with open(self.path, "r", encoding="utf-8", newline="") as f:
            next(f, None)
            for line in f:
                if line.strip():
                    yield from_row(decode_csv_line(line))

    def read_lines(self) -> List[str]:
        if not self.path.exists():
            return []
        return self.path.read_text(encoding="utf-8").splitlines(keepends=True)
