"""
Lightweight in-memory lead sink for local development and tests.

Keeps records in a list in append order. It is NOT intended for production
use: records are lost when the process exits.
"""

from __future__ import annotations

import logging
import threading
from typing import List, Optional

from src.error_handler import SinkError
from src.integrations.contracts.interfaces import LeadSink
from src.leads.schemas import LeadRecord

logger = logging.getLogger(__name__)


class InMemoryLeadSink(LeadSink):
    kind = "memory"

    def __init__(self, fail_with: Optional[str] = None) -> None:
        self.records: List[LeadRecord] = []
        self.fail_with = fail_with
        self._lock = threading.Lock()

    def append(self, record: LeadRecord) -> None:
        if self.fail_with:
            raise SinkError(self.fail_with, context={"log_type": record.log_type})
        with self._lock:
            self.records.append(record)
            position = len(self.records)
        logger.info("Lead (%s) stored in memory at position %d", record.log_type, position)
