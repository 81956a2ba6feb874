"""
Postgres-backed lead sink, used when LEAD_SINK=postgres or DATABASE_URL is set.
Implements the same LeadSink interface as the CSV and in-memory sinks.
"""

from __future__ import annotations

import logging
import re
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import create_engine, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from src.database.models import Base, Lead
from src.error_handler import SinkError
from src.integrations.contracts.interfaces import LeadSink
from src.leads.schemas import LeadRecord

logger = logging.getLogger(__name__)


def _normalize_connection_string(s: str) -> str:
    """Strip common mistakes: 'psql \'...\'', extra quotes, whitespace, postgres:// scheme."""
    s = s.strip()
    if re.match(r"^psql\s+", s, re.IGNORECASE):
        s = re.sub(r"^psql\s+", "", s, flags=re.IGNORECASE).strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ("'", '"'):
        s = s[1:-1].strip()
    if s.startswith("postgres://"):
        s = "postgresql://" + s[len("postgres://"):]
    return s


class PostgresLeadSink(LeadSink):
    """
    Lead rows in a `leads` table via SQLAlchemy. The table is created on first
    use; every append is its own transaction.
    """

    kind = "postgres"

    def __init__(
        self,
        connection_string: Optional[str] = None,
        *,
        engine: Optional[Engine] = None,
        require_ssl: bool = False,
    ) -> None:
        if engine is None:
            if not connection_string:
                raise ValueError("DATABASE_URL is not configured.")
            connect_args: Dict[str, Any] = {"sslmode": "require"} if require_ssl else {}
            engine = create_engine(
                _normalize_connection_string(connection_string),
                pool_pre_ping=True,
                pool_size=5,
                max_overflow=10,
                connect_args=connect_args,
            )
        self.engine = engine
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine, expire_on_commit=False)
        self._schema_ready = False
        self._schema_lock = threading.Lock()

    def create_tables(self) -> None:
        with self._schema_lock:
            if not self._schema_ready:
                Base.metadata.create_all(bind=self.engine)
                self._schema_ready = True
                logger.info("Ensured 'leads' table exists")

    def ensure_ready(self) -> None:
        try:
            with self.engine.connect() as conn:
                now = conn.execute(text("SELECT CURRENT_TIMESTAMP")).scalar()
            logger.info("Connected to lead database at %s", now)
            self.create_tables()
        except SQLAlchemyError as e:
            raise SinkError(f"Lead database unavailable: {e}") from e

    @contextmanager
    def _session(self) -> Iterator[Session]:
        s = self.SessionLocal()
        try:
            yield s
            s.commit()
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()

    def append(self, record: LeadRecord) -> None:
        try:
            self.create_tables()
            with self._session() as s:
                row = Lead.from_record(record)
                s.add(row)
                s.flush()
                lead_id = row.id
        except SQLAlchemyError as e:
            raise SinkError(
                f"Failed to insert lead ({record.log_type}): {e}",
                context={"log_type": record.log_type, "contact_email": record.contact_email},
            ) from e
        logger.info("Lead (%s) inserted with id %s", record.log_type, lead_id)

    def list_leads(self, limit: int = 100) -> List[Lead]:
        with self._session() as s:
            stmt = select(Lead).order_by(Lead.id).limit(limit)
            return list(s.execute(stmt).scalars().all())
