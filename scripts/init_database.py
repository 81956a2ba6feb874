#!/usr/bin/env python3
"""
Create the leads table in Postgres ahead of the first request.

Uses DATABASE_URL environment variable. Does NOT drop existing tables; the
server also creates the table lazily, so running this is optional.
"""

from __future__ import annotations
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

# Make sure src is on sys.path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import inspect

from src.database.postgres_real import PostgresLeadSink
from src.error_handler import SinkError


def main() -> int:
    url = os.environ.get("DATABASE_URL")
    if not url:
        print("DATABASE_URL is not set", file=sys.stderr)
        return 1

    try:
        sink = PostgresLeadSink(url, require_ssl=os.environ.get("NODE_ENV") == "production")
        sink.ensure_ready()
        print("✅ Database connection OK")
        tables = inspect(sink.engine).get_table_names()
        print("✅ App tables now exist:", sorted(tables))
        return 0

    except SinkError as e:
        print(f"❌ Failed to prepare lead database: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
