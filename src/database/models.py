"""
SQLAlchemy model for the leads table.
Used by postgres_real when the lead sink is "postgres".
"""
from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.leads.schemas import LeadRecord


class Base(DeclarativeBase):
    pass


class Lead(Base):
    __tablename__ = "leads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    log_type: Mapped[Optional[str]] = mapped_column(String(50))
    contact_name: Mapped[Optional[str]] = mapped_column(String(255))
    contact_email: Mapped[Optional[str]] = mapped_column(String(255))
    contact_phone: Mapped[Optional[str]] = mapped_column(String(50))
    contact_company: Mapped[Optional[str]] = mapped_column(String(255))
    all_stops_details: Mapped[Optional[str]] = mapped_column(Text)
    package_details: Mapped[Optional[str]] = mapped_column(Text)
    vehicle_type: Mapped[Optional[str]] = mapped_column(String(100))
    pickup_date: Mapped[Optional[str]] = mapped_column(String(50))
    pickup_time: Mapped[Optional[str]] = mapped_column(String(50))
    urgency: Mapped[Optional[str]] = mapped_column(String(100))
    inside_delivery: Mapped[bool] = mapped_column(Boolean, default=False)
    hazardous: Mapped[bool] = mapped_column(Boolean, default=False)
    bio_hazardous: Mapped[bool] = mapped_column(Boolean, default=False)
    extra_laborer: Mapped[bool] = mapped_column(Boolean, default=False)
    total_miles: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    calculated_quote: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))

    @classmethod
    def from_record(cls, record: LeadRecord) -> "Lead":
        return cls(
            timestamp=record.timestamp,
            log_type=record.log_type,
            contact_name=record.contact_name,
            contact_email=record.contact_email,
            contact_phone=record.contact_phone,
            contact_company=record.contact_company,
            all_stops_details=record.all_stops_details,
            package_details=record.package_details,
            vehicle_type=record.vehicle_type,
            pickup_date=record.pickup_date,
            pickup_time=record.pickup_time,
            urgency=record.urgency,
            inside_delivery=record.inside_delivery,
            hazardous=record.hazardous,
            bio_hazardous=record.bio_hazardous,
            extra_laborer=record.extra_laborer,
            total_miles=record.total_miles,
            calculated_quote=record.calculated_quote,
        )
