"""Reservation model."""
from datetime import datetime, timedelta

from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    ForeignKey,
    DateTime,
    Date,
    Time,
    Numeric,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from booking_engine.core.database import Base


class Reservation(Base):
    """A court booked for a whole number of hours starting at ``start_time`` on ``date``.

    A window that runs past midnight is stored as a single row: ``end_time``
    holds the wall-clock end and ``ends_next_day`` marks that it falls on
    ``date + 1``.
    """

    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, index=True)
    club_id = Column(Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False, index=True)
    court_id = Column(Integer, ForeignKey("courts.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    ends_next_day = Column(Boolean, default=False, nullable=False)
    duration_hours = Column(Integer, nullable=False, default=1)

    # Who
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by_id = Column(Integer, nullable=True)
    tipo_reserva = Column(String, nullable=False, default="relacionada")  # relacionada, privada
    contact_name = Column(String, nullable=True)
    contact_surname = Column(String, nullable=True)
    contact_phone = Column(String, nullable=True)

    # Pricing
    add_on_requested = Column(Boolean, default=False, nullable=False)
    price_per_hour = Column(Numeric(10, 2), nullable=False)
    tariff_source = Column(String, nullable=False)  # rule, court-day, court-night
    tariff_rule_id = Column(Integer, ForeignKey("tariff_rules.id", ondelete="SET NULL"), nullable=True)
    monto_base = Column(Numeric(10, 2), nullable=False)
    monto_add_on = Column(Numeric(10, 2), nullable=False, default=0)
    monto_total = Column(Numeric(10, 2), nullable=False)

    # Status
    estado = Column(String, nullable=False, default="pendiente")
    estado_pago = Column(String, nullable=False, default="pendiente_pago")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    court = relationship("Court", back_populates="reservations")

    __table_args__ = (
        Index("ix_reservations_court_date", "court_id", "date"),
        Index("ix_reservations_club_date", "club_id", "date"),
    )

    @property
    def starts(self) -> datetime:
        return datetime.combine(self.date, self.start_time)

    @property
    def ends(self) -> datetime:
        end_date = self.date + timedelta(days=1) if self.ends_next_day else self.date
        return datetime.combine(end_date, self.end_time)
