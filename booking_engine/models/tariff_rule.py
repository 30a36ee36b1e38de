"""Tariff rule model."""
from sqlalchemy import Column, Integer, ForeignKey, Time, Numeric, Index
from sqlalchemy.orm import relationship
from booking_engine.core.database import Base


class TariffRule(Base):
    """Price per hour for a weekday and a half-open time range [starts_at, ends_at)."""

    __tablename__ = "tariff_rules"

    id = Column(Integer, primary_key=True, index=True)
    club_id = Column(Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False, index=True)
    weekday = Column(Integer, nullable=False)
    starts_at = Column(Time, nullable=False)
    ends_at = Column(Time, nullable=False)
    price_per_hour = Column(Numeric(10, 2), nullable=False)

    # Relationships
    club = relationship("Club", back_populates="tariff_rules")

    __table_args__ = (
        Index("ix_tariff_rules_club_weekday", "club_id", "weekday"),
    )
