"""Club model."""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Time
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from booking_engine.core.database import Base


class Club(Base):
    """Represents a club that owns bookable courts."""

    __tablename__ = "clubs"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    manager_user_id = Column(Integer, nullable=True, index=True)
    add_on_price = Column(Numeric(10, 2), nullable=True)  # Flat surcharge, e.g. match recording
    night_start = Column(Time, nullable=True)  # Night pricing window, may wrap past midnight
    night_end = Column(Time, nullable=True)
    timezone = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    courts = relationship("Court", back_populates="club", cascade="all, delete-orphan")
    operating_hours = relationship("OperatingHours", back_populates="club", cascade="all, delete-orphan")
    tariff_rules = relationship("TariffRule", back_populates="club", cascade="all, delete-orphan")
