"""Court model."""
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from booking_engine.core.database import Base

COURT_STATES = ("available", "maintenance", "inactive")


class Court(Base):
    """Represents a bookable court at a club."""

    __tablename__ = "courts"

    id = Column(Integer, primary_key=True, index=True)
    club_id = Column(Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    day_price = Column(Numeric(10, 2), nullable=True)    # Per hour
    night_price = Column(Numeric(10, 2), nullable=True)  # Per hour, falls back to day_price
    state = Column(String, nullable=False, default="available")  # available, maintenance, inactive
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    club = relationship("Club", back_populates="courts")
    reservations = relationship("Reservation", back_populates="court", cascade="all, delete-orphan")
