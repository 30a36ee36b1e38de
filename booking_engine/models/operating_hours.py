"""Club operating hours model."""
from sqlalchemy import Column, Integer, Boolean, ForeignKey, Time, UniqueConstraint
from sqlalchemy.orm import relationship
from booking_engine.core.database import Base


class OperatingHours(Base):
    """Opening hours of a club for one ISO weekday (1 = Monday ... 7 = Sunday)."""

    __tablename__ = "club_hours"

    id = Column(Integer, primary_key=True, index=True)
    club_id = Column(Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False, index=True)
    weekday = Column(Integer, nullable=False)
    opens_at = Column(Time, nullable=False)
    closes_at = Column(Time, nullable=False)  # Earlier than opens_at when closing after midnight
    active = Column(Boolean, default=True, nullable=False)

    # Relationships
    club = relationship("Club", back_populates="operating_hours")

    __table_args__ = (
        UniqueConstraint("club_id", "weekday", name="uq_club_hours_club_weekday"),
    )
