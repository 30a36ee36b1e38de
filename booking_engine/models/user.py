"""User profile model."""
from sqlalchemy import Column, Integer, String
from booking_engine.core.database import Base


class User(Base):
    """Profile of a registered player. Maintained by the accounts service."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    surname = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True, unique=True)
