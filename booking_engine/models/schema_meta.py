"""Schema version bookkeeping."""
from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.sql import func
from booking_engine.core.database import Base


class SchemaMeta(Base):
    __tablename__ = "schema_meta"

    id = Column(Integer, primary_key=True)
    version = Column(Integer, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
