"""SQLAlchemy ORM models for the persistent cache store"""

from sqlalchemy import Column, DateTime, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class CacheSlot(Base):
    """One key-value slot; the dashboard cache uses a single fixed key"""

    __tablename__ = "cache_slot"

    key = Column(Text, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
