"""
Defines a base model for SQLAlchemy ORM with common attributes.

This module provides the declarative base and an abstract base class carrying
the standard identity and timestamp columns. Identifiers are integer primary
keys assigned by the database, and timestamps are filled in by the database
server so that every record reflects store time rather than client time.
"""

from sqlalchemy import Column, DateTime, Integer, func
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class BaseModel(Base):
    """
    Base model class for database entities.

    :ivar id: Unique, monotonically assigned identifier for the record.
    :type id: int
    :ivar created_at: Timestamp representing when the record was created.
    :type created_at: datetime
    :ivar updated_at: Timestamp representing when the record was last updated.
    :type updated_at: datetime
    """
    __abstract__ = True

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
