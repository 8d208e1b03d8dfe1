"""SQLAlchemy ORM models - one JSON document per record collection"""

from sqlalchemy import Column, DateTime, Text, JSON
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class RecordCollection(Base):
    """
    Whole collection of one record kind stored as a single JSON document.

    Lists (transactions, cards, rules, installments) are JSON arrays; the
    settings singleton is a JSON object. Every write replaces the document.
    """

    __tablename__ = "record_collection"

    kind = Column(Text, primary_key=True)
    payload = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
