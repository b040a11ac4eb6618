"""
SQLAlchemy ORM models for RuleChart (persisted in SQLite).

Rule documents are stored as raw YAML so they round-trip byte for byte.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.database import Base


class RuleDocumentModel(Base):
    """Named rule document (YAML source)."""

    __tablename__ = "rule_documents"

    name: Mapped[str] = mapped_column(String(128), primary_key=True, index=True)
    source: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
