"""SQLAlchemy models for response persistence."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JSONType(TypeDecorator):
    """Platform-independent JSON type.

    Uses JSONB for PostgreSQL and JSON for other databases (like SQLite).
    """
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(JSONB())
        else:
            return dialect.type_descriptor(JSON())


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class QuestionnaireResponseModel(Base):
    """One user's answers to one questionnaire."""
    __tablename__ = "questionnaire_responses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False)
    questionnaire_type = Column(String(100), nullable=False)
    responses = Column(JSONType, nullable=False, default=dict)
    current_section = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="draft")
    completed_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "questionnaire_type", name="uq_responses_user_type"),
        CheckConstraint("status IN ('draft', 'completed')", name="check_response_status"),
        CheckConstraint("current_section >= 0", name="check_current_section"),
        Index("idx_responses_user_id", "user_id"),
        Index("idx_responses_updated_at", "updated_at"),
    )
