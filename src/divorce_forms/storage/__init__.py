"""Response persistence backed by SQLAlchemy."""

from .database import DatabaseManager, get_database_url
from .models import Base, JSONType, QuestionnaireResponseModel
from .response_store import ResponseStore, StoredResponses

__all__ = [
    "DatabaseManager",
    "get_database_url",
    "Base",
    "JSONType",
    "QuestionnaireResponseModel",
    "ResponseStore",
    "StoredResponses",
]
