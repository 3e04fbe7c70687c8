"""Response persistence.

Saving a draft never validates: incomplete and invalid answers are kept so
the user can come back to them. Only submitting validates, and a failed
submission leaves the stored draft untouched. Writes replace the stored
answer set as a whole (last write wins).
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ..engine.questionnaire import validate_all
from ..errors import PersistenceError, ResponseNotFoundError, SubmissionBlockedError
from ..models.enums import ResponseStatus
from ..models.responses import ResponseMap, normalize_responses
from ..models.schema import Schema
from .database import DatabaseManager
from .models import QuestionnaireResponseModel, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredResponses:
    """Snapshot of a stored answer set, detached from any session."""
    user_id: str
    questionnaire_type: str
    responses: ResponseMap = field(default_factory=dict)
    current_section: int = 0
    status: ResponseStatus = ResponseStatus.DRAFT
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status is ResponseStatus.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "questionnaire_type": self.questionnaire_type,
            "responses": dict(self.responses),
            "current_section": self.current_section,
            "status": self.status.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


def _snapshot(row: QuestionnaireResponseModel) -> StoredResponses:
    return StoredResponses(
        user_id=row.user_id,
        questionnaire_type=row.questionnaire_type,
        responses=dict(row.responses or {}),
        current_section=row.current_section or 0,
        status=ResponseStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
        completed_at=row.completed_at,
    )


class ResponseStore:
    """
    Stores one answer set per user and questionnaire type.

    Args:
        db: Database manager providing sessions.
    """

    def __init__(self, db: DatabaseManager):
        self.db = db

    def _find(self, session, user_id: str, questionnaire_type: str) -> Optional[QuestionnaireResponseModel]:
        statement = select(QuestionnaireResponseModel).where(
            QuestionnaireResponseModel.user_id == user_id,
            QuestionnaireResponseModel.questionnaire_type == questionnaire_type,
        )
        return session.execute(statement).scalar_one_or_none()

    def _write(
        self,
        user_id: str,
        questionnaire_type: str,
        responses: ResponseMap,
        current_section: Optional[int],
        status: ResponseStatus
    ) -> StoredResponses:
        try:
            with self.db.get_session() as session:
                row = self._find(session, user_id, questionnaire_type)
                if row is None:
                    row = QuestionnaireResponseModel(
                        user_id=user_id,
                        questionnaire_type=questionnaire_type,
                        current_section=current_section or 0,
                    )
                    session.add(row)
                elif current_section is not None:
                    row.current_section = current_section
                row.responses = dict(responses)
                row.status = status.value
                row.completed_at = utcnow() if status is ResponseStatus.COMPLETED else None
                row.updated_at = utcnow()
                session.flush()
                return _snapshot(row)
        except SQLAlchemyError as e:
            logger.error(f"Failed to store responses for '{questionnaire_type}': {e}")
            raise PersistenceError(
                message=f"Failed to store responses: {str(e)}",
                details={"questionnaire_type": questionnaire_type}
            ) from e

    def save(
        self,
        user_id: str,
        questionnaire_type: str,
        responses: Mapping[str, Any],
        current_section_index: Optional[int] = None
    ) -> StoredResponses:
        """
        Save a draft answer set without validating it.

        Saving over a completed set reopens it as a draft.

        Args:
            user_id: Owner of the answers.
            questionnaire_type: Questionnaire the answers belong to.
            responses: Raw answers; normalized before storing.
            current_section_index: Section the user is on; kept as is when None.

        Returns:
            The stored snapshot.

        Raises:
            PersistenceError: If the database write fails.
        """
        if current_section_index is not None and current_section_index < 0:
            raise ValueError("current_section_index must be non-negative")
        stored = self._write(
            user_id,
            questionnaire_type,
            normalize_responses(responses),
            current_section_index,
            ResponseStatus.DRAFT,
        )
        logger.debug(f"Saved draft '{questionnaire_type}' for user {user_id}")
        return stored

    def submit(
        self,
        user_id: str,
        questionnaire_type: str,
        responses: Mapping[str, Any],
        schema: Schema
    ) -> StoredResponses:
        """
        Validate and store a completed answer set.

        Returns:
            The stored snapshot with status ``completed``.

        Raises:
            SubmissionBlockedError: If any visible question fails validation;
                nothing is written.
            PersistenceError: If the database write fails.
        """
        normalized = normalize_responses(responses)
        validation = validate_all(schema, normalized)
        if not validation.valid:
            logger.info(
                f"Submission of '{questionnaire_type}' blocked at "
                f"'{validation.first_failing_question}'"
            )
            raise SubmissionBlockedError(
                message="Questionnaire has unanswered or invalid questions",
                errors_by_question=validation.errors_by_question,
                first_failing_question=validation.first_failing_question,
            )
        stored = self._write(user_id, questionnaire_type, normalized, None, ResponseStatus.COMPLETED)
        logger.info(f"Submitted '{questionnaire_type}' for user {user_id}")
        return stored

    def load(self, user_id: str, questionnaire_type: str) -> StoredResponses:
        """
        Load the stored answer set.

        Raises:
            ResponseNotFoundError: If nothing is stored.
            PersistenceError: If the database read fails.
        """
        try:
            with self.db.get_session() as session:
                row = self._find(session, user_id, questionnaire_type)
                if row is None:
                    raise ResponseNotFoundError(
                        message=f"No responses stored for '{questionnaire_type}'",
                        details={"user_id": user_id, "questionnaire_type": questionnaire_type}
                    )
                return _snapshot(row)
        except SQLAlchemyError as e:
            raise PersistenceError(
                message=f"Failed to load responses: {str(e)}",
                details={"questionnaire_type": questionnaire_type}
            ) from e

    def list_for_user(self, user_id: str) -> List[StoredResponses]:
        """Get all answer sets of a user, most recently updated first."""
        statement = (
            select(QuestionnaireResponseModel)
            .where(QuestionnaireResponseModel.user_id == user_id)
            .order_by(QuestionnaireResponseModel.updated_at.desc())
        )
        try:
            with self.db.get_session() as session:
                return [_snapshot(row) for row in session.execute(statement).scalars()]
        except SQLAlchemyError as e:
            raise PersistenceError(message=f"Failed to list responses: {str(e)}") from e

    def delete(self, user_id: str, questionnaire_type: str) -> bool:
        """Delete a stored answer set. Returns False when nothing was stored."""
        try:
            with self.db.get_session() as session:
                row = self._find(session, user_id, questionnaire_type)
                if row is None:
                    return False
                session.delete(row)
                return True
        except SQLAlchemyError as e:
            raise PersistenceError(message=f"Failed to delete responses: {str(e)}") from e
