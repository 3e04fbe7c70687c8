"""Unit tests for response persistence."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from divorce_forms.errors import PersistenceError, ResponseNotFoundError, SubmissionBlockedError
from divorce_forms.models import ResponseStatus
from divorce_forms.storage import DatabaseManager, ResponseStore

USER = "user-123"


@pytest.fixture
def db(tmp_path):
    manager = DatabaseManager(f"sqlite:///{tmp_path / 'responses.db'}")
    manager.init_database()
    yield manager
    manager.close()


@pytest.fixture
def store(db):
    return ResponseStore(db)


class TestSaveDraft:
    """Tests for saving drafts."""

    def test_save_without_validation(self, store):
        """Drafts keep invalid and incomplete answers."""
        stored = store.save(USER, "gated", {"q1": "yes", "q2": "not a number"}, 0)

        assert stored.status is ResponseStatus.DRAFT
        assert stored.responses == {"q1": "yes", "q2": "not a number"}
        assert stored.created_at is not None
        assert stored.completed_at is None

    def test_save_replaces_whole_set(self, store):
        store.save(USER, "gated", {"q1": "yes", "q2": 3})
        store.save(USER, "gated", {"q1": "no"})

        assert store.load(USER, "gated").responses == {"q1": "no"}

    def test_section_index_kept_when_omitted(self, store):
        store.save(USER, "gated", {}, current_section_index=2)
        stored = store.save(USER, "gated", {"q1": "no"})

        assert stored.current_section == 2

    def test_negative_section_index(self, store):
        with pytest.raises(ValueError):
            store.save(USER, "gated", {}, current_section_index=-1)

    def test_values_normalized(self, store):
        stored = store.save(USER, "gated", {"home": {"street": "1 Main St", "city": "Springfield"}})

        assert stored.responses == {"home": "1 Main St, Springfield"}

    def test_users_are_separate(self, store):
        store.save(USER, "gated", {"q1": "yes"})
        store.save("someone-else", "gated", {"q1": "no"})

        assert store.load(USER, "gated").responses == {"q1": "yes"}


class TestSubmit:
    """Tests for submitting completed answer sets."""

    def test_blocked_submission(self, store, schema):
        store.save(USER, "gated", {"q1": "yes"})

        with pytest.raises(SubmissionBlockedError) as exc_info:
            store.submit(USER, "gated", {"q1": "yes"}, schema)

        error = exc_info.value
        assert error.first_failing_question == "q2"
        assert "q2" in error.errors_by_question
        assert error.to_dict()["first_failing_question"] == "q2"
        assert store.load(USER, "gated").status is ResponseStatus.DRAFT

    def test_blocked_submission_writes_nothing(self, store, schema):
        with pytest.raises(SubmissionBlockedError):
            store.submit(USER, "gated", {"q1": "yes"}, schema)

        with pytest.raises(ResponseNotFoundError):
            store.load(USER, "gated")

    def test_completed(self, store, schema):
        stored = store.submit(USER, "gated", {"q1": "yes", "q2": 3}, schema)

        assert stored.is_completed
        assert stored.completed_at is not None
        assert store.load(USER, "gated").is_completed

    def test_hidden_questions_do_not_block(self, store, schema):
        stored = store.submit(USER, "gated", {"q1": "no"}, schema)

        assert stored.is_completed

    def test_save_reopens_completed(self, store, schema):
        store.submit(USER, "gated", {"q1": "no"}, schema)

        stored = store.save(USER, "gated", {"q1": "yes"})

        assert stored.status is ResponseStatus.DRAFT
        assert stored.completed_at is None


class TestLoadListDelete:

    def test_load_not_found(self, store):
        with pytest.raises(ResponseNotFoundError) as exc_info:
            store.load(USER, "gated")
        assert isinstance(exc_info.value, PersistenceError)

    def test_list_most_recent_first(self, store):
        store.save(USER, "petition", {"a": 1})
        store.save(USER, "marital-settlement", {"b": 2})
        store.save("someone-else", "petition", {})

        stored = store.list_for_user(USER)

        assert [s.questionnaire_type for s in stored] == ["marital-settlement", "petition"]

    def test_delete(self, store):
        store.save(USER, "gated", {"q1": "yes"})

        assert store.delete(USER, "gated") is True
        assert store.delete(USER, "gated") is False
        with pytest.raises(ResponseNotFoundError):
            store.load(USER, "gated")

    def test_to_dict(self, store):
        data = store.save(USER, "gated", {"q1": "yes"}).to_dict()

        assert data["status"] == "draft"
        assert data["responses"] == {"q1": "yes"}
        assert data["completed_at"] is None
        assert isinstance(data["updated_at"], str)


class TestPersistenceFailures:
    """Tests for database failures surfacing as PersistenceError."""

    @pytest.fixture
    def broken_store(self):
        db = MagicMock()
        db.get_session.side_effect = OperationalError("SELECT 1", {}, Exception("database is down"))
        return ResponseStore(db)

    def test_save(self, broken_store):
        with pytest.raises(PersistenceError) as exc_info:
            broken_store.save(USER, "gated", {"q1": "yes"})
        assert exc_info.value.details["questionnaire_type"] == "gated"

    def test_load(self, broken_store):
        with pytest.raises(PersistenceError) as exc_info:
            broken_store.load(USER, "gated")
        assert not isinstance(exc_info.value, ResponseNotFoundError)

    def test_list_and_delete(self, broken_store):
        with pytest.raises(PersistenceError):
            broken_store.list_for_user(USER)
        with pytest.raises(PersistenceError):
            broken_store.delete(USER, "gated")
