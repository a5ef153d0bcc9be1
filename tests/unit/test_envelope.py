"""
Envelope Model Unit Tests
"""

from typing import List, Optional

import pytest
from pydantic import BaseModel, ValidationError as PydanticValidationError

from megaplan_api.exceptions import ApiError
from megaplan_api.models import Envelope, LegacyResponse, Meta, Pagination


class Task(BaseModel):
    id: str
    name: Optional[str] = None


class TestPagination:
    """Tests for pagination normalization"""

    def test_object_form(self):
        """Should read the named counters"""
        pagination = Pagination.model_validate({
            "count": 120, "limit": 50, "currentPage": 2,
            "hasMoreNext": True, "hasMorePrev": True,
        })
        assert pagination.count == 120
        assert pagination.current_page == 2
        assert pagination.has_next() is True
        assert pagination.has_prev() is True

    def test_empty_array_form(self):
        """Should treat an empty array as no pagination"""
        pagination = Pagination.model_validate([])
        assert pagination.count == 0
        assert pagination.has_next() is False

    def test_non_empty_array_ignored(self):
        """Should treat any array as no pagination"""
        pagination = Pagination.model_validate([1, "count"])
        assert pagination.count == 0
        assert pagination.has_prev() is False

    def test_null_counters(self):
        """Should decode null counters and flags as zero values"""
        pagination = Pagination.model_validate({
            "count": None, "limit": 50, "currentPage": None,
            "hasMoreNext": None, "hasMorePrev": True,
        })
        assert pagination.count == 0
        assert pagination.limit == 50
        assert pagination.current_page == 0
        assert pagination.has_next() is False
        assert pagination.has_prev() is True

    def test_bad_counter_rejected(self):
        """Should still reject counters that are not numbers"""
        with pytest.raises(PydanticValidationError):
            Pagination.model_validate({"count": "many"})


class TestMeta:
    """Tests for meta.errors aggregation"""

    def test_no_errors(self):
        """Should produce no error without entries"""
        meta = Meta.model_validate({"status": 200, "errors": []})
        assert meta.error_message() is None
        assert meta.error() is None

    def test_null_blocks(self):
        """Should accept null errors and pagination"""
        meta = Meta.model_validate({"status": 200, "errors": None, "pagination": None})
        assert meta.errors == []
        assert meta.pagination.has_next() is False

    def test_message_lines(self):
        """Should render one line per error in array order"""
        meta = Meta.model_validate({
            "status": 400,
            "errors": [
                {"field": "name", "message": "required"},
                {"field": None, "message": 42},
            ],
        })
        assert meta.error_message() == "FIELD: name MESSAGE: required\nFIELD: <nil> MESSAGE: 42"

        error = meta.error()
        assert isinstance(error, ApiError)
        assert str(error) == meta.error_message()
        assert error.status_code == 400
        assert len(error.field_errors) == 2

    def test_null_status(self):
        """Should decode a null status as zero"""
        meta = Meta.model_validate({"status": None, "errors": [], "pagination": {"count": None}})
        assert meta.status == 0
        assert meta.pagination.count == 0

    def test_structured_values(self):
        """Should render lists, objects and booleans deterministically"""
        meta = Meta.model_validate({
            "errors": [
                {"field": ["name", "title"], "message": {"ru": "нужно", "en": "required"}},
                {"field": "flag", "message": False},
            ],
        })
        assert meta.error_message() == (
            "FIELD: [name title] MESSAGE: map[en:required ru:нужно]\n"
            "FIELD: flag MESSAGE: false"
        )


class TestEnvelope:
    """Tests for the generic envelope"""

    def test_typed_data(self):
        """Should decode data into the requested type"""
        envelope = Envelope[List[Task]].model_validate({
            "data": [{"id": "1", "name": "First"}, {"id": "2"}],
            "meta": {"status": 200, "errors": [], "pagination": []},
        })
        assert [task.id for task in envelope.data] == ["1", "2"]
        assert envelope.has_next() is False

    def test_missing_meta(self):
        """Should fall back to empty meta"""
        envelope = Envelope.model_validate({"data": {"id": "1"}, "meta": None})
        assert envelope.meta.status == 0
        assert envelope.error() is None

    def test_error_carries_envelope(self):
        """Should attach the envelope to the raised error"""
        envelope = Envelope.model_validate({
            "data": None,
            "meta": {"status": 400, "errors": [{"field": "id", "message": "bad"}]},
        })
        error = envelope.error()
        assert error.envelope is envelope

    def test_has_next(self):
        """Should expose pagination flags"""
        envelope = Envelope.model_validate({
            "data": [],
            "meta": {"pagination": {"hasMoreNext": True}},
        })
        assert envelope.has_next() is True
        assert envelope.has_prev() is False
        assert envelope.pagination.has_more_next is True


class TestLegacyResponse:
    """Tests for the legacy status wrapper"""

    def test_ok(self):
        """Should report ok status"""
        response = LegacyResponse.model_validate({"status": {"code": "ok", "message": None}, "data": {"a": 1}})
        assert response.ok is True
        assert response.data == {"a": 1}

    def test_error(self):
        """Should expose the status message"""
        response = LegacyResponse.model_validate({"status": {"code": "error", "message": "Denied"}})
        assert response.ok is False
        assert response.status.message == "Denied"
