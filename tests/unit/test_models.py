"""
Unit tests for core models and exceptions.
"""

import pytest

from contrib_archive.core.exceptions import ArchiveError, RequestFailed, StorageError
from contrib_archive.core.models import ContributionSummary, comment_id, response_count


class TestContributionSummary:
    """Tests for ContributionSummary."""

    def test_from_payload(self):
        summary = ContributionSummary.from_payload({
            "publicHandle": "abc",
            "activeVersion": 12,
            "commentCount": 3,
            "commentableId": 900,
            "title": "ignored",
        })

        assert summary == ContributionSummary("abc", 12, 3, 900)

    def test_from_payload_missing_fields(self):
        """Test that only publicHandle is required."""
        summary = ContributionSummary.from_payload({"publicHandle": "abc"})

        assert summary.active_version is None
        assert summary.comment_count is None

    @pytest.mark.parametrize("payload", [{}, {"publicHandle": ""}, None, "abc"])
    def test_from_payload_requires_handle(self, payload):
        with pytest.raises(ValueError):
            ContributionSummary.from_payload(payload)

    def test_from_detail(self):
        summary = ContributionSummary.from_detail(
            "abc", {"activeVersion": 2, "commentCount": 0, "commentableId": 5}
        )

        assert summary == ContributionSummary("abc", 2, 0, 5)


class TestCommentHelpers:
    """Tests for comment accessors."""

    def test_comment_id(self):
        assert comment_id({"commentId": 7}) == 7

    def test_response_count_defaults_to_zero(self):
        assert response_count({}) == 0
        assert response_count({"responseCount": None}) == 0
        assert response_count({"responseCount": 4}) == 4


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_request_failed_message(self):
        error = RequestFailed("findContribution", 502)

        assert isinstance(error, ArchiveError)
        assert error.operation == "findContribution"
        assert error.status_code == 502
        assert "findContribution" in str(error)
        assert "502" in str(error)

    def test_storage_error_keeps_path(self):
        error = StorageError("/data/x", "Cannot write snapshot")

        assert error.path == "/data/x"
        assert "/data/x" in str(error)
