"""Unit tests for the WorkItem schema and lifecycle transitions."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from news_extractor.core.exceptions import InvalidTransitionError
from news_extractor.core.schemas.work_item import (
    WorkItem,
    WorkStatus,
    can_transition,
    check_transition,
)


class TestWorkItemFromRow:
    def test_minimal_row(self) -> None:
        item = WorkItem.from_row({"id": 7, "source_url": " https://a.example/x "})
        assert item.id == "7"
        assert item.source_url == "https://a.example/x"
        assert item.attempt_count == 0
        assert item.last_status is WorkStatus.PENDING
        assert item.needs_extraction is True

    def test_unknown_columns_ignored(self) -> None:
        item = WorkItem.from_row(
            {"id": "1", "source_url": "https://a.example", "created_at": "2026-01-01"}
        )
        assert item.id == "1"

    @pytest.mark.parametrize("url", ["", "   ", None])
    def test_missing_url_rejected(self, url) -> None:
        with pytest.raises(ValidationError):
            WorkItem.from_row({"id": "1", "source_url": url})

    def test_null_attempt_count_is_zero(self) -> None:
        item = WorkItem.from_row(
            {"id": "1", "source_url": "https://a.example", "attempt_count": None}
        )
        assert item.attempt_count == 0

    def test_negative_attempt_count_rejected(self) -> None:
        with pytest.raises(ValidationError):
            WorkItem.from_row({"id": "1", "source_url": "https://a", "attempt_count": -1})

    def test_unknown_status_rejected(self) -> None:
        with pytest.raises(ValidationError):
            WorkItem.from_row({"id": "1", "source_url": "https://a", "last_status": "done"})

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("2026-03-01T10:00:00+00:00", datetime(2026, 3, 1, 10, tzinfo=timezone.utc)),
            (1_772_359_200_000, datetime(2026, 3, 1, 10, tzinfo=timezone.utc)),
            ("not a date", None),
            (None, None),
        ],
    )
    def test_lenient_published_at(self, raw, expected) -> None:
        item = WorkItem.from_row({"id": "1", "source_url": "https://a", "published_at": raw})
        assert item.published_at == expected

    def test_has_content(self) -> None:
        base = {"id": "1", "source_url": "https://a"}
        assert WorkItem.from_row({**base, "extracted_content": "text"}).has_content
        assert not WorkItem.from_row({**base, "extracted_content": "  "}).has_content
        assert not WorkItem.from_row(base).has_content

    def test_is_frozen(self) -> None:
        item = WorkItem.from_row({"id": "1", "source_url": "https://a"})
        with pytest.raises(ValidationError):
            item.attempt_count = 2  # type: ignore[misc]


class TestTransitions:
    @pytest.mark.parametrize(
        ("source", "target"),
        [
            (WorkStatus.PENDING, WorkStatus.ATTEMPTING),
            (WorkStatus.FAILED, WorkStatus.ATTEMPTING),
            (WorkStatus.ATTEMPTING, WorkStatus.ATTEMPTING),
            (WorkStatus.ATTEMPTING, WorkStatus.EXTRACTED),
            (WorkStatus.ATTEMPTING, WorkStatus.FAILED),
            (WorkStatus.ATTEMPTING, WorkStatus.GIVEN_UP),
        ],
    )
    def test_allowed(self, source, target) -> None:
        assert can_transition(source, target)
        check_transition(source, target)

    @pytest.mark.parametrize(
        ("source", "target"),
        [
            (WorkStatus.PENDING, WorkStatus.EXTRACTED),
            (WorkStatus.FAILED, WorkStatus.GIVEN_UP),
            (WorkStatus.EXTRACTED, WorkStatus.ATTEMPTING),
            (WorkStatus.GIVEN_UP, WorkStatus.ATTEMPTING),
        ],
    )
    def test_rejected(self, source, target) -> None:
        assert not can_transition(source, target)
        with pytest.raises(InvalidTransitionError) as exc_info:
            check_transition(source, target)
        assert exc_info.value.source == source.value
        assert exc_info.value.target == target.value

    def test_terminal_states(self) -> None:
        assert {s for s in WorkStatus if s.is_terminal} == {
            WorkStatus.EXTRACTED,
            WorkStatus.GIVEN_UP,
        }
