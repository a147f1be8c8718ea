"""Tests for file intake and the batch collection."""

import pytest

from conftest import make_handle
from resume_scorer.errors import InvalidTransition
from resume_scorer.intake import Batch, handle_from_path, intake_files, intake_paths
from resume_scorer.models import ItemStatus, ScorePayload


class TestIntake:
    """Tests for turning selected files into batch items."""

    def test_items_start_ready_with_unique_ids(self):
        items = intake_files([make_handle("a.pdf"), make_handle("b.pdf"), make_handle("c.pdf")])

        assert [item.status for item in items] == [ItemStatus.READY] * 3
        assert len({item.id for item in items}) == 3
        assert all(len(item.id) == 9 for item in items)
        assert all(item.progress == 0 and item.result is None for item in items)

    def test_handle_from_path(self, tmp_path):
        resume = tmp_path / "jane-doe.pdf"
        resume.write_bytes(b"x" * 2048)

        handle = handle_from_path(resume)

        assert handle.name == "jane-doe.pdf"
        assert handle.size == 2048
        assert handle.media_type == "application/pdf"
        assert handle.path == str(resume)
        assert handle.stem == "jane-doe"

    def test_unknown_extension_gets_default_media_type(self, tmp_path):
        resume = tmp_path / "resume.zzz"
        resume.write_bytes(b"data")

        items = intake_paths([resume])

        assert items[0].source.media_type == "application/octet-stream"

    def test_missing_file_still_accepted(self, tmp_path):
        items = intake_paths([tmp_path / "missing.pdf"])

        assert items[0].source.size == 0
        assert items[0].status is ItemStatus.READY

    def test_display_size(self):
        handle = make_handle(data=b"x" * (3 * 1024 * 1024 // 2))

        assert handle.display_size == "1.5 MB"


class TestBatch:
    """Tests for the Batch collection."""

    def test_add_files_appends_and_notifies(self):
        batch = Batch(intake_files([make_handle("a.pdf")]))
        notified = []
        batch.subscribe(notified.append)

        added = batch.add_files([make_handle("b.pdf"), make_handle("c.pdf")])

        assert [item.name for item in batch] == ["a.pdf", "b.pdf", "c.pdf"]
        assert len(added) == 2
        assert notified == [batch]

    def test_duplicate_ids_rejected(self):
        items = intake_files([make_handle("a.pdf")])
        batch = Batch(items)

        with pytest.raises(ValueError):
            batch.add(items)

    def test_unsubscribe(self):
        batch = Batch()
        notified = []
        unsubscribe = batch.subscribe(notified.append)

        unsubscribe()
        batch.add_files([make_handle()])

        assert notified == []

    def test_remove_ready_item(self):
        batch = Batch(intake_files([make_handle("a.pdf"), make_handle("b.pdf")]))
        first = batch.items[0]

        assert batch.remove(first.id) is True
        assert [item.name for item in batch] == ["b.pdf"]
        assert batch.remove("missing") is False

    def test_remove_in_flight_item_refused(self):
        batch = Batch(intake_files([make_handle()]))
        item = batch.items[0]
        batch.transition(item, ItemStatus.READING, 10)

        with pytest.raises(InvalidTransition):
            batch.remove(item.id)

    def test_retry_failed_replaces_in_place(self):
        batch = Batch(intake_files([make_handle("a.pdf"), make_handle("b.pdf"), make_handle("c.pdf")]))
        failed = batch.items[1]
        batch.transition(failed, ItemStatus.READING, 10)
        batch.transition(failed, ItemStatus.SCORING, 30)
        batch.transition(failed, ItemStatus.FAILED, 0, error="boom")

        retried = batch.retry_failed()

        assert len(retried) == 1
        attempt = batch.items[1]
        assert attempt is retried[0]
        assert attempt.id != failed.id
        assert attempt.source is failed.source
        assert attempt.status is ItemStatus.READY
        # The old attempt keeps its terminal status
        assert failed.status is ItemStatus.FAILED

    def test_retry_without_failures_does_not_notify(self):
        batch = Batch(intake_files([make_handle()]))
        notified = []
        batch.subscribe(notified.append)

        assert batch.retry_failed() == []
        assert notified == []


class TestItemTransitions:
    """Tests for the batch item lifecycle rules."""

    def _item(self):
        return intake_files([make_handle()])[0]

    def test_happy_path(self):
        item = self._item()
        payload = ScorePayload(matchScore=80)

        item.transition(ItemStatus.READING, 10)
        item.transition(ItemStatus.SCORING, 30)
        item.transition(ItemStatus.COMPLETED, 100, result=payload)

        assert item.status is ItemStatus.COMPLETED
        assert item.result is payload

    def test_completed_is_terminal(self):
        item = self._item()
        item.transition(ItemStatus.READING, 10)
        item.transition(ItemStatus.SCORING, 30)
        item.transition(ItemStatus.COMPLETED, 100, result=ScorePayload())

        with pytest.raises(InvalidTransition):
            item.transition(ItemStatus.READING, 10)

    def test_failed_is_terminal(self):
        item = self._item()
        item.transition(ItemStatus.READING, 10)
        item.transition(ItemStatus.FAILED, 0, error="boom")

        with pytest.raises(InvalidTransition):
            item.transition(ItemStatus.READING, 10)

    def test_cannot_skip_reading(self):
        with pytest.raises(InvalidTransition):
            self._item().transition(ItemStatus.SCORING, 30)

    def test_completed_requires_result(self):
        item = self._item()
        item.transition(ItemStatus.READING, 10)
        item.transition(ItemStatus.SCORING, 30)

        with pytest.raises(InvalidTransition):
            item.transition(ItemStatus.COMPLETED, 100)

    def test_result_rejected_before_completion(self):
        with pytest.raises(InvalidTransition):
            self._item().transition(ItemStatus.READING, 10, result=ScorePayload())

    def test_progress_cannot_decrease(self):
        item = self._item()
        item.transition(ItemStatus.READING, 40)

        with pytest.raises(InvalidTransition):
            item.transition(ItemStatus.SCORING, 30)
