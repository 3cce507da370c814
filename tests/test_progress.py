"""Tests for progress accounting."""

import threading

import pytest

from leakscan.progress import ProgressTracker


class TestProgressTracker:
    def test_starts_at_zero(self):
        tracker = ProgressTracker(3)
        assert tracker.snapshot() == (0, 3)
        assert not tracker.is_complete

    def test_advance_returns_new_count(self):
        tracker = ProgressTracker(2)
        assert tracker.advance() == 1
        assert tracker.advance(failed=True) == 2
        assert tracker.snapshot() == (2, 2)
        assert tracker.failures == 1
        assert tracker.is_complete

    def test_empty_run_is_complete(self):
        assert ProgressTracker(0).is_complete

    def test_cannot_pass_total(self):
        tracker = ProgressTracker(1)
        tracker.advance()
        with pytest.raises(RuntimeError):
            tracker.advance()
        assert tracker.snapshot() == (1, 1)

    def test_negative_total(self):
        with pytest.raises(ValueError):
            ProgressTracker(-1)

    def test_listener_sees_increasing_counts(self):
        seen = []
        tracker = ProgressTracker(200, listener=lambda current, total: seen.append((current, total)))

        def worker():
            for _ in range(50):
                tracker.advance()

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert tracker.snapshot() == (200, 200)
        assert seen == [(i, 200) for i in range(1, 201)]

    def test_failing_listener_is_logged(self, caplog):
        def listener(current, total):
            raise IOError("stdout closed")

        tracker = ProgressTracker(2, listener=listener)

        with caplog.at_level("ERROR", logger="leakscan.progress"):
            assert tracker.advance() == 1
            assert tracker.advance() == 2

        assert tracker.snapshot() == (2, 2)
        assert "Progress listener failed at 1/2: stdout closed" in caplog.text
