from __future__ import annotations

from unittest.mock import Mock, patch

from companion_io.services.progress import ProgressTracker, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch("sys.stdout.isatty", return_value=True):
        assert is_tty_enabled() is True

    with patch("sys.stdout.isatty", return_value=False):
        assert is_tty_enabled() is False


class TestProgressTracker:
    def test_init_with_tty_enabled(self):
        with patch("companion_io.services.progress.is_tty_enabled", return_value=True), \
             patch("companion_io.services.progress.tqdm") as mock_tqdm:

            tracker = ProgressTracker(12, description="Importing clients")

            assert tracker.enabled is True
            assert tracker.processed == 0
            mock_tqdm.assert_called_once_with(
                total=12,
                desc="Importing clients",
                unit="row",
                leave=False,
                ncols=80,
                ascii=True,
            )

    def test_init_with_tty_disabled(self):
        with patch("companion_io.services.progress.is_tty_enabled", return_value=False), \
             patch("companion_io.services.progress.tqdm") as mock_tqdm:
            tracker = ProgressTracker(12)

        assert tracker.enabled is False
        assert tracker.pbar is None
        mock_tqdm.assert_not_called()

    def test_zero_rows_never_opens_a_bar(self):
        with patch("companion_io.services.progress.is_tty_enabled", return_value=True), \
             patch("companion_io.services.progress.tqdm") as mock_tqdm:
            tracker = ProgressTracker(0)

        assert tracker.enabled is False
        mock_tqdm.assert_not_called()

    def test_advance_and_postfix(self):
        mock_pbar = Mock()
        with patch("companion_io.services.progress.is_tty_enabled", return_value=True), \
             patch("companion_io.services.progress.tqdm", return_value=mock_pbar):
            tracker = ProgressTracker(3)
            tracker.advance()
            tracker.advance(2)
            tracker.set_postfix(imported=2, duplicates=1)

        assert tracker.processed == 3
        assert [c.args for c in mock_pbar.update.call_args_list] == [(1,), (2,)]
        mock_pbar.set_postfix.assert_called_once_with(imported=2, duplicates=1)

    def test_disabled_tracker_still_counts(self):
        with patch("companion_io.services.progress.is_tty_enabled", return_value=False):
            tracker = ProgressTracker(3)
            tracker.advance()
            tracker.set_postfix(imported=1)
            tracker.close()
        assert tracker.processed == 1

    def test_context_manager_closes(self):
        mock_pbar = Mock()
        with patch("companion_io.services.progress.is_tty_enabled", return_value=True), \
             patch("companion_io.services.progress.tqdm", return_value=mock_pbar):
            with ProgressTracker(3) as tracker:
                tracker.advance()

        mock_pbar.close.assert_called_once()
        assert tracker.pbar is None

    def test_close_is_idempotent(self):
        mock_pbar = Mock()
        with patch("companion_io.services.progress.is_tty_enabled", return_value=True), \
             patch("companion_io.services.progress.tqdm", return_value=mock_pbar):
            tracker = ProgressTracker(3)
            tracker.close()
            tracker.close()

        mock_pbar.close.assert_called_once()
