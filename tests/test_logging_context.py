"""Tests for scoped logging context."""

import threading

import pytest

from gamewatch.logging.context import (
    clear_log_context,
    get_log_context,
    log_context,
    pop_log_context,
    push_log_context,
)


class TestPushPop:
    """Token-based push and pop."""

    def test_starts_empty(self):
        assert get_log_context() == {}

    def test_push_and_pop(self):
        token = push_log_context(job="release_sync", run_id="4f2a")
        assert get_log_context() == {"job": "release_sync", "run_id": "4f2a"}

        pop_log_context(token)
        assert get_log_context() == {}

    def test_layers_unwind_in_order(self):
        outer = push_log_context(job="update_check")
        inner = push_log_context(entry_id=7)
        assert get_log_context() == {"job": "update_check", "entry_id": 7}

        pop_log_context(inner)
        assert get_log_context() == {"job": "update_check"}
        pop_log_context(outer)
        assert get_log_context() == {}

    def test_inner_value_shadows_outer(self):
        outer = push_log_context(trigger="schedule")
        inner = push_log_context(trigger="manual")
        assert get_log_context()["trigger"] == "manual"

        pop_log_context(inner)
        assert get_log_context()["trigger"] == "schedule"
        pop_log_context(outer)

    def test_clear(self):
        push_log_context(job="wanted_search", entry_id=3)
        clear_log_context()
        assert get_log_context() == {}

    def test_returned_context_is_a_copy(self):
        token = push_log_context(job="release_sync")
        snapshot = get_log_context()
        snapshot["entry_id"] = 99

        assert get_log_context() == {"job": "release_sync"}
        pop_log_context(token)


class TestLogContextManager:
    """The ``log_context`` block helper."""

    def test_scoped_to_block(self):
        with log_context(job="download_monitor", run_id="abc"):
            assert get_log_context() == {"job": "download_monitor", "run_id": "abc"}
        assert get_log_context() == {}

    def test_nested_blocks(self):
        with log_context(job="wanted_search"):
            with log_context(entry_id=1):
                assert get_log_context() == {"job": "wanted_search", "entry_id": 1}
            with log_context(entry_id=2):
                assert get_log_context() == {"job": "wanted_search", "entry_id": 2}
            assert get_log_context() == {"job": "wanted_search"}

    def test_restored_after_exception(self):
        with pytest.raises(RuntimeError):
            with log_context(job="update_check"):
                raise RuntimeError("feed down")
        assert get_log_context() == {}

    def test_threads_do_not_share_context(self):
        seen = {}

        def worker():
            with log_context(job="worker"):
                seen["inside"] = get_log_context()

        with log_context(job="main"):
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join(5)
            assert get_log_context() == {"job": "main"}

        assert seen["inside"] == {"job": "worker"}
