"""Tests for job context propagation into log records."""

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from mco.logging.context import JobContextFilter, get_job_context, job_context


def make_record() -> logging.LogRecord:
    return logging.LogRecord("mco.test", logging.INFO, __file__, 1, "msg", (), None)


class TestJobContext:
    """Tests for job_context."""

    def test_default_empty(self):
        assert get_job_context() == (None, None, None)

    def test_sets_and_restores(self):
        with job_context("01", "3f2a9c1b", "/media/clip.mp4"):
            assert get_job_context() == ("01", "3f2a9c1b", "/media/clip.mp4")
        assert get_job_context() == (None, None, None)

    def test_nested(self):
        with job_context("01", "aaaa"):
            with job_context("02", "bbbb"):
                assert get_job_context()[:2] == ("02", "bbbb")
            assert get_job_context()[:2] == ("01", "aaaa")

    def test_restored_after_exception(self):
        with pytest.raises(RuntimeError):
            with job_context("01", "aaaa"):
                raise RuntimeError("boom")
        assert get_job_context() == (None, None, None)

    def test_isolated_between_threads(self):
        """A worker's context must not leak into other threads."""

        def worker(worker_id):
            with job_context(worker_id, f"job{worker_id}"):
                return get_job_context()[:2]

        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(pool.map(worker, ["01", "02"]))

        assert results == [("01", "job01"), ("02", "job02")]
        assert get_job_context() == (None, None, None)


class TestJobContextFilter:
    """Tests for JobContextFilter tags."""

    @pytest.mark.parametrize(
        ("worker_id", "job_id", "tag"),
        [
            ("01", "3f2a9c1b", "[W01:3f2a9c1b] "),
            ("01", None, "[W01] "),
            (None, "3f2a9c1b", "[3f2a9c1b] "),
            (None, None, ""),
        ],
    )
    def test_job_tag(self, worker_id, job_id, tag):
        record = make_record()
        with job_context(worker_id, job_id, "/media/a.mp4"):
            assert JobContextFilter().filter(record) is True
        assert record.job_tag == tag
        assert record.job_id == job_id
        assert record.file_path == "/media/a.mp4"
