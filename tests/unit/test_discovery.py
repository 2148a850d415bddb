"""Unit tests for Xwayland display discovery"""

import io
import os
import threading

import pytest

from gamechain.common.types import DiscoveryStatus
from gamechain.launcher.discovery import (
    DisplayDiscoveryTask,
    displayNumber_extract,
    displayNumber_scan,
)


class _CountingLines:
    """Line iterator that records how many lines were pulled"""

    def __init__(self, lines):
        self._lines = list(lines)
        self.pulled = 0

    def __iter__(self):
        return self

    def __next__(self):
        if self.pulled >= len(self._lines):
            raise StopIteration
        line = self._lines[self.pulled]
        self.pulled += 1
        return line


class TestDisplayNumberExtract:
    """Test single-line matching"""

    @pytest.mark.parametrize(
        "line, expected",
        [
            ("Starting Xwayland on :3", 3),
            ("[gamescope] [Info]  xwm: Starting Xwayland on :12\n", 12),
            ("Starting Xwayland on :0", 0),
            ("starting", None),
            ("Starting Xwayland on", None),
            ("Starting Xwayland on :99999999", None),
        ],
    )
    def test_extract(self, line, expected):
        """Only announcement lines yield a display number"""
        assert displayNumber_extract(line) == expected


class TestDisplayNumberScan:
    """Test synchronous stream scanning"""

    def test_match_on_second_line_stops_reading(self):
        """Scan stops right after the announcement"""
        lines = _CountingLines(["starting\n", "Starting Xwayland on :3\n", "ready\n"])

        outcome = displayNumber_scan(lines)

        assert outcome.status is DiscoveryStatus.FOUND
        assert outcome.display_number == 3
        assert outcome.lines_read == 2
        assert lines.pulled == 2

    @pytest.mark.parametrize("before, after", [(0, 0), (1, 5), (40, 0), (7, 100)])
    def test_result_independent_of_surrounding_lines(self, before, after):
        """Same display number however many lines surround the match"""
        lines = (
            [f"noise {i}\n" for i in range(before)]
            + ["Starting Xwayland on :5\n"]
            + [f"after {i}\n" for i in range(after)]
        )

        outcome = displayNumber_scan(iter(lines))

        assert outcome.display_number == 5
        assert outcome.lines_read == before + 1

    def test_closed_stream_without_match_is_not_found(self):
        """EOF without an announcement is an explicit not-found"""
        outcome = displayNumber_scan(iter(["starting\n", "ready\n"]))

        assert outcome.status is DiscoveryStatus.STREAM_CLOSED
        assert outcome.display_number is None
        assert outcome.lines_read == 2
        assert not outcome.isFound()


class TestDisplayDiscoveryTask:
    """Test the background discovery task"""

    def test_found_on_string_stream(self):
        """Task reports the display from a finite stream"""
        task = DisplayDiscoveryTask(io.StringIO("starting\nStarting Xwayland on :3\nready\n"))
        future = task.start()

        outcome = task.result_wait(timeout=5)

        assert outcome.isFound()
        assert outcome.display_number == 3
        assert future.done()

    def test_not_found_never_hangs(self):
        """A stream that closes without a match yields not-found"""
        task = DisplayDiscoveryTask(io.StringIO("starting\nready\n"))
        task.start()

        outcome = task.result_wait(timeout=5)

        assert outcome.status is DiscoveryStatus.STREAM_CLOSED

    def test_missing_stream_is_unavailable(self):
        """No stderr handle is a discovery failure, not a crash"""
        task = DisplayDiscoveryTask(None)
        task.start()

        outcome = task.result_wait(timeout=1)

        assert outcome.status is DiscoveryStatus.STREAM_UNAVAILABLE
        assert "stderr" in outcome.error

    def test_closed_stream_is_read_failure(self):
        """Reading a closed stream is reported, not raised"""
        stream = io.StringIO("Starting Xwayland on :1\n")
        stream.close()
        task = DisplayDiscoveryTask(stream)
        task.start()

        outcome = task.result_wait(timeout=5)

        assert outcome.status is DiscoveryStatus.READ_FAILED

    def test_silent_stream_times_out(self):
        """A compositor that never speaks cannot stall the caller"""
        read_fd, write_fd = os.pipe()
        stream = os.fdopen(read_fd, "r")
        try:
            task = DisplayDiscoveryTask(stream)
            task.start()

            outcome = task.result_wait(timeout=0.2)

            assert outcome.status is DiscoveryStatus.TIMEOUT
            assert outcome.display_number is None
        finally:
            os.close(write_fd)

    def test_drains_after_match(self):
        """Lines after the match are still consumed so the writer never blocks"""
        read_fd, write_fd = os.pipe()
        stream = os.fdopen(read_fd, "r")
        writer = os.fdopen(write_fd, "w")
        task = DisplayDiscoveryTask(stream)
        task.start()

        writer.write("Starting Xwayland on :2\n")
        writer.flush()
        outcome = task.result_wait(timeout=5)

        # Far more than a pipe buffer; would block forever without draining
        done = threading.Event()

        def _flood():
            for _ in range(256):
                writer.write("x" * 1023 + "\n")
            writer.flush()
            writer.close()
            done.set()

        flooder = threading.Thread(target=_flood, daemon=True)
        flooder.start()

        assert outcome.display_number == 2
        assert done.wait(timeout=5)

    def test_start_twice_raises(self):
        """The hand-off is single use"""
        task = DisplayDiscoveryTask(io.StringIO(""))
        task.start()
        with pytest.raises(RuntimeError, match="already started"):
            task.start()
