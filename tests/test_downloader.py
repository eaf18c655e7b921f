"""Tests for streaming downloads with progress states."""

import io
import os

import pytest
from simplerest import (
    CallFailedError,
    DownloadState,
    DownloadStatus,
    HttpStatusError,
    RawResponse,
    save_to_file,
)
from simplerest.concurrency import ConcurrencyManager
from simplerest.core.downloader import compute_progress


class FailingStream(io.BytesIO):
    """Body stream that breaks after the first read."""

    def __init__(self, content: bytes) -> None:
        super().__init__(content)
        self.reads = 0

    def read(self, size=-1):
        self.reads += 1
        if self.reads > 1:
            raise OSError("connection reset")
        return super().read(size)


async def collect(states) -> list[DownloadState]:
    return [state async for state in states]


def statuses(states: list[DownloadState]) -> list[DownloadStatus]:
    return [state.status for state in states]


class TestSaveToFile:
    """Tests for save_to_file()."""

    @pytest.mark.asyncio
    async def test_full_download(self, tmp_path):
        """Test a 200 response streamed to disk with ordered progress."""
        content = os.urandom(10_000)
        response = RawResponse.from_bytes(200, {"Content-Length": str(len(content))}, content)
        destination = tmp_path / "out.bin"

        states = await collect(save_to_file(response, destination, chunk_size=1024))

        assert states[0] == DownloadState.started()
        assert states[-1] == DownloadState.finished()
        progress = [state.progress for state in states[1:-1]]
        assert all(state.status == DownloadStatus.DOWNLOADING for state in states[1:-1])
        assert progress == sorted(progress)
        assert progress[-1] == 100
        assert all(a != b for a, b in zip(progress, progress[1:]))
        assert destination.read_bytes() == content
        assert response.closed

    @pytest.mark.asyncio
    async def test_progress_deduplicated(self, tmp_path):
        """Test consecutive identical percentages are emitted once."""
        content = b"x" * 1000
        response = RawResponse.from_bytes(200, {"Content-Length": "1000"}, content)

        states = await collect(save_to_file(response, tmp_path / "out.txt", chunk_size=1))

        progress = [state.progress for state in states if state.status == DownloadStatus.DOWNLOADING]
        assert progress == list(range(0, 101))

    @pytest.mark.asyncio
    async def test_zero_length_finishes(self, tmp_path):
        """Test an empty body goes straight from STARTED to FINISHED."""
        response = RawResponse.from_bytes(200, {"Content-Length": "0"}, b"")
        destination = tmp_path / "empty.bin"

        states = await collect(save_to_file(response, destination))

        assert statuses(states) == [DownloadStatus.STARTED, DownloadStatus.FINISHED]
        assert destination.read_bytes() == b""

    @pytest.mark.asyncio
    async def test_non_200_fails_without_file(self, tmp_path):
        """Test non-200 responses yield FAILED only and create nothing."""
        response = RawResponse.from_bytes(404, {"Content-Length": "9"}, b"not found")
        destination = tmp_path / "missing.bin"

        states = await collect(save_to_file(response, destination))

        assert statuses(states) == [DownloadStatus.FAILED]
        assert isinstance(states[0].error, HttpStatusError)
        assert states[0].error.code == 404
        assert not destination.exists()
        assert response.closed

    @pytest.mark.asyncio
    async def test_io_failure_is_terminal_state(self, tmp_path):
        """Test read errors end the sequence with FAILED, not an exception."""
        stream = FailingStream(b"a" * 100)
        response = RawResponse(200, {"Content-Length": "200"}, stream)

        states = await collect(save_to_file(response, tmp_path / "broken.bin", chunk_size=100))

        assert statuses(states) == [
            DownloadStatus.STARTED,
            DownloadStatus.DOWNLOADING,
            DownloadStatus.FAILED,
        ]
        assert isinstance(states[-1].error, OSError)
        assert response.closed

    @pytest.mark.asyncio
    async def test_unwritable_destination(self, tmp_path):
        """Test a destination that cannot be opened yields FAILED."""
        response = RawResponse.from_bytes(200, {"Content-Length": "3"}, b"abc")
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")

        states = await collect(save_to_file(response, blocker / "child.bin"))

        assert statuses(states) == [DownloadStatus.STARTED, DownloadStatus.FAILED]
        assert response.closed

    @pytest.mark.asyncio
    async def test_unknown_length_skips_progress(self, tmp_path):
        """Test no DOWNLOADING states without a Content-Length."""
        response = RawResponse.from_bytes(200, {}, b"abcdef")
        destination = tmp_path / "out.bin"

        states = await collect(save_to_file(response, destination, chunk_size=2))

        assert statuses(states) == [DownloadStatus.STARTED, DownloadStatus.FINISHED]
        assert destination.read_bytes() == b"abcdef"

    @pytest.mark.asyncio
    async def test_early_detach_closes_response(self, tmp_path):
        """Test the response is closed when the consumer stops early."""
        response = RawResponse.from_bytes(200, {"Content-Length": "4096"}, b"z" * 4096)
        states = save_to_file(response, tmp_path / "partial.bin", chunk_size=512)

        async for state in states:
            if state.status == DownloadStatus.DOWNLOADING:
                break
        await states.aclose()

        assert response.closed

    @pytest.mark.asyncio
    async def test_runs_on_manager(self, tmp_path):
        """Test I/O can run on a provided worker pool."""
        response = RawResponse.from_bytes(200, {"Content-Length": "5"}, b"hello")
        with ConcurrencyManager(max_workers=1) as manager:
            states = await collect(save_to_file(response, tmp_path / "nested" / "a.txt", manager=manager))

        assert states[-1].status == DownloadStatus.FINISHED
        assert (tmp_path / "nested" / "a.txt").read_text() == "hello"

    @pytest.mark.asyncio
    async def test_invalid_chunk_size(self, tmp_path):
        """Test chunk sizes below 1 are rejected."""
        response = RawResponse.from_bytes(200, {}, b"")
        with pytest.raises(ValueError):
            await collect(save_to_file(response, tmp_path / "x", chunk_size=0))

    def test_compute_progress(self):
        """Test progress rounding and capping."""
        assert compute_progress(1, 3) == 33
        assert compute_progress(3, 3) == 100
        assert compute_progress(5, 3) == 100


class TestClientDownload:
    """Tests for SimpleRest.download()."""

    @pytest.mark.asyncio
    async def test_download(self, client, transport, tmp_path):
        """Test GET piped into a file."""
        transport.respond(200, {"Content-Length": "6"}, b"abcdef")
        destination = tmp_path / "file.bin"

        states = await collect(client.download("/files/1", destination, chunk_size=3))

        assert statuses(states) == [
            DownloadStatus.STARTED,
            DownloadStatus.DOWNLOADING,
            DownloadStatus.DOWNLOADING,
            DownloadStatus.FINISHED,
        ]
        assert [s.progress for s in states[1:3]] == [50, 100]
        assert destination.read_bytes() == b"abcdef"
        assert transport.requests[0].url == "https://a/api/files/1"

    @pytest.mark.asyncio
    async def test_download_call_failure(self, client, transport, tmp_path):
        """Test a failed call becomes a FAILED state."""
        transport.error = ConnectionError("down")

        states = await collect(client.download("/files/1", tmp_path / "file.bin"))

        assert statuses(states) == [DownloadStatus.FAILED]
        assert isinstance(states[0].error, CallFailedError)
