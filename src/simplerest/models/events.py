"""Progress states emitted by file downloads."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DownloadStatus(str, Enum):
    """Kinds of download state."""

    STARTED = "started"
    DOWNLOADING = "downloading"
    FINISHED = "finished"
    FAILED = "failed"


@dataclass(frozen=True)
class DownloadState:
    """
    One step of a download.

    Example:
        async for state in save_to_file(response, path):
            if state.status == DownloadStatus.DOWNLOADING:
                print(f"{state.progress}%")
            elif state.status == DownloadStatus.FAILED:
                print(f"Error: {state.error}")
    """

    status: DownloadStatus
    progress: int | None = None
    error: BaseException | None = None

    @classmethod
    def started(cls) -> DownloadState:
        return cls(DownloadStatus.STARTED)

    @classmethod
    def downloading(cls, progress: int) -> DownloadState:
        if not 0 <= progress <= 100:
            raise ValueError(f"Progress must be within 0..100, got {progress}")
        return cls(DownloadStatus.DOWNLOADING, progress=progress)

    @classmethod
    def finished(cls) -> DownloadState:
        return cls(DownloadStatus.FINISHED)

    @classmethod
    def failed(cls, cause: BaseException | None = None) -> DownloadState:
        return cls(DownloadStatus.FAILED, error=cause)

    @property
    def is_terminal(self) -> bool:
        """Check if no further states follow this one."""
        return self.status in (DownloadStatus.FINISHED, DownloadStatus.FAILED)
