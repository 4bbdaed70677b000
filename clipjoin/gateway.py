"""Seam between the join pipeline and the FFmpeg command-line tools."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from clipjoin.concat.executor import run_ffmpeg_concat
from clipjoin.config import ToolSettings
from clipjoin.ingest.probe import probe_media
from clipjoin.models import MediaDescriptor


class MediaToolGateway(Protocol):
    """Protocol for the external media tooling used by a join run."""

    def probe(self, path: Path) -> MediaDescriptor:
        """Describe the first video and audio stream of ``path``.

        Raises:
            ProbeError: If the file cannot be inspected or lacks a stream kind.
        """
        ...

    def concat(self, manifest_path: Path, output_path: Path) -> None:
        """Stream-copy every file listed in ``manifest_path`` into ``output_path``.

        Raises:
            ConcatExecutionError: If the concatenation tool fails.
        """
        ...


class FfmpegGateway:
    """Gateway backed by the ``ffprobe`` and ``ffmpeg`` binaries."""

    def __init__(self, ffprobe_bin: str = "ffprobe", ffmpeg_bin: str = "ffmpeg") -> None:
        self.ffprobe_bin = ffprobe_bin
        self.ffmpeg_bin = ffmpeg_bin

    @classmethod
    def from_settings(cls, settings: ToolSettings) -> FfmpegGateway:
        return cls(ffprobe_bin=settings.ffprobe_bin, ffmpeg_bin=settings.ffmpeg_bin)

    def probe(self, path: Path) -> MediaDescriptor:
        return probe_media(path, ffprobe_bin=self.ffprobe_bin)

    def concat(self, manifest_path: Path, output_path: Path) -> None:
        run_ffmpeg_concat(manifest_path, output_path, ffmpeg_bin=self.ffmpeg_bin)
