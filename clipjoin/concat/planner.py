from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from clipjoin.errors import ManifestWriteError


@dataclass(frozen=True, slots=True)
class ConcatManifest:
    """Ordered file list in ffmpeg concat demuxer syntax."""

    entries: tuple[Path, ...]

    def render(self) -> str:
        return "".join(f"file '{_quote(entry)}'\n" for entry in self.entries)


def build_manifest(video_paths: Sequence[Path]) -> ConcatManifest:
    return ConcatManifest(entries=tuple(Path(path) for path in video_paths))


def manifest_filename(prefix: str = "tmp", now: float | None = None) -> str:
    timestamp = int(time.time() if now is None else now)
    return f"{prefix}{timestamp}.txt"


def write_manifest(
    manifest: ConcatManifest,
    directory: str | Path,
    *,
    prefix: str = "tmp",
    now: float | None = None,
) -> Path:
    """Persist the manifest next to the inputs and return its path."""

    manifest_path = Path(directory) / manifest_filename(prefix, now)
    try:
        manifest_path.write_text(manifest.render(), encoding="utf-8")
    except OSError as exc:
        raise ManifestWriteError(f"Failed to write concat manifest {manifest_path}: {exc}", path=manifest_path) from exc
    return manifest_path


def _quote(path: Path) -> str:
    # concat demuxer: a quote inside a quoted string is written as '\''
    return str(path).replace("'", "'\\''")
