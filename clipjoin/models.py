from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class VideoAttributes:
    """Video stream parameters that must match for a stream-copy join."""

    codec_long_name: str | None
    pix_fmt: str | None
    width: int | None
    height: int | None
    avg_frame_rate: str | None
    time_base: str | None


@dataclass(frozen=True, slots=True)
class AudioAttributes:
    """Audio stream parameters that must match for a stream-copy join."""

    codec_long_name: str | None
    sample_rate: str | None
    bits_per_raw_sample: str | None


@dataclass(frozen=True, slots=True)
class MediaDescriptor:
    path: str
    extension: str
    video: VideoAttributes
    audio: AudioAttributes


@dataclass(frozen=True, slots=True)
class JoinRequest:
    """Ordered inputs of one run plus the destination file."""

    input_dir: Path
    video_paths: tuple[Path, ...]
    output_path: Path


def diff_attributes(prefix: str, expected: Any, actual: Any) -> dict[str, tuple[Any, Any]]:
    """Return ``{"<prefix>.<field>": (expected, actual)}`` for every differing field."""

    differences: dict[str, tuple[Any, Any]] = {}
    for attribute in fields(expected):
        expected_value = getattr(expected, attribute.name)
        actual_value = getattr(actual, attribute.name)
        if expected_value != actual_value:
            differences[f"{prefix}.{attribute.name}"] = (expected_value, actual_value)
    return differences
