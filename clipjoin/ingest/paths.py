from __future__ import annotations

from pathlib import Path

from clipjoin.errors import ArgumentError, PathResolutionError
from clipjoin.models import JoinRequest

MIN_INPUT_FILES = 2


def split_video_names(raw_names: str) -> list[str]:
    """Split the comma-separated CLI list, keeping the user's order."""

    names = [name.strip() for name in raw_names.split(",")]
    if any(not name for name in names):
        raise ArgumentError(f"Empty video file name in {raw_names!r}.")
    if len(names) < MIN_INPUT_FILES:
        raise ArgumentError(f"Expected at least {MIN_INPUT_FILES} input videos, got {len(names)}.")
    return names


def join_inside(input_dir: Path, name: str) -> Path:
    """Join ``name`` under ``input_dir``, dropping any root so absolute names stay inside."""

    candidate = Path(name)
    if candidate.anchor:
        candidate = candidate.relative_to(candidate.anchor)
    return input_dir / candidate


def resolve_video_path(name: str, input_dir: Path) -> Path:
    video_path = join_inside(input_dir, name)
    if not video_path.exists():
        raise PathResolutionError(f"Failed to find video {video_path}.", path=video_path)
    if video_path.is_dir():
        raise PathResolutionError(f"Provided video file {video_path} is a directory.", path=video_path)
    return video_path


def build_join_request(input_dir: str | Path, raw_names: str, output_name: str) -> JoinRequest:
    """Resolve every named input inside ``input_dir`` and the output path next to them."""

    names = split_video_names(raw_names)
    resolved_dir = Path(input_dir).expanduser().resolve()

    video_paths = tuple(resolve_video_path(name, resolved_dir) for name in names)

    if not output_name.strip():
        raise ArgumentError("Output file name must not be empty.")
    output_path = join_inside(resolved_dir, output_name).resolve()
    if output_path in {path.resolve() for path in video_paths}:
        raise ArgumentError(f"Output file {output_path} is also listed as an input.", path=output_path)

    return JoinRequest(input_dir=resolved_dir, video_paths=video_paths, output_path=output_path)
