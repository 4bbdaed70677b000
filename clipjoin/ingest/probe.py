from __future__ import annotations

import json
import logging
import shlex
import subprocess
from pathlib import Path
from typing import Any

from clipjoin.errors import ProbeError
from clipjoin.models import AudioAttributes, MediaDescriptor, VideoAttributes

logger = logging.getLogger(__name__)

_SHARED_LIBRARY_MARKER = "error while loading shared libraries"


def probe_media(video_path: str | Path, ffprobe_bin: str = "ffprobe") -> MediaDescriptor:
    """Probe one file via ffprobe and describe its first video and audio streams."""

    source_path = Path(video_path)
    payload = _run_ffprobe(source_path, ffprobe_bin=ffprobe_bin)
    return _descriptor_from_payload(source_path, payload)


def _run_ffprobe(video_path: Path, ffprobe_bin: str = "ffprobe") -> dict[str, Any]:
    command = [
        ffprobe_bin,
        "-v",
        "error",
        "-print_format",
        "json",
        "-show_streams",
        str(video_path),
    ]
    logger.info("Running the following command: %s", shlex.join(command))

    try:
        completed = subprocess.run(
            command,
            check=True,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError as exc:
        raise ProbeError(
            "ffprobe executable was not found. Install FFmpeg so ffprobe is available on PATH.",
            path=video_path,
        ) from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        if _SHARED_LIBRARY_MARKER in stderr:
            raise ProbeError(
                "ffprobe is installed but failed to start because required shared libraries are missing. "
                f"ffprobe stderr: {stderr}",
                path=video_path,
            ) from exc
        details = f" ffprobe stderr: {stderr}" if stderr else ""
        raise ProbeError(
            f"ffprobe failed while probing media file: {video_path}.{details}",
            path=video_path,
        ) from exc

    try:
        payload = json.loads(completed.stdout)
    except json.JSONDecodeError as exc:
        raise ProbeError(f"ffprobe returned invalid JSON output for {video_path}.", path=video_path) from exc

    if not isinstance(payload, dict):
        raise ProbeError(f"ffprobe output for {video_path} is not a JSON object.", path=video_path)
    return payload


def _descriptor_from_payload(video_path: Path, payload: dict[str, Any]) -> MediaDescriptor:
    streams = payload.get("streams")
    if not isinstance(streams, list):
        raise ProbeError(f"ffprobe output for {video_path} has no streams array.", path=video_path)

    video_stream = _first_stream(streams, "video")
    audio_stream = _first_stream(streams, "audio")
    if video_stream is None or audio_stream is None:
        missing = [kind for kind, stream in (("video", video_stream), ("audio", audio_stream)) if stream is None]
        raise ProbeError(
            f"Failed to find {' and '.join(missing)} stream in {video_path}; "
            "both a video and an audio stream are required.",
            path=video_path,
        )

    return MediaDescriptor(
        path=str(video_path),
        extension=video_path.suffix,
        video=VideoAttributes(
            codec_long_name=video_stream.get("codec_long_name"),
            pix_fmt=video_stream.get("pix_fmt"),
            width=_to_int(video_stream.get("width"), video_path),
            height=_to_int(video_stream.get("height"), video_path),
            avg_frame_rate=video_stream.get("avg_frame_rate"),
            time_base=video_stream.get("time_base"),
        ),
        audio=AudioAttributes(
            codec_long_name=audio_stream.get("codec_long_name"),
            sample_rate=audio_stream.get("sample_rate"),
            bits_per_raw_sample=audio_stream.get("bits_per_raw_sample"),
        ),
    )


def _first_stream(streams: list[Any], codec_type: str) -> dict[str, Any] | None:
    for stream in streams:
        if isinstance(stream, dict) and stream.get("codec_type") == codec_type:
            return stream
    return None


def _to_int(raw_value: Any, video_path: Path) -> int | None:
    if raw_value in (None, "N/A", ""):
        return None
    try:
        return int(raw_value)
    except (TypeError, ValueError) as exc:
        raise ProbeError(f"ffprobe reported a non-integer dimension {raw_value!r} for {video_path}.", path=video_path) from exc
