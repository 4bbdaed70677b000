from __future__ import annotations

import json
import subprocess
from pathlib import Path

import pytest

from clipjoin.errors import ProbeError
from clipjoin.ingest.probe import _run_ffprobe, probe_media


def _ffprobe_payload(*streams: dict[str, object]) -> str:
    return json.dumps({"streams": list(streams)})


_VIDEO_STREAM = {
    "index": 0,
    "codec_type": "video",
    "codec_long_name": "H.264 / AVC / MPEG-4 AVC / MPEG-4 part 10",
    "pix_fmt": "yuv420p",
    "width": 1920,
    "height": 1080,
    "avg_frame_rate": "30/1",
    "time_base": "1/15360",
}

_AUDIO_STREAM = {
    "index": 1,
    "codec_type": "audio",
    "codec_long_name": "AAC (Advanced Audio Coding)",
    "sample_rate": "48000",
}


def _fake_run(stdout: str):
    def _run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess(args=command, returncode=0, stdout=stdout, stderr="")

    return _run


def test_run_ffprobe_wraps_missing_binary_error(tmp_path: Path) -> None:
    video_path = tmp_path / "sample.mp4"
    video_path.write_bytes(b"data")

    def _raise_missing(*args: object, **kwargs: object) -> subprocess.CompletedProcess[str]:
        raise FileNotFoundError("ffprobe")

    with pytest.MonkeyPatch.context() as mp:
        mp.setattr(subprocess, "run", _raise_missing)
        with pytest.raises(ProbeError, match="ffprobe executable was not found"):
            _run_ffprobe(video_path)


def test_run_ffprobe_reports_shared_library_issue(tmp_path: Path) -> None:
    video_path = tmp_path / "sample.mp4"
    video_path.write_bytes(b"data")

    command = ["ffprobe", str(video_path)]

    def _raise_process_error(*args: object, **kwargs: object) -> subprocess.CompletedProcess[str]:
        raise subprocess.CalledProcessError(
            returncode=127,
            cmd=command,
            output="",
            stderr=(
                "ffprobe: error while loading shared libraries: "
                "libSvtAv1Enc.so.4: cannot open shared object file: No such file or directory"
            ),
        )

    with pytest.MonkeyPatch.context() as mp:
        mp.setattr(subprocess, "run", _raise_process_error)
        with pytest.raises(ProbeError, match="failed to start because required shared libraries are missing"):
            _run_ffprobe(video_path)


def test_run_ffprobe_wraps_other_called_process_error(tmp_path: Path) -> None:
    video_path = tmp_path / "sample.mp4"
    video_path.write_bytes(b"data")

    command = ["ffprobe", str(video_path)]

    def _raise_process_error(*args: object, **kwargs: object) -> subprocess.CompletedProcess[str]:
        raise subprocess.CalledProcessError(
            returncode=1,
            cmd=command,
            output="",
            stderr="invalid data found when processing input",
        )

    with pytest.MonkeyPatch.context() as mp:
        mp.setattr(subprocess, "run", _raise_process_error)
        with pytest.raises(ProbeError, match="ffprobe failed while probing media file") as exc_info:
            _run_ffprobe(video_path)

    assert exc_info.value.path == str(video_path)
    assert "invalid data found" in str(exc_info.value)


def test_run_ffprobe_rejects_invalid_json(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(subprocess, "run", _fake_run("not json"))

    with pytest.raises(ProbeError, match="invalid JSON"):
        _run_ffprobe(tmp_path / "sample.mp4")


def test_run_ffprobe_uses_configured_binary(tmp_path: Path, monkeypatch) -> None:
    captured: list[list[str]] = []

    def _run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        captured.append(command)
        return subprocess.CompletedProcess(args=command, returncode=0, stdout="{}", stderr="")

    monkeypatch.setattr(subprocess, "run", _run)
    _run_ffprobe(tmp_path / "sample.mp4", ffprobe_bin="/opt/ffmpeg/bin/ffprobe")

    assert captured[0][0] == "/opt/ffmpeg/bin/ffprobe"
    assert "-show_streams" in captured[0]
    assert captured[0][-1] == str(tmp_path / "sample.mp4")


def test_probe_media_builds_descriptor_from_first_streams(tmp_path: Path, monkeypatch) -> None:
    second_video = {**_VIDEO_STREAM, "index": 2, "width": 640, "height": 360}
    monkeypatch.setattr(
        subprocess,
        "run",
        _fake_run(_ffprobe_payload(_VIDEO_STREAM, _AUDIO_STREAM, second_video, {"codec_type": "data"})),
    )

    descriptor = probe_media(tmp_path / "clip1.mp4")

    assert descriptor.extension == ".mp4"
    assert descriptor.video.width == 1920
    assert descriptor.video.height == 1080
    assert descriptor.video.avg_frame_rate == "30/1"
    assert descriptor.audio.sample_rate == "48000"
    assert descriptor.audio.bits_per_raw_sample is None


def test_probe_media_rejects_audio_only_file(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(subprocess, "run", _fake_run(_ffprobe_payload(_AUDIO_STREAM)))

    with pytest.raises(ProbeError, match="video stream"):
        probe_media(tmp_path / "voice.mp4")


def test_probe_media_rejects_video_only_file(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(subprocess, "run", _fake_run(_ffprobe_payload(_VIDEO_STREAM)))

    with pytest.raises(ProbeError, match="audio stream"):
        probe_media(tmp_path / "silent.mp4")


def test_probe_media_rejects_payload_without_streams(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(subprocess, "run", _fake_run(json.dumps({"format": {}})))

    with pytest.raises(ProbeError, match="no streams array"):
        probe_media(tmp_path / "clip1.mp4")


def _fake_ffprobe(tmp_path: Path, exit_code: int) -> Path:
    script = tmp_path / "fake-ffprobe"
    payload = _ffprobe_payload(_VIDEO_STREAM, {**_AUDIO_STREAM, "tags": {"title": "TITLE"}}).encode("utf-8")
    script.write_bytes(
        b"#!/bin/sh\n"
        b"printf 'Stream #0:1: title \\351t\\351\\n' >&2\n"
        b"cat <<'EOF'\n"
        + payload.replace(b"TITLE", b"\xe9t\xe9")
        + b"\nEOF\n"
        + f"exit {exit_code}\n".encode("ascii")
    )
    script.chmod(0o755)
    return script


def test_probe_media_tolerates_non_utf8_tool_output(tmp_path: Path) -> None:
    ffprobe_bin = _fake_ffprobe(tmp_path, exit_code=0)

    descriptor = probe_media(tmp_path / "clip1.mp4", ffprobe_bin=str(ffprobe_bin))

    assert descriptor.video.width == 1920
    assert descriptor.audio.sample_rate == "48000"


def test_run_ffprobe_keeps_non_utf8_stderr_on_failure(tmp_path: Path) -> None:
    ffprobe_bin = _fake_ffprobe(tmp_path, exit_code=1)

    with pytest.raises(ProbeError, match="ffprobe failed while probing media file") as exc_info:
        _run_ffprobe(tmp_path / "clip1.mp4", ffprobe_bin=str(ffprobe_bin))

    assert "\ufffd" in str(exc_info.value)
