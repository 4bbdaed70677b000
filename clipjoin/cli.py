from __future__ import annotations

import json
import logging
from pathlib import Path
from time import perf_counter
from typing import Callable, TypeVar

import typer

from clipjoin.concat.executor import concatenate
from clipjoin.concat.planner import build_manifest, write_manifest
from clipjoin.config import Settings, load_settings
from clipjoin.errors import ClipJoinError
from clipjoin.gateway import FfmpegGateway, MediaToolGateway
from clipjoin.ingest.paths import build_join_request
from clipjoin.logging_config import configure_logging
from clipjoin.verify.compatibility import check_compatibility

app = typer.Typer(
    help="Join video files without re-encoding when their streams are compatible.",
    add_completion=False,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

TOTAL_STEPS = 4


def _run_with_progress(step_index: int, total_steps: int, label: str, work: Callable[[], T]) -> T:
    typer.echo(f"[{step_index}/{total_steps}] {label}...", err=True)
    started_at = perf_counter()
    try:
        result = work()
    except Exception:
        elapsed = perf_counter() - started_at
        typer.echo(f"[{step_index}/{total_steps}] {label} failed after {elapsed:.1f}s", err=True)
        raise
    elapsed = perf_counter() - started_at
    typer.echo(f"[{step_index}/{total_steps}] {label} done in {elapsed:.1f}s", err=True)
    return result


def _bootstrap(config_path: Path | None) -> Settings:
    settings = load_settings(config_path)
    configure_logging(settings.logging)
    logger.debug("Loaded runtime settings from %s", config_path or "defaults")
    return settings


def _build_gateway(settings: Settings) -> MediaToolGateway:
    return FfmpegGateway.from_settings(settings.tools)


@app.command()
def join(
    input_dir: Path = typer.Argument(..., help="Directory containing the input videos."),
    video_files: str = typer.Argument(..., help="Comma-separated video file names, in join order."),
    output_file: str = typer.Argument(..., help="Output file name, created inside the input directory."),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        envvar="CLIPJOIN_CONFIG",
        help="Path to YAML configuration file.",
    ),
) -> None:
    """Verify that all videos share codec parameters, then stream-copy them into one file."""

    settings = _bootstrap(config_path)
    gateway = _build_gateway(settings)

    try:
        request = _run_with_progress(
            1,
            TOTAL_STEPS,
            "Resolve input paths",
            lambda: build_join_request(input_dir, video_files, output_file),
        )
        descriptors = _run_with_progress(
            2,
            TOTAL_STEPS,
            "Verify stream compatibility",
            lambda: check_compatibility(request.video_paths, gateway),
        )
        manifest_path = _run_with_progress(
            3,
            TOTAL_STEPS,
            "Write concat manifest",
            lambda: write_manifest(
                build_manifest(request.video_paths),
                request.input_dir,
                prefix=settings.concat.manifest_prefix,
            ),
        )
        output_path = _run_with_progress(
            4,
            TOTAL_STEPS,
            "Concatenate videos",
            lambda: concatenate(
                gateway,
                manifest_path,
                request.output_path,
                keep_manifest_on_failure=settings.concat.keep_manifest_on_failure,
            ),
        )
    except ClipJoinError as exc:
        logger.error("Join failed during %s: %s", exc.stage, exc)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    reference = descriptors[0]
    typer.echo(
        json.dumps(
            {
                "status": "ok",
                "input_dir": str(request.input_dir),
                "inputs": [str(path) for path in request.video_paths],
                "output_path": str(output_path),
                "extension": reference.extension,
                "video": {
                    "codec": reference.video.codec_long_name,
                    "width": reference.video.width,
                    "height": reference.video.height,
                    "avg_frame_rate": reference.video.avg_frame_rate,
                },
                "audio": {
                    "codec": reference.audio.codec_long_name,
                    "sample_rate": reference.audio.sample_rate,
                },
            },
            indent=2,
        )
    )


if __name__ == "__main__":
    app()
