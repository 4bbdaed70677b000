from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from clipjoin.errors import CleanupError, ConcatExecutionError

if TYPE_CHECKING:
    from clipjoin.gateway import MediaToolGateway

logger = logging.getLogger(__name__)


def build_concat_command(manifest_path: Path, output_path: Path, ffmpeg_bin: str = "ffmpeg") -> list[str]:
    return [
        ffmpeg_bin,
        "-y",
        "-f",
        "concat",
        "-safe",
        "0",
        "-i",
        str(manifest_path),
        "-c",
        "copy",
        str(output_path),
    ]


def run_ffmpeg_concat(manifest_path: Path, output_path: Path, ffmpeg_bin: str = "ffmpeg") -> None:
    """Stream-copy the files listed in the manifest into ``output_path``."""

    command = build_concat_command(manifest_path, output_path, ffmpeg_bin=ffmpeg_bin)
    logger.info("Running the following command: %s", shlex.join(command))

    try:
        completed = subprocess.run(
            command,
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError as exc:
        raise ConcatExecutionError(
            "ffmpeg executable was not found. Install FFmpeg so ffmpeg is available on PATH.",
            path=output_path,
        ) from exc

    if completed.returncode != 0:
        raise ConcatExecutionError(
            f"ffmpeg failed with exit code {completed.returncode} while writing {output_path}.",
            path=output_path,
            output=completed.stdout or "",
        )


def concatenate(
    gateway: MediaToolGateway,
    manifest_path: Path,
    output_path: Path,
    *,
    keep_manifest_on_failure: bool = True,
) -> Path:
    """Run the concatenation and remove the manifest once it succeeded."""

    try:
        gateway.concat(manifest_path, output_path)
    except ConcatExecutionError:
        if keep_manifest_on_failure:
            logger.warning("Keeping concat manifest for inspection: %s", manifest_path)
        else:
            try:
                manifest_path.unlink(missing_ok=True)
            except OSError as cleanup_exc:
                logger.error("Failed to delete concat manifest %s: %s", manifest_path, cleanup_exc)
        raise

    try:
        manifest_path.unlink()
    except OSError as exc:
        raise CleanupError(
            f"Concatenated {output_path} but failed to delete manifest {manifest_path}: {exc}",
            path=manifest_path,
        ) from exc

    logger.info("Removed concat manifest %s", manifest_path)
    return output_path
