from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from clipjoin.errors import ArgumentError, ExtensionMismatchError, StreamMismatchError
from clipjoin.ingest.paths import MIN_INPUT_FILES
from clipjoin.models import MediaDescriptor, diff_attributes

if TYPE_CHECKING:
    from clipjoin.gateway import MediaToolGateway

logger = logging.getLogger(__name__)


def check_compatibility(video_paths: Sequence[Path], gateway: MediaToolGateway) -> list[MediaDescriptor]:
    """Verify every file can be stream-copied together with the first one.

    Files are checked in join order and the first mismatch raises. The
    extension of each file is compared before it is probed, so a wrong
    container never reaches ffprobe.
    """

    if len(video_paths) < MIN_INPUT_FILES:
        raise ArgumentError(f"Expected at least {MIN_INPUT_FILES} input videos, got {len(video_paths)}.")

    reference: MediaDescriptor | None = None
    reference_extension = Path(video_paths[0]).suffix
    descriptors: list[MediaDescriptor] = []

    for index, video_path in enumerate(video_paths):
        path = Path(video_path)
        if path.suffix != reference_extension:
            raise ExtensionMismatchError(path, expected=reference_extension, actual=path.suffix)

        descriptor = gateway.probe(path)

        if reference is None:
            reference = descriptor
        else:
            differences = {
                **diff_attributes("video", reference.video, descriptor.video),
                **diff_attributes("audio", reference.audio, descriptor.audio),
            }
            if differences:
                raise StreamMismatchError(path, differences)

        logger.debug("File %d/%d compatible: %s", index + 1, len(video_paths), path)
        descriptors.append(descriptor)

    return descriptors
