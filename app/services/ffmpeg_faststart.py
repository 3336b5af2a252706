"""
Rewrite an MP4 for progressive playback with FFmpeg: moov atom moved to the front
(-movflags faststart), audio/video stream-copied without re-encoding.
"""
import logging
import subprocess
from pathlib import Path
from typing import Protocol

from app.config import Settings

logger = logging.getLogger(__name__)

PROCESSED_SUFFIX = ".processing"


class RemuxError(Exception):
    """FFmpeg could not rewrite the container."""


class Remuxer(Protocol):
    def remux(self, path: Path) -> Path: ...


def processed_path_for(input_path: Path) -> Path:
    """Sibling output path: the input path with PROCESSED_SUFFIX appended."""
    return input_path.with_name(input_path.name + PROCESSED_SUFFIX)


class FFmpegFastStart:
    """Remuxer backed by the ffmpeg binary. The caller owns (and deletes) the returned file."""

    def __init__(self, settings: Settings):
        self._bin = settings.ffmpeg_bin
        self._timeout = settings.ffmpeg_timeout_seconds

    def remux(self, path: Path) -> Path:
        output_path = processed_path_for(path)
        cmd = [
            self._bin,
            "-y",
            "-i", str(path),
            "-c", "copy",
            "-movflags", "faststart",
            "-f", "mp4",
            str(output_path),
        ]

        try:
            subprocess.run(cmd, check=True, capture_output=True, timeout=self._timeout)
        except subprocess.CalledProcessError as e:
            logger.error("Fast start remux failed for %s: %s", path, e.stderr and e.stderr.decode(errors="replace") or e)
            output_path.unlink(missing_ok=True)
            raise RemuxError(f"ffmpeg exited with status {e.returncode}") from e
        except subprocess.TimeoutExpired as e:
            logger.error("Fast start remux timed out for %s", path)
            output_path.unlink(missing_ok=True)
            raise RemuxError("ffmpeg timed out") from e
        except FileNotFoundError as e:
            logger.error("ffmpeg not found; install FFmpeg to enable fast start processing")
            raise RemuxError("ffmpeg not found") from e

        logger.info("Fast start remux completed for %s", path)
        return output_path
