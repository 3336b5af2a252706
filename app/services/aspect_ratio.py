"""
Classify a staged video as landscape (16:9), portrait (9:16) or other using ffprobe.
Container metadata rarely encodes exact ratios, so classification uses tolerance bands.
"""
import logging
import subprocess
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, ValidationError

from app.config import Settings

logger = logging.getLogger(__name__)

ASPECT_16_9 = "16:9"
ASPECT_9_16 = "9:16"
ASPECT_OTHER = "other"

# Inclusive bounds on width / height
LANDSCAPE_RANGE = (1.77, 1.78)
PORTRAIT_RANGE = (0.56, 0.57)


class ProbeError(Exception):
    """ffprobe failed or reported nothing usable for the file."""


class ProbeStream(BaseModel):
    index: int | None = None
    codec_type: str | None = None
    width: int | None = None
    height: int | None = None


class ProbeResult(BaseModel):
    streams: list[ProbeStream] = []

    def video_streams(self) -> list[ProbeStream]:
        # Older ffprobe builds may omit codec_type; any stream with dimensions counts then.
        return [
            s for s in self.streams
            if s.codec_type == "video" or (s.codec_type is None and s.width is not None)
        ]


class Prober(Protocol):
    def probe(self, path: Path) -> ProbeResult: ...


class FFprobeProber:
    """Runs ffprobe with JSON output and parses its stream list."""

    def __init__(self, settings: Settings):
        self._bin = settings.ffprobe_bin
        self._timeout = settings.ffprobe_timeout_seconds

    def probe(self, path: Path) -> ProbeResult:
        cmd = [
            self._bin,
            "-v", "error",
            "-print_format", "json",
            "-show_streams",
            str(path),
        ]
        try:
            proc = subprocess.run(cmd, check=True, capture_output=True, timeout=self._timeout)
        except subprocess.CalledProcessError as e:
            logger.error("ffprobe failed for %s: %s", path, e.stderr and e.stderr.decode(errors="replace") or e)
            raise ProbeError(f"ffprobe exited with status {e.returncode}") from e
        except subprocess.TimeoutExpired as e:
            logger.error("ffprobe timed out for %s", path)
            raise ProbeError("ffprobe timed out") from e
        except FileNotFoundError as e:
            logger.error("ffprobe not found; install FFmpeg to enable aspect ratio detection")
            raise ProbeError("ffprobe not found") from e

        try:
            return ProbeResult.model_validate_json(proc.stdout)
        except ValidationError as e:
            raise ProbeError(f"could not parse ffprobe output: {e}") from e


def classify_ratio(width: int, height: int) -> str:
    """Map pixel dimensions to 16:9, 9:16 or other."""
    ratio = width / height
    if LANDSCAPE_RANGE[0] <= ratio <= LANDSCAPE_RANGE[1]:
        return ASPECT_16_9
    if PORTRAIT_RANGE[0] <= ratio <= PORTRAIT_RANGE[1]:
        return ASPECT_9_16
    return ASPECT_OTHER


def get_video_aspect_ratio(path: Path, prober: Prober) -> str:
    """
    Probe the file and classify its first video stream.
    Raises ProbeError when the probe fails or no video stream has usable dimensions.
    """
    logger.info("Analyzing file: %s", path)
    result = prober.probe(path)
    streams = result.video_streams()
    if not streams:
        raise ProbeError("no video streams found in file")

    stream = streams[0]
    if not stream.width or not stream.height or stream.width < 0 or stream.height < 0:
        raise ProbeError(f"invalid video dimensions {stream.width}x{stream.height}")

    aspect = classify_ratio(stream.width, stream.height)
    logger.info(
        "Width: %d, Height: %d, Ratio: %.4f, Aspect: %s",
        stream.width, stream.height, stream.width / stream.height, aspect,
    )
    return aspect
