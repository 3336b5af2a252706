"""Runs the real ffprobe/ffmpeg binaries on generated clips; skipped where FFmpeg is not installed."""
import shutil
import subprocess

import pytest

from app.services.aspect_ratio import ASPECT_9_16, ASPECT_16_9, FFprobeProber, get_video_aspect_ratio
from app.services.ffmpeg_faststart import FFmpegFastStart

pytestmark = pytest.mark.skipif(
    shutil.which("ffmpeg") is None or shutil.which("ffprobe") is None,
    reason="FFmpeg binaries not on PATH",
)


def _make_clip(path, size):
    subprocess.run(
        [
            "ffmpeg", "-y",
            "-f", "lavfi", "-i", f"testsrc=duration=2:size={size}:rate=30",
            "-pix_fmt", "yuv420p",
            str(path),
        ],
        check=True,
        capture_output=True,
        timeout=120,
    )
    return path


def test_landscape_clip_is_16_9(settings, tmp_path):
    clip = _make_clip(tmp_path / "landscape.mp4", "1920x1080")

    assert get_video_aspect_ratio(clip, FFprobeProber(settings)) == ASPECT_16_9


def test_portrait_clip_is_9_16(settings, tmp_path):
    clip = _make_clip(tmp_path / "portrait.mp4", "1080x1920")

    assert get_video_aspect_ratio(clip, FFprobeProber(settings)) == ASPECT_9_16


def test_faststart_remux_keeps_the_clip_playable(settings, tmp_path):
    clip = _make_clip(tmp_path / "landscape.mp4", "1920x1080")

    out = FFmpegFastStart(settings).remux(clip)

    assert out.exists()
    assert out.stat().st_size > 0
    # moov ahead of mdat once faststart has run
    data = out.read_bytes()
    assert data.index(b"moov") < data.index(b"mdat")
    assert get_video_aspect_ratio(out, FFprobeProber(settings)) == ASPECT_16_9
