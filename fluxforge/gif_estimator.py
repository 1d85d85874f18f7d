"""
fluxforge.gif_estimator
~~~~~~~~~~~~~~~~~~~~~~~
Projected GIF size from geometry, frame rate and clip range.
Pure and cheap enough to call on every slider move.
"""

from __future__ import annotations

from fluxforge.models import GifEstimate

# Empirical bytes per pixel per frame after palette compression.
# Recalibrate against real exports; quality 3 uses the same value.
BYTES_PER_PIXEL_PER_FRAME = 0.12

QUALITY_BYTES_PER_PIXEL: dict[int, float] = {
    1: 0.05,
    2: 0.08,
    3: BYTES_PER_PIXEL_PER_FRAME,
    4: 0.18,
    5: 0.25,
}

# Above this the UI warns that sharing the GIF may be slow.
LARGE_GIF_THRESHOLD_MB = 10.0

_BYTES_PER_MB = 1024 * 1024


def estimate(
    width: int,
    height: int,
    fps: float,
    start_time: float,
    end_time: float,
    quality: int | None = None,
) -> GifEstimate:
    """
    duration   = max(0, end_time - start_time)
    frames     = round(duration * fps)
    size (MB)  = width * height * factor * frames / 1024²

    `factor` is BYTES_PER_PIXEL_PER_FRAME unless a known *quality* is given.
    """
    duration = max(0.0, float(end_time) - float(start_time))
    frame_count = max(0, round(duration * fps))
    factor = QUALITY_BYTES_PER_PIXEL.get(quality, BYTES_PER_PIXEL_PER_FRAME)
    size_mb = (width * height * factor * frame_count) / _BYTES_PER_MB

    return GifEstimate(
        estimated_size_mb=size_mb,
        duration_seconds=duration,
        frame_count=frame_count,
        is_large=size_mb > LARGE_GIF_THRESHOLD_MB,
    )
