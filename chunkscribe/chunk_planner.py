"""Computes the overlapping time windows a long recording is cut into."""

import logging
import math
from typing import Tuple

from .exceptions import ConfigurationError
from .models import ChunkWindow

logger = logging.getLogger(__name__)

def plan_chunks(duration: float, chunk_seconds: float, overlap_seconds: float) -> Tuple[ChunkWindow, ...]:
    """
    Splits `[0, duration)` into windows of `chunk_seconds` that overlap by `overlap_seconds`.

    Consecutive windows start `chunk_seconds - overlap_seconds` apart. The
    last window is truncated so it ends exactly at `duration`.

    Args:
        duration: Total length of the input audio in seconds.
        chunk_seconds: Nominal window length.
        overlap_seconds: Audio shared by two consecutive windows.

    Returns:
        The windows in playback order, numbered from 0.

    Raises:
        ConfigurationError: If chunk_seconds <= 0, overlap_seconds < 0 or
                            overlap_seconds >= chunk_seconds.
        ValueError: If duration is not a finite positive number.
    """
    if not math.isfinite(duration) or duration <= 0:
        raise ValueError(f"Duration must be a finite positive number, got {duration!r}")
    if chunk_seconds <= 0 or overlap_seconds < 0:
        raise ConfigurationError(
            f"Invalid chunking: chunk_seconds={chunk_seconds}, overlap_seconds={overlap_seconds}"
        )
    step = chunk_seconds - overlap_seconds
    if step <= 0:
        raise ConfigurationError("chunk_seconds must be greater than overlap_seconds")

    windows = []
    index = 0
    start = 0.0
    while start < duration:
        length = min(chunk_seconds, duration - start)
        windows.append(ChunkWindow(index=index, start_seconds=start, length_seconds=length))
        if start + length >= duration:
            break
        index += 1
        # Multiply instead of accumulating so float error does not drift
        start = index * step

    logger.debug(f"Planned {len(windows)} chunk(s) for {duration:.3f}s (step {step}s)")
    return tuple(windows)
