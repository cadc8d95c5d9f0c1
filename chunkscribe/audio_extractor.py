"""Probes input audio and cuts chunks from it using ffmpeg."""

import ffmpeg
import math
import os
import shutil
import logging
from .exceptions import ExtractionError, ProbeError
from typing import Optional
from .utils import ensure_dir_exists

logger = logging.getLogger(__name__)

def _seconds_arg(seconds: float) -> str:
    # Microsecond precision keeps very short tail windows from rounding to zero
    return f"{seconds:.6f}"

class AudioExtractor:
    """Reads the duration of an audio file and re-encodes time slices of it."""

    def __init__(self, ffmpeg_path: Optional[str] = None, ffprobe_path: Optional[str] = None):
        """
        Initializes the AudioExtractor.

        Args:
            ffmpeg_path: Optional path to the ffmpeg executable.
                         If None, assumes ffmpeg is in the system PATH.
            ffprobe_path: Optional path to the ffprobe executable.
                          If None, assumes ffprobe is in the system PATH.
        """
        self.ffmpeg_cmd = ffmpeg_path or 'ffmpeg'
        self.ffprobe_cmd = ffprobe_path or 'ffprobe'
        logger.debug(f"Using ffmpeg command: {self.ffmpeg_cmd}, ffprobe command: {self.ffprobe_cmd}")

    def verify_tools(self) -> None:
        """
        Checks that both ffmpeg and ffprobe can be found.

        Raises:
            ProbeError: If ffprobe is not available.
            ExtractionError: If ffmpeg is not available.
        """
        if shutil.which(self.ffprobe_cmd) is None:
            raise ProbeError(f"ffprobe not found ({self.ffprobe_cmd}). Install ffmpeg first.")
        if shutil.which(self.ffmpeg_cmd) is None:
            raise ExtractionError(f"ffmpeg not found ({self.ffmpeg_cmd}). Install ffmpeg first.")

    def probe_duration(self, audio_path: str) -> float:
        """
        Returns the duration of an audio file in seconds.

        Raises:
            FileNotFoundError: If the input file does not exist.
            ProbeError: If ffprobe fails or reports no usable duration.
        """
        if not os.path.exists(audio_path):
            raise FileNotFoundError(f"Input audio file not found: {audio_path}")

        try:
            info = ffmpeg.probe(audio_path, cmd=self.ffprobe_cmd)
        except ffmpeg.Error as e:
            stderr_output = e.stderr.decode('utf-8', errors='replace') if e.stderr else "No stderr output"
            logger.error(f"ffprobe failed for {audio_path}: {stderr_output}")
            raise ProbeError(f"ffprobe failed: {stderr_output}") from e
        except OSError as e:
            logger.error(f"Could not run ffprobe ({self.ffprobe_cmd}): {e}")
            raise ProbeError(f"Could not run ffprobe: {e}") from e

        raw = info.get('format', {}).get('duration')
        try:
            duration = float(raw)
        except (TypeError, ValueError) as e:
            raise ProbeError(f"Could not read duration from ffprobe output: {raw!r}") from e
        if not math.isfinite(duration) or duration <= 0:
            raise ProbeError(f"Could not read duration from ffprobe output: {raw!r}")
        return duration

    def build_chunk_stream(self, audio_path: str, start_seconds: float, length_seconds: float, output_path: str):
        """Builds the ffmpeg graph that cuts one slice to a mono 16 kHz MP3 (libmp3lame, VBR quality 4)."""
        return (
            ffmpeg
            .input(audio_path, ss=_seconds_arg(start_seconds), t=_seconds_arg(length_seconds))
            .output(output_path, vn=None, ac=1, ar=16000, acodec='libmp3lame', **{'q:a': 4})
            .global_args('-hide_banner', '-loglevel', 'error')
            .overwrite_output()
        )

    def extract_chunk(self, audio_path: str, start_seconds: float, length_seconds: float, output_path: str) -> str:
        """
        Re-encodes `[start_seconds, start_seconds + length_seconds)` of the input to a mono 16 kHz MP3.

        Re-encoding gives clean cuts at arbitrary offsets, which stream copy does not.

        Args:
            audio_path: Path to the source audio (or video) file.
            start_seconds: Offset of the slice.
            length_seconds: Length of the slice.
            output_path: Where to write the chunk; overwritten if present.

        Returns:
            The output path.

        Raises:
            ExtractionError: If ffmpeg cannot be run or exits with an error.
            FileSystemError: If the output directory cannot be created.
        """
        ensure_dir_exists(os.path.dirname(os.path.abspath(output_path)))
        logger.debug(f"Cutting {audio_path} @ {start_seconds:.3f}s for {length_seconds:.3f}s -> {output_path}")
        stream = self.build_chunk_stream(audio_path, start_seconds, length_seconds, output_path)
        try:
            stream.run(cmd=self.ffmpeg_cmd, capture_stdout=True, capture_stderr=True)
        except ffmpeg.Error as e:
            stderr_output = e.stderr.decode('utf-8', errors='replace') if e.stderr else "No stderr output"
            logger.error(f"ffmpeg stderr: {stderr_output}")
            self._remove_partial(output_path)
            raise ExtractionError(f"ffmpeg failed to cut chunk {output_path}: {stderr_output}") from e
        except OSError as e:
            logger.error(f"Could not run ffmpeg ({self.ffmpeg_cmd}): {e}")
            self._remove_partial(output_path)
            raise ExtractionError(f"Could not run ffmpeg: {e}") from e
        return output_path

    def _remove_partial(self, output_path: str) -> None:
        if os.path.exists(output_path):
            try:
                os.remove(output_path)
            except OSError:
                logger.warning(f"Could not clean up partially created chunk file: {output_path}")
