"""Orchestrates the chunked transcription pipeline."""

import enum
import logging
import os
import shutil
import tempfile
import time

from tqdm import tqdm

from .audio_extractor import AudioExtractor
from .chunk_planner import plan_chunks
from .exceptions import ChunkScribeError, FileSystemError
from .merger import merge_with_overlap
from .models import ChunkWindow, Settings
from .transcriber import Transcriber
from .utils import ensure_dir_exists, write_text_atomic
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

class PipelineState(enum.Enum):
    INIT = "init"
    PLANNED = "planned"
    EXTRACTING = "extracting"
    TRANSCRIBING = "transcribing"
    MERGING = "merging"
    DONE = "done"
    FAILED = "failed"

class TranscriptionPipeline:
    """
    Manages the end-to-end transcription of one long audio file.

    Chunks are cut, transcribed and merged strictly one after another, in
    playback order. Nothing is written to the output path unless every
    chunk succeeded.
    """

    def __init__(
        self,
        settings: Settings,
        audio_extractor: AudioExtractor,
        transcriber: Transcriber,
    ):
        """
        Initializes the TranscriptionPipeline.

        Args:
            settings: Validated run settings.
            audio_extractor: Probes the input and cuts the chunks.
            transcriber: Turns one chunk into text.

        Raises:
            FileSystemError: If the configured temp_dir is unusable.
        """
        self.settings = settings
        self.audio_extractor = audio_extractor
        self.transcriber = transcriber
        self.state = PipelineState.INIT
        self.current_chunk: Optional[int] = None

        if settings.temp_dir:
            ensure_dir_exists(settings.temp_dir)

    def _enter(self, state: PipelineState, chunk: Optional[ChunkWindow] = None) -> None:
        self.state = state
        self.current_chunk = chunk.index if chunk is not None else None
        suffix = f" (chunk {chunk.index})" if chunk is not None else ""
        logger.debug(f"Pipeline state -> {state.name}{suffix}")

    def plan(self, input_path: str) -> Tuple[float, Tuple[ChunkWindow, ...]]:
        """Probes the input and returns its duration with the chunk plan."""
        self.audio_extractor.verify_tools()
        duration = self.audio_extractor.probe_duration(input_path)
        windows = plan_chunks(duration, self.settings.chunk_seconds, self.settings.overlap_seconds)
        self._enter(PipelineState.PLANNED)
        return duration, windows

    def _merge(self, merged: str, text: str) -> str:
        return merge_with_overlap(
            merged,
            text,
            min_match_chars=self.settings.min_overlap_chars,
            max_match_chars=self.settings.max_overlap_chars,
            scan_slack_chars=self.settings.scan_slack_chars,
        )

    def _process_chunks(self, input_path: str, windows: Tuple[ChunkWindow, ...], scratch_dir: str) -> str:
        merged = ""
        last = len(windows) - 1
        with tqdm(total=len(windows), unit="chunk", desc="Transcribing", disable=not self.settings.progress_bar) as pbar:
            for window in windows:
                chunk_path = os.path.join(scratch_dir, window.artifact_name)

                self._enter(PipelineState.EXTRACTING, window)
                logger.info(f"Cutting chunk {window.index} @ {window.start_seconds:.1f}s for {window.length_seconds:.1f}s")
                self.audio_extractor.extract_chunk(input_path, window.start_seconds, window.length_seconds, chunk_path)

                self._enter(PipelineState.TRANSCRIBING, window)
                logger.info(f"Transcribing chunk {window.index}/{last}...")
                text = (self.transcriber.transcribe(chunk_path) or "").strip()

                self._enter(PipelineState.MERGING, window)
                if text:
                    merged = self._merge(merged, text)
                else:
                    logger.info(f"Chunk {window.index} produced no text, skipping")
                pbar.update(1)
        return merged

    def _cleanup_scratch_dir(self, scratch_dir: Optional[str]) -> None:
        """Removes the run's scratch directory unless chunks should be kept."""
        if not scratch_dir or not os.path.exists(scratch_dir):
            return
        if self.settings.keep_chunks:
            logger.info(f"Keeping chunk files in: {scratch_dir}")
            return
        try:
            shutil.rmtree(scratch_dir)
            logger.debug(f"Cleaned up scratch directory: {scratch_dir}")
        except OSError as e:
            logger.warning(f"Could not remove scratch directory {scratch_dir}: {e}")

    def run(self, input_path: str, output_path: str) -> str:
        """
        Executes the full pipeline for a single input file.

        Args:
            input_path: Path to the input audio file.
            output_path: Path of the text file to write.

        Returns:
            The final transcript as written to `output_path`.

        Raises:
            ChunkScribeError: For any configuration or processing errors in the pipeline.
            FileNotFoundError: If the input file is not found.
        """
        start_time = time.time()
        logger.debug(f"--- Starting transcription of: {input_path} ---")
        scratch_dir = None
        self._enter(PipelineState.INIT)

        try:
            duration, windows = self.plan(input_path)
            try:
                scratch_dir = tempfile.mkdtemp(prefix="chunkscribe-", dir=self.settings.temp_dir)
            except OSError as e:
                raise FileSystemError(f"Could not create scratch directory: {e}") from e
            logger.info(f"Audio duration: {duration:.3f}s")
            logger.info(f"Creating {len(windows)} chunks in: {scratch_dir}")

            merged = self._process_chunks(input_path, windows, scratch_dir)

            final_text = merged.strip() + "\n"
            write_text_atomic(output_path, final_text)
            self._enter(PipelineState.DONE)
            self._cleanup_scratch_dir(scratch_dir)
            scratch_dir = None
            logger.debug(f"--- Transcription completed in {time.time() - start_time:.2f} seconds ---")
            logger.info(f"Saved transcription to: {output_path}")
            return final_text

        except (ChunkScribeError, FileNotFoundError) as e:
            self.state = PipelineState.FAILED
            logger.error(f"Transcription failed: {e}", exc_info=False)
            raise
        except Exception as e:
            self.state = PipelineState.FAILED
            logger.critical(f"An unexpected critical error occurred during transcription: {e}", exc_info=True)
            raise ChunkScribeError(f"An unexpected critical error occurred: {e}") from e
        finally:
            self._cleanup_scratch_dir(scratch_dir)
