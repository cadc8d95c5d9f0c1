"""Data models for chunkscribe."""

from dataclasses import dataclass
from typing import Optional

DEFAULT_PROMPT = (
    "This is a chunk of a longer recording. Transcribe verbatim. "
    "Do NOT add headings. If the chunk starts mid-sentence, continue naturally."
)

@dataclass(frozen=True)
class ChunkWindow:
    """One time-bounded slice of the source audio."""
    index: int
    start_seconds: float
    length_seconds: float

    @property
    def end_seconds(self) -> float:
        return self.start_seconds + self.length_seconds

    @property
    def artifact_name(self) -> str:
        """File name of the audio chunk cut for this window."""
        return f"chunk_{self.index:04d}.mp3"

@dataclass(frozen=True)
class Settings:
    """Validated run configuration, built once at startup."""
    chunk_seconds: float = 900.0
    overlap_seconds: float = 15.0
    model: str = "gpt-4o-mini-transcribe"
    language: Optional[str] = None
    prompt: Optional[str] = DEFAULT_PROMPT
    min_overlap_chars: int = 40
    max_overlap_chars: int = 500
    scan_slack_chars: int = 20
    max_retries: int = 3
    request_timeout: float = 600.0
    openai_api_key: Optional[str] = None
    temp_dir: Optional[str] = None
    keep_chunks: bool = False
    progress_bar: bool = True
    ffmpeg_path: Optional[str] = None
    ffprobe_path: Optional[str] = None
    log_dir: str = "logs"
    log_file: str = "chunkscribe.log"
