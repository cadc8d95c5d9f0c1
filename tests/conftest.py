"""Shared fixtures and fakes for the chunkscribe test suite."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from chunkscribe.exceptions import ExtractionError


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Undo handler changes made by setup_logging so captured streams are not reused."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


class FakeExtractor:
    """Stands in for AudioExtractor: writes placeholder chunk files and records calls."""

    def __init__(self, duration: float = 1900.0, events: list | None = None, fail_on: int | None = None, **_kwargs):
        self.duration = duration
        self.events = events if events is not None else []
        self.fail_on = fail_on
        self.cuts: list[tuple[float, float]] = []

    def verify_tools(self) -> None:
        self.events.append(("verify",))

    def probe_duration(self, audio_path: str) -> float:
        self.events.append(("probe", audio_path))
        return self.duration

    def extract_chunk(self, audio_path: str, start_seconds: float, length_seconds: float, output_path: str) -> str:
        index = len(self.cuts)
        self.events.append(("extract", index))
        if self.fail_on == index:
            raise ExtractionError(f"cannot cut chunk {index}")
        self.cuts.append((start_seconds, length_seconds))
        Path(output_path).write_bytes(b"fake-mp3")
        return output_path


class FakeTranscriber:
    """Returns scripted texts in order; an Exception in the script is raised instead."""

    def __init__(self, texts: list, events: list | None = None, **_kwargs):
        self.texts = list(texts)
        self.events = events if events is not None else []
        self.paths: list[str] = []

    def transcribe(self, audio_path: str) -> str:
        assert Path(audio_path).exists(), "chunk must be cut before it is transcribed"
        self.events.append(("transcribe", len(self.paths)))
        self.paths.append(audio_path)
        action = self.texts.pop(0)
        if isinstance(action, Exception):
            raise action
        return action


@pytest.fixture
def input_audio(tmp_path: Path) -> Path:
    path = tmp_path / "lecture.mp3"
    path.write_bytes(b"not really audio")
    return path


# Three chunk transcripts whose boundaries repeat 40+ characters of text,
# the way the service repeats words spoken in the 15 s overlap.
OVERLAP_1 = "the first overlap phrase is long enough to match"
OVERLAP_2 = "a second overlap phrase that is also long enough"

CHUNK_TEXTS = [
    "Alpha section opens the recording. " + OVERLAP_1,
    OVERLAP_1 + " Beta section is the middle of the talk. " + OVERLAP_2,
    OVERLAP_2 + " Gamma section closes everything.",
]

MERGED_TEXT = (
    "Alpha section opens the recording. " + OVERLAP_1 + "\n"
    "Beta section is the middle of the talk. " + OVERLAP_2 + "\n"
    "Gamma section closes everything."
)
