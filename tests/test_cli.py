from __future__ import annotations

from pathlib import Path

import pytest

from chunkscribe import cli
from chunkscribe.exceptions import TranscriptionError
from conftest import CHUNK_TEXTS, MERGED_TEXT, FakeExtractor, FakeTranscriber


@pytest.fixture(autouse=True)
def _workdir(tmp_path: Path, monkeypatch):
    # Log files and the default output land in the test's own directory
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def fake_components(monkeypatch):
    created: dict = {}

    def make_extractor(**kwargs):
        created["extractor_kwargs"] = kwargs
        created["extractor"] = FakeExtractor()
        return created["extractor"]

    def make_transcriber(**kwargs):
        created["transcriber_kwargs"] = kwargs
        created["transcriber"] = FakeTranscriber(created.get("texts", CHUNK_TEXTS))
        return created["transcriber"]

    monkeypatch.setattr(cli, "AudioExtractor", make_extractor)
    monkeypatch.setattr(cli, "OpenAITranscriber", make_transcriber)
    return created


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)
    return excinfo.value.code


def test_missing_input_prints_usage_and_exits_1(capsys):
    assert _run([]) == 1

    captured = capsys.readouterr()
    assert "usage: chunkscribe" in captured.err
    assert captured.out == ""


def test_missing_input_file_exits_1(tmp_path: Path, capsys):
    assert _run([str(tmp_path / "missing.mp3")]) == 1
    assert "not found" in capsys.readouterr().err


def test_successful_run_writes_default_output(tmp_path: Path, input_audio: Path, fake_components, capsys):
    assert _run([str(input_audio)]) == 0

    output = tmp_path / "transcription.txt"
    assert output.read_text(encoding="utf-8") == MERGED_TEXT + "\n"
    stdout_lines = [line for line in capsys.readouterr().out.splitlines() if line.strip()]
    assert "Audio duration: 1900.000s" in "\n".join(stdout_lines)
    assert stdout_lines[-1].endswith(f"Saved transcription to: {output.name}")


def test_output_path_and_overrides_are_passed_through(tmp_path: Path, input_audio: Path, fake_components):
    out = tmp_path / "result" / "talk.txt"

    code = _run([str(input_audio), str(out), "--chunk-seconds", "1000", "--overlap-seconds", "20", "--model", "whisper-1", "--language", "ru"])

    assert code == 0
    assert out.exists()
    assert fake_components["extractor"].cuts == [(0, 1000), (980, 920)]
    assert fake_components["transcriber_kwargs"]["model"] == "whisper-1"
    assert fake_components["transcriber_kwargs"]["language"] == "ru"


def test_config_file_is_loaded(tmp_path: Path, input_audio: Path, fake_components):
    config = tmp_path / "custom.yaml"
    config.write_text("chunk_seconds: 1000\noverlap_seconds: 20\nmax_retries: 5\nprogress_bar: false\n", encoding="utf-8")

    assert _run([str(input_audio), "-c", str(config)]) == 0
    assert fake_components["extractor"].cuts == [(0, 1000), (980, 920)]
    assert fake_components["transcriber_kwargs"]["max_retries"] == 5


def test_explicit_missing_config_exits_1(tmp_path: Path, input_audio: Path, fake_components):
    assert _run([str(input_audio), "-c", str(tmp_path / "nope.yaml")]) == 1


def test_invalid_configuration_exits_1(input_audio: Path, fake_components, capsys):
    assert _run([str(input_audio), "--overlap-seconds", "900"]) == 1
    assert "overlap_seconds" in capsys.readouterr().err


def test_phase_failure_exits_1_without_output(tmp_path: Path, input_audio: Path, fake_components, capsys):
    fake_components["texts"] = [CHUNK_TEXTS[0], TranscriptionError("service unavailable")]

    assert _run([str(input_audio)]) == 1
    assert not (tmp_path / "transcription.txt").exists()
    assert "service unavailable" in capsys.readouterr().err


def test_unexpected_error_exits_2(input_audio: Path, monkeypatch):
    def explode(**kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(cli, "AudioExtractor", explode)

    assert _run([str(input_audio)]) == 2
