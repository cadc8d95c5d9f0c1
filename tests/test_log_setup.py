import logging
from pathlib import Path

from chunkscribe.log_setup import setup_logging


def test_progress_goes_to_stdout_and_errors_to_stderr(tmp_path: Path, capsys):
    setup_logging(log_level=logging.INFO, log_dir=str(tmp_path / "logs"), log_file="run.log")
    log = logging.getLogger("chunkscribe.test")

    log.info("Transcribing chunk 0/2...")
    log.error("service unavailable")

    captured = capsys.readouterr()
    assert "Transcribing chunk 0/2..." in captured.out
    assert "service unavailable" not in captured.out
    assert "service unavailable" in captured.err
    assert "Transcribing chunk" not in captured.err

    for handler in logging.getLogger().handlers:
        handler.flush()
    content = (tmp_path / "logs" / "run.log").read_text(encoding="utf-8")
    assert "Transcribing chunk 0/2..." in content
    assert "service unavailable" in content


def test_reconfiguring_replaces_handlers(tmp_path: Path):
    setup_logging(log_dir=str(tmp_path / "a"))
    first = list(logging.getLogger().handlers)
    setup_logging(log_dir=str(tmp_path / "b"))

    handlers = logging.getLogger().handlers
    assert len(handlers) == 3
    assert not any(handler in first for handler in handlers)
    assert (tmp_path / "b" / "chunkscribe.log").exists()


def test_debug_records_are_dropped_at_info(tmp_path: Path, capsys):
    setup_logging(log_level=logging.INFO, log_dir=str(tmp_path / "logs"))

    logging.getLogger("chunkscribe.test").debug("state -> MERGING")

    assert "state -> MERGING" not in capsys.readouterr().out
