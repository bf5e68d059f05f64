from __future__ import annotations

import json
import logging
from pathlib import Path

from edgetrans.app import config as app_config
from edgetrans.app.logging_setup import ConsoleFormatter, setup_app_logger


def test_setup_app_logger_writes_json_line(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(app_config, "user_config_dir", lambda appname, appauthor=None: str(tmp_path))
    logger, log_dir, log_path = setup_app_logger("edgetrans.test", console=False)

    logger.info("hello", extra={"event": "test_event", "value": 7})
    logger.debug("hidden")
    for h in logger.handlers:
        h.flush()

    assert log_dir.exists()
    assert log_path.exists()
    lines = [ln for ln in log_path.read_text(encoding="utf-8").splitlines() if ln.strip()]
    assert len(lines) == 1
    payload = json.loads(lines[-1])
    assert payload["message"] == "hello"
    assert payload["event"] == "test_event"
    assert payload["value"] == 7
    assert payload["level"] == "INFO"

    for h in logger.handlers:
        h.close()
    logging.getLogger("edgetrans.test").handlers.clear()


def test_setup_app_logger_verbose_enables_debug(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(app_config, "user_config_dir", lambda appname, appauthor=None: str(tmp_path))
    logger, _, _ = setup_app_logger("edgetrans.test_verbose", verbose=True)
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2
    assert all(h.level in (logging.NOTSET, logging.DEBUG) for h in logger.handlers)

    for h in logger.handlers:
        h.close()
    logging.getLogger("edgetrans.test_verbose").handlers.clear()


def test_console_formatter_appends_extra_fields() -> None:
    record = logging.LogRecord("edgetrans.asr", logging.WARNING, __file__, 1, "local_asr_rejected", None, None)
    record.endpoint = "http://localhost:8000/transcribe"
    line = ConsoleFormatter().format(record)
    assert line == "WARNING edgetrans.asr: local_asr_rejected endpoint=http://localhost:8000/transcribe"
