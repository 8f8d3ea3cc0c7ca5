import json
import logging
from pathlib import Path

from retrolaunch.exceptions import NotFoundError
from retrolaunch.logging_config import (
    FastFormatter,
    JsonFormatter,
    LoggingTimer,
    _parse_size_string,
    get_logger,
    setup_logging,
)


def _record(level=logging.INFO, msg="hello", exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="retrolaunch.test",
        level=level,
        pathname=__file__,
        lineno=123,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


def test_json_formatter_outputs_expected_fields():
    payload = json.loads(JsonFormatter().format(_record()))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "retrolaunch.test"
    assert payload["message"] == "hello"
    assert payload["lineno"] == 123
    assert "timestamp" in payload


def test_json_formatter_includes_structured_error():
    try:
        raise NotFoundError("no rule", what="launch_rule")
    except NotFoundError as exc:
        record = _record(logging.ERROR, "failed", exc_info=(type(exc), exc, exc.__traceback__))

    payload = json.loads(JsonFormatter().format(record))

    assert payload["error"]["error_code"] == "NOT_FOUND"
    assert payload["error"]["details"]["what"] == "launch_rule"
    assert "NotFoundError" in payload["exc_info"]


def test_fast_formatter_levels():
    formatter = FastFormatter()

    assert "INFO" in formatter.format(_record(logging.INFO))
    assert "[retrolaunch.test]" in formatter.format(_record(logging.WARNING))
    assert "ERROR" in formatter.format(_record(logging.CRITICAL))
    assert "test_logging_config.py" not in formatter.format(_record(logging.DEBUG))
    assert "retrolaunch.test:123" in formatter.format(_record(logging.DEBUG))


def test_fast_formatter_colors():
    text = FastFormatter(enable_colors=True).format(_record(logging.ERROR))

    assert text.startswith("\033[91m")
    assert text.endswith("\033[0m")


def test_setup_logging_writes_file(tmp_path: Path):
    log_file = tmp_path / "logs" / "retrolaunch.log"
    handlers = setup_logging("DEBUG", log_file=log_file, enable_console_logging=False, structured_json=True)
    try:
        get_logger("test").info("written %d", 42)
        for handler in handlers.values():
            handler.flush()

        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["message"] == "written 42"
    finally:
        for handler in handlers.values():
            logging.getLogger("retrolaunch").removeHandler(handler)
            handler.close()


def test_setup_logging_replaces_previous_handlers():
    first = setup_logging("INFO")
    second = setup_logging("WARNING")
    try:
        logger = logging.getLogger("retrolaunch")
        assert first["console"] not in logger.handlers
        assert second["console"] in logger.handlers
        assert logger.level == logging.WARNING
    finally:
        for handler in second.values():
            logging.getLogger("retrolaunch").removeHandler(handler)
            handler.close()


def test_parse_size_string():
    assert _parse_size_string("10MB") == 10 * 1024 * 1024
    assert _parse_size_string("512KB") == 512 * 1024
    assert _parse_size_string("100B") == 100
    assert _parse_size_string("2048") == 2048
    assert _parse_size_string("lots") == 10 * 1024 * 1024


def test_logging_timer_records_duration():
    with LoggingTimer("unit") as timer:
        pass

    assert timer.duration is not None
    assert timer.duration >= 0
