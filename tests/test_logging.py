import logging

from ochat.logging import (
    ColoredFormatter,
    configure_logging_from_args,
    exception_exc_info,
    format_exception_summary,
    get_logger,
    setup_logging,
)


def test_get_logger_prefixes_ochat_namespace() -> None:
    logger = get_logger("module")
    assert logger.name == "ochat.module"


def test_get_logger_keeps_existing_prefix() -> None:
    assert get_logger("ochat.config.loader").name == "ochat.config.loader"


def test_colored_formatter_formats_message() -> None:
    formatter = ColoredFormatter("[%(levelname)s] %(message)s", use_colors=False)
    record = logging.LogRecord(
        name="ochat.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello",
        args=(),
        exc_info=None,
    )
    rendered = formatter.format(record)
    assert "[INFO] hello" in rendered


def test_setup_logging_with_file_handler(tmp_path) -> None:
    log_file = tmp_path / "ochat.log"
    setup_logging(level="DEBUG", log_file=str(log_file))
    logger = get_logger("test")
    logger.debug("debug entry")

    assert log_file.exists()
    content = log_file.read_text(encoding="utf-8")
    assert "debug entry" in content


def test_setup_logging_accepts_settings_level_names() -> None:
    setup_logging(level="warn", console=False)
    assert logging.getLogger("ochat").level == logging.WARNING


def test_setup_logging_without_handlers_installs_null_handler() -> None:
    setup_logging(level="info", console=False)
    handlers = logging.getLogger("ochat").handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], logging.NullHandler)


def test_configure_logging_from_args_selects_level(monkeypatch) -> None:
    calls = []

    def _fake_setup(level: str = "INFO", log_file=None, *, console=True):
        calls.append((level, log_file, console))

    monkeypatch.setattr("ochat.logging.setup_logging", _fake_setup)
    configure_logging_from_args(verbose=True, log_level=None, log_file=None)
    configure_logging_from_args(verbose=False, log_level="WARNING", log_file="x.log", console=False)

    assert calls[0][0] == "DEBUG"
    assert calls[1] == ("WARNING", "x.log", False)


def test_format_exception_summary_truncates_long_messages() -> None:
    error = RuntimeError("x" * 300)
    summary = format_exception_summary(error, max_length=40)
    assert summary.startswith("RuntimeError: ")
    assert summary.endswith("...")
    assert len(summary) == 40


def test_format_exception_summary_collapses_whitespace() -> None:
    summary = format_exception_summary(ValueError("line one\n   line two"))
    assert summary == "ValueError: line one line two"


def test_exception_exc_info_contains_traceback() -> None:
    captured: Exception | None = None
    try:
        raise ValueError("bad value")
    except ValueError as exc:
        captured = exc

    assert captured is not None
    exc_info = exception_exc_info(captured)
    assert exc_info[0] is ValueError
    assert exc_info[1] is captured
    assert exc_info[2] is captured.__traceback__
