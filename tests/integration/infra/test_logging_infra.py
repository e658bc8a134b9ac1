from __future__ import annotations

"""
Integration tests for Logging Infrastructure.

Verifies the asynchronous QueueListener architecture, idempotency
of configuration, log file rotation, and handler ownership.
"""

import io
import logging
import threading
import time
from logging.handlers import QueueListener
from pathlib import Path
from unittest.mock import patch

import pytest

from filefinder.infra.logging import LoggingConfig, configure_logging, get_default_log_path
from filefinder.infra.logging.core import _CONFIGURED_FLAG_ATTR, _QUEUE_LISTENER_ATTR
from filefinder.infra.logging.handlers import _HANDLER_TAG_ATTR, _create_console_handler


@pytest.fixture(autouse=True)
def reset_logging() -> None:
    """Clean up root logger handlers before and after each test."""
    def _reset() -> None:
        root = logging.getLogger()
        listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
        if isinstance(listener, QueueListener) and getattr(listener, "_thread", None) is not None:
            listener.stop()
        setattr(root, _QUEUE_LISTENER_ATTR, None)

        for h in list(root.handlers):
            if getattr(h, _HANDLER_TAG_ATTR, False):
                root.removeHandler(h)
                h.close()
        setattr(root, _CONFIGURED_FLAG_ATTR, False)

    _reset()
    yield
    _reset()


def _our_handlers():
    return [h for h in logging.getLogger().handlers if getattr(h, _HANDLER_TAG_ATTR, False)]


def test_logging_idempotency() -> None:
    """Multiple config calls do not duplicate handlers."""
    cfg = LoggingConfig(level="INFO", console=True)

    configure_logging(cfg)
    initial = len(_our_handlers())

    configure_logging(cfg)
    assert len(_our_handlers()) == initial == 1, "Handlers were duplicated."


def test_force_rebuilds_listener() -> None:
    configure_logging(LoggingConfig(level="INFO"))
    root = logging.getLogger()
    first = getattr(root, _QUEUE_LISTENER_ATTR)

    configure_logging(LoggingConfig(level="DEBUG"), force=True)

    second = getattr(root, _QUEUE_LISTENER_ATTR)
    assert second is not first
    assert root.level == logging.DEBUG
    assert len(_our_handlers()) == 1


def test_log_rotation(tmp_path: Path) -> None:
    """File rotation happens when the size limit is exceeded."""
    log_file = tmp_path / "logs" / "test_rotate.log"
    cfg = LoggingConfig(
        level="DEBUG",
        console=False,
        log_file=str(log_file),
        max_bytes=100,
        backup_count=1,
    )

    configure_logging(cfg)
    logger = logging.getLogger("test_rotate")

    for _ in range(10):
        logger.debug("This is a long log message to trigger rotation." * 5)

    # Give time for the QueueListener to process
    time.sleep(0.5)

    assert log_file.exists()
    assert (tmp_path / "logs" / "test_rotate.log.1").exists(), "Rotation backup file was not created."


def test_records_from_worker_threads_carry_thread_name(tmp_path: Path) -> None:
    """File entries identify the worker thread that emitted them."""
    log_file = tmp_path / "threads.log"
    configure_logging(LoggingConfig(level="WARNING", console=False, log_file=str(log_file)))

    t = threading.Thread(
        target=lambda: logging.getLogger("filefinder.test").warning("from worker"),
        name="filefinder-worker_7",
    )
    t.start()
    t.join()

    _stop_listener()
    content = log_file.read_text(encoding="utf-8")
    assert "filefinder-worker_7" in content
    assert "from worker" in content


def test_queue_listener_architecture() -> None:
    """The root logger uses a QueueHandler-based architecture."""
    configure_logging(LoggingConfig(level="INFO", console=True))

    root = logging.getLogger()
    assert len(_our_handlers()) > 0
    assert getattr(root, _QUEUE_LISTENER_ATTR) is not None
    assert getattr(root, _CONFIGURED_FLAG_ATTR) is True


def test_unwritable_log_file_keeps_console(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a dir", encoding="utf-8")

    configure_logging(LoggingConfig(level="INFO", log_file=str(blocker / "x.log")))

    assert "Cannot open log file" in capsys.readouterr().err
    assert len(_our_handlers()) == 1


def test_no_handlers_requested_leaves_root_untouched() -> None:
    configure_logging(LoggingConfig(console=False, log_file=None))

    assert _our_handlers() == []
    assert getattr(logging.getLogger(), _CONFIGURED_FLAG_ATTR) is False


def test_console_handler_targets_given_stream() -> None:
    stream = io.StringIO()
    handler = _create_console_handler(logging.INFO, logging.Formatter("%(message)s"), stream)

    handler.handle(logging.makeLogRecord({"msg": "hello", "levelno": logging.INFO}))

    assert stream.getvalue() == "hello\n"
    assert getattr(handler, _HANDLER_TAG_ATTR) is True


def test_default_log_path_in_user_data(isolated_user_data: Path) -> None:
    assert get_default_log_path() == str(isolated_user_data / "logs" / "filefinder.log")


def test_setup_failure_switches_to_emergency_console() -> None:
    with patch(
        "filefinder.infra.logging.core._create_console_handler",
        side_effect=RuntimeError("broken"),
    ):
        configure_logging(LoggingConfig(level="INFO", console=True))

    handlers = _our_handlers()
    assert len(handlers) == 1
    assert "CRITICAL FALLBACK" in handlers[0].formatter._fmt


def _stop_listener() -> None:
    """Flush the queue by stopping the active listener."""
    root = logging.getLogger()
    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener is not None:
        listener.stop()
        setattr(root, _QUEUE_LISTENER_ATTR, None)
