"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

from taskmanager.core.logger import JSONFormatter, configure_logging


def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    # Act
    configure_logging("DEBUG")

    # Assert
    assert logging.getLogger().level == logging.DEBUG
    configure_logging("WARNING")


def test_json_formatter_copies_known_extra_keys() -> None:
    record = logging.LogRecord(
        name="taskmanager.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Refresh token reuse detected",
        args=(),
        exc_info=None,
    )
    record.subject_id = 7
    record.jti = "abc"
    record.password = "never-copied"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "Refresh token reuse detected"
    assert payload["level"] == "WARNING"
    assert payload["subject_id"] == 7
    assert payload["jti"] == "abc"
    assert "password" not in payload
