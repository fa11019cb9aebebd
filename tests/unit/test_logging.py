from __future__ import annotations

import json
import logging

from src.utils.logging import _json_formatter

EXPECTED_ROWS = 10
EXPECTED_USERS = 8


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.rows = EXPECTED_ROWS
    record.challenge = "4.2"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["rows"] == EXPECTED_ROWS
    assert payload["challenge"] == "4.2"


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"users": EXPECTED_USERS}

    payload = json.loads(_json_formatter(record))

    assert payload["users"] == EXPECTED_USERS
    assert "extra" not in payload


def test_json_formatter_serializes_unknown_types_as_strings() -> None:
    record = _record("Seeded")
    record.skipped = {"Monitoring"}

    payload = json.loads(_json_formatter(record))

    assert payload["skipped"] == "{'Monitoring'}"


def test_logger_extra_reaches_formatter(caplog) -> None:
    logger = logging.getLogger("test.extra")
    with caplog.at_level(logging.INFO, logger="test.extra"):
        logger.info("Blog dataset seeded", extra={"users": EXPECTED_USERS})

    payload = json.loads(_json_formatter(caplog.records[0]))
    assert payload["users"] == EXPECTED_USERS
