"""Tests for logging utility functions."""

import logging
from unittest.mock import MagicMock

from core.errors.exceptions import ThrottlingError
from core.logging.utilities import _RESERVED_LOG_KEYS, log_exception, log_with_context


class TestLogWithContext:

    def test_logs_message_at_given_level(self):
        logger = MagicMock()
        log_with_context(logger, logging.INFO, "test message")

        logger.log.assert_called_once_with(
            logging.INFO, "test message", exc_info=None, extra={}
        )

    def test_passes_extra_fields(self):
        logger = MagicMock()
        log_with_context(
            logger, logging.INFO, "Namespace created",
            namespace="ns1", duration_ms=500,
        )

        logger.log.assert_called_once_with(
            logging.INFO, "Namespace created",
            exc_info=None,
            extra={"namespace": "ns1", "duration_ms": 500},
        )

    def test_filters_reserved_keys(self):
        logger = MagicMock()
        log_with_context(logger, logging.INFO, "msg", name="clash", module="clash", alias="geodr1")

        extra = logger.log.call_args.kwargs["extra"]
        assert extra == {"alias": "geodr1"}

    def test_exc_info_is_passed_through(self):
        logger = MagicMock()
        log_with_context(logger, logging.ERROR, "msg", exc_info=True)
        assert logger.log.call_args.kwargs["exc_info"] is True

    def test_reserved_keys_cover_log_record_fields(self):
        assert {"name", "msg", "args", "message", "exc_info"} <= _RESERVED_LOG_KEYS


class TestLogException:

    def test_extracts_category_from_management_error(self):
        logger = MagicMock()
        exc = ThrottlingError("too many requests", retry_after=5)

        log_exception(logger, exc, "Poll failed")

        level, msg = logger.log.call_args.args
        kwargs = logger.log.call_args.kwargs
        assert level == logging.ERROR
        assert msg == "Poll failed"
        assert kwargs["exc_info"] is exc
        assert kwargs["extra"]["error_category"] == "transient"
        assert kwargs["extra"]["error_type"] == "ThrottlingError"
        assert kwargs["extra"]["error_message"] == "too many requests"

    def test_plain_exception_has_no_category(self):
        logger = MagicMock()
        log_exception(logger, ValueError("bad"), "Oops", include_traceback=False)

        kwargs = logger.log.call_args.kwargs
        assert "exc_info" not in kwargs
        assert "error_category" not in kwargs["extra"]
        assert kwargs["extra"]["error_type"] == "ValueError"

    def test_truncates_long_messages(self):
        logger = MagicMock()
        log_exception(logger, ValueError("x" * 600), "Oops")

        error_message = logger.log.call_args.kwargs["extra"]["error_message"]
        assert len(error_message) == 503
        assert error_message.endswith("...")

    def test_custom_level_and_context(self):
        logger = MagicMock()
        log_exception(logger, ValueError("bad"), "Oops", level=logging.WARNING, alias="geodr1")

        assert logger.log.call_args.args[0] == logging.WARNING
        assert logger.log.call_args.kwargs["extra"]["alias"] == "geodr1"

    def test_explicit_error_type_is_kept(self):
        logger = MagicMock()
        log_exception(logger, ValueError("bad"), "Oops", error_type="validation")
        assert logger.log.call_args.kwargs["extra"]["error_type"] == "validation"
