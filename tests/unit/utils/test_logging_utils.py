"""Tests for structured logging utilities."""

import logging
import uuid

import pytest

from stoptime.utils.logging_utils import (
    LogContext,
    _ContextFilter,
    generate_correlation_id,
    get_log_context,
    log_function_call,
    sanitize_sensitive_data,
)


def _record():
    return logging.LogRecord("stoptime", logging.INFO, "x.py", 1, "msg", (), None)


class TestCorrelationId:
    """Test correlation id helpers."""

    def test_generate(self):
        """Test a valid, unique UUID is generated."""
        first = generate_correlation_id()
        uuid.UUID(first)
        assert first != generate_correlation_id()

    def test_attached_to_records(self):
        """Test the id from the active context lands on log records."""
        record = _record()
        correlation_id = generate_correlation_id()
        with LogContext(correlation_id=correlation_id):
            _ContextFilter().filter(record)

        assert record.correlation_id == correlation_id
        assert "correlation_id" not in get_log_context()


class TestLogContext:
    """Test LogContext context manager."""

    def test_nested_contexts_merge(self):
        """Test inner fields are added and removed again."""
        with LogContext(customer_id=3):
            with LogContext(invoice_number=202401):
                assert get_log_context() == {"customer_id": 3, "invoice_number": 202401}
            assert get_log_context() == {"customer_id": 3}
        assert get_log_context() == {}

    def test_restored_on_exception(self):
        """Test the context is restored when the block raises."""
        with pytest.raises(RuntimeError):
            with LogContext(customer_id=3):
                raise RuntimeError("boom")

        assert get_log_context() == {}

    def test_filter_copies_fields(self):
        """Test the filter attaches context fields to records."""
        record = _record()
        with LogContext(company_revision=2):
            assert _ContextFilter().filter(record) is True

        assert record.company_revision == 2


class TestSanitizeSensitiveData:
    """Test redaction of sensitive values."""

    def test_bank_details_redacted(self):
        """Test account number and BIC are hidden."""
        data = {"name": "Stop Time BV", "accountno": "NL91ABNA0417164300", "bic": "ABNANL2A"}
        sanitized = sanitize_sensitive_data(data)

        assert sanitized == {
            "name": "Stop Time BV",
            "accountno": "***REDACTED***",
            "bic": "***REDACTED***",
        }
        assert data["accountno"] == "NL91ABNA0417164300"

    def test_nested_and_none(self):
        """Test nested dictionaries and cleared values."""
        data = {"settings": {"DATABASE_URL": "postgresql://u:p@db/x"}, "iban": None}

        assert sanitize_sensitive_data(data) == {
            "settings": {"DATABASE_URL": "***REDACTED***"},
            "iban": None,
        }

    def test_non_dict_passthrough(self):
        """Test other values are returned unchanged."""
        assert sanitize_sensitive_data("text") == "text"


class TestLogFunctionCall:
    """Test the log_function_call decorator."""

    def test_logs_entry_and_exit(self, caplog):
        """Test entry and exit are logged at the requested level."""

        @log_function_call(level="INFO")
        def add(a, b):
            return a + b

        with caplog.at_level(logging.INFO):
            assert add(1, 2) == 3

        assert "Entering add" in caplog.text
        assert "Exiting add" in caplog.text

    def test_include_args(self, caplog):
        """Test arguments are included when requested."""

        @log_function_call(include_args=True)
        def pay(number, clock=None):
            return number

        with caplog.at_level(logging.DEBUG):
            pay(202401, clock="fixed")

        assert "with args: 202401, clock='fixed'" in caplog.text

    def test_exception_logged_and_reraised(self, caplog):
        """Test exceptions are logged and propagate."""

        @log_function_call
        def fail():
            raise ValueError("boom")

        with caplog.at_level(logging.DEBUG):
            with pytest.raises(ValueError):
                fail()

        assert "Exception in fail: ValueError: boom" in caplog.text

    def test_preserves_metadata(self):
        """Test functools.wraps keeps the name and docstring."""

        @log_function_call
        def documented():
            """Docstring."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring."
