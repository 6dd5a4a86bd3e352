"""Tests for structured logging."""

import pytest

from cairn.observability.logging import (
    PIIRedactor,
    get_logger,
    setup_logging,
)


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_json_format(self) -> None:
        """Should configure JSON format for production."""
        setup_logging(level="INFO", format="json", redact_pii=False)
        logger = get_logger("test")
        # Should not raise
        logger.info("test_message")

    def test_setup_console_format(self) -> None:
        """Should configure console format for development."""
        setup_logging(level="DEBUG", format="console", redact_pii=False)
        logger = get_logger("test")
        logger.debug("test_message")

    def test_setup_with_pii_redaction(self) -> None:
        setup_logging(level="INFO", format="json", redact_pii=True)
        logger = get_logger("test")
        logger.info("test_message", email="user@example.com")


class TestPIIRedactor:
    """Tests for PIIRedactor processor."""

    @pytest.fixture
    def redactor(self) -> PIIRedactor:
        return PIIRedactor()

    def test_sensitive_keys_redacted(self, redactor: PIIRedactor) -> None:
        event = redactor(None, "info", {"event": "x", "api_key": "sk-123", "Token": "abc"})
        assert event["api_key"] == "[REDACTED]"
        assert event["Token"] == "[REDACTED]"
        assert event["event"] == "x"

    def test_email_in_free_text_scrubbed(self, redactor: PIIRedactor) -> None:
        event = redactor(None, "info", {"event": "x", "prompt": "mail jane@acme.test please"})
        assert event["prompt"] == "mail [EMAIL] please"

    def test_bearer_token_scrubbed(self, redactor: PIIRedactor) -> None:
        event = redactor(None, "info", {"event": "x", "header": "Bearer abc.def-123"})
        assert event["header"] == "Bearer [REDACTED]"

    def test_nested_values(self, redactor: PIIRedactor) -> None:
        event = redactor(
            None,
            "info",
            {"event": "x", "payload": {"password": "p", "to": ["a@b.io", 3]}},
        )
        assert event["payload"] == {"password": "[REDACTED]", "to": ["[EMAIL]", 3]}

    def test_non_sensitive_values_untouched(self, redactor: PIIRedactor) -> None:
        event = redactor(None, "info", {"event": "block_created", "block_type": "hero"})
        assert event == {"event": "block_created", "block_type": "hero"}
