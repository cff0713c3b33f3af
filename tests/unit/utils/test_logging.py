"""Tests for logging configuration."""

import logging
import sys

from student_power.utils.logging import (
    MAX_VALUE_LENGTH,
    QUIET_LOGGERS,
    StructuredFormatter,
    setup_logging,
)


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="student_power.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Cascade delete completed",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    """Tests for StructuredFormatter."""

    def test_formats_key_value_pairs(self):
        output = StructuredFormatter().format(make_record())

        assert 'level="INFO"' in output
        assert 'logger="student_power.test"' in output
        assert 'message="Cascade delete completed"' in output

    def test_includes_extra_fields(self):
        output = StructuredFormatter().format(make_record(root="university", pdfs=12))

        assert 'root="university"' in output
        assert 'pdfs="12"' in output
        assert "lineno" not in output

    def test_catalog_context_precedes_other_extras(self):
        output = StructuredFormatter().format(
            make_record(pdfs=12, courses=2, root_id=7, root="university")
        )

        keys = [part.split("=", 1)[0] for part in output.split(" ")]
        assert keys[-4:] == ["root", "root_id", "courses", "pdfs"]

    def test_values_escaped_to_one_line(self):
        output = StructuredFormatter().format(
            make_record(body='upstream said "no"\nretry')
        )

        assert "\n" not in output
        assert 'body="upstream said \\"no\\"\\nretry"' in output

    def test_lists_joined_and_long_values_truncated(self):
        output = StructuredFormatter().format(
            make_record(failed_keys=["pdfs/a.pdf", "pdfs/b.pdf"], body="x" * 2000)
        )

        assert 'failed_keys="pdfs/a.pdf,pdfs/b.pdf"' in output
        assert f'body="{"x" * MAX_VALUE_LENGTH}..."' in output

    def test_includes_exception(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = make_record()
            record.exc_info = sys.exc_info()

        output = StructuredFormatter().format(record)

        assert "RuntimeError: boom" in output


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_production_uses_structured_formatter(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level

        try:
            setup_logging()

            assert root.level == logging.WARNING
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, StructuredFormatter)
            for name, level in QUIET_LOGGERS.items():
                assert logging.getLogger(name).level == level
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

    def test_development_uses_plain_formatter(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "development")
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level

        try:
            setup_logging()

            assert not isinstance(root.handlers[0].formatter, StructuredFormatter)
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
