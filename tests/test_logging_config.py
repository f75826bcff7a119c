"""Tests for logging setup and the verification summary."""
from __future__ import annotations

import io
import json
import logging
import sys

import pytest

from approval_proof.batch import verify_request
from approval_proof.logging_config import (
    BatchContextFilter,
    BatchLogContext,
    StructuredFormatter,
    generate_batch_id,
    get_batch_id,
    setup_logging,
)
from approval_proof.summary import log_summary, summary_line, summary_lines


def _record(message="hello", **extra):
    record = logging.LogRecord("approval_proof.test", logging.INFO, __file__, 10, message, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestBatchContext:
    def test_generated_ids_are_unique(self):
        first, second = generate_batch_id(), generate_batch_id()
        assert first.startswith("batch_")
        assert first != second

    def test_context_sets_and_resets(self):
        assert get_batch_id() is None
        with BatchLogContext("batch_abc") as context:
            assert context.batch_id == "batch_abc"
            assert get_batch_id() == "batch_abc"
        assert get_batch_id() is None

    def test_filter_stamps_record(self):
        record = _record()
        with BatchLogContext("batch_xyz"):
            BatchContextFilter().filter(record)
        assert record.batch_id == "batch_xyz"


class TestStructuredFormatter:
    def test_json_fields(self):
        record = _record("verified", result_id="N1", is_valid=True, batch_id="batch_1")
        data = json.loads(StructuredFormatter().format(record))

        assert data["message"] == "verified"
        assert data["level"] == "INFO"
        assert data["logger"] == "approval_proof.test"
        assert data["batch_id"] == "batch_1"
        assert data["result_id"] == "N1"
        assert data["is_valid"] is True

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
        data = json.loads(StructuredFormatter().format(record))
        assert "RuntimeError: boom" in data["exception"]


class TestSetupLogging:
    def test_plain_format_includes_batch_id(self, restore_root_logger):
        stream = io.StringIO()
        setup_logging(level="INFO", stream=stream)

        with BatchLogContext("batch_plain"):
            logging.getLogger("approval_proof.test").info("checked")

        assert "[batch_plain] checked" in stream.getvalue()

    def test_json_format(self, restore_root_logger):
        stream = io.StringIO()
        setup_logging(level="DEBUG", json_format=True, stream=stream)

        logging.getLogger("approval_proof.test").debug("detail", extra={"source": "request.json"})

        data = json.loads(stream.getvalue().splitlines()[-1])
        assert data["message"] == "detail"
        assert data["source"] == "request.json"

    def test_level_filters(self, restore_root_logger):
        stream = io.StringIO()
        setup_logging(level="WARNING", stream=stream)
        logging.getLogger("approval_proof.test").info("hidden")
        assert stream.getvalue() == ""

    def test_replaces_existing_handlers(self, restore_root_logger):
        setup_logging(stream=io.StringIO())
        setup_logging(stream=io.StringIO())
        assert len(logging.getLogger().handlers) == 1

    def test_log_file(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "verify.log"
        setup_logging(stream=io.StringIO(), log_file=str(log_file))
        logging.getLogger("approval_proof.test").warning("to file")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "to file" in log_file.read_text(encoding="utf-8")


class TestSummary:
    @pytest.fixture
    def report(self, make_item, make_request):
        items = [make_item(), make_item()]
        items[1]["ValidationRequestId"] = "N000680W00004800001000022061"
        items.append({"ValidationRequestId": "N000680W00004900001500022061"})
        return verify_request(make_request(items))

    def test_summary_lines(self, report):
        assert summary_lines(report) == [
            "-- Signature of result N000680W00004700005000022061 is valid",
            "-- Signature of result N000680W00004800001000022061 is invalid",
            "-- Signature of result N000680W00004900001500022061 is invalid",
        ]
        assert summary_line(report.outcomes[0]) == summary_lines(report)[0]

    def test_log_summary(self, report, caplog):
        with caplog.at_level(logging.DEBUG, logger="approval_proof.summary"):
            log_summary(report)

        records = caplog.records
        assert records[0].getMessage() == "-- Signature of result N000680W00004700005000022061 is valid"
        assert records[0].levelno == logging.DEBUG
        assert records[-1].getMessage() == "Verified 3 results: 1 valid, 2 invalid"
        assert records[-1].levelno == logging.INFO

        warnings = [record for record in records if record.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert warnings[0].error_code == "MISSING_FIELD"
        assert warnings[0].result_id == "N000680W00004900001500022061"

    def test_per_result_lines_hidden_at_info(self, report, caplog):
        with caplog.at_level(logging.INFO, logger="approval_proof.summary"):
            log_summary(report)

        messages = [record.getMessage() for record in caplog.records]
        assert not any(message.startswith("-- Signature of result") for message in messages)
        assert messages[-1] == "Verified 3 results: 1 valid, 2 invalid"

    def test_custom_logger(self, report, caplog):
        custom = logging.getLogger("approval_proof.custom")
        with caplog.at_level(logging.INFO, logger="approval_proof.custom"):
            log_summary(report, log=custom)
        assert {record.name for record in caplog.records} == {"approval_proof.custom"}
