# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for productlens.logging_config: structlog + stdlib bridge."""

from __future__ import annotations

import io
import json
import logging
import sys

import pytest
import structlog

from productlens.logging_config import analysis_context, configure
from productlens.pipeline import analyze_document
from tests._helpers import page


@pytest.fixture(autouse=True)
def _reset_logging():
    """Ensure clean logging state before/after each test."""
    root = logging.getLogger()
    old_handlers = root.handlers[:]
    old_level = root.level
    yield
    root.handlers = old_handlers
    root.setLevel(old_level)
    structlog.reset_defaults()


class TestConsoleRenderer:
    def test_defaults_to_stderr(self):
        configure(json_output=False)
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.handlers[0].stream is sys.stderr

    def test_console_output_is_human_readable(self, capsys):
        configure(json_output=False)
        logging.getLogger("test.console").warning("hello world")
        captured = capsys.readouterr()
        assert "hello world" in captured.err
        assert not captured.err.strip().startswith("{")
        assert captured.out == ""


class TestJSONRenderer:
    def test_json_lines(self):
        stream = io.StringIO()
        configure(json_output=True, stream=stream)
        logging.getLogger("productlens.pipeline").info("analysis done")
        parsed = json.loads(stream.getvalue().strip())
        assert parsed["event"] == "analysis done"
        assert parsed["logger"] == "productlens.pipeline"
        assert parsed["level"] == "info"
        assert "timestamp" in parsed

    def test_percent_args_rendered(self):
        stream = io.StringIO()
        configure(json_output=True, stream=stream)
        logging.getLogger("test.args").info("Platform %s (score=%d)", "amazon", 120)
        assert json.loads(stream.getvalue())["event"] == "Platform amazon (score=120)"

    def test_contextvars_in_output(self):
        stream = io.StringIO()
        configure(json_output=True, stream=stream)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(page_url="https://shop.example.com/p/1")
        try:
            structlog.get_logger("test.ctx").info("ctx test")
            parsed = json.loads(stream.getvalue().strip())
            assert parsed["page_url"] == "https://shop.example.com/p/1"
        finally:
            structlog.contextvars.clear_contextvars()


class TestLogLevel:
    def test_default_level_is_info(self):
        configure()
        assert logging.getLogger().level == logging.INFO

    def test_custom_level(self):
        configure(level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_invalid_level_falls_back_to_info(self):
        configure(level="NONEXISTENT")
        assert logging.getLogger().level == logging.INFO

    def test_noisy_libraries_held_at_warning(self):
        configure(level="DEBUG")
        assert logging.getLogger("asyncio").level == logging.WARNING
        assert logging.getLogger("playwright").level == logging.WARNING


def test_no_handler_stacking():
    configure(json_output=False)
    configure(json_output=True)
    configure(json_output=False)
    assert len(logging.getLogger().handlers) == 1


class TestAnalysisContext:
    def test_fields_bound_inside_block_only(self):
        stream = io.StringIO()
        configure(json_output=True, stream=stream)
        with analysis_context(page="https://shop.example.com/p/1", platform=None):
            logging.getLogger("test.ctx").warning("inside")
        logging.getLogger("test.ctx").warning("outside")
        inside, outside = (json.loads(line) for line in stream.getvalue().splitlines())
        assert inside["page"] == "https://shop.example.com/p/1"
        assert "platform" not in inside
        assert "page" not in outside

    def test_analysis_records_carry_page(self):
        stream = io.StringIO()
        configure(json_output=True, stream=stream)
        analyze_document(page("<p>hello</p>", url="https://shop.example.com/about?ref=nav"))
        records = [json.loads(line) for line in stream.getvalue().splitlines()]
        rejected = next(r for r in records if r["event"].startswith("Not a product page"))
        assert rejected["page"] == "https://shop.example.com/about"


class TestExceptions:
    def test_json_traceback_rendered(self):
        stream = io.StringIO()
        configure(json_output=True, stream=stream)
        try:
            raise ValueError("bad block")
        except ValueError:
            logging.getLogger("test.exc").exception("parse failed")
        parsed = json.loads(stream.getvalue())
        assert "ValueError: bad block" in parsed["exception"]
