"""
Tests for the logging helpers.

Run with: pytest tests/ -v
"""
from __future__ import annotations

import logging

from logUtils import get_logger, handle_error, log


class TestLog:
    def test_log_goes_to_package_logger(self, caplog):
        with caplog.at_level(logging.INFO, logger=get_logger().name):
            log("matched 3 groups")

        assert caplog.records[-1].message == "matched 3 groups"
        assert caplog.records[-1].name == get_logger().name

    def test_force_console_prints(self, capsys):
        log("visible", logging.DEBUG, force_console=True)
        assert "visible" in capsys.readouterr().out

    def test_handle_error_includes_traceback(self, caplog):
        with caplog.at_level(logging.ERROR, logger=get_logger().name):
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                handle_error('test_operation')

        assert '===== Error =====' in caplog.text
        assert 'RuntimeError: boom' in caplog.text
        assert 'test_operation' in caplog.text
