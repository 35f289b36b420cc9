"""Tests for log formatting and the comparison audit logger."""

import json
import logging

from entitytax.logging_config import (
    CalculationLogger,
    JsonFormatter,
    ReadableFormatter,
    calculation_id_var,
    configure_logging,
)


def _record(message="hello", **extra_data):
    record = logging.LogRecord("entitytax.test", logging.INFO, __file__, 1, message, None, None)
    if extra_data:
        record.extra_data = extra_data
    return record


class TestFormatters:

    def test_json_formatter(self):
        token = calculation_id_var.set("abc123")
        try:
            data = json.loads(JsonFormatter().format(_record(mode="profit")))
        finally:
            calculation_id_var.reset(token)

        assert data["message"] == "hello"
        assert data["level"] == "INFO"
        assert data["calculation_id"] == "abc123"
        assert data["mode"] == "profit"

    def test_readable_formatter(self):
        line = ReadableFormatter(use_colors=False).format(_record(net_cash=10))
        assert "INFO" in line
        assert "[entitytax.test] hello" in line
        assert "net_cash=10" in line


class TestCalculationLogger:

    def test_records_carry_context(self, caplog):
        calc_log = CalculationLogger(calculation_id="run-1")
        with caplog.at_level(logging.DEBUG, logger="entitytax.calculation"):
            calc_log.start_comparison("YA2024-2025", "profit", 300_000)
            calc_log.log_crossover(None, "search")
            calc_log.log_result("soleProp", -4069.5, 0)

        messages = [record.getMessage() for record in caplog.records]
        assert messages == ["Starting structure comparison", "Crossover resolved", "Comparison complete"]
        assert caplog.records[0].extra_data["calculation_id"] == "run-1"
        assert caplog.records[2].extra_data["which_is_better"] == "soleProp"

    def test_engine_logs_comparison(self, engine, caplog):
        with caplog.at_level(logging.INFO, logger="entitytax.calculation"):
            engine.calculate({"business_profit": 80_000})

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert any("Salary costs use" in r.getMessage() for r in warnings)

    def test_calculator_lines_carry_calculation_id(self, engine):
        lines = []

        class _Collect(logging.Handler):
            def emit(self, record):
                lines.append(json.loads(self.format(record)))

        handler = _Collect(level=logging.DEBUG)
        handler.setFormatter(JsonFormatter())
        calculator_logger = logging.getLogger("entitytax.calculator")
        saved_level = calculator_logger.level
        calculator_logger.addHandler(handler)
        calculator_logger.setLevel(logging.DEBUG)
        try:
            engine.calculate({"business_profit": 300_000})
        finally:
            calculator_logger.removeHandler(handler)
            calculator_logger.setLevel(saved_level)

        assert any(line["logger"] == "entitytax.calculator.sole_prop" for line in lines)
        ids = {line.get("calculation_id") for line in lines}
        assert len(ids) == 1
        assert None not in ids
        assert calculation_id_var.get() is None


def test_configure_logging_json(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(level="WARNING", json_output=True, log_file=tmp_path / "logs" / "engine.log")
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert (tmp_path / "logs").is_dir()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_configure_from_settings(monkeypatch):
    from entitytax.logging_config import configure_from_settings

    monkeypatch.setenv("ENTITYTAX_LOG_LEVEL", "error")
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_from_settings()
        assert root.level == logging.ERROR
        assert isinstance(root.handlers[0].formatter, ReadableFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
