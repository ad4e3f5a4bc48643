"""Unit tests for structured logging and stage timers."""

import json
import logging

from answer_eval.core.logging_config import StructuredFormatter, configure_structured_logging
from answer_eval.utils.timing import StageTimers


class TestStructuredFormatter:
    def test_includes_known_extras(self):
        record = logging.LogRecord("answer_eval.x", logging.WARNING, __file__, 10, "boom", None, None)
        record.provider = "gemini"
        record.error_kind = "timeout"
        record.unrelated = "ignored"

        data = json.loads(StructuredFormatter().format(record))

        assert data["level"] == "WARNING"
        assert data["message"] == "boom"
        assert data["provider"] == "gemini"
        assert data["error_kind"] == "timeout"
        assert "unrelated" not in data

    def test_configure_silences_httpx(self):
        configure_structured_logging("DEBUG", json_format=False)
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING


class TestStageTimers:
    def test_accumulates_per_stage(self):
        timers = StageTimers()
        with timers.timer("extraction"):
            pass
        with timers.timer("extraction"):
            pass
        with timers.timer("evaluation"):
            pass

        assert set(timers.totals) == {"extraction", "evaluation"}
        assert all(ms >= 0 for ms in timers.as_millis().values())
        assert timers.total_ms >= 0

    def test_nested_stage_is_not_counted_twice(self):
        ticks = iter([0.0, 0.5, 0.75, 2.0])
        timers = StageTimers(clock=lambda: next(ticks))

        with timers.timer("evaluation"):
            with timers.timer("parse"):
                pass

        assert timers.as_millis() == {"parse": 250, "evaluation": 2000}
        assert timers.total_ms == 2000

    def test_log_extra(self):
        ticks = iter([0.0, 1.5, 1.5, 1.75])
        timers = StageTimers(clock=lambda: next(ticks))
        with timers.timer("extraction"):
            pass

        assert timers.log_extra(question_id="q-1") == {"question_id": "q-1", "duration_ms": 1500}

        with timers.timer("sanitize"):
            pass

        extra = timers.log_extra()
        assert extra["duration_ms"] == 1750
        assert extra["timings"] == {"extraction": 1500, "sanitize": 250}
