"""Tests for utils/notify.py and utils/log.py."""
import io
import json
import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from utils.log import JsonFormatter, configure_logging
from utils.notify import Notice, NotificationChannel, log_subscriber


# ── Notice ────────────────────────────────────────────────────────────────────

class TestNotice:
    def test_success_auto_dismisses(self):
        notice = Notice.success("Draft Saved", "Your project draft has been saved successfully.")
        assert notice.severity == "success"
        assert notice.timer_ms == 3000
        assert not notice.requires_confirmation

    def test_error_stays(self):
        assert Notice.error("Error", "Failed").timer_ms is None

    def test_confirm_requires_ack(self):
        assert Notice.confirm("Delete draft?").requires_confirmation

    def test_unknown_severity(self):
        with pytest.raises(ValueError, match="Unknown severity"):
            Notice("fatal", "x")

    def test_frozen(self):
        notice = Notice.info("x")
        with pytest.raises(AttributeError):
            notice.title = "y"


# ── NotificationChannel ───────────────────────────────────────────────────────

class TestNotificationChannel:
    def test_queue_without_subscribers(self):
        channel = NotificationChannel()
        channel.publish(Notice.info("one"))
        channel.publish(Notice.warning("two"))
        assert [n.title for n in channel.drain()] == ["one", "two"]
        assert channel.drain() == []

    def test_subscribers_called_in_order(self):
        channel = NotificationChannel()
        seen = []
        channel.subscribe(lambda n: seen.append(("a", n.title)))
        channel.subscribe(lambda n: seen.append(("b", n.title)))
        channel.publish(Notice.success("Saved"))
        assert seen == [("a", "Saved"), ("b", "Saved")]

    def test_unsubscribe(self):
        channel = NotificationChannel()
        seen = []
        unsubscribe = channel.subscribe(seen.append)
        unsubscribe()
        unsubscribe()
        channel.publish(Notice.info("x"))
        assert seen == []

    def test_failing_subscriber_skipped(self, caplog):
        channel = NotificationChannel()
        seen = []

        def boom(notice):
            raise RuntimeError("display gone")

        channel.subscribe(boom)
        channel.subscribe(seen.append)
        with caplog.at_level(logging.ERROR, logger="utils.notify"):
            channel.publish(Notice.info("still delivered"))
        assert [n.title for n in seen] == ["still delivered"]
        assert "subscriber failed" in caplog.text

    def test_bounded_queue(self):
        channel = NotificationChannel(maxlen=2)
        for title in ("a", "b", "c"):
            channel.publish(Notice.info(title))
        assert [n.title for n in channel.drain()] == ["b", "c"]

    def test_log_subscriber_levels(self, caplog):
        channel = NotificationChannel()
        channel.subscribe(log_subscriber(logging.getLogger("notices")))
        with caplog.at_level(logging.INFO, logger="notices"):
            channel.publish(Notice.error("Error", "Failed to save draft"))
            channel.publish(Notice.success("Saved"))
        assert [(r.levelno, r.getMessage()) for r in caplog.records] == [
            (logging.ERROR, "Error: Failed to save draft"),
            (logging.INFO, "Saved"),
        ]


# ── Logging ───────────────────────────────────────────────────────────────────

class TestLogging:
    def test_json_formatter_includes_request_fields(self):
        record = logging.LogRecord("client.session", logging.INFO, __file__, 1,
                                   "GET %s", ("/projects",), None)
        record.method = "GET"
        record.status = 200
        data = json.loads(JsonFormatter().format(record))
        assert data["message"] == "GET /projects"
        assert data["level"] == "INFO"
        assert data["method"] == "GET"
        assert data["status"] == 200
        assert "endpoint" not in data

    def test_configure_json(self):
        stream = io.StringIO()
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            configure_logging("json", "debug", stream=stream)
            logging.getLogger("x").debug("hello", extra={"endpoint": "/questions"})
            line = json.loads(stream.getvalue().strip())
            assert line["endpoint"] == "/questions"
            assert root.level == logging.DEBUG
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

    def test_configure_text(self):
        stream = io.StringIO()
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            handler = configure_logging("text", "INFO", stream=stream)
            assert not isinstance(handler.formatter, JsonFormatter)
            logging.getLogger("x").info("plain")
            assert "INFO x plain" in stream.getvalue()
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
