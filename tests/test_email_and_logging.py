import json
import logging
from unittest.mock import MagicMock

import pytest
from fastapi import BackgroundTasks

from taskboard.logging_config import JsonFormatter, setup_logging
from taskboard.utils import email as email_module
from taskboard.utils.email import EmailSender, deliver


def test_disabled_sender_only_logs(monkeypatch):
    post = MagicMock()
    monkeypatch.setattr(email_module.requests, "post", post)
    sender = EmailSender(api_key="")
    assert sender.enabled is False
    assert sender.send_welcome("a@example.com", "Ada") is False
    post.assert_not_called()


def test_enabled_sender_posts_to_resend(monkeypatch):
    response = MagicMock()
    post = MagicMock(return_value=response)
    monkeypatch.setattr(email_module.requests, "post", post)

    sender = EmailSender(api_key="re_test", app_url="https://board.example")
    assert sender.send_password_reset("a@example.com", "tok123") is True

    args, kwargs = post.call_args
    assert kwargs["headers"]["Authorization"] == "Bearer re_test"
    assert kwargs["json"]["to"] == ["a@example.com"]
    assert "https://board.example/reset-password?token=tok123" in kwargs["json"]["html"]
    response.raise_for_status.assert_called_once()


def test_enabled_sender_propagates_http_errors(monkeypatch):
    response = MagicMock()
    response.raise_for_status.side_effect = RuntimeError("502")
    monkeypatch.setattr(email_module.requests, "post", MagicMock(return_value=response))
    with pytest.raises(RuntimeError):
        EmailSender(api_key="re_test").send("a@example.com", "s", "<p>x</p>")


def test_deliver_swallows_and_logs_failures(caplog):
    def boom(*args):
        raise RuntimeError("smtp down")

    with caplog.at_level(logging.ERROR, logger="taskboard.utils.email"):
        deliver(None, boom, "a@example.com")
    assert "Failed to send email" in caplog.text


def test_deliver_schedules_on_background_tasks():
    calls = []
    background = BackgroundTasks()
    deliver(background, lambda *args: calls.append(args), "a@example.com", "Ada")
    assert calls == []
    assert len(background.tasks) == 1


def test_json_formatter():
    record = logging.getLogger("taskboard.test").makeRecord(
        "taskboard.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    data = json.loads(JsonFormatter().format(record))
    assert data["message"] == "hello world"
    assert data["level"] == "INFO"
    assert data["logger"] == "taskboard.test"


def test_setup_logging_writes_json_file(tmp_path):
    log_file = tmp_path / "taskboard.log"
    setup_logging("DEBUG", log_file)
    logging.getLogger("taskboard.test").warning("disk check")
    for handler in logging.getLogger("taskboard").handlers:
        handler.flush()

    lines = [json.loads(line) for line in log_file.read_text().splitlines()]
    assert any(line["message"] == "disk check" for line in lines)
    setup_logging("INFO")
