from __future__ import annotations

import logging
from pathlib import Path

import pytest

from mdxbundler.engine.api import Location, Message
from mdxbundler.logging import configure_logging, get_logger, log_messages


def test_get_logger_nests_under_package() -> None:
    assert get_logger().name == "mdxbundler"
    assert get_logger("engine.resolve").name == "mdxbundler.engine.resolve"


def test_configure_logging_writes_file_sink(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "build.log"
    root = configure_logging(verbose=True, log_file=log_file)
    get_logger("bundler").debug("hello sink")
    for handler in root.handlers:
        handler.flush()

    assert root.level == logging.DEBUG
    assert len(root.handlers) == 2
    assert "mdxbundler.bundler: hello sink" in log_file.read_text(encoding="utf-8")


def test_configure_logging_replaces_previous_handlers() -> None:
    configure_logging()
    root = configure_logging()

    assert len(root.handlers) == 1
    assert root.level == logging.WARNING


def test_log_messages_includes_location_and_plugin(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("tests.diagnostics")
    messages = [
        Message(text="dynamic require", location=Location(file="demo.js", line=3, column=4)),
        Message(text="Invalid loader value", plugin_name="inMemory"),
    ]

    with caplog.at_level(logging.WARNING, logger="tests.diagnostics"):
        log_messages(logger, messages)

    assert [record.getMessage() for record in caplog.records] == [
        "demo.js:3:4: dynamic require",
        "[plugin: inMemory] Invalid loader value",
    ]
