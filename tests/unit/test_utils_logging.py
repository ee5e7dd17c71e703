from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace

import pytest
import structlog
from structlog.contextvars import get_contextvars

from crossauto.utils import logging as clog
from crossauto.utils.logging import (
    bind_context,
    clear_contextvars,
    log_path_for,
    safe_file_name,
    setup_logging,
    tail_test_log,
)


def test_setup_logging_produces_json(capsys: pytest.CaptureFixture[str]) -> None:
    """Configure logging and verify that structlog outputs JSON via JSONRenderer."""
    setup_logging()
    log = structlog.get_logger()
    log.info("hello", foo=123)

    out = capsys.readouterr().out.strip()
    data = json.loads(out.splitlines()[-1])
    assert data["event"] == "hello"
    assert data["message"] == "hello"
    assert data["level"] in ("info", "INFO")
    assert "timestamp" in data
    assert data["foo"] == 123


def test_bind_context_keeps_earlier_values() -> None:
    clear_contextvars()
    try:
        s = SimpleNamespace(platform="Android", android=SimpleNamespace(device_name="Pixel_7"))
        bind_context(settings=s, scenario="search")
        bind_context(driver=SimpleNamespace(session_id="abc"))

        ctx = get_contextvars()
        assert ctx["platform"] == "android"
        assert ctx["device"] == "Pixel_7"
        assert ctx["scenario"] == "search"
        assert ctx["session_id"] == "abc"
        assert "browser" not in ctx
    finally:
        clear_contextvars()


def test_bind_context_web_binds_browser() -> None:
    clear_contextvars()
    try:
        bind_context(settings=SimpleNamespace(platform="web", browser="firefox"))
        assert get_contextvars()["browser"] == "firefox"
    finally:
        clear_contextvars()


def test_safe_file_name() -> None:
    assert safe_file_name("tests/e2e/test_a.py::test b[web]") == "tests_e2e_test_a.py_test_b_web"
    assert safe_file_name("///") == "unnamed"


def test_log_path_and_tail(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(clog._state, "log_dir", tmp_path)
    assert log_path_for() == tmp_path / "framework.log"

    path = log_path_for("test_search[web]")
    assert path == tmp_path / "test_test_search_web.log"
    path.write_text("".join(f"line {i}\n" for i in range(5)), encoding="utf-8")

    assert tail_test_log("test_search[web]", lines=2) == "line 3\nline 4\n"
    assert tail_test_log("missing") == ""


def test_file_sink_duplicates_into_test_log(tmp_path: Path) -> None:
    sink = clog._FileSink(tmp_path)
    sink(None, "info", {"event": "x", "test": "t1"})

    assert json.loads((tmp_path / "framework.log").read_text(encoding="utf-8"))["event"] == "x"
    assert (tmp_path / "test_t1.log").exists()
