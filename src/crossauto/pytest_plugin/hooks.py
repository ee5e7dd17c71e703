from __future__ import annotations

from collections.abc import Generator
from typing import Any

import allure
import pytest

from crossauto.utils.logging import tail_test_log

_MARKERS = (
    "web: runs against a browser session",
    "android: runs against the Android app through Appium",
    "ios: runs against the iOS app through Appium",
    "smoke: quick end-to-end checks",
)


def pytest_configure(config: pytest.Config) -> None:
    for marker in _MARKERS:
        config.addinivalue_line("markers", marker)


def _attach_recent_logs(item: Any) -> None:
    # Last 200 lines keep the attachment readable
    content = tail_test_log(getattr(item, "name", None), lines=200)
    if content:
        allure.attach(content, name="Recent logs", attachment_type=allure.attachment_type.TEXT)


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item: Any, call: Any) -> Generator[None, Any, None]:
    """
    Pytest hook: called after each test phase (setup, call, teardown).

    Stores the phase report on the item as `rep_<phase>` so fixtures can tell
    whether the test failed, and attaches the tail of the test log to Allure
    when the test body failed.
    """
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)

    if rep.when != "call" or not rep.failed:
        return
    try:
        _attach_recent_logs(item)
    except Exception:
        # Never fail due to errors inside the hook itself
        pass
