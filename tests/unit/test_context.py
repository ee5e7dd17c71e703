from __future__ import annotations

from collections.abc import Callable

import pytest
from fakes import FakeDriver

from crossauto.config.models import Settings
from crossauto.core.context import TestContext
from crossauto.drivers.provider import DriverProvider
from crossauto.errors import SessionInitError, UnsupportedPlatformError
from crossauto.platform import Platform
from crossauto.reporting.manager import ReportManager


def test_from_settings_wires_selector_provider_and_reporting() -> None:
    s = Settings(platform="Android")
    ctx = TestContext.from_settings(s, scenario="search")

    assert ctx.platform is Platform.ANDROID
    assert isinstance(ctx.provider, DriverProvider)
    assert ctx.provider.selector is ctx.selector
    assert isinstance(ctx.report_manager, ReportManager)
    assert ctx.waits is s.waits
    assert ctx.has_session is False


def test_unknown_platform_is_rejected() -> None:
    with pytest.raises(UnsupportedPlatformError):
        TestContext.from_settings(Settings(platform="windows-phone"))


def test_session_is_lazy_and_shared(
    make_context: Callable[..., TestContext], driver: FakeDriver
) -> None:
    ctx = make_context("web")
    assert ctx.has_session is False

    assert ctx.driver is driver
    assert ctx.has_session is True


def test_controller_is_reused_until_the_session_changes(
    make_context: Callable[..., TestContext], driver: FakeDriver
) -> None:
    ctx = make_context("ios")
    first = ctx.controller()
    assert ctx.controller() is first
    assert first.platform is Platform.IOS

    ctx.close()
    assert driver.quit_called == 1
    assert ctx.has_session is False
    assert ctx.controller() is not first


def test_session_failure_surfaces_as_session_init_error(
    make_context: Callable[..., TestContext],
) -> None:
    ctx = make_context("web", error=ConnectionRefusedError("no chromedriver"))
    with pytest.raises(SessionInitError):
        ctx.controller()
