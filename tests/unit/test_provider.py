from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast

import pytest
from fakes import FakeDriver
from selenium.webdriver.remote.webdriver import WebDriver

from crossauto.config.models import Capabilities, IOSConfig, Settings
from crossauto.drivers.base import DriverFactory
from crossauto.drivers.provider import DriverProvider
from crossauto.errors import SessionInitError, UnsupportedPlatformError
from crossauto.platform import Platform, PlatformSelector


class CountingFactory(DriverFactory):
    def __init__(self, settings: Settings, error: Exception | None = None) -> None:
        super().__init__(settings)
        self.error = error
        self.built: list[FakeDriver] = []
        self.caps: list[Mapping[str, Any]] = []

    def build(self, capabilities: Mapping[str, Any]) -> WebDriver:
        self.caps.append(capabilities)
        if self.error is not None:
            raise self.error
        drv = FakeDriver(session_id=f"s{len(self.built) + 1}")
        self.built.append(drv)
        return cast(WebDriver, drv)


def _provider(
    settings: Settings, platform: str | None = "web", **factories: CountingFactory
) -> DriverProvider:
    return DriverProvider(
        settings,
        PlatformSelector(platform),
        factories={Platform.parse(k): f for k, f in factories.items()},
    )


def test_session_is_created_once_and_cached() -> None:
    s = Settings(capabilities=Capabilities(raw={"acceptInsecureCerts": True}))
    web = CountingFactory(s)
    p = _provider(s, web=web)

    first = p.current()
    again = p.get_session("Web")

    assert first is again
    assert len(web.built) == 1
    assert web.caps == [{"acceptInsecureCerts": True}]


def test_peek_never_creates() -> None:
    s = Settings()
    web = CountingFactory(s)
    p = _provider(s, web=web)
    assert p.peek("web") is None
    assert web.built == []


def test_build_failure_is_wrapped() -> None:
    s = Settings()
    p = _provider(s, web=CountingFactory(s, error=ConnectionError("refused")))

    with pytest.raises(SessionInitError) as ei:
        p.current()
    assert isinstance(ei.value.__cause__, ConnectionError)
    assert p.peek("web") is None


def test_missing_factory_raises_session_init_error() -> None:
    s = Settings()
    with pytest.raises(SessionInitError):
        _provider(s, web=CountingFactory(s)).get_session("ios")


def test_current_without_selected_platform() -> None:
    s = Settings()
    with pytest.raises(UnsupportedPlatformError):
        _provider(s, platform=None, web=CountingFactory(s)).current()


def test_close_terminates_app_then_quits_and_is_idempotent() -> None:
    s = Settings(platform="android")
    android = CountingFactory(s)
    p = _provider(s, platform="android", android=android)
    p.current()
    drv = android.built[0]

    p.close_session("android")
    p.close_session("android")

    assert drv.terminated == ["com.planity.android"]
    assert drv.quit_called == 1
    assert p.peek("android") is None


def test_close_survives_driver_errors() -> None:
    s = Settings(platform="ios", ios=IOSConfig(bundle_id="com.planity.ios"))
    ios = CountingFactory(s)
    p = _provider(s, platform="ios", ios=ios)
    drv = cast(Any, p.current())

    def broken(*_a: Any) -> None:
        raise RuntimeError("session already gone")

    drv.terminate_app = broken
    drv.quit = broken

    p.close_session(Platform.IOS)
    assert p.peek("ios") is None


def test_close_all_closes_every_platform() -> None:
    s = Settings()
    web, android = CountingFactory(s), CountingFactory(s)
    p = _provider(s, web=web, android=android)
    p.get_session("web")
    p.get_session("android")

    p.close_all()

    assert web.built[0].quit_called == 1
    assert android.built[0].quit_called == 1
    # A new request opens a fresh session
    assert cast(Any, p.get_session("web")).session_id == "s2"
