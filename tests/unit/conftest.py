from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any, cast

import pytest
from fakes import FakeDriver, FakeReport, StepSpy, static_factory

from crossauto.config.models import Settings, WaitSettings
from crossauto.core.context import TestContext
from crossauto.drivers.provider import DriverProvider
from crossauto.platform import Platform, PlatformSelector
from crossauto.reporting.ledger import TestLedger
from crossauto.utils.logging import clear_contextvars


@pytest.fixture(autouse=True)
def _clear_log_context() -> Iterator[None]:
    yield
    clear_contextvars()


@pytest.fixture
def fast_waits() -> WaitSettings:
    """Tiny timeouts so that failing waits end quickly."""
    return WaitSettings(short=0.05, default=0.1, long=0.2, polling_ms=10, settle_ms=0)


@pytest.fixture
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(time, "sleep", lambda *_a, **_k: None)


@pytest.fixture
def driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def report() -> FakeReport:
    return FakeReport()


@pytest.fixture
def step_spy() -> StepSpy:
    return StepSpy()


@pytest.fixture
def ledger(tmp_path: Path) -> TestLedger:
    return TestLedger(tmp_path / "reports")


@pytest.fixture
def make_context(
    driver: FakeDriver, report: FakeReport, fast_waits: WaitSettings
) -> Callable[..., TestContext]:
    """
    Build a TestContext whose sessions are the `driver` fake.

    Pass `error=` to make session creation fail.
    """

    def make(
        platform: str = "web", error: Exception | None = None, **overrides: Any
    ) -> TestContext:
        settings = Settings(platform=platform, waits=fast_waits, **overrides)
        selector = PlatformSelector(platform)
        factory = static_factory(settings, driver, error)
        provider = DriverProvider(settings, selector, factories={p: factory for p in Platform})
        return TestContext(
            settings=settings,
            selector=selector,
            provider=provider,
            report_manager=cast(Any, report),
        )

    return make
