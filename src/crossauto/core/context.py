from __future__ import annotations

from dataclasses import dataclass, field

from selenium.webdriver.remote.webdriver import WebDriver

from ..config.models import Settings, WaitSettings
from ..drivers.provider import DriverProvider
from ..platform import Platform, PlatformSelector
from ..reporting.manager import ReportManager
from .controller import InteractionController


@dataclass
class TestContext:
    """
    Everything a scenario needs, passed explicitly to pages and steps.

    Holds the platform selector, the driver provider and the settings of one
    scenario. The session is created lazily on first access to `driver`.
    """

    __test__ = False

    settings: Settings
    selector: PlatformSelector
    provider: DriverProvider
    report_manager: ReportManager
    scenario: str | None = None
    _controller: InteractionController | None = field(default=None, init=False, repr=False)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        report_manager: ReportManager | None = None,
        provider: DriverProvider | None = None,
        scenario: str | None = None,
    ) -> TestContext:
        selector = PlatformSelector(settings.platform)
        return cls(
            settings=settings,
            selector=selector,
            provider=provider or DriverProvider(settings, selector),
            report_manager=report_manager or ReportManager(settings.reporting),
            scenario=scenario,
        )

    @property
    def platform(self) -> Platform:
        return self.selector.current()

    @property
    def waits(self) -> WaitSettings:
        return self.settings.waits

    @property
    def driver(self) -> WebDriver:
        return self.provider.current()

    @property
    def has_session(self) -> bool:
        try:
            return self.provider.peek(self.platform) is not None
        except Exception:
            return False

    def controller(self) -> InteractionController:
        """Interaction controller bound to the current session, rebuilt when the session changes."""
        drv = self.driver
        ctl = self._controller
        if ctl is None or ctl.driver is not drv or ctl.platform is not self.platform:
            ctl = InteractionController(
                drv,
                self.platform,
                waits=self.waits,
                report_manager=self.report_manager,
            )
            self._controller = ctl
        return ctl

    def close(self) -> None:
        self._controller = None
        self.provider.close_all()


__all__ = ["TestContext"]
