from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from appium import webdriver
from appium.options.ios import XCUITestOptions

from ..config.models import IOSConfig
from .base import DriverFactory


class IOSDriverFactory(DriverFactory):
    """Appium XCUITest sessions for the Planity iOS app."""

    @property
    def config(self) -> IOSConfig:
        return self.settings.ios or IOSConfig()

    def options(self, capabilities: Mapping[str, Any]) -> XCUITestOptions:
        i = self.config
        opts = XCUITestOptions()
        opts.set_capability("platformName", "iOS")
        opts.set_capability("appium:automationName", "XCUITest")
        opts.platform_version = i.platform_version
        opts.device_name = i.device_name
        if i.udid:
            opts.udid = i.udid
        if i.app_path:
            opts.app = i.app_path
        if i.bundle_id:
            opts.set_capability("appium:bundleId", i.bundle_id)
        opts.set_capability("appium:noReset", i.no_reset)
        opts.set_capability("appium:newCommandTimeout", i.new_command_timeout)
        opts.set_capability("appium:appWaitDuration", i.app_wait_duration_ms)
        opts.set_capability("appium:autoAcceptAlerts", i.auto_accept_alerts)

        # Runtime-provided capabilities win
        for k, v in capabilities.items():
            opts.set_capability(k, v)
        return opts

    def build(self, capabilities: Mapping[str, Any]) -> webdriver.Remote:
        opts = self.options(capabilities)
        executor = str(self.settings.appium.url).rstrip("/")
        self._log.info(
            "Creating iOS session",
            action="driver_start",
            executor=executor,
            device=self.config.device_name,
        )
        drv = webdriver.Remote(command_executor=executor, options=opts)
        self._log_ready(drv, "iOS")
        return drv
