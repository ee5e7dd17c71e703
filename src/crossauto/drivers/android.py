from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from appium import webdriver
from appium.options.android import UiAutomator2Options

from ..config.models import AndroidConfig
from .base import DriverFactory


class AndroidDriverFactory(DriverFactory):
    """Appium UiAutomator2 sessions for the Planity Android app."""

    @property
    def config(self) -> AndroidConfig:
        return self.settings.android or AndroidConfig()

    def options(self, capabilities: Mapping[str, Any]) -> UiAutomator2Options:
        """
        UiAutomator2 options built from the android section, with `capabilities`
        applied last so they win over configured values.
        """
        a = self.config
        opts = UiAutomator2Options()
        opts.set_capability("platformName", "Android")
        opts.set_capability("appium:automationName", "UiAutomator2")
        opts.platform_version = a.platform_version
        opts.device_name = a.device_name
        if a.udid:
            opts.udid = a.udid
        if a.app_path:
            opts.app = a.app_path
        opts.set_capability("appium:appPackage", a.app_package)
        if a.app_activity:
            opts.set_capability("appium:appActivity", a.app_activity)
        opts.set_capability("appium:noReset", a.no_reset)
        opts.set_capability("appium:autoGrantPermissions", a.auto_grant_permissions)
        opts.set_capability("appium:newCommandTimeout", a.new_command_timeout)
        opts.set_capability("appium:appWaitDuration", a.app_wait_duration_ms)
        opts.set_capability("appium:autoAcceptAlerts", a.auto_accept_alerts)
        opts.set_capability("appium:dontStopAppOnReset", a.dont_stop_app_on_reset)

        for k, v in capabilities.items():
            opts.set_capability(k, v)
        return opts

    def build(self, capabilities: Mapping[str, Any]) -> webdriver.Remote:
        opts = self.options(capabilities)
        executor = str(self.settings.appium.url).rstrip("/")
        self._log.info(
            "Creating Android session",
            action="driver_start",
            executor=executor,
            device=self.config.device_name,
        )
        drv = webdriver.Remote(command_executor=executor, options=opts)
        self._log_ready(drv, "Android")
        return drv
