from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from selenium import webdriver
from selenium.webdriver.common.options import ArgOptions
from selenium.webdriver.remote.webdriver import WebDriver

from ..config.models import SUPPORTED_BROWSERS
from ..errors import SessionInitError
from .base import DriverFactory

_CHROME_DEFAULT_ARGS: tuple[str, ...] = (
    "--disable-search-engine-choice-screen",
    "--disable-gpu",
)


class WebDriverFactory(DriverFactory):
    """
    Local browser sessions (chrome, firefox, edge).

    Browser binaries and drivers are resolved by Selenium Manager.
    """

    def options(self, browser: str, capabilities: Mapping[str, Any]) -> ArgOptions:
        """
        Browser options for `browser` from the web section.

        Raises:
            SessionInitError: If the browser is not supported.
        """
        w = self.settings.web
        name = browser.strip().lower()
        opts: ArgOptions
        if name == "chrome":
            opts = webdriver.ChromeOptions()
            for arg in _CHROME_DEFAULT_ARGS:
                opts.add_argument(arg)
            if w.headless:
                opts.add_argument("--headless")
            opts.add_argument(f"--window-size={w.window_width},{w.window_height}")
        elif name == "edge":
            opts = webdriver.EdgeOptions()
            if w.headless:
                opts.add_argument("--headless")
            opts.add_argument(f"--window-size={w.window_width},{w.window_height}")
        elif name == "firefox":
            opts = webdriver.FirefoxOptions()
            if w.headless:
                opts.add_argument("-headless")
            opts.add_argument(f"-width={w.window_width}")
            opts.add_argument(f"-height={w.window_height}")
        else:
            raise SessionInitError(
                f"Unsupported browser: {browser!r}, "
                f"expected one of: {', '.join(SUPPORTED_BROWSERS)}"
            )

        for arg in w.arguments:
            opts.add_argument(arg)
        for k, v in capabilities.items():
            opts.set_capability(k, v)
        return opts

    def build(self, capabilities: Mapping[str, Any], browser: str | None = None) -> WebDriver:
        browser = (browser or self.settings.browser).lower()
        opts = self.options(browser, capabilities)
        self._log.info(
            "Starting browser",
            action="driver_start",
            browser=browser,
            headless=self.settings.web.headless,
        )

        drv: WebDriver
        if browser == "chrome":
            drv = webdriver.Chrome(options=opts)
        elif browser == "edge":
            drv = webdriver.Edge(options=opts)
        else:
            drv = webdriver.Firefox(options=opts)

        w = self.settings.web
        drv.set_page_load_timeout(w.page_load_timeout)
        if w.maximize and not w.headless:
            drv.maximize_window()
        self._log_ready(drv, "Browser")
        return drv
