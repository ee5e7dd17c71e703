from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import ClassVar

from selenium.webdriver.common.action_chains import ActionChains
from selenium.webdriver.common.actions.action_builder import ActionBuilder
from selenium.webdriver.common.actions.pointer_input import PointerInput
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement

from ..config.models import WaitSettings
from ..platform import Platform
from ..utils.logging import get_logger
from .escalation import ClickStrategy
from .locators import Locator, PageElement, resolve
from .waits import Timeout, WaitPolicy, Waits

_log = get_logger(__name__)

_JS_CLICK = "arguments[0].click();"
_JS_SCROLL_INTO_VIEW = "arguments[0].scrollIntoView(true);"
_JS_SMOOTH_SCROLL = "arguments[0].scrollIntoView({behavior: 'smooth', block: 'center'});"
_JS_FORCE_VISIBLE_CLICK = (
    "arguments[0].style.visibility='visible';"
    "arguments[0].style.opacity='1';"
    "arguments[0].style.display='block';"
    "arguments[0].style.pointerEvents='auto';"
    "return arguments[0].click();"
)
_JS_CLEAR_VALUE = "arguments[0].value = '';"
_JS_READY_STATE = "return document.readyState"
_JS_AJAX_IDLE = "return window.jQuery ? window.jQuery.active == 0 : true"


class PlatformBehaviour(ABC):
    """
    Everything that differs between platforms: how to click, scroll, swipe
    and wait for a page. One implementation per Platform value.
    """

    platform: ClassVar[Platform]
    supports_script: ClassVar[bool] = False

    def _native_click(
        self, driver: WebDriver, target: Locator, waits: WaitSettings, timeout: Timeout
    ) -> ClickStrategy:
        def run() -> None:
            Waits.wait_for_element(
                driver,
                self.platform,
                target,
                condition="clickable",
                timeout=timeout,
                waits=waits,
            ).click()

        return ClickStrategy("native click", run)

    @abstractmethod
    def click_strategies(
        self,
        driver: WebDriver,
        target: Locator,
        waits: WaitSettings,
        timeout: Timeout = WaitPolicy.DEFAULT,
    ) -> list[ClickStrategy]:
        """Ordered click escalation for this platform."""

    @abstractmethod
    def scroll_to(self, driver: WebDriver, target: Locator) -> None:
        """Bring the element into view."""

    def swipe_vertical(
        self,
        driver: WebDriver,
        start: float,
        end: float,
        anchor: float,
        hold_ms: int = 1000,
    ) -> bool:
        """Vertical swipe by viewport fractions. Returns whether a gesture was dispatched."""
        _log.debug(
            "Swipe skipped on this platform",
            action="swipe_vertical",
            platform=self.platform.value,
        )
        return False

    def force_empty(self, driver: WebDriver, element: WebElement) -> None:
        """Make sure an input is empty after the native clear."""

    def wait_for_page_ready(
        self, driver: WebDriver, waits: WaitSettings, timeout: Timeout
    ) -> bool:
        """Block until the page finished loading. Returns whether anything was awaited."""
        return False

    def wait_for_ajax(self, driver: WebDriver, waits: WaitSettings, timeout: Timeout) -> bool:
        return False


class WebBehaviour(PlatformBehaviour):
    platform = Platform.WEB
    supports_script = True

    def click_strategies(
        self,
        driver: WebDriver,
        target: Locator,
        waits: WaitSettings,
        timeout: Timeout = WaitPolicy.DEFAULT,
    ) -> list[ClickStrategy]:
        def scroll_and_script_click() -> None:
            el = Waits.find_now(driver, self.platform, target)
            driver.execute_script(_JS_SCROLL_INTO_VIEW, el)
            time.sleep(waits.settle_ms / 1000.0)
            driver.execute_script(_JS_CLICK, el)

        def script_click() -> None:
            el = Waits.find_now(driver, self.platform, target)
            driver.execute_script(_JS_CLICK, el)

        def forced_visibility_click() -> None:
            el = Waits.find_now(driver, self.platform, target)
            driver.execute_script(_JS_FORCE_VISIBLE_CLICK, el)

        return [
            self._native_click(driver, target, waits, timeout),
            ClickStrategy("scroll and script click", scroll_and_script_click),
            ClickStrategy("script click", script_click),
            ClickStrategy(
                "forced visibility script click", forced_visibility_click, last_resort=True
            ),
        ]

    def scroll_to(self, driver: WebDriver, target: Locator) -> None:
        el = Waits.find_now(driver, self.platform, target)
        driver.execute_script(_JS_SMOOTH_SCROLL, el)

    def force_empty(self, driver: WebDriver, element: WebElement) -> None:
        # Some front-end frameworks intercept the native clear
        driver.execute_script(_JS_CLEAR_VALUE, element)

    def wait_for_page_ready(
        self, driver: WebDriver, waits: WaitSettings, timeout: Timeout
    ) -> bool:
        Waits.until_script(
            driver,
            _JS_READY_STATE,
            lambda state: state == "complete",
            timeout=timeout,
            waits=waits,
            message="Document did not reach readyState 'complete'",
        )
        return True

    def wait_for_ajax(self, driver: WebDriver, waits: WaitSettings, timeout: Timeout) -> bool:
        Waits.until_script(
            driver,
            _JS_AJAX_IDLE,
            bool,
            timeout=timeout,
            waits=waits,
            message="Pending AJAX requests did not finish",
        )
        return True


class MobileBehaviour(PlatformBehaviour):
    """Shared Appium behaviour: W3C touch swipes."""

    def swipe_vertical(
        self,
        driver: WebDriver,
        start: float,
        end: float,
        anchor: float,
        hold_ms: int = 1000,
    ) -> bool:
        size = driver.get_window_size()
        w, h = size.get("width", 0) or 0, size.get("height", 0) or 0
        x = int(w * anchor)
        start_y = int(h * start)
        end_y = int(h * end)

        finger = PointerInput("touch", "finger")
        actions = ActionChains(driver)
        actions.w3c_actions = ActionBuilder(driver, mouse=finger)
        a = actions.w3c_actions.pointer_action

        a.move_to_location(x, start_y)
        a.pointer_down()
        a.pause(hold_ms / 1000.0)
        a.move_to_location(x, end_y)
        a.release()
        actions.perform()
        _log.debug(
            "Swipe performed",
            action="swipe_vertical",
            x=x,
            start_y=start_y,
            end_y=end_y,
            platform=self.platform.value,
        )
        return True


class AndroidBehaviour(MobileBehaviour):
    platform = Platform.ANDROID

    def click_strategies(
        self,
        driver: WebDriver,
        target: Locator,
        waits: WaitSettings,
        timeout: Timeout = WaitPolicy.DEFAULT,
    ) -> list[ClickStrategy]:
        def gesture_click() -> None:
            el = Waits.find_now(driver, self.platform, target)
            driver.execute_script("mobile: clickGesture", {"elementId": el.id})

        return [
            self._native_click(driver, target, waits, timeout),
            ClickStrategy("click gesture", gesture_click),
        ]

    def scroll_to(self, driver: WebDriver, target: Locator) -> None:
        hint = _description_hint(self.platform, target)
        driver.find_element(
            "-android uiautomator",
            "new UiScrollable(new UiSelector().scrollable(true).instance(0))"
            f'.scrollIntoView(new UiSelector().descriptionContains("{hint}").instance(0))',
        )


class IOSBehaviour(MobileBehaviour):
    platform = Platform.IOS

    def click_strategies(
        self,
        driver: WebDriver,
        target: Locator,
        waits: WaitSettings,
        timeout: Timeout = WaitPolicy.DEFAULT,
    ) -> list[ClickStrategy]:
        def scroll_and_click() -> None:
            el = Waits.find_now(driver, self.platform, target)
            driver.execute_script("mobile: scroll", {"elementId": el.id, "toVisible": True})
            el.click()

        return [
            self._native_click(driver, target, waits, timeout),
            ClickStrategy("scroll and click", scroll_and_click),
        ]

    def scroll_to(self, driver: WebDriver, target: Locator) -> None:
        el = Waits.find_now(driver, self.platform, target)
        driver.execute_script("mobile: scroll", {"direction": "down", "elementId": el.id})


def _description_hint(platform: Platform, target: Locator) -> str:
    """Text searched for by Android's UiScrollable: the element name, else the locator value."""
    if isinstance(target, PageElement) and target.name:
        return target.name
    return resolve(platform, target)[0][1]


_BEHAVIOURS: dict[Platform, PlatformBehaviour] = {
    Platform.WEB: WebBehaviour(),
    Platform.ANDROID: AndroidBehaviour(),
    Platform.IOS: IOSBehaviour(),
}


def behaviour_for(platform: Platform | str) -> PlatformBehaviour:
    return _BEHAVIOURS[Platform.parse(platform)]


__all__ = [
    "PlatformBehaviour",
    "WebBehaviour",
    "AndroidBehaviour",
    "IOSBehaviour",
    "behaviour_for",
]
