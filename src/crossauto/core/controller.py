from __future__ import annotations

from typing import Any

import allure
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement

from ..config.models import WaitSettings
from ..errors import ElementNotInteractable, GestureError, InputError, ScrollError
from ..platform import Platform
from ..reporting.manager import ReportManager
from ..utils.logging import get_logger
from .behaviours import PlatformBehaviour, behaviour_for
from .escalation import first_success
from .locators import Locator, pretty_locator
from .waits import Condition, LookupResult, Timeout, WaitPolicy, Waits


class InteractionController:
    """
    Resilient element interactions for web, Android and iOS sessions.

    Actions (click, type, scroll, ...) wait within a bounded policy and raise
    typed errors; boolean queries (is_displayed, is_enabled, ...) never raise.
    """

    def __init__(
        self,
        driver: WebDriver,
        platform: Platform | str,
        *,
        waits: WaitSettings | None = None,
        report_manager: ReportManager | None = None,
    ) -> None:
        """
        Args:
            driver (WebDriver): Live Selenium or Appium session.
            platform (Platform | str): Platform the session belongs to.
            waits (WaitSettings | None): Timeout profiles; defaults when omitted.
            report_manager (ReportManager | None): Reporting manager. If not provided,
                the global ReportManager instance will be used.
        """
        self.driver = driver
        self.platform = Platform.parse(platform)
        self.behaviour: PlatformBehaviour = behaviour_for(self.platform)
        self.waits = waits or WaitSettings()
        self.report_manager = report_manager or ReportManager.get_default()
        self._log = get_logger(__name__)

    def _pretty(self, target: Locator) -> str:
        return pretty_locator(self.platform, target)

    # ====== Waits ======
    def _wait(self, target: Locator, condition: Condition, timeout: Timeout) -> WebElement:
        return Waits.wait_for_element(
            self.driver,
            self.platform,
            target,
            condition=condition,
            timeout=timeout,
            waits=self.waits,
        )

    def wait_for_presence(
        self, target: Locator, timeout: Timeout = WaitPolicy.DEFAULT
    ) -> WebElement:
        return self._wait(target, "presence", timeout)

    def wait_for_visibility(
        self, target: Locator, timeout: Timeout = WaitPolicy.DEFAULT
    ) -> WebElement:
        return self._wait(target, "visibility", timeout)

    def wait_for_clickable(
        self, target: Locator, timeout: Timeout = WaitPolicy.DEFAULT
    ) -> WebElement:
        return self._wait(target, "clickable", timeout)

    def find(
        self,
        target: Locator,
        condition: Condition = "visibility",
        timeout: Timeout = WaitPolicy.DEFAULT,
    ) -> LookupResult:
        """Non-raising lookup: Found, NotFound or TimedOut."""
        return Waits.lookup(
            self.driver,
            self.platform,
            target,
            condition=condition,
            timeout=timeout,
            waits=self.waits,
        )

    def wait_for_disappear(self, target: Locator, timeout: Timeout = WaitPolicy.DEFAULT) -> bool:
        """Wait until the element is no longer visible. False on timeout."""
        try:
            return Waits.wait_until_gone(
                self.driver, self.platform, target, timeout=timeout, waits=self.waits
            )
        except Exception:
            return False

    # ====== Boolean queries ======
    def is_displayed(self, target: Locator, timeout: Timeout = WaitPolicy.DEFAULT) -> bool:
        """
        Wait for the element to be present and report whether it is displayed.

        Never raises: absent, timed out or stale elements are reported as False.
        """
        loc = self._pretty(target)
        try:
            el = self._wait(target, "presence", timeout)
            value = bool(el.is_displayed())
        except Exception as e:
            self._log.info(
                "Element not displayed",
                action="is_displayed",
                locator=loc,
                reason=type(e).__name__,
            )
            return False
        self._log.info("Element displayed check", action="is_displayed", locator=loc, value=value)
        return value

    def is_element_present(self, target: Locator) -> bool:
        """Whether anything matches the locator right now. Never raises."""
        try:
            return bool(Waits.find_all_now(self.driver, self.platform, target))
        except Exception:
            return False

    def is_enabled(self, target: Locator, timeout: Timeout = WaitPolicy.DEFAULT) -> bool:
        try:
            return bool(self._wait(target, "presence", timeout).is_enabled())
        except Exception:
            return False

    # ====== Actions ======
    def click(
        self,
        target: Locator,
        *,
        context: str | None = None,
        timeout: Timeout = WaitPolicy.DEFAULT,
        step: str | None = None,
    ) -> str:
        """
        Click an element, escalating through the platform's click strategies.

        On the web: native click once clickable, then scroll + script click,
        then script click, then a forced-visibility script click (last resort).

        Args:
            target (Locator): Element to click.
            context (str | None): Human-readable message carried by the error.
            timeout (Timeout): Wait policy for the native click.
            step (str | None): Custom Allure step title.

        Returns:
            str: Name of the strategy that performed the click.

        Raises:
            ElementNotClickable: If every strategy failed.
        """
        loc = self._pretty(target)
        title = step or f"Click element: {loc}"
        with allure.step(title):
            self._log.info("Click on element", action="click", locator=loc, context=context)
            try:
                strategies = self.behaviour.click_strategies(
                    self.driver, target, self.waits, timeout
                )
                used = first_success(strategies, loc, context=context)
                self.report_manager.attach_screenshot_if_allowed(self.driver, when="success")
                return used
            except Exception:
                self._log.error("Error during click", action="click", locator=loc, context=context)
                self.report_manager.attach_artifacts_on_failure(self.driver)
                raise

    def type(
        self,
        target: Locator,
        text: str,
        *,
        context: str | None = None,
        timeout: Timeout = WaitPolicy.DEFAULT,
        step: str | None = None,
    ) -> None:
        """
        Wait for the element to be visible, clear it and type the text.

        Raises:
            InputError: On any failure, chained to the cause.
        """
        loc = self._pretty(target)
        title = step or f'Type text: "{text}" into element: {loc}'
        with allure.step(title):
            self._log.info("Text input", action="type", locator=loc, text=text)
            try:
                el = self._wait(target, "visibility", timeout)
                if not el.is_enabled():
                    raise ElementNotInteractable(loc, context, message="Input field is disabled")
                el.clear()
                el.send_keys(text)
                self.report_manager.attach_screenshot_if_allowed(self.driver, when="success")
            except Exception as e:
                self._log.error("Error during text input", action="type", locator=loc)
                self.report_manager.attach_artifacts_on_failure(self.driver)
                raise InputError(loc, context) from e

    def read(self, target: Locator, timeout: Timeout = WaitPolicy.DEFAULT) -> str:
        """Visible text of the element."""
        loc = self._pretty(target)
        with allure.step(f"Get text of element: {loc}"):
            self._log.info("Get element text", action="read", locator=loc)
            try:
                text = self._wait(target, "visibility", timeout).text
                return str(text) if text is not None else ""
            except Exception:
                self._log.error("Error getting text", action="read", locator=loc)
                self.report_manager.attach_artifacts_on_failure(self.driver)
                raise

    def read_value(self, target: Locator, timeout: Timeout = WaitPolicy.DEFAULT) -> str | None:
        """The element's "value" attribute."""
        loc = self._pretty(target)
        with allure.step(f"Get value of element: {loc}"):
            self._log.info("Get element value", action="read_value", locator=loc)
            try:
                value: Any = self._wait(target, "visibility", timeout).get_attribute("value")
                return None if value is None else str(value)
            except Exception:
                self._log.error("Error getting value", action="read_value", locator=loc)
                self.report_manager.attach_artifacts_on_failure(self.driver)
                raise

    def clear(self, target: Locator, timeout: Timeout = WaitPolicy.DEFAULT) -> None:
        """Native clear, then (on the web) a script write of an empty value."""
        loc = self._pretty(target)
        with allure.step(f"Clear element: {loc}"):
            self._log.info("Clear element", action="clear", locator=loc)
            try:
                el = self._wait(target, "visibility", timeout)
                el.clear()
                self.behaviour.force_empty(self.driver, el)
            except Exception:
                self._log.error("Error clearing element", action="clear", locator=loc)
                self.report_manager.attach_artifacts_on_failure(self.driver)
                raise

    def scroll_to(self, target: Locator, *, context: str | None = None) -> None:
        """
        Bring the element into view the platform's way.

        Raises:
            ScrollError: Chained to the underlying failure.
        """
        loc = self._pretty(target)
        with allure.step(f"Scroll to element: {loc}"):
            self._log.info(
                "Scroll to element", action="scroll_to", locator=loc, platform=self.platform.value
            )
            try:
                self.behaviour.scroll_to(self.driver, target)
            except Exception as e:
                self._log.error("Error scrolling to element", action="scroll_to", locator=loc)
                self.report_manager.attach_artifacts_on_failure(self.driver)
                raise ScrollError(loc, context) from e

    def swipe_vertical(
        self,
        start: float,
        end: float,
        anchor: float = 0.5,
        *,
        hold_ms: int = 1000,
    ) -> bool:
        """
        Vertical swipe expressed in fractions of the viewport (mobile only).

        Args:
            start (float): Start height fraction (0..1).
            end (float): End height fraction (0..1).
            anchor (float): Horizontal position fraction (0..1).
            hold_ms (int): Press duration before moving.

        Returns:
            bool: False when the platform has no touch gestures (nothing dispatched).

        Raises:
            GestureError: If the gesture failed on a mobile session.
        """
        if not self.platform.is_mobile:
            return self.behaviour.swipe_vertical(self.driver, start, end, anchor, hold_ms)
        with allure.step(f"Swipe vertically from {start:.0%} to {end:.0%} at x={anchor:.0%}"):
            self._log.info(
                "Vertical swipe",
                action="swipe_vertical",
                start=start,
                end=end,
                anchor=anchor,
            )
            try:
                done = self.behaviour.swipe_vertical(self.driver, start, end, anchor, hold_ms)
                self.report_manager.attach_screenshot_if_allowed(self.driver, when="success")
                return done
            except Exception as e:
                self._log.error("Swipe error", action="swipe_vertical")
                self.report_manager.attach_artifacts_on_failure(self.driver)
                raise GestureError(message="Vertical swipe failed") from e

    def select_by_visible_text(self, target: Locator, text: str) -> bool:
        """
        Click the first element whose trimmed text equals `text` exactly.

        Substring matches are ignored. Returns False (and does nothing) when no
        option matches; callers assert on that if absence matters.
        """
        loc = self._pretty(target)
        with allure.step(f'Select "{text}" in: {loc}'):
            self._log.info("Select by visible text", action="select", locator=loc, text=text)
            for option in Waits.find_all_now(self.driver, self.platform, target):
                try:
                    option_text = (option.text or "").strip()
                except Exception:
                    continue
                if option_text == text:
                    option.click()
                    return True
            self._log.info("No option with that text", action="select", locator=loc, text=text)
            return False

    # ====== Page level ======
    def open_url(self, url: str) -> None:
        with allure.step(f"Open URL: {url}"):
            self._log.info("Open URL", action="open_url", url=url)
            self.driver.get(url)

    def wait_for_page_ready(self, timeout: Timeout = WaitPolicy.DEFAULT) -> bool:
        """Web only: block until document.readyState is "complete". False elsewhere."""
        return self.behaviour.wait_for_page_ready(self.driver, self.waits, timeout)

    def wait_for_ajax(self, timeout: Timeout = WaitPolicy.DEFAULT) -> bool:
        """Web only: block until jQuery reports no active requests. False elsewhere."""
        return self.behaviour.wait_for_ajax(self.driver, self.waits, timeout)

    @property
    def current_url(self) -> str | None:
        try:
            url = self.driver.current_url
        except Exception:
            return None
        return str(url) if url else None


__all__ = ["InteractionController"]
