from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

import allure
from selenium.common.exceptions import TimeoutException
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support.ui import WebDriverWait

from ..config.models import WaitSettings
from ..errors import ElementNotFound, ElementTimeout
from ..platform import Platform
from ..utils.logging import get_logger
from .locators import Locator, StrategyValue, pretty_locator, resolve

Condition = Literal["presence", "visibility", "clickable"]

_log = get_logger(__name__)


class WaitPolicy(str, Enum):
    """Named timeout profiles, picked by call-site intent."""

    SHORT = "short"
    DEFAULT = "default"
    LONG = "long"

    def seconds(self, waits: WaitSettings | None = None) -> float:
        return float(getattr(waits or WaitSettings(), self.value))


Timeout = WaitPolicy | float


def resolve_timeout(timeout: Timeout, waits: WaitSettings | None = None) -> float:
    """Turn a policy name or an explicit number of seconds into seconds."""
    if isinstance(timeout, WaitPolicy):
        return timeout.seconds(waits)
    return float(timeout)


# ---- Explicit query outcomes ----
@dataclass(frozen=True)
class Found:
    element: WebElement

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class NotFound:
    locator: str

    def __bool__(self) -> bool:
        return False


@dataclass(frozen=True)
class TimedOut:
    locator: str
    condition: Condition
    timeout: float

    def __bool__(self) -> bool:
        return False


LookupResult = Found | NotFound | TimedOut


class Waits:
    """
    Bounded waits for UI elements on any platform.

    Every wait polls all alternatives of a locator and returns the first
    element that satisfies the requested condition.
    """

    @staticmethod
    def wait_for_element(
        driver: WebDriver,
        platform: Platform,
        target: Locator,
        *,
        condition: Condition = "visibility",
        timeout: Timeout = WaitPolicy.DEFAULT,
        waits: WaitSettings | None = None,
        polling_ms: int | None = None,
    ) -> WebElement:
        """
        Wait until an element matching `target` satisfies `condition`.

        Args:
            driver (WebDriver): Selenium/Appium driver instance.
            platform (Platform): Platform used to pick the locator variant.
            target (Locator): PageElement or raw (strategy, value) tuple.
            condition (Condition): "presence", "visibility" or "clickable".
            timeout (Timeout): Wait policy or explicit number of seconds.
            waits (WaitSettings | None): Timeout profiles; defaults when omitted.
            polling_ms (int | None): Polling interval; taken from `waits` when omitted.

        Returns:
            WebElement: The first matching element.

        Raises:
            ElementTimeout: If no element met the condition in time.
        """
        waits = waits or WaitSettings()
        seconds = resolve_timeout(timeout, waits)
        polling = (polling_ms if polling_ms is not None else waits.polling_ms) / 1000.0
        loc = pretty_locator(platform, target)
        tuples = resolve(platform, target)

        with allure.step(f"Wait for element to be {condition}: {loc} (timeout={seconds}s)"):
            _log.debug(
                "Waiting for element",
                action="wait",
                locator=loc,
                condition=condition,
                timeout=seconds,
                polling_ms=int(polling * 1000),
            )
            try:
                el = WebDriverWait(driver, seconds, poll_frequency=polling).until(
                    _first_matching(tuples, condition)
                )
            except TimeoutException as e:
                _log.debug(
                    "Element wait timed out",
                    action="wait",
                    locator=loc,
                    condition=condition,
                    timeout=seconds,
                )
                raise ElementTimeout(
                    loc, message=f"Element was not {condition} within {seconds}s"
                ) from e
            return el

    @staticmethod
    def lookup(
        driver: WebDriver,
        platform: Platform,
        target: Locator,
        *,
        condition: Condition = "visibility",
        timeout: Timeout = WaitPolicy.DEFAULT,
        waits: WaitSettings | None = None,
        polling_ms: int | None = None,
    ) -> LookupResult:
        """
        Same as wait_for_element, but reports the outcome instead of raising.

        Returns:
            Found: the element met the condition.
            NotFound: nothing matches the locator at all.
            TimedOut: something matches, but never met the condition.
        """
        try:
            el = Waits.wait_for_element(
                driver,
                platform,
                target,
                condition=condition,
                timeout=timeout,
                waits=waits,
                polling_ms=polling_ms,
            )
            return Found(el)
        except ElementTimeout:
            loc = pretty_locator(platform, target)
            if not Waits.find_all_now(driver, platform, target):
                return NotFound(loc)
            return TimedOut(loc, condition, resolve_timeout(timeout, waits))

    @staticmethod
    def find_all_now(driver: WebDriver, platform: Platform, target: Locator) -> list[WebElement]:
        """
        Elements currently matching any locator alternative, in alternative
        order and without duplicates; never waits.
        """
        found: list[WebElement] = []
        for by, value in resolve(platform, target):
            try:
                els: list[WebElement] = driver.find_elements(by, value)
            except Exception:
                continue
            found.extend(el for el in els if el not in found)
        return found

    @staticmethod
    def find_now(driver: WebDriver, platform: Platform, target: Locator) -> WebElement:
        """
        First element currently matching `target`, without any visibility wait.

        Raises:
            ElementNotFound: If nothing matches.
        """
        els = Waits.find_all_now(driver, platform, target)
        if not els:
            raise ElementNotFound(pretty_locator(platform, target))
        return els[0]

    @staticmethod
    def wait_until_gone(
        driver: WebDriver,
        platform: Platform,
        target: Locator,
        *,
        timeout: Timeout = WaitPolicy.DEFAULT,
        waits: WaitSettings | None = None,
    ) -> bool:
        """Wait until no element matching `target` is visible. Returns False on timeout."""
        waits = waits or WaitSettings()
        seconds = resolve_timeout(timeout, waits)
        visible = _first_matching(resolve(platform, target), "visibility")
        try:
            WebDriverWait(driver, seconds, poll_frequency=waits.polling_ms / 1000.0).until(
                lambda drv: visible(drv) is False
            )
            return True
        except TimeoutException:
            return False

    @staticmethod
    def until_script(
        driver: WebDriver,
        script: str,
        predicate: Callable[[Any], bool],
        *,
        timeout: Timeout = WaitPolicy.DEFAULT,
        waits: WaitSettings | None = None,
        message: str = "Script condition was not met",
    ) -> None:
        """
        Poll a JavaScript expression until `predicate(result)` holds.

        Raises:
            ElementTimeout: On timeout.
        """
        waits = waits or WaitSettings()
        seconds = resolve_timeout(timeout, waits)
        try:
            WebDriverWait(driver, seconds, poll_frequency=waits.polling_ms / 1000.0).until(
                lambda drv: predicate(drv.execute_script(script))
            )
        except TimeoutException as e:
            raise ElementTimeout(message=f"{message} within {seconds}s") from e


# ---- Internal helper functions ----
def _first_matching(
    tuples: Sequence[StrategyValue], condition: Condition
) -> Callable[[WebDriver], WebElement | Literal[False]]:
    """
    Create a WebDriverWait.until predicate returning the first element that
    meets `condition` across all locator alternatives, or False.
    """

    def _predicate(drv: WebDriver) -> WebElement | Literal[False]:
        for by, value in tuples:
            try:
                els: list[WebElement] = drv.find_elements(by, value)
            except Exception:
                continue
            for el in els:
                if _meets(el, condition):
                    return el
        return False

    return _predicate


def _meets(el: WebElement, condition: Condition) -> bool:
    """Check a condition on an element; stale or broken elements never meet it."""
    try:
        if condition == "presence":
            return True
        if condition == "visibility":
            return bool(el.is_displayed())
        return bool(el.is_displayed()) and bool(el.is_enabled())
    except Exception:
        return False
