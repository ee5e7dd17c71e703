from __future__ import annotations

from typing import Any, cast

import pytest
from fakes import FakeDriver, FakeEl, StaleEl

from crossauto.config.models import WaitSettings
from crossauto.core.locators import PageElement, by_css, by_xpath
from crossauto.core.waits import (
    Found,
    NotFound,
    TimedOut,
    WaitPolicy,
    Waits,
    resolve_timeout,
)
from crossauto.errors import ElementNotFound, ElementTimeout, InteractionError
from crossauto.platform import Platform

WEB = Platform.WEB


def test_wait_policy_maps_to_configured_seconds() -> None:
    assert WaitPolicy.SHORT.seconds() == 5
    assert WaitPolicy.DEFAULT.seconds() == 15
    assert WaitPolicy.LONG.seconds() == 30
    custom = WaitSettings(default=7)
    assert resolve_timeout(WaitPolicy.DEFAULT, custom) == 7
    assert resolve_timeout(2.5, custom) == 2.5


def test_wait_returns_first_element_meeting_condition(
    driver: FakeDriver, fast_waits: WaitSettings
) -> None:
    hidden, shown = FakeEl("h", visible=False), FakeEl("s")
    driver.set_elements("xpath", "//a", [hidden, shown])

    got = Waits.wait_for_element(
        cast(Any, driver), WEB, by_xpath("//a"), condition="visibility", waits=fast_waits
    )
    assert got is shown


def test_presence_accepts_hidden_elements(driver: FakeDriver, fast_waits: WaitSettings) -> None:
    hidden = FakeEl(visible=False)
    driver.set_elements("xpath", "//a", [hidden])
    got = Waits.wait_for_element(
        cast(Any, driver), WEB, by_xpath("//a"), condition="presence", waits=fast_waits
    )
    assert got is hidden


def test_clickable_requires_enabled(driver: FakeDriver, fast_waits: WaitSettings) -> None:
    driver.set_elements("xpath", "//b", [FakeEl(enabled=False)])
    with pytest.raises(ElementTimeout) as ei:
        Waits.wait_for_element(
            cast(Any, driver),
            WEB,
            by_xpath("//b"),
            condition="clickable",
            timeout=WaitPolicy.SHORT,
            waits=fast_waits,
        )
    assert ei.value.locator == "xpath: //b"
    assert isinstance(ei.value, InteractionError)


def test_wait_tries_every_alternative(driver: FakeDriver, fast_waits: WaitSettings) -> None:
    el = FakeEl("second")
    driver.set_elements("css selector", "#b", [el])
    target = PageElement.by_locators(web=[by_css("#a"), by_css("#b")])
    assert Waits.wait_for_element(cast(Any, driver), WEB, target, waits=fast_waits) is el


def test_stale_elements_never_meet_a_condition(
    driver: FakeDriver, fast_waits: WaitSettings
) -> None:
    driver.set_elements("xpath", "//s", [StaleEl()])
    with pytest.raises(ElementTimeout):
        Waits.wait_for_element(cast(Any, driver), WEB, by_xpath("//s"), waits=fast_waits)


def test_lookup_reports_found_not_found_and_timed_out(
    driver: FakeDriver, fast_waits: WaitSettings
) -> None:
    el = FakeEl()
    driver.set_elements("xpath", "//ok", [el])
    driver.set_elements("xpath", "//hidden", [FakeEl(visible=False)])
    drv = cast(Any, driver)

    found = Waits.lookup(drv, WEB, by_xpath("//ok"), waits=fast_waits)
    assert isinstance(found, Found) and found.element is el and found

    missing = Waits.lookup(drv, WEB, by_xpath("//none"), waits=fast_waits)
    assert isinstance(missing, NotFound) and not missing

    timed_out = Waits.lookup(
        drv, WEB, by_xpath("//hidden"), timeout=WaitPolicy.SHORT, waits=fast_waits
    )
    assert isinstance(timed_out, TimedOut) and not timed_out
    assert timed_out.condition == "visibility"
    assert timed_out.timeout == fast_waits.short


def test_find_now_does_not_wait_for_visibility(driver: FakeDriver) -> None:
    hidden = FakeEl(visible=False)
    driver.set_elements("xpath", "//h", [hidden])
    assert Waits.find_now(cast(Any, driver), WEB, by_xpath("//h")) is hidden
    with pytest.raises(ElementNotFound):
        Waits.find_now(cast(Any, driver), WEB, by_xpath("//missing"))


def test_find_all_now_merges_alternatives_in_order(driver: FakeDriver) -> None:
    a, b, c = FakeEl("a"), FakeEl("b"), FakeEl("c")
    driver.set_elements("css selector", "#first", [a, b])
    driver.set_elements("css selector", "#second", [b, c])
    target = PageElement.by_locators(web=[by_css("#first"), by_css("#second")])

    assert Waits.find_all_now(cast(Any, driver), WEB, target) == [a, b, c]
    assert Waits.find_now(cast(Any, driver), WEB, target) is a


def test_wait_until_gone(driver: FakeDriver, fast_waits: WaitSettings) -> None:
    drv = cast(Any, driver)
    driver.set_elements("xpath", "//spinner", [FakeEl(visible=False)])
    assert Waits.wait_until_gone(drv, WEB, by_xpath("//spinner"), waits=fast_waits) is True

    driver.set_elements("xpath", "//spinner", [FakeEl()])
    assert (
        Waits.wait_until_gone(
            drv, WEB, by_xpath("//spinner"), timeout=WaitPolicy.SHORT, waits=fast_waits
        )
        is False
    )


def test_until_script_polls_and_times_out(driver: FakeDriver, fast_waits: WaitSettings) -> None:
    drv = cast(Any, driver)
    driver.script_results["return document.readyState"] = "complete"
    Waits.until_script(
        drv, "return document.readyState", lambda s: s == "complete", waits=fast_waits
    )

    driver.script_results["return document.readyState"] = "loading"
    with pytest.raises(ElementTimeout):
        Waits.until_script(
            drv,
            "return document.readyState",
            lambda s: s == "complete",
            timeout=WaitPolicy.SHORT,
            waits=fast_waits,
        )
