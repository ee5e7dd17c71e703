from __future__ import annotations

import time

import allure

from ..core.locators import (
    PageElement,
    by_css,
    by_ios_predicate_string,
    by_ui_text,
    by_ui_text_contains,
    by_xpath,
)
from ..core.waits import Found, WaitPolicy
from .base_page import BasePage

HAIRDRESSER_LINK = PageElement(
    web=by_xpath("//a[@id='nav-item-0'][@href='/coiffeur']"),
    android=by_ui_text("Coiffeur"),
    ios=by_ios_predicate_string("label == 'Coiffeur'"),
    name="Coiffeur",
)
# The generated id suffix changes between releases of the site
LOCATION_INPUT = PageElement.by_locators(
    web=[
        by_css("input#main-where-input_1730471228793"),
        by_css("input[id^='main-where-input']"),
    ],
    android=[by_ui_text("Adresse, ville...")],
    ios=[by_ios_predicate_string("placeholderValue == 'Adresse, ville...'")],
    name="Adresse, ville",
)
SEARCH_BUTTON = PageElement(
    web=by_xpath("//span[text()='Rechercher']"),
    android=by_ui_text("Recherche"),
    ios=by_ios_predicate_string("label == 'Recherche'"),
    name="Rechercher",
)


def results_title(city: str) -> PageElement:
    """Heading of the hairdresser results list for `city`."""
    return PageElement(
        web=by_css("h2#place-title-0-category-page"),
        android=by_ui_text_contains(f"Coiffeurs à {city}"),
        ios=by_ios_predicate_string(f"label CONTAINS 'Coiffeurs à {city}'"),
        name=f"Coiffeurs à {city}",
    )


class PlanityPage(BasePage):
    """Planity home page and the hairdresser search."""

    def open_home(self) -> None:
        url = self.context.settings.web.base_url
        self.controller.open_url(url)
        self.controller.wait_for_page_ready(WaitPolicy.LONG)

    def dismiss_cookies(self) -> list[str]:
        """
        Click every configured cookie consent button that shows up.

        A consent button that never becomes clickable is noted, not an error.

        Returns:
            list[str]: One note per consent locator, for the step ledger.
        """
        notes: list[str] = []
        if not self.platform.is_mobile:
            with allure.step("Handle cookie consent"):
                for xpath in self.context.settings.web.cookie_consent_xpaths:
                    result = self.controller.find(by_xpath(xpath), "clickable", WaitPolicy.DEFAULT)
                    if isinstance(result, Found):
                        result.element.click()
                        notes.append(f"Clicked: {xpath}")
                        time.sleep(self.context.waits.settle_ms / 1000.0)
                    else:
                        notes.append(f"Not found or already handled: {xpath}")
            self._log.info("Cookie consent handled", action="dismiss_cookies", notes=notes)
        return notes

    def click_hairdresser_link(self) -> str:
        return self.click(HAIRDRESSER_LINK, context="Coiffeur link in the main menu")

    def enter_location(self, city: str) -> None:
        self.type(LOCATION_INPUT, city, context=f"Location search field ({city})")

    def click_search(self) -> str:
        return self.click(SEARCH_BUTTON, context="Search button")

    def has_hairdresser_results(self, city: str) -> bool:
        return self.is_displayed(results_title(city))

    def click_hairdresser_link_in_results(self) -> str:
        """Follow the Coiffeur link again from the results page."""
        return self.click(HAIRDRESSER_LINK, context="Coiffeur link on the results page")


__all__ = [
    "PlanityPage",
    "HAIRDRESSER_LINK",
    "LOCATION_INPUT",
    "SEARCH_BUTTON",
    "results_title",
]
