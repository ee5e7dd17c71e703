# src/crossauto/core/locators.py
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from ..platform import Platform

# --- Supported locator strategies and "raw" locator types ---
Strategy = Literal[
    "css selector",
    "xpath",
    "-android uiautomator",
    "-ios predicate string",
]
StrategyValue = tuple[Strategy, str]


# -------- Factory functions (by_*) return StrategyValue --------
def _require(v: str | None, what: str) -> str:
    """Ensure that locator value is not None, otherwise raise an error."""
    if v is None:
        raise ValueError(f"Locator by {what} is not specified and is null.")
    return v


def by_css(v: str | None) -> StrategyValue:
    v = _require(v, "css")
    return ("css selector", v)


def by_xpath(v: str | None) -> StrategyValue:
    v = _require(v, "xpath")
    return ("xpath", v)


def by_ui_text(v: str | None) -> StrategyValue:
    """UiAutomator selector matching the exact visible text."""
    v = _require(v, "ui text")
    return ("-android uiautomator", f'new UiSelector().text("{v}")')


def by_ui_text_contains(v: str | None) -> StrategyValue:
    v = _require(v, "ui text contains")
    return ("-android uiautomator", f'new UiSelector().textContains("{v}")')


def by_ios_predicate_string(v: str | None) -> StrategyValue:
    v = _require(v, "ios predicate string")
    return ("-ios predicate string", v)


# -------- Cross-platform locator wrapper --------
@dataclass(frozen=True)
class PageElement:
    """
    A cross-platform locator: one strategy (or an ordered list of alternatives)
    per platform. Immutable once constructed.

    `name` is a human-readable label used in reports and error messages; on
    Android it is also the description searched for by `scroll_to`.
    """

    web: StrategyValue | None = None
    android: StrategyValue | None = None
    ios: StrategyValue | None = None
    web_list: tuple[StrategyValue, ...] | None = None
    android_list: tuple[StrategyValue, ...] | None = None
    ios_list: tuple[StrategyValue, ...] | None = None
    name: str | None = None

    def _variants(self, platform: str | Platform) -> tuple[StrategyValue | None, tuple | None]:
        p = Platform.parse(platform) if platform else None
        if p is Platform.WEB:
            return self.web, self.web_list
        if p is Platform.ANDROID:
            return self.android, self.android_list
        if p is Platform.IOS:
            return self.ios, self.ios_list
        raise ValueError(f"Unknown platform: {platform}")

    def get(self, platform: str | Platform) -> StrategyValue:
        """
        Get a single locator for the given platform.

        Raises:
            ValueError: If no locator is specified for the platform.
        """
        single, many = self._variants(platform)
        if single:
            return single
        if many:
            return many[0]
        raise ValueError(f"Locator for {Platform.parse(platform).value} is not specified")

    def get_all(self, platform: str | Platform) -> list[StrategyValue]:
        """Get all locators for the given platform, alternatives first."""
        single, many = self._variants(platform)
        if many:
            return list(many)
        if single:
            return [single]
        return []

    def supports(self, platform: str | Platform) -> bool:
        return bool(self.get_all(platform))

    @staticmethod
    def by_locators(
        web: Sequence[StrategyValue] | None = None,
        android: Sequence[StrategyValue] | None = None,
        ios: Sequence[StrategyValue] | None = None,
        name: str | None = None,
    ) -> PageElement:
        return PageElement(
            web_list=tuple(web) if web else None,
            android_list=tuple(android) if android else None,
            ios_list=tuple(ios) if ios else None,
            name=name,
        )


Locator = PageElement | StrategyValue


# ---------- Helper functions ----------
def resolve(platform: str | Platform, locator: Locator) -> list[StrategyValue]:
    """
    Normalize a locator into a list of (strategy, value) tuples for the platform.

    Raises:
        TypeError: If locator is neither StrategyValue nor PageElement.
        ValueError: If the PageElement has no locator for the platform.
    """
    if isinstance(locator, tuple) and len(locator) == 2:
        return [locator]

    if isinstance(locator, PageElement):
        locs = locator.get_all(platform)
        if not locs:
            return [locator.get(platform)]
        return locs

    raise TypeError("Unsupported locator type: expected StrategyValue or PageElement")


# ---------- Utilities for formatting steps ----------
def format_strategy_value(sv: StrategyValue) -> str:
    """
    Return a human-readable representation of a locator as "strategy: value".
    Examples: "xpath: //span[text()='Rechercher']", "css selector: h2#title".
    """
    try:
        by, value = sv
        return f"{by}: {value}"
    except Exception:
        return str(sv)


def pretty_locator(platform: str | Platform, locator: Locator) -> str:
    """
    Convert StrategyValue or PageElement into a string for Allure reports and errors.
    If multiple locators (alternatives) are present, join them with " | ".
    """
    try:
        tuples = resolve(platform, locator)
    except Exception:
        return str(locator)
    formatted = " | ".join(format_strategy_value(t) for t in tuples)
    name = getattr(locator, "name", None)
    return f"{name} ({formatted})" if name else formatted
