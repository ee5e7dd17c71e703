from __future__ import annotations

import json
from pathlib import Path
from typing import Any, ClassVar, Literal

import allure

from ..config.loader import load_settings
from ..config.models import ReportingSettings

When = Literal["success", "failure"]


class ReportManager:
    """
    Attaches run artifacts (screenshots, page source, JSON payloads) to Allure.

    Which artifacts are attached on success or failure is decided by
    ReportingSettings; capture errors never propagate into the test.
    """

    _default: ClassVar[ReportManager | None] = None

    def __init__(self, reporting: ReportingSettings | str | Path | None = None) -> None:
        """
        Args:
            reporting (ReportingSettings | str | Path | None): Reporting settings, or just
                the Allure results directory. Defaults are used when omitted.
        """
        if isinstance(reporting, ReportingSettings):
            self.settings = reporting
        elif reporting is None:
            self.settings = ReportingSettings()
        else:
            self.settings = ReportingSettings(allure_dir=str(reporting))

        self.dir = Path(self.settings.allure_dir)
        self.dir.mkdir(parents=True, exist_ok=True)

    @property
    def ledger_dir(self) -> Path:
        return Path(self.settings.ledger_dir)

    # ----- Shared instance -----
    @classmethod
    def get_default(cls) -> ReportManager:
        """Shared instance for code that was not handed one explicitly."""
        if cls._default is None:
            try:
                cls._default = ReportManager(load_settings().reporting)
            except Exception:
                # Broken configuration must not stop artifact capture
                cls._default = ReportManager(ReportingSettings())
        return cls._default

    @classmethod
    def set_default(cls, manager: ReportManager | None) -> None:
        cls._default = manager

    # ----- Low-level safe methods -----
    @staticmethod
    def _safe_attach_screenshot(driver: Any, *, name: str) -> bool:
        try:
            png = driver.get_screenshot_as_png()
            allure.attach(png, name=name, attachment_type=allure.attachment_type.PNG)
            return True
        except Exception:
            return False

    @staticmethod
    def _safe_attach_page_source(driver: Any, *, name: str) -> bool:
        try:
            src = getattr(driver, "page_source", None)
            if not src:
                return False
            kind = allure.attachment_type.XML
            if _looks_like_html(src):
                kind = allure.attachment_type.HTML
            allure.attach(src, name=name, attachment_type=kind)
            return True
        except Exception:
            return False

    # ----- Public methods -----
    def attach_screenshot(self, driver: Any, name: str | None = None) -> bool:
        """Unconditionally attach a screenshot. Returns whether one was captured."""
        if driver is None:
            return False
        return ReportManager._safe_attach_screenshot(
            driver, name=name or self.settings.screenshot_name
        )

    def attach_screenshot_if_allowed(self, driver: Any, *, when: When) -> None:
        """Attach a screenshot if allowed by settings policy for the given event."""
        allowed = (
            self.settings.screenshots_on_fail
            if when == "failure"
            else self.settings.screenshots_on_success
        )
        if allowed and driver is not None:
            ReportManager._safe_attach_screenshot(driver, name=self.settings.screenshot_name)

    def attach_page_source_if_allowed(self, driver: Any, *, when: When) -> None:
        """Attach page source if allowed by settings policy for the given event."""
        allowed = (
            self.settings.page_source_on_fail
            if when == "failure"
            else self.settings.page_source_on_success
        )
        if allowed and driver is not None:
            ReportManager._safe_attach_page_source(driver, name=self.settings.page_source_name)

    def attach_artifacts_on_failure(self, driver: Any) -> None:
        """Screenshot and page source, each according to the failure policy."""
        self.attach_screenshot_if_allowed(driver, when="failure")
        self.attach_page_source_if_allowed(driver, when="failure")

    def attach_json(self, payload: Any, name: str) -> None:
        try:
            body = json.dumps(payload, ensure_ascii=False, indent=2, default=str)
            allure.attach(body, name=name, attachment_type=allure.attachment_type.JSON)
        except Exception:
            pass


def _looks_like_html(src: str) -> bool:
    head = src.lstrip()[:200].lower()
    return head.startswith("<!doctype html") or head.startswith("<html")
