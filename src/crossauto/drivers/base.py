from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from selenium.webdriver.remote.webdriver import WebDriver

from ..config.models import Settings
from ..utils.logging import get_logger


class DriverFactory(ABC):
    """
    Builds a live session for one platform from project settings.

    Browser and Appium drivers both derive from Selenium's remote WebDriver,
    which is what the rest of the framework talks to.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._log = get_logger(__name__)

    @abstractmethod
    def build(self, capabilities: Mapping[str, Any]) -> WebDriver:
        """
        Create and return a configured session.

        Args:
            capabilities (Mapping[str, Any]): Extra capabilities merged over the defaults.

        Returns:
            WebDriver: Session ready for test execution.
        """
        ...

    def _log_ready(self, drv: WebDriver, kind: str) -> None:
        self._log.info(
            f"{kind} session created",
            action="driver_ready",
            session_id=getattr(drv, "session_id", None),
        )
