from __future__ import annotations

from ..core.context import TestContext
from ..core.controller import InteractionController
from ..core.locators import Locator
from ..core.waits import Timeout, WaitPolicy
from ..platform import Platform
from ..utils.logging import get_logger


class BasePage:
    """
    Common base for page objects.

    Pages describe their elements as PageElement constants and act on them
    through the controller of the test context; they never touch the driver.
    """

    def __init__(self, context: TestContext) -> None:
        self.context = context
        self._log = get_logger(type(self).__module__)

    @property
    def platform(self) -> Platform:
        return self.context.platform

    @property
    def controller(self) -> InteractionController:
        return self.context.controller()

    # Thin shortcuts used by every page
    def click(self, target: Locator, context: str | None = None) -> str:
        return self.controller.click(target, context=context)

    def type(self, target: Locator, text: str, context: str | None = None) -> None:
        self.controller.type(target, text, context=context)

    def is_displayed(self, target: Locator, timeout: Timeout = WaitPolicy.DEFAULT) -> bool:
        return self.controller.is_displayed(target, timeout)

    def read(self, target: Locator) -> str:
        return self.controller.read(target)
