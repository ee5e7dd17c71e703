from __future__ import annotations

from collections.abc import Callable

import allure
from selenium.webdriver.remote.webdriver import WebDriver

from ..core.context import TestContext
from ..reporting.ledger import StepRecord, StepStatus, TestLedger
from ..utils.logging import get_logger

StepAction = Callable[[], str | None]


class StepRunner:
    """
    Runs business steps and keeps the step ledger.

    Each step is recorded when it starts and again with its outcome: the page
    URL on success, the error message and a screenshot on failure.
    """

    def __init__(self, context: TestContext, ledger: TestLedger) -> None:
        self.context = context
        self.ledger = ledger
        self._log = get_logger(__name__)

    @property
    def scenario(self) -> str:
        return self.context.scenario or "unnamed scenario"

    def _platform(self) -> str | None:
        try:
            return self.context.platform.value
        except Exception:
            return None

    def current_url(self) -> str | None:
        """URL of the open session; never opens one."""
        drv = self._open_session()
        if drv is None:
            return None
        try:
            url = drv.current_url
        except Exception:
            return None
        return str(url) if url else None

    def record(
        self,
        step: str,
        status: StepStatus,
        *,
        expected: str | None = None,
        actual: str | None = None,
        error: str | None = None,
        url: str | None = None,
    ) -> StepRecord:
        return self.ledger.add(
            StepRecord(
                scenario=self.scenario,
                step=step,
                expected=expected,
                actual=actual,
                status=status,
                error=error,
                url=url,
                platform=self._platform(),
            )
        )

    def execute_step(self, name: str, expected: str, action: StepAction) -> StepRecord:
        """
        Run `action` as the step `name`.

        Args:
            name (str): Step name shown in reports.
            expected (str): Expected outcome.
            action (StepAction): Step body; may return a description of what happened.

        Returns:
            StepRecord: The "passed" record.

        Raises:
            Exception: Whatever `action` raised, after the failure was recorded.
        """
        self.record(name, StepStatus.STARTED, expected=expected)
        with allure.step(name):
            self._log.info("Step started", action="step", step=name, scenario=self.scenario)
            try:
                actual = action()
            except Exception as e:
                self._log.error(
                    "Step failed",
                    action="step",
                    step=name,
                    scenario=self.scenario,
                    error=f"{type(e).__name__}: {e}",
                )
                self.record(
                    name,
                    StepStatus.FAILED,
                    expected=expected,
                    error=str(e) or type(e).__name__,
                    url=self.current_url(),
                )
                drv = self._open_session()
                if drv is not None:
                    self.context.report_manager.attach_screenshot(drv, name=f"failure: {name}")
                raise

            self._log.info("Step passed", action="step", step=name, scenario=self.scenario)
            return self.record(
                name,
                StepStatus.PASSED,
                expected=expected,
                actual=actual,
                url=self.current_url(),
            )

    def _open_session(self) -> WebDriver | None:
        try:
            return self.context.provider.peek(self.context.platform)
        except Exception:
            return None


__all__ = ["StepRunner", "StepAction"]
