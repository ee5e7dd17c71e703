from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

import allure

from ..core.context import TestContext
from ..core.optional import optional_web
from ..pages.planity_page import PlanityPage
from ..platform import Platform
from ..reporting.ledger import StepStatus, TestLedger
from ..utils.logging import bind_context, get_logger
from .runner import StepRunner

_log = get_logger(__name__)

_START_EXPECTATIONS: dict[Platform, str] = {
    Platform.WEB: "The browser session must be open",
    Platform.ANDROID: "The Android application must be launched",
    Platform.IOS: "The iOS application must be launched",
}


class ScenarioHooks:
    """
    Scenario setup and teardown around a StepRunner.

    `before` selects the platform from settings and opens the session;
    `after` records the final status, writes the ledger report and closes
    every session of the context.
    """

    def __init__(self, runner: StepRunner, report_name: str = "Planity") -> None:
        self.runner = runner
        self.report_name = report_name

    @property
    def context(self) -> TestContext:
        return self.runner.context

    @property
    def ledger(self) -> TestLedger:
        return self.runner.ledger

    def before(self, scenario: str) -> None:
        """
        Raises:
            UnsupportedPlatformError: If the configured platform is unknown.
            SessionInitError: If the session could not be opened.
        """
        ctx = self.context
        ctx.scenario = scenario
        ctx.selector.set_platform(ctx.settings.platform)
        platform = ctx.selector.current()
        bind_context(settings=ctx.settings, scenario=scenario)
        allure.dynamic.parameter("Platform", platform.value)
        if platform is Platform.WEB:
            allure.dynamic.parameter("Browser", ctx.settings.browser)

        expected = _START_EXPECTATIONS[platform]
        self.runner.record("Test start", StepStatus.STARTED, expected=expected)
        try:
            with allure.step(f"Open {platform.value} session"):
                drv = ctx.driver
        except Exception as e:
            self.runner.record(
                "Test start",
                StepStatus.FAILED,
                expected=expected,
                error=f"Initialization error: {e}",
            )
            raise
        bind_context(driver=drv)
        _log.info("Scenario started", scenario=scenario, platform=platform.value)

    def after(self, failed: bool) -> Path | None:
        """
        Record the outcome, write the ledger report and close the sessions.

        Errors while finishing are logged; the report is still written and the
        sessions still closed.

        Returns:
            Path | None: The written report, None if it could not be written.
        """
        ctx = self.context
        report: Path | None = None
        try:
            url = self.runner.current_url()
            if failed:
                drv = ctx.provider.peek(ctx.platform) if ctx.has_session else None
                captured = ctx.report_manager.attach_screenshot(drv, name="screenshot-failure")
                actual = "Test failed, screenshot attached" if captured else "Test failed"
                last = self.ledger.last(self.runner.scenario)
                self.runner.record(
                    "Test end",
                    StepStatus.FAILED,
                    actual=actual,
                    error=last.error if last is not None else None,
                    url=url,
                )
            else:
                self.runner.record(
                    "Test end", StepStatus.PASSED, actual="Test finished successfully", url=url
                )
        except Exception as e:
            _log.error("Error while finishing scenario", error=f"{type(e).__name__}: {e}")
        finally:
            try:
                report = self.ledger.write_report(self.report_name)
                steps = self.ledger.for_scenario(self.runner.scenario)
                ctx.report_manager.attach_json(
                    [r.model_dump(mode="json") for r in steps], name="Step ledger"
                )
            except Exception as e:
                _log.error("Could not write step report", error=f"{type(e).__name__}: {e}")
            ctx.close()
            _log.info(
                "Scenario finished",
                scenario=self.runner.scenario,
                status="failed" if failed else "passed",
            )
        return report

    @contextmanager
    def running(self, scenario: str, failed: Callable[[], bool]) -> Iterator[ScenarioHooks]:
        """
        Setup on enter, teardown on exit.

        Teardown also runs when setup raised; the scenario then counts as
        failed and the setup error is re-raised after the report is written.

        Args:
            scenario (str): Scenario name.
            failed (Callable[[], bool]): Asked at teardown whether the body failed.
        """
        started = False
        try:
            self.before(scenario)
            started = True
            yield self
        finally:
            self.after(failed() if started else True)


def launch_app(runner: StepRunner, page: PlanityPage) -> None:
    """
    First step of every scenario.

    Web: open the site root, then accept the cookie consent if it shows up.
    Mobile: the app was started with the session; only the ledger entry is written.
    """
    ctx = runner.context

    def start() -> str:
        if not ctx.platform.is_mobile:
            page.open_home()
            notes: list[str] = []
            errors = optional_web(
                lambda: notes.extend(page.dismiss_cookies()), current=ctx.platform
            )
            notes.extend(f"Cookie consent: {e}" for e in errors)
            runner.record(
                "Cookie and popup handling",
                StepStatus.PASSED,
                actual="\n".join(notes),
                url=runner.current_url(),
            )
            return "The web application was launched"
        return f"The {ctx.platform.value} application is running"

    runner.execute_step("Application launch", "The application must be displayed", start)


__all__ = ["ScenarioHooks", "launch_app"]
