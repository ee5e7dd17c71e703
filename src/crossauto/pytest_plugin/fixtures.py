from __future__ import annotations

from collections.abc import Generator

import allure
import pytest

from ..config.loader import load_settings
from ..config.models import Settings
from ..core.context import TestContext
from ..core.controller import InteractionController
from ..pages.planity_page import PlanityPage
from ..reporting.ledger import TestLedger
from ..reporting.manager import ReportManager
from ..steps.hooks import ScenarioHooks
from ..steps.planity_steps import PlanitySteps
from ..steps.registry import StepRegistry
from ..steps.runner import StepRunner
from ..utils.logging import bind_context, clear_contextvars, get_logger, setup_logging

_logger = get_logger(__name__)


@pytest.fixture(scope="session")
def settings(pytestconfig: pytest.Config) -> Settings:
    """
    Load test configuration once per session.

    Supports overriding the configuration file path, platform and browser
    via command-line options:
      --config <path>
      --platform <web|android|ios>
      --browser <chrome|firefox|edge>
    """
    with allure.step("Load test configuration"):
        cfg_path: str | None = pytestconfig.getoption("--config")
        s: Settings = load_settings(cfg_path)

        override_platform: str | None = pytestconfig.getoption("--platform")
        if override_platform:
            s.platform = override_platform.strip().lower()
        override_browser: str | None = pytestconfig.getoption("--browser")
        if override_browser:
            s.browser = override_browser.strip().lower()

        _logger.info("Settings loaded", platform=s.platform, browser=s.browser, config=cfg_path)
        return s


@pytest.fixture(scope="session")
def report_manager(settings: Settings) -> ReportManager:
    """
    Create a ReportManager for collecting test artifacts (e.g. Allure results).
    """
    rm = ReportManager(settings.reporting)
    # Shared instance for controllers created without an explicit manager
    ReportManager.set_default(rm)
    return rm


@pytest.fixture(scope="session")
def ledger(settings: Settings) -> TestLedger:
    """Step ledger shared by the whole run."""
    return TestLedger(settings.reporting.ledger_dir)


@pytest.fixture(scope="function")
def test_context(
    settings: Settings,
    report_manager: ReportManager,
    request: pytest.FixtureRequest,
) -> Generator[TestContext, None, None]:
    """
    Fresh TestContext for each test. Sessions it opened are closed afterwards.
    """
    ctx = TestContext.from_settings(
        settings, report_manager=report_manager, scenario=request.node.name
    )
    try:
        yield ctx
    finally:
        with allure.step("Close sessions"):
            ctx.close()


@pytest.fixture(scope="function")
def controller(test_context: TestContext) -> InteractionController:
    """
    InteractionController bound to the session of the configured platform.
    """
    with allure.step(f"Open {test_context.platform.value} session"):
        ctl = test_context.controller()
    bind_context(driver=ctl.driver)
    return ctl


@pytest.fixture(scope="function")
def step_runner(test_context: TestContext, ledger: TestLedger) -> StepRunner:
    return StepRunner(test_context, ledger)


@pytest.fixture(scope="function")
def planity_page(test_context: TestContext) -> PlanityPage:
    return PlanityPage(test_context)


@pytest.fixture(scope="function")
def scenario(
    step_runner: StepRunner, request: pytest.FixtureRequest
) -> Generator[ScenarioHooks, None, None]:
    """
    Wraps the test in scenario setup and teardown.

    Teardown learns whether the test failed from the report stored by the
    makereport hook. A failed setup still gets its teardown and report.
    """

    def call_failed() -> bool:
        rep = getattr(request.node, "rep_call", None)
        return rep is None or bool(getattr(rep, "failed", False))

    with ScenarioHooks(step_runner).running(request.node.name, call_failed) as hooks:
        yield hooks


@pytest.fixture(scope="function")
def planity_steps(
    scenario: ScenarioHooks, step_runner: StepRunner, planity_page: PlanityPage
) -> StepRegistry:
    """StepRegistry with the Planity steps, inside a running scenario."""
    return PlanitySteps(step_runner, planity_page).register()


# ----- Logging: initialization and context -----
@pytest.fixture(scope="session", autouse=True)
def _setup_structlog() -> None:
    """One-time structured logging setup for the entire test session."""
    setup_logging()


@pytest.fixture(autouse=True)
def _bind_test_logging_context(request: pytest.FixtureRequest) -> Generator[None, None, None]:
    """
    Bind the test name (and platform/browser when settings are in use) to the
    logging context, and clear it afterwards.
    """
    s = None
    if "settings" in request.fixturenames:
        s = request.getfixturevalue("settings")
    bind_context(settings=s, test_name=request.node.name)
    try:
        yield
    finally:
        clear_contextvars()
