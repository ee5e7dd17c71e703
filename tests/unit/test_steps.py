from __future__ import annotations

import json
from collections.abc import Callable

import pytest
from fakes import FakeDriver, FakeEl, FakeReport

from crossauto.core.context import TestContext
from crossauto.errors import SessionInitError
from crossauto.pages.planity_page import PlanityPage
from crossauto.reporting.ledger import StepStatus, TestLedger
from crossauto.steps import (
    PlanitySteps,
    ScenarioHooks,
    StepNotFound,
    StepRegistry,
    StepRunner,
    launch_app,
)
from crossauto.steps.registry import compile_phrase, strip_keyword

CONSENT = "//button[contains(.,'Accepter & Fermer')]"


def _statuses(ledger: TestLedger) -> list[tuple[str, str]]:
    return [(r.step, r.status.value) for r in ledger.records()]


@pytest.fixture
def runner(make_context: Callable[..., TestContext], ledger: TestLedger) -> StepRunner:
    ctx = make_context("web")
    ctx.scenario = "search"
    return StepRunner(ctx, ledger)


# ----- StepRunner -----
def test_execute_step_records_start_and_pass(
    runner: StepRunner, ledger: TestLedger, driver: FakeDriver
) -> None:
    _ = runner.context.driver

    record = runner.execute_step("Open", "The page must open", lambda: "opened")

    assert _statuses(ledger) == [("Open", "started"), ("Open", "passed")]
    assert record.actual == "opened"
    assert record.url == driver.current_url
    assert record.platform == "web"
    assert record.scenario == "search"


def test_failed_step_is_recorded_with_screenshot_and_reraised(
    runner: StepRunner, ledger: TestLedger, report: FakeReport
) -> None:
    _ = runner.context.driver

    def boom() -> str:
        raise AssertionError("no results")

    with pytest.raises(AssertionError):
        runner.execute_step("Check", "Results shown", boom)

    failed = ledger.last()
    assert failed is not None
    assert failed.status is StepStatus.FAILED
    assert failed.error == "no results"
    assert report.screenshots == ["failure: Check"]


def test_runner_never_opens_a_session(runner: StepRunner, ledger: TestLedger) -> None:
    runner.execute_step("Offline", "Nothing", lambda: None)
    assert runner.context.has_session is False
    last = ledger.last()
    assert last is not None and last.url is None


# ----- ScenarioHooks -----
def test_scenario_before_and_after_write_the_report(
    runner: StepRunner, ledger: TestLedger, driver: FakeDriver, report: FakeReport
) -> None:
    hooks = ScenarioHooks(runner)

    hooks.before("search_paris")
    assert runner.context.has_session is True

    path = hooks.after(failed=False)

    assert path is not None and path.exists()
    data = json.loads(path.read_text(encoding="utf-8"))
    assert [s["step"] for s in data["steps"]] == ["Test start", "Test end"]
    assert data["steps"][-1]["status"] == "passed"
    assert report.json[0][1] == "Step ledger"
    assert driver.quit_called == 1


def test_scenario_after_failure_carries_last_error(
    runner: StepRunner, ledger: TestLedger, report: FakeReport
) -> None:
    hooks = ScenarioHooks(runner)
    hooks.before("search_paris")
    with pytest.raises(RuntimeError):
        runner.execute_step("Search", "Results", _raise("timeout on search"))

    hooks.after(failed=True)

    end = ledger.last("search_paris")
    assert end is not None
    assert end.step == "Test end" and end.status is StepStatus.FAILED
    assert end.error == "timeout on search"
    assert "screenshot-failure" in report.screenshots


def test_scenario_before_records_initialization_error(
    make_context: Callable[..., TestContext], ledger: TestLedger
) -> None:
    ctx = make_context("android", error=ConnectionRefusedError("appium down"))
    hooks = ScenarioHooks(StepRunner(ctx, ledger))

    with pytest.raises(SessionInitError):
        hooks.before("launch")

    failed = ledger.last()
    assert failed is not None
    assert failed.status is StepStatus.FAILED
    assert failed.error is not None and failed.error.startswith("Initialization error:")


def test_running_writes_report_when_session_setup_fails(
    make_context: Callable[..., TestContext], ledger: TestLedger
) -> None:
    ctx = make_context("web", error=ConnectionRefusedError("no chromedriver"))
    hooks = ScenarioHooks(StepRunner(ctx, ledger))
    body: list[str] = []

    with pytest.raises(SessionInitError):
        with hooks.running("search_paris", lambda: False):
            body.append("ran")

    assert body == []
    reports = list(ledger.report_dir.glob("Planity_*.json"))
    assert len(reports) == 1
    data = json.loads(reports[0].read_text(encoding="utf-8"))
    assert [(s["step"], s["status"]) for s in data["steps"]] == [
        ("Test start", "started"),
        ("Test start", "failed"),
        ("Test end", "failed"),
    ]
    assert data["steps"][-1]["error"].startswith("Initialization error:")


def test_running_asks_for_outcome_after_the_body(
    runner: StepRunner, ledger: TestLedger, driver: FakeDriver
) -> None:
    outcome = {"failed": False}

    with ScenarioHooks(runner).running("search_paris", lambda: outcome["failed"]) as hooks:
        assert hooks.context.has_session is True
        outcome["failed"] = True

    end = ledger.last("search_paris")
    assert end is not None and end.status is StepStatus.FAILED
    assert driver.quit_called == 1


def _raise(msg: str) -> Callable[[], str]:
    def action() -> str:
        raise RuntimeError(msg)

    return action


# ----- launch_app -----
def test_launch_app_on_web_opens_home_and_notes_cookies(
    runner: StepRunner, ledger: TestLedger, driver: FakeDriver
) -> None:
    driver.script_results["return document.readyState"] = "complete"
    driver.set_elements("xpath", CONSENT, [FakeEl()])

    launch_app(runner, PlanityPage(runner.context))

    assert driver.opened == ["https://www.planity.com/"]
    assert _statuses(ledger) == [
        ("Application launch", "started"),
        ("Cookie and popup handling", "passed"),
        ("Application launch", "passed"),
    ]
    cookies = ledger.records()[1]
    assert cookies.actual == f"Clicked: {CONSENT}"


def test_launch_app_on_mobile_only_records(
    make_context: Callable[..., TestContext], ledger: TestLedger, driver: FakeDriver
) -> None:
    ctx = make_context("ios")
    ctx.scenario = "mobile"
    runner = StepRunner(ctx, ledger)

    launch_app(runner, PlanityPage(ctx))

    assert driver.opened == []
    last = ledger.last()
    assert last is not None and last.actual == "The ios application is running"


# ----- StepRegistry -----
def test_compile_phrase_converts_placeholders() -> None:
    pattern, converters = compile_phrase("Je saisis {string} et {int} fois {word}")
    m = pattern.fullmatch('Je saisis "Paris" et 3 fois vite')
    assert m is not None
    assert [c(v) for c, v in zip(converters, m.groups())] == ["Paris", 3, "vite"]

    with pytest.raises(ValueError):
        compile_phrase("Je vois {float}")


def test_registry_dispatches_first_match() -> None:
    reg = StepRegistry()
    seen: list[str] = []

    @reg.step("Je clique sur le bouton {string}")
    def click(label: str) -> None:
        seen.append(label)

    reg.register("Je clique sur le bouton {word}", lambda _w: seen.append("never"))

    reg.run('Je clique sur le bouton "Rechercher"')
    assert seen == ["Rechercher"]
    assert reg.phrases()[0] == "Je clique sur le bouton {string}"


def test_registry_unknown_step() -> None:
    with pytest.raises(StepNotFound):
        StepRegistry().run("Je danse")


def test_strip_keyword() -> None:
    assert strip_keyword("  Quand je clique") == "je clique"
    assert strip_keyword("Given a session") == "a session"
    assert strip_keyword("Je lance l'application") == "Je lance l'application"


# ----- PlanitySteps -----
def test_planity_scenario_runs_end_to_end(
    runner: StepRunner, ledger: TestLedger, driver: FakeDriver
) -> None:
    driver.script_results["return document.readyState"] = "complete"
    link, field, search = FakeEl("Coiffeur"), FakeEl(), FakeEl("Rechercher")
    driver.set_elements("xpath", "//a[@id='nav-item-0'][@href='/coiffeur']", [link])
    driver.set_elements("css selector", "input#main-where-input_1730471228793", [field])
    driver.set_elements("xpath", "//span[text()='Rechercher']", [search])
    driver.set_elements("css selector", "h2#place-title-0-category-page", [FakeEl("Paris")])

    registry = PlanitySteps(runner, PlanityPage(runner.context)).register()
    registry.run_all(
        [
            "Soit Je lance l'application",
            'Quand Je clique sur le lien "Coiffeur" dans le menu',
            'Et Je saisis "Paris" dans la recherche',
            'Et Je clique sur le bouton "Rechercher"',
            "Alors Je devrais voir une liste de coiffeurs à Paris",
        ]
    )

    assert field.sent == ["Paris"]
    assert search.clicked == 1
    # Menu link, then the link again on the results page
    assert link.clicked == 2
    assert all(r.status is not StepStatus.FAILED for r in ledger.records())


def test_missing_results_fail_the_check_step(runner: StepRunner, ledger: TestLedger) -> None:
    steps = PlanitySteps(runner, PlanityPage(runner.context))

    with pytest.raises(AssertionError, match="Lyon"):
        steps.should_see_hairdressers("Lyon")

    last = ledger.last()
    assert last is not None
    assert last.step == "Check the search results"
    assert last.status is StepStatus.FAILED


def test_phrase_table_matches_methods() -> None:
    for method in PlanitySteps.PHRASES.values():
        assert callable(getattr(PlanitySteps, method))
