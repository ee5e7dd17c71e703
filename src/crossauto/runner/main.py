from __future__ import annotations

import shlex
from typing import Any

import pytest
import typer

from ..errors import UnsupportedPlatformError
from ..platform import Platform
from ..steps.planity_steps import PlanitySteps

app = typer.Typer(add_completion=False, help="Run the crossauto UI test suite.")


@app.command()
def run(
    config: str = typer.Option(None, help="Path to the YAML or .properties configuration file"),
    platform: str = typer.Option(None, help="web|android|ios"),
    browser: str = typer.Option(None, help="chrome|firefox|edge (web only)"),
    tests_path: str = typer.Option("tests/e2e", help="Path to the tests to run"),
    extra: str = typer.Option("", help="Additional arguments for pytest"),
) -> Any:
    """
    Run pytest with an optional configuration file and platform/browser overrides.

    Example usage:
        crossauto run --config configs/web.yaml --browser firefox --extra "-m smoke"
    """
    args = [tests_path]
    if config:
        args += ["--config", config]
    if platform:
        try:
            args += ["--platform", Platform.parse(platform).value]
        except UnsupportedPlatformError as e:
            raise typer.BadParameter(str(e), param_hint="--platform") from e
    if browser:
        args += ["--browser", browser.lower()]
    if extra:
        args += shlex.split(extra)

    typer.echo(f"pytest {' '.join(args)}")
    raise SystemExit(pytest.main(args))


@app.command()
def steps() -> None:
    """List the step phrases the Planity scenarios can use."""
    for phrase in PlanitySteps.PHRASES:
        typer.echo(phrase)


if __name__ == "__main__":
    app()
