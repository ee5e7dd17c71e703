import pytest


def pytest_addoption(parser: pytest.Parser) -> None:
    """
    Registers custom command-line (CLI) options for pytest.

    Adds options to configure test execution:
      --config <path>    : Path to the YAML (or .properties) configuration file.
      --platform <name>  : Platform override ("web", "android" or "ios").
      --browser <name>   : Browser override for the web platform.

    The settings fixture applies them over the loaded configuration.
    """
    g = parser.getgroup("crossauto")
    g.addoption(
        "--config",
        action="store",
        default=None,
        help="Path to YAML or .properties configuration file",
    )
    g.addoption(
        "--platform",
        action="store",
        default=None,
        help="Platform override: web|android|ios",
    )
    g.addoption(
        "--browser",
        action="store",
        default=None,
        help="Browser override for web runs: chrome|firefox|edge",
    )
