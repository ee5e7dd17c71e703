from __future__ import annotations

from ..pages.planity_page import PlanityPage
from .hooks import launch_app
from .registry import StepRegistry
from .runner import StepRunner


class PlanitySteps:
    """
    Step definitions of the Planity hairdresser search, in the French
    phrasing of the feature files.
    """

    # Phrase -> method name
    PHRASES: dict[str, str] = {
        "Je lance l'application": "launch_app",
        "Je clique sur le lien {string} dans le menu": "click_menu_link",
        "Je saisis {string} dans la recherche": "enter_location",
        "Je clique sur le bouton {string}": "click_button",
        "Je devrais voir une liste de coiffeurs à {word}": "should_see_hairdressers",
    }

    def __init__(self, runner: StepRunner, page: PlanityPage) -> None:
        self.runner = runner
        self.page = page

    def register(self, registry: StepRegistry | None = None) -> StepRegistry:
        registry = registry or StepRegistry()
        for phrase, method in self.PHRASES.items():
            registry.register(phrase, getattr(self, method))
        return registry

    def launch_app(self) -> None:
        launch_app(self.runner, self.page)

    def click_menu_link(self, link: str) -> None:
        def action() -> str:
            strategy = self.page.click_hairdresser_link()
            return f"Clicked the {link} link ({strategy})"

        self.runner.execute_step(
            f"Click the {link} link in the menu", "The menu link must be clicked", action
        )

    def enter_location(self, location: str) -> None:
        def action() -> str:
            self.page.enter_location(location)
            return f"Location entered: {location}"

        self.runner.execute_step(
            "Enter the location", "The search field must be filled in", action
        )

    def click_button(self, label: str) -> None:
        def action() -> str:
            strategy = self.page.click_search()
            return f"Clicked the {label} button ({strategy})"

        self.runner.execute_step(f"Click the {label} button", "The button must be clicked", action)

    def should_see_hairdressers(self, city: str = "Paris") -> None:
        def action() -> str:
            if not self.page.has_hairdresser_results(city):
                raise AssertionError(f"The list of hairdressers in {city} is not displayed")
            self.page.click_hairdresser_link_in_results()
            return f"The list of hairdressers in {city} is displayed"

        self.runner.execute_step(
            "Check the search results", "The list of hairdressers must be displayed", action
        )


__all__ = ["PlanitySteps"]
