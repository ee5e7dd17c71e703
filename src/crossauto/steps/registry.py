from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..errors import CrossautoError

StepHandler = Callable[..., Any]

# Cucumber expression parameter types: regex and converter
_PARAMETER_TYPES: dict[str, tuple[str, Callable[[str], Any]]] = {
    "string": (r'"([^"]*)"', str),
    "int": (r"(-?\d+)", int),
    "word": (r"(\S+)", str),
}
_PLACEHOLDER = re.compile(r"\\\{(\w+)\\\}")


class StepNotFound(CrossautoError):
    """No registered phrase matches the step text."""


@dataclass(frozen=True)
class StepDefinition:
    phrase: str
    pattern: re.Pattern[str]
    converters: tuple[Callable[[str], Any], ...]
    handler: StepHandler

    def match(self, text: str) -> list[Any] | None:
        m = self.pattern.fullmatch(text.strip())
        if m is None:
            return None
        return [conv(raw) for conv, raw in zip(self.converters, m.groups())]


def compile_phrase(phrase: str) -> tuple[re.Pattern[str], tuple[Callable[[str], Any], ...]]:
    """
    Turn a phrase with {string}/{int}/{word} placeholders into a regex.

    Raises:
        ValueError: On an unknown placeholder type.
    """
    converters: list[Callable[[str], Any]] = []

    def repl(m: re.Match[str]) -> str:
        kind = m.group(1)
        if kind not in _PARAMETER_TYPES:
            raise ValueError(f"Unknown parameter type {{{kind}}} in step: {phrase!r}")
        regex, conv = _PARAMETER_TYPES[kind]
        converters.append(conv)
        return regex

    pattern = _PLACEHOLDER.sub(repl, re.escape(phrase.strip()))
    return re.compile(pattern), tuple(converters)


class StepRegistry:
    """
    Maps human-readable step phrases to callables.

    Phrases use Cucumber expression placeholders, e.g.
    `Je saisis {string} dans la recherche`; the matched arguments are passed
    to the handler positionally. The first registered phrase that matches wins.
    """

    def __init__(self) -> None:
        self._steps: list[StepDefinition] = []

    def register(self, phrase: str, handler: StepHandler) -> StepDefinition:
        pattern, converters = compile_phrase(phrase)
        definition = StepDefinition(phrase, pattern, converters, handler)
        self._steps.append(definition)
        return definition

    def step(self, phrase: str) -> Callable[[StepHandler], StepHandler]:
        """Decorator form of `register`."""

        def decorator(fn: StepHandler) -> StepHandler:
            self.register(phrase, fn)
            return fn

        return decorator

    def phrases(self) -> list[str]:
        return [d.phrase for d in self._steps]

    def find(self, text: str) -> tuple[StepDefinition, list[Any]]:
        """
        Raises:
            StepNotFound: If no phrase matches.
        """
        for definition in self._steps:
            args = definition.match(text)
            if args is not None:
                return definition, args
        raise StepNotFound(f"No step matches: {text!r}")

    def run(self, text: str) -> Any:
        definition, args = self.find(text)
        return definition.handler(*args)

    def run_all(self, lines: list[str]) -> None:
        """Run a scenario given as step lines; Gherkin keywords are stripped."""
        for line in lines:
            self.run(strip_keyword(line))


_KEYWORDS = (
    "Given ",
    "When ",
    "Then ",
    "And ",
    "But ",
    "Soit ",
    "Quand ",
    "Alors ",
    "Et ",
    "Mais ",
)


def strip_keyword(line: str) -> str:
    text = line.strip()
    for kw in _KEYWORDS:
        if text.startswith(kw):
            return text[len(kw) :].strip()
    return text


__all__ = ["StepRegistry", "StepDefinition", "StepNotFound", "compile_phrase", "strip_keyword"]
