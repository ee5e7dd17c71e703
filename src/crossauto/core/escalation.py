from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from ..errors import ElementNotClickable
from ..utils.logging import get_logger

_log = get_logger(__name__)


@dataclass(frozen=True)
class ClickStrategy:
    """
    One tier of the click escalation.

    `last_resort` marks strategies that alter the page under test (for example
    forcing an element visible); a success through them may hide a real UI defect
    and is logged as a warning.
    """

    name: str
    action: Callable[[], None]
    last_resort: bool = False


def first_success(
    strategies: Sequence[ClickStrategy],
    locator: Any,
    *,
    context: str | None = None,
) -> str:
    """
    Run strategies in order until one completes without raising.

    Returns:
        str: Name of the strategy that succeeded.

    Raises:
        ElementNotClickable: If every strategy failed; chained to the last error.
    """
    last_exc: Exception | None = None
    for tier, strategy in enumerate(strategies, start=1):
        try:
            strategy.action()
        except Exception as e:  # noqa: PERF203 - each tier is allowed to fail
            last_exc = e
            _log.debug(
                "Click strategy failed",
                action="click",
                locator=str(locator),
                tier=tier,
                strategy=strategy.name,
                error=f"{type(e).__name__}: {e}",
            )
            continue
        if strategy.last_resort:
            _log.warning(
                "Element clicked only after forcing it visible, the page may hide a real defect",
                action="click",
                locator=str(locator),
                tier=tier,
                strategy=strategy.name,
            )
        else:
            _log.debug(
                "Click strategy succeeded",
                action="click",
                locator=str(locator),
                tier=tier,
                strategy=strategy.name,
            )
        return strategy.name

    raise ElementNotClickable(locator, context) from last_exc
