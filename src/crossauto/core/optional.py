from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping

from structlog.contextvars import get_contextvars

from ..errors import UnsupportedPlatformError
from ..platform import Platform
from ..utils.logging import get_logger

_logger = get_logger("crossauto.core.optional")

Action = Callable[[], object]
ErrorHandler = Callable[[BaseException], None]


def _context_platform() -> Platform | None:
    """
    Platform bound into the logging context by scenario setup, if any.

    Lets page code call optional_web() without carrying
    the test context around.
    """
    try:
        return Platform.parse(get_contextvars().get("platform"))
    except UnsupportedPlatformError:
        return None


def _run_actions(
    actions: Iterable[Action],
    *,
    suppress: bool,
    on_error: ErrorHandler | None,
    meta: Mapping[str, object],
) -> list[BaseException]:
    """
    Run actions in order. With `suppress`, a failing action is logged, handed
    to `on_error` and the next one still runs.

    Returns:
        list[BaseException]: Suppressed errors, in order.
    """
    errors: list[BaseException] = []
    for idx, action in enumerate(actions, start=1):
        try:
            action()
        except Exception as e:  # noqa: PERF203
            if not suppress:
                raise
            errors.append(e)
            _logger.warning(
                "Optional step error suppressed",
                step=idx,
                error=f"{type(e).__name__}: {e}",
                **meta,
            )
            if on_error is None:
                continue
            try:
                on_error(e)
            except Exception:
                _logger.warning("Optional step error handler failed", step=idx, **meta)
    return errors


def optional_for(
    platform: str | Platform,
    *actions: Action,
    suppress: bool = True,
    on_error: ErrorHandler | None = None,
    current: str | Platform | None = None,
) -> list[BaseException]:
    """
    Run actions only when the current platform is `platform`.

    Args:
        platform (str | Platform): Platform the actions belong to.
        *actions (Action): Callables without arguments.
        suppress (bool): Keep going when an action raises (default True).
        on_error (ErrorHandler | None): Called with each suppressed error.
        current (str | Platform | None): Platform of the running session; read
            from the logging context when omitted.

    Returns:
        list[BaseException]: Suppressed errors; empty when skipped.
    """
    target = Platform.parse(platform)
    active = Platform.parse(current) if current is not None else _context_platform()
    meta = {
        "target_platform": target.value,
        "current_platform": active.value if active else None,
    }
    if active is not target:
        _logger.debug("Skip optional steps: platform mismatch", **meta)
        return []
    return _run_actions(actions, suppress=suppress, on_error=on_error, meta=meta)


def optional_web(
    *actions: Action,
    on_error: ErrorHandler | None = None,
    current: str | Platform | None = None,
) -> list[BaseException]:
    return optional_for(Platform.WEB, *actions, on_error=on_error, current=current)


__all__ = ["optional_for", "optional_web"]
