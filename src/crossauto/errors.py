from __future__ import annotations

from typing import Any


class CrossautoError(Exception):
    """Base class for all errors raised by the framework."""


class SessionInitError(CrossautoError):
    """An automation session could not be created (server unreachable, bad configuration)."""


class UnsupportedPlatformError(CrossautoError, ValueError):
    """The platform selector holds no recognized value."""


class InteractionError(CrossautoError):
    """
    Failure of an element interaction.

    Carries the locator that was being acted on and an optional
    human-readable context supplied by the caller (usually a page object).
    """

    default_message = "Element interaction failed"

    def __init__(
        self,
        locator: Any = None,
        context: str | None = None,
        message: str | None = None,
    ) -> None:
        self.locator = locator
        self.context = context
        parts = [message or self.default_message]
        if locator is not None:
            parts.append(f"locator: {locator}")
        if context:
            parts.append(f"context: {context}")
        super().__init__(" | ".join(parts))


class ElementTimeout(InteractionError):
    default_message = "Element condition was not met in time"


class ElementNotFound(InteractionError):
    default_message = "No element matches the locator"


class ElementNotInteractable(InteractionError):
    default_message = "Element is not interactable"


class ElementNotClickable(InteractionError):
    default_message = "Element could not be clicked, all click strategies exhausted"


class InputError(InteractionError):
    default_message = "Unable to type text into element"


class ScrollError(InteractionError):
    default_message = "Unable to scroll to element"


class GestureError(InteractionError):
    default_message = "Gesture failed"


__all__ = [
    "CrossautoError",
    "SessionInitError",
    "UnsupportedPlatformError",
    "InteractionError",
    "ElementTimeout",
    "ElementNotFound",
    "ElementNotInteractable",
    "ElementNotClickable",
    "InputError",
    "ScrollError",
    "GestureError",
]
