from __future__ import annotations

from enum import Enum

from .errors import UnsupportedPlatformError


class Platform(str, Enum):
    """
    Enumeration for supported target platforms.

    Used to explicitly define and validate the platform
    across configuration, driver factories, and test logic.
    """

    WEB = "web"
    ANDROID = "android"
    IOS = "ios"

    @classmethod
    def parse(cls, value: str | Platform | None) -> Platform:
        """
        Convert a configuration value ("Web", "Android", "iOS", ...) into a Platform.

        Raises:
            UnsupportedPlatformError: If the value is empty or unknown.
        """
        if isinstance(value, Platform):
            return value
        raw = (value or "").strip().lower()
        try:
            return cls(raw)
        except ValueError:
            raise UnsupportedPlatformError(f"Unsupported platform: {value!r}") from None

    @property
    def is_mobile(self) -> bool:
        return self is not Platform.WEB


class PlatformSelector:
    """
    Holds the active target platform of a scenario.

    Set once by scenario setup; every other component only reads it.
    """

    def __init__(self, platform: str | Platform | None = None) -> None:
        self._platform: Platform | None = None
        if platform is not None:
            self.set_platform(platform)

    def set_platform(self, platform: str | Platform) -> None:
        self._platform = Platform.parse(platform)

    def current(self) -> Platform:
        if self._platform is None:
            raise UnsupportedPlatformError("Platform is not selected")
        return self._platform

    def is_web(self) -> bool:
        return self._platform is Platform.WEB

    def is_android(self) -> bool:
        return self._platform is Platform.ANDROID

    def is_ios(self) -> bool:
        return self._platform is Platform.IOS

    def __repr__(self) -> str:
        value = self._platform.value if self._platform else None
        return f"PlatformSelector(platform={value!r})"
