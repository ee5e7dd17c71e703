from __future__ import annotations

import threading
from collections.abc import Mapping

from selenium.webdriver.remote.webdriver import WebDriver

from ..config.models import AndroidConfig, IOSConfig, Settings
from ..errors import SessionInitError
from ..platform import Platform, PlatformSelector
from ..utils.logging import get_logger
from .android import AndroidDriverFactory
from .base import DriverFactory
from .ios import IOSDriverFactory
from .web import WebDriverFactory


def default_factories(settings: Settings) -> dict[Platform, DriverFactory]:
    return {
        Platform.WEB: WebDriverFactory(settings),
        Platform.ANDROID: AndroidDriverFactory(settings),
        Platform.IOS: IOSDriverFactory(settings),
    }


class DriverProvider:
    """
    Owns the live sessions of a test context: at most one per platform.

    Sessions are created lazily on first request and kept until closed.
    All access to the cache goes through a lock.
    """

    def __init__(
        self,
        settings: Settings,
        selector: PlatformSelector,
        factories: Mapping[Platform, DriverFactory] | None = None,
    ) -> None:
        self.settings = settings
        self.selector = selector
        self.factories: dict[Platform, DriverFactory] = dict(
            factories or default_factories(settings)
        )
        self._sessions: dict[Platform, WebDriver] = {}
        self._lock = threading.Lock()
        self._log = get_logger(__name__)

    def get_session(self, platform: Platform | str) -> WebDriver:
        """
        Cached session for `platform`, created on first use.

        Raises:
            UnsupportedPlatformError: If `platform` is not a known value.
            SessionInitError: If the session could not be created.
        """
        p = Platform.parse(platform)
        with self._lock:
            drv = self._sessions.get(p)
            if drv is not None:
                return drv
            factory = self.factories.get(p)
            if factory is None:
                raise SessionInitError(f"No driver factory registered for {p.value}")
            try:
                drv = factory.build(self.settings.capabilities.raw)
            except SessionInitError:
                raise
            except Exception as e:
                self._log.error(
                    "Session creation failed",
                    action="driver_start",
                    platform=p.value,
                    error=f"{type(e).__name__}: {e}",
                )
                raise SessionInitError(f"Could not start {p.value} session: {e}") from e
            self._sessions[p] = drv
            return drv

    def peek(self, platform: Platform | str) -> WebDriver | None:
        """Cached session for `platform` without creating one."""
        with self._lock:
            return self._sessions.get(Platform.parse(platform))

    def current(self) -> WebDriver:
        """Session for the selector's current platform."""
        return self.get_session(self.selector.current())

    def close_session(self, platform: Platform | str) -> None:
        """
        Close and forget the session for `platform`. Does nothing when none is open.

        Mobile apps are asked to terminate first; errors while closing are logged,
        never raised.
        """
        p = Platform.parse(platform)
        with self._lock:
            drv = self._sessions.pop(p, None)
        if drv is None:
            return

        app_id = self._app_id(p)
        if app_id:
            try:
                drv.terminate_app(app_id)  # type: ignore[attr-defined]
            except Exception as e:
                self._log.warning(
                    "Could not terminate app",
                    action="driver_stop",
                    platform=p.value,
                    app_id=app_id,
                    error=f"{type(e).__name__}: {e}",
                )
        try:
            drv.quit()
            self._log.info("Session closed", action="driver_stop", platform=p.value)
        except Exception as e:
            self._log.warning(
                "Error while quitting session",
                action="driver_stop",
                platform=p.value,
                error=f"{type(e).__name__}: {e}",
            )

    def close_all(self) -> None:
        with self._lock:
            open_platforms = list(self._sessions)
        for p in open_platforms:
            self.close_session(p)

    def _app_id(self, platform: Platform) -> str | None:
        if platform is Platform.ANDROID:
            return (self.settings.android or AndroidConfig()).app_package
        if platform is Platform.IOS:
            return (self.settings.ios or IOSConfig()).bundle_id
        return None


__all__ = ["DriverProvider", "default_factories"]
