from __future__ import annotations

from typing import cast

from pydantic import BaseModel, Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

SUPPORTED_BROWSERS: tuple[str, ...] = ("chrome", "firefox", "edge")


class ReportingSettings(BaseModel):
    """Configuration for test reporting and artifacts."""

    allure_dir: str = "artifacts/allure"  # Directory to store Allure results
    ledger_dir: str = "artifacts/reports"  # Directory for the step ledger JSON reports
    screenshots_on_fail: bool = True  # Take screenshots on test failures
    screenshots_on_success: bool = False  # Take screenshots on successful steps
    page_source_on_fail: bool = True  # Attach page source on failures
    page_source_on_success: bool = False  # Attach page source on successful steps
    screenshot_name: str = "screenshot"  # Default name for screenshot attachment
    page_source_name: str = "page source"  # Default name for page source attachment


class WaitSettings(BaseModel):
    """Timeout profiles (seconds) used by the interaction layer."""

    short: float = 5
    default: float = 15
    long: float = 30
    polling_ms: int = 500
    settle_ms: int = 500  # Pause after scrolling before a script click


class WebConfig(BaseModel):
    """Configuration for browser sessions."""

    base_url: str = "https://www.planity.com/"
    headless: bool = True
    window_width: int = 1920
    window_height: int = 1080
    maximize: bool = False  # Maximize after start (ignored by headless browsers)
    page_load_timeout: float = 60
    arguments: list[str] = Field(default_factory=list)  # Extra browser command line switches
    cookie_consent_xpaths: list[str] = Field(
        default_factory=lambda: ["//button[contains(.,'Accepter & Fermer')]"]
    )


class AppiumServer(BaseModel):
    """Configuration for connecting to Appium server."""

    # Appium server URL. Default: http://127.0.0.1:4723/
    url: HttpUrl = Field(default_factory=lambda: cast(HttpUrl, "http://127.0.0.1:4723/"))


class AndroidConfig(BaseModel):
    """Configuration for Android devices and emulators."""

    device_name: str = "emulator-5554"  # Device or emulator name
    platform_version: str = "11.0"  # Android OS version
    udid: str | None = None  # Unique device identifier (for physical devices)
    app_path: str | None = None  # Path to the APK file of the app
    app_package: str = "com.planity.android"  # Application package name
    app_activity: str | None = "com.planity.splash.SplashActivity"  # Activity launched first
    no_reset: bool = True  # Preserve app state between sessions
    new_command_timeout: int = 3600  # Timeout for new Appium commands (in seconds)
    app_wait_duration_ms: int = 20_000  # How long to wait for the app to start
    auto_grant_permissions: bool = True  # Auto-grant permissions to the app
    auto_accept_alerts: bool = True  # Automatically accept system alerts
    dont_stop_app_on_reset: bool = True  # Do not stop the app on reset


class IOSConfig(BaseModel):
    """Configuration for iOS devices and simulators."""

    device_name: str = "iPhone 14"  # Device or simulator name
    platform_version: str = "16.0"  # iOS version
    udid: str | None = None  # Unique device identifier
    app_path: str | None = None  # Path to .app or .ipa file of the app
    bundle_id: str | None = None  # Application bundle identifier
    no_reset: bool = True  # Preserve app state between sessions
    new_command_timeout: int = 3600  # Timeout for new Appium commands (in seconds)
    app_wait_duration_ms: int = 20_000  # How long to wait for the app to start
    auto_accept_alerts: bool = True  # Automatically accept system alerts


class Capabilities(BaseModel):
    """User-provided 'raw' capabilities for Appium/WebDriver sessions."""

    raw: dict[str, object] = Field(default_factory=dict)


class Settings(BaseSettings):
    """
    Main configuration class for test settings.

    Loads values from the following sources:
    - Environment variables (with prefix CROSSAUTO_)
    - Initialization values (e.g., from YAML or a .properties file)
    - .env file
    - Secret files
    """

    model_config = SettingsConfigDict(env_prefix="CROSSAUTO_", env_nested_delimiter="__")

    platform: str = "web"  # Target platform: "web", "android" or "ios"
    browser: str = "chrome"  # Browser backend for the web platform: chrome|firefox|edge
    web: WebConfig = WebConfig()  # Browser session configuration
    appium: AppiumServer = AppiumServer()  # Appium server configuration
    android: AndroidConfig | None = None  # Android-specific configuration
    ios: IOSConfig | None = None  # iOS-specific configuration
    waits: WaitSettings = WaitSettings()  # Timeout profiles
    reporting: ReportingSettings = ReportingSettings()  # Reporting settings
    capabilities: Capabilities = Capabilities()  # User custom capabilities

    @field_validator("platform", "browser", mode="before")
    @classmethod
    def _lowercase(cls, v: object) -> object:
        # Configuration files spell them "Web", "Android", "iOS", "Chrome"
        return v.strip().lower() if isinstance(v, str) else v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,  # type: type[BaseSettings]
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """
        Configure the order of configuration sources.

        Loading priority:
        1. Environment variables
        2. Initialization values (e.g., from YAML)
        3. .env file
        4. Secret files
        """
        return (env_settings, init_settings, dotenv_settings, file_secret_settings)
