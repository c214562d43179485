"""Runtime settings resolved from the environment.

Settings are read once, when a runner or the pytest plugin is configured,
and are never re-read while workflows execute.
"""

from os import environ
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import SettingsConfigDict

from pytest_scrn.models import SettingsModel

type BrowserName = Literal['chromium', 'firefox', 'webkit']


class ScrnSettings(SettingsModel):
    """Environment-driven configuration of the screenshot runner.

    All values are read from variables prefixed with ``SCRN_`` (for example
    ``SCRN_HIGHLIGHT=false`` or ``SCRN_BASE_URL=http://localhost:8080``).
    """

    model_config = SettingsConfigDict(
        env_prefix='SCRN_',
        frozen=True,
        extra='ignore',
    )

    config: Path | None = Field(
        default=None,
        title='Configuration file',
        description=(
            'Path to a YAML workflow specification used when a runner '
            'is created without an explicit configuration.'
        ),
    )

    highlight: bool = Field(
        default=True,
        title='Highlight support',
        description=(
            'Whether the `highlight` action is supported. '
            'When disabled, highlight actions fail as unsupported.'
        ),
    )

    base_url: str | None = Field(
        default=None,
        title='Base URL',
        description='Overrides the `baseUrl` of the specification.',
    )

    browser: BrowserName = Field(
        default='chromium',
        title='Browser',
        description='Playwright browser type used for capturing.',
    )

    headless: bool = Field(
        default=True,
        title='Headless mode',
    )

    output_dir: Path = Field(
        default=Path('screenshots'),
        title='Screenshots folder',
        description='Root folder of all captured screenshot artifacts.',
    )

    username: str | None = Field(
        default=None,
        title='Default login user',
    )

    password: SecretStr | None = Field(
        default=None,
        title='Default login password',
    )

    page_load_timeout: int = Field(
        default=60000,
        ge=0,
        title='Page load timeout',
        description='Timeout in milliseconds used when visiting pages.',
    )

    def credentials(self, alias: str | None = None) -> tuple[str, str] | None:
        """Resolve login credentials.

        A user alias is resolved from ``<alias>_username`` and
        ``<alias>_password`` environment variables. Without an alias, the
        default ``SCRN_USERNAME`` and ``SCRN_PASSWORD`` are used.

        Args:
            alias: Optional user alias configured by the workflow.

        Returns:
            A tuple of username and password, or `None` when incomplete.
        """
        if alias:
            username = environ.get(f'{alias}_username')
            password = environ.get(f'{alias}_password')
        else:
            username = self.username
            password = self.password.get_secret_value() if self.password else None

        if not username or password is None:
            return None

        return username, password
