"""Screenshot workflow specification.

A specification lists pages to visit and the actions to perform on each
of them. It is loaded from YAML, validated once and never modified
afterwards:

    title: Cockpit screenshots
    baseUrl: http://localhost:8080
    global:
      language: [en, de]
      tags: [cockpit]
    screenshots:
      - image: cockpit/index.png
        visit: /apps/cockpit/index.html
        actions:
          - click: button.primary
"""

from typing import Any, Literal

from pydantic import Field, field_validator

from pytest_scrn.models import SchemaModel
from pytest_scrn.names import DEFAULT_LANGUAGE

from .actions import ActionsMixin

#: Default viewport size of the browser.
DEFAULT_VIEWPORT_WIDTH = 1440
DEFAULT_VIEWPORT_HEIGHT = 900

#: Default CSS of highlighted elements.
DEFAULT_HIGHLIGHT_STYLE: dict[str, str] = {
    'outline': '2px',
    'outline-style': 'solid',
    'outline-offset': '-2px',
    'outline-color': '#FF9300',
}


class Timeouts(SchemaModel):
    """Timeouts in milliseconds applied while capturing."""

    default: int | None = Field(
        default=None,
        ge=0,
        title='Default timeout',
        description='Timeout of element lookups and interactions.',
    )

    page_load: int | None = Field(
        default=None,
        ge=0,
        alias='pageLoad',
        title='Page load timeout',
    )

    screenshot: int | None = Field(
        default=None,
        ge=0,
        title='Screenshot timeout',
    )


class ScreenshotSettings(SchemaModel):
    """Capture settings shared by the global section and single items."""

    capture: Literal['viewport', 'fullPage'] | None = Field(
        default=None,
        title='Captured area',
        description='Capture the visible viewport only or the full scrollable page.',
    )

    padding: int | None = Field(
        default=None,
        ge=0,
        title='Padding',
        description='Padding in px around element screenshots.',
    )

    scale: bool | None = Field(
        default=None,
        title='Scale',
        description='Capture device pixels instead of CSS pixels.',
    )

    overwrite: bool | None = Field(
        default=None,
        title='Overwrite artifacts',
        description='Replace existing screenshot files instead of numbering new ones.',
    )

    disable_timers_and_animations: bool | None = Field(
        default=None,
        alias='disableTimersAndAnimations',
        title='Disable animations',
    )

    viewport_width: int | None = Field(
        default=None,
        gt=0,
        alias='viewportWidth',
        title='Viewport width',
    )

    viewport_height: int | None = Field(
        default=None,
        gt=0,
        alias='viewportHeight',
        title='Viewport height',
    )

    timeouts: Timeouts | None = Field(
        default=None,
        title='Timeouts',
    )


class GlobalSettings(ScreenshotSettings):
    """Settings applied to every screenshot item."""

    tags: list[str] = Field(
        default_factory=list,
        title='Global tags',
        description='Tags added to the tags of every screenshot item.',
    )

    login: bool | str = Field(
        default=False,
        title='Login',
        description=(
            'Authenticate before visiting each page. A string selects '
            'the user alias whose credentials are read from the environment.'
        ),
    )

    language: str | list[str] | None = Field(
        default=None,
        title='Languages',
        description='Language, or ordered languages, every screenshot is captured in.',
    )

    visit_wait_selector: str | None = Field(
        default=None,
        alias='visitWaitSelector',
        title='Visit wait selector',
        description='Selector waited for after visiting a page.',
    )

    highlight_style: dict[str, Any] | None = Field(
        default=None,
        alias='highlightStyle',
        title='Highlight style',
        description='CSS properties merged into the default highlight style.',
    )

    date: str | None = Field(
        default=None,
        title='Simulated date',
        description='Date and time the page clock is set to before visiting.',
    )

    @field_validator('tags', mode='before')
    @classmethod
    def ensure_tags(cls, value: Any) -> Any:  # noqa: ANN401
        """Accept a single tag or no tags."""
        if value is None:
            return []

        if isinstance(value, str):
            return [value]

        return value


class Visit(SchemaModel):
    """Page visit with options."""

    url: str = Field(
        title='URL path',
    )

    timeout: int | None = Field(
        default=None,
        ge=0,
        title='Timeout',
    )

    selector: str | None = Field(
        default=None,
        title='Wait selector',
        description='Selector waited for after visiting the page.',
    )


class ScreenshotItem(ActionsMixin):
    """A page captured as one test case per language."""

    image: str = Field(
        min_length=1,
        title='Image path',
        description='Relative path of the screenshot artifact, used as the test name.',
    )

    visit: str | Visit = Field(
        title='Visit',
        description='URL path, relative to the base URL, visited before running actions.',
    )

    tags: list[str] = Field(
        default_factory=list,
        title='Tags',
    )

    language: str | list[str] | None = Field(
        default=None,
        title='Languages',
        description='Overrides the global languages.',
    )

    only: bool = Field(
        default=False,
        title='Only',
        description='Capture only the items with this flag set.',
    )

    skip: bool = Field(
        default=False,
        title='Skip',
    )

    date: str | None = Field(
        default=None,
        title='Simulated date',
    )

    settings: ScreenshotSettings | None = Field(
        default=None,
        title='Settings',
        description='Overrides the global capture settings.',
    )

    @field_validator('tags', mode='before')
    @classmethod
    def ensure_tags(cls, value: Any) -> Any:  # noqa: ANN401
        """Accept a single tag or no tags."""
        if value is None:
            return []

        if isinstance(value, str):
            return [value]

        return value

    @property
    def url(self) -> str:
        """URL path of the visited page."""
        return self.visit.url if isinstance(self.visit, Visit) else self.visit


class ScreenshotSetup(SchemaModel):
    """Root of a screenshot workflow specification."""

    title: str | None = Field(
        default=None,
        title='Title',
        description='Name of the top-level test group.',
    )

    base_url: str | None = Field(
        default=None,
        alias='baseUrl',
        title='Base URL',
    )

    global_: GlobalSettings = Field(
        default_factory=GlobalSettings,
        alias='global',
        title='Global settings',
    )

    selectors: dict[str, str] | list[dict[str, str]] | None = Field(
        default=None,
        title='Predefined selectors',
        description='Named selectors replaced within selector strings of all actions.',
    )

    screenshots: list[ScreenshotItem] = Field(
        min_length=1,
        title='Screenshots',
    )

    @field_validator('global_', mode='before')
    @classmethod
    def ensure_global(cls, value: Any) -> Any:  # noqa: ANN401
        """Accept an empty global section."""
        if value is None:
            return {}

        return value

    def languages(self, item: ScreenshotItem) -> list[str]:
        """Resolve the ordered languages of a screenshot item.

        Args:
            item: Screenshot item of this specification.

        Returns:
            The item languages, else the global languages, else the
            default language, always as a list. An empty list counts
            as unset.
        """
        language = item.language
        if not language:
            language = self.global_.language
        if not language:
            return [DEFAULT_LANGUAGE]

        if isinstance(language, str):
            return [language]

        return list(language)

    def setting(self, item: ScreenshotItem, name: str, default: Any = None) -> Any:  # noqa: ANN401
        """Resolve a capture setting of an item, falling back to globals.

        Args:
            item: Screenshot item of this specification.
            name: Field name of `ScreenshotSettings`.
            default: Value used when neither level sets the field.

        Returns:
            The effective setting value.
        """
        if item.settings is not None and (value := getattr(item.settings, name)) is not None:
            return value

        if (value := getattr(self.global_, name)) is not None:
            return value

        return default
