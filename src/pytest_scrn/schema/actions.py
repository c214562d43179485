"""Action definitions for screenshot workflows.

An action is one declarative UI step, written as a single-key mapping
whose key is the action kind:

    - click: button.primary
    - type:
        selector: input#name
        value: Alice
    - screenshot: images/dialog.png

Known kinds form a closed tagged union. Any other single-key mapping is
kept as a `CustomAction`, so that handlers contributed by third-party
packages can execute kinds unknown to this module. Whether a kind is
supported is decided by the handler registry at execution time.
"""

from typing import Annotated, Any, ClassVar, Literal, get_args

from pydantic import ConfigDict, Discriminator, Field, Tag, field_validator, model_validator

from pytest_scrn.models import SchemaModel

from .selectors import Selector, SelectorMixin  # noqa: TC001

#: Kinds of built-in actions.
type ActionKind = Literal[
    'click',
    'type',
    'text',
    'highlight',
    'fileUpload',
    'wait',
    'blur',
    'focus',
    'scrollTo',
    'screenshot',
]

ACTION_KINDS: tuple[str, ...] = get_args(ActionKind.__value__)

#: Default selector of file input elements.
FILE_INPUT_SELECTOR = '[type$="file"]'

#: Default timeout in milliseconds of a selector based wait action.
DEFAULT_WAIT_TIMEOUT = 4000

#: Named scroll positions.
type ScrollPosition = Literal[
    'topLeft', 'top', 'topRight',
    'left', 'center', 'right',
    'bottomLeft', 'bottom', 'bottomRight',
]


class BaseAction(SchemaModel):
    """Base class for all workflow actions.

    Subclasses declare exactly one field, named after the action kind
    (or aliased to it), which holds the kind-specific parameters.
    """

    #: Kind of the action, used to look up its handler.
    action_kind: ClassVar[str]
    #: Name of the model field holding the action parameters.
    action_field: ClassVar[str]

    @property
    def kind(self) -> str:
        """Kind of the action."""
        return type(self).action_kind

    @property
    def params(self) -> Any:  # noqa: ANN401
        """Raw parameters of the action."""
        return getattr(self, type(self).action_field)


class SelectorOptions(SelectorMixin):
    """Parameters of actions addressing elements only."""


class ClickOptions(SelectorMixin):
    """Parameters of the click action."""

    multiple: bool = Field(
        default=False,
        title='Click multiple elements',
        description='Click every matched element instead of requiring a single one.',
    )

    force: bool = Field(
        default=False,
        title='Force click',
        description='Skip actionability checks before clicking.',
    )


class ClickAction(BaseAction):
    """Trigger a click on the selected DOM element."""

    action_kind: ClassVar[str] = 'click'
    action_field: ClassVar[str] = 'click'

    click: str | list[str] | ClickOptions

    def options(self) -> ClickOptions:
        """Return normalized click parameters."""
        if isinstance(self.click, ClickOptions):
            return self.click

        return ClickOptions(selector=self.click)


class TypeOptions(SelectorMixin):
    """Parameters of the type action."""

    value: str | list[str | None] | list[list[str | None]] = Field(
        title='Value to type',
        description=(
            'A string typed into the selected element, or a list of '
            'values typed into the text inputs within the selected form. '
            'A list of lists fills and submits the form once per list.'
        ),
    )

    clear: bool = Field(
        default=False,
        title='Clear before typing',
    )

    submit: Selector | None = Field(
        default=None,
        title='Submit button selector',
        description='Element clicked after filling a form, if it exists.',
    )


class TypeAction(BaseAction):
    """Simulate typing into the selected DOM element."""

    action_kind: ClassVar[str] = 'type'
    action_field: ClassVar[str] = 'type'

    type: TypeOptions


class TextOptions(SelectorMixin):
    """Parameters of the text action."""

    value: str = Field(
        title='Text value',
    )


class TextAction(BaseAction):
    """Replace the text content of the selected DOM elements."""

    action_kind: ClassVar[str] = 'text'
    action_field: ClassVar[str] = 'text'

    text: TextOptions


class HighlightOptions(SelectorMixin):
    """Parameters of a single highlight."""

    border: str | dict[str, str] | None = Field(
        default=None,
        title='Border style',
        description=(
            'A CSS border value, or CSS properties merged into '
            'the default highlight style.'
        ),
    )

    styles: dict[str, Any] | None = Field(
        default=None,
        title='CSS styles',
    )

    width: float | None = Field(
        default=None,
        ge=0,
        title='Highlight width',
        description='Width in px, or a fraction of the union width if not greater than 1.',
    )

    height: float | None = Field(
        default=None,
        ge=0,
        title='Highlight height',
        description='Height in px, or a fraction of the union height if not greater than 1.',
    )

    clear: bool = Field(
        default=False,
        title='Clear highlights',
        description='Remove all existing highlights before highlighting.',
    )


class HighlightAction(BaseAction):
    """Visually highlight selected DOM elements in the screenshot."""

    action_kind: ClassVar[str] = 'highlight'
    action_field: ClassVar[str] = 'highlight'

    highlight: str | HighlightOptions | list[str | HighlightOptions]

    def options(self) -> list[HighlightOptions]:
        """Return normalized highlight parameters."""
        items = self.highlight if isinstance(self.highlight, list) else [self.highlight]

        return [
            item if isinstance(item, HighlightOptions) else HighlightOptions(selector=item)
            for item in items
        ]


class FileUploadOptions(SelectorMixin):
    """Parameters of the file upload action."""

    selector: Selector | None = Field(
        default=FILE_INPUT_SELECTOR,
        title='File input selector',
    )

    file: str = Field(
        title='File path',
        description='Path of the uploaded file, relative to the specification.',
    )

    file_name: str | None = Field(
        default=None,
        alias='fileName',
        title='File name',
        description='File name reported to the page instead of the real one.',
    )

    mime_type: str | None = Field(
        default=None,
        alias='mimeType',
        title='MIME type',
    )


class FileUploadAction(BaseAction):
    """Attach a file to a file input element."""

    action_kind: ClassVar[str] = 'fileUpload'
    action_field: ClassVar[str] = 'file_upload'

    file_upload: str | FileUploadOptions = Field(alias='fileUpload')

    def options(self) -> FileUploadOptions:
        """Return normalized file upload parameters."""
        if isinstance(self.file_upload, FileUploadOptions):
            return self.file_upload

        return FileUploadOptions(file=self.file_upload)


class WaitAssertion(SchemaModel):
    """Assertion waited for by the wait action."""

    chainer: str = Field(
        title='Assertion chainer',
        examples=['be.visible', 'have.length', 'contain'],
    )

    value: str | list[str] | None = Field(
        default=None,
        title='Asserted value',
    )


class WaitOptions(SelectorMixin):
    """Parameters of a selector based wait action."""

    timeout: int = Field(
        default=DEFAULT_WAIT_TIMEOUT,
        ge=0,
        title='Timeout',
    )

    assertion: str | WaitAssertion | None = Field(
        default=None,
        alias='assert',
        title='Assertion',
    )


class WaitAction(BaseAction):
    """Wait for a fixed delay or for an element to satisfy an assertion."""

    action_kind: ClassVar[str] = 'wait'
    action_field: ClassVar[str] = 'wait'

    wait: int | WaitOptions


class BlurAction(BaseAction):
    """Remove focus from the selected DOM element."""

    action_kind: ClassVar[str] = 'blur'
    action_field: ClassVar[str] = 'blur'

    blur: str | list[str] | SelectorOptions


class FocusAction(BaseAction):
    """Focus the selected DOM element."""

    action_kind: ClassVar[str] = 'focus'
    action_field: ClassVar[str] = 'focus'

    focus: str | list[str] | SelectorOptions


class ScrollToOptions(SelectorMixin):
    """Parameters of the scroll action."""

    position: ScrollPosition | None = Field(
        default=None,
        title='Scroll position',
    )

    x: int | None = Field(
        default=None,
        title='Horizontal offset',
    )

    y: int | None = Field(
        default=None,
        title='Vertical offset',
    )


class ScrollToAction(BaseAction):
    """Scroll an element into view or the page to a position."""

    action_kind: ClassVar[str] = 'scrollTo'
    action_field: ClassVar[str] = 'scroll_to'

    scroll_to: str | list[str] | ScrollToOptions = Field(alias='scrollTo')


class ClipArea(SchemaModel):
    """Clip area within the screenshot image.

    Negative width or height are subtracted from the viewport size.
    """

    x: int = Field(ge=0)
    y: int = Field(ge=0)
    width: int
    height: int


class ScreenshotOptions(SelectorMixin):
    """Parameters of the screenshot action."""

    path: str | None = Field(
        default=None,
        title='Image path',
        description='Relative image path; defaults to the image of the screenshot item.',
    )

    clip: ClipArea | None = Field(
        default=None,
        title='Clip area',
    )


class ScreenshotAction(BaseAction):
    """Capture the current state of the application."""

    action_kind: ClassVar[str] = 'screenshot'
    action_field: ClassVar[str] = 'screenshot'

    screenshot: str | ScreenshotOptions | None

    def options(self) -> ScreenshotOptions:
        """Return normalized screenshot parameters."""
        if isinstance(self.screenshot, ScreenshotOptions):
            return self.screenshot

        return ScreenshotOptions(path=self.screenshot)


class CustomAction(BaseAction):
    """Action of a kind not known to the built-in schema.

    The action is kept as is and resolved through the handler registry,
    which fails the entry with `UnsupportedAction` unless a handler for
    the kind was registered.
    """

    model_config = ConfigDict(
        frozen=True,
        extra='allow',
    )

    @model_validator(mode='before')
    @classmethod
    def check_single_kind(cls, data: Any) -> Any:  # noqa: ANN401
        """Require a mapping with exactly one string key."""
        if not isinstance(data, dict) or len(data) != 1:
            raise ValueError('Action must be a mapping with exactly one action kind')

        (key,) = data
        if not isinstance(key, str) or not key:
            raise ValueError('Action kind must be a non-empty string')

        if key in ACTION_KINDS:
            raise ValueError(f'Invalid parameters of action {key!r}')

        return data

    @property
    def kind(self) -> str:
        """Kind of the action, as written in the specification."""
        return next(iter(self.model_extra or {}))

    @property
    def params(self) -> Any:  # noqa: ANN401
        """Raw parameters of the action."""
        return (self.model_extra or {})[self.kind]


def _action_tag(value: Any) -> str:  # noqa: ANN401
    """Discriminate raw action data by its single key."""
    if isinstance(value, CustomAction):
        return 'custom'

    if isinstance(value, BaseAction):
        return value.kind

    if isinstance(value, dict) and len(value) == 1:
        (key,) = value
        if key in ACTION_KINDS:
            return key

    return 'custom'


#: Any workflow action.
Action = Annotated[
    Annotated[ClickAction, Tag('click')]
    | Annotated[TypeAction, Tag('type')]
    | Annotated[TextAction, Tag('text')]
    | Annotated[HighlightAction, Tag('highlight')]
    | Annotated[FileUploadAction, Tag('fileUpload')]
    | Annotated[WaitAction, Tag('wait')]
    | Annotated[BlurAction, Tag('blur')]
    | Annotated[FocusAction, Tag('focus')]
    | Annotated[ScrollToAction, Tag('scrollTo')]
    | Annotated[ScreenshotAction, Tag('screenshot')]
    | Annotated[CustomAction, Tag('custom')],
    Discriminator(_action_tag),
]


class ActionsMixin(SchemaModel):
    """Mixin providing an ordered sequence of actions."""

    actions: list[Action] = Field(
        default_factory=list,
        title='Actions',
        description=(
            'Actions performed in order after visiting the page. '
            'Unless one of them is a screenshot action, a screenshot is '
            'taken after the last action.'
        ),
    )

    @field_validator('actions', mode='before')
    @classmethod
    def ensure_list(cls, value: Any) -> Any:  # noqa: ANN401
        """Accept a single action or no actions at all."""
        if value is None:
            return []

        if isinstance(value, dict):
            return [value]

        return value
