"""Declarative schema of screenshot workflow specifications.

Defines immutable Pydantic models describing pages to visit, the actions
performed on them and the selectors those actions address. The module
specifies the structural contract of specification files and is consumed
by the workflow engine and tooling.
"""

from .actions import (
    ACTION_KINDS,
    Action,
    ActionKind,
    BaseAction,
    BlurAction,
    ClickAction,
    ClipArea,
    CustomAction,
    FileUploadAction,
    FocusAction,
    HighlightAction,
    HighlightOptions,
    ScreenshotAction,
    ScrollToAction,
    TextAction,
    TypeAction,
    WaitAction,
    WaitAssertion,
)
from .selectors import Selector, SelectorMixin, get_selector
from .setup import (
    DEFAULT_HIGHLIGHT_STYLE,
    GlobalSettings,
    ScreenshotItem,
    ScreenshotSettings,
    ScreenshotSetup,
    Visit,
)

__all__ = (
    'ACTION_KINDS',
    'DEFAULT_HIGHLIGHT_STYLE',
    'Action',
    'ActionKind',
    'BaseAction',
    'BlurAction',
    'ClickAction',
    'ClipArea',
    'CustomAction',
    'FileUploadAction',
    'FocusAction',
    'GlobalSettings',
    'HighlightAction',
    'HighlightOptions',
    'ScreenshotAction',
    'ScreenshotItem',
    'ScreenshotSettings',
    'ScreenshotSetup',
    'ScrollToAction',
    'Selector',
    'SelectorMixin',
    'TextAction',
    'TypeAction',
    'Visit',
    'WaitAction',
    'WaitAssertion',
    'get_selector',
)
