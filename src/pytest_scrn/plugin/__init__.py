"""Pytest plugin for collecting and executing screenshot workflows.

This module integrates `pytest-scrn` with pytest by:
- registering custom command-line options and the `scrn` marker;
- resolving runtime settings and a shared browser session factory;
- collecting YAML files as screenshot workflow specifications.

YAML files matching the pattern `scrn_*.yml` or `scrn_*.yaml` are
automatically collected and turned into pytest test items.
"""

from re import match
from typing import TYPE_CHECKING, Any

from pytest_scrn.core import RunOptions
from pytest_scrn.settings import ScrnSettings

from .spec import ScreenshotSpec

if TYPE_CHECKING:
    from pathlib import Path

if TYPE_CHECKING:
    from _pytest.config import Config
    from _pytest.config.argparsing import Parser
    from _pytest.nodes import Node

#: Pattern of collected specification file names.
SPEC_FILE_PATTERN = r'^scrn_.+\.ya?ml$'

#: Extensions of YAML files collected when passed explicitly.
YAML_SUFFIXES = ('.yaml', '.yml')


def pytest_addoption(parser: 'Parser') -> None:
    """Register pytest command-line options for pytest-scrn.

    Args:
        parser: Pytest argument parser.
    """
    group = parser.getgroup('scrn', 'screenshot workflows')

    group.addoption(
        '--scrn-tags',
        action='append',
        dest='scrn_tags',
        default=[],
        help='Capture only screenshots with any of these comma separated tags.',
    )
    group.addoption(
        '--scrn-titles',
        action='append',
        dest='scrn_titles',
        default=[],
        help='Capture only screenshots whose image contains any of these comma separated strings.',
    )
    group.addoption(
        '--scrn-images',
        action='append',
        dest='scrn_images',
        default=[],
        help='Capture only screenshots with any of these comma separated images.',
    )
    group.addoption(
        '--scrn-no-highlight',
        action='store_true',
        dest='scrn_no_highlight',
        default=False,
        help='Disable the highlight action. Highlight actions fail as unsupported.',
    )
    group.addoption(
        '--scrn-flat',
        action='store_true',
        dest='scrn_flat',
        default=False,
        help='Do not wrap collected screenshots into a group named after the title.',
    )
    group.addoption(
        '--scrn-output',
        dest='scrn_output',
        default=None,
        help='Folder screenshots are written to.',
    )
    group.addoption(
        '--scrn-base-url',
        dest='scrn_base_url',
        default=None,
        help='Base URL overriding the one of specifications.',
    )
    group.addoption(
        '--scrn-browser',
        dest='scrn_browser',
        choices=('chromium', 'firefox', 'webkit'),
        default=None,
        help='Browser used for capturing.',
    )
    group.addoption(
        '--scrn-headed',
        action='store_true',
        dest='scrn_headed',
        default=False,
        help='Run the browser with a visible window.',
    )


def split_option(values: list[str] | None) -> list[str]:
    """Split repeatable, comma separated option values."""
    return [
        item.strip()
        for value in values or ()
        for item in value.split(',')
        if item.strip()
    ]


def pytest_configure(config: 'Config') -> None:
    """Configure pytest-scrn integration.

    This hook resolves runtime settings, run filters and a shared browser
    session factory, and attaches them to the pytest configuration object
    as `config.scrn_settings`, `config.scrn_options` and
    `config.scrn_sessions`.

    Args:
        config: Pytest configuration object.
    """
    config.addinivalue_line(
        'markers',
        'scrn(tags, scrollBehavior): metadata of a collected screenshot workflow entry',
    )

    overrides: dict[str, Any] = {
        'output_dir': config.getoption('scrn_output', default=None),
        'base_url': config.getoption('scrn_base_url', default=None),
        'browser': config.getoption('scrn_browser', default=None),
    }
    if config.getoption('scrn_headed', default=False):
        overrides['headless'] = False
    if config.getoption('scrn_no_highlight', default=False):
        overrides['highlight'] = False

    settings = ScrnSettings(**{
        name: value
        for name, value in overrides.items()
        if value is not None
    })

    from pytest_scrn.browser import BrowserSessionFactory  # noqa: PLC0415

    config.scrn_settings = settings  # type: ignore[attr-defined]
    config.scrn_options = RunOptions(  # type: ignore[attr-defined]
        tags=split_option(config.getoption('scrn_tags', default=[])),
        titles=split_option(config.getoption('scrn_titles', default=[])),
        images=split_option(config.getoption('scrn_images', default=[])),
    )
    config.scrn_sessions = BrowserSessionFactory(settings)  # type: ignore[attr-defined]


def pytest_unconfigure(config: 'Config') -> None:
    """Close the shared browser, if one was launched."""
    if sessions := getattr(config, 'scrn_sessions', None):
        sessions.close()


def pytest_collect_file(parent: 'Node', file_path: 'Path') -> ScreenshotSpec | None:
    """Collect YAML screenshot workflow files.

    Files matching the pattern `scrn_*.yml` or `scrn_*.yaml` are treated
    as screenshot workflow specifications and collected using
    `ScreenshotSpec`. YAML files named explicitly on the command line
    are collected regardless of their name.

    Args:
        parent: Parent pytest collection node.
        file_path: Path to the file being considered.

    Returns:
        A `ScreenshotSpec` collector if the file matches the pattern, otherwise ``None``.
    """
    explicit = file_path.suffix in YAML_SUFFIXES and parent.session.isinitpath(file_path)
    if explicit or match(SPEC_FILE_PATTERN, file_path.name):
        return ScreenshotSpec.from_parent(
            parent,
            path=file_path,
        )

    return None
