"""Tests configurations and fixtures."""

from importlib.metadata import EntryPoint, EntryPoints
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

from pytest_scrn.core import ExecutionContext, TestPlanBuilder
from pytest_scrn.schema import ScreenshotSetup
from pytest_scrn.settings import ScrnSettings

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from pytest_mock import MockerFixture, MockType

if TYPE_CHECKING:
    from pytest_scrn.core import ActionHandler, TestPlanEntry


@pytest.fixture
def spec_data() -> dict[str, Any]:
    """Provide a raw specification with tagged and untagged items."""
    return {
        'title': 'Cockpit screenshots',
        'baseUrl': 'http://localhost:8080',
        'global': {
            'language': ['en', 'de'],
        },
        'screenshots': [
            {
                'image': 'cockpit/index.png',
                'visit': '/apps/cockpit/index.html',
                'tags': ['cockpit'],
            },
            {
                'image': 'admin/users.png',
                'visit': '/apps/administration/index.html#/users',
                'tags': ['admin', 'users'],
                'language': 'en',
            },
            {
                'image': 'home.png',
                'visit': '/apps/home',
            },
        ],
    }


@pytest.fixture
def settings(tmp_path: Path) -> ScrnSettings:
    """Provide runtime settings writing artifacts to a temporary folder."""
    return ScrnSettings(
        output_dir=tmp_path / 'screenshots',
        base_url=None,
    )


@pytest.fixture
def make_entry() -> 'Callable[..., TestPlanEntry]':
    """Provide a factory of plan entries built from a single item."""
    def make(item: dict[str, Any] | None = None, **spec: Any) -> 'TestPlanEntry':  # noqa: ANN401
        """Plan the first entry of a one-item specification."""
        setup = ScreenshotSetup.model_validate({
            'screenshots': [
                {'image': 'test/image.png', 'visit': '/index.html', **(item or {})},
            ],
            **spec,
        })

        return TestPlanBuilder.build(setup)[0]

    return make


@pytest.fixture
def page(mocker: 'MockerFixture') -> 'MockType':
    """Provide a mocked Playwright page."""
    return mocker.MagicMock(name='page')


@pytest.fixture
def session(mocker: 'MockerFixture', page: 'MockType') -> 'MockType':
    """Provide a mocked browser session holding the mocked page."""
    session = mocker.MagicMock(name='session')
    session.page = page

    return session


@pytest.fixture
def make_context(page: 'MockType', tmp_path: Path) -> 'Callable[..., ExecutionContext]':
    """Provide a factory of execution contexts on the mocked page."""
    def make(entry: 'TestPlanEntry', spec: ScreenshotSetup | None = None) -> ExecutionContext:
        """Create an execution context of an entry."""
        return ExecutionContext(
            page,
            entry,
            spec or ScreenshotSetup(screenshots=[entry.item]),
            output_dir=tmp_path / 'screenshots',
            base_dir=tmp_path,
        )

    return make


@pytest.fixture
def patch_entrypoints(mocker: 'MockerFixture') -> 'Callable[..., MockType]':
    """Provide a factory for mocking `importlib.metadata.entry_points`.

    Returns a callable that patches `entry_points()` to simulate
    discovery of handlers in the `scrn_handlers` entry point group.

    The returned factory allows configuring:
    - successfully loadable handler mappings,
    - or an exception raised during loading,
    - or an empty entry point list.
    """
    def patch(*handlers: 'dict[str, ActionHandler] | Any',  # noqa: ANN401
              raises: Exception | None = None) -> 'MockType':
        """Patch `entry_points` with a controlled handlers configuration.

        Args:
            handlers: Objects to be returned by `EntryPoint.load()`.
                If empty, no entry points are registered.
            raises: Exception to raise when `EntryPoint.load()` is called.

        Returns:
            A mock patch object replacing `importlib.metadata.entry_points`.
        """
        entrypoints = []
        for index, mapping in enumerate(handlers):
            ep = mocker.Mock(spec=EntryPoint)
            ep.group = 'scrn_handlers'
            ep.name = f'tests{index}'
            ep.value = f'tests.handlers:handlers{index}'
            ep.load.return_value = mapping
            if raises is not None:
                ep.load.side_effect = raises
            entrypoints.append(ep)

        return mocker.patch(
            'importlib.metadata.entry_points',
            return_value=EntryPoints(entrypoints),
        )

    return patch
