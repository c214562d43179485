"""Pytest integration for YAML screenshot workflow specifications.

This module defines a custom pytest file collector that treats YAML
files as screenshot workflow specifications.

Each collected file is turned into a test tree by a `ScreenshotRunner`.
Named groups of the tree become nested collectors, units become
`ScreenshotCase` items.
"""

from typing import TYPE_CHECKING, Any

import pytest

from pytest_scrn.core import ScreenshotRunner, TestGroup
from pytest_scrn.errors import ScrnError

from .case import ScreenshotCase

if TYPE_CHECKING:
    from collections.abc import Iterable

if TYPE_CHECKING:
    from _pytest._code.code import ExceptionInfo, TerminalRepr

if TYPE_CHECKING:
    from pytest_scrn.core import TestUnit
    from pytest_scrn.core.tree import SetupHook


class GroupCollectorMixin:
    """Mixin registering the children of a test tree group."""

    runner: ScreenshotRunner

    def make_node(self, child: 'TestGroup | TestUnit',
                  before_each: 'SetupHook | None' = None) -> 'pytest.Item | pytest.Collector':
        """Create the pytest node of a test tree node.

        Args:
            child: Group or unit of the test tree.
            before_each: Setup hook of the enclosing group.

        Returns:
            A group collector or a screenshot item.
        """
        if isinstance(child, TestGroup):
            return ScreenshotGroup.from_parent(
                self,
                name=child.name or '',
                group=child,
                runner=self.runner,
            )

        return ScreenshotCase.from_parent(
            self,
            name=child.name,
            unit=child,
            runner=self.runner,
            before_each=before_each,
        )

    def register(self, group: TestGroup) -> 'Iterable[pytest.Item | pytest.Collector]':
        """Create pytest nodes for the children of a group.

        Args:
            group: Test tree group.

        Yields:
            Nested group collectors and screenshot items.
        """
        for child in group.children:
            yield self.make_node(child, group.before_each)


class ScreenshotSpec(GroupCollectorMixin, pytest.File):
    """Pytest file collector for screenshot workflow specifications.

    This collector:
    - validates the YAML specification;
    - plans and filters its entries with the configured run options;
    - registers the resulting test tree, wrapped in a group named after
      the specification title unless flat collection is requested.
    """

    __test__ = False

    def collect(self) -> 'Iterable[pytest.Item | pytest.Collector]':
        """Collect pytest nodes from a screenshot specification file.

        Returns:
            Iterable of group collectors and screenshot items.

        Raises:
            MissingConfiguration: If the file is empty.
            InvalidConfiguration: If the specification is invalid.
        """
        self.runner = ScreenshotRunner.from_file(
            self.path,
            settings=self.config.scrn_settings,  # type: ignore[attr-defined]
        )

        options = self.config.scrn_options  # type: ignore[attr-defined]
        if self.config.getoption('scrn_flat', default=False) or not self.runner.spec.title:
            tree = self.runner.run(options)
        else:
            tree = self.runner.run_suite(options)

        if tree.name is None:
            yield from self.register(tree)
        else:
            yield self.make_node(tree)

    def repr_failure(self, excinfo: 'ExceptionInfo[BaseException]',
                     style: Any = None) -> 'str | TerminalRepr':  # noqa: ANN401
        """Represent a collection failure of the specification."""
        if isinstance(excinfo.value, ScrnError):
            return f'{excinfo.value}'

        return super().repr_failure(excinfo, style)


class ScreenshotGroup(GroupCollectorMixin, pytest.Collector):
    """Pytest collector of a named test tree group."""

    __test__ = False

    def __init__(self, *, group: TestGroup, runner: ScreenshotRunner,
                 **kwargs: Any) -> None:  # noqa: ANN401
        """Initialize a group collector.

        Args:
            group: Test tree group.
            runner: Runner the tree was emitted by.
            **kwargs: Keyword pytest.Collector arguments.
        """
        super().__init__(**kwargs)

        self.group = group
        self.runner = runner

    def collect(self) -> 'Iterable[pytest.Item | pytest.Collector]':
        """Collect the children of the group."""
        return list(self.register(self.group))
