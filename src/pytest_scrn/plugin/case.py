"""Pytest items executing screenshot workflow entries.

Each item owns a fresh browser session: it is opened and prepared in
the item setup, the entry actions run as the test itself, and the session
is closed in the item teardown. A failing entry therefore never affects
its siblings.
"""

from typing import TYPE_CHECKING

import pytest

from pytest_scrn.errors import ScrnError

if TYPE_CHECKING:
    from typing import Any

if TYPE_CHECKING:
    from _pytest._code.code import ExceptionInfo, TerminalRepr

if TYPE_CHECKING:
    from pytest_scrn.core import ExecutionContext, ScreenshotRunner, Session, TestUnit
    from pytest_scrn.core.tree import SetupHook


class ScreenshotCase(pytest.Item):
    """Pytest item executing a single plan entry."""

    __test__ = False

    def __init__(self, *,
                 unit: 'TestUnit',
                 runner: 'ScreenshotRunner',
                 before_each: 'SetupHook | None' = None,
                 **kwargs: 'Any') -> None:
        """Initialize a pytest item backed by a plan entry.

        Args:
            unit: Executable unit of the test tree.
            runner: Runner the unit was emitted by.
            before_each: Hook preparing the session before the entry runs.
            **kwargs: Keyword pytest.Item arguments.
        """
        super().__init__(**kwargs)

        self.unit = unit
        self.runner = runner
        self.before_each = before_each

        self.session: Session | None = None
        self.context: ExecutionContext | None = None

        self.add_marker(pytest.mark.scrn(**unit.metadata))
        self.extra_keyword_matches.update(unit.tags)

        if unit.entry.skip:
            self.add_marker(pytest.mark.skip(reason='Screenshot is skipped'))

    def setup(self) -> None:
        """Open a fresh session and bring it into the entry starting state."""
        self.session = self.config.scrn_sessions(self.unit.entry)  # type: ignore[attr-defined]

        if self.before_each is not None:
            self.before_each(self.unit.entry, self.session)

    def runtest(self) -> None:
        """Execute the entry actions."""
        if self.session is None:
            raise RuntimeError('Screenshot session is not set up')

        self.context = self.runner.executor.run(self.unit.entry, self.session)

    def teardown(self) -> None:
        """Close the entry session."""
        if self.session is not None:
            self.session.close()
            self.session = None

    def repr_failure(self, excinfo: 'ExceptionInfo[BaseException]',
                     style: 'Any' = None) -> 'str | TerminalRepr':
        """Represent a failure of the entry."""
        if isinstance(excinfo.value, ScrnError):
            return f'{excinfo.value}'

        return super().repr_failure(excinfo, style)

    def reportinfo(self) -> tuple['Any', int | None, str]:
        """Report the specification file and the entry title."""
        return self.path, None, self.unit.name
