"""Workflow execution.

The executor runs the actions of one test plan entry strictly in order,
dispatching each of them through the handler registry. Failures are
contained to the entry: an unsupported action or a failing handler stops
the remaining actions of that entry only, sibling entries are unaffected.

Every entry runs in its own browser session, so no DOM state, cookies or
storage leak from one entry into another.
"""

from logging import getLogger
from os import linesep
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import Field

from pytest_scrn.errors import FORMAT_INDENT, ActionError, ErrorContext, ScrnError, ScrnRuntimeError, UnsupportedAction
from pytest_scrn.models import SchemaModel
from pytest_scrn.names import image_name
from pytest_scrn.schema import DEFAULT_HIGHLIGHT_STYLE, ScreenshotAction, Visit, get_selector
from pytest_scrn.schema.setup import DEFAULT_VIEWPORT_HEIGHT, DEFAULT_VIEWPORT_WIDTH

from .planner import TestPlanEntry  # noqa: TC001

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle, Locator, Page

if TYPE_CHECKING:
    from pytest_scrn.schema import BaseAction, ScreenshotSetup
    from pytest_scrn.settings import ScrnSettings

    from .registry import ActionHandlerRegistry

#: Style disabling CSS animations and transitions.
DISABLE_ANIMATIONS_STYLE = '* { animation: none !important; transition: none !important; }'

logger = getLogger(__name__)


class Session(Protocol):
    """Isolated browser session of a single entry."""

    page: 'Page'

    def login(self, username: str, password: str) -> None:
        """Authenticate all further requests of the session."""

    def close(self) -> None:
        """Release the session and all its resources."""


#: Callable opening a fresh session for an entry.
type SessionFactory = Callable[[TestPlanEntry], Session]


class ExecutionContext:
    """Mutable state of one running entry, shared by its action handlers."""

    def __init__(self, page: 'Page', entry: TestPlanEntry,
                 spec: 'ScreenshotSetup', *,
                 output_dir: Path,
                 base_dir: Path | None = None) -> None:
        """Initialize an execution context.

        Args:
            page: Browser page of the entry session.
            entry: Executed plan entry.
            spec: Specification the entry was planned from.
            output_dir: Root folder of screenshot artifacts.
            base_dir: Folder relative file paths are resolved against.
        """
        self.page = page
        self.entry = entry
        self.spec = spec

        self.output_dir = output_dir
        self.base_dir = base_dir or Path.cwd()

        #: Elements styled by highlights, with their original style attribute.
        self.highlighted: list[tuple['ElementHandle', str | None]] = []
        #: Overlay elements added by highlights.
        self.overlays: list['ElementHandle'] = []
        #: Written screenshot artifacts.
        self.artifacts: list[Path] = []

    @property
    def language(self) -> str:
        """Resolved language of the entry."""
        return self.entry.language

    @property
    def viewport(self) -> tuple[int, int]:
        """Viewport width and height of the entry."""
        return (
            self.spec.setting(self.entry.item, 'viewport_width', DEFAULT_VIEWPORT_WIDTH),
            self.spec.setting(self.entry.item, 'viewport_height', DEFAULT_VIEWPORT_HEIGHT),
        )

    @property
    def highlight_style(self) -> dict[str, Any]:
        """Default highlight CSS merged with the global highlight style."""
        return {
            **DEFAULT_HIGHLIGHT_STYLE,
            **(self.spec.global_.highlight_style or {}),
        }

    def setting(self, name: str, default: Any = None) -> Any:  # noqa: ANN401
        """Resolve an effective capture setting of the entry."""
        return self.spec.setting(self.entry.item, name, default)

    def selector(self, value: Any) -> str | None:  # noqa: ANN401
        """Resolve a selector definition for the entry language."""
        return get_selector(value, self.spec.selectors, self.language)

    def locate(self, selector: str) -> 'Locator':
        """Create a locator of a resolved selector."""
        return self.page.locator(selector)

    def resolve_file(self, path: str) -> Path:
        """Resolve a file path relative to the specification folder."""
        return self.base_dir / path

    def artifact_path(self, name: str) -> Path:
        """Build the artifact path of a screenshot.

        Unless overwriting is enabled, an existing artifact is kept and a
        numbered ` (n)` suffix is added to the new one.

        Args:
            name: Image path as configured in the workflow.

        Returns:
            Path of the PNG file to write.
        """
        stem = image_name(name, self.language)
        path = self.output_dir / f'{stem}.png'

        if self.setting('overwrite', False):
            return path

        counter = 1
        while path.exists():
            path = self.output_dir / f'{stem} ({counter}).png'
            counter += 1

        return path


class ExecutionResult(SchemaModel):
    """Outcome of executing one entry."""

    entry: TestPlanEntry = Field(
        title='Executed entry',
    )

    error: ScrnError | None = Field(
        default=None,
        title='Contained error',
    )

    artifacts: tuple[Path, ...] = Field(
        default=(),
        title='Written artifacts',
    )

    @property
    def passed(self) -> bool:
        """Whether the entry completed without error."""
        return self.error is None


class WorkflowExecutor:
    """Executor of test plan entries."""

    def __init__(self, spec: 'ScreenshotSetup',
                 registry: 'ActionHandlerRegistry',
                 settings: 'ScrnSettings', *,
                 filename: str | None = None) -> None:
        """Initialize an executor.

        Args:
            spec: Validated specification the entries are planned from.
            registry: Handler registry shared by all entries.
            settings: Runtime settings.
            filename: Path of the specification file, if any.
        """
        self.spec = spec
        self.registry = registry
        self.settings = settings
        self.filename = filename

    @property
    def base_url(self) -> str:
        """Base URL of visited pages."""
        return self.settings.base_url or self.spec.base_url or ''

    @property
    def base_dir(self) -> Path | None:
        """Folder of the specification file."""
        return Path(self.filename).parent if self.filename else None

    def url(self, entry: TestPlanEntry) -> str:
        """Join the base URL and the visited path of an entry."""
        path = entry.item.url
        if '://' in path or not self.base_url:
            return path

        return f'{self.base_url.rstrip('/')}/{path.lstrip('/')}'

    def login(self, entry: TestPlanEntry, session: Session) -> None:
        """Authenticate the session if the specification requires a login.

        Raises:
            ScrnRuntimeError: If no credentials are configured.
        """
        login = self.spec.global_.login
        if login is False:
            return

        alias = login if isinstance(login, str) else None
        credentials = self.settings.credentials(alias)
        if credentials is None:
            raise ScrnRuntimeError(
                f'Missing login credentials of {alias or 'default'!r} user',
                context=self.error_context(entry),
            )

        username, password = credentials
        logger.debug('Logging in as %s', username)
        try:
            session.login(username, password)

        except Exception as base:
            raise ScrnRuntimeError(
                f'Failed to log in as {username!r}{linesep}{' ' * FORMAT_INDENT}{base!r}',
                context=self.error_context(entry),
            ) from base

    def prepare(self, entry: TestPlanEntry, session: Session) -> None:
        """Bring a fresh session into the starting state of an entry.

        Performs the login precondition, sets the viewport and clock,
        visits the page and waits for it to settle.

        Args:
            entry: Plan entry to prepare.
            session: Fresh session of the entry.

        Raises:
            ScrnRuntimeError: If any preparation step fails.
        """
        item = entry.item
        page = session.page

        self.login(entry, session)

        try:
            width = self.spec.setting(item, 'viewport_width', DEFAULT_VIEWPORT_WIDTH)
            height = self.spec.setting(item, 'viewport_height', DEFAULT_VIEWPORT_HEIGHT)
            page.set_viewport_size({'width': width, 'height': height})

            timeouts = self.spec.setting(item, 'timeouts')
            if timeouts is not None and timeouts.default is not None:
                page.set_default_timeout(timeouts.default)

            if date := item.date or self.spec.global_.date:
                page.clock.set_fixed_time(date)

            visit = item.visit if isinstance(item.visit, Visit) else None
            timeout = self.settings.page_load_timeout
            if timeouts is not None and timeouts.page_load is not None:
                timeout = timeouts.page_load
            if visit is not None and visit.timeout is not None:
                timeout = visit.timeout

            url = self.url(entry)
            logger.debug('Visiting %s for %r', url, entry.title)
            page.goto(url, timeout=timeout)

            selector = (visit.selector if visit else None) or self.spec.global_.visit_wait_selector
            if selector:
                logger.debug('Waiting for %s', selector)
                page.wait_for_selector(selector, timeout=timeout)

            if self.spec.setting(item, 'disable_timers_and_animations', False):
                page.add_style_tag(content=DISABLE_ANIMATIONS_STYLE)

        except Exception as base:
            raise ScrnRuntimeError(
                f'Failed to visit {item.url!r}{linesep}{' ' * FORMAT_INDENT}{base!r}',
                context=self.error_context(entry),
            ) from base

    def context(self, entry: TestPlanEntry, session: Session) -> ExecutionContext:
        """Create the execution context of an entry."""
        return ExecutionContext(
            session.page,
            entry,
            self.spec,
            output_dir=self.settings.output_dir,
            base_dir=self.base_dir,
        )

    def run(self, entry: TestPlanEntry, session: Session) -> ExecutionContext:
        """Run the actions of a prepared entry in order.

        Unless any action is a screenshot action, a screenshot named after
        the entry image is captured after the last action.

        Args:
            entry: Plan entry to run.
            session: Prepared session of the entry.

        Returns:
            The final execution context.

        Raises:
            UnsupportedAction: If an action kind has no handler.
            ActionError: If a handler fails.
        """
        context = self.context(entry, session)
        actions: list[BaseAction] = list(entry.item.actions)

        for position, action in enumerate(actions):
            self.run_action(action, context, position=position)

        if not any(isinstance(action, ScreenshotAction) for action in actions):
            self.run_action(
                ScreenshotAction(screenshot=None),
                context,
                position=len(actions),
            )

        return context

    def run_action(self, action: 'BaseAction', context: ExecutionContext, *,
                   position: int) -> None:
        """Dispatch a single action to its handler.

        Args:
            action: Action to run.
            context: Execution context of the entry.
            position: Zero-based position of the action.

        Raises:
            UnsupportedAction: If the action kind has no handler.
            ActionError: If the handler fails.
        """
        try:
            handler = self.registry.get(action.kind)

        except UnsupportedAction as base:
            raise UnsupportedAction.from_action(
                action,
                kind=action.kind,
                position=position,
                entry=context.entry.title,
                filename=self.filename,
            ) from base

        try:
            handler(action, context)

        except ScrnRuntimeError as base:
            raise ActionError.from_action(
                action,
                kind=action.kind,
                position=position,
                message=base.message,
                entry=context.entry.title,
                filename=self.filename,
            ) from base

        except Exception as base:
            raise ActionError.from_action(
                action,
                kind=action.kind,
                position=position,
                message=f'{base!r}',
                entry=context.entry.title,
                filename=self.filename,
            ) from base

    def open_session(self, entry: TestPlanEntry,
                     session_factory: SessionFactory) -> Session:
        """Open a fresh session of an entry.

        Raises:
            ScrnRuntimeError: If the session cannot be opened.
        """
        try:
            return session_factory(entry)

        except Exception as base:
            raise ScrnRuntimeError(
                f'Failed to open a browser session{linesep}{' ' * FORMAT_INDENT}{base!r}',
                context=self.error_context(entry),
            ) from base

    def execute(self, entry: TestPlanEntry,
                session_factory: SessionFactory) -> ExecutionResult:
        """Execute an entry in a fresh session, containing its failure.

        Args:
            entry: Plan entry to execute.
            session_factory: Callable opening a fresh session.

        Returns:
            The execution result carrying the error, if any.
        """
        session = None
        try:
            session = self.open_session(entry, session_factory)
            self.prepare(entry, session)
            context = self.run(entry, session)

        except ScrnRuntimeError as error:
            logger.debug('Entry %r failed: %s', entry.title, error.message)
            return ExecutionResult(entry=entry, error=error)

        finally:
            if session is not None:
                session.close()

        return ExecutionResult(entry=entry, artifacts=tuple(context.artifacts))

    def execute_all(self, entries: 'Iterable[TestPlanEntry]',
                    session_factory: SessionFactory) -> tuple[ExecutionResult, ...]:
        """Execute entries sequentially, each in its own session."""
        return tuple(
            self.execute(entry, session_factory)
            for entry in entries
        )

    def error_context(self, entry: TestPlanEntry) -> ErrorContext:
        """Build the error context of an entry failure."""
        return ErrorContext(
            filename=self.filename,
            entry=entry.title,
        )
