"""Action handler registry.

This module maps action kinds to the handlers executing them. A registry
is built once per runner and only read afterwards: built-in handlers are
registered first, optional ones are decided once at construction, and
third-party handlers are discovered via Python entry points.

Handler discovery is defensive: a broken entry point emits a
`HandlerWarning` and does not prevent other handlers from loading.
"""

from collections.abc import Callable, Mapping
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING
from warnings import warn

from pytest_scrn.errors import HandlerWarning, UnsupportedAction

if TYPE_CHECKING:
    from importlib.metadata import EntryPoint

if TYPE_CHECKING:
    from pytest_scrn.schema import BaseAction

    from .executor import ExecutionContext

#: Callable executing one action within an execution context.
#: Handlers signal failure by raising and must not retry internally.
type ActionHandler = Callable[['BaseAction', 'ExecutionContext'], None]

#: Entry point group of third-party action handlers.
ENTRYPOINT_GROUP = 'scrn_handlers'

logger = getLogger(__name__)


class ActionHandlerRegistry:
    """Mapping of action kinds to handlers."""

    def __init__(self, handlers: 'Mapping[str, ActionHandler] | None' = None) -> None:
        """Initialize a registry.

        Args:
            handlers: Optional initial mapping of kinds to handlers.
        """
        self._handlers: dict[str, ActionHandler] = {}

        for kind, handler in (handlers or {}).items():
            self.register(kind, handler)

    @classmethod
    def with_builtins(cls, *, highlight: bool = True,
                      plugins: bool = True) -> 'ActionHandlerRegistry':
        """Create a registry with all built-in handlers.

        Args:
            highlight: Whether the `highlight` kind is supported.
            plugins: Whether handlers from entry points are loaded.

        Returns:
            A registry ready to be shared by all entries of a runner.
        """
        from pytest_scrn.builtins import BUILTIN_HANDLERS, highlight as highlight_handler  # noqa: PLC0415

        registry = cls(BUILTIN_HANDLERS)
        if highlight:
            registry.register('highlight', highlight_handler)

        if plugins:
            registry.load_plugins()

        return registry

    @property
    def kinds(self) -> tuple[str, ...]:
        """Registered action kinds, in registration order."""
        return tuple(self._handlers)

    @property
    def handlers(self) -> 'Mapping[str, ActionHandler]':
        """Read-only view of registered handlers."""
        return MappingProxyType(self._handlers)

    def register(self, kind: str, handler: 'ActionHandler',
                 entrypoint: 'EntryPoint | None' = None) -> None:
        """Register a handler for an action kind.

        Registering a kind twice replaces the previous handler and emits
        a `HandlerWarning`.

        Args:
            kind: Action kind as written in specifications.
            handler: Callable executing actions of this kind.
            entrypoint: Entry point the handler was loaded from, if any.

        Raises:
            TypeError: If the handler is not callable.
        """
        if not callable(handler):
            raise TypeError(f'Handler of action {kind!r} is not callable')

        if kind in self._handlers:
            source = entrypoint.value if entrypoint else getattr(handler, '__module__', None)
            warn(
                f'Handler of action {kind!r} from {source!r} is shadowing an existing',
                category=HandlerWarning,
                stacklevel=2,
            )

        self._handlers[kind] = handler

    def has(self, kind: str) -> bool:
        """Check whether an action kind has a handler."""
        return kind in self._handlers

    def get(self, kind: str) -> 'ActionHandler':
        """Look up the handler of an action kind.

        Args:
            kind: Action kind.

        Returns:
            The registered handler.

        Raises:
            UnsupportedAction: If the kind has no registered handler.
        """
        try:
            return self._handlers[kind]

        except KeyError:
            raise UnsupportedAction(UnsupportedAction.summary(kind), kind=kind) from None

    def _load_plugin(self, entrypoint: 'EntryPoint') -> None:
        """Load handlers of a single entry point.

        The entry point must resolve to a mapping of kinds to handlers.
        Loading failures are reported as warnings.

        Args:
            entrypoint: Entry point describing the handlers to load.
        """
        try:
            handlers = entrypoint.load()

        except Exception as base:  # noqa: BLE001
            warn(
                f'Failed to load entrypoint {entrypoint.name!r}: {base!r}',
                category=HandlerWarning,
                stacklevel=2,
            )
            return

        if not isinstance(handlers, Mapping):
            warn(
                f'Loaded from entrypoint {entrypoint.name!r} object is not a handlers mapping',
                category=HandlerWarning,
                stacklevel=2,
            )
            return

        for kind, handler in handlers.items():
            try:
                self.register(kind, handler, entrypoint)

            except TypeError as base:
                warn(
                    f'{base} in entrypoint {entrypoint.name!r}',
                    category=HandlerWarning,
                    stacklevel=2,
                )

        logger.debug('Loaded handlers %s from %s', tuple(handlers), entrypoint.value)

    def load_plugins(self) -> None:
        """Load handlers via entry points.

        Discovers handlers from the `scrn_handlers` entry point group.
        """
        from importlib.metadata import entry_points  # noqa: PLC0415

        for entrypoint in entry_points().select(group=ENTRYPOINT_GROUP):
            self._load_plugin(entrypoint)
