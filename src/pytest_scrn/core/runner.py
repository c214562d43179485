"""Screenshot workflow engine facade.

The runner validates a specification once at construction, builds the
handler registry once, and turns the specification into test trees on
demand. Trees are rebuilt on every call, since filters vary per call.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pytest_scrn.errors import ErrorContext, InvalidConfiguration
from pytest_scrn.settings import ScrnSettings

from .executor import WorkflowExecutor
from .planner import RunOptions, TestPlanBuilder
from .registry import ActionHandlerRegistry
from .tree import TestTreeEmitter
from .validator import ConfigValidator

if TYPE_CHECKING:
    from pytest_scrn.schema import ScreenshotSetup

    from .planner import TestPlanEntry
    from .tree import TestGroup


class ScreenshotRunner:
    """Engine turning a screenshot specification into test trees.

    Attributes:
        spec: Validated, immutable specification.
        highlight: Whether the `highlight` action kind is supported.
        registry: Handler registry shared by all entries.
        executor: Executor of single entries.
    """

    def __init__(self, config: 'ScreenshotSetup | Mapping[str, Any] | None' = None, *,
                 highlight: bool | None = None,
                 settings: ScrnSettings | None = None,
                 filename: str | None = None,
                 plugins: bool = True) -> None:
        """Initialize a runner.

        Without an explicit configuration, the YAML file named by the
        `SCRN_CONFIG` environment variable is used.

        Args:
            config: Specification, raw or validated.
            highlight: Whether the `highlight` action kind is supported.
                Defaults to the `SCRN_HIGHLIGHT` setting.
            settings: Runtime settings. Read from the environment if omitted.
            filename: Path of the specification file, if any.
            plugins: Whether third-party handlers are loaded.

        Raises:
            MissingConfiguration: If no specification is supplied anywhere.
            InvalidConfiguration: If the specification is invalid.
        """
        self.settings = settings or ScrnSettings()

        if config is None and self.settings.config is not None:
            filename = f'{self.settings.config}'
            self.spec = ConfigValidator.load(self.settings.config)
        else:
            self.spec = ConfigValidator.validate(
                dict(config) if isinstance(config, Mapping) else config,
                filename=filename,
            )

        self.filename = filename
        self.highlight = self.settings.highlight if highlight is None else highlight

        self.registry = ActionHandlerRegistry.with_builtins(
            highlight=self.highlight,
            plugins=plugins,
        )
        self.executor = WorkflowExecutor(
            self.spec,
            self.registry,
            self.settings,
            filename=filename,
        )
        self.emitter = TestTreeEmitter(before_each=self.executor.prepare)

    @classmethod
    def from_file(cls, path: Path | str, **kwargs: Any) -> 'ScreenshotRunner':  # noqa: ANN401
        """Create a runner from a YAML specification file.

        Args:
            path: Path to the YAML file.
            **kwargs: Keyword runner arguments.

        Returns:
            Runner of the loaded specification.
        """
        return cls(
            ConfigValidator.load(path),
            filename=f'{path}',
            **kwargs,
        )

    def plan(self, options: RunOptions | Mapping[str, Any] | None = None) -> tuple['TestPlanEntry', ...]:
        """Build the filtered, language-expanded plan.

        Args:
            options: Optional run filters.

        Returns:
            Plan entries in specification order.
        """
        if isinstance(options, Mapping):
            options = RunOptions.model_validate(options)

        return TestPlanBuilder.build(self.spec, options)

    def run(self, options: RunOptions | Mapping[str, Any] | None = None) -> 'TestGroup':
        """Build a test tree without a top-level group.

        Args:
            options: Optional run filters.

        Returns:
            Transparent root group holding tag groups and untagged units.
        """
        return self.emitter.emit(self.plan(options))

    def run_suite(self, options: RunOptions | Mapping[str, Any] | None = None) -> 'TestGroup':
        """Build a test tree wrapped in a group named after the title.

        Args:
            options: Optional run filters.

        Returns:
            Root group named after the specification title.

        Raises:
            InvalidConfiguration: If the specification has no title.
        """
        if not self.spec.title:
            raise InvalidConfiguration(
                'Screenshot configuration requires a title',
                context=ErrorContext(filename=self.filename),
            )

        return self.emitter.emit(self.plan(options), title=self.spec.title)
