"""Screenshot workflow engine.

This package turns a static specification into filtered, language-expanded,
ordered test plans and executes each plan entry through a pluggable action
handler registry with failures contained per entry.

The primary public entry point is `ScreenshotRunner`, which validates a
specification once and emits test trees via `run` and `run_suite`.
"""

from .executor import ExecutionContext, ExecutionResult, Session, WorkflowExecutor
from .planner import RunOptions, TestPlanBuilder, TestPlanEntry
from .registry import ActionHandler, ActionHandlerRegistry
from .runner import ScreenshotRunner
from .tree import TestGroup, TestTreeEmitter, TestUnit
from .validator import ConfigValidator

__all__ = (
    'ActionHandler',
    'ActionHandlerRegistry',
    'ConfigValidator',
    'ExecutionContext',
    'ExecutionResult',
    'RunOptions',
    'ScreenshotRunner',
    'Session',
    'TestGroup',
    'TestPlanBuilder',
    'TestPlanEntry',
    'TestTreeEmitter',
    'TestUnit',
    'WorkflowExecutor',
)
