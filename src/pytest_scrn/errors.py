"""Core exception hierarchy.

This module defines base error and warning types used across the library
to report configuration problems at construction time and per-entry
failures while screenshot workflows execute.
"""

from datetime import date, datetime
from os import linesep
from typing import TYPE_CHECKING, Any, TypedDict

from yaml import dump
from yaml.error import MarkedYAMLError

if TYPE_CHECKING:
    from typing import Self

if TYPE_CHECKING:
    from pydantic import BaseModel
    from pydantic_core import ErrorDetails, ValidationError

SNIPPET_ELLIPSIS = f' ...{linesep}'
SNIPPET_INDENT = 2

FORMAT_REPLACER = '<runtime object>'
FORMAT_FILENAME = '<unicode string>'
FORMAT_INDENT = 4

MAPPINGS = (dict,)
SCALARS = (date, datetime, str, bytes, int, float, bool)
SEQUENCES = (list, tuple, set)


class ErrorContext(TypedDict, total=False):
    """Container describing contextual information for error formatting.

    All fields are optional; the formatter adapts output based on
    provided values.
    """

    #: Name of the source file where the error occurred.
    filename: str | None

    #: Line number in the source file.
    line_num: int | None
    #: Column number in the source file.
    column_num: int | None

    #: Title of the test plan entry being executed.
    entry: str | None
    #: Position of the action within the entry.
    action_num: int | None

    #: Underlying exception that triggered formatting.
    error: Exception | None

    #: Element associated with the error.
    element: Any


class ErrorFormatter:
    """Utility class for formatting workflow errors.

    This formatter is responsible for producing human-readable
    error messages with optional source location and YAML-based
    snippets of the failing element.
    """

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Format an error message using contextual information.

        Args:
            message: Base human-readable error message.
            context: Optional error context with location and data.

        Returns:
            A fully formatted error message suitable for display.
        """
        if not context:
            return message

        message += linesep
        message += cls.get_location_string(context, indent=FORMAT_INDENT)
        message += cls.get_snippet_string(context, indent=FORMAT_INDENT * 2)

        return message

    @classmethod
    def get_location_string(cls, context: ErrorContext, *,
                            indent: str | int | None = None) -> str:
        """Format source and execution location information.

        Args:
            context: Error context containing location metadata.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted location string including filename, line,
            column, entry title and action number when available.
        """
        indent = cls._ensure_indent(indent)

        filename = context.get('filename')
        if not filename:
            filename = FORMAT_FILENAME

        message = f'{indent}in "{filename}"'
        if (line_num := context.get('line_num')) is not None:
            line_num += 1
            message += f', line {line_num}'
            if (column_num := context.get('column_num')) is not None:
                column_num += 1
                message += f', column {column_num}'
        message += linesep

        if entry := context.get('entry'):
            message += f'{indent}on "{entry}"'
            if (action_num := context.get('action_num')) is not None:
                action_num += 1
                message += f', action {action_num}'
            message += linesep

        return message

    @classmethod
    def get_snippet_string(cls, context: ErrorContext, *,
                           indent: str | int | None = None) -> str:
        """Generate a formatted snippet illustrating the error context.

        Args:
            context: Error context containing element or exception data.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted multi-line snippet string, or an empty string
            if no snippet data is available.
        """
        indent = cls._ensure_indent(indent)

        if (error := context.get('error')) and isinstance(error, MarkedYAMLError):
            snippet = error.problem_mark.get_snippet(indent=0) if error.problem_mark else None
            return cls._make_indent(snippet or '', indent)

        if element := context.get('element'):
            snippet = f'{indent}{SNIPPET_ELLIPSIS}'
            snippet += cls._make_yaml(element, indent)
            snippet += linesep
            return snippet

        return ''

    @classmethod
    def _filter_unsafe(cls, value: Any) -> Any:  # noqa: ANN401
        """Recursively sanitize values for safe YAML serialization.

        Args:
            value: Arbitrary value to sanitize.

        Returns:
            A YAML-safe representation of the value.
        """
        if value is None or isinstance(value, SCALARS):
            return value

        if isinstance(value, MAPPINGS):
            return {
                key: cls._filter_unsafe(item)
                for key, item in value.items()
            }

        if isinstance(value, SEQUENCES):
            return [
                cls._filter_unsafe(item)
                for item in value
            ]

        return FORMAT_REPLACER

    @classmethod
    def _make_yaml(cls, value: Any, indent: str = '') -> str:  # noqa: ANN401
        """Serialize a value to an indented YAML string."""
        data = dump(
            cls._filter_unsafe(value),
            indent=SNIPPET_INDENT,
            sort_keys=False,
        )

        return cls._make_indent(data, indent)

    @staticmethod
    def _make_indent(value: str, indent: str) -> str:
        """Apply indentation to a multi-line string.

        Empty or whitespace-only lines are omitted.
        """
        if not indent:
            return value

        return linesep.join(
            f'{indent}{line}'
            for line in value.splitlines()
            if line.strip()
        )

    @staticmethod
    def _ensure_indent(indent: str | int | None = None) -> str:
        """Normalize indentation input."""
        if isinstance(indent, int) and indent > 0:
            return ' ' * indent

        if isinstance(indent, str):
            return indent

        return ''


class HandlerWarning(UserWarning):
    """Warning emitted for non-fatal action handler issues.

    Used when a handler shadows an existing one, or when a third-party
    handler entry point cannot be loaded.
    """


class ScrnError(Exception, ErrorFormatter):
    """Base exception for all pytest-scrn errors.

    All custom exceptions raised by the library inherit from this class
    to allow unified error handling by callers.
    """

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Error context containing optional location values.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String represenatation."""
        return self.format(self.message, self.context)


class MissingConfiguration(ScrnError):
    """Error raised when no workflow specification is supplied at all.

    Neither an explicit configuration nor an environment-provided
    configuration file was available at runner construction.
    """


class InvalidConfiguration(ScrnError):
    """Error raised when a workflow specification is structurally invalid."""

    @classmethod
    def from_yaml_error(cls, error: MarkedYAMLError) -> 'Self':
        """Create a configuration error from a YAML parsing failure.

        Args:
            error: Exception raised by the YAML parser.

        Returns:
            InvalidConfiguration representing the YAML parsing failure.
        """
        error_context = ErrorContext(error=error)
        if mark := error.problem_mark:
            error_context.update(
                filename=mark.name,
                line_num=mark.line,
                column_num=mark.column,
            )

        message = 'Invalid YAML'
        if error.problem:
            message += f'{linesep}{' ' * FORMAT_INDENT}{error.problem}'

        return cls(message, context=error_context)

    @classmethod
    def from_pydantic_error(cls, error: 'ValidationError', *,
                            data: Any = None,  # noqa: ANN401
                            filename: str | None = None) -> 'Self':
        """Create a configuration error from a Pydantic validation failure.

        The error message is taken from the first validation issue whose
        location can be traced back to the raw data, and the snippet shows
        the minimal failing fragment.

        Args:
            error: ValidationError raised by Pydantic.
            data: Raw specification data.
            filename: Name of the source file, if any.

        Returns:
            InvalidConfiguration representing the validation failure.
        """
        error_context = ErrorContext(
            filename=filename,
            error=error,
        )

        if not isinstance(data, dict):
            return cls('Type validation error', context=error_context)

        for item in error.errors(include_url=False, include_input=False):
            if context := cls._locate_pydantic_context(data, item):
                message, value = context
                return cls(message, context=ErrorContext({**error_context, 'element': value}))

        return cls('Validation error', context=error_context)

    @classmethod
    def _locate_pydantic_context(cls, value: Any,  # noqa: ANN401
                                 error: 'ErrorDetails') -> tuple[str, Any] | None:
        """Locate the most specific failing element in validated data.

        This method walks the Pydantic error location path and extracts
        the minimal substructure responsible for the failure. Location
        parts that do not exist in the data (such as union tags) are
        skipped.

        Args:
            value: Root data structure being validated.
            error: Pydantic error details including location path.

        Returns:
            A tuple of (error message, extracted element) if a relevant
            context can be located, otherwise None.
        """
        container = last_item = value
        last_key: int | str | None = None

        for key in error['loc']:
            if isinstance(last_item, (list, tuple)):
                if isinstance(key, int) and 0 <= key < len(last_item):
                    container = last_item
                    last_item = last_item[key]
                    last_key = key
            elif isinstance(last_item, dict):
                if key in last_item:
                    container = last_item
                    last_item = last_item[key]
                    last_key = key
            else:
                break

        message = None
        for line in (error.get('msg') or '').splitlines():
            if line.strip():
                message = line.strip()
                break

        if not message:
            return None

        if last_key is None:
            return message, container

        if isinstance(container, (list, tuple)):
            return message, [last_item]

        return message, {last_key: last_item}


class ScrnRuntimeError(ScrnError):
    """Error raised while a test plan entry executes.

    Runtime errors are contained to the entry that raised them and never
    affect sibling entries.
    """

    def __init__(self, message: str, *,
                 kind: str | None = None,
                 position: int | None = None,
                 context: ErrorContext | None = None) -> None:
        """Initialize a runtime error.

        Args:
            message: Human-readable error description.
            kind: Kind of the offending action, if any.
            position: Zero-based position of the offending action.
            context: Error context containing optional location values.
        """
        self.kind = kind
        self.position = position

        super().__init__(message, context=context)

    @classmethod
    def from_action(cls, action: 'BaseModel', *,  # noqa: PLR0913
                    kind: str,
                    position: int,
                    message: str | None = None,
                    entry: str | None = None,
                    filename: str | None = None) -> 'Self':
        """Create a runtime error for an action of a test plan entry.

        Args:
            action: The offending action model.
            kind: Kind of the offending action.
            position: Zero-based position of the action within the entry.
            message: An optional detail message.
            entry: Title of the executed entry.
            filename: An optional filename of the source specification.

        Returns:
            Runtime error carrying the action kind and position.
        """
        error_context = ErrorContext(
            filename=filename,
            entry=entry,
            action_num=position,
            element=action.model_dump(
                by_alias=True,
                exclude_none=True,
                exclude_unset=True,
            ),
        )

        error_message = cls.summary(kind)
        if message:
            error_message += f'{linesep}{' ' * FORMAT_INDENT}{message}'

        return cls(error_message, kind=kind, position=position, context=error_context)

    @staticmethod
    def summary(kind: str) -> str:
        """Return the first line of the error message."""
        return f'Action {kind!r} failed'


class UnsupportedAction(ScrnRuntimeError):
    """Error raised when an action kind has no registered handler."""

    @staticmethod
    def summary(kind: str) -> str:
        """Return the first line of the error message."""
        return f'Unsupported action {kind!r}'


class ActionError(ScrnRuntimeError):
    """Error raised when a handler fails to execute an action.

    Carries the offending action kind and its position in the entry's
    action sequence.
    """
