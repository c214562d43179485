"""Specification validation.

Validation is synchronous and pure: a raw specification either becomes
an immutable `ScreenshotSetup` or raises `MissingConfiguration` or
`InvalidConfiguration`. Nothing else happens here.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from yaml import SafeLoader, load
from yaml.error import MarkedYAMLError

from pytest_scrn.errors import ErrorContext, InvalidConfiguration, MissingConfiguration
from pytest_scrn.schema import ScreenshotSetup

if TYPE_CHECKING:
    from yaml import BaseLoader


class ConfigValidator:
    """Validator of screenshot workflow specifications."""

    @classmethod
    def validate(cls, raw: Any, *,  # noqa: ANN401
                 require_title: bool = False,
                 filename: str | None = None) -> ScreenshotSetup:
        """Validate a raw specification.

        Args:
            raw: Deserialized specification, or an already validated one.
            require_title: Whether the specification must have a title.
            filename: Name of the source file, used in error messages.

        Returns:
            The validated specification.

        Raises:
            MissingConfiguration: If no specification is supplied.
            InvalidConfiguration: If the specification is structurally invalid.
        """
        if raw is None:
            raise MissingConfiguration(
                'Missing screenshot configuration',
                context=ErrorContext(filename=filename) if filename else None,
            )

        if isinstance(raw, ScreenshotSetup):
            spec = raw
        elif not isinstance(raw, dict):
            raise InvalidConfiguration(
                f'Screenshot configuration must be a mapping, got {type(raw).__name__}',
                context=ErrorContext(filename=filename, element=raw),
            )
        else:
            try:
                spec = ScreenshotSetup.model_validate(raw)

            except ValidationError as base:
                raise InvalidConfiguration.from_pydantic_error(
                    base,
                    data=raw,
                    filename=filename,
                ) from base

        if require_title and not spec.title:
            raise InvalidConfiguration(
                'Screenshot configuration requires a title',
                context=ErrorContext(filename=filename),
            )

        return spec

    @classmethod
    def load(cls, path: Path | str, *,
             require_title: bool = False,
             loader: type['BaseLoader'] = SafeLoader) -> ScreenshotSetup:
        """Read and validate a YAML specification file.

        Args:
            path: Path to the YAML file.
            require_title: Whether the specification must have a title.
            loader: YAML loader class.

        Returns:
            The validated specification.

        Raises:
            MissingConfiguration: If the file is empty.
            InvalidConfiguration: If the file is not valid YAML or the
                specification is structurally invalid.
        """
        path = Path(path)

        with path.open('rt', encoding='utf-8') as content:
            try:
                raw = load(content, Loader=loader)  # noqa: S506

            except MarkedYAMLError as base:
                raise InvalidConfiguration.from_yaml_error(base) from base

        return cls.validate(raw, require_title=require_title, filename=f'{path}')
