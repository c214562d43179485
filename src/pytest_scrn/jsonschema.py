"""JSON Schema management."""

from functools import cache
from json import dumps
from typing import TYPE_CHECKING

from pydantic.json_schema import GenerateJsonSchema, JsonSchemaValue

from pytest_scrn.schema import ScreenshotSetup

if TYPE_CHECKING:
    from pydantic.json_schema import JsonSchemaMode
    from pydantic_core import CoreSchema


class SchemaGenerator(GenerateJsonSchema):
    """Custom JSON Schema generator for screenshot specifications.

    Extends the generated schema with its dialect, a title and a
    description so that editors can use it for YAML validation.
    """

    @classmethod
    @cache
    def make_schema(cls, indent: int | str | None = 4) -> str:
        """Generate the JSON Schema for screenshot specifications.

        Args:
            indent: Indentation level used for JSON formatting.

        Returns:
            Serialized JSON Schema string.
        """
        schema = ScreenshotSetup.model_json_schema(
            by_alias=True,
            schema_generator=cls,
        )

        return dumps(
            schema,
            ensure_ascii=False,
            sort_keys=True,
            indent=indent,
        )

    def generate(self, schema: 'CoreSchema', mode: 'JsonSchemaMode' = 'validation') -> JsonSchemaValue:
        """Generate the root JSON Schema.

        Args:
            schema: Core schema of the root model.
            mode: JSON Schema generation mode.

        Returns:
            The root JSON Schema with its dialect and description.
        """
        return {
            **super().generate(schema, mode),
            'title': 'pytest-scrn',
            'description': 'JSON Schema for pytest-scrn screenshot workflow specifications',
            '$schema': self.schema_dialect,
        }
