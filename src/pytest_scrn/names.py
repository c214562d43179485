"""Naming rules for test plan entries and screenshot artifacts.

The rules defined here form part of the public contract: test titles are
shown by pytest and used for filtering, artifact names determine where
screenshot files are written.
"""

from pathlib import PurePosixPath
from re import IGNORECASE
from re import compile as regexp

#: Default language used when neither an item nor the global settings define one.
DEFAULT_LANGUAGE = 'en'

#: Trailing image extension removed from artifact names.
IMAGE_EXTENSION_PATTERN = regexp(r'\.png$', flags=IGNORECASE)


def entry_title(image: str, language: str) -> str:
    """Build the display title of a test plan entry.

    The title is the trailing path segment of the image, kept as is,
    followed by the language code in parentheses.

    Args:
        image: Relative artifact path of the screenshot item.
        language: Resolved language code.

    Returns:
        A title such as ``index.html (en)``.
    """
    return f'{PurePosixPath(image).name} ({language})'


def image_name(name: str, language: str | None = None) -> str:
    """Build the artifact name of a screenshot.

    Only one trailing ``.png`` extension is removed, regardless of case.
    If a language is given, it is appended with an underscore.

    Args:
        name: Image path as configured in the workflow.
        language: Optional language code.

    Returns:
        Artifact name without extension.
    """
    result = IMAGE_EXTENSION_PATTERN.sub('', name)
    if language:
        result += f'_{language}'

    return result
