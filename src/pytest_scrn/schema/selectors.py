"""Selector definitions and resolution.

A selector addresses one or more DOM elements. It may be given as a plain
CSS string, as a list of CSS fragments joined with spaces, or as an object
using `data-cy` attributes, localized variants, or language restrictions.

Specifications may declare predefined selectors. Their names are replaced
inside selector strings, longest names first, so a workflow can refer to
shared selectors by name.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import Field

from pytest_scrn.models import SchemaModel

#: Predefined selectors: a mapping or a list of mappings of names to CSS selectors.
type PredefinedSelectors = Mapping[str, str] | list[Mapping[str, str]]


class SelectorMixin(SchemaModel):
    """Mixin providing the selector fields of an action.

    Every action that targets DOM elements accepts these fields. The
    first non-empty of `data-cy`, `localized` and `selector` is used.
    """

    selector: 'Selector | None' = Field(
        default=None,
        title='Selector',
        description='CSS selector, list of CSS fragments, or nested selector object.',
    )

    data_cy: str | None = Field(
        default=None,
        alias='data-cy',
        title='data-cy attribute',
        description='Value of the `data-cy` attribute of the element.',
    )

    localized: dict[str, str] | None = Field(
        default=None,
        title='Localized selectors',
        description='Mapping of language codes to selectors.',
    )

    language: str | list[str] | None = Field(
        default=None,
        title='Language restriction',
        description='Languages for which the selector applies.',
    )


class SelectorObject(SelectorMixin):
    """Standalone selector object."""


#: Selector as accepted by workflow actions.
Selector = str | list[str] | SelectorObject

SelectorMixin.model_rebuild()
SelectorObject.model_rebuild()


def _replace_predefined(value: str, predefined: PredefinedSelectors | None) -> str:
    """Replace predefined selector names within a selector string.

    Args:
        value: Selector string.
        predefined: Predefined selectors of the specification.

    Returns:
        The selector with all predefined names replaced.
    """
    if not predefined:
        return value

    mappings = predefined if isinstance(predefined, list) else [predefined]

    result = value
    for mapping in mappings:
        for key in sorted(mapping, key=len, reverse=True):
            result = result.replace(key, mapping[key])

    return result


def get_selector(selector: Any, predefined: PredefinedSelectors | None = None,  # noqa: ANN401, PLR0911
                 language: str | None = None) -> str | None:
    """Resolve a selector definition into a CSS selector string.

    Args:
        selector: Selector definition (string, list, or selector object).
        predefined: Predefined selectors of the specification.
        language: Language of the executed entry.

    Returns:
        A CSS selector, or `None` when the selector is empty or does not
        apply to the given language.
    """
    if not selector:
        return None

    if isinstance(selector, str):
        return _replace_predefined(selector, predefined)

    if isinstance(selector, list):
        return ' '.join(
            _replace_predefined(item, predefined)
            for item in selector
        )

    if not isinstance(selector, SelectorMixin):
        return None

    if selector.language is not None and language is not None:
        languages = selector.language if isinstance(selector.language, list) else [selector.language]
        if language not in languages:
            return None

    if selector.data_cy:
        return f'[data-cy={selector.data_cy}]'

    if selector.localized is not None:
        localized = selector.localized.get(language or '')
        return _replace_predefined(localized, predefined) if localized else None

    return get_selector(selector.selector, predefined, language)
