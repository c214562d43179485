"""Test plan construction.

The planner expands a validated specification into an ordered tuple of
`TestPlanEntry` values, one per screenshot item and resolved language,
and narrows it with optional run filters.

Planning is synchronous and free of side effects, so it runs at pytest
collection time independently of execution order. Entries are built fresh
on every call since filters vary per call.
"""

from typing import TYPE_CHECKING, Any

from pydantic import Field, field_validator

from pytest_scrn.models import SchemaModel
from pytest_scrn.names import entry_title
from pytest_scrn.schema import ScreenshotItem  # noqa: TC001

if TYPE_CHECKING:
    from collections.abc import Iterable

if TYPE_CHECKING:
    from pytest_scrn.schema import ScreenshotSetup


class RunOptions(SchemaModel):
    """Filters narrowing which entries of a plan are emitted.

    Each filter category is optional. An entry survives only if it passes
    every supplied category; within a category, matching any one value is
    sufficient. Empty categories are treated as not supplied.
    """

    tags: tuple[str, ...] | None = Field(
        default=None,
        title='Tags filter',
        description='Keep entries sharing at least one tag with the filter.',
    )

    titles: tuple[str, ...] | None = Field(
        default=None,
        title='Titles filter',
        description='Keep entries whose image contains any filter string.',
    )

    images: tuple[str, ...] | None = Field(
        default=None,
        title='Images filter',
        description='Keep entries whose image equals any filter string.',
    )

    @field_validator('tags', 'titles', 'images', mode='before')
    @classmethod
    def ensure_sequence(cls, value: Any) -> Any:  # noqa: ANN401
        """Accept a single string and drop empty filters."""
        if isinstance(value, str):
            value = [value]

        if not value:
            return None

        return value

    def accepts(self, entry: 'TestPlanEntry') -> bool:
        """Check whether an entry passes all supplied filters.

        Args:
            entry: Candidate plan entry.

        Returns:
            True if the entry passes every supplied filter category.
        """
        if self.tags is not None and not set(self.tags).intersection(entry.tags):
            return False

        if self.titles is not None and not any(title in entry.image for title in self.titles):
            return False

        if self.images is not None and entry.image not in self.images:  # noqa: SIM103
            return False

        return True


class TestPlanEntry(SchemaModel):
    """One locale-resolved unit of work derived from a screenshot item."""

    __test__ = False

    title: str = Field(
        title='Title',
        description='Trailing path segment of the image followed by the language.',
    )

    tags: tuple[str, ...] = Field(
        default=(),
        title='Effective tags',
        description='Global tags followed by item tags, without duplicates.',
    )

    language: str = Field(
        title='Language',
    )

    item: ScreenshotItem = Field(
        title='Source item',
    )

    index: int = Field(
        default=0,
        ge=0,
        title='Item position',
        description='Position of the source item within the specification.',
    )

    @property
    def primary_tag(self) -> str | None:
        """First effective tag, used for grouping."""
        return self.tags[0] if self.tags else None

    @property
    def image(self) -> str:
        """Relative artifact path of the source item."""
        return self.item.image

    @property
    def skip(self) -> bool:
        """Whether the entry is declared as skipped."""
        return self.item.skip

    @property
    def metadata(self) -> dict[str, Any]:
        """Metadata attached to the executable unit of this entry."""
        return {
            'tags': list(self.tags),
            'scrollBehavior': False,
        }


class TestPlanBuilder:
    """Builder of filtered, language-expanded test plans."""

    __test__ = False

    @classmethod
    def build(cls, spec: 'ScreenshotSetup',
              options: RunOptions | None = None) -> tuple[TestPlanEntry, ...]:
        """Build the ordered test plan of a specification.

        Entries follow item order, then language order. Filtering only
        removes entries and never reorders the survivors. Items sharing an
        image are not deduplicated.

        Args:
            spec: Validated specification.
            options: Optional run filters.

        Returns:
            Tuple of plan entries.
        """
        return tuple(
            entry
            for entry in cls.expand(spec)
            if options is None or options.accepts(entry)
        )

    @classmethod
    def expand(cls, spec: 'ScreenshotSetup') -> 'Iterable[TestPlanEntry]':
        """Expand all planned items of a specification into entries.

        If any item is flagged with `only`, the other items are ignored.

        Args:
            spec: Validated specification.

        Yields:
            Unfiltered plan entries.
        """
        focused = any(item.only for item in spec.screenshots)

        for index, item in enumerate(spec.screenshots):
            if focused and not item.only:
                continue

            tags = cls.merge_tags(spec.global_.tags, item.tags)

            for language in spec.languages(item):
                yield TestPlanEntry(
                    title=entry_title(item.image, language),
                    tags=tags,
                    language=language,
                    item=item.model_copy(deep=True),
                    index=index,
                )

    @staticmethod
    def merge_tags(*groups: 'Iterable[str]') -> tuple[str, ...]:
        """Merge tag groups preserving first-seen order."""
        return tuple(dict.fromkeys(
            tag
            for group in groups
            for tag in group
        ))
