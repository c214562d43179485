"""Test tree construction.

The emitter arranges plan entries into a pure tree of named groups and
tagged executable units. The tree does not touch pytest: a thin adapter
registers it into the host framework afterwards.

Entries sharing a primary tag are placed in a sub-group named after the
tag. Groups keep the first-occurrence order of their tags, untagged
entries stay at the current level.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic import Field

from pytest_scrn.models import SchemaModel

from .planner import TestPlanEntry  # noqa: TC001

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

#: Hook bringing a fresh session into the starting state of an entry.
type SetupHook = Callable[[TestPlanEntry, Any], None]


class TestUnit(SchemaModel):
    """Named executable unit of a single plan entry."""

    __test__ = False

    entry: TestPlanEntry = Field(
        title='Plan entry',
    )

    @property
    def name(self) -> str:
        """Display name of the unit."""
        return self.entry.title

    @property
    def tags(self) -> tuple[str, ...]:
        """Effective tags of the unit."""
        return self.entry.tags

    @property
    def metadata(self) -> dict[str, Any]:
        """Metadata registered with the unit."""
        return self.entry.metadata


class TestGroup(SchemaModel):
    """Named group of units and nested groups.

    A group without a name is transparent: its children are registered
    directly into the group the caller is already inside.
    """

    __test__ = False

    name: str | None = Field(
        default=None,
        title='Group name',
    )

    children: tuple['TestUnit | TestGroup', ...] = Field(
        default=(),
        title='Children',
        description='Units and sub-groups in registration order.',
    )

    before_each: Callable[..., None] | None = Field(
        default=None,
        exclude=True,
        title='Per-unit setup hook',
        description='Runs immediately before every unit of this group.',
    )

    @property
    def units(self) -> tuple[TestUnit, ...]:
        """Units registered directly in this group."""
        return tuple(child for child in self.children if isinstance(child, TestUnit))

    @property
    def groups(self) -> tuple['TestGroup', ...]:
        """Sub-groups of this group."""
        return tuple(child for child in self.children if isinstance(child, TestGroup))

    def walk(self, path: tuple[str, ...] = ()) -> 'Iterator[tuple[tuple[str, ...], TestUnit]]':
        """Iterate all units depth-first with the names of enclosing groups.

        Args:
            path: Names of the groups enclosing this group.

        Yields:
            Tuples of enclosing group names and units.
        """
        if self.name is not None:
            path = (*path, self.name)

        for child in self.children:
            if isinstance(child, TestGroup):
                yield from child.walk(path)
            else:
                yield path, child


TestGroup.model_rebuild()


class TestTreeEmitter:
    """Emitter of test trees from plan entries."""

    __test__ = False

    def __init__(self, before_each: SetupHook | None = None) -> None:
        """Initialize an emitter.

        Args:
            before_each: Hook attached to every emitted group.
        """
        self.before_each = before_each

    def emit(self, entries: 'Iterable[TestPlanEntry]', *,
             title: str | None = None) -> TestGroup:
        """Arrange entries into a test tree.

        Args:
            entries: Plan entries in plan order.
            title: Name of the top-level group. Without a title the
                top-level group is transparent.

        Returns:
            The root group of the tree.
        """
        children: list[TestUnit | str] = []
        tagged: dict[str, list[TestUnit]] = {}

        for entry in entries:
            unit = TestUnit(entry=entry)

            if (tag := entry.primary_tag) is None:
                children.append(unit)
            elif tag in tagged:
                tagged[tag].append(unit)
            else:
                tagged[tag] = [unit]
                children.append(tag)

        return TestGroup(
            name=title,
            children=tuple(
                TestGroup(
                    name=child,
                    children=tuple(tagged[child]),
                    before_each=self.before_each,
                ) if isinstance(child, str) else child
                for child in children
            ),
            before_each=self.before_each,
        )
