"""DOM geometry helpers.

Helpers computing the union bounding rectangle of rendered elements and
the nearest common ancestor of a set of elements. Rectangles are always
axis-aligned and measured against the viewport unless an ancestor is given.
"""

from typing import TYPE_CHECKING

from pydantic import Field

from pytest_scrn.models import SchemaModel

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle, Page

#: Script returning the nearest visible common ancestor of elements.
#: Ancestors rendered with `display: contents` have an empty box and are
#: skipped, so the result is always an actually rendered element.
COMMON_PARENT_SCRIPT = '''
elements => {
    if (!elements.length) return null;
    let parent = elements[0].parentElement;
    while (parent) {
        const rect = parent.getBoundingClientRect();
        const common = elements.every(e => e !== parent && parent.contains(e));
        if (common && rect.width > 0 && rect.height > 0) return parent;
        parent = parent.parentElement;
    }
    return null;
}
'''


class DOMRect(SchemaModel):
    """Axis-aligned rectangle, as returned by `getBoundingClientRect`."""

    x: float = Field(default=0)
    y: float = Field(default=0)
    width: float = Field(default=0)
    height: float = Field(default=0)

    @property
    def left(self) -> float:
        """Left edge."""
        return min(self.x, self.x + self.width)

    @property
    def top(self) -> float:
        """Top edge."""
        return min(self.y, self.y + self.height)

    @property
    def right(self) -> float:
        """Right edge."""
        return max(self.x, self.x + self.width)

    @property
    def bottom(self) -> float:
        """Bottom edge."""
        return max(self.y, self.y + self.height)

    def relative_to(self, origin: 'DOMRect') -> 'DOMRect':
        """Translate the rectangle into the coordinates of another one."""
        return DOMRect(
            x=self.x - origin.x,
            y=self.y - origin.y,
            width=self.width,
            height=self.height,
        )


def union_rect(rects: 'Iterable[DOMRect]') -> DOMRect | None:
    """Compute the union bounding box of rectangles.

    Args:
        rects: Rectangles to unite.

    Returns:
        The smallest rectangle containing all given rectangles, or `None`
        if no rectangle is given.
    """
    rects = tuple(rects)
    if not rects:
        return None

    left = min(rect.left for rect in rects)
    top = min(rect.top for rect in rects)
    right = max(rect.right for rect in rects)
    bottom = max(rect.bottom for rect in rects)

    return DOMRect(x=left, y=top, width=right - left, height=bottom - top)


def get_bounding_rect(handle: 'ElementHandle') -> DOMRect | None:
    """Return the rendered box of an element, or `None` if it is not visible."""
    box = handle.bounding_box()
    if box is None:
        return None

    return DOMRect.model_validate(box)


def get_union_dom_rect(handles: 'Sequence[ElementHandle]',
                       relative_to: 'ElementHandle | None' = None) -> DOMRect:
    """Compute the union bounding box of rendered elements.

    Args:
        handles: Elements to measure. Elements without a rendered box
            are ignored.
        relative_to: Optional ancestor whose origin the result is
            measured against.

    Returns:
        Union rectangle of all rendered elements.

    Raises:
        ValueError: If none of the elements is rendered.
    """
    union = union_rect(
        rect
        for handle in handles
        if (rect := get_bounding_rect(handle)) is not None
    )
    if union is None:
        raise ValueError('None of the selected elements is rendered')

    if relative_to is not None and (origin := get_bounding_rect(relative_to)) is not None:
        return union.relative_to(origin)

    return union


def find_common_parent(page: 'Page', handles: 'Sequence[ElementHandle]') -> 'ElementHandle | None':
    """Find the nearest rendered common ancestor of elements.

    Args:
        page: Page holding the elements.
        handles: Elements whose common ancestor is searched.

    Returns:
        The common ancestor, or `None` if there is none.
    """
    if not handles:
        return None

    return page.evaluate_handle(COMMON_PARENT_SCRIPT, list(handles)).as_element()
