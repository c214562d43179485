"""Tests for DOM geometry helpers."""

from typing import TYPE_CHECKING

import pytest

from pytest_scrn.browser import DOMRect, find_common_parent, get_union_dom_rect, union_rect
from pytest_scrn.browser.geometry import COMMON_PARENT_SCRIPT

if TYPE_CHECKING:
    from pytest_mock import MockerFixture, MockType


def test_dom_rect_edges() -> None:
    """Derive edges of a rectangle."""
    rect = DOMRect(x=10, y=20, width=30, height=40)

    assert (rect.left, rect.top, rect.right, rect.bottom) == (10, 20, 40, 60)


def test_dom_rect_negative_size() -> None:
    """Derive edges of a rectangle with negative size."""
    rect = DOMRect(x=10, y=20, width=-10, height=-20)

    assert (rect.left, rect.top, rect.right, rect.bottom) == (0, 0, 10, 20)


@pytest.mark.parametrize('rects, expect_rect', (
    pytest.param([], None, id='empty'),
    pytest.param(
        [DOMRect(x=1, y=2, width=3, height=4)],
        DOMRect(x=1, y=2, width=3, height=4),
        id='single',
    ),
    pytest.param(
        [DOMRect(x=0, y=0, width=10, height=10), DOMRect(x=20, y=5, width=10, height=30)],
        DOMRect(x=0, y=0, width=30, height=35),
        id='disjoint',
    ),
    pytest.param(
        [DOMRect(x=0, y=0, width=100, height=100), DOMRect(x=10, y=10, width=10, height=10)],
        DOMRect(x=0, y=0, width=100, height=100),
        id='nested',
    ),
))
def test_union_rect(rects: list[DOMRect], expect_rect: DOMRect | None) -> None:
    """Compute the smallest rectangle containing all rectangles."""
    assert union_rect(rects) == expect_rect


def test_union_rect_contains_all() -> None:
    """Contain every united rectangle."""
    rects = [
        DOMRect(x=5, y=-3, width=7, height=2),
        DOMRect(x=-8, y=4, width=1, height=9),
        DOMRect(x=2, y=2, width=-4, height=6),
    ]

    union = union_rect(rects)

    assert union is not None
    for rect in rects:
        assert union.left <= rect.left
        assert union.top <= rect.top
        assert union.right >= rect.right
        assert union.bottom >= rect.bottom


def handle(mocker: 'MockerFixture', box: dict | None) -> 'MockType':
    """Create a mocked element handle with a bounding box."""
    element = mocker.MagicMock()
    element.bounding_box.return_value = box
    return element


def test_get_union_dom_rect(mocker: 'MockerFixture') -> None:
    """Unite rendered elements, ignoring elements without a box."""
    handles = [
        handle(mocker, {'x': 10, 'y': 10, 'width': 10, 'height': 10}),
        handle(mocker, None),
        handle(mocker, {'x': 30, 'y': 0, 'width': 10, 'height': 10}),
    ]

    assert get_union_dom_rect(handles) == DOMRect(x=10, y=0, width=30, height=20)


def test_get_union_dom_rect_relative(mocker: 'MockerFixture') -> None:
    """Measure the union against an ancestor."""
    handles = [handle(mocker, {'x': 110, 'y': 220, 'width': 10, 'height': 10})]
    parent = handle(mocker, {'x': 100, 'y': 200, 'width': 500, 'height': 500})

    assert get_union_dom_rect(handles, relative_to=parent) == DOMRect(x=10, y=20, width=10, height=10)


def test_get_union_dom_rect_not_rendered(mocker: 'MockerFixture') -> None:
    """Fail when no element is rendered."""
    with pytest.raises(ValueError, match=r'^None of the selected elements is rendered'):
        get_union_dom_rect([handle(mocker, None)])


def test_find_common_parent(mocker: 'MockerFixture', page: 'MockType') -> None:
    """Find the common ancestor in the page."""
    handles = [mocker.MagicMock(), mocker.MagicMock()]

    parent = find_common_parent(page, handles)

    page.evaluate_handle.assert_called_once_with(COMMON_PARENT_SCRIPT, handles)
    assert parent is page.evaluate_handle.return_value.as_element.return_value


def test_find_common_parent_without_elements(page: 'MockType') -> None:
    """Return nothing without elements."""
    assert find_common_parent(page, []) is None

    page.evaluate_handle.assert_not_called()
