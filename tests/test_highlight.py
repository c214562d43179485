"""Tests for the highlight action handler."""

from typing import TYPE_CHECKING, Any

import pytest

from pytest_scrn.builtins.highlight import (
    OVERLAY_SCRIPT,
    RESTORE_SCRIPT,
    SETTLE_DELAY,
    STYLE_SCRIPT,
    highlight,
    highlight_style,
    scale,
)
from pytest_scrn.schema import DEFAULT_HIGHLIGHT_STYLE, HighlightAction, HighlightOptions, ScreenshotSetup

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from pytest_mock import MockerFixture, MockType

    from pytest_scrn.core import ExecutionContext


@pytest.fixture
def run(make_entry: 'Callable[..., Any]',
        make_context: 'Callable[..., ExecutionContext]') -> 'Callable[..., ExecutionContext]':
    """Provide a runner of highlight actions sharing one execution context."""
    contexts: list[ExecutionContext] = []

    def run_highlight(params: Any, **spec: Any) -> 'ExecutionContext':  # noqa: ANN401
        if not contexts:
            entry = make_entry(**spec)
            contexts.append(make_context(entry, ScreenshotSetup.model_validate({
                'screenshots': [entry.item],
                **spec,
            })))

        highlight(HighlightAction.model_validate({'highlight': params}), contexts[0])

        return contexts[0]

    return run_highlight


@pytest.mark.parametrize('params, global_style, expect_style', (
    pytest.param({}, None, DEFAULT_HIGHLIGHT_STYLE, id='default'),
    pytest.param({}, {'outline-color': 'red'}, {**DEFAULT_HIGHLIGHT_STYLE, 'outline-color': 'red'}, id='global'),
    pytest.param({'border': '1px solid red'}, None, {'border': '1px solid red'}, id='border string'),
    pytest.param(
        {'border': {'outline-offset': '0'}},
        None,
        {**DEFAULT_HIGHLIGHT_STYLE, 'outline-offset': '0'},
        id='border mapping',
    ),
    pytest.param(
        {'styles': {'background-color': 'yellow'}},
        None,
        {'background-color': 'yellow'},
        id='styles',
    ),
    pytest.param(
        {'styles': {'opacity': 0.5}, 'border': '2px dashed blue'},
        None,
        {'opacity': 0.5, 'border': '2px dashed blue'},
        id='styles and border',
    ),
))
def test_highlight_style(make_entry: 'Callable[..., Any]', make_context: 'Callable[..., Any]',
                         params: dict, global_style: dict | None, expect_style: dict) -> None:
    """Resolve the CSS of a highlight."""
    entry = make_entry(**{'global': {'highlightStyle': global_style}})
    context = make_context(entry, ScreenshotSetup.model_validate({
        'global': {'highlightStyle': global_style},
        'screenshots': [entry.item],
    }))

    assert highlight_style(HighlightOptions(selector='h1', **params), context) == expect_style


@pytest.mark.parametrize('value, total, expect_value', (
    pytest.param(None, 200, 200, id='not set'),
    pytest.param(0.5, 200, 100, id='fraction'),
    pytest.param(1, 200, 200, id='whole'),
    pytest.param(50, 200, 50, id='pixels'),
))
def test_scale(value: float | None, total: float, expect_value: float) -> None:
    """Resolve highlight sizes."""
    assert scale(value, total) == expect_value


def test_highlight_single_element(run: 'Callable[..., Any]', page: 'MockType',
                                  mocker: 'MockerFixture') -> None:
    """Style a single selected element directly."""
    handle = mocker.MagicMock()
    handle.get_attribute.return_value = 'color: red'
    page.locator.return_value.element_handles.return_value = [handle]

    context = run('h1')

    page.locator.assert_called_once_with('h1')
    handle.evaluate.assert_called_once_with(STYLE_SCRIPT, DEFAULT_HIGHLIGHT_STYLE)
    assert context.highlighted == [(handle, 'color: red')]
    assert context.overlays == []


def test_highlight_multiple_elements(run: 'Callable[..., Any]', page: 'MockType',
                                     mocker: 'MockerFixture') -> None:
    """Cover multiple elements with an overlay on their common parent."""
    first, second, container, overlay = (mocker.MagicMock() for _ in range(4))
    first.bounding_box.return_value = {'x': 110, 'y': 120, 'width': 50, 'height': 10}
    second.bounding_box.return_value = {'x': 110, 'y': 140, 'width': 100, 'height': 10}
    container.bounding_box.return_value = {'x': 100, 'y': 100, 'width': 500, 'height': 500}
    container.get_attribute.return_value = None
    container.evaluate_handle.return_value.as_element.return_value = overlay

    page.locator.return_value.element_handles.return_value = [first, second]
    page.evaluate_handle.return_value.as_element.return_value = container

    context = run({'selector': 'li', 'width': 0.5})

    page.wait_for_timeout.assert_called_once_with(SETTLE_DELAY)
    container.evaluate.assert_called_once_with(STYLE_SCRIPT, {'position': 'relative'})

    ((script, css), _) = container.evaluate_handle.call_args

    assert script == OVERLAY_SCRIPT
    assert css == {
        'position': 'absolute',
        'top': '20.0px',
        'left': '10.0px',
        'width': '50.0px',
        'height': '30.0px',
        'z-index': 9999,
        'pointer-events': 'none',
        **DEFAULT_HIGHLIGHT_STYLE,
    }
    assert context.overlays == [overlay]
    assert context.highlighted == [(container, None)]


def test_highlight_body_fallback(run: 'Callable[..., Any]', page: 'MockType',
                                 mocker: 'MockerFixture') -> None:
    """Draw the overlay on the body without a common parent."""
    element, body = mocker.MagicMock(), mocker.MagicMock()
    element.bounding_box.return_value = {'x': 10, 'y': 10, 'width': 10, 'height': 10}
    body.bounding_box.return_value = {'x': 0, 'y': 0, 'width': 100, 'height': 100}

    page.locator.return_value.element_handles.return_value = [element]
    page.evaluate_handle.return_value.as_element.return_value = None
    page.query_selector.return_value = body

    context = run({'selector': 'h1', 'height': 40})

    page.query_selector.assert_called_once_with('body')
    body.evaluate_handle.assert_called_once()
    assert body.evaluate_handle.call_args.args[1]['height'] == '40px'
    assert context.highlighted == []


def test_highlight_clear(run: 'Callable[..., Any]', page: 'MockType', mocker: 'MockerFixture') -> None:
    """Restore all highlighted elements before highlighting again."""
    first, second = mocker.MagicMock(), mocker.MagicMock()
    first.get_attribute.return_value = None
    second.get_attribute.return_value = 'display: block'
    page.locator.return_value.element_handles.side_effect = [[first], [second]]

    run('h1')
    context = run({'selector': 'h2', 'clear': True})

    first.evaluate.assert_called_with(RESTORE_SCRIPT, None)
    assert context.highlighted == [(second, 'display: block')]


def test_highlight_no_elements(run: 'Callable[..., Any]', page: 'MockType') -> None:
    """Fail highlighting a selector matching no element."""
    page.locator.return_value.element_handles.return_value = []

    with pytest.raises(ValueError, match=r"^No element matches 'h1'"):
        run('h1')


def test_highlight_language_restricted(run: 'Callable[..., Any]', page: 'MockType') -> None:
    """Skip highlights whose selector does not apply to the entry language."""
    context = run([{'selector': 'h1', 'language': ['de', 'fr']}])

    page.locator.assert_not_called()
    assert context.highlighted == []
