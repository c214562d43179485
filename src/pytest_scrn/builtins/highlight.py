"""Highlight action handler.

A single element is highlighted by styling it directly. Multiple elements,
or a highlight with an explicit size, are covered by an overlay drawn on
their nearest common ancestor (or the document body), spanning the union
of their boxes.

Every change is recorded in the execution context so that a later
highlight with `clear: true` restores the page.
"""

from logging import getLogger
from typing import TYPE_CHECKING, Any

from pytest_scrn.browser.geometry import find_common_parent, get_union_dom_rect

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle

if TYPE_CHECKING:
    from pytest_scrn.core import ExecutionContext
    from pytest_scrn.schema import HighlightAction, HighlightOptions

#: Attribute marking highlight overlays.
OVERLAY_ATTRIBUTE = 'data-scrn-highlight'

#: Delay in milliseconds letting elements settle before they are measured.
SETTLE_DELAY = 500

#: Script applying CSS properties to an element.
STYLE_SCRIPT = '''
(element, style) => {
    for (const [name, value] of Object.entries(style)) {
        element.style.setProperty(name, String(value));
    }
}
'''

#: Script appending an overlay to a container and returning it.
OVERLAY_SCRIPT = f'''
(container, style) => {{
    const overlay = document.createElement('div');
    overlay.setAttribute('{OVERLAY_ATTRIBUTE}', '');
    for (const [name, value] of Object.entries(style)) {{
        overlay.style.setProperty(name, String(value));
    }}
    container.appendChild(overlay);
    return overlay;
}}
'''

#: Script restoring the original style attribute of an element.
RESTORE_SCRIPT = '''
(element, style) => {
    if (style === null) element.removeAttribute('style');
    else element.setAttribute('style', style);
}
'''

logger = getLogger(__name__)


def highlight_style(options: 'HighlightOptions', context: 'ExecutionContext') -> dict[str, Any]:
    """Resolve the CSS of a single highlight.

    Explicit styles come first, a string border is used as is and a
    mapping border is merged into the default highlight style. Without
    any of them the default highlight style is used.

    Args:
        options: Highlight parameters.
        context: Execution context of the entry.

    Returns:
        CSS properties of the highlight.
    """
    style: dict[str, Any] = {}

    if options.styles:
        style.update(options.styles)

    if isinstance(options.border, str):
        style['border'] = options.border
    elif options.border is not None:
        style.update({**context.highlight_style, **options.border})

    return style or context.highlight_style


def scale(value: float | None, total: float) -> float:
    """Resolve a highlight size, values up to 1 being a fraction of the total."""
    if value is None:
        return total

    return total * value if value <= 1 else value


def style_element(handle: 'ElementHandle', style: dict[str, Any],
                  context: 'ExecutionContext') -> None:
    """Apply CSS to an element, recording its original style."""
    context.highlighted.append((handle, handle.get_attribute('style')))
    handle.evaluate(STYLE_SCRIPT, style)


def draw_overlay(handles: list['ElementHandle'], style: dict[str, Any],
                 options: 'HighlightOptions', context: 'ExecutionContext') -> None:
    """Cover elements with an absolutely positioned overlay.

    Args:
        handles: Highlighted elements.
        style: CSS of the highlight.
        options: Highlight parameters.
        context: Execution context of the entry.

    Raises:
        ValueError: If no container is found for the overlay.
    """
    context.page.wait_for_timeout(SETTLE_DELAY)

    container = find_common_parent(context.page, handles)
    if container is not None:
        style_element(container, {'position': 'relative'}, context)
    elif (container := context.page.query_selector('body')) is None:
        raise ValueError('Page has no body to draw a highlight on')

    rect = get_union_dom_rect(handles, relative_to=container)

    css = {
        'position': 'absolute',
        'top': f'{rect.y}px',
        'left': f'{rect.x}px',
        'width': f'{scale(options.width, rect.width)}px',
        'height': f'{scale(options.height, rect.height)}px',
        'z-index': 9999,
        'pointer-events': 'none',
        **style,
    }

    if overlay := container.evaluate_handle(OVERLAY_SCRIPT, css).as_element():
        context.overlays.append(overlay)


def clear_highlights(context: 'ExecutionContext') -> None:
    """Remove all overlays and restore all styled elements of an entry."""
    for overlay in context.overlays:
        overlay.evaluate('element => element.remove()')

    for handle, style in reversed(context.highlighted):
        handle.evaluate(RESTORE_SCRIPT, style)

    context.overlays.clear()
    context.highlighted.clear()


def highlight(action: 'HighlightAction', context: 'ExecutionContext') -> None:
    """Visually highlight the selected elements.

    Raises:
        ValueError: If a selector matches no element.
    """
    for options in action.options():
        if options.clear:
            clear_highlights(context)

        if (selector := context.selector(options)) is None:
            if any((options.selector, options.data_cy, options.localized)):
                logger.debug('Skipping highlight of %r for %r', options, context.language)
            continue

        locator = context.locate(selector)
        locator.first.wait_for(state='visible')

        handles = locator.element_handles()
        if not handles:
            raise ValueError(f'No element matches {selector!r}')

        style = highlight_style(options, context)
        if len(handles) > 1 or options.width is not None or options.height is not None:
            draw_overlay(handles, style, options, context)
        else:
            style_element(handles[0], style, context)
