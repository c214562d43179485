"""Built-in action handlers.

Each handler performs exactly one action on the page of an execution
context and signals failure by raising. Handlers may wait for elements,
navigation or a fixed delay, but never retry: retry policy belongs to the
caller.

Actions whose selector does not apply to the entry language are skipped.
"""

from logging import getLogger
from mimetypes import guess_type
from re import compile as regexp
from re import escape
from typing import TYPE_CHECKING

from playwright.sync_api import expect

from pytest_scrn.browser.geometry import get_union_dom_rect
from pytest_scrn.schema.actions import ScrollToOptions, SelectorOptions, WaitAssertion

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from playwright.sync_api import Locator

if TYPE_CHECKING:
    from pytest_scrn.core import ExecutionContext
    from pytest_scrn.schema import (
        BlurAction,
        ClickAction,
        ClipArea,
        FileUploadAction,
        FocusAction,
        ScreenshotAction,
        ScrollToAction,
        TextAction,
        TypeAction,
        WaitAction,
    )

    type Assertion = Callable[[Locator, list[str], int], None]

#: Text inputs filled by form typing.
FORM_INPUTS_SELECTOR = 'input[type=text]'

#: Script scrolling an element, or the document, to an offset or a named position.
SCROLL_SCRIPT = '''
(target, {position, x, y}) => {
    const width = target.scrollWidth - target.clientWidth;
    const height = target.scrollHeight - target.clientHeight;
    const positions = {
        topLeft: [0, 0], top: [width / 2, 0], topRight: [width, 0],
        left: [0, height / 2], center: [width / 2, height / 2], right: [width, height / 2],
        bottomLeft: [0, height], bottom: [width / 2, height], bottomRight: [width, height],
    };
    const [left, top] = position
        ? positions[position]
        : [x ?? target.scrollLeft, y ?? target.scrollTop];
    target.scrollTo(left, top);
}
'''

#: Script replacing the text content of elements.
TEXT_SCRIPT = '(elements, value) => elements.forEach(element => { element.textContent = value; })'

logger = getLogger(__name__)


def _skipped(kind: str, selector: object, context: 'ExecutionContext') -> None:
    """Log an action skipped for the entry language."""
    logger.debug(
        'Skipping %s on %r: selector %r does not apply to %r',
        kind, context.entry.title, selector, context.language,
    )


def click(action: 'ClickAction', context: 'ExecutionContext') -> None:
    """Click the selected element, or every selected element."""
    options = action.options()
    if (selector := context.selector(options)) is None:
        return _skipped('click', options, context)

    locator = context.locate(selector)
    if not options.multiple:
        locator.click(force=options.force)
        return None

    locator.first.wait_for(state='attached')
    for element in locator.all():
        element.click(force=options.force)

    return None


def type_(action: 'TypeAction', context: 'ExecutionContext') -> None:
    """Type into the selected element, or fill the text inputs of a form.

    A list of values fills the text inputs of the selected form in order;
    a list of lists fills and submits the form once per list. Surplus
    values are ignored, `None` values leave their input untouched.
    """
    options = action.type
    if (selector := context.selector(options)) is None:
        return _skipped('type', options, context)

    locator = context.locate(selector)

    if isinstance(options.value, str):
        if options.clear:
            locator.clear()
        locator.press_sequentially(options.value)
        return None

    rows = options.value if options.value and isinstance(options.value[0], list) else [options.value]
    submit = context.selector(options.submit) if options.submit is not None else None

    for row in rows:
        inputs = locator.locator(FORM_INPUTS_SELECTOR)
        for index, value in enumerate(row[:inputs.count()]):
            if value is None:
                continue

            field = inputs.nth(index)
            if options.clear:
                field.clear()
            field.press_sequentially(value)

        if submit is not None and (button := context.locate(submit)).count():
            button.first.click()

    return None


def text(action: 'TextAction', context: 'ExecutionContext') -> None:
    """Replace the text content of the selected elements."""
    options = action.text
    if (selector := context.selector(options)) is None:
        return _skipped('text', options, context)

    locator = context.locate(selector)
    locator.first.wait_for(state='attached')
    locator.evaluate_all(TEXT_SCRIPT, options.value)

    return None


def file_upload(action: 'FileUploadAction', context: 'ExecutionContext') -> None:
    """Attach a file to the selected file input.

    Raises:
        FileNotFoundError: If the uploaded file does not exist.
    """
    options = action.options()
    if (selector := context.selector(options)) is None:
        return _skipped('fileUpload', options, context)

    path = context.resolve_file(options.file)
    if not path.is_file():
        raise FileNotFoundError(f'File {options.file!r} not found')

    name = options.file_name or path.name
    mime_type = options.mime_type or guess_type(name)[0] or 'application/octet-stream'

    logger.debug('Uploading %s to %s', path, selector)
    context.locate(selector).set_input_files({
        'name': name,
        'mimeType': mime_type,
        'buffer': path.read_bytes(),
    })

    return None


def _assert_attribute(locator: 'Locator', values: list[str], timeout: int) -> None:
    """Assert an attribute, given as name and optional value."""
    if not values:
        raise ValueError('Attribute assertion requires an attribute name')

    name, *value = values
    if value:
        expect(locator.first).to_have_attribute(name, value[0], timeout=timeout)
    else:
        expect(locator.first).to_have_attribute(name, regexp('.*'), timeout=timeout)


#: Supported wait assertions, keyed by chainer.
WAIT_ASSERTIONS: dict[str, 'Assertion'] = {
    'exist': lambda locator, _, timeout: expect(locator.first).to_be_attached(timeout=timeout),
    'not.exist': lambda locator, _, timeout: expect(locator).to_have_count(0, timeout=timeout),
    'be.visible': lambda locator, _, timeout: expect(locator.first).to_be_visible(timeout=timeout),
    'not.be.visible': lambda locator, _, timeout: expect(locator.first).to_be_hidden(timeout=timeout),
    'be.hidden': lambda locator, _, timeout: expect(locator.first).to_be_hidden(timeout=timeout),
    'be.enabled': lambda locator, _, timeout: expect(locator.first).to_be_enabled(timeout=timeout),
    'be.disabled': lambda locator, _, timeout: expect(locator.first).to_be_disabled(timeout=timeout),
    'be.checked': lambda locator, _, timeout: expect(locator.first).to_be_checked(timeout=timeout),
    'have.length': lambda locator, values, timeout: expect(locator).to_have_count(
        int(values[0]), timeout=timeout,
    ),
    'contain': lambda locator, values, timeout: expect(locator.first).to_contain_text(
        values[0], timeout=timeout,
    ),
    'have.text': lambda locator, values, timeout: expect(locator.first).to_have_text(
        values[0], timeout=timeout,
    ),
    'have.value': lambda locator, values, timeout: expect(locator.first).to_have_value(
        values[0], timeout=timeout,
    ),
    'have.class': lambda locator, values, timeout: expect(locator.first).to_have_class(
        regexp(rf'(^|\s){escape(values[0])}(\s|$)'), timeout=timeout,
    ),
    'have.attr': _assert_attribute,
}

#: Wait assertions requiring a value.
VALUE_ASSERTIONS = frozenset({'have.length', 'contain', 'have.text', 'have.value', 'have.class'})


def wait(action: 'WaitAction', context: 'ExecutionContext') -> None:
    """Wait for a fixed delay, or for an element to satisfy an assertion.

    Raises:
        ValueError: If the assertion chainer is not supported.
        AssertionError: If the assertion does not hold within the timeout.
    """
    if isinstance(action.wait, int):
        context.page.wait_for_timeout(action.wait)
        return None

    options = action.wait
    if (selector := context.selector(options)) is None:
        return _skipped('wait', options, context)

    assertion = options.assertion
    if assertion is None:
        assertion = WaitAssertion(chainer='exist')
    elif isinstance(assertion, str):
        assertion = WaitAssertion(chainer=assertion)

    if (check := WAIT_ASSERTIONS.get(assertion.chainer)) is None:
        raise ValueError(f'Unsupported assertion {assertion.chainer!r}')

    values = assertion.value if isinstance(assertion.value, list) else [assertion.value]
    if assertion.chainer in VALUE_ASSERTIONS and values[0] is None:
        raise ValueError(f'Assertion {assertion.chainer!r} requires a value')

    logger.debug('Waiting for %s to %s', selector, assertion.chainer)
    check(context.locate(selector), values, options.timeout)

    return None


def _focus_options(params: 'str | list[str] | SelectorOptions') -> SelectorOptions:
    """Normalize parameters of the blur and focus actions."""
    if isinstance(params, SelectorOptions):
        return params

    return SelectorOptions(selector=params)


def blur(action: 'BlurAction', context: 'ExecutionContext') -> None:
    """Remove focus from the selected element."""
    options = _focus_options(action.blur)
    if (selector := context.selector(options)) is None:
        return _skipped('blur', options, context)

    context.locate(selector).blur()

    return None


def focus(action: 'FocusAction', context: 'ExecutionContext') -> None:
    """Focus the selected element."""
    options = _focus_options(action.focus)
    if (selector := context.selector(options)) is None:
        return _skipped('focus', options, context)

    context.locate(selector).focus()

    return None


def scroll_to(action: 'ScrollToAction', context: 'ExecutionContext') -> None:
    """Scroll an element into view, or scroll the page or an element to a position."""
    params = action.scroll_to
    options = params if isinstance(params, ScrollToOptions) else ScrollToOptions(selector=params)

    offsets = {'position': options.position, 'x': options.x, 'y': options.y}
    has_offsets = any(value is not None for value in offsets.values())
    has_selector = any((options.selector, options.data_cy, options.localized))

    if not has_selector:
        context.page.evaluate(f'args => ({SCROLL_SCRIPT})(document.scrollingElement, args)', offsets)
        return None

    if (selector := context.selector(options)) is None:
        return _skipped('scrollTo', options, context)

    locator = context.locate(selector)
    if has_offsets:
        locator.evaluate(SCROLL_SCRIPT, offsets)
    else:
        locator.scroll_into_view_if_needed()

    return None


def capture_options(context: 'ExecutionContext') -> dict[str, object]:
    """Build Playwright screenshot options from the capture settings."""
    options: dict[str, object] = {
        'scale': 'device' if context.setting('scale', False) else 'css',
    }

    if context.setting('disable_timers_and_animations', True):
        options['animations'] = 'disabled'

    timeouts = context.setting('timeouts')
    if timeouts is not None and timeouts.screenshot is not None:
        options['timeout'] = timeouts.screenshot

    return options


def resolve_clip(clip: 'ClipArea', viewport: tuple[int, int]) -> dict[str, int]:
    """Resolve a clip area, subtracting negative sizes from the viewport."""
    width, height = viewport

    return {
        'x': max(clip.x, 0),
        'y': max(clip.y, 0),
        'width': width + clip.width if clip.width < 0 else clip.width,
        'height': height + clip.height if clip.height < 0 else clip.height,
    }


def screenshot(action: 'ScreenshotAction', context: 'ExecutionContext') -> None:
    """Capture the page, a clip area of it, or the selected elements.

    Multiple selected elements, or a padded element, are captured as the
    union of their boxes extended by the padding.

    Raises:
        ValueError: If a selector matches no element.
    """
    options = action.options()
    name = options.path or context.entry.image

    has_selector = any((options.selector, options.data_cy, options.localized))
    selector = context.selector(options) if has_selector else None
    if has_selector and selector is None:
        return _skipped('screenshot', options, context)

    path = context.artifact_path(name)
    path.parent.mkdir(parents=True, exist_ok=True)

    kwargs = capture_options(context)
    padding = context.setting('padding', 0)

    if selector is not None:
        locator = context.locate(selector)
        locator.first.wait_for(state='visible')
        handles = locator.element_handles()
        if not handles:
            raise ValueError(f'No element matches {selector!r}')

        if len(handles) == 1 and not padding:
            handles[0].screenshot(path=path, **kwargs)
        else:
            rect = get_union_dom_rect(handles)
            context.page.screenshot(path=path, clip={
                'x': max(rect.x - padding, 0),
                'y': max(rect.y - padding, 0),
                'width': rect.width + padding * 2,
                'height': rect.height + padding * 2,
            }, **kwargs)

    elif options.clip is not None:
        context.page.screenshot(path=path, clip=resolve_clip(options.clip, context.viewport), **kwargs)

    else:
        full_page = context.setting('capture', 'viewport') == 'fullPage'
        context.page.screenshot(path=path, full_page=full_page, **kwargs)

    logger.debug('Captured %s for %r', path, context.entry.title)
    context.artifacts.append(path)

    return None
