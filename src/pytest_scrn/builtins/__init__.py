"""Built-in action handlers.

All built-in kinds except `highlight` are always registered. The
`highlight` handler is registered only when highlighting is enabled.
"""

from .handlers import blur, click, file_upload, focus, screenshot, scroll_to, text, type_, wait
from .highlight import highlight

#: Handlers registered with every registry, keyed by action kind.
BUILTIN_HANDLERS = {
    'click': click,
    'type': type_,
    'text': text,
    'screenshot': screenshot,
    'fileUpload': file_upload,
    'wait': wait,
    'blur': blur,
    'focus': focus,
    'scrollTo': scroll_to,
}

__all__ = (
    'BUILTIN_HANDLERS',
    'blur',
    'click',
    'file_upload',
    'focus',
    'highlight',
    'screenshot',
    'scroll_to',
    'text',
    'type_',
    'wait',
)
