"""Browser automation adapter.

Playwright sessions executing plan entries, and DOM geometry helpers
used by the highlight and screenshot handlers.
"""

from .geometry import DOMRect, find_common_parent, get_union_dom_rect, union_rect
from .session import BrowserSession, BrowserSessionFactory

__all__ = (
    'BrowserSession',
    'BrowserSessionFactory',
    'DOMRect',
    'find_common_parent',
    'get_union_dom_rect',
    'union_rect',
)
