"""Playwright browser sessions.

A single browser process is shared by all entries of a pytest session,
while every entry gets a fresh browser context, so cookies, storage and
DOM state never leak from one entry into another.
"""

from base64 import b64encode
from logging import getLogger
from typing import TYPE_CHECKING

from playwright.sync_api import sync_playwright

if TYPE_CHECKING:
    from playwright.sync_api import Browser, BrowserContext, Playwright

if TYPE_CHECKING:
    from pytest_scrn.core import TestPlanEntry
    from pytest_scrn.settings import ScrnSettings

logger = getLogger(__name__)


class BrowserSession:
    """Isolated browser context with a single page."""

    def __init__(self, context: 'BrowserContext') -> None:
        """Open a page in a fresh browser context.

        Args:
            context: Browser context owned by the session.
        """
        self.context = context
        self.page = context.new_page()

    def login(self, username: str, password: str) -> None:
        """Send basic authentication with all further requests."""
        token = b64encode(f'{username}:{password}'.encode()).decode('ascii')
        self.context.set_extra_http_headers({'Authorization': f'Basic {token}'})

    def close(self) -> None:
        """Close the browser context and its page."""
        self.context.close()


class BrowserSessionFactory:
    """Factory of isolated sessions sharing one lazily launched browser."""

    def __init__(self, settings: 'ScrnSettings') -> None:
        """Initialize a session factory.

        Args:
            settings: Runtime settings selecting the browser.
        """
        self.settings = settings

        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    @property
    def browser(self) -> 'Browser':
        """Shared browser, launched on first use."""
        if self._browser is None:
            self._playwright = sync_playwright().start()
            browser_type = getattr(self._playwright, self.settings.browser)

            logger.debug('Launching %s browser', self.settings.browser)
            self._browser = browser_type.launch(headless=self.settings.headless)

        return self._browser

    def __call__(self, entry: 'TestPlanEntry') -> BrowserSession:
        """Open a fresh session for an entry.

        The browser context uses the entry language as its locale.

        Args:
            entry: Plan entry the session is opened for.

        Returns:
            New session.
        """
        logger.debug('Opening session for %r', entry.title)
        context = self.browser.new_context(locale=entry.language)
        try:
            return BrowserSession(context)

        except Exception:
            context.close()
            raise

    def close(self) -> None:
        """Close the shared browser, if it was launched."""
        if self._browser is not None:
            self._browser.close()
            self._browser = None

        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None
