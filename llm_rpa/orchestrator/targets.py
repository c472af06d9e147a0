"""
Browser targets and quick-example instructions.

BrowserTargets tracks which browser tabs a plan can be generated for and
which one is selected. Tabs without a URL (settings pages, blank tabs) are
never offered. The selected tab's URL becomes the request's source URL.

Example:
    >>> targets = BrowserTargets()
    >>> targets.update_tabs([BrowserTab("t1", "Shop", "https://shop.example")])
    >>> targets.source_url
    'https://shop.example'
"""

import logging
from dataclasses import dataclass

from llm_rpa.config.constants import DEFAULT_SOURCE_URL

logger = logging.getLogger(__name__)

# Label -> instruction text
QUICK_EXAMPLES: dict[str, str] = {
    "Fill form": "Fill out the contact form with test data",
    "Extract data": "Extract all product prices from this page",
    "Navigate": "Navigate to the login page and sign in",
}


@dataclass(frozen=True)
class BrowserTab:
    """
    An open browser tab reported by the host.

    Attributes:
        tab_id: Host-assigned identifier
        title: Tab title
        url: Current URL, or None for non-browser tabs
    """

    tab_id: str
    title: str
    url: str | None = None


class BrowserTargets:
    """Available browser tabs and the current selection."""

    def __init__(self, fallback_url: str = DEFAULT_SOURCE_URL):
        self.fallback_url = fallback_url
        self._available: list[BrowserTab] = []
        self._selected: BrowserTab | None = None

    @property
    def available(self) -> list[BrowserTab]:
        return list(self._available)

    @property
    def selected(self) -> BrowserTab | None:
        return self._selected

    @property
    def source_url(self) -> str:
        """URL of the selected tab, or the fallback URL."""
        if self._selected is not None and self._selected.url:
            return self._selected.url
        return self.fallback_url

    def update_tabs(self, tabs: list[BrowserTab]) -> None:
        """
        Replace the known tabs.

        Keeps only tabs with a URL, drops a selection that disappeared, and
        auto-selects the first tab when nothing is selected.
        """
        self._available = [tab for tab in tabs if tab.url]

        if self._selected is not None:
            current = next(
                (t for t in self._available if t.tab_id == self._selected.tab_id),
                None,
            )
            if current is None:
                logger.debug(f"Selected tab {self._selected.tab_id} is gone")
            self._selected = current

        if self._selected is None and self._available:
            self._selected = self._available[0]

    def select(self, tab_id: str) -> BrowserTab:
        """
        Select a tab by id.

        Raises:
            KeyError: If no available tab has this id
        """
        for tab in self._available:
            if tab.tab_id == tab_id:
                self._selected = tab
                return tab
        raise KeyError(f"No browser tab with id '{tab_id}'")
