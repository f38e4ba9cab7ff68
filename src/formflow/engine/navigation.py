# src/formflow/engine/navigation.py
"""Page navigation for multi-page forms.

Navigation only looks at visibility: conditionally hidden pages are skipped
in both directions. Whether the current page is valid is decided by the
pipeline before it asks for the next page.
"""

from __future__ import annotations

from formflow.core.form import Form


class PageNavigator:
    """Finds the nearest navigable page from the form's current page."""

    def __init__(self, form: Form) -> None:
        self._form = form

    def get_next_page_id(self, *, reverse: bool = False) -> int | None:
        """Id of the nearest page after (or before, when ``reverse``) the current one.

        Returns:
            The page id, or None when no navigable page exists in that direction
        """
        pages = self._form.pages
        index = self._form.page_index(self._form.current_page)
        candidates = reversed(pages[:index]) if reverse else pages[index + 1 :]
        for page in candidates:
            if not page.is_hidden():
                return page.id
        return None

    def next_page_id(self) -> int | None:
        return self.get_next_page_id()

    def previous_page_id(self) -> int | None:
        return self.get_next_page_id(reverse=True)
