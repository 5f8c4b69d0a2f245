"""Restyle subscriptions — which documents are displayed, and how to restyle them.

One Subscriptions object is shared by every editor of a process. Editors
register their view on open and unregister on close; configuration reloads
and hotspot clicks then restyle whatever is currently displayed.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable

from papylex.editor import Editor
from papylex.errors import WiringError
from papylex.properties import PropertyRecord
from papylex.styles import STYLE_HOTSPOTS
from papylex.wordlists import WordLists

logger = logging.getLogger(__name__)


class Subscriptions:
    """Process-wide registry of displayed documents and their restyle triggers."""

    def __init__(self) -> None:
        self._editors: dict[Hashable, Editor] = {}
        self.current_view: Hashable | None = None

    def __contains__(self, view: object) -> bool:
        return view in self._editors

    def __len__(self) -> int:
        return len(self._editors)

    def register(self, view: Hashable, editor: Editor) -> bool:
        """Register editor as displayed on view. Declines unusable lexers."""
        if not editor.lexer.is_usable:
            logger.debug("lexer for view %r has no configuration; not registering", view)
            return False
        existing = self._editors.get(view)
        if existing is not None and existing is not editor:
            raise WiringError(f"view {view!r} already displays another document")
        self._editors[view] = editor
        if self.current_view is None:
            self.current_view = view
        logger.debug("registered view %r", view)
        return True

    def unregister(self, view: Hashable) -> None:
        if self._editors.pop(view, None) is not None:
            logger.debug("unregistered view %r", view)
        if self.current_view == view:
            self.current_view = next(iter(self._editors), None)

    def activate(self, view: Hashable) -> None:
        """Make view the current one."""
        if view not in self._editors:
            raise WiringError(f"view {view!r} is not registered")
        self.current_view = view

    def editor_on_view(self, view: Hashable) -> Editor | None:
        return self._editors.get(view)

    # ------------------------------------------------------------------
    # Restyle triggers
    # ------------------------------------------------------------------

    def restyle_document(self) -> bool:
        """Restyle the document on the current view."""
        if self.current_view is None:
            return False
        return self.restyle_document_on_view(self.current_view)

    def restyle_document_on_view(self, view: Hashable) -> bool:
        """Lex and fold the whole document displayed on view, if any."""
        editor = self._editors.get(view)
        if editor is None:
            return False
        logger.debug("restyling view %r", view)
        editor.restyle()
        return True

    def reload(self, word_lists: WordLists) -> None:
        """Swap the word lists of every displayed document and restyle them."""
        logger.debug("reloading word lists for %d view(s)", len(self._editors))
        for view, editor in list(self._editors.items()):
            editor.lexer.word_lists = word_lists
            self.restyle_document_on_view(view)

    # ------------------------------------------------------------------
    # Hotspots
    # ------------------------------------------------------------------

    def handle_hotspot_click(self, view: Hashable, position: int) -> PropertyRecord | None:
        """Navigate view to the declaration of the property clicked at position."""
        editor = self._editors.get(view)
        if editor is None:
            return None
        run = editor.document.style_run_at(position)
        if run is None or run[2] not in STYLE_HOTSPOTS:
            return None
        name = editor.document.text_range(run[0], run[1])
        record = editor.lexer.properties.lookup(name)
        if record is None:
            return None
        logger.debug("hotspot %r on view %r -> line %d", name, view, record.line)
        editor.goto_line(record.line)
        self.restyle_document_on_view(view)
        return record
