# core/editable_overlay.py
"""
Editable region overlay for the preview page

Every element carrying ``data-content-path`` becomes an editable region
(image regions excepted). Input and blur events copy the element's content
into the local compiled state and mark the path dirty.
"""

import logging
from functools import partial
from typing import Callable, Dict, Optional, Tuple

from bs4.element import Tag

from core.editor_models import ContentType, EditorState
from core.page_document import PageDocument
from core.runtime_bindings import content_type_of

logger = logging.getLogger(__name__)

EDITABLE_SELECTOR = '[data-content-path]'
CHANGE_EVENTS = ('input', 'blur')


class EditableOverlay:
    """Tracks edits made to the editable regions of a preview document"""

    def __init__(self,
                 document: PageDocument,
                 state: EditorState,
                 on_change: Optional[Callable[[], None]] = None):
        self.document = document
        self.state = state
        self.on_change = on_change
        self._bound: Dict[int, Tuple[Tag, Callable[[Tag], None]]] = {}

    def attach_editable_listeners(self, scope: Optional[Tag] = None) -> int:
        """
        Attach change tracking to the editable regions under ``scope``

        Re-attaching to an element replaces its previous handlers.

        Returns:
            Number of elements with listeners attached
        """
        attached = 0
        try:
            self._prune_detached()
            for element in self.document.select(EDITABLE_SELECTOR, scope):
                if content_type_of(element) is ContentType.IMAGE_URL:
                    continue
                if not element.has_attr('contenteditable'):
                    element['contenteditable'] = 'true'
                self._bind(element)
                attached += 1
        except Exception as e:
            logger.error(f"Attaching editable listeners failed: {e}", exc_info=True)
        return attached

    @property
    def bound_count(self) -> int:
        return len(self._bound)

    def _prune_detached(self) -> None:
        for key, (element, handler) in list(self._bound.items()):
            if not self.document.contains(element):
                for event in CHANGE_EVENTS:
                    self.document.remove_event_listener(element, event, handler)
                del self._bound[key]

    def _bind(self, element: Tag) -> None:
        previous = self._bound.get(id(element))
        if previous is not None and previous[0] is element:
            for event in CHANGE_EVENTS:
                self.document.remove_event_listener(element, event, previous[1])

        # Distinct callable per bind; bound methods compare equal
        handler = partial(self._handle_change)
        for event in CHANGE_EVENTS:
            self.document.add_event_listener(element, event, handler)
        self._bound[id(element)] = (element, handler)

    def _handle_change(self, element: Tag) -> None:
        path = element.get('data-content-path')
        if not path:
            return

        content_type = ContentType.HTML if content_type_of(element) is ContentType.HTML else ContentType.TEXT
        if content_type is ContentType.HTML:
            value = self.document.inner_html(element)
        else:
            value = self.document.text_content(element)

        self.state.record_edit(path, content_type, value)
        logger.debug(f"Recorded {content_type.value} edit for '{path}'")

        if self.on_change:
            self.on_change()
