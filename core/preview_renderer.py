# core/preview_renderer.py
"""
Preview renderer for the site builder editor

The renderer owns the preview document and editor state and delegates
editing to two collaborators: an editable-region overlay and a save
handler. After a save it refreshes the active page through a dispatch
table keyed by page identifier.
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Protocol

from bs4.element import Tag

from core.editable_overlay import EditableOverlay
from core.editor_models import EditorState
from core.page_document import PageDocument
from core.runtime_bindings import apply_data_bindings, apply_data_styles
from core.save_controls import SaveControls
from core.save_coordinator import ContentBatchClient, SaveCoordinator

logger = logging.getLogger(__name__)

PREVIEW_CONTENT_ID = 'preview-content'
DEFAULT_PAGE = 'home'

# page template: compiled state -> markup for #preview-content
PageTemplate = Callable[[Dict[str, Any]], str]


class EditableRegions(Protocol):
    def attach_editable_listeners(self, scope: Optional[Tag] = None) -> int:
        ...


class SaveHandler(Protocol):
    def handle_save(self) -> bool:
        ...


class PreviewRenderer:
    """
    Editable preview of a site page

    Args:
        document: Parsed preview page
        client: Batch update transport used by the default save handler
        state: Editor state; a fresh one is created when omitted
        page_templates: Markup builders for the ``home``/``about``/``works`` pages
        editable_regions: Overlay collaborator (defaults to EditableOverlay)
        save_handler: Save collaborator (defaults to SaveCoordinator)
    """

    def __init__(self,
                 document: PageDocument,
                 client: Optional[ContentBatchClient] = None,
                 state: Optional[EditorState] = None,
                 page_templates: Optional[Mapping[str, PageTemplate]] = None,
                 editable_regions: Optional[EditableRegions] = None,
                 save_handler: Optional[SaveHandler] = None,
                 current_page: str = DEFAULT_PAGE):
        self.document = document
        self.state = state or EditorState()
        self.page_templates = dict(page_templates or {})
        self.current_page = current_page
        self.controls = SaveControls(document, self.state)

        self.editable_regions = editable_regions or EditableOverlay(
            document, self.state, on_change=self._handle_edit
        )
        if save_handler is None:
            if client is None:
                raise ValueError("A content batch client is required when no save handler is given")
            save_handler = SaveCoordinator(
                self.state, client, controls=self.controls, on_saved=self.refresh_current_page
            )
        self.save_handler = save_handler

        self._page_refreshers: Dict[str, Callable[[], None]] = {
            'home': self.update_home_preview,
            'about': self.update_about_preview,
            'works': self.update_works_preview,
        }
        self._default_refresher = self.refresh_bindings

    @property
    def preview_content(self) -> Optional[Tag]:
        return self.document.get_element_by_id(PREVIEW_CONTENT_ID)

    def _handle_edit(self) -> None:
        self.controls.clear_notice()
        self.controls.refresh()

    def attach_editable_listeners(self, scope: Optional[Tag] = None) -> int:
        return self.editable_regions.attach_editable_listeners(scope)

    def handle_save(self) -> bool:
        return self.save_handler.handle_save()

    def setup_save_controls(self) -> None:
        button = self.controls.button
        if button is None:
            return
        self.document.add_event_listener(button, 'click', self._on_save_click)
        self.controls.refresh()

    def _on_save_click(self, _element: Tag) -> None:
        self.handle_save()

    def render(self, page: Optional[str] = None) -> None:
        """Render ``page`` (or the current page) into the preview container"""
        if page:
            self.current_page = page
        self.refresh_current_page()
        self.controls.refresh()

    def refresh_current_page(self) -> None:
        page = self.current_page or DEFAULT_PAGE
        refresher = self._page_refreshers.get(page, self._default_refresher)
        refresher()

    def update_home_preview(self) -> None:
        self._render_page('home')

    def update_about_preview(self) -> None:
        self._render_page('about')

    def update_works_preview(self) -> None:
        self._render_page('works')

    def _render_page(self, page: str) -> None:
        container = self.preview_content
        if container is None:
            return
        template = self.page_templates.get(page)
        if template is not None:
            try:
                self.document.set_inner_html(container, template(self.state.compiled or {}))
            except Exception as e:
                logger.error(f"Rendering {page} preview failed: {e}", exc_info=True)
        self._bind(container)

    def refresh_bindings(self) -> None:
        """Re-apply styles, bindings and editing to whatever is rendered"""
        container = self.preview_content
        if container is None:
            return
        self._bind(container)

    def _bind(self, container: Tag) -> None:
        apply_data_styles(self.document, container)
        apply_data_bindings(self.document, container, self.state.compiled)
        self.attach_editable_listeners(container)
