# core/runtime_bindings.py
"""
Data bindings between the compiled site state and rendered markup
"""

import logging
from typing import Any, Dict, Optional

from bs4.element import Tag

from core.content_paths import get_value_at_path
from core.editor_models import ContentType
from core.page_document import PageDocument

logger = logging.getLogger(__name__)

IMAGE_STYLE = (
    "background-image: url('{url}'); background-size: cover; "
    "background-position: center; background-repeat: no-repeat;"
)


def content_type_of(element: Tag) -> ContentType:
    raw = element.get('data-type') or element.get('data-content-type') or 'text'
    return ContentType.from_attribute(raw)


def _append_style(element: Tag, style: str) -> None:
    current = element.get('style') or ''
    separator = '; ' if current and not current.strip().endswith(';') else ''
    element['style'] = current + separator + style


def _remove_style_property(element: Tag, prop: str) -> None:
    current = element.get('style') or ''
    kept = [
        part for part in current.split(';')
        if part.strip() and part.split(':', 1)[0].strip().lower() != prop
    ]
    if kept:
        element['style'] = '; '.join(part.strip() for part in kept) + ';'
    elif element.has_attr('style'):
        del element['style']


def apply_data_styles(document: PageDocument, scope: Optional[Tag] = None) -> None:
    """Move ``data-style`` attributes into ``style`` (one-time)"""
    try:
        for element in document.select('[data-style]', scope):
            data = element.get('data-style')
            if data:
                _append_style(element, data)
            del element['data-style']
    except Exception as e:
        logger.error(f"Applying data styles failed: {e}", exc_info=True)


def apply_data_bindings(document: PageDocument,
                        scope: Optional[Tag] = None,
                        compiled: Optional[Dict[str, Any]] = None) -> None:
    """
    Populate ``[data-content-path]`` elements from the compiled state

    Missing values clear the element; image regions get a background-image
    style instead of content.
    """
    try:
        data_root = compiled or {}
        for element in document.select('[data-content-path]', scope):
            path = element.get('data-content-path')
            if not path:
                continue
            content_type = content_type_of(element)
            value = get_value_at_path(data_root, path)

            if value is None:
                if content_type is ContentType.HTML:
                    document.set_inner_html(element, '')
                elif content_type is ContentType.IMAGE_URL:
                    _remove_style_property(element, 'background-image')
                else:
                    document.set_text(element, '')
                continue

            if content_type is ContentType.HTML:
                document.set_inner_html(element, str(value))
            elif content_type is ContentType.IMAGE_URL:
                _bind_image(document, element, str(value))
            else:
                document.set_text(element, str(value))
    except Exception as e:
        logger.error(f"Applying data bindings failed: {e}", exc_info=True)


def _bind_image(document: PageDocument, element: Tag, url: str) -> None:
    if not url:
        _remove_style_property(element, 'background-image')
        return
    _append_style(element, IMAGE_STYLE.format(url=url))
    # Placeholder content and the helper caption go away once an image is set
    document.set_inner_html(element, '')
    caption = element.find_next_sibling()
    if caption is not None and caption.name == 'p':
        _append_style(caption, 'display: none;')
