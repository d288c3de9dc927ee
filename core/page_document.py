# core/page_document.py
"""
Rendered page model used by the preview editor

Wraps a BeautifulSoup tree and adds the small amount of DOM behaviour the
editor relies on: element lookup, content access and per-element event
listeners.
"""

from typing import Callable, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup
from bs4.element import Tag

Listener = Callable[[Tag], None]


class PageDocument:
    """Parsed preview page with event listener support"""

    def __init__(self, html: str = ''):
        self.soup = BeautifulSoup(html or '', 'html.parser')
        # id(element) -> (element, {event: [listeners]})
        self._listeners: Dict[int, Tuple[Tag, Dict[str, List[Listener]]]] = {}

    @property
    def root(self) -> BeautifulSoup:
        return self.soup

    @property
    def body(self) -> Tag:
        return self.soup.body or self.soup

    def get_element_by_id(self, element_id: str) -> Optional[Tag]:
        return self.soup.find(id=element_id)

    def select(self, selector: str, scope: Optional[Tag] = None) -> List[Tag]:
        return (scope if scope is not None else self.soup).select(selector)

    def create_element(self, name: str, **attrs) -> Tag:
        return self.soup.new_tag(name, attrs=attrs)

    @staticmethod
    def inner_html(element: Tag) -> str:
        return element.decode_contents()

    @staticmethod
    def text_content(element: Tag) -> str:
        return element.get_text()

    def set_inner_html(self, element: Tag, markup: str) -> None:
        self.forget(element)
        element.clear()
        fragment = BeautifulSoup(markup or '', 'html.parser')
        for child in list(fragment.contents):
            element.append(child.extract())

    def set_text(self, element: Tag, text: str) -> None:
        self.forget(element)
        element.string = text or ''

    def contains(self, element: Tag) -> bool:
        return any(parent is self.soup for parent in element.parents)

    def forget(self, scope: Tag) -> int:
        """
        Drop the listeners of every element below ``scope``

        Called before ``scope`` loses its children.

        Returns:
            Number of elements whose listeners were dropped
        """
        dropped = 0
        for element in scope.find_all(True):
            entry = self._listeners.get(id(element))
            if entry is not None and entry[0] is element:
                del self._listeners[id(element)]
                dropped += 1
        return dropped

    @property
    def tracked_element_count(self) -> int:
        return len(self._listeners)

    def add_event_listener(self, element: Tag, event: str, listener: Listener) -> None:
        entry = self._listeners.get(id(element))
        if entry is None or entry[0] is not element:
            entry = (element, {})
            self._listeners[id(element)] = entry
        handlers = entry[1].setdefault(event, [])
        if listener not in handlers:
            handlers.append(listener)

    def remove_event_listener(self, element: Tag, event: str, listener: Listener) -> None:
        entry = self._listeners.get(id(element))
        if entry is None or entry[0] is not element:
            return
        handlers = entry[1].get(event, [])
        if listener in handlers:
            handlers.remove(listener)

    def listener_count(self, element: Tag, event: str) -> int:
        entry = self._listeners.get(id(element))
        if entry is None or entry[0] is not element:
            return 0
        return len(entry[1].get(event, []))

    def dispatch_event(self, element: Tag, event: str) -> int:
        """
        Invoke the listeners registered for ``event`` on ``element``

        Returns:
            Number of listeners invoked
        """
        entry = self._listeners.get(id(element))
        if entry is None or entry[0] is not element:
            return 0
        handlers = list(entry[1].get(event, []))
        for handler in handlers:
            handler(element)
        return len(handlers)

    def render(self) -> str:
        return str(self.soup)
