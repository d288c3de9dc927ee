from typing import Optional

import pytest

from conftest import FakeResponse, FakeSession
from core.editor_models import EditorState
from core.local_storage import LocalStorage
from core.page_document import PageDocument
from core.preview_renderer import PreviewRenderer
from core.save_coordinator import SAVE_FAILED_MESSAGE
from services.website_api import WebsiteStateClient

EDITOR_PAGE = """
<html><body>
  <button id="preview-save-btn">Save</button>
  <span id="preview-save-status"></span>
  <div id="preview-content">
    <h1 data-content-path="title" data-style="color: red">Draft</h1>
  </div>
</body></html>
"""


def home_template(compiled: dict) -> str:
    return '<section class="home"><h1 data-content-path="title"></h1><p data-content-path="bio.headline" data-type="html"></p></section>'


def about_template(compiled: dict) -> str:
    return '<section class="about"><h2 data-content-path="about.heading"></h2></section>'


def _renderer(session: FakeSession, page: str = "home", state: Optional[EditorState] = None) -> PreviewRenderer:
    document = PageDocument(EDITOR_PAGE)
    client = WebsiteStateClient("http://api.test", storage=LocalStorage(initial={"token": "t"}), session=session)
    renderer = PreviewRenderer(
        document,
        client=client,
        state=state,
        page_templates={"home": home_template, "about": about_template},
        current_page=page,
    )
    renderer.setup_save_controls()
    return renderer


def _edit(renderer: PreviewRenderer, path: str, text: str) -> None:
    element = renderer.document.select(f'[data-content-path="{path}"]')[0]
    renderer.document.set_text(element, text)
    renderer.document.dispatch_event(element, "input")


def _button(renderer: PreviewRenderer):
    return renderer.document.get_element_by_id("preview-save-btn")


def _status(renderer: PreviewRenderer) -> str:
    return renderer.document.get_element_by_id("preview-save-status").get_text()


def test_requires_client_or_save_handler() -> None:
    with pytest.raises(ValueError):
        PreviewRenderer(PageDocument(EDITOR_PAGE))


def test_controls_follow_dirty_state() -> None:
    renderer = _renderer(FakeSession())
    assert _button(renderer).has_attr("disabled")
    assert _status(renderer) == "All changes saved"

    renderer.attach_editable_listeners()
    _edit(renderer, "title", "Hello")

    assert not _button(renderer).has_attr("disabled")
    assert _button(renderer).get_text() == "Save (1)"
    assert _status(renderer) == "Unsaved changes"


def test_click_saves_and_rerenders_home_page() -> None:
    session = FakeSession(FakeResponse(200, {
        "compiled": {"title": "Saved title", "bio": {"headline": "<em>hi</em>"}},
        "version": 2,
    }))
    renderer = _renderer(session)
    renderer.attach_editable_listeners()
    _edit(renderer, "title", "Hello")

    renderer.document.dispatch_event(_button(renderer), "click")

    assert len(session.calls) == 1
    content = renderer.preview_content
    assert content.select_one("section.home") is not None
    assert content.select_one('[data-content-path="title"]').get_text() == "Saved title"
    assert content.select_one('[data-content-path="bio.headline"]').decode_contents() == "<em>hi</em>"
    assert renderer.state.version == 2
    assert renderer.state.dirty == {}
    assert _status(renderer) == "Saved"
    assert _button(renderer).get_text() == "Save"
    assert renderer.document.select(".preview-toast")[0].get_text() == "Saved"


def test_rerendered_regions_are_editable_again() -> None:
    session = FakeSession(FakeResponse(200, {"compiled": {"title": "T"}, "version": 1}))
    renderer = _renderer(session)
    renderer.attach_editable_listeners()
    _edit(renderer, "title", "x")
    renderer.handle_save()

    _edit(renderer, "title", "after save")
    assert renderer.state.dirty["title"].value == "after save"
    assert renderer.state.compiled["title"] == "after save"


def test_about_page_uses_its_refresh_routine() -> None:
    session = FakeSession(FakeResponse(200, {"compiled": {"about": {"heading": "Me"}}, "version": 1}))
    renderer = _renderer(session, page="about")
    renderer.attach_editable_listeners()
    _edit(renderer, "title", "x")
    renderer.handle_save()

    heading = renderer.preview_content.select_one("section.about h2")
    assert heading.get_text() == "Me"


def test_unknown_page_falls_back_to_generic_refresh() -> None:
    session = FakeSession(FakeResponse(200, {"compiled": {"title": "Generic"}, "version": 1}))
    renderer = _renderer(session, page="contact")
    renderer.attach_editable_listeners()
    _edit(renderer, "title", "x")
    renderer.handle_save()

    title = renderer.preview_content.select_one('[data-content-path="title"]')
    assert title.get_text() == "Generic"
    assert "color: red" in title["style"]
    assert not title.has_attr("data-style")
    assert renderer.preview_content.select_one("section") is None


def test_failed_save_shows_failure_message() -> None:
    renderer = _renderer(FakeSession(FakeResponse(500)))
    renderer.attach_editable_listeners()
    _edit(renderer, "title", "Hello")

    renderer.handle_save()

    assert _status(renderer) == SAVE_FAILED_MESSAGE
    assert renderer.state.dirty["title"].value == "Hello"
    assert not _button(renderer).has_attr("disabled")
    toast = renderer.document.select(".preview-toast")
    assert len(toast) == 1 and toast[0].get_text() == SAVE_FAILED_MESSAGE


def test_next_edit_clears_failure_notice() -> None:
    renderer = _renderer(FakeSession(FakeResponse(500)))
    renderer.attach_editable_listeners()
    _edit(renderer, "title", "Hello")
    renderer.handle_save()
    _edit(renderer, "title", "Hello again")
    assert _status(renderer) == "Unsaved changes"


class StubRegions:
    def __init__(self) -> None:
        self.scopes: list = []

    def attach_editable_listeners(self, scope=None) -> int:
        self.scopes.append(scope)
        return 0


class StubSaver:
    def __init__(self) -> None:
        self.saves = 0

    def handle_save(self) -> bool:
        self.saves += 1
        return True


def test_injected_collaborators_are_used() -> None:
    regions, saver = StubRegions(), StubSaver()
    renderer = PreviewRenderer(PageDocument(EDITOR_PAGE), editable_regions=regions, save_handler=saver)

    renderer.render("works")
    renderer.handle_save()

    assert regions.scopes == [renderer.preview_content]
    assert saver.saves == 1
    assert renderer.current_page == "works"


def test_repeated_saves_keep_listener_registries_bounded() -> None:
    renderer = _renderer(FakeSession())
    renderer.attach_editable_listeners()

    for i in range(50):
        _edit(renderer, "title", f"draft {i}")
        renderer.document.dispatch_event(_button(renderer), "click")

    editable = renderer.preview_content.select("[data-content-path]")
    assert len(editable) == 2
    assert renderer.editable_regions.bound_count == 2
    # the save button plus the two editable regions
    assert renderer.document.tracked_element_count == 3
