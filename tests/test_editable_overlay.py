from typing import List, Tuple

from core.editable_overlay import EditableOverlay
from core.editor_models import ContentType, DirtyEdit, EditorState
from core.page_document import PageDocument

PAGE = """
<html><body>
  <div id="preview-content">
    <h1 data-content-path="title">Old title</h1>
    <div data-content-path="bio.headline" data-type="html"><i>old</i></div>
    <p data-content-path="bio.caption" data-content-type="TEXT">caption</p>
    <div data-content-path="hero.image" data-type="imageUrl"></div>
    <span data-content-path="works[0].title">work</span>
    <span class="plain">not editable</span>
  </div>
</body></html>
"""


def _overlay(on_change=None) -> Tuple[PageDocument, EditorState, EditableOverlay]:
    document = PageDocument(PAGE)
    state = EditorState()
    return document, state, EditableOverlay(document, state, on_change=on_change)


def test_attach_marks_regions_editable_and_skips_images() -> None:
    document, _, overlay = _overlay()
    assert overlay.attach_editable_listeners() == 4

    title = document.select('[data-content-path="title"]')[0]
    image = document.select('[data-content-path="hero.image"]')[0]
    plain = document.select(".plain")[0]
    assert title["contenteditable"] == "true"
    assert not image.has_attr("contenteditable")
    assert document.listener_count(image, "input") == 0
    assert document.listener_count(plain, "input") == 0


def test_text_edit_updates_compiled_and_dirty() -> None:
    changes: List[int] = []
    document, state, overlay = _overlay(on_change=lambda: changes.append(1))
    overlay.attach_editable_listeners()

    title = document.select('[data-content-path="title"]')[0]
    document.set_text(title, "Hi")
    assert document.dispatch_event(title, "input") == 1

    assert state.compiled == {"title": "Hi"}
    assert state.dirty == {"title": DirtyEdit(ContentType.TEXT, "Hi")}
    assert changes == [1]


def test_html_edit_captures_markup() -> None:
    document, state, overlay = _overlay()
    overlay.attach_editable_listeners()

    headline = document.select('[data-content-path="bio.headline"]')[0]
    document.set_inner_html(headline, "<b>X</b>")
    document.dispatch_event(headline, "blur")

    assert state.compiled == {"bio": {"headline": "<b>X</b>"}}
    assert state.dirty["bio.headline"] == DirtyEdit(ContentType.HTML, "<b>X</b>")


def test_repeated_edits_overwrite_entry_and_keep_order() -> None:
    document, state, overlay = _overlay()
    overlay.attach_editable_listeners()
    title = document.select('[data-content-path="title"]')[0]
    caption = document.select('[data-content-path="bio.caption"]')[0]

    document.set_text(title, "first")
    document.dispatch_event(title, "input")
    document.set_text(caption, "cap")
    document.dispatch_event(caption, "input")
    document.set_text(title, "second")
    document.dispatch_event(title, "blur")

    assert list(state.dirty) == ["title", "bio.caption"]
    assert state.dirty["title"].value == "second"


def test_array_path_edit_is_tracked_but_not_written() -> None:
    document, state, overlay = _overlay()
    overlay.attach_editable_listeners()
    work = document.select('[data-content-path="works[0].title"]')[0]

    document.set_text(work, "renamed")
    document.dispatch_event(work, "input")

    assert state.compiled == {}
    assert state.dirty["works[0].title"].value == "renamed"


def test_reattach_replaces_handlers() -> None:
    changes: List[int] = []
    document, _, overlay = _overlay(on_change=lambda: changes.append(1))
    overlay.attach_editable_listeners()
    overlay.attach_editable_listeners()
    scope = document.get_element_by_id("preview-content")
    overlay.attach_editable_listeners(scope)

    title = document.select('[data-content-path="title"]')[0]
    assert document.listener_count(title, "input") == 1
    assert document.listener_count(title, "blur") == 1
    assert document.dispatch_event(title, "input") == 1
    assert changes == [1]


def test_replaced_content_releases_old_handlers() -> None:
    document, _, overlay = _overlay()
    overlay.attach_editable_listeners()
    old_title = document.select('[data-content-path="title"]')[0]
    assert document.tracked_element_count == 4

    container = document.get_element_by_id("preview-content")
    document.set_inner_html(container, '<h1 data-content-path="title">New</h1>')
    assert document.tracked_element_count == 0
    assert document.listener_count(old_title, "input") == 0

    assert overlay.attach_editable_listeners(container) == 1
    assert overlay.bound_count == 1
    assert document.tracked_element_count == 1


def test_attach_limited_to_scope() -> None:
    document = PageDocument(
        '<div id="a"><p data-content-path="x">1</p></div>'
        '<div id="b"><p data-content-path="y">2</p></div>'
    )
    overlay = EditableOverlay(document, EditorState())
    assert overlay.attach_editable_listeners(document.get_element_by_id("b")) == 1
    x = document.select('[data-content-path="x"]')[0]
    assert not x.has_attr("contenteditable")


def test_attach_failure_is_logged_not_raised(caplog) -> None:
    document, _, overlay = _overlay()

    def broken_select(*args, **kwargs):
        raise RuntimeError("boom")

    document.select = broken_select
    assert overlay.attach_editable_listeners() == 0
    assert "Attaching editable listeners failed" in caplog.text
