# core/save_controls.py
"""
Save button and status line of the preview editor
"""

from typing import Optional

from bs4.element import Tag

from core.editor_models import EditorState
from core.page_document import PageDocument

SAVE_BUTTON_ID = 'preview-save-btn'
SAVE_STATUS_ID = 'preview-save-status'
TOAST_CLASS = 'preview-toast'

STATUS_SAVING = 'Saving...'
STATUS_UNSAVED = 'Unsaved changes'
STATUS_ALL_SAVED = 'All changes saved'
STATUS_SAVED = 'Saved'

TOAST_STYLES = {
    False: 'position:fixed; top:16px; right:16px; background:#eef9f1; color:#245c2f; '
           'border:1px solid #cde7d8; padding:8px 12px; border-radius:6px; z-index:9999;',
    True: 'position:fixed; top:16px; right:16px; background:#ffefef; color:#a00; '
          'border:1px solid #f5c2c7; padding:8px 12px; border-radius:6px; z-index:9999;',
}


class SaveControls:
    """
    Keeps the save button and status text in step with the editor state

    A notice (failure, conflict, "Saved") stays in the status line until
    the next edit or save attempt.
    """

    def __init__(self, document: PageDocument, state: EditorState):
        self.document = document
        self.state = state
        self.notice: Optional[str] = None

    @property
    def button(self) -> Optional[Tag]:
        return self.document.get_element_by_id(SAVE_BUTTON_ID)

    @property
    def status(self) -> Optional[Tag]:
        return self.document.get_element_by_id(SAVE_STATUS_ID)

    def button_label(self) -> str:
        if self.state.is_saving:
            return 'Saving…'
        if self.state.has_dirty:
            return f'Save ({self.state.dirty_count})'
        return 'Save'

    def status_text(self) -> str:
        if self.state.is_saving:
            return STATUS_SAVING
        if self.notice:
            return self.notice
        if self.state.has_dirty:
            return STATUS_UNSAVED
        return STATUS_ALL_SAVED

    @property
    def is_disabled(self) -> bool:
        return not self.state.has_dirty or self.state.is_saving

    def refresh(self) -> None:
        button = self.button
        if button is not None:
            if self.is_disabled:
                button['disabled'] = 'disabled'
            elif button.has_attr('disabled'):
                del button['disabled']
            self.document.set_text(button, self.button_label())

        status = self.status
        if status is not None:
            self.document.set_text(status, self.status_text())

    def clear_notice(self) -> None:
        self.notice = None

    def set_notice(self, message: str, error: bool = False) -> None:
        self.notice = message
        self.show_toast(message, error=error)

    def show_toast(self, message: str, error: bool = False) -> None:
        for existing in self.document.select(f'.{TOAST_CLASS}'):
            existing.decompose()
        toast = self.document.create_element('div', style=TOAST_STYLES[error])
        toast['class'] = [TOAST_CLASS]
        toast.string = message or ''
        self.document.body.append(toast)
