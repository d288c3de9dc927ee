# core/editor_models.py
"""
Editor state models for inline content editing
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from core.content_paths import set_value_at_path


class ContentType(Enum):
    """How an editable region's value is captured"""
    TEXT = "text"
    HTML = "html"
    IMAGE_URL = "imageurl"

    @classmethod
    def from_attribute(cls, raw: Optional[str]) -> 'ContentType':
        value = (raw or 'text').strip().lower()
        for member in cls:
            if member.value == value:
                return member
        return cls.TEXT


@dataclass
class DirtyEdit:
    """One pending, unsaved change"""
    type: ContentType
    value: str


@dataclass
class ContentUpdate:
    """Wire record for the batch update endpoint"""
    path: str
    type: ContentType
    value: str

    def to_dict(self) -> Dict[str, Any]:
        return {'path': self.path, 'type': self.type.value, 'value': self.value}


@dataclass
class SaveResponse:
    """Authoritative state returned by a successful save"""
    compiled: Optional[Dict[str, Any]] = None
    version: Optional[int] = None
    compiled_json_path: Optional[str] = None


@dataclass
class EditorState:
    """
    Local editing state for one preview session

    ``compiled`` holds the last saved content plus local edits, ``dirty``
    only the edits the server has not acknowledged yet. ``dirty`` keeps
    insertion order, which is the order updates are submitted in.
    """
    compiled: Dict[str, Any] = field(default_factory=dict)
    dirty: Dict[str, DirtyEdit] = field(default_factory=dict)
    version: int = 0
    is_saving: bool = False
    compiled_json_path: Optional[str] = None

    @property
    def dirty_count(self) -> int:
        return len(self.dirty)

    @property
    def has_dirty(self) -> bool:
        return bool(self.dirty)

    def record_edit(self, path: str, content_type: ContentType, value: str) -> None:
        if self.compiled is None:
            self.compiled = {}
        set_value_at_path(self.compiled, path, value)
        self.dirty[path] = DirtyEdit(type=content_type, value=value)

    def pending_updates(self) -> List[ContentUpdate]:
        return [
            ContentUpdate(path=path, type=edit.type, value=edit.value)
            for path, edit in self.dirty.items()
        ]

    def apply_save_response(self, response: SaveResponse) -> None:
        if response.compiled is not None:
            self.compiled = response.compiled
        if response.version is not None:
            self.version = response.version
        if response.compiled_json_path:
            self.compiled_json_path = response.compiled_json_path
        # Every pending edit is dropped, including ones made while the save was in flight
        self.dirty.clear()
