# core/save_coordinator.py
"""
Batched save of pending preview edits

One save runs at a time. A successful save adopts the server's compiled
state and version and clears every pending edit; a failed save keeps the
pending edits for the next attempt. Nothing is retried automatically.
"""

import logging
from typing import Callable, List, Optional, Protocol

from core.editor_models import ContentUpdate, EditorState, SaveResponse
from core.save_controls import STATUS_SAVED, SaveControls
from services.website_api import ContentSaveError, VersionConflictError

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = 'Save failed. Try again'
VERSION_CONFLICT_MESSAGE = 'Version conflict. Review and Save again'


class ContentBatchClient(Protocol):
    """Transport used to submit a batch of content updates"""

    def update_content_batch(self, updates: List[ContentUpdate], version: Optional[int] = None) -> SaveResponse:
        ...


class SaveCoordinator:
    """Single-flight batch saver for an EditorState"""

    def __init__(self,
                 state: EditorState,
                 client: ContentBatchClient,
                 controls: Optional[SaveControls] = None,
                 on_saved: Optional[Callable[[], None]] = None):
        self.state = state
        self.client = client
        self.controls = controls
        self.on_saved = on_saved

    def handle_save(self) -> bool:
        """
        Submit every pending edit as one batch

        Returns:
            True when the server acknowledged the batch
        """
        if self.state.is_saving:
            logger.debug("Save already in progress, ignoring request")
            return False

        updates = self.state.pending_updates()
        if not updates:
            return False

        self.state.is_saving = True
        if self.controls:
            self.controls.clear_notice()
            self.controls.refresh()

        try:
            version = self.state.version if self.state.version > 0 else None
            response = self.client.update_content_batch(updates, version=version)

            self.state.apply_save_response(response)
            logger.info(f"Saved {len(updates)} edit(s), now at version {self.state.version}")

            if self.controls:
                self.controls.set_notice(STATUS_SAVED)
            if self.on_saved:
                self.on_saved()
            return True

        except VersionConflictError as e:
            if e.server_version is not None:
                self.state.version = e.server_version
            logger.warning(f"Save rejected with version conflict (server version {e.server_version})")
            if self.controls:
                self.controls.set_notice(VERSION_CONFLICT_MESSAGE, error=True)
            return False

        except ContentSaveError as e:
            logger.error(f"Save failed: {e}", exc_info=True)
            if self.controls:
                self.controls.set_notice(SAVE_FAILED_MESSAGE, error=True)
            return False

        except Exception as e:
            logger.error(f"Save failed unexpectedly: {e}", exc_info=True)
            if self.controls:
                self.controls.set_notice(SAVE_FAILED_MESSAGE, error=True)
            return False

        finally:
            self.state.is_saving = False
            if self.controls:
                self.controls.refresh()
