# services/website_api.py
"""
HTTP clients for the site builder REST API

- WebsiteStateClient: batched content updates from the preview editor
- PublicSiteClient: public slug -> site lookup

Requests run to completion or failure; there are no timeouts or retries.
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional

import requests

from core.editor_models import ContentUpdate, SaveResponse
from core.local_storage import LocalStorage

logger = logging.getLogger(__name__)

AUTH_TOKEN_KEY = 'token'
AUTH_HEADER = 'x-auth-token'


class WebsiteApiError(Exception):
    """Base exception for site builder API calls"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ContentSaveError(WebsiteApiError):
    """Batch content update failed"""
    pass


class VersionConflictError(ContentSaveError):
    """Server rejected the update because the version is stale"""

    def __init__(self, message: str, server_version: Optional[int] = None):
        super().__init__(message, status_code=409)
        self.server_version = server_version


class SiteLookupError(WebsiteApiError):
    """Slug could not be resolved to a site"""
    pass


def _json_body(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _is_version(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class _ApiClient:

    def __init__(self, base_url: str = '', session: Optional[requests.Session] = None):
        self.base_url = (base_url or '').rstrip('/')
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"


class WebsiteStateClient(_ApiClient):
    """Client for the authenticated website-state endpoints"""

    UPDATE_CONTENT_BATCH_PATH = '/api/website-state/update-content-batch'

    def __init__(self,
                 base_url: str = '',
                 storage: Optional[LocalStorage] = None,
                 session: Optional[requests.Session] = None):
        super().__init__(base_url, session)
        self.storage = storage or LocalStorage()

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> 'WebsiteStateClient':
        """Client for ``API_BASE_URL`` reading its token from ``TOKEN_STORAGE_PATH``"""
        return cls(
            base_url=settings.get('API_BASE_URL') or '',
            storage=LocalStorage(settings.get('TOKEN_STORAGE_PATH')),
        )

    def update_content_batch(self,
                             updates: Iterable[ContentUpdate],
                             version: Optional[int] = None) -> SaveResponse:
        """
        Submit pending edits as one batch and ask the server to recompile

        Args:
            updates: Ordered content updates
            version: Last known version; omitted from the body unless > 0

        Returns:
            SaveResponse with the server's compiled state and version

        Raises:
            VersionConflictError: HTTP 409
            ContentSaveError: transport failure, other non-2xx, bad body
        """
        records = [update.to_dict() for update in updates]
        payload: Dict[str, Any] = {'updates': records}
        if version and version > 0:
            payload = {'version': version, 'updates': records}

        headers = {
            'Content-Type': 'application/json',
            AUTH_HEADER: self.storage.get_item(AUTH_TOKEN_KEY) or '',
        }

        try:
            response = self.session.post(
                self._url(self.UPDATE_CONTENT_BATCH_PATH),
                params={'compile': 'true'},
                json=payload,
                headers=headers,
            )
        except requests.RequestException as e:
            raise ContentSaveError(f"Save request failed: {e}") from e

        if response.status_code == 409:
            body = _json_body(response) or {}
            server_version = body.get('serverVersion') if isinstance(body, dict) else None
            raise VersionConflictError(
                'Version conflict',
                server_version=server_version if _is_version(server_version) else None,
            )

        if not response.ok:
            raise ContentSaveError(f"Save failed with HTTP {response.status_code}",
                                   status_code=response.status_code)

        data = _json_body(response)
        if not isinstance(data, dict):
            raise ContentSaveError('Save response was not a JSON object',
                                   status_code=response.status_code)

        compiled = data.get('compiled')
        version_value = data.get('version')
        compiled_json_path = data.get('compiledJsonPath')

        logger.info(f"Saved {len(records)} content update(s), server version {version_value}")
        return SaveResponse(
            compiled=compiled if isinstance(compiled, dict) else None,
            version=version_value if _is_version(version_value) else None,
            compiled_json_path=compiled_json_path if isinstance(compiled_json_path, str) else None,
        )


class PublicSiteClient(_ApiClient):
    """Client for the unauthenticated public site endpoints"""

    SITE_PATH = '/api/public/site'

    def lookup_site(self, slug: str) -> Optional[str]:
        """
        Resolve a slug to the owning artist id

        Returns:
            The artist id, or None when the response carries none

        Raises:
            SiteLookupError: transport failure or non-2xx response
        """
        try:
            response = self.session.get(self._url(self.SITE_PATH), params={'slug': slug})
        except requests.RequestException as e:
            raise SiteLookupError(f"Site lookup failed for '{slug}': {e}") from e

        if not response.ok:
            raise SiteLookupError(f"Site lookup for '{slug}' returned HTTP {response.status_code}",
                                  status_code=response.status_code)

        data = _json_body(response)
        artist_id = data.get('artistId') if isinstance(data, dict) else None
        return str(artist_id) if artist_id else None
