# core/site_resolver.py
"""
Published site resolution and bootstrap

Works out which site a request is for (explicit id, ``/s/<slug>``, a bare
root-level slug or ``?slug=``), resolves slugs through the public lookup
API and hands an explicit RenderConfig to the runtime boot entry point.
"""

import re
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Protocol
from urllib.parse import unquote

from services.website_api import SiteLookupError

logger = logging.getLogger(__name__)

SITE_ID_PARAM = 'site'
SLUG_PARAM = 'slug'
PAGE_PARAM = 'page'

SLUG_PREFIX_PATTERN = re.compile(r'^/s/([^/]+)/?$')
ROOT_SEGMENT_PATTERN = re.compile(r'^/([^/]+)/?$')

# Root-level segments that belong to the application, not to a site
RESERVED_SEGMENTS = frozenset({
    'api', 's', 'sites', 'public', 'static', 'assets', 'js', 'css', 'img', 'images',
    'uploads', 'auth', 'login', 'logout', 'signup', 'account', 'survey', 'preview',
    'upload', 'artworks', 'artists', 'portfolios', 'notifications', 'health',
})

MISSING_SLUG_MESSAGE = 'Missing site slug. Use /s/<slug> or ?slug=<slug>.'
SITE_NOT_FOUND_MESSAGE = 'Site not found.'
LOAD_ERROR_MESSAGE = 'Could not load this site. Please try again later.'


class BootStatus(Enum):
    """Outcome of a bootstrap attempt"""
    BOOTED = "booted"
    MISSING_SLUG = "missing_slug"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class SiteRequest:
    """What a request asks for before any lookup"""
    site_id: Optional[str] = None
    slug: Optional[str] = None
    page: Optional[str] = None


@dataclass(frozen=True)
class RenderConfig:
    """Configuration handed to the runtime renderer"""
    site_id: str
    page: Optional[str] = None

    def to_dict(self) -> dict:
        config = {'siteId': self.site_id}
        if self.page:
            config['page'] = self.page
        return config


@dataclass
class BootOutcome:
    status: BootStatus
    config: Optional[RenderConfig] = None
    output: Any = None
    message: Optional[str] = None


class SiteLookup(Protocol):
    def lookup_site(self, slug: str) -> Optional[str]:
        ...


BootEntryPoint = Callable[[RenderConfig], Any]


def _param(query: Optional[Mapping[str, Any]], name: str) -> Optional[str]:
    if not query:
        return None
    value = query.get(name)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def normalize_page(page: Optional[str]) -> Optional[str]:
    if not page:
        return None
    page = page.strip().lower()
    if page == 'homepage':
        return 'home'
    return page or None


def slug_from_path(path: Optional[str]) -> Optional[str]:
    """
    Extract a slug from a URL path

    ``/s/<slug>`` always yields the slug. A bare ``/<segment>`` does unless
    the segment is reserved or contains a dot (static file request).
    """
    if not path:
        return None

    match = SLUG_PREFIX_PATTERN.match(path)
    if match:
        return unquote(match.group(1)).strip() or None

    match = ROOT_SEGMENT_PATTERN.match(path)
    if match:
        segment = unquote(match.group(1)).strip()
        if not segment or '.' in segment or segment.lower() in RESERVED_SEGMENTS:
            return None
        return segment

    return None


def resolve_site_request(path: Optional[str], query: Optional[Mapping[str, Any]] = None) -> SiteRequest:
    """
    Resolve a path and query string to a SiteRequest

    Precedence: ``?site=<id>``, ``/s/<slug>``, ``/<slug>``, ``?slug=<slug>``.
    """
    page = normalize_page(_param(query, PAGE_PARAM))

    site_id = _param(query, SITE_ID_PARAM)
    if site_id:
        return SiteRequest(site_id=site_id, page=page)

    slug = slug_from_path(path) or _param(query, SLUG_PARAM)
    return SiteRequest(slug=slug, page=page)


class SiteBootstrapper:
    """
    Resolves a request to a site and boots the runtime renderer

    Every failure is logged and turned into a fixed message; ``run`` never
    raises.
    """

    def __init__(self, lookup: SiteLookup, boot: BootEntryPoint):
        self.lookup = lookup
        self.boot = boot

    def run(self, path: Optional[str], query: Optional[Mapping[str, Any]] = None) -> BootOutcome:
        try:
            request = resolve_site_request(path, query)

            if request.site_id:
                return self._boot(RenderConfig(site_id=request.site_id, page=request.page))

            if not request.slug:
                logger.info(f"No site slug in request for {path!r}")
                return BootOutcome(BootStatus.MISSING_SLUG, message=MISSING_SLUG_MESSAGE)

            try:
                site_id = self.lookup.lookup_site(request.slug)
            except SiteLookupError as e:
                logger.warning(f"Site lookup failed for slug '{request.slug}': {e}")
                site_id = None

            if not site_id:
                return BootOutcome(BootStatus.NOT_FOUND, message=SITE_NOT_FOUND_MESSAGE)

            return self._boot(RenderConfig(site_id=site_id, page=request.page))

        except Exception as e:
            logger.error(f"Site bootstrap failed for {path!r}: {e}", exc_info=True)
            return BootOutcome(BootStatus.ERROR, message=LOAD_ERROR_MESSAGE)

    def _boot(self, config: RenderConfig) -> BootOutcome:
        logger.info(f"Booting site {config.site_id} (page={config.page or 'default'})")
        output = self.boot(config)
        return BootOutcome(BootStatus.BOOTED, config=config, output=output)
