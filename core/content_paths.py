# core/content_paths.py
"""
Content path helpers for the compiled site state

Paths are dot separated (``bio.headline``) with optional bracketed indexes
(``works[2].title``). Writes only ever create mappings; any path with a
bracket in it, well-formed index or not, is skipped without touching the
container.
"""

import re
import logging
from typing import Any, List, Optional, Union

logger = logging.getLogger(__name__)

PathKey = Union[str, int]

_SEGMENT_PATTERN = re.compile(r'^([^\[\]]+)((?:\[\d+\])*)$')
_INDEX_PATTERN = re.compile(r'\[(\d+)\]')


def parse_path(path: Optional[str]) -> List[PathKey]:
    """
    Split a content path into keys

    Names become strings, bracketed indexes become ints:
    ``'works[2].title'`` -> ``['works', 2, 'title']``
    """
    keys: List[PathKey] = []
    if not path:
        return keys

    for segment in path.split('.'):
        if not segment:
            continue
        match = _SEGMENT_PATTERN.match(segment)
        if not match:
            keys.append(segment)
            continue
        keys.append(match.group(1))
        keys.extend(int(index) for index in _INDEX_PATTERN.findall(match.group(2)))

    return keys


def has_index_segment(path: Optional[str]) -> bool:
    """True when any segment carries brackets, well-formed or not"""
    if not path:
        return False
    return '[' in path or ']' in path


def set_value_at_path(container: Any, path: Optional[str], value: Any) -> bool:
    """
    Write ``value`` into ``container`` at ``path``

    Missing or non-mapping intermediates are replaced by new dicts.
    Array writes are not supported: a path with an index segment is a
    no-op and the container is left unchanged.

    Returns:
        True when the value was written
    """
    if not isinstance(container, dict) or not path:
        return False

    keys = parse_path(path)
    if not keys:
        return False

    if has_index_segment(path):
        logger.debug(f"Skipping array write for content path '{path}'")
        return False

    cursor = container
    for key in keys[:-1]:
        if not isinstance(cursor.get(key), dict):
            cursor[key] = {}
        cursor = cursor[key]

    cursor[keys[-1]] = value
    return True


def get_value_at_path(container: Any, path: Optional[str]) -> Any:
    """Read a value by content path, returning None when it does not resolve"""
    if container is None or not path:
        return None

    cursor = container
    for key in _read_keys(path):
        if cursor is None:
            return None
        if isinstance(cursor, dict):
            cursor = cursor.get(key if isinstance(key, str) else str(key))
        elif isinstance(cursor, list):
            try:
                cursor = cursor[int(key)]
            except (ValueError, IndexError):
                return None
        else:
            return None

    return cursor


def _read_keys(path: str) -> List[PathKey]:
    # Reads accept numeric dotted segments ("works.2.title") as well as brackets
    keys: List[PathKey] = []
    for key in parse_path(path):
        if isinstance(key, str) and key.isdigit():
            keys.append(int(key))
        else:
            keys.append(key)
    return keys
