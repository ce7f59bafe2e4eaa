import re
from typing import Iterable

from contract_guard.core.constants import LIST_EXCLUSION_SUFFIXES, NON_TRANSFORM_FRAGMENTS

ID_PLACEHOLDER = ":id"

_UUID_PATTERN = re.compile(
    r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}', re.IGNORECASE
)


def normalize_path(path: str) -> str:
    """
    Normalizes an endpoint path by replacing dynamic segments with a generic `:id`.

    Detects and replaces:
    - Query strings:  /products?page=2                               → /products
    - UUIDs:          /users/550e8400-e29b-41d4-a716-446655440000    → /users/:id
    - Numeric IDs:    /products/42/stats                             → /products/:id/stats
    - Route params:   /products/{id}, /products/:productId           → /products/:id
    """
    path = path.split('?', 1)[0].split('#', 1)[0]
    path = _UUID_PATTERN.sub(ID_PLACEHOLDER, path)

    normalized_segments = []
    for seg in path.split('/'):
        if not seg:
            normalized_segments.append(seg)
            continue

        if seg.isdigit():
            normalized_segments.append(ID_PLACEHOLDER)
        # Express-style (:productId) and OpenAPI-style ({id}) route parameters
        elif re.match(r'^:\w+$', seg) or re.match(r'^\{\w+\}$', seg):
            normalized_segments.append(ID_PLACEHOLDER)
        else:
            normalized_segments.append(seg)

    return '/'.join(normalized_segments)


def strip_api_prefix(path: str) -> str:
    """'/api/products/42/' → 'products/42'. Leading/trailing slashes always go."""
    clean = path.strip('/')
    if clean == 'api':
        return ''
    if clean.startswith('api/'):
        clean = clean[len('api/'):]
    return clean


def has_id_segment(path: str) -> bool:
    return ID_PLACEHOLDER in normalize_path(path).split('/')


def last_segment(path: str) -> str:
    segments = [s for s in normalize_path(path).split('/') if s]
    return segments[-1] if segments else ''


# ──────────────────────────────────────────────────────
# LIST-ENDPOINT HEURISTIC
# The client transformation layer unwraps anything that "looks like a list".
# The rules are kept here, as small named predicates, so they can be tested
# on their own:
#   1. a `/list` segment                      → list
#   2. last segment ends in "s" (not "ss")     → list
#   3. last segment ends with an exclusion     → never a list (stats, status, ...)
# ──────────────────────────────────────────────────────

def is_plural_segment(segment: str) -> bool:
    """'products' → True, 'address' → False, ':id' → False."""
    if not segment or segment == ID_PLACEHOLDER or len(segment) < 2:
        return False
    return segment.endswith('s') and not segment.endswith('ss')


def ends_with_excluded_suffix(path: str, suffixes: Iterable[str] = LIST_EXCLUSION_SUFFIXES) -> bool:
    segment = last_segment(path)
    return any(segment.endswith(suffix) for suffix in suffixes)


def contains_non_transform_fragment(path: str, fragments: Iterable[str] = NON_TRANSFORM_FRAGMENTS) -> bool:
    return any(fragment in path for fragment in fragments)


def looks_like_list_endpoint(path: str) -> bool:
    """True when the path shape alone suggests a collection response."""
    normalized = normalize_path(path).rstrip('/')
    if ends_with_excluded_suffix(normalized):
        return False
    if '/list' in normalized:
        return True
    return is_plural_segment(last_segment(normalized))
