"""
Slug and path helpers for the document tree.

Dependencies: hashlib, unicodedata (stdlib)
System role: Naming rules for folders and documents
"""

import hashlib
import re
import unicodedata
import uuid

MAX_SLUG_LENGTH = 160
MAX_SLUG_ATTEMPTS = 50
NODE_POSITION_STEP = 1024.0

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def checksum(content: str | None) -> str | None:
    """SHA-256 hex digest of UTF-8 content, None for None."""
    if content is None:
        return None
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def slugify(title: str, fallback_prefix: str = "doc") -> str:
    """
    Turn a title into a URL-safe slug.

    Non-ASCII titles that leave nothing after normalization get a stable
    `<prefix>-<8 hex>` slug derived from the title.
    """
    normalized = unicodedata.normalize("NFKD", title.strip())
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii").lower()
    slug = _NON_ALNUM.sub("-", ascii_text).strip("-")
    if slug:
        return slug[:MAX_SLUG_LENGTH].rstrip("-")
    if fallback_prefix == "folder":
        suffix = uuid.uuid3(uuid.NAMESPACE_OID, title.strip()).hex[:8]
    else:
        suffix = (checksum(title) or "00000000")[:8]
    return f"{fallback_prefix}-{suffix}"


def slug_candidates(base: str):
    """Yield `base`, `base-2`, ... up to MAX_SLUG_ATTEMPTS candidates."""
    yield base
    for attempt in range(2, MAX_SLUG_ATTEMPTS + 1):
        yield f"{base}-{attempt}"


def build_path(parent_path: str | None, slug: str) -> str:
    if not parent_path:
        return f"/{slug}"
    return f"{parent_path}/{slug}"


def parent_path(path: str) -> str | None:
    base = path.rsplit("/", 1)[0]
    return base or None


def rebase_path(path: str, old_root: str, new_root: str) -> str:
    """Replace the `old_root` prefix of a descendant path with `new_root`."""
    relative = path[len(old_root):] if path.startswith(old_root) else path
    return (new_root + relative).replace("//", "/")
