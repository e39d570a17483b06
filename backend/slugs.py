# slugs.py
import re
import secrets

SUFFIX_BYTES = 3  # six hex characters
MAX_BASE_LEN = 60
FALLBACK_BASE = "quiz"

_NON_SLUG = re.compile(r"[^a-z0-9]+")
_SUFFIX_RE = re.compile(r"-[0-9a-f]{%d}$" % (SUFFIX_BYTES * 2))


def slugify(text: str) -> str:
    """Lower-case, hyphen-separated tokens restricted to [a-z0-9-]."""
    base = _NON_SLUG.sub("-", (text or "").lower()).strip("-")
    if len(base) > MAX_BASE_LEN:
        base = base[:MAX_BASE_LEN].rstrip("-")
    return base


def strip_suffix(slug: str) -> str:
    return _SUFFIX_RE.sub("", slug)


def allocate(base_slug_or_title: str) -> str:
    """
    Returns `<normalized-base>-<random hex>`. Uniqueness is not checked here;
    the quiz.slug unique constraint is the authority and callers re-allocate
    on conflict.
    """
    base = slugify(base_slug_or_title) or FALLBACK_BASE
    return f"{base}-{secrets.token_hex(SUFFIX_BYTES)}"


def reallocate(existing_slug: str) -> str:
    """Fresh suffix for a slug that already carries one (revisions, insert retries)."""
    return allocate(strip_suffix(existing_slug))
