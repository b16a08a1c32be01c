"""Text sanitisation helpers.

Free-form input reaching the data store passes through one of these helpers
first. The rules mirror the behaviour a multisite content platform applies to
titles, keys, slugs, e-mail addresses and user names.

Document content has two sanitisation modes: callers trusted with
``unfiltered_html`` store markup as given, everyone else gets a filtered copy
with active content (scripts, event handlers, embedded objects) removed.
"""

from __future__ import annotations

import re
import unicodedata
from datetime import datetime
from typing import Any, Optional

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)[^>]*?>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"[\r\n\t ]+")
_OCTET_RE = re.compile(r"%[a-fA-F0-9]{2}")

_KEY_RE = re.compile(r"[^a-z0-9_\-]")
_SLUG_SEPARATOR_RE = re.compile(r"[^a-z0-9]+")
_EMAIL_RE = re.compile(r"^[A-Za-z0-9!#$%&'*+/=?^_`{|}~.\-]+@[A-Za-z0-9\-]+(\.[A-Za-z0-9\-]+)+$")
_STRICT_USER_RE = re.compile(r"[^a-z0-9 _.\-@]", re.IGNORECASE)

_DANGEROUS_ELEMENTS_RE = re.compile(
    r"<(script|style|iframe|object|embed|applet|form)[^>]*?>.*?</\1\s*>|<(script|iframe|object|embed|applet)[^>]*?/?>",
    re.IGNORECASE | re.DOTALL,
)
_EVENT_ATTRIBUTE_RE = re.compile(r"\s+on[a-z]+\s*=\s*(\"[^\"]*\"|'[^']*'|[^\s>]+)", re.IGNORECASE)
_JS_URL_RE = re.compile(r"(href|src)\s*=\s*([\"']?)\s*javascript:[^\"'>\s]*\2", re.IGNORECASE)


def strip_all_tags(text: str, remove_breaks: bool = False) -> str:
    """Remove every HTML tag, including the bodies of script and style elements."""
    text = _SCRIPT_STYLE_RE.sub("", text)
    text = _TAG_RE.sub("", text)
    if remove_breaks:
        text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()


def sanitize_text_field(value: Any) -> str:
    """Sanitise a single-line string: no tags, no line breaks, no percent-encoded octets."""
    text = strip_all_tags(str(value), remove_breaks=True)
    text = _OCTET_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def sanitize_textarea_field(value: Any) -> str:
    """Like ``sanitize_text_field`` but preserves line breaks."""
    text = strip_all_tags(str(value))
    lines = [re.sub(r"[\t ]+", " ", line).strip() for line in text.splitlines()]
    return "\n".join(lines).strip()


def sanitize_key(key: Any) -> str:
    """Lower-case a key and keep only ``[a-z0-9_-]``."""
    return _KEY_RE.sub("", str(key).strip().lower())


def sanitize_title(title: Any) -> str:
    """Turn a title or domain into a URL slug (``My Site.org`` -> ``my-site-org``)."""
    text = strip_all_tags(str(title))
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    return _SLUG_SEPARATOR_RE.sub("-", text.lower()).strip("-")


def sanitize_email(email: Any) -> str:
    """Return the trimmed address when it is well formed, otherwise an empty string."""
    candidate = str(email).strip()
    if len(candidate) < 6 or not _EMAIL_RE.match(candidate):
        return ""
    return candidate


def is_email(email: Any) -> bool:
    return bool(sanitize_email(email))


def sanitize_user(username: Any, strict: bool = False) -> str:
    """Sanitise a login name. ``strict`` limits it to ASCII letters, digits and `` _.-@``."""
    text = strip_all_tags(str(username))
    text = _OCTET_RE.sub("", text)
    if strict:
        text = _STRICT_USER_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def sanitize_content(content: Any, *, unfiltered: bool) -> str:
    """Sanitise document markup.

    Args:
        content: Raw markup supplied by the caller.
        unfiltered: ``True`` when the caller holds ``unfiltered_html``.

    Returns:
        The markup unchanged for trusted callers, otherwise a copy with active
        content stripped.
    """
    text = str(content)
    if unfiltered:
        return text
    text = _DANGEROUS_ELEMENTS_RE.sub("", text)
    text = _EVENT_ATTRIBUTE_RE.sub("", text)
    return _JS_URL_RE.sub(r'\1=\2#\2', text)


def ucwords_from_slug(slug: str) -> str:
    """``my-pattern-cat`` -> ``My Pattern Cat``."""
    words = slug.replace("-", " ").split(" ")
    return " ".join(word[:1].upper() + word[1:] for word in words)


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    """``YYYY-MM-DD HH:MM:SS`` as stored by the platform, ``None`` stays ``None``."""
    if value is None:
        return None
    return value.strftime("%Y-%m-%d %H:%M:%S")
