"""
Article -> Webflow ``fieldData`` conversion.

The saved mapping decides which internal article field lands in which
Webflow slug and which transform is applied on the way. Several internal
fields may target the same slug; the first one producing a non-empty value
wins.
"""

import html
import math
import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

import markdown

from shared.errors import ValidationError
from shared.logging import get_logger


logger = get_logger("webflow.publishing")

WORDS_PER_MINUTE = 200

_TAG_RE = re.compile(r"<[^>]+>")
_HTML_BLOCK_RE = re.compile(r"^\s*<(p|h[1-6]|ul|ol|div|blockquote|figure)\b", re.IGNORECASE)
_SLUG_STRIP_RE = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RE = re.compile(r"\s+")
_INTRO_LABEL_RE = re.compile(r"^(intro|indledning)\s*:\s*", re.IGNORECASE)

_TRUE_STRINGS = {"true", "1", "yes", "ja", "on"}


def slugify(title: str) -> str:
    """Lower-case, drop anything but ``a-z0-9``, whitespace and dashes, dash-join words."""
    slug = _SLUG_STRIP_RE.sub("", title.lower())
    return _WHITESPACE_RE.sub("-", slug.strip())


def count_words(text: str) -> int:
    return len(text.split())


def iso_timestamp(value: datetime) -> str:
    """UTC timestamp with millisecond precision, ``2024-05-01T12:00:00.000Z``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


# Transforms. Each returns None when the input cannot be represented.

def _identity(value: Any) -> Any:
    return value


def _plain_to_html(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    if _HTML_BLOCK_RE.match(text):
        return text

    paragraphs = [p.strip() for p in re.split(r"\n\s*\n", text) if p.strip()]
    return "".join(
        "<p>{}</p>".format(html.escape(p).replace("\n", "<br>"))
        for p in paragraphs
    )


def _markdown_to_html(value: Any) -> Optional[str]:
    if value is None:
        return None
    return markdown.markdown(str(value), extensions=["extra"])


def _string_array(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        items = [value]
    return [str(item).strip() for item in items if item is not None and str(item).strip()]


def _date_iso(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return iso_timestamp(value)

    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return iso_timestamp(datetime.fromisoformat(text))
    except ValueError:
        logger.warning("Unparseable date dropped", value=str(value))
        return None


def _reference_id(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        value = value.get("id")
    if value is None or value == "":
        return None
    return str(value)


def _boolean(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    try:
        number = float(str(value).strip().replace(",", "."))
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def _clean_intro(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = html.unescape(_TAG_RE.sub(" ", str(value)))
    text = _WHITESPACE_RE.sub(" ", text).strip()
    text = _INTRO_LABEL_RE.sub("", text)
    return text.strip("\"'“”„ ")


TRANSFORM_FUNCTIONS: Dict[str, Callable[[Any], Any]] = {
    "identity": _identity,
    "plainToHtml": _plain_to_html,
    "markdownToHtml": _markdown_to_html,
    "stringArray": _string_array,
    "dateIso": _date_iso,
    "referenceId": _reference_id,
    "boolean": _boolean,
    "number": _number,
    "cleanIntro": _clean_intro,
}


def apply_transform(name: Optional[str], value: Any) -> Any:
    """Apply a named transform; unknown names fall back to identity."""
    func = TRANSFORM_FUNCTIONS.get(name or "identity")
    if func is None:
        logger.warning("Unknown transform, using identity", transform=name)
        func = _identity
    return func(value)


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def build_field_data(article: Dict[str, Any], mapping: Dict[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
    """
    Build Webflow ``fieldData`` for ``article``.

    Returns the field data and the slugs of required entries that ended up
    without a value.
    """
    field_data: Dict[str, Any] = {}
    required: List[str] = []

    for entry in mapping.get("entries") or []:
        if not isinstance(entry, dict):
            continue
        slug = entry.get("webflowSlug")
        internal = entry.get("internal")
        if not slug or not internal:
            continue
        if entry.get("required") and slug not in required:
            required.append(slug)
        if slug in field_data:
            continue

        value = article.get(internal)
        if value is None:
            continue
        value = apply_transform(entry.get("transform"), value)
        if not _is_empty(value):
            field_data[slug] = value

    missing = [slug for slug in required if slug not in field_data]
    return field_data, missing


def prepare_article(article: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Validate an article and fill derived fields.

    Title and content are required. Missing slug, publish date, status and SEO
    title are derived; word count and read time are always recomputed.
    """
    if not isinstance(article, dict):
        raise ValidationError("Article must be an object")

    title = article.get("title")
    content = article.get("content")
    if not title or not content:
        raise ValidationError("Title and content are required")

    prepared = dict(article)
    prepared["slug"] = prepared.get("slug") or slugify(str(title))
    prepared["publishDate"] = prepared.get("publishDate") or iso_timestamp(now or datetime.now(timezone.utc))
    prepared["status"] = prepared.get("status") or "draft"
    prepared["seoTitle"] = prepared.get("seoTitle") or title
    if not prepared.get("seoDescription") and prepared.get("excerpt"):
        prepared["seoDescription"] = prepared["excerpt"]

    word_count = count_words(_TAG_RE.sub(" ", str(content)))
    prepared["wordCount"] = word_count
    prepared["readTime"] = math.ceil(word_count / WORDS_PER_MINUTE)
    return prepared
