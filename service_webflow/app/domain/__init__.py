"""
Pure domain helpers for the Webflow service: field guidance, author
profiles and article publishing transforms. Nothing here performs I/O.
"""

from .analysis import build_guidance, tip_for_field
from .authors import fallback_authors, normalize_author
from .publishing import build_field_data, prepare_article, slugify

__all__ = [
    "build_guidance",
    "tip_for_field",
    "fallback_authors",
    "normalize_author",
    "build_field_data",
    "prepare_article",
    "slugify",
]
