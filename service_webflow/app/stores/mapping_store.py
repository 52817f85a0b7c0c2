"""
Persisted mapping from internal article fields to Webflow field slugs.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from shared.errors import ValidationError
from .json_file import JsonFileStore


MAPPING_FILENAME = "webflow-mapping.json"

TRANSFORMS = (
    "identity",
    "plainToHtml",
    "markdownToHtml",
    "stringArray",
    "dateIso",
    "referenceId",
    "boolean",
    "number",
    "cleanIntro",
)


def _entry(internal: str, slug: str, transform: str = "identity", required: bool = False) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"internal": internal, "webflowSlug": slug, "transform": transform}
    if required:
        entry["required"] = True
    return entry


DEFAULT_MAPPING: Dict[str, Any] = {
    "entries": [
        _entry("title", "name", required=True),
        _entry("slug", "slug", required=True),
        _entry("subtitle", "subtitle"),
        _entry("intro", "intro", "cleanIntro"),
        _entry("content", "content", "plainToHtml", required=True),
        _entry("excerpt", "excerpt"),
        _entry("seoTitle", "seo-title", required=True),
        _entry("seoDescription", "meta-description", required=True),
        _entry("category", "section"),
        _entry("section", "section"),
        _entry("topic", "topic"),
        _entry("topic_two", "topic-two"),
        _entry("tags", "tags", "stringArray"),
        _entry("author", "author", "referenceId"),
        _entry("rating", "stjerne", "number"),
        _entry("streaming_service", "watch-now-link"),
        _entry("platform", "streaming-service"),
        _entry("minutes_to_read", "minutes-to-read", "number"),
        _entry("readTime", "minutes-to-read", "number"),
        _entry("wordCount", "word-count", "number"),
        _entry("featured", "featured", "boolean"),
        _entry("trending", "trending", "boolean"),
        _entry("presseakkreditering", "presseakkreditering", "boolean"),
        _entry("festival", "festival"),
        _entry("location", "location"),
        _entry("start_dato", "start-dato", "dateIso"),
        _entry("slut_dato", "slut-dato", "dateIso"),
        _entry("buy_tickets", "buy-tickets"),
        _entry("featuredImage", "thumb"),
    ],
}


class MappingStore:
    """Reads and writes ``webflow-mapping.json`` under the data directory."""

    def __init__(self, data_dir: Union[str, Path]):
        self._file = JsonFileStore(Path(data_dir) / MAPPING_FILENAME, "webflow.mapping_store")

    @property
    def path(self) -> Path:
        return self._file.path

    def read_mapping(self) -> Dict[str, Any]:
        """Return the saved mapping, or the built-in default when none is usable."""
        stored = self._file.load()
        if isinstance(stored, dict) and isinstance(stored.get("entries"), list):
            entries = [entry for entry in stored["entries"] if isinstance(entry, dict)]
            if len(entries) != len(stored["entries"]):
                self._file.logger.warning(
                    "Dropping malformed mapping entries",
                    path=str(self.path),
                    dropped=len(stored["entries"]) - len(entries),
                )
            return {**stored, "entries": entries}
        if stored is not None:
            self._file.logger.warning("Ignoring malformed mapping file", path=str(self.path))
        return copy.deepcopy(DEFAULT_MAPPING)

    def save_mapping(self, mapping: Any) -> Dict[str, Any]:
        """Validate and persist ``mapping``; returns what was written."""
        if not isinstance(mapping, dict):
            raise ValidationError("Invalid mapping", details={"reason": "mapping must be an object"})

        entries = mapping.get("entries")
        if not isinstance(entries, list):
            raise ValidationError("Invalid mapping", details={"reason": "entries must be an array"})

        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise ValidationError(
                    "Invalid mapping",
                    details={"reason": "entries must contain objects", "index": index},
                )

        self._file.dump(mapping)
        return mapping

    def find_internal(self, slug: str, mapping: Optional[Dict[str, Any]] = None) -> Optional[str]:
        """First internal field mapped onto the Webflow ``slug``."""
        entries: List[Dict[str, Any]] = (mapping or self.read_mapping()).get("entries", [])
        for entry in entries:
            if isinstance(entry, dict) and entry.get("webflowSlug") == slug:
                return entry.get("internal")
        return None
