"""
Persisted Webflow credentials and collection ids.

Values saved here take precedence over environment settings so an operator
can configure the integration from the settings UI without a redeploy.
Tokens are stored in plain text.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from shared.config import BaseConfig
from .json_file import JsonFileStore


CONFIG_FILENAME = "webflow-config.json"

CONFIG_FIELDS = ("apiToken", "siteId", "authorsCollectionId", "articlesCollectionId")


@dataclass(frozen=True)
class WebflowCredentials:
    """Effective credentials after merging the saved config over settings."""

    token: Optional[str]
    site_id: Optional[str]
    authors_collection_id: Optional[str]
    articles_collection_id: Optional[str]

    @property
    def is_configured(self) -> bool:
        return bool(self.token and self.site_id)


def token_preview(token: Optional[str]) -> Optional[str]:
    """Short, display-safe prefix of an API token."""
    if not token:
        return None
    if len(token) <= 8:
        return token
    return f"{token[:6]}…"


class ConfigStore:
    """Reads and writes ``webflow-config.json`` under the data directory."""

    def __init__(self, data_dir: Union[str, Path]):
        self._file = JsonFileStore(Path(data_dir) / CONFIG_FILENAME, "webflow.config_store")

    @property
    def path(self) -> Path:
        return self._file.path

    def get_webflow_config(self) -> Dict[str, Any]:
        stored = self._file.load()
        return stored if isinstance(stored, dict) else {}

    def save_webflow_config(self, partial: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Merge known fields from ``partial`` over the saved config and persist it.

        Fields that are absent or None keep their previous value. Explicit empty
        strings are stored, which blanks the field and lets the environment
        value apply again.
        """
        merged = dict(self.get_webflow_config())
        for field in CONFIG_FIELDS:
            value = partial.get(field)
            if value is not None:
                merged[field] = str(value).strip()

        self._file.dump(merged)
        self._file.logger.info(
            "Webflow config saved",
            fields=sorted(k for k in CONFIG_FIELDS if partial.get(k) is not None),
            token_preview=token_preview(merged.get("apiToken")),
        )
        return merged

    def resolve_credentials(self, settings: BaseConfig) -> WebflowCredentials:
        saved = self.get_webflow_config()
        return WebflowCredentials(
            token=saved.get("apiToken") or settings.webflow_api_token,
            site_id=saved.get("siteId") or settings.webflow_site_id,
            authors_collection_id=saved.get("authorsCollectionId") or settings.webflow_authors_collection_id,
            articles_collection_id=saved.get("articlesCollectionId") or settings.webflow_articles_collection_id,
        )
