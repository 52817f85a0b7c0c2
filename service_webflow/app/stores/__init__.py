"""
File-backed stores for operator-editable Webflow settings.

Both stores persist a single JSON document under the configured data
directory and overwrite it whole on every save.
"""

from .config_store import ConfigStore, WebflowCredentials, token_preview
from .mapping_store import DEFAULT_MAPPING, MappingStore, TRANSFORMS

__all__ = [
    "ConfigStore",
    "WebflowCredentials",
    "token_preview",
    "DEFAULT_MAPPING",
    "MappingStore",
    "TRANSFORMS",
]
