"""
Request and response models for the Webflow service API.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class CacheInvalidateRequest(BaseModel):
    """Invalidate a single key or every key matching a regular expression."""

    key: Optional[str] = Field(default=None, description="Exact cache key")
    pattern: Optional[str] = Field(default=None, description="Regular expression searched in each key")


class CacheInvalidateResponse(BaseModel):
    ok: bool = True
    invalidated: int


class CacheStatsResponse(BaseModel):
    size: int
    keys: List[str]


class SaveMappingResponse(BaseModel):
    ok: bool = True
    entries: int


class PublishResponse(BaseModel):
    success: bool
    articleId: Optional[str] = None
    slug: str
    message: str


class OptionListResponse(BaseModel):
    items: List[Dict[str, Any]]
    debug: Dict[str, Any] = {}
