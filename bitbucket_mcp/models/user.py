"""Bitbucket Server user."""

from typing import Any, Dict, Optional

from bitbucket_mcp.models.base import ApiModel


class _UserFields(ApiModel):
    display_name: Optional[str] = None
    email_address: Optional[str] = None
    id: Optional[int] = None
    name: Optional[str] = None
    slug: Optional[str] = None
    type: Optional[str] = None
    active: Optional[bool] = None


class User(_UserFields):
    """User as returned by the API (with links)."""

    links: Optional[Dict[str, Any]] = None


class StrippedUser(_UserFields):
    """User without links."""
