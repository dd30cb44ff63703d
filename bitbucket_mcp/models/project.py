"""Projects and repositories."""

from typing import Any, Dict, Optional

from bitbucket_mcp.models.base import ApiModel


class Project(ApiModel):
    """Container for repositories; key is the immutable identifier."""

    id: Optional[int] = None
    key: str
    name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    public: Optional[bool] = None
    scope: Optional[str] = None
    links: Optional[Dict[str, Any]] = None


class Repository(ApiModel):
    """Repository; slug is unique within its project."""

    id: Optional[int] = None
    name: Optional[str] = None
    slug: str
    description: Optional[str] = None
    hierarchy_id: Optional[str] = None
    scm_id: Optional[str] = None
    state: Optional[str] = None
    status_message: Optional[str] = None
    forkable: Optional[bool] = None
    archived: Optional[bool] = None
    public: Optional[bool] = None
    partition: Optional[int] = None
    scope: Optional[str] = None
    project: Optional[Project] = None
    origin: Optional["Repository"] = None
    links: Optional[Dict[str, Any]] = None
