"""Pull requests, refs, participants and file changes."""

from typing import Any, Dict, List, Literal, Optional

from bitbucket_mcp.models.base import ApiModel
from bitbucket_mcp.models.project import Project, Repository
from bitbucket_mcp.models.user import User

PullRequestState = Literal["OPEN", "MERGED", "DECLINED"]
ParticipantRole = Literal["AUTHOR", "REVIEWER", "PARTICIPANT"]
ReviewStatus = Literal["APPROVED", "NEEDS_WORK", "UNAPPROVED"]


class Ref(ApiModel):
    """Branch reference (refs/heads/...) in a repository."""

    id: Optional[str] = None
    display_id: Optional[str] = None
    latest_commit: Optional[str] = None
    repository: Optional[Repository] = None


class PullRequestParticipant(ApiModel):
    """A user's role and review status on a pull request."""

    user: Optional[User] = None
    role: Optional[str] = None
    approved: Optional[bool] = None
    status: Optional[str] = None
    last_reviewed_commit: Optional[str] = None


class PullRequest(ApiModel):
    """Full pull request; version increments on every change."""

    id: int
    version: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    state: Optional[str] = None
    open: Optional[bool] = None
    closed: Optional[bool] = None
    created_date: Optional[int] = None
    updated_date: Optional[int] = None
    from_ref: Optional[Ref] = None
    to_ref: Optional[Ref] = None
    locked: Optional[bool] = None
    author: Optional[PullRequestParticipant] = None
    reviewers: Optional[List[PullRequestParticipant]] = None
    participants: Optional[List[PullRequestParticipant]] = None
    links: Optional[Dict[str, Any]] = None


class InboxRepository(Repository):
    project: Project


class InboxRef(Ref):
    repository: InboxRepository


class InboxAuthor(PullRequestParticipant):
    user: User


class InboxPullRequest(PullRequest):
    """Pull request from the inbox endpoint, where author and target repository are always present."""

    author: InboxAuthor
    to_ref: InboxRef


class MinimalPullRequest(ApiModel):
    """Inbox entry reduced to what an agent needs to pick a PR to review."""

    id: int
    title: Optional[str]
    description: Optional[str]
    state: Optional[str]
    author: Optional[str]
    project_key: str
    repository_slug: str
    created_date: Optional[int]
    updated_date: Optional[int]


class Change(ApiModel):
    """Changed file in a pull request."""

    content_id: Optional[str] = None
    src_content_id: Optional[str] = None
    executable: Optional[bool] = None
    percent_unchanged: Optional[int] = None
    type: Optional[str] = None
    node_type: Optional[str] = None
    src_path: Optional[Dict[str, Any]] = None
    path: Optional[Dict[str, Any]] = None
    properties: Optional[Dict[str, Any]] = None
