"""Pull request activity log entries."""

from typing import Any, Dict, List, Literal, Optional

from bitbucket_mcp.models.base import ApiModel
from bitbucket_mcp.models.comment import CommentAnchor, RawComment, ShapedComment
from bitbucket_mcp.models.user import StrippedUser, User

ActivityAction = Literal[
    "APPROVED",
    "AUTO_MERGE_CANCELLED",
    "AUTO_MERGE_REQUESTED",
    "COMMENTED",
    "DECLINED",
    "DELETED",
    "MERGED",
    "OPENED",
    "REOPENED",
    "RESCOPED",
    "REVIEW_COMMENTED",
    "REVIEW_DISCARDED",
    "REVIEW_FINISHED",
    "REVIEWED",
    "UNAPPROVED",
    "UPDATED",
]


class _ActivityFields(ApiModel):
    id: int
    created_date: Optional[int] = None
    action: Optional[str] = None
    comment_action: Optional[str] = None
    comment_anchor: Optional[CommentAnchor] = None
    commit: Optional[Dict[str, Any]] = None
    added_reviewers: Optional[List[User]] = None
    removed_reviewers: Optional[List[User]] = None
    added: Optional[Dict[str, Any]] = None
    removed: Optional[Dict[str, Any]] = None


class RawActivity(_ActivityFields):
    """Activity as returned by the API (append-only, never mutated)."""

    user: Optional[User] = None
    comment: Optional[RawComment] = None
    diff: Optional[Any] = None


class ShapedActivity(_ActivityFields):
    """Activity without the diff, with stripped user and comment."""

    user: Optional[StrippedUser] = None
    comment: Optional[ShapedComment] = None
