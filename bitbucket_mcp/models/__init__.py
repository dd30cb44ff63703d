"""Typed Bitbucket Server payloads (Pydantic)."""

from bitbucket_mcp.models.activity import ActivityAction, RawActivity, ShapedActivity
from bitbucket_mcp.models.base import ApiModel, Page
from bitbucket_mcp.models.comment import (
    CommentAnchor,
    DiffType,
    Emoticon,
    EmoticonInfo,
    FileType,
    LineType,
    RawComment,
    RawCommentProperties,
    RawLikedBy,
    RawReaction,
    ShapedComment,
    ShapedCommentProperties,
    ShapedLikedBy,
    ShapedReaction,
    UserReaction,
)
from bitbucket_mcp.models.diff import DiffFormat, DiffResponse, Whitespace
from bitbucket_mcp.models.project import Project, Repository
from bitbucket_mcp.models.pull_request import (
    Change,
    InboxPullRequest,
    MinimalPullRequest,
    PullRequest,
    PullRequestParticipant,
    PullRequestState,
    Ref,
    ReviewStatus,
)
from bitbucket_mcp.models.user import StrippedUser, User

__all__ = [
    "ActivityAction",
    "ApiModel",
    "Change",
    "CommentAnchor",
    "DiffFormat",
    "DiffResponse",
    "DiffType",
    "Emoticon",
    "EmoticonInfo",
    "FileType",
    "InboxPullRequest",
    "LineType",
    "MinimalPullRequest",
    "Page",
    "Project",
    "PullRequest",
    "PullRequestParticipant",
    "PullRequestState",
    "RawActivity",
    "RawComment",
    "RawCommentProperties",
    "RawLikedBy",
    "RawReaction",
    "Ref",
    "Repository",
    "ReviewStatus",
    "ShapedActivity",
    "ShapedComment",
    "ShapedCommentProperties",
    "ShapedLikedBy",
    "ShapedReaction",
    "StrippedUser",
    "User",
    "UserReaction",
    "Whitespace",
]
