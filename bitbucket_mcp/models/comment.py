"""Pull request comments: raw API shape and the reduced shape given to agents."""

from typing import Any, Dict, List, Literal, Optional

from bitbucket_mcp.models.base import ApiModel
from bitbucket_mcp.models.user import StrippedUser, User

LineType = Literal["ADDED", "REMOVED", "CONTEXT"]
FileType = Literal["FROM", "TO"]
DiffType = Literal["COMMIT", "EFFECTIVE", "RANGE"]
Emoticon = Literal["thumbsup", "thumbsdown", "heart", "thinking_face", "laughing"]


class CommentAnchor(ApiModel):
    """File/line location a comment is attached to.

    path and src_path are plain strings in requests and path objects in
    some responses.
    """

    diff_type: Optional[str] = None
    file_type: Optional[str] = None
    line: Optional[int] = None
    line_type: Optional[str] = None
    orphaned: Optional[bool] = None
    path: Optional[Any] = None
    src_path: Optional[Any] = None


class RawReaction(ApiModel):
    emoticon: Any = None
    users: Optional[List[Any]] = None
    # set only on reactions that were already simplified
    count: Optional[int] = None


class RawLikedBy(ApiModel):
    total: Optional[int] = None


class RawCommentProperties(ApiModel):
    reactions: Optional[List[RawReaction]] = None
    liked_by: Optional[RawLikedBy] = None


class RawComment(ApiModel):
    """Comment as returned by the API.

    Replies under comments stay as upstream JSON and are validated one
    level at a time when shaped, so reply depth is not limited by the
    validator.
    """

    id: int
    version: Optional[int] = None
    text: Optional[str] = None
    author: Optional[User] = None
    created_date: Optional[int] = None
    updated_date: Optional[int] = None
    comments: Optional[List[Dict[str, Any]]] = None
    anchor: Optional[CommentAnchor] = None
    permitted_operations: Optional[Any] = None
    properties: Optional[RawCommentProperties] = None
    parent: Optional[Dict[str, Any]] = None


class ShapedReaction(ApiModel):
    emoticon: Any = None
    count: int


class ShapedLikedBy(ApiModel):
    total: int


class ShapedCommentProperties(ApiModel):
    reactions: Optional[List[ShapedReaction]] = None
    liked_by: Optional[ShapedLikedBy] = None


class ShapedComment(ApiModel):
    """Comment without anchor and permittedOperations, with reaction counts instead of user lists."""

    id: int
    version: Optional[int] = None
    text: Optional[str] = None
    author: Optional[StrippedUser] = None
    created_date: Optional[int] = None
    updated_date: Optional[int] = None
    # already stripped replies, as plain JSON
    comments: Optional[List[Dict[str, Any]]] = None
    properties: Optional[ShapedCommentProperties] = None
    parent: Optional[Dict[str, Any]] = None


class EmoticonInfo(ApiModel):
    shortcut: Optional[str] = None
    url: Optional[str] = None
    value: Optional[str] = None


class UserReaction(ApiModel):
    """Result of adding a reaction to a comment."""

    comment: Optional[RawComment] = None
    emoticon: EmoticonInfo
    user: User
