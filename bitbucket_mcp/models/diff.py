"""Structured diff: diffs -> hunks -> segments -> lines."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from bitbucket_mcp.models.base import ApiModel
from bitbucket_mcp.models.comment import RawComment

DiffFormat = Literal["text", "json"]
Whitespace = Literal["show", "ignore-all"]


class DiffLine(ApiModel):
    """One line; source/destination are the coordinates used to anchor line comments."""

    source: Optional[int] = None
    destination: Optional[int] = None
    line: Optional[str] = None
    truncated: Optional[bool] = None
    comment_ids: Optional[List[int]] = None
    conflict_marker: Optional[str] = None


class DiffSegment(ApiModel):
    type: Optional[str] = None
    lines: List[DiffLine] = Field(default_factory=list)
    truncated: Optional[bool] = None


class DiffHunk(ApiModel):
    source_line: Optional[int] = None
    source_span: Optional[int] = None
    destination_line: Optional[int] = None
    destination_span: Optional[int] = None
    segments: List[DiffSegment] = Field(default_factory=list)
    truncated: Optional[bool] = None
    context: Optional[str] = None


class Diff(ApiModel):
    source: Optional[Any] = None
    destination: Optional[Any] = None
    hunks: Optional[List[DiffHunk]] = None
    truncated: Optional[bool] = None
    properties: Optional[Dict[str, Any]] = None
    binary: Optional[bool] = None
    line_comments: Optional[List[RawComment]] = None
    file_comments: Optional[List[RawComment]] = None


class DiffResponse(ApiModel):
    diffs: List[Diff] = Field(default_factory=list)
    from_hash: Optional[str] = None
    to_hash: Optional[str] = None
    context_lines: Optional[int] = None
    whitespace: Optional[str] = None
