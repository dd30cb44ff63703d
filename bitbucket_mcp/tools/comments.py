"""Pull request comment and reaction tools."""

from typing import Annotated

from fastmcp import FastMCP
from pydantic import Field

from bitbucket_mcp.client import BitbucketClient
from bitbucket_mcp.models import Emoticon, FileType, LineType
from bitbucket_mcp.tools._common import (
    ProjectKey,
    PullRequestId,
    RepositorySlug,
    require,
    run_tool,
    to_json,
)

CommentText = Annotated[str, Field(description="The comment text")]
CommentId = Annotated[int, Field(description="The comment ID")]


def _check_target(project_key: str, repository_slug: str) -> None:
    require(project_key, "Project key")
    require(repository_slug, "Repository slug")


def add_pr_comment(
    client: BitbucketClient,
    project_key: str,
    repository_slug: str,
    pull_request_id: int,
    text: str,
    parent_id: int | None = None,
    path: str | None = None,
    line: int | None = None,
    line_type: str | None = None,
    file_type: str | None = None,
) -> str:
    """General, reply, file or line comment; returns the created comment."""
    _check_target(project_key, repository_slug)
    require(text, "Comment text")
    comment = client.add_pull_request_comment(
        project_key,
        repository_slug,
        pull_request_id,
        text,
        parent_id=parent_id,
        path=path,
        line=line,
        line_type=line_type,
        file_type=file_type,
    )
    return to_json(comment)


def add_pr_file_comment(
    client: BitbucketClient,
    project_key: str,
    repository_slug: str,
    pull_request_id: int,
    text: str,
    path: str,
) -> str:
    _check_target(project_key, repository_slug)
    require(text, "Comment text")
    require(path, "File path")
    comment = client.add_pull_request_comment(project_key, repository_slug, pull_request_id, text, path=path)
    return f"File comment added successfully. Comment ID: {comment.id}"


def add_pr_line_comment(
    client: BitbucketClient,
    project_key: str,
    repository_slug: str,
    pull_request_id: int,
    text: str,
    path: str,
    line: int,
    line_type: str,
    file_type: str,
) -> str:
    _check_target(project_key, repository_slug)
    require(text, "Comment text")
    require(path, "File path")
    comment = client.add_pull_request_comment(
        project_key,
        repository_slug,
        pull_request_id,
        text,
        path=path,
        line=line,
        line_type=line_type,
        file_type=file_type,
    )
    return f"Line comment added successfully. Comment ID: {comment.id}"


def delete_pr_comment(
    client: BitbucketClient,
    project_key: str,
    repository_slug: str,
    pull_request_id: int,
    comment_id: int,
    version: int,
) -> str:
    _check_target(project_key, repository_slug)
    client.delete_pull_request_comment(project_key, repository_slug, pull_request_id, comment_id, version)
    return f"Comment {comment_id} deleted successfully."


def add_pr_comment_reaction(
    client: BitbucketClient,
    project_key: str,
    repository_slug: str,
    pull_request_id: int,
    comment_id: int,
    emoticon: str,
) -> str:
    _check_target(project_key, repository_slug)
    reaction = client.add_comment_reaction(project_key, repository_slug, pull_request_id, comment_id, emoticon)
    shortcut = reaction.emoticon.shortcut or emoticon
    return (
        f'Reaction "{shortcut}" added successfully to comment {comment_id} '
        f"by {reaction.user.display_name}."
    )


def remove_pr_comment_reaction(
    client: BitbucketClient,
    project_key: str,
    repository_slug: str,
    pull_request_id: int,
    comment_id: int,
    emoticon: str,
) -> str:
    _check_target(project_key, repository_slug)
    client.remove_comment_reaction(project_key, repository_slug, pull_request_id, comment_id, emoticon)
    return f'Reaction "{emoticon}" removed successfully from comment {comment_id}.'


def register(mcp: FastMCP, client: BitbucketClient) -> None:
    @mcp.tool(
        name="bitbucket_add_pr_comment",
        title="Add Pull Request Comment",
        description=(
            "Add a comment to a pull request. Supports general comments, replies, and inline "
            "file/line comments"
        ),
    )
    def bitbucket_add_pr_comment(
        projectKey: ProjectKey,
        repositorySlug: RepositorySlug,
        pullRequestId: PullRequestId,
        text: CommentText,
        parentId: Annotated[int | None, Field(description="Parent comment ID for replies")] = None,
        path: Annotated[str | None, Field(description="File path for file-specific comments")] = None,
        line: Annotated[int | None, Field(description="Line number for inline comments")] = None,
        lineType: Annotated[LineType | None, Field(description="Type of line (default: CONTEXT)")] = None,
        fileType: Annotated[FileType | None, Field(description="Side of diff (default: TO)")] = None,
    ) -> str:
        return run_tool(
            "bitbucket_add_pr_comment",
            add_pr_comment,
            client,
            project_key=projectKey,
            repository_slug=repositorySlug,
            pull_request_id=pullRequestId,
            text=text,
            parent_id=parentId,
            path=path,
            line=line,
            line_type=lineType,
            file_type=fileType,
        )

    @mcp.tool(
        name="add_pr_file_comment",
        title="Add File-Level Pull Request Comment",
        description=(
            "Add a comment attached to a specific file in a pull request (not to a specific line). "
            "The comment will appear at the file level in the PR diff view. To reply to an existing "
            "comment (including file/line comments), use bitbucket_add_pr_comment instead."
        ),
    )
    def add_pr_file_comment_tool(
        projectKey: ProjectKey,
        repositorySlug: RepositorySlug,
        pullRequestId: PullRequestId,
        text: CommentText,
        path: Annotated[str, Field(description='File path to attach the comment to (e.g., "src/main.ts")')],
    ) -> str:
        return run_tool(
            "add_pr_file_comment",
            add_pr_file_comment,
            client,
            project_key=projectKey,
            repository_slug=repositorySlug,
            pull_request_id=pullRequestId,
            text=text,
            path=path,
        )

    @mcp.tool(
        name="bitbucket_add_pr_line_comment",
        title="Add Line-Level Pull Request Comment",
        description=(
            "Add an inline comment to a specific line in a pull request. Use the line numbers from "
            "bitbucket_get_pull_request_file_diff (destination line for TO side, source line for FROM "
            "side). Match the lineType to the segment type from the diff (ADDED/REMOVED/CONTEXT). To "
            "reply to an existing comment (including file/line comments), use bitbucket_add_pr_comment "
            "instead."
        ),
    )
    def bitbucket_add_pr_line_comment(
        projectKey: ProjectKey,
        repositorySlug: RepositorySlug,
        pullRequestId: PullRequestId,
        text: CommentText,
        path: Annotated[str, Field(description='File path (e.g., "src/main.ts")')],
        line: Annotated[
            int, Field(description="Line number to comment on (use destination line number from diff)")
        ],
        lineType: Annotated[
            LineType,
            Field(description="Type of line: ADDED (green +), REMOVED (red -), or CONTEXT (unchanged)"),
        ],
        fileType: Annotated[
            FileType, Field(description="Side of diff: FROM (source/old) or TO (destination/new)")
        ],
    ) -> str:
        return run_tool(
            "bitbucket_add_pr_line_comment",
            add_pr_line_comment,
            client,
            project_key=projectKey,
            repository_slug=repositorySlug,
            pull_request_id=pullRequestId,
            text=text,
            path=path,
            line=line,
            line_type=lineType,
            file_type=fileType,
        )

    @mcp.tool(
        name="delete_pr_comment",
        title="Delete Pull Request Comment",
        description=(
            "Delete a pull request comment. You can delete your own comments. Only REPO_ADMIN users can "
            "delete comments created by others. Comments with replies cannot be deleted. You must provide "
            "the comment version to prevent concurrent modification conflicts - get the version from the "
            "comment object."
        ),
    )
    def delete_pr_comment_tool(
        projectKey: ProjectKey,
        repositorySlug: RepositorySlug,
        pullRequestId: PullRequestId,
        commentId: Annotated[int, Field(description="The ID of the comment to delete")],
        version: Annotated[
            int, Field(description="The expected version of the comment (get from comment object)")
        ],
    ) -> str:
        return run_tool(
            "delete_pr_comment",
            delete_pr_comment,
            client,
            project_key=projectKey,
            repository_slug=repositorySlug,
            pull_request_id=pullRequestId,
            comment_id=commentId,
            version=version,
        )

    @mcp.tool(
        name="bitbucket_add_pr_comment_reaction",
        title="Add Emoticon Reaction to PR Comment",
        description=(
            "Add an emoticon reaction to a pull request comment. Supported emoticons: thumbsup, "
            "thumbsdown, heart, thinking_face, laughing. The operation is idempotent - adding the same "
            "reaction twice will succeed."
        ),
    )
    def bitbucket_add_pr_comment_reaction(
        projectKey: ProjectKey,
        repositorySlug: RepositorySlug,
        pullRequestId: PullRequestId,
        commentId: CommentId,
        emoticon: Annotated[Emoticon, Field(description="The emoticon to add")],
    ) -> str:
        return run_tool(
            "bitbucket_add_pr_comment_reaction",
            add_pr_comment_reaction,
            client,
            project_key=projectKey,
            repository_slug=repositorySlug,
            pull_request_id=pullRequestId,
            comment_id=commentId,
            emoticon=emoticon,
        )

    @mcp.tool(
        name="remove_pr_comment_reaction",
        title="Remove Emoticon Reaction from PR Comment",
        description=(
            "Remove an emoticon reaction from a pull request comment. Only the user who added the "
            "reaction can remove it. Supported emoticons: thumbsup, thumbsdown, heart, thinking_face, "
            "laughing."
        ),
    )
    def remove_pr_comment_reaction_tool(
        projectKey: ProjectKey,
        repositorySlug: RepositorySlug,
        pullRequestId: PullRequestId,
        commentId: CommentId,
        emoticon: Annotated[Emoticon, Field(description="The emoticon to remove")],
    ) -> str:
        return run_tool(
            "remove_pr_comment_reaction",
            remove_pr_comment_reaction,
            client,
            project_key=projectKey,
            repository_slug=repositorySlug,
            pull_request_id=pullRequestId,
            comment_id=commentId,
            emoticon=emoticon,
        )
