"""Pull request read tools and pull request creation."""

from typing import Annotated, List

from fastmcp import FastMCP
from pydantic import Field

from bitbucket_mcp.client import BitbucketClient
from bitbucket_mcp.models import ActivityAction, DiffFormat, Whitespace
from bitbucket_mcp.shaping import shape_activities_page, shape_inbox_page
from bitbucket_mcp.tools._common import (
    ProjectKey,
    PullRequestId,
    RepositorySlug,
    Start,
    require,
    run_tool,
    to_json,
)

ContextLines = Annotated[
    int | None,
    Field(description="Number of context lines around added/removed lines (default: 10)", ge=0),
]


def get_pull_request(client: BitbucketClient, project_key: str, repository_slug: str, pull_request_id: int) -> str:
    require(project_key, "Project key")
    require(repository_slug, "Repository slug")
    return to_json(client.get_pull_request(project_key, repository_slug, pull_request_id))


def get_pull_request_changes(
    client: BitbucketClient,
    project_key: str,
    repository_slug: str,
    pull_request_id: int,
    limit: int | None = None,
) -> str:
    require(project_key, "Project key")
    require(repository_slug, "Repository slug")
    return to_json(client.get_pull_request_changes(project_key, repository_slug, pull_request_id, limit=limit))


def get_pull_request_diff(
    client: BitbucketClient,
    project_key: str,
    repository_slug: str,
    pull_request_id: int,
    path: str | None = None,
    since_id: str | None = None,
    until_id: str | None = None,
    context_lines: int | None = None,
    whitespace: str | None = None,
    format: str | None = None,
) -> str:
    """Raw unified diff text for format "text" (the default), structured JSON for "json"."""
    require(project_key, "Project key")
    require(repository_slug, "Repository slug")
    result = client.get_pull_request_diff(
        project_key,
        repository_slug,
        pull_request_id,
        path=path,
        context_lines=context_lines,
        whitespace=whitespace,
        since_id=since_id,
        until_id=until_id,
        format=format or "text",
    )
    if isinstance(result, str):
        return result
    return to_json(result)


def get_pull_request_file_diff(
    client: BitbucketClient,
    project_key: str,
    repository_slug: str,
    pull_request_id: int,
    path: str,
    context_lines: int | None = None,
) -> str:
    require(project_key, "Project key")
    require(repository_slug, "Repository slug")
    require(path, "File path")
    diff = client.get_pull_request_file_diff(
        project_key, repository_slug, pull_request_id, path, context_lines=context_lines
    )
    return to_json(diff)


def get_pull_request_activities(
    client: BitbucketClient,
    project_key: str,
    repository_slug: str,
    pull_request_id: int,
    activity_types: List[str] | None = None,
    start: int | None = None,
    limit: int | None = None,
) -> str:
    """Activities with diffs, links, anchors and reaction user lists stripped."""
    require(project_key, "Project key")
    require(repository_slug, "Repository slug")
    page = client.get_pull_request_activities(
        project_key,
        repository_slug,
        pull_request_id,
        activity_types=activity_types,
        start=start,
        limit=limit,
    )
    return to_json(shape_activities_page(page, activity_types))


def get_inbox_pull_requests(client: BitbucketClient, start: int | None = None, limit: int | None = None) -> str:
    return to_json(shape_inbox_page(client.get_inbox_pull_requests(start=start, limit=limit)))


def create_pull_request(
    client: BitbucketClient,
    project_key: str,
    repository_slug: str,
    from_branch: str,
    to_branch: str,
    title: str,
    description: str | None = None,
    reviewers: List[str] | None = None,
) -> str:
    require(project_key, "Project key")
    require(repository_slug, "Repository slug")
    require(from_branch, "Source branch")
    require(to_branch, "Target branch")
    require(title, "Title")
    pr = client.create_pull_request(
        project_key,
        repository_slug,
        from_branch,
        to_branch,
        title,
        description=description,
        reviewers=reviewers,
    )
    return to_json(pr)


def register(mcp: FastMCP, client: BitbucketClient) -> None:
    @mcp.tool(
        name="bitbucket_get_pull_request",
        title="Get Pull Request Details",
        description=(
            "Retrieve full details for a pull request including title, description, author, state, "
            "source branch (fromRef), destination branch (toRef), created/updated dates, reviewers, "
            "and participants. Use this to get comprehensive PR metadata."
        ),
    )
    def bitbucket_get_pull_request(
        projectKey: ProjectKey,
        repositorySlug: RepositorySlug,
        pullRequestId: PullRequestId,
    ) -> str:
        return run_tool(
            "bitbucket_get_pull_request",
            get_pull_request,
            client,
            project_key=projectKey,
            repository_slug=repositorySlug,
            pull_request_id=pullRequestId,
        )

    @mcp.tool(
        name="bitbucket_get_pull_request_changes",
        title="Get Pull Request Changes",
        description=(
            "Gets a list of all changed files in a pull request with file-level metadata (file paths, "
            "change types like ADD/MODIFY/DELETE, content IDs). This is useful for getting an overview "
            "of what files changed. For line-by-line diff data, use bitbucket_get_pull_request_file_diff."
        ),
    )
    def bitbucket_get_pull_request_changes(
        projectKey: ProjectKey,
        repositorySlug: RepositorySlug,
        pullRequestId: PullRequestId,
        limit: Annotated[
            int | None,
            Field(description="Number of items to return (default: 25, note: endpoint is not paged)", ge=1),
        ] = None,
    ) -> str:
        return run_tool(
            "bitbucket_get_pull_request_changes",
            get_pull_request_changes,
            client,
            project_key=projectKey,
            repository_slug=repositorySlug,
            pull_request_id=pullRequestId,
            limit=limit,
        )

    @mcp.tool(
        name="bitbucket_get_pull_request_diff",
        title="Get Pull Request Diff",
        description=(
            "Retrieve diff for a pull request. Omit the path parameter to get the full PR diff, or "
            "specify a file path to get diff for a specific file. Use format=\"text\" (default) for raw "
            "unified diff format, or format=\"json\" for structured diff with hunks and segments. Use "
            "contextLines to control how many unchanged lines are shown around changes. Use sinceId and "
            "untilId to get diff between specific commits (useful for reviewing incremental changes)."
        ),
    )
    def bitbucket_get_pull_request_diff(
        projectKey: ProjectKey,
        repositorySlug: RepositorySlug,
        pullRequestId: PullRequestId,
        path: Annotated[
            str | None, Field(description="Optional path to a specific file (omit for full PR diff)")
        ] = None,
        sinceId: Annotated[
            str | None, Field(description="The since commit hash to get diff from a specific commit")
        ] = None,
        untilId: Annotated[
            str | None, Field(description="The until commit hash to get diff up to a specific commit")
        ] = None,
        contextLines: ContextLines = None,
        whitespace: Annotated[
            Whitespace | None, Field(description="Whitespace handling (default: show)")
        ] = None,
        format: Annotated[
            DiffFormat | None,
            Field(description='Response format: "text" for raw diff, "json" for structured (default: text)'),
        ] = None,
    ) -> str:
        return run_tool(
            "bitbucket_get_pull_request_diff",
            get_pull_request_diff,
            client,
            project_key=projectKey,
            repository_slug=repositorySlug,
            pull_request_id=pullRequestId,
            path=path,
            since_id=sinceId,
            until_id=untilId,
            context_lines=contextLines,
            whitespace=whitespace,
            format=format,
        )

    @mcp.tool(
        name="bitbucket_get_pull_request_file_diff",
        title="Get Pull Request File Diff",
        description=(
            "Gets a structured line-by-line diff for a specific file in a pull request. Returns JSON with "
            "hunks, segments, and exact line numbers (source and destination). Includes existing comments "
            "embedded in the diff. This is essential for commenting on specific lines - use the line "
            "numbers from this response when adding comments."
        ),
    )
    def bitbucket_get_pull_request_file_diff(
        projectKey: ProjectKey,
        repositorySlug: RepositorySlug,
        pullRequestId: PullRequestId,
        path: Annotated[str, Field(description="The path to the file to diff (e.g., 'src/main.ts')")],
        contextLines: ContextLines = None,
    ) -> str:
        return run_tool(
            "bitbucket_get_pull_request_file_diff",
            get_pull_request_file_diff,
            client,
            project_key=projectKey,
            repository_slug=repositorySlug,
            pull_request_id=pullRequestId,
            path=path,
            context_lines=contextLines,
        )

    @mcp.tool(
        name="bitbucket_get_pull_request_activities",
        title="Get Pull Request Activities",
        description=(
            "Gets activity on a pull request including comments, approvals, merges, reviews, and updates. "
            "Returns a paginated list with action types like COMMENTED, APPROVED, DECLINED, MERGED, "
            "REVIEWED, etc. Use activityTypes to filter: e.g., ['COMMENTED', 'REVIEW_COMMENTED'] for only "
            "comments. Response is optimized for token usage - use commentAnchor.path with "
            "bitbucket_get_pull_request_file_diff to fetch code context when needed."
        ),
    )
    def bitbucket_get_pull_request_activities(
        projectKey: ProjectKey,
        repositorySlug: RepositorySlug,
        pullRequestId: PullRequestId,
        activityTypes: Annotated[
            List[ActivityAction] | None,
            Field(
                description=(
                    'Filter activities by type. Example: ["COMMENTED", "REVIEW_COMMENTED"] to get only '
                    'comments, or ["APPROVED", "UNAPPROVED"] for approvals.'
                )
            ),
        ] = None,
        start: Start = None,
        limit: Annotated[
            int | None, Field(description="Maximum number of items to return (default: 25)", ge=1)
        ] = None,
    ) -> str:
        return run_tool(
            "bitbucket_get_pull_request_activities",
            get_pull_request_activities,
            client,
            project_key=projectKey,
            repository_slug=repositorySlug,
            pull_request_id=pullRequestId,
            activity_types=activityTypes,
            start=start,
            limit=limit,
        )

    @mcp.tool(
        name="bitbucket_get_inbox_pull_requests",
        title="Get Inbox Pull Requests",
        description=(
            "Returns pull requests in the authenticated user's inbox where they are assigned as a reviewer. "
            "Returns PRs across all projects and repositories in one call. Each PR includes only essential "
            "review information: id, title, description, state, author name, projectKey, and "
            "repositorySlug - everything needed to review the PR using other tools."
        ),
    )
    def bitbucket_get_inbox_pull_requests(
        start: Start = None,
        limit: Annotated[
            int | None, Field(description="Maximum number of pull requests to return (default: 25)", ge=1)
        ] = None,
    ) -> str:
        return run_tool(
            "bitbucket_get_inbox_pull_requests",
            get_inbox_pull_requests,
            client,
            start=start,
            limit=limit,
        )

    @mcp.tool(
        name="create_pull_request",
        title="Create Pull Request",
        description=(
            "Create a new pull request from a source branch to a target branch. Accepts simple branch "
            'names (e.g., "feature-x", "main") - they are automatically converted to full refs. Returns '
            "the created PR details including ID, title, state, and links."
        ),
    )
    def create_pull_request_tool(
        projectKey: ProjectKey,
        repositorySlug: RepositorySlug,
        fromBranch: Annotated[str, Field(description='Source branch name (e.g., "feature-x")')],
        toBranch: Annotated[str, Field(description='Target branch name (e.g., "main")')],
        title: Annotated[str, Field(description="PR title")],
        description: Annotated[str | None, Field(description="PR description in markdown format")] = None,
        reviewers: Annotated[
            List[str] | None, Field(description="Array of reviewer usernames to add")
        ] = None,
    ) -> str:
        return run_tool(
            "create_pull_request",
            create_pull_request,
            client,
            project_key=projectKey,
            repository_slug=repositorySlug,
            from_branch=fromBranch,
            to_branch=toBranch,
            title=title,
            description=description,
            reviewers=reviewers,
        )
