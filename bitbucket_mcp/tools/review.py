"""Review status tool."""

from typing import Annotated

from fastmcp import FastMCP
from pydantic import Field

from bitbucket_mcp.client import BitbucketClient
from bitbucket_mcp.models import ReviewStatus
from bitbucket_mcp.tools._common import (
    ProjectKey,
    PullRequestId,
    RepositorySlug,
    require,
    run_tool,
    to_json,
)


def update_review_status(
    client: BitbucketClient,
    project_key: str,
    repository_slug: str,
    pull_request_id: int,
    status: str,
) -> str:
    require(project_key, "Project key")
    require(repository_slug, "Repository slug")
    participant = client.update_review_status(project_key, repository_slug, pull_request_id, status)
    return to_json(participant)


def register(mcp: FastMCP, client: BitbucketClient) -> None:
    @mcp.tool(
        name="bitbucket_update_review_status",
        title="Update Pull Request Review Status",
        description=(
            "Change the review status for a pull request. Sets the authenticated user's review status to "
            "APPROVED (approve the PR), NEEDS_WORK (request changes - shows as \"Requested changes\" in "
            "UI), or UNAPPROVED (neutral/remove approval). Automatically detects the authenticated user "
            "and adds them as a participant/reviewer if not already. Requires REPO_READ permission."
        ),
    )
    def bitbucket_update_review_status(
        projectKey: ProjectKey,
        repositorySlug: RepositorySlug,
        pullRequestId: PullRequestId,
        status: Annotated[
            ReviewStatus,
            Field(
                description=(
                    "The review status: APPROVED (approve), NEEDS_WORK (request changes), "
                    "or UNAPPROVED (neutral/remove approval)"
                )
            ),
        ],
    ) -> str:
        return run_tool(
            "bitbucket_update_review_status",
            update_review_status,
            client,
            project_key=projectKey,
            repository_slug=repositorySlug,
            pull_request_id=pullRequestId,
            status=status,
        )
