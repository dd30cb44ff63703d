"""Project and repository tools."""

from typing import Annotated

from fastmcp import FastMCP
from pydantic import Field

from bitbucket_mcp.client import BitbucketClient
from bitbucket_mcp.tools._common import ProjectKey, Start, require, run_tool, to_json


def list_projects(
    client: BitbucketClient,
    name: str | None = None,
    permission: str | None = None,
    start: int | None = None,
    limit: int | None = None,
) -> str:
    return to_json(client.list_projects(name=name, permission=permission, start=start, limit=limit))


def list_repositories(client: BitbucketClient, project_key: str) -> str:
    require(project_key, "Project key")
    return to_json(client.list_repositories(project_key))


def register(mcp: FastMCP, client: BitbucketClient) -> None:
    @mcp.tool(
        name="bitbucket_list_projects",
        title="List Projects",
        description=(
            "Retrieve a page of projects. Only projects for which the authenticated user has "
            "PROJECT_VIEW permission will be returned. Can filter by name or permission level."
        ),
    )
    def bitbucket_list_projects(
        name: Annotated[str | None, Field(description="Filter projects by name (partial match)")] = None,
        permission: Annotated[
            str | None,
            Field(description="Filter by permission (e.g., PROJECT_READ, PROJECT_WRITE, PROJECT_ADMIN)"),
        ] = None,
        start: Start = None,
        limit: Annotated[
            int | None, Field(description="Maximum number of projects to return (default: 25)", ge=1)
        ] = None,
    ) -> str:
        return run_tool(
            "bitbucket_list_projects",
            list_projects,
            client,
            name=name,
            permission=permission,
            start=start,
            limit=limit,
        )

    @mcp.tool(
        name="bitbucket_list_repositories",
        title="List Bitbucket Repositories",
        description="List all repositories in a Bitbucket Server project",
    )
    def bitbucket_list_repositories(projectKey: ProjectKey) -> str:
        return run_tool("bitbucket_list_repositories", list_repositories, client, project_key=projectKey)
