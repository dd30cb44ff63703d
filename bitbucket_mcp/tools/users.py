"""User tools."""

from typing import Annotated

from fastmcp import FastMCP
from pydantic import Field

from bitbucket_mcp.client import BitbucketClient
from bitbucket_mcp.tools._common import require, run_tool, to_json


def get_user_profile(client: BitbucketClient, username: str) -> str:
    require(username, "Username")
    return to_json(client.get_user_profile(username))


def get_all_users(client: BitbucketClient, filter: str | None = None) -> str:
    return to_json(client.get_all_users(filter=filter))


def register(mcp: FastMCP, client: BitbucketClient) -> None:
    @mcp.tool(
        name="bitbucket_get_user_profile",
        title="Get Bitbucket User Profile",
        description="Gets Bitbucket Server user profile details by username",
    )
    def bitbucket_get_user_profile(
        username: Annotated[str, Field(description="The username/slug of the Bitbucket Server user")],
    ) -> str:
        return run_tool("bitbucket_get_user_profile", get_user_profile, client, username=username)

    @mcp.tool(
        name="bitbucket_get_all_users",
        title="Get All Bitbucket Users",
        description="Retrieve a page of users from Bitbucket Server, optionally filtered by search term",
    )
    def bitbucket_get_all_users(
        filter: Annotated[
            str | None,
            Field(description="Filter users by username, name or email address (partial match)"),
        ] = None,
    ) -> str:
        return run_tool("bitbucket_get_all_users", get_all_users, client, filter=filter)
