"""MCP tool registry: every Bitbucket operation exposed to agents."""

from fastmcp import FastMCP

from bitbucket_mcp.client import BitbucketClient
from bitbucket_mcp.tools import comments, projects, pull_requests, review, users

DEFAULT_SERVER_NAME = "mcp-bitbucket-server"

_REGISTRARS = (users, projects, pull_requests, comments, review)


def register_tools(mcp: FastMCP, client: BitbucketClient) -> None:
    """Register all tools on mcp, bound to client."""
    for module in _REGISTRARS:
        module.register(mcp, client)


def build_server(client: BitbucketClient, name: str = DEFAULT_SERVER_NAME) -> FastMCP:
    """Create the MCP server with every tool registered."""
    mcp = FastMCP(name)
    register_tools(mcp, client)
    return mcp


__all__ = ["DEFAULT_SERVER_NAME", "build_server", "register_tools"]
