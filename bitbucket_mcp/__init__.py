"""MCP server for Bitbucket Server pull request review."""

__version__ = "1.0.0"
