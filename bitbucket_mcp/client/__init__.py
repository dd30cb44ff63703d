"""Bitbucket Server REST client."""

from bitbucket_mcp.client.bitbucket import BitbucketClient
from bitbucket_mcp.client.errors import (
    BitbucketApiError,
    BitbucketError,
    InvalidInputError,
    MissingIdentityError,
)

__all__ = [
    "BitbucketApiError",
    "BitbucketClient",
    "BitbucketError",
    "InvalidInputError",
    "MissingIdentityError",
]
