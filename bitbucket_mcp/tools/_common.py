"""Shared pieces for tool handlers: parameter types, validation, payloads, error mapping."""

import json
import logging
from typing import Annotated, Any, Callable

from fastmcp.exceptions import ToolError
from pydantic import BaseModel, Field, ValidationError

from bitbucket_mcp.client import BitbucketClient, BitbucketError, InvalidInputError
from bitbucket_mcp.models import ApiModel

logger = logging.getLogger("bitbucket_mcp.tools")

ProjectKey = Annotated[str, Field(description="The Bitbucket project key")]
RepositorySlug = Annotated[str, Field(description="The repository slug")]
PullRequestId = Annotated[int, Field(description="The pull request ID")]
Start = Annotated[int | None, Field(description="Starting index for pagination (default: 0)", ge=0)]


def require(value: str | None, label: str) -> str:
    """Reject a blank required identifier before any request is made."""
    if value is None or not value.strip():
        raise InvalidInputError(f"{label} is required")
    return value


def to_json(result: Any) -> str:
    """Serialize a model (upstream key names) or plain data as indented JSON."""
    if isinstance(result, ApiModel):
        result = result.to_payload()
    elif isinstance(result, BaseModel):
        result = result.model_dump(mode="json", by_alias=True)
    return json.dumps(result, indent=2, ensure_ascii=False)


def run_tool(name: str, handler: Callable[..., str], client: BitbucketClient, **params: Any) -> str:
    """Call a handler, logging the call and turning client errors into ToolError."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items() if v is not None)
    logger.info("%s called with: %s", name, param_str)
    try:
        result = handler(client, **params)
    except BitbucketError as e:
        logger.error("%s failed: %s", name, e)
        raise ToolError(str(e)) from e
    except ValidationError as e:
        # nested replies are validated while shaping, after the client returns
        logger.error("%s got an unexpected response: %s", name, e)
        raise ToolError(f"Unexpected response from Bitbucket Server: {e}") from e
    logger.debug("%s returned %d chars", name, len(result))
    return result
