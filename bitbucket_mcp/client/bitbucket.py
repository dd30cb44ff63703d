"""Bitbucket Server (Data Center) REST API client."""

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import requests
from pydantic import BaseModel

from bitbucket_mcp.client.errors import BitbucketApiError, MissingIdentityError
from bitbucket_mcp.models import (
    Change,
    DiffResponse,
    InboxPullRequest,
    Page,
    Project,
    PullRequest,
    PullRequestParticipant,
    RawActivity,
    RawComment,
    Repository,
    User,
    UserReaction,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

API_PATH = "/rest/api/latest"
COMMENT_LIKES_PATH = "/rest/comment-likes/latest"
USERNAME_HEADER = "X-AUSERNAME"


def _params(**kwargs: Any) -> Dict[str, Any]:
    """Query parameters with unset (None) values left out."""
    return {k: v for k, v in kwargs.items() if v is not None}


def _error_message(resp: requests.Response) -> str:
    """Prefer errors[0].message, then message, then the raw response text."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            message = errors[0].get("message")
            if message:
                return str(message)
        if body.get("message"):
            return str(body["message"])
    return resp.text or resp.reason or f"HTTP {resp.status_code}"


def _parse(resp: requests.Response, model: Type[M]) -> M:
    """Validate a JSON response body into model.

    A body that is not JSON or does not match the model is reported as
    BitbucketApiError with the response status.
    """
    try:
        return model.model_validate(resp.json())
    except ValueError as e:
        raise BitbucketApiError(resp.status_code, f"Unexpected response body: {e}") from e


def _branch_ref(branch: str) -> str:
    return branch if branch.startswith("refs/") else f"refs/heads/{branch}"


def build_comment_body(
    text: str,
    parent_id: Optional[int] = None,
    path: Optional[str] = None,
    line: Optional[int] = None,
    line_type: Optional[str] = None,
    file_type: Optional[str] = None,
) -> Dict[str, Any]:
    """Request body for a new pull request comment.

    No path: general comment. Path only: file comment anchored with
    diffType EFFECTIVE. Path and line: line comment, lineType defaults to
    CONTEXT and fileType to TO. parent_id makes it a reply in every case.
    """
    body: Dict[str, Any] = {"text": text}
    if parent_id is not None:
        body["parent"] = {"id": parent_id}
    if path:
        anchor: Dict[str, Any] = {"path": path, "diffType": "EFFECTIVE"}
        if line is not None:
            anchor["line"] = line
            anchor["lineType"] = line_type or "CONTEXT"
            anchor["fileType"] = file_type or "TO"
        body["anchor"] = anchor
    return body


class BitbucketClient:
    """Bitbucket Server REST API client.

    One instance is created at startup and shared by all tool handlers.
    Every method issues exactly one request, except update_review_status
    which first looks up the authenticated username.
    """

    def __init__(self, base_url: str, token: str, timeout: float | None = 30) -> None:
        base = base_url.rstrip("/")
        self._api_url = f"{base}{API_PATH}"
        self._comment_likes_url = f"{base}{COMMENT_LIKES_PATH}"
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers["Authorization"] = f"Bearer {token}"
        self._session.headers["Content-Type"] = "application/json"

    @property
    def api_url(self) -> str:
        return self._api_url

    def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
        headers: Dict[str, str] | None = None,
        root: str | None = None,
    ) -> requests.Response:
        url = f"{root or self._api_url}{path}"
        logger.debug("%s %s params=%s", method, url, params)
        try:
            resp = self._session.request(
                method,
                url,
                params=params or None,
                json=json,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise BitbucketApiError(None, str(e)) from e
        if not 200 <= resp.status_code < 300:
            raise BitbucketApiError(resp.status_code, _error_message(resp))
        return resp

    @staticmethod
    def _pr_path(project_key: str, repository_slug: str, pull_request_id: int) -> str:
        return f"/projects/{project_key}/repos/{repository_slug}/pull-requests/{pull_request_id}"

    # Users

    def get_user_profile(self, username: str) -> User:
        resp = self._request("GET", f"/users/{username}")
        return _parse(resp, User)

    def get_all_users(self, filter: str | None = None) -> Page[User]:
        resp = self._request("GET", "/users", params=_params(filter=filter or None))
        return _parse(resp, Page[User])

    def get_current_username(self) -> str:
        """Username of the token owner, from the X-AUSERNAME response header."""
        resp = self._request("GET", "/application-properties")
        username = resp.headers.get(USERNAME_HEADER)
        if not username:
            raise MissingIdentityError("Could not determine authenticated user from response headers.")
        return username

    # Projects and repositories

    def list_projects(
        self,
        name: str | None = None,
        permission: str | None = None,
        start: int | None = None,
        limit: int | None = None,
    ) -> Page[Project]:
        params = _params(name=name, permission=permission, start=start, limit=limit)
        resp = self._request("GET", "/projects", params=params)
        return _parse(resp, Page[Project])

    def list_repositories(self, project_key: str) -> Page[Repository]:
        resp = self._request("GET", f"/projects/{project_key}/repos")
        return _parse(resp, Page[Repository])

    # Pull requests

    def get_inbox_pull_requests(
        self,
        start: int | None = None,
        limit: int | None = None,
    ) -> Page[InboxPullRequest]:
        """Pull requests where the authenticated user is a reviewer, across all repositories."""
        resp = self._request("GET", "/inbox/pull-requests", params=_params(start=start, limit=limit))
        return _parse(resp, Page[InboxPullRequest])

    def get_pull_request(self, project_key: str, repository_slug: str, pull_request_id: int) -> PullRequest:
        resp = self._request("GET", self._pr_path(project_key, repository_slug, pull_request_id))
        return _parse(resp, PullRequest)

    def get_pull_request_changes(
        self,
        project_key: str,
        repository_slug: str,
        pull_request_id: int,
        limit: int | None = None,
    ) -> Page[Change]:
        path = f"{self._pr_path(project_key, repository_slug, pull_request_id)}/changes"
        resp = self._request("GET", path, params=_params(withComments="true", limit=limit))
        return _parse(resp, Page[Change])

    def get_pull_request_diff(
        self,
        project_key: str,
        repository_slug: str,
        pull_request_id: int,
        path: str | None = None,
        context_lines: int | None = None,
        whitespace: str | None = None,
        since_id: str | None = None,
        until_id: str | None = None,
        format: str = "text",
    ) -> str | DiffResponse:
        """Diff of the whole pull request, or of one file when path is given.

        format "text" asks for text/plain and returns the unified diff
        unmodified; "json" asks for application/json and returns the
        structured diff.
        """
        url = f"{self._pr_path(project_key, repository_slug, pull_request_id)}/diff/{path or ''}"
        params = _params(
            contextLines=context_lines,
            whitespace=whitespace or None,
            sinceId=since_id,
            untilId=until_id,
        )
        accept = "text/plain" if format == "text" else "application/json"
        resp = self._request("GET", url, params=params, headers={"Accept": accept})
        if format == "text":
            return resp.text
        return _parse(resp, DiffResponse)

    def get_pull_request_file_diff(
        self,
        project_key: str,
        repository_slug: str,
        pull_request_id: int,
        path: str,
        context_lines: int | None = None,
    ) -> DiffResponse:
        """Structured line-by-line diff for one file."""
        url = f"{self._pr_path(project_key, repository_slug, pull_request_id)}/diff/{path}"
        resp = self._request("GET", url, params=_params(contextLines=context_lines))
        return _parse(resp, DiffResponse)

    def get_pull_request_activities(
        self,
        project_key: str,
        repository_slug: str,
        pull_request_id: int,
        activity_types: List[str] | None = None,
        start: int | None = None,
        limit: int | None = None,
    ) -> Page[RawActivity]:
        path = f"{self._pr_path(project_key, repository_slug, pull_request_id)}/activities"
        params = _params(start=start, limit=limit, activityTypes=activity_types or None)
        resp = self._request("GET", path, params=params)
        return _parse(resp, Page[RawActivity])

    def create_pull_request(
        self,
        project_key: str,
        repository_slug: str,
        from_branch: str,
        to_branch: str,
        title: str,
        description: str | None = None,
        reviewers: List[str] | None = None,
    ) -> PullRequest:
        """Open a pull request between two branches of the same repository."""
        repository = {"slug": repository_slug, "project": {"key": project_key}}
        body: Dict[str, Any] = {
            "title": title,
            "fromRef": {"id": _branch_ref(from_branch), "repository": repository},
            "toRef": {"id": _branch_ref(to_branch), "repository": repository},
        }
        if description is not None:
            body["description"] = description
        if reviewers:
            body["reviewers"] = [{"user": {"name": name}} for name in reviewers]
        resp = self._request(
            "POST",
            f"/projects/{project_key}/repos/{repository_slug}/pull-requests",
            json=body,
        )
        return _parse(resp, PullRequest)

    # Comments

    def add_pull_request_comment(
        self,
        project_key: str,
        repository_slug: str,
        pull_request_id: int,
        text: str,
        parent_id: int | None = None,
        path: str | None = None,
        line: int | None = None,
        line_type: str | None = None,
        file_type: str | None = None,
    ) -> RawComment:
        """Add a general, file, line or reply comment (see build_comment_body)."""
        body = build_comment_body(text, parent_id, path, line, line_type, file_type)
        resp = self._request(
            "POST",
            f"{self._pr_path(project_key, repository_slug, pull_request_id)}/comments",
            json=body,
        )
        return _parse(resp, RawComment)

    def delete_pull_request_comment(
        self,
        project_key: str,
        repository_slug: str,
        pull_request_id: int,
        comment_id: int,
        version: int,
    ) -> None:
        """Delete a comment.

        version must match the server's current version of the comment.
        Comments with replies cannot be deleted.
        """
        path = f"{self._pr_path(project_key, repository_slug, pull_request_id)}/comments/{comment_id}"
        self._request("DELETE", path, params={"version": version})

    def _reaction_path(
        self,
        project_key: str,
        repository_slug: str,
        pull_request_id: int,
        comment_id: int,
        emoticon: str,
    ) -> str:
        pr = self._pr_path(project_key, repository_slug, pull_request_id)
        return f"{pr}/comments/{comment_id}/reactions/{emoticon}"

    def add_comment_reaction(
        self,
        project_key: str,
        repository_slug: str,
        pull_request_id: int,
        comment_id: int,
        emoticon: str,
    ) -> UserReaction:
        """Add an emoticon reaction; adding the same one twice succeeds."""
        path = self._reaction_path(project_key, repository_slug, pull_request_id, comment_id, emoticon)
        resp = self._request("PUT", path, root=self._comment_likes_url)
        return _parse(resp, UserReaction)

    def remove_comment_reaction(
        self,
        project_key: str,
        repository_slug: str,
        pull_request_id: int,
        comment_id: int,
        emoticon: str,
    ) -> None:
        path = self._reaction_path(project_key, repository_slug, pull_request_id, comment_id, emoticon)
        self._request("DELETE", path, root=self._comment_likes_url)

    # Review

    def update_review_status(
        self,
        project_key: str,
        repository_slug: str,
        pull_request_id: int,
        status: str,
    ) -> PullRequestParticipant:
        """Set the authenticated user's review status.

        The participant path needs the caller's own username, so it is
        looked up first. If that lookup fails the update is not sent.
        """
        try:
            user_slug = self.get_current_username()
        except BitbucketApiError as e:
            raise MissingIdentityError(f"Could not determine authenticated user: {e}") from e
        path = f"{self._pr_path(project_key, repository_slug, pull_request_id)}/participants/{user_slug}"
        resp = self._request("PUT", path, json={"status": status})
        return _parse(resp, PullRequestParticipant)
