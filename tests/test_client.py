"""Unit tests for the Bitbucket Server client (mocked HTTP session)."""

from typing import Any
from unittest.mock import Mock, patch

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from bitbucket_mcp.client import (
    BitbucketApiError,
    BitbucketClient,
    BitbucketError,
    MissingIdentityError,
)
from bitbucket_mcp.client.bitbucket import build_comment_body
from bitbucket_mcp.models import DiffResponse, PullRequest, RawComment, UserReaction

BASE = "https://bitbucket.example.com"
API = f"{BASE}/rest/api/latest"
PR_PATH = f"{API}/projects/PRJ/repos/web-app/pull-requests/42"


@pytest.fixture
def client() -> BitbucketClient:
    return BitbucketClient(base_url=f"{BASE}/", token="test-token")


def _response(status: int = 200, json_data: Any = None, text: str = "", headers: dict | None = None) -> Mock:
    resp = Mock()
    resp.status_code = status
    resp.reason = ""
    resp.text = text
    resp.headers = CaseInsensitiveDict(headers or {})
    if json_data is None:
        resp.json.side_effect = ValueError("No JSON body")
    else:
        resp.json.return_value = json_data
    return resp


def _page(values: list, **meta: Any) -> dict:
    return {"size": len(values), "limit": 25, "start": 0, "isLastPage": True, "values": values, **meta}


def test_session_sends_bearer_token(client: BitbucketClient) -> None:
    assert client._session.headers["Authorization"] == "Bearer test-token"
    assert client._session.headers["Content-Type"] == "application/json"


def test_base_url_trailing_slash_is_dropped(client: BitbucketClient) -> None:
    assert client.api_url == API


def test_get_user_profile(client: BitbucketClient) -> None:
    """get_user_profile issues GET /users/{slug} and keeps unknown fields."""
    data = {"name": "jdoe", "slug": "jdoe", "displayName": "John Doe", "avatarUrl": "/a.png"}
    with patch.object(client._session, "request", return_value=_response(json_data=data)) as req:
        user = client.get_user_profile("jdoe")

    assert user.display_name == "John Doe"
    assert user.to_payload() == data
    req.assert_called_once()
    assert req.call_args[0] == ("GET", f"{API}/users/jdoe")
    assert req.call_args[1]["timeout"] == 30


def test_get_all_users_passes_filter(client: BitbucketClient) -> None:
    data = _page([{"name": "jdoe"}, {"name": "jane"}])
    with patch.object(client._session, "request", return_value=_response(json_data=data)) as req:
        page = client.get_all_users(filter="j")

    assert [u.name for u in page.values] == ["jdoe", "jane"]
    assert req.call_args[0][1] == f"{API}/users"
    assert req.call_args[1]["params"] == {"filter": "j"}


def test_get_all_users_without_filter_sends_no_params(client: BitbucketClient) -> None:
    with patch.object(client._session, "request", return_value=_response(json_data=_page([]))) as req:
        client.get_all_users()
    assert req.call_args[1]["params"] is None


def test_list_projects_omits_unset_params(client: BitbucketClient) -> None:
    """Only the parameters that were given are sent."""
    data = _page([{"key": "PRJ", "name": "Project"}], isLastPage=False, nextPageStart=10, limit=10)
    with patch.object(client._session, "request", return_value=_response(json_data=data)) as req:
        page = client.list_projects(permission="PROJECT_READ", limit=10)

    assert page.values[0].key == "PRJ"
    assert page.next_page_start == 10
    assert page.is_last_page is False
    assert req.call_args[1]["params"] == {"permission": "PROJECT_READ", "limit": 10}


def test_list_repositories(client: BitbucketClient) -> None:
    data = _page([{"slug": "web-app", "project": {"key": "PRJ"}}])
    with patch.object(client._session, "request", return_value=_response(json_data=data)) as req:
        page = client.list_repositories("PRJ")

    assert page.values[0].slug == "web-app"
    assert req.call_args[0][1] == f"{API}/projects/PRJ/repos"


def test_get_inbox_pull_requests(client: BitbucketClient) -> None:
    with patch.object(client._session, "request", return_value=_response(json_data=_page([]))) as req:
        client.get_inbox_pull_requests(start=25, limit=5)
    assert req.call_args[0] == ("GET", f"{API}/inbox/pull-requests")
    assert req.call_args[1]["params"] == {"start": 25, "limit": 5}


def test_get_pull_request(client: BitbucketClient) -> None:
    data = {"id": 42, "version": 3, "title": "Add login", "state": "OPEN", "locked": False}
    with patch.object(client._session, "request", return_value=_response(json_data=data)) as req:
        pr = client.get_pull_request("PRJ", "web-app", 42)

    assert isinstance(pr, PullRequest)
    assert pr.to_payload() == data
    assert req.call_args[0] == ("GET", PR_PATH)


def test_get_pull_request_changes_requests_comment_counts(client: BitbucketClient) -> None:
    data = _page([{"type": "MODIFY", "path": {"toString": "src/a.ts"}}])
    with patch.object(client._session, "request", return_value=_response(json_data=data)) as req:
        page = client.get_pull_request_changes("PRJ", "web-app", 42, limit=100)

    assert page.values[0].type == "MODIFY"
    assert req.call_args[0][1] == f"{PR_PATH}/changes"
    assert req.call_args[1]["params"] == {"withComments": "true", "limit": 100}


def test_get_pull_request_diff_text_returns_raw_body(client: BitbucketClient) -> None:
    """Text format asks for text/plain and returns the body unmodified."""
    raw = "diff --git a/src/a.ts b/src/a.ts\n--- a/src/a.ts\n+++ b/src/a.ts\n@@ -1 +1 @@\n-old\n+new\n"
    with patch.object(client._session, "request", return_value=_response(text=raw)) as req:
        result = client.get_pull_request_diff("PRJ", "web-app", 42)

    assert result == raw
    assert req.call_args[0][1] == f"{PR_PATH}/diff/"
    assert req.call_args[1]["headers"] == {"Accept": "text/plain"}
    assert req.call_args[1]["params"] is None


def test_get_pull_request_diff_json_with_range(client: BitbucketClient) -> None:
    data = {"fromHash": "aaa", "toHash": "bbb", "contextLines": 3, "diffs": [{"hunks": []}]}
    with patch.object(client._session, "request", return_value=_response(json_data=data)) as req:
        result = client.get_pull_request_diff(
            "PRJ",
            "web-app",
            42,
            path="src/a.ts",
            context_lines=3,
            whitespace="ignore-all",
            since_id="aaa",
            until_id="bbb",
            format="json",
        )

    assert isinstance(result, DiffResponse)
    assert req.call_args[0][1] == f"{PR_PATH}/diff/src/a.ts"
    assert req.call_args[1]["headers"] == {"Accept": "application/json"}
    assert req.call_args[1]["params"] == {
        "contextLines": 3,
        "whitespace": "ignore-all",
        "sinceId": "aaa",
        "untilId": "bbb",
    }


def test_get_pull_request_file_diff(client: BitbucketClient) -> None:
    data = {
        "diffs": [
            {
                "hunks": [
                    {
                        "sourceLine": 1,
                        "destinationLine": 1,
                        "segments": [{"type": "ADDED", "lines": [{"source": 1, "destination": 2, "line": "x"}]}],
                    }
                ]
            }
        ]
    }
    with patch.object(client._session, "request", return_value=_response(json_data=data)) as req:
        result = client.get_pull_request_file_diff("PRJ", "web-app", 42, "src/a.ts", context_lines=5)

    line = result.diffs[0].hunks[0].segments[0].lines[0]
    assert line.destination == 2
    assert req.call_args[0][1] == f"{PR_PATH}/diff/src/a.ts"
    assert req.call_args[1]["params"] == {"contextLines": 5}


def test_get_pull_request_activities_sends_types(client: BitbucketClient) -> None:
    data = _page([{"id": 1, "action": "COMMENTED"}])
    with patch.object(client._session, "request", return_value=_response(json_data=data)) as req:
        page = client.get_pull_request_activities(
            "PRJ", "web-app", 42, activity_types=["COMMENTED"], start=0, limit=50
        )

    assert page.values[0].action == "COMMENTED"
    assert req.call_args[0][1] == f"{PR_PATH}/activities"
    assert req.call_args[1]["params"] == {"start": 0, "limit": 50, "activityTypes": ["COMMENTED"]}


def test_create_pull_request_body(client: BitbucketClient) -> None:
    """Branch names become refs/heads/..., reviewers become user names."""
    with patch.object(client._session, "request", return_value=_response(status=201, json_data={"id": 7})) as req:
        pr = client.create_pull_request(
            "PRJ", "web-app", "feature-x", "main", "Add X", description="Adds X", reviewers=["jdoe"]
        )

    assert pr.id == 7
    assert req.call_args[0] == ("POST", f"{API}/projects/PRJ/repos/web-app/pull-requests")
    repository = {"slug": "web-app", "project": {"key": "PRJ"}}
    assert req.call_args[1]["json"] == {
        "title": "Add X",
        "description": "Adds X",
        "fromRef": {"id": "refs/heads/feature-x", "repository": repository},
        "toRef": {"id": "refs/heads/main", "repository": repository},
        "reviewers": [{"user": {"name": "jdoe"}}],
    }


def test_create_pull_request_keeps_full_refs(client: BitbucketClient) -> None:
    with patch.object(client._session, "request", return_value=_response(json_data={"id": 8})) as req:
        client.create_pull_request("PRJ", "web-app", "refs/heads/feature-x", "main", "T")

    body = req.call_args[1]["json"]
    assert body["fromRef"]["id"] == "refs/heads/feature-x"
    assert "description" not in body
    assert "reviewers" not in body


class TestCommentBody:
    """build_comment_body anchor rules."""

    def test_general_comment(self) -> None:
        assert build_comment_body("LGTM") == {"text": "LGTM"}

    def test_reply(self) -> None:
        assert build_comment_body("Agreed", parent_id=5) == {"text": "Agreed", "parent": {"id": 5}}

    def test_file_comment_anchor(self) -> None:
        """Path alone yields exactly path and diffType EFFECTIVE."""
        body = build_comment_body("Nice", path="src/a.ts")
        assert body["anchor"] == {"path": "src/a.ts", "diffType": "EFFECTIVE"}

    def test_line_comment_defaults(self) -> None:
        body = build_comment_body("Bug", path="src/a.ts", line=10)
        assert body["anchor"] == {
            "path": "src/a.ts",
            "diffType": "EFFECTIVE",
            "line": 10,
            "lineType": "CONTEXT",
            "fileType": "TO",
        }

    def test_line_comment_explicit_side(self) -> None:
        body = build_comment_body("Bug", path="src/a.ts", line=3, line_type="REMOVED", file_type="FROM")
        assert body["anchor"]["lineType"] == "REMOVED"
        assert body["anchor"]["fileType"] == "FROM"

    def test_line_without_path_is_general_comment(self) -> None:
        assert build_comment_body("Hmm", line=10) == {"text": "Hmm"}


def test_add_pull_request_comment(client: BitbucketClient) -> None:
    data = {"id": 99, "version": 0, "text": "Bug", "anchor": {"path": "src/a.ts", "line": 10}}
    with patch.object(client._session, "request", return_value=_response(status=201, json_data=data)) as req:
        comment = client.add_pull_request_comment("PRJ", "web-app", 42, "Bug", path="src/a.ts", line=10)

    assert isinstance(comment, RawComment)
    assert comment.id == 99
    assert req.call_args[0] == ("POST", f"{PR_PATH}/comments")
    assert req.call_args[1]["json"]["anchor"]["lineType"] == "CONTEXT"


def test_delete_pull_request_comment_sends_version(client: BitbucketClient) -> None:
    with patch.object(client._session, "request", return_value=_response(status=204)) as req:
        assert client.delete_pull_request_comment("PRJ", "web-app", 42, 99, 2) is None

    assert req.call_args[0] == ("DELETE", f"{PR_PATH}/comments/99")
    assert req.call_args[1]["params"] == {"version": 2}


def test_delete_comment_version_conflict(client: BitbucketClient) -> None:
    body = {"errors": [{"message": "You are attempting to modify a comment based on out-of-date information."}]}
    with patch.object(client._session, "request", return_value=_response(status=409, json_data=body)):
        with pytest.raises(BitbucketApiError) as exc_info:
            client.delete_pull_request_comment("PRJ", "web-app", 42, 99, 1)
    assert exc_info.value.status == 409
    assert "out-of-date" in str(exc_info.value)


def test_add_comment_reaction_uses_comment_likes_api(client: BitbucketClient) -> None:
    data = {
        "emoticon": {"shortcut": "thumbsup", "url": "https://cdn/thumbsup.svg"},
        "user": {"name": "jdoe", "displayName": "John Doe"},
        "comment": {"id": 99},
    }
    with patch.object(client._session, "request", return_value=_response(json_data=data)) as req:
        reaction = client.add_comment_reaction("PRJ", "web-app", 42, 99, "thumbsup")

    assert isinstance(reaction, UserReaction)
    assert reaction.user.display_name == "John Doe"
    assert req.call_args[0] == (
        "PUT",
        f"{BASE}/rest/comment-likes/latest/projects/PRJ/repos/web-app/pull-requests/42/comments/99/reactions/thumbsup",
    )


def test_remove_comment_reaction(client: BitbucketClient) -> None:
    with patch.object(client._session, "request", return_value=_response(status=204)) as req:
        client.remove_comment_reaction("PRJ", "web-app", 42, 99, "heart")

    method, url = req.call_args[0]
    assert method == "DELETE"
    assert url.startswith(f"{BASE}/rest/comment-likes/latest/")
    assert url.endswith("/comments/99/reactions/heart")


class TestReviewStatus:
    """update_review_status looks up the caller, then updates their participant entry."""

    def test_update_review_status(self, client: BitbucketClient) -> None:
        identity = _response(json_data={"version": "8.9.0"}, headers={"X-AUSERNAME": "jdoe"})
        updated = _response(json_data={"user": {"name": "jdoe"}, "role": "REVIEWER", "status": "APPROVED"})
        with patch.object(client._session, "request", side_effect=[identity, updated]) as req:
            participant = client.update_review_status("PRJ", "web-app", 42, "APPROVED")

        assert participant.status == "APPROVED"
        assert req.call_count == 2
        first, second = req.call_args_list
        assert first[0] == ("GET", f"{API}/application-properties")
        assert second[0] == ("PUT", f"{PR_PATH}/participants/jdoe")
        assert second[1]["json"] == {"status": "APPROVED"}

    def test_header_name_is_case_insensitive(self, client: BitbucketClient) -> None:
        identity = _response(json_data={}, headers={"x-ausername": "jdoe"})
        updated = _response(json_data={"status": "NEEDS_WORK"})
        with patch.object(client._session, "request", side_effect=[identity, updated]) as req:
            client.update_review_status("PRJ", "web-app", 42, "NEEDS_WORK")
        assert req.call_args_list[1][0][1].endswith("/participants/jdoe")

    def test_missing_identity_header_sends_no_update(self, client: BitbucketClient) -> None:
        identity = _response(json_data={"version": "8.9.0"})
        with patch.object(client._session, "request", return_value=identity) as req:
            with pytest.raises(MissingIdentityError):
                client.update_review_status("PRJ", "web-app", 42, "APPROVED")
        assert req.call_count == 1

    def test_failed_identity_lookup_sends_no_update(self, client: BitbucketClient) -> None:
        with patch.object(client._session, "request", return_value=_response(status=401, text="Unauthorized")) as req:
            with pytest.raises(MissingIdentityError) as exc_info:
                client.update_review_status("PRJ", "web-app", 42, "UNAPPROVED")
        assert req.call_count == 1
        assert "Unauthorized" in str(exc_info.value)


class TestErrors:
    """Non-2xx responses and transport failures become BitbucketApiError."""

    def test_errors_list_message_preferred(self, client: BitbucketClient) -> None:
        body = {"errors": [{"message": "Repository web-app does not exist."}], "message": "ignored"}
        with patch.object(client._session, "request", return_value=_response(status=404, json_data=body, text="x")):
            with pytest.raises(BitbucketApiError) as exc_info:
                client.get_pull_request("PRJ", "web-app", 42)
        assert exc_info.value.status == 404
        assert str(exc_info.value) == "Bitbucket Server API error (404): Repository web-app does not exist."

    def test_top_level_message(self, client: BitbucketClient) -> None:
        with patch.object(
            client._session, "request", return_value=_response(status=400, json_data={"message": "Bad filter"})
        ):
            with pytest.raises(BitbucketApiError) as exc_info:
                client.get_all_users(filter="(")
        assert "Bad filter" in str(exc_info.value)

    def test_falls_back_to_response_text(self, client: BitbucketClient) -> None:
        with patch.object(client._session, "request", return_value=_response(status=502, text="Bad Gateway")):
            with pytest.raises(BitbucketApiError) as exc_info:
                client.list_projects()
        assert exc_info.value.status == 502
        assert "Bad Gateway" in str(exc_info.value)

    def test_redirect_status_is_an_error(self, client: BitbucketClient) -> None:
        with patch.object(client._session, "request", return_value=_response(status=302, text="Found")):
            with pytest.raises(BitbucketApiError):
                client.list_projects()

    def test_transport_error(self, client: BitbucketClient) -> None:
        with patch.object(
            client._session, "request", side_effect=requests.ConnectionError("connection refused")
        ):
            with pytest.raises(BitbucketApiError) as exc_info:
                client.get_user_profile("jdoe")
        assert exc_info.value.status is None
        assert "connection refused" in str(exc_info.value)

    def test_unexpected_body_shape(self, client: BitbucketClient) -> None:
        """A 2xx body that does not match the model is a typed error, not a raw ValidationError."""
        data = _page([{"id": 3, "author": {"user": {"name": "alice"}}, "toRef": {"repository": {"slug": "web-app"}}}])
        with patch.object(client._session, "request", return_value=_response(json_data=data)):
            with pytest.raises(BitbucketApiError) as exc_info:
                client.get_inbox_pull_requests()
        assert exc_info.value.status == 200
        assert "Unexpected response body" in str(exc_info.value)

    def test_reaction_without_user(self, client: BitbucketClient) -> None:
        with patch.object(
            client._session, "request", return_value=_response(json_data={"emoticon": {"shortcut": "heart"}})
        ):
            with pytest.raises(BitbucketApiError):
                client.add_comment_reaction("PRJ", "web-app", 42, 99, "heart")

    def test_non_json_success_body(self, client: BitbucketClient) -> None:
        with patch.object(client._session, "request", return_value=_response(text="<html>login</html>")):
            with pytest.raises(BitbucketApiError) as exc_info:
                client.get_pull_request("PRJ", "web-app", 42)
        assert exc_info.value.status == 200

    def test_api_error_is_a_bitbucket_error(self) -> None:
        assert issubclass(BitbucketApiError, BitbucketError)
        assert issubclass(MissingIdentityError, BitbucketError)
