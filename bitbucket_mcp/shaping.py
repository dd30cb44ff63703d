"""Reduce verbose Bitbucket Server payloads to compact structures for agents.

All functions are pure: they take parsed upstream models and return new
shaped models, never touching the network. The shaped forms drop fields
an agent rarely needs (links, diffs, anchors, permitted operations) and
collapse user lists in reactions to counts.
"""

from typing import Any, Dict, Iterable, List, Optional

from bitbucket_mcp.models import (
    InboxPullRequest,
    MinimalPullRequest,
    Page,
    RawActivity,
    RawComment,
    RawCommentProperties,
    RawLikedBy,
    RawReaction,
    ShapedActivity,
    ShapedComment,
    ShapedCommentProperties,
    ShapedLikedBy,
    ShapedReaction,
    StrippedUser,
    User,
)


def _page_meta(page: Page) -> Dict[str, Any]:
    return page.model_dump(mode="json", by_alias=True, exclude_unset=True, exclude={"values"})


def minimal_pull_request(pr: InboxPullRequest) -> MinimalPullRequest:
    """Flatten an inbox pull request to its nine review-relevant fields."""
    return MinimalPullRequest(
        id=pr.id,
        title=pr.title,
        description=pr.description,
        state=pr.state,
        author=pr.author.user.display_name,
        project_key=pr.to_ref.repository.project.key,
        repository_slug=pr.to_ref.repository.slug,
        created_date=pr.created_date,
        updated_date=pr.updated_date,
    )


def shape_inbox_page(page: Page[InboxPullRequest]) -> Page[MinimalPullRequest]:
    """Apply minimal_pull_request to every entry, keeping pagination as-is."""
    data = _page_meta(page)
    data["values"] = [minimal_pull_request(pr) for pr in page.values]
    return Page[MinimalPullRequest].model_validate(data)


def strip_user(user: Optional[User]) -> Optional[StrippedUser]:
    """Drop links from a user; every other field passes through."""
    if user is None:
        return None
    data = user.model_dump(mode="json", by_alias=True, exclude_unset=True, exclude={"links"})
    return StrippedUser.model_validate(data)


def simplify_reaction(reaction: RawReaction) -> ShapedReaction:
    """Replace the list of reacting users with its length.

    A reaction without users counts zero, unless it was simplified
    before and already carries a count.
    """
    if reaction.users is not None:
        count = len(reaction.users)
    else:
        count = reaction.count or 0
    return ShapedReaction(emoticon=reaction.emoticon, count=count)


def simplify_liked_by(liked_by: RawLikedBy) -> ShapedLikedBy:
    return ShapedLikedBy(total=liked_by.total or 0)


def _shape_properties(properties: RawCommentProperties) -> ShapedCommentProperties:
    data = properties.model_dump(
        mode="json", by_alias=True, exclude_unset=True, exclude={"reactions", "liked_by"}
    )
    if properties.reactions is not None:
        data["reactions"] = [simplify_reaction(r) for r in properties.reactions]
    if properties.liked_by is not None:
        data["likedBy"] = simplify_liked_by(properties.liked_by)
    return ShapedCommentProperties.model_validate(data)


def _stripped_fields(comment: RawComment) -> Dict[str, Any]:
    """One comment's own fields, stripped. Replies are left to the caller."""
    data = comment.model_dump(
        mode="json",
        by_alias=True,
        exclude_unset=True,
        exclude={"anchor", "permitted_operations", "author", "properties", "comments"},
    )
    if "author" in comment.model_fields_set:
        data["author"] = strip_user(comment.author)
    if "properties" in comment.model_fields_set:
        data["properties"] = _shape_properties(comment.properties) if comment.properties else None
    return data


def _strip_replies(replies: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Strip a reply tree level by level with an explicit work list."""
    stripped: List[Dict[str, Any]] = []
    pending = [(replies, stripped)]
    while pending:
        raw_level, out = pending.pop()
        for raw in raw_level:
            reply = RawComment.model_validate(raw)
            data = ShapedComment.model_validate(_stripped_fields(reply)).to_payload()
            if "comments" in reply.model_fields_set:
                if reply.comments is None:
                    data["comments"] = None
                else:
                    data["comments"] = []
                    pending.append((reply.comments, data["comments"]))
            out.append(data)
    return stripped


def strip_comment(comment: RawComment) -> ShapedComment:
    """Strip a comment and all of its replies.

    Drops anchor and permittedOperations, removes links from the author
    and simplifies reactions and likes, at every depth. Replies are
    walked without recursion, so any nesting depth is handled; leaf
    comments have no (or an empty) comments list.
    """
    data = _stripped_fields(comment)
    if "comments" in comment.model_fields_set:
        replies = comment.comments
        data["comments"] = _strip_replies(replies) if replies is not None else None
    return ShapedComment.model_validate(data)


def strip_activity(activity: RawActivity) -> ShapedActivity:
    """Drop the diff, strip the acting user and the attached comment."""
    data = activity.model_dump(
        mode="json",
        by_alias=True,
        exclude_unset=True,
        exclude={"diff", "user", "comment"},
    )
    if "user" in activity.model_fields_set:
        data["user"] = strip_user(activity.user)
    if "comment" in activity.model_fields_set:
        data["comment"] = strip_comment(activity.comment) if activity.comment else None
    return ShapedActivity.model_validate(data)


def filter_activities(page: Page[ShapedActivity], activity_types: Iterable[str]) -> Page[ShapedActivity]:
    """Keep only activities whose action is in activity_types.

    size is recomputed to the number kept. start, limit, isLastPage and
    nextPageStart are copied from the unfiltered page and still describe
    it, not the filtered result.
    """
    wanted = set(activity_types)
    kept = [activity for activity in page.values if activity.action in wanted]
    data = _page_meta(page)
    data["values"] = kept
    data["size"] = len(kept)
    return Page[ShapedActivity].model_validate(data)


def shape_activities_page(
    page: Page[RawActivity],
    activity_types: Optional[Iterable[str]] = None,
) -> Page[ShapedActivity]:
    """Strip every activity on the page, then filter by type if any are given."""
    data = _page_meta(page)
    data["values"] = [strip_activity(activity) for activity in page.values]
    shaped = Page[ShapedActivity].model_validate(data)
    types = list(activity_types or [])
    if types:
        return filter_activities(shaped, types)
    return shaped
