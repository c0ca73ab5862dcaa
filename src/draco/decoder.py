import json
from typing import Any, Dict, List, Optional, Tuple

from .errors import MalformedResponseError
from .models import Comment, CommentNode, Continuation, LoadMore, RawNode, ThreadPost


MORE_KIND = "more"
CONTINUATION_ID = "_"
FULLNAME_PREFIX_LEN = len("t1_")


def _int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _listing_children(listing: Any, url: str, what: str) -> List[RawNode]:
    if not isinstance(listing, dict):
        raise MalformedResponseError(url, f"{what} is not a listing")
    data = listing.get("data")
    if not isinstance(data, dict):
        raise MalformedResponseError(url, f"{what} has no data")
    children = data.get("children")
    if not isinstance(children, list):
        raise MalformedResponseError(url, f"{what} has no children")
    return children


def decode_thread(raw: bytes, url: str = "") -> Tuple[ThreadPost, List[RawNode]]:
    """
    Decode a ``<thread>.json`` document into the post and the raw root forest.

    The document is a two element array: a listing holding the post, then a
    listing holding the top-level comment nodes. Replies are left untouched.
    """
    try:
        doc = json.loads(raw)
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedResponseError(url, f"invalid json ({e})") from e

    if not isinstance(doc, list) or len(doc) < 2:
        raise MalformedResponseError(url, "expected a two element array")

    posts = _listing_children(doc[0], url, "post listing")
    if len(posts) != 1:
        raise MalformedResponseError(url, f"post listing holds {len(posts)} children, expected 1")
    post_node = posts[0]
    if not isinstance(post_node, dict) or not isinstance(post_node.get("data"), dict):
        raise MalformedResponseError(url, "post has no data")

    forest = _listing_children(doc[1], url, "comment listing")
    try:
        post = parse_post(post_node["data"])
    except (TypeError, ValueError, AttributeError) as e:
        raise MalformedResponseError(url, f"bad post fields ({e})") from e
    return post, forest


def parse_post(pd: Dict[str, Any]) -> ThreadPost:
    return ThreadPost(
        id=str(pd.get("id", "") or ""),
        title=pd.get("title", "") or "",
        url=pd.get("url", "") or "",
        permalink=pd.get("permalink", "") or "",
        created_utc=_float(pd.get("created_utc")),
        subreddit=pd.get("subreddit", "") or "",
        author=pd.get("author", "[deleted]") or "[deleted]",
        selftext=pd.get("selftext", "") or "",
        upvote_ratio=_optional_float(pd.get("upvote_ratio")),
        ups=_int(pd.get("ups")),
        downs=_int(pd.get("downs")),
        score=_int(pd.get("score")),
        num_comments=_int(pd.get("num_comments")),
    )


def replies_of(cd: Dict[str, Any]) -> List[RawNode]:
    # The API sends "" instead of a listing when there are no replies.
    replies = cd.get("replies")
    if not replies or not isinstance(replies, dict):
        return []
    data = replies.get("data")
    if not isinstance(data, dict):
        return []
    children = data.get("children")
    return children if isinstance(children, list) else []


def parse_comment(cd: Dict[str, Any]) -> Comment:
    edited = cd.get("edited") or False
    if edited is not True and edited is not False:
        edited = _float(edited)
    return Comment(
        id=str(cd.get("id", "") or ""),
        author=cd.get("author", "[deleted]") or "[deleted]",
        body=cd.get("body", "") or "",
        created_utc=_float(cd.get("created_utc")),
        permalink=cd.get("permalink", "") or "",
        ups=_int(cd.get("ups")),
        downs=_int(cd.get("downs")),
        score=_int(cd.get("score")),
        upvote_ratio=_optional_float(cd.get("upvote_ratio")),
        is_submitter=bool(cd.get("is_submitter")),
        stickied=bool(cd.get("stickied")),
        controversiality=_int(cd.get("controversiality")),
        edited=edited,
        flair=cd.get("author_flair_text", "") or "",
        replies=tuple(replies_of(cd)),
    )


def classify(node: RawNode, url: str = "") -> CommentNode:
    """
    Decide what a raw comment-tree node is. Rules are checked in order:

    1. ``more`` with id ``_``: a "continue this thread" link to the parent.
    2. ``more`` with an id: collapsed siblings listed in ``children``.
    3. no ``author``: a bare shell, treated as a single collapsed comment.
    4. anything else is a real comment.

    Anything the rules cannot read raises ``MalformedResponseError``.
    """
    try:
        return _classify(node, url)
    except (TypeError, ValueError, AttributeError) as e:
        raise MalformedResponseError(url, f"bad comment node ({e})") from e


def _classify(node: RawNode, url: str) -> CommentNode:
    if not isinstance(node, dict) or not isinstance(node.get("data"), dict):
        raise MalformedResponseError(url, "comment node has no data")
    kind = node.get("kind")
    cd = node["data"]
    node_id = str(cd.get("id", "") or "")

    if kind == MORE_KIND and node_id == CONTINUATION_ID:
        parent = str(cd.get("parent_id", "") or "")
        if len(parent) <= FULLNAME_PREFIX_LEN:
            raise MalformedResponseError(url, f"continuation without parent_id: {parent!r}")
        return Continuation(parent_id=parent[FULLNAME_PREFIX_LEN:])

    if kind == MORE_KIND and node_id:
        child_ids = tuple(str(x) for x in (cd.get("children") or []) if x)
        return LoadMore(id=node_id, child_ids=child_ids or (node_id,))

    if "author" not in cd:
        if not node_id:
            raise MalformedResponseError(url, "comment node without author or id")
        return LoadMore(id=node_id, child_ids=(node_id,))

    return parse_comment(cd)
