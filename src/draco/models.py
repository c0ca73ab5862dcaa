from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union


RawNode = Dict[str, Any]


@dataclass(frozen=True)
class ThreadPost:
    id: str
    title: str
    url: str
    permalink: str
    created_utc: float
    subreddit: str = ""
    author: str = "[deleted]"
    selftext: str = ""
    upvote_ratio: Optional[float] = None
    ups: int = 0
    downs: int = 0
    score: int = 0
    num_comments: int = 0


@dataclass(frozen=True)
class Comment:
    id: str
    author: str
    body: str
    created_utc: float
    permalink: str
    ups: int = 0
    downs: int = 0
    score: int = 0
    upvote_ratio: Optional[float] = None
    is_submitter: bool = False
    stickied: bool = False
    controversiality: int = 0
    edited: Union[bool, float] = False  # False, or the edit timestamp
    flair: str = ""
    replies: Tuple[RawNode, ...] = field(default=(), repr=False, compare=False)


@dataclass(frozen=True)
class Continuation:
    """A "continue this thread" link: the parent's remaining replies live at its own permalink."""

    parent_id: str


@dataclass(frozen=True)
class LoadMore:
    """A "load more comments" stub: siblings omitted from the listing, by id."""

    id: str
    child_ids: Tuple[str, ...]


CommentNode = Union[Comment, Continuation, LoadMore]


@dataclass(frozen=True)
class Emitted:
    """A resolved comment and the depth it sits at in the logical tree."""

    depth: int
    comment: Comment
