import textwrap
from datetime import datetime, timezone
from typing import Any, Iterable, List, TextIO, Tuple

from .config import WRAP_COLUMNS
from .models import Comment, Emitted, ThreadPost


def utc_date(ts: float) -> str:
    try:
        return datetime.fromtimestamp(float(ts), tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
    except (OverflowError, OSError, ValueError):
        return ""


def wrap_body(text: str, columns: int = WRAP_COLUMNS) -> List[str]:
    """Wrap each line of ``text`` on its own, keeping blank lines."""
    out: List[str] = []
    for line in text.rstrip("\n").split("\n"):
        if not line.strip():
            out.append("")
            continue
        # Over-long words such as URLs stay whole on their own line.
        out.extend(
            textwrap.wrap(line, width=columns, break_on_hyphens=False, break_long_words=False) or [""]
        )
    return out


class OrgRenderer:
    """Writes a thread as an Org outline: the post, then one heading per comment."""

    def __init__(self, out: TextIO, *, columns: int = WRAP_COLUMNS):
        self.out = out
        self.columns = columns

    def _write(self, s: str = "") -> None:
        self.out.write(s + "\n")

    def _properties(self, props: Iterable[Tuple[str, Any]]) -> None:
        self._write(":PROPERTIES:")
        for name, value in props:
            if value:
                self._write(f":{name}: ={value}=")
        self._write(":END:")

    def _source_block(self, text: str) -> None:
        self._write()
        self._write("#+BEGIN_SRC markdown")
        # Leading space keeps body lines from being read as Org syntax.
        for line in wrap_body(text, self.columns):
            self._write(f" {line}")
        self._write("#+END_SRC")

    def write_post(self, post: ThreadPost) -> None:
        self._write("#+STARTUP:content")
        self._write(f"* {post.title}")
        self._properties(
            [
                ("subreddit", post.subreddit),
                ("created", utc_date(post.created_utc) if post.created_utc else ""),
                ("author", post.author),
                ("permalink", post.permalink),
                ("upvote_ratio", post.upvote_ratio),
                ("ups", post.ups),
                ("downs", post.downs),
                ("score", post.score),
                ("num_comments", post.num_comments),
            ]
        )
        if post.selftext:
            self._source_block(post.selftext)
        # Self posts link back to themselves.
        if post.url and not (post.permalink and post.url.endswith(post.permalink)):
            self._write(post.url)

    def write_comment(self, item: Emitted) -> None:
        c: Comment = item.comment
        self._write("*" * (item.depth + 2) + f" {c.author}")
        edited = c.edited
        if edited is not True and edited is not False:
            edited = utc_date(edited)
        self._properties(
            [
                ("created", utc_date(c.created_utc) if c.created_utc else ""),
                ("author", c.author),
                ("permalink", c.permalink),
                ("upvote_ratio", c.upvote_ratio),
                ("ups", c.ups),
                ("downs", c.downs),
                ("score", c.score),
                ("edited", edited),
                ("is_submitter", c.is_submitter),
                ("stickied", c.stickied),
                ("controversiality", c.controversiality),
                ("flair", c.flair),
            ]
        )
        self._source_block(c.body)
