import asyncio
import json
from typing import Any, Dict, List, Optional

import httpx
import pytest

from draco.fetcher import ThreadFetcher
from draco.walker import ThreadWalker, follow_up_url


THREAD_URL = "https://old.reddit.com/r/emacs/comments/abc/title"


def listing(children: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"kind": "Listing", "data": {"children": children}}


def comment(cid: str, replies: Optional[List[Dict[str, Any]]] = None, **extra) -> Dict[str, Any]:
    data = {
        "id": cid,
        "author": f"user_{cid}",
        "body": f"body of {cid}",
        "created_utc": 1600000000.0,
        "permalink": f"/r/emacs/comments/abc/title/{cid}/",
        "score": 1,
        "parent_id": "t3_abc",
        "replies": listing(replies) if replies else "",
    }
    data.update(extra)
    return {"kind": "t1", "data": data}


def more(mid: str, children: List[str], parent: str = "t3_abc") -> Dict[str, Any]:
    return {
        "kind": "more",
        "data": {"id": mid, "name": f"t1_{mid}", "children": children, "count": len(children), "parent_id": parent},
    }


def continuation(parent_id: str) -> Dict[str, Any]:
    return {
        "kind": "more",
        "data": {"id": "_", "name": "t1__", "children": [], "count": 0, "parent_id": f"t1_{parent_id}"},
    }


def post_data(**extra) -> Dict[str, Any]:
    data = {
        "id": "abc",
        "title": "A thread",
        "url": "https://example.com/article",
        "permalink": "/r/emacs/comments/abc/title/",
        "created_utc": 1600000000.0,
        "subreddit": "emacs",
        "author": "op",
        "selftext": "",
        "upvote_ratio": 0.97,
        "ups": 10,
        "downs": 0,
        "score": 10,
        "num_comments": 3,
    }
    data.update(extra)
    return data


def thread_doc(forest: List[Dict[str, Any]], **post_extra) -> bytes:
    return json.dumps([listing([{"kind": "t3", "data": post_data(**post_extra)}]), listing(forest)]).encode()


class FakeReddit:
    """Serves canned responses by URL; anything unknown is a 404."""

    def __init__(self):
        self.routes: Dict[str, tuple] = {}
        self.requests: List[str] = []
        self.broken: set = set()

    def add_thread(self, url: str, forest, status: int = 200, **post_extra) -> None:
        self.routes[url] = (status, thread_doc(forest, **post_extra))

    def add_follow_up(self, target_id: str, forest, status: int = 200, **post_extra) -> None:
        self.add_thread(follow_up_url(THREAD_URL, target_id), forest, status, **post_extra)

    def add_raw(self, url: str, status: int, content: bytes) -> None:
        self.routes[url] = (status, content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        if url in self.broken:
            raise httpx.ConnectError("connection refused", request=request)
        if url in self.routes:
            status, content = self.routes[url]
            return httpx.Response(status, content=content)
        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class LogRecorder:
    def __init__(self):
        self.lines: List[tuple] = []

    def __call__(self, msg: str, level: str = "info"):
        self.lines.append((level, msg))

    def at(self, level: str) -> List[str]:
        return [m for lvl, m in self.lines if lvl == level]


@pytest.fixture
def reddit() -> FakeReddit:
    return FakeReddit()


@pytest.fixture
def walk(reddit):
    """Walk a raw forest against the fake site; returns ([(depth, id)], stats, log)."""

    def _walk(forest, *, fetch_all: bool = True, url: str = THREAD_URL):
        log = LogRecorder()

        async def go():
            async with ThreadFetcher(transport=reddit.transport) as fetcher:
                walker = ThreadWalker(fetcher, url, fetch_all=fetch_all, log_callback=log)
                out = [(e.depth, e.comment.id) async for e in walker.walk(forest)]
                return out, fetcher.stats

        out, stats = asyncio.run(go())
        return out, stats, log

    return _walk
