from typing import AsyncIterator, List, Optional, Sequence, Set, Tuple

from .config import COMMENT_LIMIT, COMMENT_SORT, FETCH_ALL
from .decoder import classify, decode_thread, replies_of
from .errors import MalformedResponseError, TransportError
from .fetcher import ThreadFetcher
from .models import Comment, Continuation, Emitted, LoadMore, RawNode, ThreadPost


QUERY = f"limit={COMMENT_LIMIT}&sort={COMMENT_SORT}"


def thread_json_url(url: str) -> str:
    return f"{url}.json?{QUERY}"


def follow_up_url(url: str, target_id: str) -> str:
    # The API rejects "//", so only add the slash when it is missing.
    base = url if url.endswith("/") else url + "/"
    return f"{base}{target_id}.json?{QUERY}"


class ThreadWalker:
    """
    Depth-first, left-to-right walk over a thread's comment forest.

    Placeholders ("continue this thread" and "load more comments") are
    resolved in place with follow-up requests when ``fetch_all`` is set, so
    the emitted order is the order of the fully loaded tree. A failed
    follow-up only loses its own subtree.
    """

    def __init__(
        self,
        fetcher: ThreadFetcher,
        thread_url: str,
        *,
        fetch_all: bool = FETCH_ALL,
        log_callback=None,
    ):
        self.fetcher = fetcher
        self.stats = fetcher.stats
        self.thread_url = thread_url
        self.fetch_all = fetch_all
        self._log = log_callback or (lambda msg, lvl="info": None)
        self._requested: Set[str] = set()

    async def fetch_thread(self) -> Tuple[ThreadPost, List[RawNode]]:
        """Fetch the thread itself. Errors here are fatal and propagate."""
        url = thread_json_url(self.thread_url)
        raw = await self.fetcher.fetch(url)
        post, forest = decode_thread(raw, url)
        self._log(f"post {post.id}: top-level nodes={len(forest)}")
        return post, forest

    async def walk(
        self,
        forest: Sequence[RawNode],
        depth: int = 0,
        source_url: Optional[str] = None,
    ) -> AsyncIterator[Emitted]:
        """``source_url`` names the document the forest came from, for warnings."""
        source_url = source_url or thread_json_url(self.thread_url)
        self.stats.walks += 1
        for raw in forest:
            try:
                node = classify(raw, source_url)
            except MalformedResponseError as e:
                self._log(f"skipping node: {e}", "warning")
                continue

            if isinstance(node, Comment):
                self.stats.comments += 1
                yield Emitted(depth=depth, comment=node)
                if node.replies:
                    async for item in self.walk(node.replies, depth + 1, source_url):
                        yield item
            elif isinstance(node, Continuation):
                # The placeholder sits among the parent's replies, one level below it.
                async for item in self.resolve_continuation(node.parent_id, depth - 1):
                    yield item
            else:
                async for item in self.resolve_load_more(node, depth):
                    yield item

    async def resolve_continuation(self, parent_id: str, depth: int) -> AsyncIterator[Emitted]:
        """Refetch the parent (at ``depth``) as a thread root and walk its replies."""
        if not self.fetch_all:
            self.stats.skipped_continuations += 1
            self._log(f"continuation under {parent_id} skipped", "debug")
            return

        fetched = await self._fetch_forest(parent_id)
        if fetched is None:
            return
        url, forest = fetched
        parent = forest[0]
        if not isinstance(parent, dict) or not isinstance(parent.get("data"), dict):
            self._warn_failed(parent_id, "refetched parent has no data")
            return
        # The parent itself was emitted already; only its replies are new.
        async for item in self.walk(replies_of(parent["data"]), depth + 1, url):
            yield item

    async def resolve_load_more(self, node: LoadMore, depth: int) -> AsyncIterator[Emitted]:
        if not self.fetch_all:
            self.stats.skipped_load_more += 1
            self._log(f"load-more {node.id} ({len(node.child_ids)} ids) skipped", "debug")
            return

        if len(node.child_ids) == 1:
            if node.child_ids[0] != node.id:
                self._log(
                    f"load-more {node.id} lists child {node.child_ids[0]}, fetching {node.id}",
                    "warning",
                )
            ids: Sequence[str] = (node.id,)
        else:
            ids = node.child_ids

        for target_id in ids:
            fetched = await self._fetch_forest(target_id)
            if fetched is None:
                continue
            url, forest = fetched
            async for item in self.walk(forest, depth, url):
                yield item

    async def _fetch_forest(self, target_id: str) -> Optional[Tuple[str, List[RawNode]]]:
        """Fetch and decode one follow-up into (url, forest). None when it cannot be used."""
        if target_id in self._requested:
            self.stats.duplicate_follow_ups += 1
            self._log(f"{target_id} already requested, skipped", "debug")
            return None
        self._requested.add(target_id)

        url = follow_up_url(self.thread_url, target_id)
        try:
            raw = await self.fetcher.fetch(url)
            _, forest = decode_thread(raw, url)
        except (TransportError, MalformedResponseError) as e:
            self._warn_failed(target_id, str(e))
            return None
        if not forest:
            self._warn_failed(target_id, "empty comment listing")
            return None
        return url, forest

    def _warn_failed(self, target_id: str, reason: str) -> None:
        self.stats.failed_follow_ups += 1
        self._log(f"follow-up {target_id} failed: {reason}", "warning")
