import argparse
import asyncio
import sys
from typing import List, Optional, TextIO

from . import __version__
from .config import DEBUG, FETCH_ALL
from .errors import ArgumentError, DracoError
from .fetcher import ThreadFetcher
from .org import OrgRenderer
from .stats import RunStats
from .walker import ThreadWalker


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="draco",
        description="Convert a Reddit thread into an Org document on stdout.",
    )
    p.add_argument("url", nargs="?", default="", help="Thread URL, without the trailing .json.")
    p.add_argument("-v", "--version", action="version", version=f"draco v{__version__}")
    p.add_argument("-d", "--debug", action="store_true", default=DEBUG, help="Print diagnostics to stderr.")
    p.add_argument(
        "-a",
        "--fetch-all",
        action="store_true",
        default=FETCH_ALL,
        help="Resolve 'continue this thread' and 'load more comments' links (also DRACO_FETCH_ALL=1).",
    )
    return p.parse_args(argv)


def make_logger(debug: bool, err: TextIO):
    def log(msg: str, level: str = "info"):
        if level not in ("warning", "error") and not debug:
            return
        prefix = {
            "debug": "[.]",
            "info": "[*]",
            "success": "[+]",
            "warning": "[!]",
            "error": "[x]",
        }.get(level, "[*]")
        print(f"{prefix} {msg}", file=err)

    return log


async def archive(
    url: str,
    out: TextIO,
    *,
    fetch_all: bool = FETCH_ALL,
    log_callback=None,
    stats: Optional[RunStats] = None,
    transport=None,
) -> RunStats:
    """Fetch ``url`` and write it to ``out``. Root fetch errors propagate."""
    if not url:
        raise ArgumentError("usage: draco <url>")

    stats = stats if stats is not None else RunStats()
    renderer = OrgRenderer(out)
    async with ThreadFetcher(stats, log_callback=log_callback, transport=transport) as fetcher:
        walker = ThreadWalker(fetcher, url, fetch_all=fetch_all, log_callback=log_callback)
        post, forest = await walker.fetch_thread()
        renderer.write_post(post)
        async for item in walker.walk(forest):
            renderer.write_comment(item)
    stats.finish()
    return stats


def main(argv: Optional[List[str]] = None, *, transport=None) -> int:
    args = parse_args(argv)
    log = make_logger(args.debug, sys.stderr)

    try:
        stats = asyncio.run(
            archive(args.url, sys.stdout, fetch_all=args.fetch_all, log_callback=log, transport=transport)
        )
    except DracoError as e:
        print(f"draco: {e}", file=sys.stderr)
        return 1

    log("done", "success")
    for line in stats.summary_lines():
        log(line)
    return 0


def run():
    # Org output is UTF-8 no matter what the locale says.
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8")
    sys.exit(main())


if __name__ == "__main__":
    run()
