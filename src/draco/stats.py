import time
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class CallRecord:
    url: str
    status: Optional[int]  # None when no response was received


@dataclass
class RunStats:
    """Counters for one run. Shared by the fetcher and the walker."""

    calls: List[CallRecord] = field(default_factory=list)
    comments: int = 0
    walks: int = 0
    skipped_continuations: int = 0
    skipped_load_more: int = 0
    duplicate_follow_ups: int = 0
    failed_follow_ups: int = 0
    started_at: float = field(default_factory=time.monotonic)
    finished_at: Optional[float] = None

    @property
    def http_calls(self) -> int:
        return len(self.calls)

    def record_call(self, url: str, status: Optional[int]) -> None:
        self.calls.append(CallRecord(url=url, status=status))

    def finish(self) -> None:
        self.finished_at = time.monotonic()

    @property
    def elapsed(self) -> float:
        end = self.finished_at if self.finished_at is not None else time.monotonic()
        return end - self.started_at

    def summary_lines(self) -> List[str]:
        lines = [
            f"http calls = {self.http_calls}",
            f"comments = {self.comments}",
            f"walks = {self.walks}",
            f"skipped continuations = {self.skipped_continuations}",
            f"skipped load-more = {self.skipped_load_more}",
            f"duplicate follow-ups = {self.duplicate_follow_ups}",
            f"failed follow-ups = {self.failed_follow_ups}",
            f"elapsed = {self.elapsed:.2f}s",
        ]
        for c in self.calls:
            lines.append(f"  {c.status if c.status is not None else '---'} {c.url}")
        return lines
