from typing import Optional


class DracoError(Exception):
    """Base class for everything draco raises on purpose."""


class TransportError(DracoError):
    def __init__(self, url: str, status: Optional[int], reason: str):
        self.url = url
        self.status = status
        self.reason = reason
        if status is None:
            super().__init__(f"request failed - {reason}: {url}")
        else:
            super().__init__(f"unexpected response - {status}: {reason}: {url}")


class MalformedResponseError(DracoError):
    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"malformed response - {reason}: {url}")


class ArgumentError(DracoError):
    pass
