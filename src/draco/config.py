import os

from dotenv import load_dotenv

from . import __version__

load_dotenv()


def _truthy(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


# Fetch every "continue this thread" / "load more comments" placeholder
FETCH_ALL = _truthy(os.getenv("DRACO_FETCH_ALL", ""))
DEBUG = _truthy(os.getenv("DRACO_DEBUG", ""))

# HTTP
USER_AGENT = os.getenv("DRACO_USER_AGENT", f"draco/{__version__}")
REQUEST_TIMEOUT = float(os.getenv("DRACO_TIMEOUT", "30"))
MIN_REQUEST_INTERVAL = float(os.getenv("DRACO_MIN_REQUEST_INTERVAL", "0"))

# Query string sent with every thread request
COMMENT_LIMIT = 500
COMMENT_SORT = "top"

# Output
WRAP_COLUMNS = int(os.getenv("DRACO_WRAP_COLUMNS", str(72 - 1)))
