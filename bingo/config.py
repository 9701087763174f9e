from __future__ import annotations

import logging
import os
from typing import Optional


API_URL = os.getenv("BINGO_API_URL", "http://localhost:3000/api")
API_TOKEN = os.getenv("BINGO_API_TOKEN") or None
PAGE_SIZE = int(os.getenv("BINGO_PAGE_SIZE", "20"))
TIMEOUT = float(os.getenv("BINGO_TIMEOUT", "10.0"))
LOG_LEVEL = os.getenv("BINGO_LOG_LEVEL", "INFO")


# === Board limits (kept in step with the server's board config) ===

MIN_SIZE = 3
MAX_SIZE = 9
DEFAULT_SIZE = 5
MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
MAX_CELL_VALUE_LENGTH = 200

ANONYMOUS = "anonymous"
ANONYMOUS_USERNAME = "Anonymous User"


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
