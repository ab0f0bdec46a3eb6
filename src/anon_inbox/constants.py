"""Shared constants for Anon Inbox."""

import os
from pathlib import Path


HOME_DIR = Path(os.getenv("ANON_INBOX_HOME", str(Path.home() / ".anon-inbox")))
LOG_DIR = HOME_DIR / "logs"
DB_DIR = HOME_DIR / "db"
DB_FILE = DB_DIR / "anon-inbox.db"
DATABASE_URL = os.getenv("ANON_INBOX_DATABASE_URL")
SERVER_HOST = os.getenv("ANON_INBOX_HOST", "127.0.0.1")
SERVER_PORT = int(os.getenv("ANON_INBOX_PORT", "9890"))
API_BASE = f"http://{SERVER_HOST}:{SERVER_PORT}"
PUBLIC_URL = os.getenv("ANON_INBOX_PUBLIC_URL", API_BASE)
USER_ID_ENV_VAR = "ANON_INBOX_USER_ID"
USER_ID_HEADER = "X-User-Id"
MAX_CONTENT_LENGTH = 300
USERNAME_PATTERN = r"^[a-zA-Z0-9_]{2,20}$"
