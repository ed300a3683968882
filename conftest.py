# Ensures `from src.subnft...` works when tests run from the repository root
import os
import sys
import tempfile
from pathlib import Path

ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are read at import time; tests never touch the deployment database
_TEST_DB = Path(tempfile.gettempdir()) / "subnft-test.db"
os.environ.setdefault("SUBNFT_ENV_FILE", str(ROOT / "tests" / ".env.missing"))
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TEST_DB.as_posix()}")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("ADMIN_ACCOUNTS", "0xa1a1a1a1a1a1a1a1a1a1a1a1a1a1a1a1a1a1a1a1")
os.environ.setdefault("SUBNFT_POLICIES_FILE", str(ROOT / "policies.yaml"))
os.environ.setdefault("ENV", "test")
