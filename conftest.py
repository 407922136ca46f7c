# conftest.py
import os
import sys
import tempfile
from pathlib import Path

# Test settings must be in place before src.jangatub.core.config is imported.
os.environ["ENV"] = "test"
os.environ["ENV_FILE"] = str(Path(tempfile.gettempdir()) / "jangatub-no-env-file")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{Path(tempfile.gettempdir()) / 'jangatub_test.db'}"
os.environ["SECRET_KEY"] = "test-secret-key"
for name in ("GROQ_API_KEY", "WAVE_API_KEY", "WAVE_WEBHOOK_SECRET", "REDIS_URL", "S3_BUCKET_NAME"):
    os.environ.pop(name, None)

# Add project root to PYTHONPATH
PROJECT_ROOT = Path(__file__).resolve().parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))
