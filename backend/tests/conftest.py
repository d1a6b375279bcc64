import os
import tempfile

# Settings are read at import time; required values must exist before any
# yda_portal module is imported.
os.environ.setdefault("YDA_PORTAL_APP_SECRET_KEY", "test-secret-key-that-is-long-enough-0123456789")
os.environ.setdefault("YDA_PORTAL_POSTGRES_PASSWORD", "test-password")
os.environ.setdefault("YDA_PORTAL_APP_ENV", "test")
os.environ.setdefault("YDA_PORTAL_REDIS_HOST", "127.0.0.1")
os.environ.setdefault("YDA_PORTAL_STORAGE_ROOT", tempfile.mkdtemp(prefix="yda-storage-"))
os.environ.setdefault("YDA_PORTAL_SITE_BASE_URL", "https://yda.test")
