import os
import tempfile

# Settings are read at import time; point them at throwaway resources first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STORAGE_BACKEND", "local")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="image-uploads-"))
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
