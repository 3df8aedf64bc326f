"""Application configuration."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env so DATABASE_URL, SUPABASE_* and friends are available
load_dotenv()

# Storage: "local" or "supabase"
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local")

# Local storage path (used when STORAGE_BACKEND=local)
LOCAL_STORAGE_PATH = Path(os.getenv("LOCAL_STORAGE_PATH", "uploads")).resolve()
LOCAL_STORAGE_PATH.mkdir(parents=True, exist_ok=True)

# Base URL for serving local files (e.g. http://localhost:8000/files)
LOCAL_FILES_BASE_URL = os.getenv("LOCAL_FILES_BASE_URL", "").rstrip("/")

# Supabase (used when STORAGE_BACKEND=supabase)
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
SUPABASE_BUCKET = os.getenv("SUPABASE_UPLOAD_BUCKET", "filelink_uploads")

# Public base for shareable links; falls back to the request's own base URL
PORT = int(os.getenv("PORT", "8000"))
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "").rstrip("/")

# Retrieval: "local-stream", "redirect" or "proxy-stream"
RETRIEVAL_MODE = os.getenv(
    "RETRIEVAL_MODE",
    "local-stream" if STORAGE_BACKEND == "local" else "redirect",
)
REDIRECT_AS_ATTACHMENT = os.getenv("REDIRECT_AS_ATTACHMENT", "true").lower() in ("true", "1", "yes")
PROXY_TIMEOUT_SECONDS = float(os.getenv("PROXY_TIMEOUT_SECONDS", "15"))

# Uploads
MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", 100 * 1024 * 1024))  # 100 MB
SHORT_ID_LENGTH = 8
SHORT_ID_MAX_ATTEMPTS = int(os.getenv("SHORT_ID_MAX_ATTEMPTS", "3"))

# Comma-separated list, "*" allows any origin
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
