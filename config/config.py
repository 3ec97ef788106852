"""Cấu hình dùng chung, đọc từ biến môi trường (.env được nạp bởi python-dotenv)."""

import os
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

# JWT cho cookie `auth-token`
JWT_SECRET = os.getenv("JWT_SECRET", "your-secret-key-change-in-production")
AUTH_TOKEN_DAYS = int(os.getenv("AUTH_TOKEN_DAYS", "7"))

# MongoDB
MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017/thaybien")
# Optional explicit name; otherwise taken from the URI path
MONGODB_DB_NAME = os.getenv("MONGODB_DB_NAME") or None

# PDF tài liệu, phục vụ qua /api/documents/file
DOCUMENTS_DIR = Path(os.getenv("DOCUMENTS_DIR", str(REPO_ROOT / "public" / "documents")))

# Redirect tên miền gốc sang www
CANONICAL_BARE_HOST = os.getenv("CANONICAL_BARE_HOST", "phucnguyenguitar.com")
CANONICAL_BASE_URL = os.getenv("CANONICAL_BASE_URL", "https://www.phucnguyenguitar.com")

AUTH_COOKIE_SECURE = bool(int(os.getenv("AUTH_COOKIE_SECURE", "0")))

DEBUG = bool(int(os.getenv("DEBUG", "0")))
