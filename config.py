"""
Application settings.

Every environment variable the API reads is collected here so that the rest
of the code imports plain module constants.
"""
import os

from dotenv import load_dotenv

load_dotenv()

# Database
DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "writory")

# Tokens
SECRET_KEY = os.getenv("JWT_ACCESS_SECRET", "dev-secret-key-change-me")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))
PASSWORD_RESET_EXPIRE_MINUTES = 60

# Client / CORS
CLIENT_URL = os.getenv("CLIENT_URL", "http://localhost:5173")
CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]
if CLIENT_URL not in CORS_ORIGINS:
    CORS_ORIGINS.append(CLIENT_URL)

# Uploads
UPLOAD_PATH = os.getenv("UPLOAD_PATH", "uploads")
MAX_FILE_SIZE = int(os.getenv("MAX_FILE_SIZE", str(5 * 1024 * 1024)))
ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}

# Email
EMAIL_SERVICE = os.getenv("EMAIL_SERVICE", "console")

# Rate limiting on auth endpoints (0 disables)
AUTH_RATE_LIMIT = int(os.getenv("AUTH_RATE_LIMIT", "5"))
AUTH_RATE_WINDOW_SECONDS = int(os.getenv("AUTH_RATE_WINDOW_SECONDS", str(15 * 60)))

# Pagination
POSTS_PER_PAGE = 10
COMMENTS_PER_PAGE = 20
MAX_PAGE_SIZE = 50

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

PORT = int(os.getenv("PORT", "5000"))
