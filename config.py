import os

# Database
MONGODB_URI = os.getenv("MONGODB_URI") or os.getenv("DATABASE_URL")
MONGODB_DB = os.getenv("MONGODB_DB") or os.getenv("DATABASE_NAME") or "shivay-studio"
MONGODB_TIMEOUT_MS = int(os.getenv("MONGODB_TIMEOUT_MS", "5000"))

# Auth
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_DAYS = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7"))
COOKIE_NAME = "admin_token"
IS_PRODUCTION = os.getenv("APP_ENV", "development") == "production"

# First admin, used by seed.py
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@shivay.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

# CORS for the public portfolio site
DEFAULT_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://localhost:8080",
    "https://shivay-video.vercel.app",
]
ALLOWED_ORIGINS = [
    o.strip().rstrip("/")
    for o in os.getenv("ALLOWED_ORIGINS", ",".join(DEFAULT_ORIGINS)).split(",")
    if o.strip()
]

# WhatsApp widget
WHATSAPP_NUMBER = os.getenv("WHATSAPP_NUMBER", "919106572374")
WHATSAPP_MESSAGE = os.getenv("WHATSAPP_MESSAGE", "Hi! I'm interested in your photography services.")

PORT = int(os.getenv("PORT", "8000"))
