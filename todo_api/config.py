import os

from dotenv import load_dotenv

load_dotenv()

APP_ENV = os.environ.get("APP_ENV", "development")

SECRET_KEY = os.environ.get("SECRET_KEY", "dev_secret_change_me")
ALGORITHM = os.environ.get("ALGORITHM", "HS256")
# 7 days
ACCESS_TOKEN_EXPIRE_MINUTES = float(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7))

# Default to local SQLite for dev/tests; override via env in Docker/Prod
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./todos.db")

DEV_USER_EMAIL = os.environ.get("DEV_USER_EMAIL", "demo@example.com")
DEV_USER_PASS = os.environ.get("DEV_USER_PASS", "demo1234")

CORS_ORIGINS = [o for o in ("http://localhost:5173", os.environ.get("FRONTEND_URL")) if o]

# Mail transport. RESEND_API_KEY wins, then an explicit SMTP_HOST, then Gmail credentials.
RESEND_API_KEY = os.environ.get("RESEND_API_KEY")
SMTP_HOST = os.environ.get("SMTP_HOST")
SMTP_PORT = int(os.environ.get("SMTP_PORT", 587))
SMTP_USER = os.environ.get("SMTP_USER")
SMTP_PASSWORD = os.environ.get("SMTP_PASSWORD")
SMTP_SSL = os.environ.get("SMTP_SSL", "0") == "1"
MAIL_USER = os.environ.get("MAIL_USER")
MAIL_PASS = os.environ.get("MAIL_PASS")
MAIL_FROM = os.environ.get("MAIL_FROM") or MAIL_USER or "reminder@resend.dev"

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FILE = os.environ.get("LOG_FILE")
