import os

SECRET_KEY = os.environ.get("SECRET_KEY", "TASKBOARD_DEV_SECRET")
REFRESH_SECRET_KEY = os.environ.get("REFRESH_SECRET_KEY", "TASKBOARD_DEV_REFRESH_SECRET")
ALGORITHM = os.environ.get("ALGORITHM", "HS256")

ACCESS_TOKEN_EXPIRE_MINUTES = float(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 15))
REFRESH_TOKEN_EXPIRE_DAYS = float(os.environ.get("REFRESH_TOKEN_EXPIRE_DAYS", 7))
RESET_TOKEN_EXPIRE_MINUTES = float(os.environ.get("RESET_TOKEN_EXPIRE_MINUTES", 60))

BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", 10))

# Default to local SQLite for dev/tests; override via env in Docker/Prod
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./taskboard.db")

# Email is disabled (logged only) when no API key is configured
RESEND_API_KEY = os.environ.get("RESEND_API_KEY")
RESEND_API_URL = os.environ.get("RESEND_API_URL", "https://api.resend.com/emails")
EMAIL_FROM = os.environ.get("EMAIL_FROM", "Taskboard <onboarding@resend.dev>")
APP_URL = os.environ.get("APP_URL", "http://localhost:5173")

# Re-derive comment authorization from the task's workspace instead of
# trusting the role carried by the request context.
STRICT_COMMENT_MEMBERSHIP = os.environ.get("STRICT_COMMENT_MEMBERSHIP", "false").lower() in ("1", "true", "yes")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FILE = os.environ.get("LOG_FILE")
