import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./agriloop.db")

JWT_SECRET = os.environ.get("JWT_SECRET", "dev-secret-change-me")
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_DAYS = int(os.environ.get("ACCESS_TOKEN_DAYS", 7))
VERIFY_TOKEN_DAYS = int(os.environ.get("VERIFY_TOKEN_DAYS", 1))
BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", 10))

# kg CO2 avoided per kg of waste processed
EMISSION_FACTOR = float(os.environ.get("AGRILOOP_EMISSION_FACTOR", 1.5))
# kg CO2 absorbed by one tree in a year
TREES_DIVISOR = float(os.environ.get("AGRILOOP_TREES_DIVISOR", 22))

SMTP_HOST = os.environ.get("SMTP_HOST")
SMTP_PORT = int(os.environ.get("SMTP_PORT", 587))
EMAIL_USER = os.environ.get("EMAIL_USER")
EMAIL_PASS = os.environ.get("EMAIL_PASS")

APP_BASE_URL = os.environ.get("APP_BASE_URL", "http://localhost:8000")
FRONTEND_LOGIN_URL = os.environ.get("FRONTEND_LOGIN_URL", "http://localhost:5173/login")
CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]

RATE_LIMIT_MAX = int(os.environ.get("RATE_LIMIT_MAX", 6))  # max requests
RATE_LIMIT_WINDOW = int(os.environ.get("RATE_LIMIT_WINDOW", 60))  # seconds

LOG_LEVEL = os.environ.get("AGRILOOP_LOG_LEVEL", "INFO")
ERROR_LOG = os.environ.get("AGRILOOP_ERROR_LOG")
