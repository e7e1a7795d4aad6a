from dotenv import load_dotenv
import os

load_dotenv()  # Loads variables from .env

DATABASE_URL = os.getenv("DATABASE_URL")
SECRET_KEY = os.getenv("SECRET_KEY")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", 12))
ENVIRONMENT = os.getenv("ENVIRONMENT", "development").strip().lower()
AUTH_COOKIE_NAME = os.getenv("AUTH_COOKIE_NAME", "token")
PORT = int(os.getenv("PORT", 5000))
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
CORS_ORIGIN_REGEX = os.getenv("CORS_ORIGIN_REGEX")

COOKIE_SECURE = ENVIRONMENT == "production"


def parse_cors_origins(value: str):
    if not value:
        return []
    if value.strip() == "*":
        return ["*"]
    return [origin.strip() for origin in value.split(",") if origin.strip()]
