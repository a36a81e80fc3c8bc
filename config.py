import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./app.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Tokens and sessions
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_ISSUER = data.get("JWT_ISSUER", "admin-console")
    JWT_AUDIENCE = data.get("JWT_AUDIENCE", "admin-console")
    TOKEN_TTL_DAYS = int(data.get("TOKEN_TTL_DAYS", 7))
    REMEMBER_ME_TTL_DAYS = int(data.get("REMEMBER_ME_TTL_DAYS", 30))
    AUTH_COOKIE_NAME = data.get("AUTH_COOKIE_NAME", "token")
    AUTH_COOKIE_SECURE = bool(data.get("AUTH_COOKIE_SECURE", False))
    TRUST_FORWARDED_FOR = bool(data.get("TRUST_FORWARDED_FOR", False))
    # Proxies in front of the app that append to X-Forwarded-For
    TRUSTED_PROXY_COUNT = int(data.get("TRUSTED_PROXY_COUNT", 1))

    # Admin rate limit
    ADMIN_RATE_LIMIT_MAX_ACTIONS = int(data.get("ADMIN_RATE_LIMIT_MAX_ACTIONS", 100))
    ADMIN_RATE_LIMIT_WINDOW_MINUTES = float(data.get("ADMIN_RATE_LIMIT_WINDOW_MINUTES", 5))
    RATE_LIMIT_PRUNE_PROBABILITY = float(data.get("RATE_LIMIT_PRUNE_PROBABILITY", 0.1))

    # Login attempts per client address
    LOGIN_RATE_LIMIT_MAX_ACTIONS = int(data.get("LOGIN_RATE_LIMIT_MAX_ACTIONS", 5))
    LOGIN_RATE_LIMIT_WINDOW_MINUTES = float(data.get("LOGIN_RATE_LIMIT_WINDOW_MINUTES", 15))

    # Security heuristics
    BRUTE_FORCE_THRESHOLD = int(data.get("BRUTE_FORCE_THRESHOLD", 5))
    BRUTE_FORCE_WINDOW_MINUTES = float(data.get("BRUTE_FORCE_WINDOW_MINUTES", 15))
    SUSPICIOUS_LOGIN_IP_THRESHOLD = int(data.get("SUSPICIOUS_LOGIN_IP_THRESHOLD", 3))
    SUSPICIOUS_LOGIN_WINDOW_MINUTES = float(data.get("SUSPICIOUS_LOGIN_WINDOW_MINUTES", 60))
    MULTI_SESSION_THRESHOLD = int(data.get("MULTI_SESSION_THRESHOLD", 3))

    SEED_SYSTEM_ROLES = bool(data.get("SEED_SYSTEM_ROLES", False))
