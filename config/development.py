import os

APP_NAME = os.getenv("APP_NAME", "Gym Backend")
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

MONGO_CONFIG = {
    "uri": os.getenv("MONGO_URI", "mongodb://localhost:27017"),
    "database": os.getenv("MONGO_DB", "gym_dev"),
}

JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", "dev-access-secret")
JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "dev-refresh-secret")
ACCESS_TOKEN_TTL_MINUTES = int(os.getenv("ACCESS_TOKEN_TTL_MINUTES", "15"))
REFRESH_TOKEN_TTL_DAYS = int(os.getenv("REFRESH_TOKEN_TTL_DAYS", "7"))

MAIL_SERVER = os.getenv("MAIL_SERVER", "localhost")
MAIL_PORT = int(os.getenv("MAIL_PORT", "1025"))
MAIL_USE_TLS = bool(int(os.getenv("MAIL_USE_TLS", "0")))
MAIL_USE_SSL = bool(int(os.getenv("MAIL_USE_SSL", "0")))
MAIL_USERNAME = os.getenv("MAIL_USERNAME")
MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "gym@localhost")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Create indexes on startup (idempotent)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed an admin account and demo packages
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
SEED_ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@gym.local")
SEED_ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin123")
