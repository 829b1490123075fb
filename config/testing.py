import os

APP_NAME = "Gym Backend (test)"
SECRET_KEY = "test-secret"

MONGO_CONFIG = {
    "uri": os.getenv("MONGO_URI", "mongodb://localhost:27017"),
    "database": os.getenv("MONGO_DB", "gym_test"),
}

JWT_ACCESS_SECRET = "test-access-secret"
JWT_REFRESH_SECRET = "test-refresh-secret"
ACCESS_TOKEN_TTL_MINUTES = 15
REFRESH_TOKEN_TTL_DAYS = 7

MAIL_DEFAULT_SENDER = "test@gym.local"
MAIL_SUPPRESS_SEND = True

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
SEED_ADMIN_EMAIL = "admin@gym.local"
SEED_ADMIN_PASSWORD = "admin123"
