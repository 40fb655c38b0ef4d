import os

from config.config import *  # noqa: F401,F403
from config.config import db_config_from_env, env_bool

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config_from_env()

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_bool("AUTO_INIT_DB", "1")
